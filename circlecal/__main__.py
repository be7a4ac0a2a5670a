"""
Package entry point.

Allows running the application via:

    python -m circlecal

This simply forwards execution to circlecal.cli.main().
"""

from circlecal.cli import main

if __name__ == "__main__":
    main()
