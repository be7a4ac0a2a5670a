"""
circlecal: recurring circle meetings from free-text leader schedules.
"""
