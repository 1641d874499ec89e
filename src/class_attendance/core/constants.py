"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

SESSION_NAME_SEPARATOR = " – "
MISSING_COURSE_NAME = "No course"
