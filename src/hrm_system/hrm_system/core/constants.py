"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_HISTORY_LIMIT = 31
DEFAULT_LATE_GRACE_MINUTES = 15
DEFAULT_REPORT_DAYS = 7
DEFAULT_FULL_DAY_HOURS = 8
DEFAULT_HALF_DAY_HOURS = 4
FINALIZATION_GRACE_MINUTES = 15

# A shift starting at or after this hour is a night shift; a clock-in before
# NIGHT_SHIFT_EARLY_HOUR belongs to the shift that started the previous day.
NIGHT_SHIFT_START_HOUR = 18
NIGHT_SHIFT_EARLY_HOUR = 6

DEFAULT_WEEKEND_DAYS = (5, 6)  # Saturday, Sunday (date.weekday())

MIN_PASSWORD_LENGTH = 8
DEFAULT_PAGE_LIMIT = 200
