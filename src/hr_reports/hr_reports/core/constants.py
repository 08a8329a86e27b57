"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

STANDARD_WORK_HOURS = 8.0
HALF_DAY_WEIGHT = 0.5
DISPLAY_DECIMALS = 2

UNKNOWN_NAME = "Unknown"
MISSING_CODE = "N/A"
UNASSIGNED_KEY = "unassigned"
UNASSIGNED_LABEL = "Unassigned"
UNKNOWN_KEY = "unknown"
NOT_SPECIFIED = "Not Specified"

DEFAULT_READ_WORKERS = 4
