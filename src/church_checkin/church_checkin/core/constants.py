"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

LOOKUP_DEBOUNCE_SECONDS = 0.5
LOOKUP_MIN_NAME_LENGTH = 2
ROSTER_REFRESH_SECONDS = 30.0
ROSTER_PAGE_SIZE = 6
NOTIFICATION_SECONDS = 4.0

DEFAULT_MINISTRY_PAGE_SIZE = 50
MAX_MINISTRY_PAGE_SIZE = 100

UNKNOWN_PERSON_LABEL = "Unknown"

EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"

DEFAULT_MINISTRIES = (
    ("default-newcomer", "New Comer"),
    ("default-worship", "Worship Ministry"),
    ("default-youth", "Youth Ministry"),
    ("default-choir", "Choir Ministry"),
    ("default-children", "Children Ministry"),
    ("default-mens", "Men's Fellowship"),
    ("default-womens", "Women's Ministry"),
    ("default-outreach", "Outreach & Evangelism"),
    ("default-media", "Media & Tech Ministry"),
    ("default-ushers", "Ushers Ministry"),
    ("default-prayer", "Prayer Warriors"),
)
