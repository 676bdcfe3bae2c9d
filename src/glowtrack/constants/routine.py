"""
Centralized routine definitions shared by models, services and request schemas.
Frequency and weekday values match what is persisted on routine products.
"""

# Suggested step names offered when building a routine
ROUTINE_STEPS = [
    "Cleanse",
    "Treat",
    "Protect",
    "Moisturise",
    "Eye cream",
    "Toner",
    "Essence",
    "Pimple patch",
    "Lip care",
]

DAILY = "daily"

# Frequency policies (value, label)
FREQUENCIES = [
    {"value": DAILY, "label": "Daily"},
    {"value": "1x per week", "label": "1x per week"},
    {"value": "2x per week", "label": "2x per week"},
    {"value": "3x per week", "label": "3x per week"},
    {"value": "4x per week", "label": "4x per week"},
    {"value": "5x per week", "label": "5x per week"},
    {"value": "6x per week", "label": "6x per week"},
    {"value": "specific_days", "label": "Specific days"},
]

FREQUENCY_VALUES = frozenset(item["value"] for item in FREQUENCIES)

DAYS_OF_WEEK = [
    {"value": "Monday", "label": "Mon"},
    {"value": "Tuesday", "label": "Tue"},
    {"value": "Wednesday", "label": "Wed"},
    {"value": "Thursday", "label": "Thu"},
    {"value": "Friday", "label": "Fri"},
    {"value": "Saturday", "label": "Sat"},
    {"value": "Sunday", "label": "Sun"},
]

# Indexed by date.weekday() (Monday == 0)
WEEKDAY_NAMES = [item["value"] for item in DAYS_OF_WEEK]

MORNING = "morning"
EVENING = "evening"
TIMES_OF_DAY = (MORNING, EVENING)

PENDING = "pending"
ON_TIME = "on-time"
LATE = "late"
MISSED = "missed"
COMPLETED_STATUSES = frozenset({ON_TIME, LATE})

ROUTINE_DRAFT = "draft"
ROUTINE_PUBLISHED = "published"


def frequency_label(value: str) -> str:
    """Return the display label for a frequency value, or the value itself."""

    for item in FREQUENCIES:
        if item["value"] == value:
            return item["label"]
    return value


def is_completed_status(status: str) -> bool:
    return status in COMPLETED_STATUSES
