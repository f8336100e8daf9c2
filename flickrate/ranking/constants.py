"""Constants for photo ranking."""

SECONDS_PER_DAY = 60 * 60 * 24

# Default selection criteria
DEFAULT_MIN_DAYS = 60
DEFAULT_MIN_VIEWS = 1000
DEFAULT_TOP = 10

# Log component name
COMPONENT_RANKING = "ranking"
