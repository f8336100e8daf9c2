"""Constants for the table renderer."""

HEADERS = ("Date", "Views", "Faves", "Rate", "Title", "URL")

# Numeric columns (Views, Faves, Rate)
RIGHT_ALIGNED = frozenset({1, 2, 3})

COLUMN_GAP = "  "
DATE_FORMAT = "%Y-%m-%d"

# Title contraction
TITLE_WIDTH = 40
TITLE_SUFFIX = 8
ELLIPSIS = "…"
