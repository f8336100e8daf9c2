"""Constants for the photo detail cache."""

from datetime import timedelta

# Entries older than this are re-fetched
DEFAULT_TTL = timedelta(hours=1)

# gzip level for the persisted blob
COMPRESSION_LEVEL = 9

# Log component name
COMPONENT_CACHE = "cache"
