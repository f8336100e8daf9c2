"""Constants for configuration handling."""

# Default locations, relative to the user's home directory
DEFAULT_CONFIG_FILE = ".flickrate"
DEFAULT_CACHE_FILE = ".flickrate_cache"

# Environment variable prefix for process settings
ENV_PREFIX = "FLICKRATE_"

# Persisted configuration is readable by the owner only
CONFIG_FILE_MODE = 0o600

# Log component name
COMPONENT_CONFIG = "config"
