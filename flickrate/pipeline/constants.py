"""Constants for the detail fetch pipeline."""

# Default number of parallel workers
DEFAULT_CONCURRENCY = 20

# Worker thread name prefix
WORKER_THREAD_PREFIX = "detail-fetch"

# Log component name
COMPONENT_PIPELINE = "pipeline"
