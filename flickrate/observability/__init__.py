"""Structured logging and log redaction."""

from flickrate.observability.logging import (
    bind_run_context,
    clear_run_context,
    configure_logging,
)
from flickrate.observability.redact import (
    REDACTED_VALUE,
    SENSITIVE_PARAMS,
    is_sensitive_param,
    redact_url,
)


__all__ = [
    "REDACTED_VALUE",
    "SENSITIVE_PARAMS",
    "bind_run_context",
    "clear_run_context",
    "configure_logging",
    "is_sensitive_param",
    "redact_url",
]
