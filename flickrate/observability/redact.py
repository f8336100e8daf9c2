"""URL redaction utilities for logging."""

from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit


# Query parameters that must never appear in logs
SENSITIVE_PARAMS = frozenset(
    {
        "api_key",
        "oauth_consumer_key",
        "oauth_signature",
        "oauth_token",
        "oauth_verifier",
    }
)

REDACTED_VALUE = "[REDACTED]"


def is_sensitive_param(name: str) -> bool:
    """Check if a query parameter name is sensitive.

    Args:
        name: The parameter name to check.

    Returns:
        True if the parameter value should be redacted.
    """
    return name.lower() in SENSITIVE_PARAMS


def redact_url(url: str) -> str:
    """Redact credentials from a URL's query string.

    Args:
        url: URL that may carry OAuth or API key parameters.

    Returns:
        URL with sensitive query values replaced by [REDACTED].
    """
    parts = urlsplit(url)
    if not parts.query:
        return url

    pairs = [
        (key, REDACTED_VALUE if is_sensitive_param(key) else value)
        for key, value in parse_qsl(parts.query, keep_blank_values=True)
    ]
    return urlunsplit(parts._replace(query=urlencode(pairs, safe="[]")))
