"""Error types shared across flickrate."""

from enum import Enum


class ErrorClass(str, Enum):
    """Classification of flickrate errors.

    - ENCODING: Signing input could not be encoded
    - NETWORK: Transport failure or timeout
    - PROTOCOL: Remote side reported failure or replied with something unexpected
    - TIMEOUT: Verifier never arrived
    - PARTIAL_FETCH: Some photo details could not be fetched
    - BROWSER: No browser could be launched
    - CONFIG: Persisted configuration is unreadable or invalid
    - UNKNOWN: Unclassified error
    """

    ENCODING = "ENCODING"
    NETWORK = "NETWORK"
    PROTOCOL = "PROTOCOL"
    TIMEOUT = "TIMEOUT"
    PARTIAL_FETCH = "PARTIAL_FETCH"
    BROWSER = "BROWSER"
    CONFIG = "CONFIG"
    UNKNOWN = "UNKNOWN"


class FlickrateError(Exception):
    """Base exception for flickrate errors.

    Provides structured error information for logging and reporting.
    """

    error_class: ErrorClass = ErrorClass.PROTOCOL

    def __init__(
        self,
        message: str,
        details: dict[str, str | int | bool | None] | None = None,
    ) -> None:
        """Initialize the error.

        Args:
            message: Human-readable error message.
            details: Additional structured error details.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(
        self,
    ) -> dict[str, str | dict[str, str | int | bool | None]]:
        """Convert error to dictionary for logging.

        Returns:
            Dictionary representation of the error.
        """
        return {
            "error_class": self.error_class.value,
            "message": self.message,
            "details": self.details,
        }


class EncodingError(FlickrateError):
    """Signing input could not be encoded."""

    error_class = ErrorClass.ENCODING


class NetworkError(FlickrateError):
    """Transport-level failure talking to the provider."""

    error_class = ErrorClass.NETWORK


class ProtocolError(FlickrateError):
    """The provider answered, but not with a success.

    Attributes:
        status_code: HTTP status code, when one was received.
        error_code: Provider error code from a ``stat="fail"`` body.
    """

    error_class = ErrorClass.PROTOCOL

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        error_code: str | None = None,
    ) -> None:
        """Initialize the protocol error.

        Args:
            message: Human-readable error message.
            status_code: HTTP status code if available.
            error_code: Provider error code if available.
        """
        details: dict[str, str | int | bool | None] = {}
        if status_code is not None:
            details["status_code"] = status_code
        if error_code is not None:
            details["error_code"] = error_code
        super().__init__(message, details)
        self.status_code = status_code
        self.error_code = error_code


class VerifierTimeoutError(FlickrateError, TimeoutError):
    """The authorization redirect never reached the callback listener."""

    error_class = ErrorClass.TIMEOUT


class PartialFetchError(FlickrateError):
    """One or more photo details failed while others succeeded."""

    error_class = ErrorClass.PARTIAL_FETCH

    def __init__(self, failed_ids: list[str], total: int) -> None:
        """Initialize the partial fetch error.

        Args:
            failed_ids: Identifiers that could not be fetched.
            total: Number of identifiers requested.
        """
        self.failed_ids = sorted(failed_ids)
        self.total = total
        super().__init__(
            f"{len(self.failed_ids)} of {total} photo details could not be fetched",
            {"failed_count": len(self.failed_ids), "total": total},
        )


class BrowserLaunchError(FlickrateError):
    """No browser accepted the URL."""

    error_class = ErrorClass.BROWSER


class ConfigError(FlickrateError):
    """Persisted configuration could not be read or validated."""

    error_class = ErrorClass.CONFIG
