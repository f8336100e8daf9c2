"""Metrics collection for REST API calls."""

from collections import Counter
from dataclasses import dataclass, field
from threading import Lock

from flickrate.errors import ErrorClass


# Module-level singleton state
_metrics_instance: "ApiMetrics | None" = None
_metrics_lock: Lock = Lock()


@dataclass
class ApiMetrics:
    """Thread-safe metrics for REST API calls.

    Workers of the detail pipeline record into the same instance concurrently.
    Use get_instance() for singleton access.
    """

    _lock: Lock = field(default_factory=Lock, repr=False, compare=False)

    # Calls per API method
    calls_by_method: Counter[str] = field(default_factory=Counter)

    # Failures per error class
    failures_by_class: Counter[str] = field(default_factory=Counter)

    # Cumulative call duration in milliseconds
    duration_ms_total: float = 0.0

    @classmethod
    def get_instance(cls) -> "ApiMetrics":
        """Get the singleton instance (thread-safe).

        Returns:
            The shared ApiMetrics instance.
        """
        global _metrics_instance  # noqa: PLW0603
        if _metrics_instance is None:
            with _metrics_lock:
                if _metrics_instance is None:
                    _metrics_instance = cls()
        return _metrics_instance

    @classmethod
    def reset(cls) -> None:
        """Reset the singleton instance (for testing)."""
        global _metrics_instance  # noqa: PLW0603
        with _metrics_lock:
            _metrics_instance = None

    def record_call(self, api_method: str, duration_ms: float) -> None:
        """Record a completed call.

        Args:
            api_method: Flickr API method name.
            duration_ms: Duration in milliseconds.
        """
        with self._lock:
            self.calls_by_method[api_method] += 1
            self.duration_ms_total += duration_ms

    def record_failure(self, error_class: ErrorClass) -> None:
        """Record a failed call.

        Args:
            error_class: Classification of the failure.
        """
        with self._lock:
            self.failures_by_class[error_class.value] += 1

    @property
    def total_calls(self) -> int:
        """Get the total number of calls."""
        with self._lock:
            return sum(self.calls_by_method.values())

    def to_dict(self) -> dict[str, float | dict[str, int]]:
        """Convert metrics to dictionary.

        Returns:
            Dictionary of metric name to value.
        """
        with self._lock:
            return {
                "api_calls_by_method": dict(self.calls_by_method),
                "api_failures_by_class": dict(self.failures_by_class),
                "api_duration_ms_total": round(self.duration_ms_total, 2),
            }
