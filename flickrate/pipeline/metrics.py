"""Metrics collection for the detail fetch pipeline."""

from dataclasses import dataclass, field
from threading import Lock
from typing import ClassVar

from flickrate.errors import ErrorClass


@dataclass
class PipelineMetrics:
    """Metrics for detail fetch runs.

    Singleton class tracking cache hits, network fetches and failures.
    Recorded only from the collector thread, but locked anyway so the
    counters can be read from anywhere.
    """

    cache_hits_total: int = 0
    fetched_total: int = 0
    failures_total: dict[str, int] = field(default_factory=dict)
    runs_total: int = 0
    duration_ms_total: float = 0.0

    _lock: Lock = field(default_factory=Lock, repr=False, compare=False)

    _instance: ClassVar["PipelineMetrics | None"] = None
    _instance_lock: ClassVar[Lock] = Lock()

    @classmethod
    def get_instance(cls) -> "PipelineMetrics":
        """Get singleton metrics instance."""
        if cls._instance is None:
            with cls._instance_lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset metrics (primarily for testing)."""
        with cls._instance_lock:
            cls._instance = None

    def record_cache_hit(self) -> None:
        """Record a photo served from the cache."""
        with self._lock:
            self.cache_hits_total += 1

    def record_fetched(self) -> None:
        """Record a photo fetched from the network."""
        with self._lock:
            self.fetched_total += 1

    def record_failure(self, error_class: ErrorClass) -> None:
        """Record a failed photo.

        Args:
            error_class: Classification of the failure.
        """
        key = error_class.value
        with self._lock:
            self.failures_total[key] = self.failures_total.get(key, 0) + 1

    def record_run(self, duration_ms: float) -> None:
        """Record a completed run.

        Args:
            duration_ms: Duration in milliseconds.
        """
        with self._lock:
            self.runs_total += 1
            self.duration_ms_total += duration_ms

    def to_dict(self) -> dict[str, int | float | dict[str, int]]:
        """Convert metrics to dictionary.

        Returns:
            Dictionary of metric name to value.
        """
        with self._lock:
            return {
                "pipeline_cache_hits_total": self.cache_hits_total,
                "pipeline_fetched_total": self.fetched_total,
                "pipeline_failures_total": dict(self.failures_total),
                "pipeline_runs_total": self.runs_total,
                "pipeline_duration_ms_total": round(self.duration_ms_total, 2),
            }
