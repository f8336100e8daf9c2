"""Data models for the detail fetch pipeline."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from flickrate.api.models import PhotoDetail, PhotoRef
from flickrate.cache.models import CacheEntry
from flickrate.errors import ErrorClass, FlickrateError, PartialFetchError


class FetchErrorRecord(BaseModel):
    """Serializable per-photo failure."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    photo_id: str = Field(description="Photo identifier")
    error_class: ErrorClass = Field(description="Error classification")
    message: Annotated[str, Field(min_length=1, description="Error message")]

    @classmethod
    def from_exception(cls, photo_id: str, error: Exception) -> "FetchErrorRecord":
        """Create a record from an exception.

        Args:
            photo_id: Photo the job was for.
            error: The exception raised by the job.

        Returns:
            FetchErrorRecord instance.
        """
        if isinstance(error, FlickrateError):
            error_class = error.error_class
            message = error.message
        else:
            error_class = ErrorClass.UNKNOWN
            message = f"{type(error).__name__}: {error}"
        return cls(
            photo_id=photo_id,
            error_class=error_class,
            message=message or type(error).__name__,
        )


@dataclass(frozen=True)
class FetchJob:
    """One photo to fetch from the network."""

    ref: PhotoRef

    @property
    def photo_id(self) -> str:
        """Get the photo identifier."""
        return self.ref.id


@dataclass(frozen=True)
class FetchResult:
    """Outcome for one photo: a complete entry or an error, never both."""

    photo_id: str
    entry: CacheEntry | None = None
    error: FetchErrorRecord | None = None
    from_cache: bool = False

    @property
    def success(self) -> bool:
        """Check if the photo's detail is available."""
        return self.entry is not None

    @classmethod
    def cached(cls, entry: CacheEntry) -> "FetchResult":
        """Create a result served from the cache."""
        return cls(photo_id=entry.photo_id, entry=entry, from_cache=True)

    @classmethod
    def fetched(cls, entry: CacheEntry) -> "FetchResult":
        """Create a result fetched from the network."""
        return cls(photo_id=entry.photo_id, entry=entry)

    @classmethod
    def failed(cls, photo_id: str, error: FetchErrorRecord) -> "FetchResult":
        """Create a failed result."""
        return cls(photo_id=photo_id, error=error)


@dataclass
class PipelineResult:
    """Result of one pipeline run.

    ``results`` holds exactly one entry per requested photo id.
    """

    run_id: str
    started_at: datetime
    finished_at: datetime
    results: dict[str, FetchResult] = field(default_factory=dict)
    cache_flushed: bool = False

    @property
    def details(self) -> dict[str, PhotoDetail]:
        """Get detail records of every successful photo."""
        return {
            photo_id: result.entry.detail
            for photo_id, result in self.results.items()
            if result.entry is not None
        }

    @property
    def failures(self) -> dict[str, FetchErrorRecord]:
        """Get the error of every failed photo."""
        return {
            photo_id: result.error
            for photo_id, result in self.results.items()
            if result.error is not None
        }

    @property
    def cache_hits(self) -> int:
        """Get the number of photos served from the cache."""
        return sum(1 for r in self.results.values() if r.from_cache)

    @property
    def fetched(self) -> int:
        """Get the number of photos fetched from the network."""
        return sum(1 for r in self.results.values() if r.success and not r.from_cache)

    @property
    def duration_ms(self) -> float:
        """Get total duration in milliseconds."""
        return (self.finished_at - self.started_at).total_seconds() * 1000

    def raise_for_failures(self) -> None:
        """Raise if any photo failed.

        Raises:
            PartialFetchError: Listing the failed photo ids.
        """
        failures = self.failures
        if failures:
            raise PartialFetchError(list(failures), total=len(self.results))
