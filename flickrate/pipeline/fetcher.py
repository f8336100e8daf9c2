"""Bounded-concurrency fetch of photo detail records.

Fresh cache entries are served directly; every other photo becomes exactly
one job on a fixed-size thread pool. Workers only perform the network call
and return a FetchResult. The calling thread is the single collector: it
consumes every result, records it, and is the only writer to the cache.
The pool's context exit is the join barrier; nothing is returned before
every job has finished.
"""

import time
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import UTC, datetime
from typing import Protocol

import structlog

from flickrate.api.models import PhotoDetail, PhotoRef
from flickrate.cache.models import CacheEntry
from flickrate.cache.store import PhotoCache
from flickrate.errors import FlickrateError, ProtocolError
from flickrate.pipeline.constants import (
    COMPONENT_PIPELINE,
    DEFAULT_CONCURRENCY,
    WORKER_THREAD_PREFIX,
)
from flickrate.pipeline.metrics import PipelineMetrics
from flickrate.pipeline.models import (
    FetchErrorRecord,
    FetchJob,
    FetchResult,
    PipelineResult,
)


logger = structlog.get_logger()


class DetailSource(Protocol):
    """Protocol for whatever fetches one detail record.

    Allows dependency injection of the API client for testing.
    """

    def get_detail(self, ref: PhotoRef) -> PhotoDetail:
        """Fetch the detail record of one photo.

        Args:
            ref: Photo reference.

        Returns:
            Complete detail record.
        """
        ...


def _utc_now() -> datetime:
    return datetime.now(UTC)


def _as_ref(photo: PhotoRef | str) -> PhotoRef:
    return photo if isinstance(photo, PhotoRef) else PhotoRef(id=photo)


class DetailFetchPipeline:
    """Merges the photo cache with parallel network fetches.

    Provides:
    - At-most-once fetch per photo id per run
    - Failure isolation (one photo failing doesn't stop others)
    - Single-writer cache updates from the collector thread
    - One cache load at start and at most one flush at the end
    """

    def __init__(
        self,
        source: DetailSource,
        cache: PhotoCache,
        concurrency: int = DEFAULT_CONCURRENCY,
        clock: Callable[[], datetime] = _utc_now,
        run_id: str = "",
    ) -> None:
        """Initialize the pipeline.

        Args:
            source: Fetches one detail record (usually FlickrClient).
            cache: Photo cache to consult and update.
            concurrency: Number of worker threads (positive).
            clock: Source of timezone-aware "now".
            run_id: Run identifier for logging.

        Raises:
            ValueError: If concurrency is not positive.
        """
        if concurrency < 1:
            msg = f"concurrency must be a positive integer, got {concurrency}"
            raise ValueError(msg)

        self._source = source
        self._cache = cache
        self._concurrency = concurrency
        self._clock = clock
        self._run_id = run_id
        self._metrics = PipelineMetrics.get_instance()
        self._log = logger.bind(component=COMPONENT_PIPELINE, run_id=run_id)

    @property
    def concurrency(self) -> int:
        """Get the number of worker threads."""
        return self._concurrency

    def fetch(self, photos: Iterable[PhotoRef | str]) -> PipelineResult:
        """Return a detail record or an error for every requested photo.

        Duplicate ids are collapsed; the first reference for an id wins.

        Args:
            photos: Photo references or bare photo ids.

        Returns:
            PipelineResult with exactly one FetchResult per distinct id.
        """
        started_at = datetime.now(UTC)
        start_time_ns = time.perf_counter_ns()

        if not self._cache.is_loaded:
            self._cache.load_from_storage()

        refs: dict[str, PhotoRef] = {}
        for photo in photos:
            ref = _as_ref(photo)
            refs.setdefault(ref.id, ref)

        results: dict[str, FetchResult] = {}
        jobs: list[FetchJob] = []
        now = self._clock()
        for photo_id, ref in refs.items():
            entry = self._cache.get_fresh(photo_id, now)
            if entry is None:
                jobs.append(FetchJob(ref=ref))
            else:
                self._collect(FetchResult.cached(entry), results)

        self._log.info(
            "pipeline_started",
            requested=len(refs),
            cache_hits=len(results),
            jobs=len(jobs),
            concurrency=self._concurrency,
        )

        self._run_jobs(jobs, results)

        cache_flushed = self._cache.flush_to_storage(now=self._clock())

        duration_ms = (time.perf_counter_ns() - start_time_ns) / 1_000_000
        self._metrics.record_run(duration_ms)

        result = PipelineResult(
            run_id=self._run_id,
            started_at=started_at,
            finished_at=datetime.now(UTC),
            results=results,
            cache_flushed=cache_flushed,
        )

        self._log.info(
            "pipeline_complete",
            requested=len(refs),
            cache_hits=result.cache_hits,
            fetched=result.fetched,
            failed=len(result.failures),
            cache_flushed=cache_flushed,
            duration_ms=round(duration_ms, 2),
        )
        return result

    def _run_jobs(self, jobs: list[FetchJob], results: dict[str, FetchResult]) -> None:
        """Execute jobs and collect every result on the calling thread."""
        if not jobs:
            return

        if self._concurrency == 1:
            # Sequential execution
            for job in jobs:
                self._collect(self._execute(job), results)
            return

        # Parallel execution
        with ThreadPoolExecutor(
            max_workers=min(self._concurrency, len(jobs)),
            thread_name_prefix=WORKER_THREAD_PREFIX,
        ) as executor:
            future_to_job = {executor.submit(self._execute, job): job for job in jobs}
            for future in as_completed(future_to_job):
                self._collect(future.result(), results)

    def _execute(self, job: FetchJob) -> FetchResult:
        """Fetch one photo. Runs on a worker thread; never touches the cache."""
        try:
            detail = self._source.get_detail(job.ref)
            if detail.id != job.photo_id:
                msg = f"Asked for photo {job.photo_id}, got {detail.id}"
                raise ProtocolError(msg)
        except FlickrateError as e:
            return FetchResult.failed(
                job.photo_id, FetchErrorRecord.from_exception(job.photo_id, e)
            )
        except Exception as e:  # noqa: BLE001
            self._log.error(
                "job_execution_error",
                photo_id=job.photo_id,
                error_type=type(e).__name__,
                error=str(e),
            )
            return FetchResult.failed(
                job.photo_id, FetchErrorRecord.from_exception(job.photo_id, e)
            )

        return FetchResult.fetched(CacheEntry.from_detail(detail, self._clock()))

    def _collect(self, result: FetchResult, results: dict[str, FetchResult]) -> None:
        """Record one result. Only ever called on the collector thread."""
        results[result.photo_id] = result

        if result.error is not None:
            self._metrics.record_failure(result.error.error_class)
            self._log.warning(
                "photo_fetch_failed",
                photo_id=result.photo_id,
                error_class=result.error.error_class.value,
                error=result.error.message,
            )
            return

        if result.from_cache:
            self._metrics.record_cache_hit()
            return

        if result.entry is not None:
            self._cache.put(result.photo_id, result.entry)
            self._metrics.record_fetched()
