"""Unit tests for DetailFetchPipeline."""

import threading
from datetime import timedelta
from pathlib import Path

import pytest

from flickrate.api.models import PhotoDetail, PhotoRef
from flickrate.cache.models import CacheEntry
from flickrate.cache.store import PhotoCache
from flickrate.errors import ErrorClass, NetworkError, PartialFetchError
from flickrate.pipeline.fetcher import DetailFetchPipeline
from flickrate.pipeline.metrics import PipelineMetrics
from tests.helpers.flickr import make_detail, make_ref
from tests.helpers.time import FIXED_NOW


class FakeSource:
    """Counts calls and fails for chosen ids."""

    def __init__(self, failing: set[str] | None = None) -> None:
        self.failing = failing or set()
        self.calls: list[str] = []
        self.threads: set[str] = set()
        self._lock = threading.Lock()

    def get_detail(self, ref: PhotoRef) -> PhotoDetail:
        with self._lock:
            self.calls.append(ref.id)
            self.threads.add(threading.current_thread().name)
        if ref.id in self.failing:
            raise NetworkError(f"connection reset fetching {ref.id}")
        return make_detail(ref.id, views=int(ref.id) * 100)


def _pipeline(
    source: FakeSource,
    cache: PhotoCache,
    concurrency: int = 20,
) -> DetailFetchPipeline:
    return DetailFetchPipeline(source, cache, concurrency=concurrency, clock=lambda: FIXED_NOW)


class TestDetailFetchPipeline:
    """Tests for DetailFetchPipeline.fetch()."""

    def test_completeness(self) -> None:
        """Test that every requested id is present exactly once."""
        result = _pipeline(FakeSource(), PhotoCache()).fetch(["1", "2", "3"])

        assert set(result.results) == {"1", "2", "3"}
        assert set(result.details) == {"1", "2", "3"}
        assert result.failures == {}

    def test_duplicates_fetched_once(self) -> None:
        """Test that a repeated id is fetched once."""
        source = FakeSource()

        result = _pipeline(source, PhotoCache()).fetch(["1", "1", make_ref("1"), "2"])

        assert sorted(source.calls) == ["1", "2"]
        assert set(result.results) == {"1", "2"}

    def test_second_run_served_from_cache(self, tmp_path: Path) -> None:
        """Test that a repeat within the freshness window makes no calls."""
        source = FakeSource()
        cache = PhotoCache(path=tmp_path / "cache")

        _pipeline(source, cache).fetch(["1", "2", "3"])
        calls_after_first = len(source.calls)
        second = _pipeline(source, cache).fetch(["1", "2", "3"])

        assert calls_after_first == 3
        assert len(source.calls) == 3
        assert second.cache_hits == 3
        assert second.fetched == 0
        assert not second.cache_flushed

    def test_second_run_from_persisted_cache(self, tmp_path: Path) -> None:
        """Test that a new process reuses the flushed cache."""
        path = tmp_path / "cache"
        _pipeline(FakeSource(), PhotoCache(path=path)).fetch(["1", "2"])

        source = FakeSource()
        result = _pipeline(source, PhotoCache(path=path)).fetch(["1", "2"])

        assert source.calls == []
        assert result.cache_hits == 2

    def test_stale_entries_refetched(self) -> None:
        """Test that entries older than the TTL are fetched again."""
        cache = PhotoCache(ttl=timedelta(hours=1))
        cache.put("1", CacheEntry.from_detail(make_detail("1"), FIXED_NOW - timedelta(hours=2)))
        cache.put("2", CacheEntry.from_detail(make_detail("2"), FIXED_NOW))
        source = FakeSource()

        result = _pipeline(source, cache).fetch(["1", "2"])

        assert source.calls == ["1"]
        assert result.results["1"].entry is not None
        assert result.results["1"].entry.last_fetched == FIXED_NOW
        assert result.results["2"].from_cache

    def test_failure_isolated(self) -> None:
        """Test that one failing id does not stop the others."""
        source = FakeSource(failing={"2"})

        result = _pipeline(source, PhotoCache()).fetch(["1", "2", "3"])

        assert set(result.results) == {"1", "2", "3"}
        assert set(result.details) == {"1", "3"}
        error = result.failures["2"]
        assert error.error_class == ErrorClass.NETWORK
        assert "connection reset" in error.message

    def test_failures_not_cached(self) -> None:
        """Test that failed ids are absent from the cache."""
        cache = PhotoCache()

        _pipeline(FakeSource(failing={"2"}), cache).fetch(["1", "2"])

        assert "1" in cache
        assert "2" not in cache

    def test_raise_for_failures(self) -> None:
        """Test that the caller can escalate per-id failures."""
        result = _pipeline(FakeSource(failing={"3", "2"}), PhotoCache()).fetch(["1", "2", "3"])

        with pytest.raises(PartialFetchError) as exc_info:
            result.raise_for_failures()

        assert exc_info.value.failed_ids == ["2", "3"]
        assert exc_info.value.total == 3

    def test_unexpected_exception_isolated(self) -> None:
        """Test that a non-domain exception becomes an UNKNOWN error."""

        class Exploding(FakeSource):
            def get_detail(self, ref: PhotoRef) -> PhotoDetail:
                if ref.id == "2":
                    raise KeyError("boom")
                return super().get_detail(ref)

        result = _pipeline(Exploding(), PhotoCache()).fetch(["1", "2"])

        assert result.failures["2"].error_class == ErrorClass.UNKNOWN
        assert "KeyError" in result.failures["2"].message

    def test_mismatched_detail_is_protocol_error(self) -> None:
        """Test that a record for the wrong photo is rejected."""

        class Confused(FakeSource):
            def get_detail(self, ref: PhotoRef) -> PhotoDetail:
                return make_detail("999")

        result = _pipeline(Confused(), PhotoCache()).fetch(["1"])

        assert result.failures["1"].error_class == ErrorClass.PROTOCOL

    def test_concurrency_one_and_twenty_agree(self) -> None:
        """Test that worker count does not change the final cache."""
        ids = [str(i) for i in range(1, 41)]
        serial_cache = PhotoCache()
        parallel_cache = PhotoCache()

        _pipeline(FakeSource(failing={"7"}), serial_cache, concurrency=1).fetch(ids)
        _pipeline(FakeSource(failing={"7"}), parallel_cache, concurrency=20).fetch(ids)

        serial = {e.photo_id: e.detail for e in serial_cache}
        parallel = {e.photo_id: e.detail for e in parallel_cache}
        assert serial == parallel
        assert len(serial) == 39

    def test_serial_runs_on_caller_thread(self) -> None:
        """Test that concurrency=1 uses no worker threads."""
        source = FakeSource()

        _pipeline(source, PhotoCache(), concurrency=1).fetch(["1", "2"])

        assert source.threads == {threading.current_thread().name}

    def test_parallel_uses_worker_threads(self) -> None:
        """Test that parallel runs fetch on the pool's threads."""
        source = FakeSource()

        _pipeline(source, PhotoCache(), concurrency=4).fetch([str(i) for i in range(1, 9)])

        assert all(name.startswith("detail-fetch") for name in source.threads)

    def test_empty_input(self) -> None:
        """Test that no ids means no calls and no flush."""
        source = FakeSource()

        result = _pipeline(source, PhotoCache()).fetch([])

        assert result.results == {}
        assert source.calls == []
        assert not result.cache_flushed

    def test_unwritable_cache_keeps_results(self, tmp_path: Path) -> None:
        """Test that a failed cache write does not lose fetched details."""
        path = tmp_path / "cachedir"
        path.mkdir()
        source = FakeSource()

        result = _pipeline(source, PhotoCache(path=path)).fetch(["1", "2"])

        assert sorted(source.calls) == ["1", "2"]
        assert set(result.details) == {"1", "2"}
        assert not result.cache_flushed
        assert [p.name for p in tmp_path.iterdir()] == ["cachedir"]

    def test_loads_cache_once(self, tmp_path: Path) -> None:
        """Test that a loaded cache is not re-read on the next run."""
        cache = PhotoCache(path=tmp_path / "cache")
        pipeline = _pipeline(FakeSource(), cache)

        pipeline.fetch(["1"])
        (tmp_path / "cache").write_bytes(b"garbage")
        result = pipeline.fetch(["1"])

        assert result.cache_hits == 1

    def test_rejects_non_positive_concurrency(self) -> None:
        """Test that concurrency must be a positive integer."""
        with pytest.raises(ValueError, match="positive"):
            DetailFetchPipeline(FakeSource(), PhotoCache(), concurrency=0)

    def test_metrics_recorded(self) -> None:
        """Test that hits, fetches and failures are counted."""
        cache = PhotoCache()
        cache.put("1", CacheEntry.from_detail(make_detail("1"), FIXED_NOW))

        _pipeline(FakeSource(failing={"3"}), cache).fetch(["1", "2", "3"])

        metrics = PipelineMetrics.get_instance().to_dict()
        assert metrics["pipeline_cache_hits_total"] == 1
        assert metrics["pipeline_fetched_total"] == 1
        assert metrics["pipeline_failures_total"] == {"NETWORK": 1}
        assert metrics["pipeline_runs_total"] == 1
