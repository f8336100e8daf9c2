"""Persistent key-value store of photo detail records.

The whole cache lives in memory during a run. It is read once from a gzip
compressed JSON blob and written back once, atomically, and only when at
least one entry was added or refreshed.

The cache is not synchronized. The detail pipeline mutates it from a single
collector thread; workers never touch it.
"""

import contextlib
import gzip
import zlib
from collections.abc import Iterator
from datetime import datetime, timedelta
from pathlib import Path

import structlog
from pydantic import TypeAdapter, ValidationError

from flickrate.cache.constants import COMPONENT_CACHE, COMPRESSION_LEVEL, DEFAULT_TTL
from flickrate.cache.models import CacheEntry


logger = structlog.get_logger()

_ENTRIES_ADAPTER: TypeAdapter[dict[str, CacheEntry]] = TypeAdapter(
    dict[str, CacheEntry]
)


class PhotoCache:
    """Photo detail cache with a freshness policy."""

    def __init__(
        self,
        path: Path | None = None,
        ttl: timedelta = DEFAULT_TTL,
        read_existing: bool = True,
    ) -> None:
        """Initialize the cache.

        Args:
            path: Blob location; None keeps the cache in memory only.
            ttl: Maximum age of an entry that may be served.
            read_existing: Whether load_from_storage reads the blob. When
                False the run starts empty but still writes results back.
        """
        self._path = path
        self._ttl = ttl
        self._read_existing = read_existing
        self._entries: dict[str, CacheEntry] = {}
        self._loaded = False
        self._dirty = False
        self._log = logger.bind(component=COMPONENT_CACHE)

    @property
    def ttl(self) -> timedelta:
        """Get the freshness window."""
        return self._ttl

    @property
    def is_loaded(self) -> bool:
        """Check if load_from_storage has run."""
        return self._loaded

    @property
    def is_dirty(self) -> bool:
        """Check if entries were added or refreshed since the last flush."""
        return self._dirty

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, photo_id: object) -> bool:
        return photo_id in self._entries

    def __iter__(self) -> Iterator[CacheEntry]:
        return iter(list(self._entries.values()))

    @staticmethod
    def is_fresh(entry: CacheEntry, now: datetime, ttl: timedelta) -> bool:
        """Check if an entry may be served without re-fetching.

        Args:
            entry: Cached entry.
            now: Current time (timezone-aware).
            ttl: Freshness window.

        Returns:
            True if ``0 <= now - last_fetched < ttl``. An entry stamped in
            the future is stale.
        """
        age = now - entry.last_fetched
        return timedelta(0) <= age < ttl

    def get(self, photo_id: str) -> CacheEntry | None:
        """Get an entry regardless of freshness.

        Args:
            photo_id: Photo identifier.

        Returns:
            The entry, or None if absent.
        """
        return self._entries.get(photo_id)

    def get_fresh(self, photo_id: str, now: datetime) -> CacheEntry | None:
        """Get an entry only if it is fresh.

        Args:
            photo_id: Photo identifier.
            now: Current time (timezone-aware).

        Returns:
            The entry, or None if absent or stale.
        """
        entry = self._entries.get(photo_id)
        if entry is None or not self.is_fresh(entry, now, self._ttl):
            return None
        return entry

    def put(self, photo_id: str, entry: CacheEntry) -> None:
        """Insert or replace an entry.

        Args:
            photo_id: Photo identifier.
            entry: Complete entry for that identifier.

        Raises:
            ValueError: If the entry belongs to a different identifier.
        """
        if entry.photo_id != photo_id:
            msg = f"Entry for {entry.photo_id!r} stored under {photo_id!r}"
            raise ValueError(msg)
        self._entries[photo_id] = entry
        self._dirty = True

    def load_from_storage(self) -> int:
        """Read the persisted blob into memory.

        A missing blob yields an empty cache. A corrupt or unreadable blob is
        logged and also yields an empty cache; it is replaced on the next
        flush.

        Returns:
            Number of entries loaded.
        """
        self._loaded = True
        if self._path is None or not self._read_existing:
            self._log.debug("cache_load_skipped")
            return 0

        if not self._path.exists():
            self._log.info("cache_missing", path=str(self._path))
            return 0

        try:
            raw = gzip.decompress(self._path.read_bytes())
            entries = _ENTRIES_ADAPTER.validate_json(raw)
        except (OSError, EOFError, zlib.error, ValidationError) as e:
            self._log.warning(
                "cache_unreadable",
                path=str(self._path),
                error_type=type(e).__name__,
                error=str(e),
            )
            return 0

        self._entries = {
            photo_id: entry
            for photo_id, entry in entries.items()
            if entry.photo_id == photo_id
        }
        self._log.info("cache_loaded", path=str(self._path), entries=len(self._entries))
        return len(self._entries)

    def prune(self, now: datetime) -> int:
        """Drop every entry that is no longer fresh.

        Args:
            now: Current time (timezone-aware).

        Returns:
            Number of entries dropped.
        """
        stale = [
            photo_id
            for photo_id, entry in self._entries.items()
            if not self.is_fresh(entry, now, self._ttl)
        ]
        for photo_id in stale:
            del self._entries[photo_id]
        if stale:
            self._dirty = True
            self._log.debug("cache_pruned", dropped=len(stale), kept=len(self._entries))
        return len(stale)

    def flush_to_storage(self, now: datetime | None = None) -> bool:
        """Write the cache back if anything changed.

        Writes to a temporary file first, then renames it over the blob so
        readers never see a partial write. A failed write is logged,
        removes the temporary file and keeps the in-memory entries dirty.

        Args:
            now: When given, stale entries are dropped before writing so
                the blob does not keep growing.

        Returns:
            True if the blob was written.
        """
        if not self._dirty:
            self._log.debug("cache_flush_skipped", reason="unchanged")
            return False
        if self._path is None:
            self._dirty = False
            return False

        if now is not None:
            self.prune(now)

        payload = gzip.compress(
            _ENTRIES_ADAPTER.dump_json(self._entries),
            compresslevel=COMPRESSION_LEVEL,
        )

        temp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            temp_path.write_bytes(payload)
            temp_path.replace(self._path)
        except OSError as e:
            self._log.warning(
                "cache_flush_failed",
                path=str(self._path),
                error_type=type(e).__name__,
                error=str(e),
            )
            with contextlib.suppress(OSError):
                temp_path.unlink(missing_ok=True)
            return False

        self._dirty = False
        self._log.info(
            "cache_flushed",
            path=str(self._path),
            entries=len(self._entries),
            bytes=len(payload),
        )
        return True
