"""Persistent cache of photo detail records."""

from flickrate.cache.constants import DEFAULT_TTL
from flickrate.cache.models import CacheEntry
from flickrate.cache.store import PhotoCache


__all__ = [
    "DEFAULT_TTL",
    "CacheEntry",
    "PhotoCache",
]
