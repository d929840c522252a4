"""Bounded in-process cache for rendered thumbnails.

Keys are (background_ref, foreground_ref) pairs; values are the encoded
image bytes. Least recently used entries are evicted once the cache is full.
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from typing import Optional, Tuple

from templatr.config.settings import SETTINGS

logger = logging.getLogger(__name__)

CacheKey = Tuple[str, str]


class ThumbnailCache:
    """Thread-safe LRU map of thumbnail bytes."""

    def __init__(self, max_entries: int = SETTINGS.thumbnail_cache_size):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.max_entries = max_entries
        self._lock = threading.Lock()
        self._entries: "OrderedDict[CacheKey, bytes]" = OrderedDict()

    @staticmethod
    def key_for(background_ref: str, foreground_ref: str) -> CacheKey:
        return (background_ref, foreground_ref)

    def get(self, key: CacheKey) -> Optional[bytes]:
        with self._lock:
            data = self._entries.get(key)
            if data is not None:
                # Keep frequently viewed thumbnails warm
                self._entries.move_to_end(key)
            return data

    def put(self, key: CacheKey, data: bytes) -> None:
        with self._lock:
            self._entries[key] = data
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug(f"Evicted thumbnail for {evicted[1][:50]}")

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
