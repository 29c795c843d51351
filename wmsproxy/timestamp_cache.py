from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Tuple

from common.utils import ReadWriteLock
from wmsproxy.areas import Area
from wmsproxy.wms_client import WmsClient


log = logging.getLogger(__name__)

DEFAULT_TTL_S = 300.0
DEFAULT_FRAME_COUNT = 12


@dataclass(frozen=True)
class CacheEntry:
    timestamps: Tuple[str, ...]
    expiry: float  # clock() value after which the entry is stale

    def is_fresh(self, now: float) -> bool:
        return now < self.expiry


class TimestampCache:
    """
    Per-area TTL cache of the most recent radar frame timestamps.

    Lookups take the shared (read) side of the lock; storing a refreshed entry
    takes the exclusive side. The upstream fetch itself runs outside the lock, so
    two threads missing on the same area at the same moment will both call
    GetCapabilities; the last writer wins.

    Returned tuples are the cached snapshot itself and are never modified.
    """

    def __init__(
        self,
        client: WmsClient,
        ttl_s: float = DEFAULT_TTL_S,
        frame_count: int = DEFAULT_FRAME_COUNT,
        clock: Callable[[], float] = time.monotonic,
    ):
        if frame_count < 1:
            raise ValueError("frame_count must be >= 1")
        self.client = client
        self.ttl_s = float(ttl_s)
        self.frame_count = int(frame_count)
        self._clock = clock
        self._entries: Dict[Area, CacheEntry] = {}
        self._lock = ReadWriteLock()
        self._stats_lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    # -------- public API --------

    def get_timestamps(self, area: Area) -> Tuple[str, ...]:
        """
        Most recent (up to frame_count) timestamps for `area`, oldest first.
        Upstream errors propagate and leave the cache untouched.
        """
        area = Area(area)
        with self._lock.read_locked():
            entry = self._entries.get(area)

        if entry is not None and entry.is_fresh(self._clock()):
            self._count(hit=True)
            log.debug("Returning cached timestamps for '%s'", area.value)
            return entry.timestamps

        self._count(hit=False)
        log.info("Fetching new timestamps for '%s'", area.value)
        everything = self.client.fetch_capabilities(area.config)
        recent = tuple(everything[-self.frame_count:]) if everything else ()

        fresh = CacheEntry(timestamps=recent, expiry=self._clock() + self.ttl_s)
        with self._lock.write_locked():
            self._entries[area] = fresh
        return recent

    def invalidate(self, area: Area | None = None) -> None:
        """Drop one area's entry, or all of them."""
        with self._lock.write_locked():
            if area is None:
                self._entries.clear()
            else:
                self._entries.pop(Area(area), None)

    def stats(self) -> Dict[str, int]:
        with self._lock.read_locked():
            entries = len(self._entries)
        with self._stats_lock:
            return {"entries": entries, "hits": self._hits, "misses": self._misses}

    # -------- internals --------

    def _count(self, *, hit: bool) -> None:
        with self._stats_lock:
            if hit:
                self._hits += 1
            else:
                self._misses += 1
