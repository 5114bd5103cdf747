"""Thread-safe membership cache of enqueued paths."""

import asyncio
import logging
import threading
from typing import Iterable, Optional, Set

from ..errors import VideoQueueError
from .backends import MembershipCache, RecordStore

logger = logging.getLogger(__name__)


class PathCache(MembershipCache):
    """Set of paths already known to the record store, guarded by one lock.

    Discovery reads it from a worker thread while enqueues write it from
    the event loop, so every access takes the lock. A rebuild swaps the
    whole set at once; paths added while the rebuild is reading the
    store are carried over into the new set.
    """

    def __init__(self, paths: Iterable[str] = ()):
        self._lock = threading.Lock()
        self._paths: Set[str] = set(paths)
        # Adds seen since the current rebuild started; None when idle
        self._added_during_rebuild: Optional[Set[str]] = None
        # One rebuild at a time
        self._rebuild_lock = asyncio.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._paths)

    def contains(self, path: str) -> bool:
        with self._lock:
            return path in self._paths

    def contains_many(self, paths: Iterable[str]) -> Set[str]:
        with self._lock:
            return {p for p in paths if p in self._paths}

    def add(self, path: str) -> None:
        with self._lock:
            self._paths.add(path)
            if self._added_during_rebuild is not None:
                self._added_during_rebuild.add(path)

    async def rebuild(self, store: RecordStore) -> int:
        async with self._rebuild_lock:
            return await self._rebuild(store)

    async def _rebuild(self, store: RecordStore) -> int:
        with self._lock:
            self._added_during_rebuild = set()

        try:
            paths = await store.fetch_paths()
        except VideoQueueError as e:
            with self._lock:
                # Fail open: keep only what was inserted meanwhile
                self._paths = self._added_during_rebuild
                self._added_during_rebuild = None
                size = len(self._paths)
            logger.error("Path cache rebuild failed, starting with %d path(s): %s", size, e)
            return size

        with self._lock:
            self._paths = set(paths) | self._added_during_rebuild
            self._added_during_rebuild = None
            size = len(self._paths)

        logger.info("Path cache rebuilt with %d path(s)", size)
        return size
