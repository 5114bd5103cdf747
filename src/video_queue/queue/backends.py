from __future__ import annotations

"""Abstract base classes for the record store and the membership cache.

The queue service only talks to these interfaces, so the cache and the
store can be swapped or faked independently in tests. The shipped
implementations are SQL via `databases` (sql_backend.VideoStore) and an
in-process locked set (cache.PathCache).
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Iterable, List, Optional, Set

if TYPE_CHECKING:
    from .models import VideoItem


class RecordStore(ABC):
    """Durable table of video work-items keyed by id.

    Implementations must provide:
    - Unique ids and unique paths (insert never overwrites)
    - Parameterized status filtering (no query text built from input)
    - Queue ordering: processing, pending, completed, anything else; then path
    """

    @abstractmethod
    async def fetch_paths(self) -> List[str]:
        """Return every distinct stored path (for cache rebuild).

        Implementation notes:
        - Full scan; only called at startup
        """
        pass

    @abstractmethod
    async def count(self, status_filter: Optional[str] = None) -> int:
        """Count stored items, optionally restricted to one exact status."""
        pass

    @abstractmethod
    async def fetch_page(
        self, status_filter: Optional[str], limit: int, offset: int
    ) -> List["VideoItem"]:
        """Fetch one page of items in queue order.

        Implementation notes:
        - MUST apply the same predicate as count() so page math is exact
        - Ordering is fixed: processing, pending, completed, other; then path
        """
        pass

    @abstractmethod
    async def get(self, video_id: str) -> Optional["VideoItem"]:
        """Return the stored item with this id, or None."""
        pass

    @abstractmethod
    async def find_existing(self, video_id: str, path: str) -> Optional["VideoItem"]:
        """Return any stored item sharing the id or the path, or None."""
        pass

    @abstractmethod
    async def insert(self, item: "VideoItem") -> "VideoItem":
        """Insert a new item and return it as stored.

        Raises:
            DuplicateVideoError: id or path already stored

        Implementation notes:
        - Stores the status it is given; the service forces 'pending'
        """
        pass

    @abstractmethod
    async def update_status(self, video_id: str, status: str) -> None:
        """Overwrite the status of one item.

        Raises:
            VideoNotFoundError: no item has this id
        """
        pass


class MembershipCache(ABC):
    """In-memory answer to "has this path already been enqueued".

    Implementations must be safe to call from the event loop and from
    worker threads at the same time. The cache may lag behind the store
    (missing paths cause re-discovery) but must never report a path the
    store does not hold.
    """

    @abstractmethod
    def __len__(self) -> int:
        """Number of tracked paths (reported by the health check)."""
        pass

    @abstractmethod
    def contains(self, path: str) -> bool:
        pass

    @abstractmethod
    def contains_many(self, paths: Iterable[str]) -> Set[str]:
        """Return the subset of paths that are tracked, in one consistent read."""
        pass

    @abstractmethod
    def add(self, path: str) -> None:
        """Record a path right after its store insert succeeded."""
        pass

    @abstractmethod
    async def rebuild(self, store: RecordStore) -> int:
        """Replace the cache contents with the store's paths.

        Returns:
            Number of paths held after the rebuild

        Implementation notes:
        - Must not lose adds that happen while the store is being read
        - On store failure, log and fail open (cache holds nothing stale)
        """
        pass
