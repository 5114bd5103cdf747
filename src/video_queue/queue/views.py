"""Paginated, status-grouped read projection over the record store."""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from ..errors import InvalidRequestError
from .backends import RecordStore
from .models import Pagination, QueueGroups, QueueView, VideoItem, VideoStatus

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
# Largest OFFSET a 64-bit SQL integer can hold
MAX_OFFSET = 2**63 - 1


@dataclass(frozen=True)
class QueueParams:
    """Validated queue query: clamped paging plus the raw values that were asked for."""

    page: int
    page_size: int
    status: Optional[str]
    requested_page: int
    requested_page_size: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    @classmethod
    def resolve(
        cls,
        page: Optional[int] = None,
        page_size: Optional[int] = None,
        status: Optional[str] = None,
        default_page_size: int = DEFAULT_PAGE_SIZE,
        max_page_size: int = MAX_PAGE_SIZE,
    ) -> "QueueParams":
        """Apply defaults and clamps; reject unknown status filters.

        Out-of-range numbers are clamped (page >= 1, 1 <= page_size <= max),
        not rejected. An unknown status, or a page so far out that its
        offset overflows a SQL integer, raises InvalidRequestError so the
        store is never queried with it.
        """
        requested_page = 1 if page is None else page
        requested_page_size = default_page_size if page_size is None else page_size

        if status:
            if status not in VideoStatus.values():
                raise InvalidRequestError(
                    "status", status, f"expected one of {', '.join(VideoStatus.values())}"
                )
        else:
            status = None

        page = max(requested_page, 1)
        page_size = min(max(requested_page_size, 1), max_page_size)
        if (page - 1) * page_size > MAX_OFFSET:
            raise InvalidRequestError(
                "page", requested_page, f"offset exceeds {MAX_OFFSET} at page size {page_size}"
            )

        return cls(
            page=page,
            page_size=page_size,
            status=status,
            requested_page=requested_page,
            requested_page_size=requested_page_size,
        )


def page_count(total: int, page_size: int) -> int:
    return (total + page_size - 1) // page_size


def group_by_status(videos: Iterable[VideoItem], total: int) -> QueueGroups:
    """Partition one page of rows into status buckets, keeping store order."""
    groups = QueueGroups(total=total)
    buckets = {
        VideoStatus.PENDING.value: groups.pending,
        VideoStatus.PROCESSING.value: groups.processing,
        VideoStatus.COMPLETED.value: groups.completed,
    }

    for video in videos:
        bucket = buckets.get(video.status)
        if bucket is None:
            logger.warning("Video %s has unrecognized status %r", video.id, video.status)
            bucket = groups.other
        bucket.append(video)

    return groups


def build_queue_view(videos: Iterable[VideoItem], total: int, params: QueueParams) -> QueueView:
    return QueueView(
        queue=group_by_status(videos, total),
        pagination=Pagination(
            page=params.page,
            pageSize=params.page_size,
            total=total,
            pages=page_count(total, params.page_size),
            requestedPage=params.requested_page,
            requestedPageSize=params.requested_page_size,
        ),
    )


async def load_queue_view(store: RecordStore, params: QueueParams) -> QueueView:
    """Count, then fetch the page, with the same filter.

    The two reads are separate statements; a write landing between them
    can make the page disagree with the total by that write.
    """
    total = await store.count(params.status)
    videos = await store.fetch_page(params.status, params.page_size, params.offset)
    return build_queue_view(videos, total, params)
