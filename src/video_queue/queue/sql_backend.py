"""SQL implementation of RecordStore on top of `databases`.

Statements are SQLAlchemy Core expressions compiled by `databases`, so
every filter value travels as a bound parameter. Works with the
aiosqlite driver by default and asyncpg for PostgreSQL.
"""

import sqlite3
from contextlib import asynccontextmanager
from typing import List, Optional

from databases import Database
from sqlalchemy import case, func, insert, or_, select, update

from ..api.db_models import Video
from ..errors import DuplicateVideoError, StoreError, VideoNotFoundError, VideoQueueError
from .backends import RecordStore
from .models import OTHER_PRIORITY, STATUS_PRIORITY, VideoItem

# Postgres unique_violation; asyncpg exposes it as `sqlstate`
_UNIQUE_VIOLATION = "23505"

_status_rank = case(
    *[(Video.status == status, rank) for status, rank in STATUS_PRIORITY.items()],
    else_=OTHER_PRIORITY,
)


def _is_integrity_error(exc: Exception) -> bool:
    return isinstance(exc, sqlite3.IntegrityError) or getattr(exc, "sqlstate", None) == _UNIQUE_VIOLATION


@asynccontextmanager
async def _store_errors(operation: str):
    """Re-raise driver failures as StoreError; queue errors pass through."""
    try:
        yield
    except VideoQueueError:
        raise
    except Exception as e:
        raise StoreError(operation, str(e) or e.__class__.__name__) from e


def _row_to_video(row) -> VideoItem:
    return VideoItem(
        id=row.id,
        path=row.path,
        resolution=row.resolution,
        bitrate=row.bitrate,
        status=row.status,
        originalSize=row.original_size,
    )


def _status_clause(status_filter: Optional[str]):
    return Video.status == status_filter if status_filter else None


class VideoStore(RecordStore):
    """Record store backed by the `videos` table.

    Args:
        database: Connected `databases.Database` (shared connection pool)
    """

    def __init__(self, database: Database):
        self.database = database

    async def fetch_paths(self) -> List[str]:
        async with _store_errors("fetch paths"):
            rows = await self.database.fetch_all(select(Video.path).distinct())
        return [row.path for row in rows]

    async def count(self, status_filter: Optional[str] = None) -> int:
        query = select(func.count()).select_from(Video)
        clause = _status_clause(status_filter)
        if clause is not None:
            query = query.where(clause)

        async with _store_errors("count"):
            total = await self.database.fetch_val(query)
        return int(total or 0)

    async def fetch_page(
        self, status_filter: Optional[str], limit: int, offset: int
    ) -> List[VideoItem]:
        query = select(Video)
        clause = _status_clause(status_filter)
        if clause is not None:
            query = query.where(clause)
        query = query.order_by(_status_rank, Video.path).limit(limit).offset(offset)

        async with _store_errors("fetch page"):
            rows = await self.database.fetch_all(query)
        return [_row_to_video(row) for row in rows]

    async def get(self, video_id: str) -> Optional[VideoItem]:
        async with _store_errors("get"):
            row = await self.database.fetch_one(select(Video).where(Video.id == video_id))
        return _row_to_video(row) if row else None

    async def find_existing(self, video_id: str, path: str) -> Optional[VideoItem]:
        query = select(Video).where(or_(Video.id == video_id, Video.path == path)).limit(1)
        async with _store_errors("lookup"):
            row = await self.database.fetch_one(query)
        return _row_to_video(row) if row else None

    async def insert(self, item: VideoItem) -> VideoItem:
        query = insert(Video).values(
            id=item.id,
            path=item.path,
            resolution=item.resolution,
            bitrate=item.bitrate,
            status=item.status,
            original_size=item.originalSize,
        )
        async with _store_errors("insert"):
            try:
                await self.database.execute(query)
            except Exception as e:
                if _is_integrity_error(e):
                    raise DuplicateVideoError(item.id, item.path) from e
                raise

        stored = await self.get(item.id)
        if stored is None:
            raise StoreError("insert", f"row {item.id} missing after insert")
        return stored

    async def update_status(self, video_id: str, status: str) -> None:
        async with _store_errors("update status"):
            async with self.database.transaction():
                row = await self.database.fetch_one(select(Video.id).where(Video.id == video_id))
                if row is None:
                    raise VideoNotFoundError(video_id)
                await self.database.execute(
                    update(Video).where(Video.id == video_id).values(status=status)
                )
