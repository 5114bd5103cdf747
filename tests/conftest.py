import os
import pytest
from databases import Database
from httpx import AsyncClient, ASGITransport
from sqlalchemy import create_engine

# Force test database before importing app (which reads DATABASE_URL at import time)
os.environ["DATABASE_URL"] = "sqlite:///./test_api.db"

from video_queue.api.db_models import Base  # noqa: E402
from video_queue.api.main import app, database, service  # noqa: E402
from video_queue.queue.cache import PathCache  # noqa: E402
from video_queue.queue.sql_backend import VideoStore  # noqa: E402


@pytest.fixture(scope="function")
async def client(tmp_path, monkeypatch):
    # Create tables via synchronous SQLAlchemy
    engine = create_engine("sqlite:///./test_api.db")
    Base.metadata.create_all(engine)
    engine.dispose()

    # Fresh cache and scan root per test; lifespan does not run under ASGITransport
    monkeypatch.setattr(service, "cache", PathCache())
    monkeypatch.setattr(service, "videos_dir", str(tmp_path))
    await database.connect()
    await service.startup()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    # Clean up: drop all tables and disconnect
    engine = create_engine("sqlite:///./test_api.db")
    Base.metadata.drop_all(engine)
    engine.dispose()
    await database.disconnect()


@pytest.fixture
async def store(tmp_path):
    """VideoStore over a throwaway SQLite file."""
    url = f"sqlite:///{tmp_path / 'store.db'}"
    engine = create_engine(url)
    Base.metadata.create_all(engine)
    engine.dispose()

    db = Database(url)
    await db.connect()
    yield VideoStore(db)
    await db.disconnect()
