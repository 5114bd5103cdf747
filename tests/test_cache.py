"""Tests for the path membership cache."""

import threading

import pytest

from video_queue.errors import StoreError
from video_queue.queue.backends import MembershipCache
from video_queue.queue.cache import PathCache


class FakeStore:
    """Just enough of RecordStore for cache rebuilds."""

    def __init__(self, paths=(), error=None, on_fetch=None):
        self.paths = list(paths)
        self.error = error
        self.on_fetch = on_fetch

    async def fetch_paths(self):
        if self.on_fetch:
            self.on_fetch()
        if self.error:
            raise self.error
        return list(self.paths)


def test_add_then_contains():
    cache = PathCache()
    assert not cache.contains("/videos/a.mp4")
    cache.add("/videos/a.mp4")
    assert cache.contains("/videos/a.mp4")
    assert len(cache) == 1


def test_contains_many_returns_known_subset():
    cache = PathCache(["/v/a.mp4", "/v/b.mp4"])
    assert cache.contains_many(["/v/a.mp4", "/v/c.mp4"]) == {"/v/a.mp4"}


@pytest.mark.asyncio(loop_scope="function")
async def test_rebuild_matches_store_exactly():
    """After rebuild, contains(p) is true iff p is stored."""
    cache = PathCache(["/v/stale.mp4"])
    size = await cache.rebuild(FakeStore(["/v/a.mp4", "/v/b.mp4"]))

    assert size == 2
    assert cache.contains("/v/a.mp4")
    assert cache.contains("/v/b.mp4")
    assert not cache.contains("/v/stale.mp4")


@pytest.mark.asyncio(loop_scope="function")
async def test_rebuild_failure_fails_open():
    cache = PathCache(["/v/a.mp4"])
    size = await cache.rebuild(FakeStore(error=StoreError("fetch paths", "connection refused")))

    assert size == 0
    assert not cache.contains("/v/a.mp4")


@pytest.mark.asyncio(loop_scope="function")
async def test_add_during_rebuild_is_not_lost():
    cache = PathCache()
    store = FakeStore(["/v/a.mp4"], on_fetch=lambda: cache.add("/v/new.mp4"))

    await cache.rebuild(store)

    assert cache.contains("/v/a.mp4")
    assert cache.contains("/v/new.mp4")


@pytest.mark.asyncio(loop_scope="function")
async def test_add_during_failed_rebuild_is_kept():
    cache = PathCache(["/v/old.mp4"])
    store = FakeStore(
        error=StoreError("fetch paths", "timeout"), on_fetch=lambda: cache.add("/v/new.mp4")
    )

    await cache.rebuild(store)

    assert cache.contains("/v/new.mp4")
    assert not cache.contains("/v/old.mp4")


def test_concurrent_adds_from_threads():
    cache = PathCache()

    def worker(n):
        for i in range(200):
            cache.add(f"/v/{n}-{i}.mp4")
            cache.contains(f"/v/{n}-{i}.mp4")

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(cache) == 8 * 200


def test_cache_interface_requires_len():
    class NoLenCache(MembershipCache):
        def contains(self, path):
            return False

        def contains_many(self, paths):
            return set()

        def add(self, path):
            pass

        async def rebuild(self, store):
            return 0

    with pytest.raises(TypeError):
        NoLenCache()
