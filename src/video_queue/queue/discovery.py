"""Filesystem discovery of media files that are not yet queued."""

import logging
import os
from pathlib import Path
from typing import Iterable, List

from ..errors import DiscoveryError
from .backends import MembershipCache
from .models import UNPROCESSED, VideoItem

logger = logging.getLogger(__name__)

MEDIA_EXTENSIONS = {".mp4"}


def _raise_walk_error(err: OSError):
    raise err


def iter_media_files(root: str, extensions: Iterable[str] = None) -> List[str]:
    """
    Recursively list media files under a directory.

    Args:
        root: Directory to walk.
        extensions: Allowed suffixes (e.g. ['.mp4']). If None, uses MEDIA_EXTENSIONS.

    Returns:
        Paths as produced by the walk (root joined with relative parts), in
        traversal order.

    Raises:
        DiscoveryError: if the root is missing or any directory cannot be read.
        The whole walk is aborted; no partial list is returned.
    """
    allowed_exts = set(extensions) if extensions else MEDIA_EXTENSIONS
    allowed_exts = {(e if e.startswith(".") else f".{e}").lower() for e in allowed_exts}

    files = []
    try:
        for dirpath, _, filenames in os.walk(root, onerror=_raise_walk_error):
            for name in filenames:
                if Path(name).suffix.lower() in allowed_exts:
                    files.append(os.path.join(dirpath, name))
    except OSError as e:
        raise DiscoveryError(root, str(e)) from e

    return files


def file_size(path: str) -> int:
    """Current size in bytes, or 0 if it cannot be read."""
    try:
        return os.stat(path).st_size
    except OSError as e:
        logger.debug("Could not stat %s, reporting size 0: %s", path, e)
        return 0


def discover_unprocessed(
    root: str, cache: MembershipCache, extensions: Iterable[str] = None
) -> List[VideoItem]:
    """
    Find media files under root that the cache does not know about.

    Blocking; the API runs it in a worker thread. Order follows the walk
    and is not guaranteed.
    """
    paths = iter_media_files(root, extensions)
    known = cache.contains_many(paths)

    videos = [
        VideoItem(
            id=os.path.basename(path),
            path=path,
            status=UNPROCESSED,
            originalSize=file_size(path),
        )
        for path in paths
        if path not in known
    ]

    logger.info(
        "Discovery under %s: %d media file(s), %d already queued, %d unprocessed",
        root,
        len(paths),
        len(known),
        len(videos),
    )
    return videos
