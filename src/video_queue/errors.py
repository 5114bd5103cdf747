"""
Queue error types.

All errors inherit from VideoQueueError so the API layer can map them
to HTTP responses in one place. Each carries a stable machine-readable
code next to the human message.
"""


class VideoQueueError(Exception):
    """Base exception for all queue failures."""

    status_code = 500
    code = "QUEUE_ERROR"

    def to_detail(self) -> dict:
        return {"code": self.code, "message": str(self)}


class DiscoveryError(VideoQueueError):
    """Raised when walking the videos directory fails."""

    code = "DISCOVERY_FAILED"

    def __init__(self, root: str, reason: str):
        self.root = root
        self.reason = reason
        super().__init__(f"Discovery failed under {root}: {reason}")


class StoreError(VideoQueueError):
    """Raised when the record store cannot be read or written."""

    code = "STORE_ERROR"

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        super().__init__(f"Store {operation} failed: {reason}")


class VideoNotFoundError(VideoQueueError):
    """Raised when no stored video matches an id."""

    status_code = 404
    code = "VIDEO_NOT_FOUND"

    def __init__(self, video_id: str):
        self.video_id = video_id
        super().__init__(f"Video not found: {video_id}")

    def to_detail(self) -> dict:
        return {**super().to_detail(), "id": self.video_id}


class DuplicateVideoError(VideoQueueError):
    """Raised when enqueueing a path or id that is already tracked."""

    status_code = 409
    code = "VIDEO_ALREADY_QUEUED"

    def __init__(self, video_id: str, path: str):
        self.video_id = video_id
        self.path = path
        super().__init__(f"Video already queued: {path}")

    def to_detail(self) -> dict:
        return {**super().to_detail(), "id": self.video_id, "path": self.path}


class InvalidRequestError(VideoQueueError):
    """Raised for malformed input rejected before the store is touched."""

    status_code = 400
    code = "INVALID_REQUEST"

    def __init__(self, field: str, value, reason: str):
        self.field = field
        self.value = value
        super().__init__(f"Invalid {field} {value!r}: {reason}")

    def to_detail(self) -> dict:
        return {**super().to_detail(), "field": self.field}
