import logging
from contextlib import asynccontextmanager
from typing import Optional

from databases import Database
from fastapi import APIRouter, FastAPI, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from video_queue.config import resolve_config
from video_queue.errors import VideoQueueError
from video_queue.queue.models import StatusUpdate, VideoItem
from video_queue.queue.sql_backend import VideoStore
from video_queue.service import VideoQueueService

logger = logging.getLogger(__name__)

# --- CONFIG ---
settings = resolve_config()

database = Database(settings.database.url)
service = VideoQueueService(VideoStore(database), config=settings)


async def startup():
    await database.connect()
    await service.startup()


async def shutdown():
    await database.disconnect()


@asynccontextmanager
async def lifespan(app: FastAPI):
    await startup()
    yield
    await shutdown()


app = FastAPI(title="Video Queue", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.server.cors_origins,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Origin", "Content-Type"],
)


# --- ERROR HANDLERS ---
@app.exception_handler(VideoQueueError)
async def queue_error_handler(request: Request, exc: VideoQueueError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.to_detail()})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "detail": {
                "code": "INVALID_REQUEST",
                "message": "Request validation failed",
                "errors": [
                    {"loc": list(err.get("loc", ())), "msg": err.get("msg")}
                    for err in exc.errors()
                ],
            }
        },
    )


# --- API ENDPOINTS ---


@app.get("/")
async def root():
    return {"message": "Video Queue API", "docs": "/docs", "health": "/health"}


@app.get("/health")
async def health_check():
    return {"status": "ok", "cachedPaths": len(service.cache)}


router = APIRouter()


@router.get("/videos/unprocessed")
async def list_unprocessed_videos():
    """Media files on disk that have not been queued yet."""
    videos = await service.discover()
    return [v.model_dump() for v in videos]


@router.get("/queue")
async def get_queue(
    page: Optional[int] = Query(default=None),
    page_size: Optional[int] = Query(default=None, alias="pageSize"),
    status_filter: Optional[str] = Query(default=None, alias="status"),
):
    """One page of the queue grouped by status, processing first."""
    view = await service.get_queue(page, page_size, status_filter)
    return view.model_dump()


@router.post("/videos/process", status_code=201)
async def add_to_queue(video: VideoItem):
    """Queue a discovered video. Duplicate path or id returns 409."""
    stored = await service.enqueue(video)
    return stored.model_dump()


@router.get("/videos/{video_id}")
async def get_video(video_id: str):
    video = await service.get_video(video_id)
    return video.model_dump()


@router.patch("/videos/{video_id}/status")
async def update_video_status(video_id: str, data: StatusUpdate):
    """Set a video's status. Unknown id returns 404."""
    new_status = await service.update_status(video_id, data.status)
    return {"status": "updated", "id": video_id, "newStatus": new_status.value}


app.include_router(router, prefix=settings.server.api_prefix)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.server.host, port=settings.server.port)
