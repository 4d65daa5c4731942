import logging
import os
import tempfile
from typing import List, Optional
from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile, status
from fastapi.responses import FileResponse, StreamingResponse
from starlette.background import BackgroundTask
from videosvc.core.config import settings
from videosvc.core.errors import VideoDataError
from videosvc.core.likes import LikeTracker
from videosvc.core.sql_store import SqlVideoStore
from videosvc.core.video_store import InMemoryVideoStore, VideoStore
from videosvc.schemas.video import Video, VideoCreate, VideoState, VideoStatus
from videosvc.services.aws import S3VideoDataManager
from videosvc.services.data_manager import LocalVideoDataManager, VideoDataManager

logger = logging.getLogger(__name__)
router = APIRouter()

VIDEO_SVC_PATH = "/video"
VIDEO_DATA_PATH = VIDEO_SVC_PATH + "/{video_id}/data"
DOWNLOAD_CHUNK_SIZE = 64 * 1024
SPOOL_MAX_BYTES = 8 * 1024 * 1024

# Backends (lazy initialization)
_store = None
_data_manager = None


def get_store() -> VideoStore:
    global _store
    if _store is None:
        if settings.store_backend == "sql":
            _store = SqlVideoStore(settings.api_base_url, settings.db_url)
        else:
            _store = InMemoryVideoStore(settings.api_base_url)
        logger.info(f"Video store backend: {settings.store_backend}")
    return _store


def get_data_manager() -> VideoDataManager:
    global _data_manager
    if _data_manager is None:
        if settings.data_backend == "s3":
            _data_manager = S3VideoDataManager()
        else:
            _data_manager = LocalVideoDataManager(settings.data_dir)
        logger.info(f"Video data backend: {settings.data_backend}")
    return _data_manager


def get_like_tracker(store: VideoStore = Depends(get_store)) -> LikeTracker:
    return LikeTracker(store)


def get_current_user(request: Request) -> str:
    """Caller identity, set by the authenticating proxy in front of the service."""
    username = request.headers.get(settings.user_header, "").strip()
    if not username:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Missing {settings.user_header} header",
        )
    return username


@router.post(VIDEO_SVC_PATH, response_model=Video)
def add_video(video: VideoCreate, store: VideoStore = Depends(get_store)):
    return store.add(video)


@router.get(VIDEO_SVC_PATH, response_model=List[Video])
def get_video_list(store: VideoStore = Depends(get_store)):
    return store.list_videos()


@router.get(VIDEO_SVC_PATH + "/find", response_model=List[Video])
def find_videos(
    title: Optional[str] = None,
    duration: Optional[int] = None,
    store: VideoStore = Depends(get_store),
):
    """Search by exact title or by duration strictly below a threshold."""
    if (title is None) == (duration is None):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Provide exactly one of 'title' or 'duration'",
        )
    if title is not None:
        return store.find_by_title(title)
    return store.find_by_duration_less_than(duration)


@router.get(VIDEO_SVC_PATH + "/{video_id}", response_model=Video)
def get_video(video_id: int, store: VideoStore = Depends(get_store)):
    return store.get(video_id)


@router.post(VIDEO_SVC_PATH + "/{video_id}/like", response_model=Video)
def like_video(
    video_id: int,
    username: str = Depends(get_current_user),
    tracker: LikeTracker = Depends(get_like_tracker),
):
    return tracker.like(video_id, username)


@router.post(VIDEO_SVC_PATH + "/{video_id}/unlike", response_model=Video)
def unlike_video(
    video_id: int,
    username: str = Depends(get_current_user),
    tracker: LikeTracker = Depends(get_like_tracker),
):
    return tracker.unlike(video_id, username)


@router.get(VIDEO_SVC_PATH + "/{video_id}/likedby", response_model=List[str])
def get_users_who_liked_video(video_id: int, tracker: LikeTracker = Depends(get_like_tracker)):
    return sorted(tracker.list_likers(video_id))


@router.post(VIDEO_DATA_PATH, response_model=VideoStatus)
def set_video_data(
    video_id: int,
    data: UploadFile = File(...),
    store: VideoStore = Depends(get_store),
    data_manager: VideoDataManager = Depends(get_data_manager),
):
    """Upload the binary payload for a video (multipart field 'data')."""
    video = store.get(video_id)
    logger.info(f"Data upload request for video {video_id}: {data.filename}")

    data.file.seek(0, os.SEEK_END)
    file_size = data.file.tell()
    data.file.seek(0)

    if file_size > settings.max_upload_bytes:
        logger.warning(f"File too large: {file_size} bytes")
        raise HTTPException(
            status_code=status.HTTP_413_CONTENT_TOO_LARGE,
            detail=f"File size exceeds {settings.max_upload_bytes // (1024 * 1024)}MB",
        )

    if file_size == 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="File is empty",
        )

    data_manager.save_data(video, data.file)
    return VideoStatus(state=VideoState.READY)


@router.get(VIDEO_DATA_PATH)
def get_video_data(
    video_id: int,
    store: VideoStore = Depends(get_store),
    data_manager: VideoDataManager = Depends(get_data_manager),
):
    """Download the binary payload for a video."""
    video = store.get(video_id)
    if not data_manager.has_data(video):
        raise VideoDataError(video_id)

    local_path = data_manager.local_path(video)
    if local_path is not None:
        return FileResponse(local_path, media_type=video.content_type)

    # Remote payloads are spooled to disk past SPOOL_MAX_BYTES rather than held in memory
    spool = tempfile.SpooledTemporaryFile(max_size=SPOOL_MAX_BYTES)
    try:
        data_manager.copy_data(video, spool)
    except Exception:
        spool.close()
        raise
    spool.seek(0)
    return StreamingResponse(
        iter(lambda: spool.read(DOWNLOAD_CHUNK_SIZE), b""),
        media_type=video.content_type,
        background=BackgroundTask(spool.close),
    )
