"""
Video store module.
Owns all video records: id assignment, lookups, filtered listings and the
atomic likers update the like tracker builds on.
"""
import logging
import threading
from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Set
from videosvc.core.errors import InvalidOperationError, VideoNotFoundError
from videosvc.schemas.video import Video, VideoCreate

logger = logging.getLogger(__name__)

LikersMutation = Callable[[Set[str]], Set[str]]


class VideoStore(ABC):
    """
    Base class for video stores.

    Every public operation is safe to call from concurrent request threads.
    Subclasses hold ``self._lock`` around id assignment and around the whole
    read-check-write sequence of ``update_likers``.
    """

    def __init__(self, base_url: str):
        self.base_url = base_url.rstrip("/")
        self._lock = threading.RLock()

    def data_url(self, video_id: int) -> str:
        return f"{self.base_url}/video/{video_id}/data"

    @abstractmethod
    def add(self, video: VideoCreate) -> Video:
        """
        Store a video and return the stored record.

        An id of 0 assigns the next unused id. A non-zero id is used as
        given; raises InvalidOperationError if a video already has it.
        """

    @abstractmethod
    def get(self, video_id: int) -> Video:
        """Return the video with this id or raise VideoNotFoundError."""

    @abstractmethod
    def list_videos(self) -> List[Video]:
        """Return all videos in ascending id order."""

    @abstractmethod
    def find_by_title(self, title: str) -> List[Video]:
        """Return videos whose title equals ``title`` exactly."""

    @abstractmethod
    def find_by_duration_less_than(self, duration: int) -> List[Video]:
        """Return videos with duration strictly below ``duration``."""

    @abstractmethod
    def update_likers(self, video_id: int, mutate: LikersMutation) -> Video:
        """
        Atomically replace a video's likers with ``mutate(current_likers)``.

        ``mutate`` receives a copy of the current set and may raise to abort;
        the stored record is left untouched in that case.
        """


class InMemoryVideoStore(VideoStore):
    """Dict-backed store. State lives as long as the instance."""

    def __init__(self, base_url: str):
        super().__init__(base_url)
        self._videos: Dict[int, Video] = {}
        self._last_id = 0

    def add(self, video: VideoCreate) -> Video:
        with self._lock:
            if video.id and video.id in self._videos:
                raise InvalidOperationError(f"Video with id {video.id} already exists")
            video_id = video.id or self._last_id + 1
            # Auto-assigned ids must never land on a client-supplied one
            self._last_id = max(self._last_id, video_id)

            stored = Video(
                id=video_id,
                title=video.title,
                duration=video.duration,
                subject=video.subject,
                content_type=video.content_type,
                data_url=self.data_url(video_id),
            )
            self._videos[video_id] = stored
            logger.info(f"Added video {video_id}: title={video.title!r}, duration={video.duration}")
            return stored.model_copy(deep=True)

    def get(self, video_id: int) -> Video:
        with self._lock:
            video = self._videos.get(video_id)
            if video is None:
                raise VideoNotFoundError(video_id)
            return video.model_copy(deep=True)

    def list_videos(self) -> List[Video]:
        return self._select(lambda video: True)

    def find_by_title(self, title: str) -> List[Video]:
        return self._select(lambda video: video.title == title)

    def find_by_duration_less_than(self, duration: int) -> List[Video]:
        return self._select(lambda video: video.duration < duration)

    def update_likers(self, video_id: int, mutate: LikersMutation) -> Video:
        with self._lock:
            current = self._videos.get(video_id)
            if current is None:
                raise VideoNotFoundError(video_id)
            likers = set(mutate(set(current.users_who_liked)))
            updated = current.model_copy(update={"users_who_liked": likers})
            self._videos[video_id] = updated
            return updated.model_copy(deep=True)

    def _select(self, predicate: Callable[[Video], bool]) -> List[Video]:
        with self._lock:
            return [
                self._videos[video_id].model_copy(deep=True)
                for video_id in sorted(self._videos)
                if predicate(self._videos[video_id])
            ]
