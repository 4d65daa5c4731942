"""
Like tracking.
A user either likes a video or does not; like and unlike are the only
transitions, and each runs as one atomic likers update on the store.
"""
import logging
from typing import Set
from videosvc.core.errors import InvalidOperationError
from videosvc.core.video_store import VideoStore
from videosvc.schemas.video import Video

logger = logging.getLogger(__name__)


class LikeTracker:
    def __init__(self, store: VideoStore):
        self.store = store

    def like(self, video_id: int, username: str) -> Video:
        """Record that ``username`` likes the video. Liking twice is rejected."""

        def add_liker(likers: Set[str]) -> Set[str]:
            if username in likers:
                raise InvalidOperationError(f"User {username} cannot like video {video_id} twice")
            likers.add(username)
            return likers

        try:
            video = self.store.update_likers(video_id, add_liker)
        except InvalidOperationError as e:
            logger.warning(e.message)
            raise
        logger.info(f"User {username} liked video {video_id} (likes={video.likes})")
        return video

    def unlike(self, video_id: int, username: str) -> Video:
        """Withdraw a like. Rejected unless ``username`` currently likes the video."""

        def remove_liker(likers: Set[str]) -> Set[str]:
            if username not in likers:
                raise InvalidOperationError(f"User {username} cannot unlike video {video_id}")
            likers.discard(username)
            return likers

        try:
            video = self.store.update_likers(video_id, remove_liker)
        except InvalidOperationError as e:
            logger.warning(e.message)
            raise
        logger.info(f"User {username} unliked video {video_id} (likes={video.likes})")
        return video

    def list_likers(self, video_id: int) -> Set[str]:
        return set(self.store.get(video_id).users_who_liked)
