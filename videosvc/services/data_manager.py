"""
Video payload storage.
Associates each video id with its uploaded bytes. The API depends only on
save_data, has_data and copy_data, so backends are interchangeable.
"""
import logging
import os
import shutil
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import BinaryIO, Optional
from videosvc.core.errors import VideoDataError
from videosvc.schemas.video import Video

logger = logging.getLogger(__name__)


class VideoDataManager(ABC):
    @abstractmethod
    def save_data(self, video: Video, stream: BinaryIO) -> None:
        """Store the full contents of ``stream`` as the payload of ``video``."""

    @abstractmethod
    def has_data(self, video: Video) -> bool:
        """Return True if a payload has been stored for ``video``."""

    @abstractmethod
    def copy_data(self, video: Video, sink: BinaryIO) -> None:
        """Write the stored payload of ``video`` into ``sink``."""

    def local_path(self, video: Video) -> Optional[Path]:
        """Filesystem path of the payload, for backends that keep one on local disk."""
        return None


class LocalVideoDataManager(VideoDataManager):
    """Stores one file per video under ``data_dir``."""

    def __init__(self, data_dir: str):
        self.data_dir = Path(data_dir)
        os.makedirs(self.data_dir, exist_ok=True)

    def get_video_path(self, video: Video) -> Path:
        return self.data_dir / f"video{video.id}.mpg"

    def local_path(self, video: Video) -> Optional[Path]:
        return self.get_video_path(video)

    def save_data(self, video: Video, stream: BinaryIO) -> None:
        target = self.get_video_path(video)
        temp_file_path = None
        try:
            # Each upload gets its own temp file, so overlapping uploads never share one
            with tempfile.NamedTemporaryFile(
                mode="wb",
                dir=self.data_dir,
                prefix=f"video{video.id}-",
                suffix=".part",
                delete=False,
            ) as temp_file:
                temp_file_path = temp_file.name
                shutil.copyfileobj(stream, temp_file)
            # Readers never see a half-written payload
            os.replace(temp_file_path, target)
        except OSError as e:
            logger.error(f"Failed to save data for video {video.id}: {e}")
            if temp_file_path and os.path.exists(temp_file_path):
                os.unlink(temp_file_path)
            raise VideoDataError(video.id, f"Failed to save data for video {video.id}") from e
        logger.info(f"Saved data for video {video.id} to {target}")

    def has_data(self, video: Video) -> bool:
        return self.get_video_path(video).is_file()

    def copy_data(self, video: Video, sink: BinaryIO) -> None:
        path = self.get_video_path(video)
        if not path.is_file():
            raise VideoDataError(video.id)
        try:
            with open(path, "rb") as source:
                shutil.copyfileobj(source, sink)
        except OSError as e:
            logger.error(f"Failed to read data for video {video.id}: {e}")
            raise VideoDataError(video.id, f"Failed to read data for video {video.id}") from e
