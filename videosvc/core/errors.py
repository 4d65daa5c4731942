"""
Error taxonomy for the video service.

Stores, the like tracker and the data managers raise these; the app maps
each one to an HTTP status in a single exception handler.
"""
from fastapi import status


class VideoServiceError(Exception):
    """Base error. Rejected requests surface as 400 unless a subclass says otherwise."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidOperationError(VideoServiceError):
    """The request would break a like/unlike invariant."""


class VideoNotFoundError(VideoServiceError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, video_id: int):
        super().__init__(f"Missing video with id {video_id}")
        self.video_id = video_id


class VideoDataError(VideoServiceError):
    """Reading or writing a video's binary payload failed."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, video_id: int, message: str = ""):
        super().__init__(message or f"Missing data for video {video_id}")
        self.video_id = video_id
