import logging
from typing import BinaryIO, Optional
import boto3
from botocore.exceptions import ClientError
from videosvc.core.config import settings
from videosvc.core.errors import VideoDataError
from videosvc.schemas.video import Video
from videosvc.services.data_manager import VideoDataManager

logger = logging.getLogger(__name__)


class S3VideoDataManager(VideoDataManager):
    """Stores one S3 object per video."""

    def __init__(self, bucket: Optional[str] = None, region: Optional[str] = None, client=None):
        self.s3_client = client or boto3.client("s3", region_name=region or settings.aws_region)
        self.bucket = bucket or settings.s3_bucket

    @staticmethod
    def get_s3_key(video: Video) -> str:
        return f"videos/{video.id}/data.mpg"

    def save_data(self, video: Video, stream: BinaryIO) -> None:
        """Upload payload to S3."""
        s3_key = self.get_s3_key(video)
        try:
            self.s3_client.upload_fileobj(
                stream,
                self.bucket,
                s3_key,
                ExtraArgs={"ContentType": video.content_type},
            )
        except ClientError as e:
            logger.error(f"Error uploading to S3: {e}")
            raise VideoDataError(video.id, f"Failed to save data for video {video.id}") from e
        logger.info(f"Uploaded data for video {video.id} to s3://{self.bucket}/{s3_key}")

    def has_data(self, video: Video) -> bool:
        try:
            self.s3_client.head_object(Bucket=self.bucket, Key=self.get_s3_key(video))
            return True
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code")
            if code not in ("404", "NoSuchKey", "NotFound"):
                logger.error(f"Error checking S3 object for video {video.id}: {e}")
            return False

    def copy_data(self, video: Video, sink: BinaryIO) -> None:
        """Download payload from S3 into sink."""
        s3_key = self.get_s3_key(video)
        try:
            self.s3_client.download_fileobj(self.bucket, s3_key, sink)
        except ClientError as e:
            logger.error(f"Error downloading from S3: {e}")
            raise VideoDataError(video.id) from e
        logger.info(f"Downloaded data for video {video.id} from s3://{self.bucket}/{s3_key}")
