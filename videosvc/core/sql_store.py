"""
SQL-backed video store.
Keeps videos and their likes in two tables through SQLAlchemy, so state
survives restarts for as long as the database does.
"""
import logging
from typing import List
from sqlalchemy import create_engine, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker
from videosvc.core.errors import InvalidOperationError, VideoNotFoundError
from videosvc.core.video_store import LikersMutation, VideoStore
from videosvc.models.video import Base, VideoLike, VideoRecord
from videosvc.schemas.video import Video, VideoCreate

logger = logging.getLogger(__name__)


class SqlVideoStore(VideoStore):
    def __init__(self, base_url: str, db_url: str):
        super().__init__(base_url)
        connect_args = {"check_same_thread": False} if db_url.startswith("sqlite") else {}
        self.engine = create_engine(db_url, connect_args=connect_args)
        Base.metadata.create_all(bind=self.engine)
        self._session_factory = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
        logger.info(f"SQL video store ready: {self.engine.url.render_as_string(hide_password=True)}")

    def dispose(self):
        """Release pooled connections."""
        self.engine.dispose()

    def add(self, video: VideoCreate) -> Video:
        with self._lock, self._session_factory() as db:
            video_id = video.id
            if not video_id:
                # Ids are never deleted, so max + 1 is a monotonic counter
                video_id = (db.query(func.max(VideoRecord.id)).scalar() or 0) + 1
            elif db.get(VideoRecord, video_id) is not None:
                raise InvalidOperationError(f"Video with id {video_id} already exists")

            record = VideoRecord(
                id=video_id,
                title=video.title,
                duration=video.duration,
                subject=video.subject,
                content_type=video.content_type,
                data_url=self.data_url(video_id),
            )
            db.add(record)

            try:
                db.commit()
            except IntegrityError as e:
                # Another process claimed the id first
                db.rollback()
                logger.warning(f"Duplicate video id {video_id}: {e}")
                raise InvalidOperationError(f"Video with id {video_id} already exists") from e
            except Exception as e:
                logger.error(f"Database error while saving video {video_id}: {e}")
                db.rollback()
                raise
            db.refresh(record)
            logger.info(f"Added video {video_id}: title={video.title!r}, duration={video.duration}")
            return self._to_schema(record)

    def get(self, video_id: int) -> Video:
        with self._session_factory() as db:
            record = db.get(VideoRecord, video_id)
            if record is None:
                raise VideoNotFoundError(video_id)
            return self._to_schema(record)

    def list_videos(self) -> List[Video]:
        with self._session_factory() as db:
            records = db.query(VideoRecord).order_by(VideoRecord.id).all()
            return [self._to_schema(record) for record in records]

    def find_by_title(self, title: str) -> List[Video]:
        with self._session_factory() as db:
            records = (
                db.query(VideoRecord)
                .filter(VideoRecord.title == title)
                .order_by(VideoRecord.id)
                .all()
            )
            return [self._to_schema(record) for record in records]

    def find_by_duration_less_than(self, duration: int) -> List[Video]:
        with self._session_factory() as db:
            records = (
                db.query(VideoRecord)
                .filter(VideoRecord.duration < duration)
                .order_by(VideoRecord.id)
                .all()
            )
            return [self._to_schema(record) for record in records]

    def update_likers(self, video_id: int, mutate: LikersMutation) -> Video:
        with self._lock, self._session_factory() as db:
            record = db.get(VideoRecord, video_id)
            if record is None:
                raise VideoNotFoundError(video_id)

            current = {like.username for like in record.likers}
            likers = set(mutate(set(current)))

            record.likers = [like for like in record.likers if like.username in likers]
            for username in sorted(likers - current):
                record.likers.append(VideoLike(username=username))

            try:
                db.commit()
            except IntegrityError as e:
                # Another process wrote the same (video, user) pair first
                db.rollback()
                logger.warning(f"Conflicting like update on video {video_id}: {e}")
                raise InvalidOperationError(f"Conflicting like update on video {video_id}") from e
            db.refresh(record)
            return self._to_schema(record)

    @staticmethod
    def _to_schema(record: VideoRecord) -> Video:
        return Video(
            id=record.id,
            title=record.title,
            duration=record.duration,
            subject=record.subject,
            content_type=record.content_type,
            data_url=record.data_url,
            users_who_liked={like.username for like in record.likers},
        )
