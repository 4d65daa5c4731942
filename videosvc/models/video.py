from datetime import datetime, timezone
from sqlalchemy import Column, String, DateTime, Integer, ForeignKey
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


class VideoRecord(Base):
    __tablename__ = "videos"

    id = Column(Integer, primary_key=True, autoincrement=False)  # Assigned by the store
    title = Column(String, nullable=False, index=True)
    duration = Column(Integer, nullable=False)
    subject = Column(String, nullable=True)
    content_type = Column(String, nullable=False, default="video/mpeg")
    data_url = Column(String, nullable=False)
    created_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))

    likers = relationship(
        "VideoLike",
        back_populates="video",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class VideoLike(Base):
    __tablename__ = "video_likes"

    # Composite key: a user can like a given video at most once
    video_id = Column(Integer, ForeignKey("videos.id"), primary_key=True)
    username = Column(String, primary_key=True)
    created_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))

    video = relationship("VideoRecord", back_populates="likers")
