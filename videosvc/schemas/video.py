from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, computed_field, field_serializer
from pydantic.alias_generators import to_camel

DEFAULT_CONTENT_TYPE = "video/mpeg"


class VideoCreate(BaseModel):
    """Request body for POST /video. Server-owned fields (dataUrl, likes, usersWhoLiked) are ignored."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: int = Field(0, ge=0)  # 0 means "assign a new id"
    title: str
    duration: int = Field(ge=0)  # Seconds
    subject: Optional[str] = None
    content_type: str = DEFAULT_CONTENT_TYPE


class Video(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: int
    title: str
    duration: int
    subject: Optional[str] = None
    content_type: str = DEFAULT_CONTENT_TYPE
    data_url: str
    users_who_liked: set[str] = Field(default_factory=set)

    @computed_field
    @property
    def likes(self) -> int:
        return len(self.users_who_liked)

    @field_serializer("users_who_liked")
    def serialize_users_who_liked(self, users: set[str]) -> list[str]:
        return sorted(users)


class VideoState(str, Enum):
    PROCESSING = "PROCESSING"
    READY = "READY"


class VideoStatus(BaseModel):
    state: VideoState
