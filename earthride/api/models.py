"""Pydantic v2 request/response models for the content API."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from earthride.records.blog import BlogPost
from earthride.records.drive import Difficulty, DriveData, DriveStatus


class BlogBatchRequest(BaseModel):
    """``POST /api/blog`` body: ``{"blogs": [...]}``."""

    blogs: list[BlogPost]


class BlogListResponse(BaseModel):
    success: bool = True
    data: list[BlogPost]


class UpsertResponse(BaseModel):
    success: bool = True
    message: str
    updated: int
    added: int


class AddBlogResponse(BaseModel):
    success: bool
    id: int | None = None
    message: str | None = None


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class DriveBatchRequest(BaseModel):
    """``PUT /api/drives`` body: ``{"drives": [...]}``."""

    drives: list[DriveData]


class DrivePatch(BaseModel):
    """Partial drive update; only fields present in the JSON body are applied."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str | None = None
    location: str | None = None
    date: str | None = None
    participants: int | None = Field(None, ge=0)
    trees_target: int | None = Field(None, ge=0)
    status: DriveStatus | None = None
    registration_open: bool | None = None
    description: str | None = None
    organizer: str | None = None
    contact_email: str | None = None
    registration_deadline: str | None = None
    meeting_point: str | None = None
    duration: str | None = None
    difficulty: Difficulty | None = None
    logo: str | None = None


class DriveResponse(BaseModel):
    success: bool = True
    data: DriveData


class DriveListResponse(BaseModel):
    success: bool = True
    data: list[DriveData]


class AdminListResponse(BaseModel):
    data: list[dict[str, str]]


class BannerResponse(BaseModel):
    """Current banner slide; ``slide`` is ``None`` when nothing is shown."""

    loading: bool
    slide: dict[str, Any] | None = None


class LiveResponse(BaseModel):
    status: str = "alive"


class HealthResponse(BaseModel):
    status: str
    version: str
    sheets_available: bool
    banner_running: bool = False
    environment: str = "development"
