from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class MediaUploadResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    permanent_url: str = Field(alias="permanentUrl")
    filename: str
    original_name: str | None = Field(default=None, alias="originalname")
    mime_type: str = Field(alias="mimetype")
    size: int
    uploaded_at: datetime = Field(alias="uploadedAt")


class MediaHealthResponse(BaseModel):
    status: str
    service: str
    storage_root: str
    storage_available: bool
    allowed_hosts: list[str]
    checked_at: datetime
