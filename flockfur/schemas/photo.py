"""
==============================================================================
Photo Schemas Module
==============================================================================

Two-phase upload: request a presigned URL, upload directly to storage,
then record the photo.

==============================================================================
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator
from flockfur.db.models import PhotoType


class UploadUrlRequest(BaseModel):
    """Request for a presigned upload URL."""
    type: PhotoType
    filename: str = Field(..., min_length=1, max_length=255)
    content_type: str = Field(..., min_length=1, max_length=100)

    @field_validator("content_type")
    @classmethod
    def validate_image(cls, v: str) -> str:
        v = v.strip().lower()
        if not v.startswith("image/"):
            raise ValueError("Only image uploads are allowed")
        return v


class UploadUrlResponse(BaseModel):
    success: bool = Field(default=True)
    upload_url: str
    public_url: str
    key: str


class PhotoCreate(BaseModel):
    """Record a photo after it was uploaded to the returned key."""
    key: str = Field(..., min_length=1, max_length=500)
    type: PhotoType
    caption: Optional[str] = Field(default=None, max_length=500)


class PhotoDetail(BaseModel):
    id: str
    job_id: str
    uploader_id: str
    type: PhotoType
    url: str
    caption: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class PhotoResponse(BaseModel):
    success: bool = Field(default=True)
    photo: PhotoDetail


class PhotoListResponse(BaseModel):
    success: bool = Field(default=True)
    photos: List[PhotoDetail]
    total: int
