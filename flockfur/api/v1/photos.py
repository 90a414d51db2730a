"""
==============================================================================
Photo Endpoints
==============================================================================

Two-phase upload of before/after/issue photos:

    1. POST /jobs/{id}/photos/upload-url   -> presigned PUT URL and key
    2. PUT  <upload_url>                   (straight to storage)
    3. POST /jobs/{id}/photos              -> record the uploaded key

==============================================================================
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from flockfur.db.database import get_db
from flockfur.db.models import PhotoType, User
from flockfur.core.dependencies import get_current_user, get_storage_gateway
from flockfur.integrations import StorageGateway
from flockfur.services.job_service import JobService
from flockfur.services.photo_service import PhotoService
from flockfur.schemas.photo import (
    PhotoCreate,
    PhotoDetail,
    PhotoListResponse,
    PhotoResponse,
    UploadUrlRequest,
    UploadUrlResponse,
)


router = APIRouter(prefix="/jobs/{job_id}/photos", tags=["Photos"])


class PhotoController:
    """Controller for photo operations."""

    def __init__(self, db: Session, storage: Optional[StorageGateway] = None):
        self._service = PhotoService(db, storage)
        self._jobs = JobService(db)

    def upload_url(self, job_id: str, user: User, data: UploadUrlRequest) -> UploadUrlResponse:
        upload_url, public_url, key = self._service.create_upload_url(
            job_id, user, data.type, data.filename, data.content_type
        )
        return UploadUrlResponse(upload_url=upload_url, public_url=public_url, key=key)

    def record(self, job_id: str, user: User, data: PhotoCreate) -> PhotoResponse:
        photo = self._service.record_photo(job_id, user, data.key, data.type, data.caption)
        return PhotoResponse(photo=PhotoDetail.model_validate(photo))

    def list_all(self, job_id: str, user: User, photo_type: Optional[PhotoType]) -> PhotoListResponse:
        self._jobs.get_job_for_user(job_id, user)
        photos = self._service.list_photos(job_id, photo_type)
        return PhotoListResponse(
            photos=[PhotoDetail.model_validate(p) for p in photos],
            total=len(photos)
        )


@router.post("/upload-url", response_model=UploadUrlResponse)
async def create_upload_url(
    job_id: str,
    request: UploadUrlRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    storage: StorageGateway = Depends(get_storage_gateway)
):
    """Get a presigned URL to upload a photo for this job."""
    controller = PhotoController(db, storage)
    return controller.upload_url(job_id, user, request)


@router.post("", response_model=PhotoResponse, status_code=status.HTTP_201_CREATED)
async def record_photo(
    job_id: str,
    request: PhotoCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    storage: StorageGateway = Depends(get_storage_gateway)
):
    """Record a photo that was uploaded to its presigned URL."""
    controller = PhotoController(db, storage)
    return controller.record(job_id, user, request)


@router.get("", response_model=PhotoListResponse)
async def list_photos(
    job_id: str,
    photo_type: Optional[PhotoType] = Query(None, alias="type"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Photos of a job, oldest first."""
    controller = PhotoController(db)
    return controller.list_all(job_id, user, photo_type)
