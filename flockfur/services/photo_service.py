"""
==============================================================================
Photo Service Module
==============================================================================

Two-phase photo upload for before/after/issue pictures.

Upload Flow:
-----------
    1. create_upload_url   -> presigned PUT URL + public URL + key
    2. client uploads the file straight to storage
    3. record_photo        -> Photo row pointing at the key

Who May Upload:
--------------
    BEFORE          owning client, admin
    AFTER / ISSUE   assigned cleaner, admin

The object itself is never checked for existence; a missing file shows up
as a broken image, not as an error here.

==============================================================================
"""

from __future__ import annotations

import logging
import os
import time
from typing import List, Optional

from sqlalchemy.orm import Session

from flockfur.core import exceptions
from flockfur.db.models import Job, Photo, PhotoType, User, UserRole
from flockfur.integrations import StorageGateway


# Module logger
logger = logging.getLogger(__name__)


DEFAULT_EXTENSION = "jpg"


def build_photo_key(job_id: str, photo_type: PhotoType, filename: str, now_ms: Optional[int] = None) -> str:
    """
    Storage key for a new photo.

    Example:
        >>> build_photo_key("abc", PhotoType.AFTER, "coop.PNG", now_ms=1700000000000)
        'jobs/abc/after/1700000000000.png'
    """
    ext = os.path.splitext(filename)[1].lstrip(".").lower()
    if not ext or not ext.isalnum():
        ext = DEFAULT_EXTENSION
    timestamp = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"jobs/{job_id}/{photo_type.value}/{timestamp}.{ext}"


class PhotoService:
    """
    Example:
        >>> service = PhotoService(db_session, storage)
        >>> upload_url, public_url, key = service.create_upload_url(
        ...     job.id, cleaner, PhotoType.AFTER, "coop.jpg", "image/jpeg")
        >>> photo = service.record_photo(job.id, cleaner, key, PhotoType.AFTER)
    """

    def __init__(self, db: Session, storage: Optional[StorageGateway] = None) -> None:
        self._db = db
        self._storage = storage

    def _get_job(self, job_id: str) -> Job:
        job = self._db.query(Job).filter(Job.id == job_id).first()
        if not job:
            raise exceptions.job_not_found(job_id)
        return job

    def _require_storage(self) -> StorageGateway:
        if self._storage is None:
            raise exceptions.storage_not_configured()
        return self._storage

    @staticmethod
    def can_upload(job: Job, user: User, photo_type: PhotoType) -> bool:
        if user.role == UserRole.ADMIN:
            return True
        if photo_type == PhotoType.BEFORE:
            return job.client_id == user.id
        return job.cleaner_id is not None and job.cleaner_id == user.id

    def _check_upload(self, job: Job, user: User, photo_type: PhotoType) -> None:
        if not self.can_upload(job, user, photo_type):
            who = "the job owner" if photo_type == PhotoType.BEFORE else "the assigned cleaner"
            raise exceptions.forbidden(f"Only {who} can upload {photo_type.value} photos")

    def create_upload_url(
        self,
        job_id: str,
        user: User,
        photo_type: PhotoType,
        filename: str,
        content_type: str,
    ):
        """
        Returns:
            Tuple of (upload URL, public URL, key)

        Raises:
            AppException: JOB_NOT_FOUND, FORBIDDEN, VALIDATION_ERROR for a
                non-image content type, STORAGE_NOT_CONFIGURED
        """
        if not content_type.lower().startswith("image/"):
            raise exceptions.validation_error(
                "Only image uploads are allowed", {"content_type": content_type}
            )

        job = self._get_job(job_id)
        self._check_upload(job, user, photo_type)
        storage = self._require_storage()

        key = build_photo_key(job.id, photo_type, filename)
        upload_url = storage.get_upload_url(key, content_type)

        logger.info(f"Upload URL issued for {key} to {user.email}")
        return upload_url, storage.get_public_url(key), key

    def record_photo(
        self,
        job_id: str,
        user: User,
        key: str,
        photo_type: PhotoType,
        caption: Optional[str] = None,
    ) -> Photo:
        """
        Raises:
            AppException: JOB_NOT_FOUND, FORBIDDEN, VALIDATION_ERROR when the
                key was not issued for this job and photo type
        """
        job = self._get_job(job_id)
        self._check_upload(job, user, photo_type)
        storage = self._require_storage()

        expected_prefix = f"jobs/{job.id}/{photo_type.value}/"
        if not key.startswith(expected_prefix) or ".." in key:
            raise exceptions.validation_error(
                "Key does not belong to this job and photo type",
                {"key": key, "expected_prefix": expected_prefix}
            )

        photo = Photo(
            job_id=job.id,
            uploader_id=user.id,
            type=photo_type,
            s3_key=key,
            url=storage.get_public_url(key),
            caption=caption.strip() if caption and caption.strip() else None,
        )
        self._db.add(photo)
        self._db.commit()
        self._db.refresh(photo)

        logger.info(f"✅ Photo recorded: {photo.type.value} for job {job.id} by {user.email}")
        return photo

    def list_photos(self, job_id: str, photo_type: Optional[PhotoType] = None) -> List[Photo]:
        job = self._get_job(job_id)

        query = self._db.query(Photo).filter(Photo.job_id == job.id)
        if photo_type is not None:
            query = query.filter(Photo.type == photo_type)

        return query.order_by(Photo.created_at.asc()).all()
