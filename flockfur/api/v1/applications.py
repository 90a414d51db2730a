"""
==============================================================================
Application Endpoints
==============================================================================

Cleaners apply to open jobs; the job owner accepts one application.

==============================================================================
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from flockfur.db.database import get_db
from flockfur.db.models import ApplicationStatus, User
from flockfur.core.dependencies import get_current_user, get_notifier, require_cleaner
from flockfur.services.application_service import ApplicationService
from flockfur.services.notification_service import NotificationService
from flockfur.schemas.application import (
    AcceptApplicationResponse,
    ApplicationCreate,
    ApplicationDetail,
    ApplicationListResponse,
    ApplicationResponse,
)
from flockfur.schemas.job import JobDetail


router = APIRouter(tags=["Applications"])


class ApplicationController:
    """Controller for application operations."""

    def __init__(self, db: Session, notifier: Optional[NotificationService] = None):
        self._service = ApplicationService(db, notifier)

    @staticmethod
    def _list(applications) -> ApplicationListResponse:
        return ApplicationListResponse(
            applications=[ApplicationDetail.from_model(a) for a in applications],
            total=len(applications)
        )

    def apply(self, job_id: str, cleaner: User, data: ApplicationCreate) -> ApplicationResponse:
        application = self._service.apply(job_id, cleaner, data)
        return ApplicationResponse(application=ApplicationDetail.from_model(application))

    def accept(self, application_id: str, user: User) -> AcceptApplicationResponse:
        application, job = self._service.accept(application_id, user)
        return AcceptApplicationResponse(
            application=ApplicationDetail.from_model(application),
            job=JobDetail.model_validate(job)
        )

    def list_for_job(self, job_id: str, user: User) -> ApplicationListResponse:
        return self._list(self._service.list_for_job(job_id, user))

    def list_mine(self, cleaner: User, app_status: Optional[ApplicationStatus]) -> ApplicationListResponse:
        return self._list(self._service.list_for_cleaner(cleaner, app_status))


@router.post(
    "/jobs/{job_id}/applications",
    response_model=ApplicationResponse,
    status_code=status.HTTP_201_CREATED
)
async def apply_to_job(
    job_id: str,
    request: ApplicationCreate,
    cleaner: User = Depends(require_cleaner),
    db: Session = Depends(get_db),
    notifier: NotificationService = Depends(get_notifier)
):
    """Apply to an open job (Cleaner only)."""
    controller = ApplicationController(db, notifier)
    return controller.apply(job_id, cleaner, request)


@router.get("/jobs/{job_id}/applications", response_model=ApplicationListResponse)
async def list_job_applications(
    job_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Applications on a job (owner or admin)."""
    controller = ApplicationController(db)
    return controller.list_for_job(job_id, user)


@router.get("/applications/mine", response_model=ApplicationListResponse)
async def list_my_applications(
    app_status: Optional[ApplicationStatus] = Query(None, alias="status"),
    cleaner: User = Depends(require_cleaner),
    db: Session = Depends(get_db)
):
    """The calling cleaner's applications, newest first."""
    controller = ApplicationController(db)
    return controller.list_mine(cleaner, app_status)


@router.post("/applications/{application_id}/accept", response_model=AcceptApplicationResponse)
async def accept_application(
    application_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    notifier: NotificationService = Depends(get_notifier)
):
    """
    Accept an application.

    Assigns the cleaner, rejects the other applications and moves the job
    to PENDING with the agreed price split.
    """
    controller = ApplicationController(db, notifier)
    return controller.accept(application_id, user)
