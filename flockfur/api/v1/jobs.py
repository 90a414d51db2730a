"""
==============================================================================
Job Endpoints
==============================================================================

Job posting, browsing and status changes.

Workflow:
--------
    POST  /jobs                      client posts a job (OPEN)
    GET   /jobs/open                 cleaners browse open jobs
    POST  /jobs/{id}/start           PENDING -> IN_PROGRESS
    POST  /jobs/{id}/complete        IN_PROGRESS -> COMPLETED
    POST  /jobs/{id}/confirm         COMPLETED -> CONFIRMED (+ checkout URL)
    POST  /jobs/{id}/cancel          OPEN/PENDING -> CANCELLED
    PATCH /jobs/{id}/status          any of the four above by target status

==============================================================================
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from flockfur.config import Settings, get_settings
from flockfur.db.database import get_db
from flockfur.db.models import AnimalType, EnclosureType, JobStatus, User
from flockfur.core.dependencies import (
    get_current_user,
    get_notifier,
    get_optional_payment_gateway,
    get_pagination,
    require_client_or_admin,
)
from flockfur.integrations import PaymentGateway
from flockfur.services.job_service import JobService
from flockfur.services.notification_service import NotificationService
from flockfur.schemas.common import PaginatedResponse
from flockfur.schemas.job import (
    JobCreate,
    JobDetail,
    JobResponse,
    JobStatusResponse,
    JobStatusUpdate,
)


router = APIRouter(prefix="/jobs", tags=["Jobs"])


class JobController:
    """Controller for job operations."""

    def __init__(
        self,
        db: Session,
        notifier: Optional[NotificationService] = None,
        payments: Optional[PaymentGateway] = None,
        settings: Optional[Settings] = None,
    ):
        self._service = JobService(db, notifier, payments, settings)

    def create(self, data: JobCreate, user: User) -> JobResponse:
        job = self._service.create_job(data, user)
        return JobResponse(job=JobDetail.model_validate(job))

    def list_mine(
        self,
        user: User,
        job_status: Optional[JobStatus],
        pagination: dict
    ) -> PaginatedResponse[JobDetail]:
        jobs, total = self._service.list_jobs(
            user,
            status=job_status,
            offset=pagination["offset"],
            limit=pagination["page_size"]
        )
        return PaginatedResponse[JobDetail].create(
            items=[JobDetail.model_validate(j) for j in jobs],
            total=total,
            page=pagination["page"],
            page_size=pagination["page_size"]
        )

    def list_open(
        self,
        animal_type: Optional[AnimalType],
        enclosure_type: Optional[EnclosureType],
        pagination: dict
    ) -> PaginatedResponse[JobDetail]:
        jobs, total = self._service.list_open_jobs(
            animal_type=animal_type,
            enclosure_type=enclosure_type,
            offset=pagination["offset"],
            limit=pagination["page_size"]
        )
        return PaginatedResponse[JobDetail].create(
            items=[JobDetail.model_validate(j) for j in jobs],
            total=total,
            page=pagination["page"],
            page_size=pagination["page_size"]
        )

    def get(self, job_id: str, user: User) -> JobResponse:
        job = self._service.get_job_for_user(job_id, user)
        return JobResponse(job=JobDetail.model_validate(job))

    def update_status(self, job_id: str, target: JobStatus, user: User) -> JobStatusResponse:
        job, checkout_url = self._service.update_status(job_id, target, user)
        return JobStatusResponse(job=JobDetail.model_validate(job), checkout_url=checkout_url)


@router.post("", response_model=JobResponse, status_code=status.HTTP_201_CREATED)
async def create_job(
    request: JobCreate,
    user: User = Depends(require_client_or_admin),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    """Post a new job."""
    controller = JobController(db, settings=settings)
    return controller.create(request, user)


@router.get("", response_model=PaginatedResponse[JobDetail])
async def list_my_jobs(
    job_status: Optional[JobStatus] = Query(None, alias="status"),
    pagination: dict = Depends(get_pagination),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    List the caller's jobs.

    Clients see jobs they posted, cleaners jobs assigned to them, admins all.
    """
    controller = JobController(db)
    return controller.list_mine(user, job_status, pagination)


@router.get("/open", response_model=PaginatedResponse[JobDetail])
async def list_open_jobs(
    animal_type: Optional[AnimalType] = Query(None),
    enclosure_type: Optional[EnclosureType] = Query(None),
    pagination: dict = Depends(get_pagination),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Browse open jobs, newest first."""
    controller = JobController(db)
    return controller.list_open(animal_type, enclosure_type, pagination)


@router.get("/{job_id}", response_model=JobResponse)
async def get_job(
    job_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get a job the caller is allowed to see."""
    controller = JobController(db)
    return controller.get(job_id, user)


@router.patch("/{job_id}/status", response_model=JobStatusResponse)
async def update_job_status(
    job_id: str,
    request: JobStatusUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    notifier: NotificationService = Depends(get_notifier),
    payments: Optional[PaymentGateway] = Depends(get_optional_payment_gateway),
    settings: Settings = Depends(get_settings)
):
    """Change a job's status (start, complete, confirm or cancel)."""
    controller = JobController(db, notifier, payments, settings)
    return controller.update_status(job_id, request.status, user)


@router.post("/{job_id}/start", response_model=JobStatusResponse)
async def start_job(
    job_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    notifier: NotificationService = Depends(get_notifier),
    settings: Settings = Depends(get_settings)
):
    """Assigned cleaner starts the work."""
    controller = JobController(db, notifier, settings=settings)
    return controller.update_status(job_id, JobStatus.IN_PROGRESS, user)


@router.post("/{job_id}/complete", response_model=JobStatusResponse)
async def complete_job(
    job_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    notifier: NotificationService = Depends(get_notifier),
    settings: Settings = Depends(get_settings)
):
    """Assigned cleaner marks the work done; needs an AFTER photo."""
    controller = JobController(db, notifier, settings=settings)
    return controller.update_status(job_id, JobStatus.COMPLETED, user)


@router.post("/{job_id}/confirm", response_model=JobStatusResponse)
async def confirm_job(
    job_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    notifier: NotificationService = Depends(get_notifier),
    payments: Optional[PaymentGateway] = Depends(get_optional_payment_gateway),
    settings: Settings = Depends(get_settings)
):
    """Client confirms the work; returns a checkout URL when payment can start."""
    controller = JobController(db, notifier, payments, settings)
    return controller.update_status(job_id, JobStatus.CONFIRMED, user)


@router.post("/{job_id}/cancel", response_model=JobStatusResponse)
async def cancel_job(
    job_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    """Client or admin cancels an open or pending job."""
    controller = JobController(db, settings=settings)
    return controller.update_status(job_id, JobStatus.CANCELLED, user)
