"""
==============================================================================
Job Service Module
==============================================================================

Job posting, retrieval and the user-driven part of the job workflow.

Workflow Operations:
-------------------
- start_job     PENDING      -> IN_PROGRESS  (assigned cleaner / admin)
- complete_job  IN_PROGRESS  -> COMPLETED    (assigned cleaner / admin,
                                              needs an AFTER photo)
- confirm_job   COMPLETED    -> CONFIRMED    (owning client / admin, then
                                              opens a payment checkout)
- cancel_job    OPEN/PENDING -> CANCELLED    (owning client / admin)
- update_status dispatches to the four above

Acceptance (OPEN -> PENDING) lives in ApplicationService, disputes in
DisputeService and payment (CONFIRMED -> PAID) in PaymentService. Every
status change goes through ``job_lifecycle.check_transition`` first.

Visibility:
----------
Admins see every job, clients see their own, cleaners see OPEN jobs plus
jobs they are assigned to or have applied to.

==============================================================================
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from flockfur.config import Settings, get_settings
from flockfur.core import exceptions
from flockfur.db.models import (
    AnimalType,
    EnclosureType,
    Job,
    JobApplication,
    JobStatus,
    Photo,
    PhotoType,
    User,
    UserRole,
)
from flockfur.integrations import PaymentGateway
from flockfur.schemas.job import JobCreate
from flockfur.services import job_lifecycle
from flockfur.services.notification_service import NotificationService


# Module logger
logger = logging.getLogger(__name__)


class JobService:
    """
    Service for job management and workflow operations.

    Example:
        >>> service = JobService(db_session, notifier, payments)
        >>> job = service.create_job(JobCreate(...), client)
        >>> job = service.start_job(job.id, cleaner)
        >>> job = service.complete_job(job.id, cleaner)
        >>> job, checkout_url = service.confirm_job(job.id, client)
    """

    def __init__(
        self,
        db: Session,
        notifier: Optional[NotificationService] = None,
        payments: Optional[PaymentGateway] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._db = db
        self._notifier = notifier
        self._payments = payments
        self._settings = settings or get_settings()

    # =========================================================================
    # CREATE
    # =========================================================================

    def create_job(self, data: JobCreate, user: User) -> Job:
        """
        Post a new OPEN job in the service area.

        Raises:
            AppException: CLIENT_REQUIRED if the user is a cleaner
        """
        if user.role not in (UserRole.CLIENT, UserRole.ADMIN):
            raise exceptions.client_required()

        job = Job(
            client_id=user.id,
            title=data.title,
            description=data.description,
            animal_types=[animal.value for animal in data.animal_types],
            enclosure_type=data.enclosure_type,
            enclosure_size=data.enclosure_size,
            number_of_animals=data.number_of_animals,
            address=data.address,
            city=self._settings.service_city,
            state=self._settings.service_state,
            zip_code=data.zip_code,
            scheduled_date=data.scheduled_date,
            suggested_price=data.suggested_price,
            status=JobStatus.OPEN,
        )

        self._db.add(job)
        self._db.commit()
        self._db.refresh(job)

        logger.info(f"✅ Job created: {job.id} '{job.title}' by {user.email}")
        return job

    # =========================================================================
    # READ
    # =========================================================================

    def get_job(self, job_id: str) -> Job:
        """
        Raises:
            AppException: JOB_NOT_FOUND
        """
        job = self._db.query(Job).filter(Job.id == job_id).first()

        if not job:
            raise exceptions.job_not_found(job_id)

        return job

    def can_view(self, job: Job, user: User) -> bool:
        if user.role == UserRole.ADMIN:
            return True
        if user.role == UserRole.CLIENT:
            return job.client_id == user.id
        if user.role == UserRole.CLEANER:
            if job.status == JobStatus.OPEN or job.cleaner_id == user.id:
                return True
            applied = self._db.query(JobApplication.id).filter(
                JobApplication.job_id == job.id,
                JobApplication.cleaner_id == user.id,
            ).first()
            return applied is not None
        return False

    def get_job_for_user(self, job_id: str, user: User) -> Job:
        """
        Get a job the user is allowed to see.

        Raises:
            AppException: JOB_NOT_FOUND, FORBIDDEN
        """
        job = self.get_job(job_id)

        if not self.can_view(job, user):
            raise exceptions.forbidden("You do not have access to this job")

        return job

    def list_jobs(
        self,
        user: User,
        status: Optional[JobStatus] = None,
        offset: int = 0,
        limit: int = 20,
    ) -> Tuple[List[Job], int]:
        """
        List the user's own jobs, newest first.

        Clients get jobs they posted, cleaners jobs assigned to them, admins
        every job.

        Returns:
            Tuple of (jobs on this page, total count)
        """
        query = self._db.query(Job)

        if user.role == UserRole.CLIENT:
            query = query.filter(Job.client_id == user.id)
        elif user.role == UserRole.CLEANER:
            query = query.filter(Job.cleaner_id == user.id)

        if status is not None:
            query = query.filter(Job.status == status)

        total = query.count()
        jobs = query.order_by(Job.created_at.desc()).offset(offset).limit(limit).all()
        return jobs, total

    def list_open_jobs(
        self,
        animal_type: Optional[AnimalType] = None,
        enclosure_type: Optional[EnclosureType] = None,
        offset: int = 0,
        limit: int = 20,
    ) -> Tuple[List[Job], int]:
        """Browse OPEN jobs, newest first, optionally filtered."""
        query = self._db.query(Job).filter(Job.status == JobStatus.OPEN)

        if enclosure_type is not None:
            query = query.filter(Job.enclosure_type == enclosure_type)

        jobs = query.order_by(Job.created_at.desc()).all()

        # animal_types is a JSON list; filter after loading
        if animal_type is not None:
            jobs = [job for job in jobs if animal_type.value in (job.animal_types or [])]

        return jobs[offset:offset + limit], len(jobs)

    # =========================================================================
    # WORKFLOW
    # =========================================================================

    def _transition(self, job_id: str, target: JobStatus, user: User) -> Job:
        job = self.get_job(job_id)
        job_lifecycle.check_user_transition(job, target, user)
        return job

    def _commit(self, job: Job) -> Job:
        self._db.commit()
        self._db.refresh(job)
        return job

    def start_job(self, job_id: str, user: User) -> Job:
        """PENDING -> IN_PROGRESS; notifies the client."""
        job = self._transition(job_id, JobStatus.IN_PROGRESS, user)

        job_lifecycle.apply_transition(job, JobStatus.IN_PROGRESS)
        self._commit(job)

        logger.info(f"✅ Job started: {job.id} by {user.email}")
        if self._notifier:
            self._notifier.job_started(job)
        return job

    def complete_job(self, job_id: str, user: User) -> Job:
        """
        IN_PROGRESS -> COMPLETED; notifies the client.

        Raises:
            AppException: VALIDATION_ERROR if no AFTER photo was recorded
                and photos are required
        """
        job = self._transition(job_id, JobStatus.COMPLETED, user)

        if self._settings.require_after_photo:
            has_after_photo = self._db.query(Photo.id).filter(
                Photo.job_id == job.id,
                Photo.type == PhotoType.AFTER,
            ).first()
            if has_after_photo is None:
                raise exceptions.validation_error(
                    "Upload at least one AFTER photo before completing the job",
                    {"job_id": job.id, "required_photo_type": PhotoType.AFTER.value}
                )

        job_lifecycle.apply_transition(job, JobStatus.COMPLETED)
        self._commit(job)

        logger.info(f"✅ Job completed: {job.id} by {user.email}")
        if self._notifier:
            self._notifier.job_completed(job)
        return job

    def confirm_job(self, job_id: str, user: User) -> Tuple[Job, Optional[str]]:
        """
        COMPLETED -> CONFIRMED, then try to open a payment checkout.

        The confirmation stands even if the checkout cannot be created; the
        client can retry payment from the job page.

        Returns:
            Tuple of (job, checkout URL or None)
        """
        job = self._transition(job_id, JobStatus.CONFIRMED, user)

        job_lifecycle.apply_transition(job, JobStatus.CONFIRMED)
        self._commit(job)

        logger.info(f"✅ Job confirmed: {job.id} by {user.email}")
        if self._notifier:
            self._notifier.job_confirmed(job)

        return job, self._start_checkout(job, user)

    def _start_checkout(self, job: Job, user: User) -> Optional[str]:
        if self._payments is None:
            logger.warning(f"⚠️ Payments not configured, no checkout for job {job.id}")
            return None

        # Imported here: PaymentService depends on this module
        from flockfur.services.payment_service import PaymentService

        try:
            session = PaymentService(
                self._db, self._payments, self._notifier, self._settings
            ).create_checkout(job.id, user)
        except exceptions.AppException as e:
            logger.error(f"❌ Checkout not created for job {job.id}: {e.code} {e.message}")
            return None

        return session.url

    def cancel_job(self, job_id: str, user: User) -> Job:
        """OPEN/PENDING -> CANCELLED."""
        job = self._transition(job_id, JobStatus.CANCELLED, user)

        job_lifecycle.apply_transition(job, JobStatus.CANCELLED)
        self._commit(job)

        logger.info(f"✅ Job cancelled: {job.id} by {user.email}")
        return job

    def update_status(
        self,
        job_id: str,
        target: JobStatus,
        user: User,
    ) -> Tuple[Job, Optional[str]]:
        """
        Generic status change endpoint.

        Returns:
            Tuple of (job, checkout URL when the job was confirmed)

        Raises:
            AppException: VALIDATION_ERROR for a status users cannot request
        """
        handlers: Dict[JobStatus, Callable[[str, User], Job]] = {
            JobStatus.IN_PROGRESS: self.start_job,
            JobStatus.COMPLETED: self.complete_job,
            JobStatus.CANCELLED: self.cancel_job,
        }

        if target == JobStatus.CONFIRMED:
            return self.confirm_job(job_id, user)

        handler = handlers.get(target)
        if handler is None:
            raise exceptions.validation_error(
                f"Status '{target.value}' cannot be set directly",
                {"status": target.value}
            )

        return handler(job_id, user), None
