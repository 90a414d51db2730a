"""
==============================================================================
Application Service Module
==============================================================================

Cleaner applications and the acceptance that matches a job to a cleaner.

Acceptance Transaction:
----------------------
    1. chosen application           -> ACCEPTED
    2. every other application      -> REJECTED
    3. UPDATE jobs SET status = PENDING, cleaner_id, prices
       WHERE id = :job_id AND status = OPEN

If step 3 matches no row another accept won the race: the whole
transaction is rolled back and the caller gets INVALID_STATE. Price and
split are computed before anything is written.

==============================================================================
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from flockfur.core import exceptions
from flockfur.db.models import (
    ApplicationStatus,
    Job,
    JobApplication,
    JobStatus,
    User,
    UserRole,
)
from flockfur.schemas.application import ApplicationCreate
from flockfur.services import job_lifecycle
from flockfur.services.notification_service import NotificationService
from flockfur.utils.fees import calculate_split


# Module logger
logger = logging.getLogger(__name__)


class ApplicationService:
    """
    Matching between open jobs and cleaners.

    Example:
        >>> service = ApplicationService(db_session, notifier)
        >>> application = service.apply(job.id, cleaner, ApplicationCreate(proposed_price="90.00"))
        >>> application, job = service.accept(application.id, client)
    """

    def __init__(self, db: Session, notifier: Optional[NotificationService] = None) -> None:
        self._db = db
        self._notifier = notifier

    def _get_job(self, job_id: str) -> Job:
        job = self._db.query(Job).filter(Job.id == job_id).first()
        if not job:
            raise exceptions.job_not_found(job_id)
        return job

    def get_application(self, application_id: str) -> JobApplication:
        application = (
            self._db.query(JobApplication)
            .filter(JobApplication.id == application_id)
            .first()
        )
        if not application:
            raise exceptions.application_not_found(application_id)
        return application

    # =========================================================================
    # APPLY
    # =========================================================================

    def apply(self, job_id: str, cleaner: User, data: ApplicationCreate) -> JobApplication:
        """
        Apply to an OPEN job.

        Raises:
            AppException: CLEANER_REQUIRED, JOB_NOT_FOUND,
                DUPLICATE_APPLICATION, INVALID_STATE
        """
        if cleaner.role != UserRole.CLEANER:
            raise exceptions.cleaner_required()

        job = self._get_job(job_id)

        existing = self._db.query(JobApplication.id).filter(
            JobApplication.job_id == job.id,
            JobApplication.cleaner_id == cleaner.id,
        ).first()
        if existing:
            logger.warning(f"Duplicate application: {cleaner.email} -> job {job.id}")
            raise exceptions.duplicate_application(job.id)

        if job.status != JobStatus.OPEN:
            raise exceptions.invalid_state(
                job.status.value, "Applications are only accepted for open jobs"
            )

        application = JobApplication(
            job_id=job.id,
            cleaner_id=cleaner.id,
            message=data.message,
            proposed_price=data.proposed_price,
            status=ApplicationStatus.PENDING,
        )
        self._db.add(application)

        try:
            self._db.commit()
        except IntegrityError:
            self._db.rollback()
            raise exceptions.duplicate_application(job.id)

        self._db.refresh(application)
        logger.info(f"✅ Application {application.id}: {cleaner.email} -> job {job.id}")

        if self._notifier:
            self._notifier.application_received(job, application)
        return application

    # =========================================================================
    # ACCEPT
    # =========================================================================

    def accept(self, application_id: str, user: User) -> Tuple[JobApplication, Job]:
        """
        Accept an application, rejecting its siblings and assigning the job.

        The agreed price is the application's proposed price, falling back
        to the job's suggested price.

        Raises:
            AppException: APPLICATION_NOT_FOUND, FORBIDDEN, INVALID_STATE,
                PRICE_REQUIRED
        """
        application = self.get_application(application_id)
        job = self._get_job(application.job_id)

        if user.role != UserRole.ADMIN and job.client_id != user.id:
            raise exceptions.forbidden("Only the job owner can accept applications")

        if job.status != JobStatus.OPEN:
            raise exceptions.invalid_state(
                job.status.value, "Applications can only be accepted while the job is open"
            )

        job_lifecycle.check_transition(job, JobStatus.PENDING, {job_lifecycle.Actor.SYSTEM})

        price = application.proposed_price or job.suggested_price
        if price is None:
            raise exceptions.price_required(job.id)
        split = calculate_split(price)

        application.status = ApplicationStatus.ACCEPTED

        self._db.query(JobApplication).filter(
            JobApplication.job_id == job.id,
            JobApplication.id != application.id,
        ).update(
            {JobApplication.status: ApplicationStatus.REJECTED},
            synchronize_session="fetch",
        )

        updated = self._db.query(Job).filter(
            Job.id == job.id,
            Job.status == JobStatus.OPEN,
        ).update(
            {
                Job.status: JobStatus.PENDING,
                Job.cleaner_id: application.cleaner_id,
                Job.agreed_price: split.agreed_price,
                Job.platform_fee: split.platform_fee,
                Job.cleaner_payout: split.cleaner_payout,
            },
            synchronize_session=False,
        )

        if updated != 1:
            self._db.rollback()
            logger.warning(f"Accept lost race for job {job.id}")
            raise exceptions.invalid_state(
                JobStatus.PENDING.value, "Another application was already accepted"
            )

        self._db.commit()
        self._db.refresh(application)
        self._db.refresh(job)

        logger.info(
            f"✅ Application accepted: {application.id} for job {job.id} "
            f"({split.agreed_price} / fee {split.platform_fee} / payout {split.cleaner_payout})"
        )

        if self._notifier:
            self._notifier.application_accepted(job)
        return application, job

    # =========================================================================
    # LIST
    # =========================================================================

    def list_for_job(self, job_id: str, user: User) -> List[JobApplication]:
        """Applications on a job, oldest first; owner or admin only."""
        job = self._get_job(job_id)

        if user.role != UserRole.ADMIN and job.client_id != user.id:
            raise exceptions.forbidden("Only the job owner can view applications")

        return (
            self._db.query(JobApplication)
            .filter(JobApplication.job_id == job.id)
            .order_by(JobApplication.created_at.asc())
            .all()
        )

    def list_for_cleaner(
        self,
        cleaner: User,
        status: Optional[ApplicationStatus] = None,
    ) -> List[JobApplication]:
        if cleaner.role != UserRole.CLEANER:
            raise exceptions.cleaner_required()

        query = self._db.query(JobApplication).filter(JobApplication.cleaner_id == cleaner.id)
        if status is not None:
            query = query.filter(JobApplication.status == status)

        return query.order_by(JobApplication.created_at.desc()).all()
