"""
==============================================================================
Dispute Service Module
==============================================================================

Client disputes on finished work and their resolution by an admin.

Resolutions:
-----------
- refund_client   DISPUTED -> CANCELLED, nothing is paid out
- pay_cleaner     DISPUTED -> PAID with the split computed at acceptance
- partial_refund  DISPUTED -> PAID, ``resolution_amount`` records what the
                  cleaner receives (0 < amount < agreed price); the agreed
                  price, fee and payout are left as they were

Money movement for refunds happens in the payment dashboard; this service
records the decision.

==============================================================================
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from flockfur.core import exceptions
from flockfur.db.models import Job, JobStatus, ResolutionType, User, UserRole
from flockfur.services import job_lifecycle
from flockfur.services.notification_service import NotificationService
from flockfur.utils.fees import to_money


# Module logger
logger = logging.getLogger(__name__)


RESOLUTION_TARGETS = {
    ResolutionType.REFUND_CLIENT: JobStatus.CANCELLED,
    ResolutionType.PAY_CLEANER: JobStatus.PAID,
    ResolutionType.PARTIAL_REFUND: JobStatus.PAID,
}


class DisputeService:
    """
    Example:
        >>> service = DisputeService(db_session, notifier)
        >>> job = service.create_dispute(job.id, client, "damage to property")
        >>> job = service.resolve_dispute(job.id, admin, ResolutionType.PAY_CLEANER)
    """

    def __init__(self, db: Session, notifier: Optional[NotificationService] = None) -> None:
        self._db = db
        self._notifier = notifier

    def _get_job(self, job_id: str) -> Job:
        job = self._db.query(Job).filter(Job.id == job_id).first()
        if not job:
            raise exceptions.job_not_found(job_id)
        return job

    def create_dispute(self, job_id: str, user: User, reason: str) -> Job:
        """
        Dispute a COMPLETED or CONFIRMED job; owning client only.

        Raises:
            AppException: JOB_NOT_FOUND, FORBIDDEN, INVALID_STATE,
                VALIDATION_ERROR for an empty reason
        """
        reason = (reason or "").strip()
        if not reason:
            raise exceptions.validation_error("A dispute reason is required")

        job = self._get_job(job_id)
        job_lifecycle.check_user_transition(job, JobStatus.DISPUTED, user)

        job.dispute_reason = reason
        job_lifecycle.apply_transition(job, JobStatus.DISPUTED)

        self._db.commit()
        self._db.refresh(job)

        logger.info(f"⚠️ Dispute filed on job {job.id} by {user.email}")
        if self._notifier:
            self._notifier.dispute_filed(job)
        return job

    def resolve_dispute(
        self,
        job_id: str,
        admin: User,
        resolution: ResolutionType,
        notes: Optional[str] = None,
        amount: Optional[Decimal] = None,
    ) -> Job:
        """
        Close a dispute.

        Raises:
            AppException: ADMIN_REQUIRED, JOB_NOT_FOUND, INVALID_STATE,
                VALIDATION_ERROR for a missing or out-of-range amount
        """
        if admin.role != UserRole.ADMIN:
            raise exceptions.admin_required()

        job = self._get_job(job_id)
        target = RESOLUTION_TARGETS[resolution]
        job_lifecycle.check_user_transition(job, target, admin)

        resolution_amount = None
        if resolution == ResolutionType.PARTIAL_REFUND:
            if amount is None:
                raise exceptions.validation_error(
                    "Amount is required for a partial refund",
                    {"resolution": resolution.value}
                )
            resolution_amount = to_money(amount)
            if job.agreed_price is None or not (0 < resolution_amount < job.agreed_price):
                raise exceptions.validation_error(
                    "Partial amount must be greater than 0 and less than the agreed price",
                    {"amount": str(resolution_amount), "agreed_price": str(job.agreed_price)}
                )
        elif amount is not None:
            raise exceptions.validation_error(
                "Amount is only accepted for a partial refund",
                {"resolution": resolution.value}
            )

        job.resolution_type = resolution
        job.resolution_notes = notes.strip() if notes else None
        job.resolution_amount = resolution_amount
        job_lifecycle.apply_transition(job, target)

        self._db.commit()
        self._db.refresh(job)

        logger.info(f"✅ Dispute resolved on job {job.id}: {resolution.value} by {admin.email}")
        if self._notifier:
            self._notifier.dispute_resolved(job)
        return job

    def list_disputes(self, offset: int = 0, limit: int = 20) -> Tuple[List[Job], int]:
        """Open disputes, oldest first."""
        query = self._db.query(Job).filter(Job.status == JobStatus.DISPUTED)
        total = query.count()
        jobs = query.order_by(Job.disputed_at.asc()).offset(offset).limit(limit).all()
        return jobs, total
