"""
==============================================================================
Dispute Endpoints
==============================================================================

Clients dispute completed or confirmed work; admins resolve the queue.

==============================================================================
"""

from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from flockfur.db.database import get_db
from flockfur.db.models import User
from flockfur.core.dependencies import get_current_user, get_notifier, get_pagination, require_admin
from flockfur.services.dispute_service import DisputeService
from flockfur.services.notification_service import NotificationService
from flockfur.schemas.dispute import (
    DisputeCreate,
    DisputeListResponse,
    DisputeResolve,
    DisputeResponse,
)
from flockfur.schemas.job import JobDetail


router = APIRouter(tags=["Disputes"])


class DisputeController:
    """Controller for dispute operations."""

    def __init__(self, db: Session, notifier: Optional[NotificationService] = None):
        self._service = DisputeService(db, notifier)

    def create(self, job_id: str, user: User, data: DisputeCreate) -> DisputeResponse:
        job = self._service.create_dispute(job_id, user, data.reason)
        return DisputeResponse(job=JobDetail.model_validate(job))

    def resolve(self, job_id: str, admin: User, data: DisputeResolve) -> DisputeResponse:
        job = self._service.resolve_dispute(
            job_id, admin, data.resolution, data.notes, data.amount
        )
        return DisputeResponse(job=JobDetail.model_validate(job))

    def list_open(self, pagination: dict) -> DisputeListResponse:
        jobs, total = self._service.list_disputes(
            offset=pagination["offset"], limit=pagination["page_size"]
        )
        return DisputeListResponse(
            disputes=[JobDetail.model_validate(j) for j in jobs],
            total=total
        )


@router.post("/jobs/{job_id}/dispute", response_model=DisputeResponse)
async def create_dispute(
    job_id: str,
    request: DisputeCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    notifier: NotificationService = Depends(get_notifier)
):
    """Dispute a completed or confirmed job (owning client only)."""
    controller = DisputeController(db, notifier)
    return controller.create(job_id, user, request)


@router.post("/jobs/{job_id}/dispute/resolve", response_model=DisputeResponse)
async def resolve_dispute(
    job_id: str,
    request: DisputeResolve,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
    notifier: NotificationService = Depends(get_notifier)
):
    """Resolve a dispute (Admin only)."""
    controller = DisputeController(db, notifier)
    return controller.resolve(job_id, admin, request)


@router.get("/disputes", response_model=DisputeListResponse)
async def list_disputes(
    pagination: dict = Depends(get_pagination),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Open disputes, oldest first (Admin only)."""
    controller = DisputeController(db)
    return controller.list_open(pagination)
