"""
==============================================================================
Admin Endpoints
==============================================================================

Marketplace statistics. User management lives under /users and the
dispute queue under /disputes.

==============================================================================
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from flockfur.db.database import get_db
from flockfur.db.models import User
from flockfur.core.dependencies import require_admin
from flockfur.services.admin_service import AdminService
from flockfur.schemas.admin import StatsResponse


router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get("/stats", response_model=StatsResponse)
async def get_stats(
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """User counts by role, job counts by status and revenue (Admin only)."""
    return StatsResponse(stats=AdminService(db).get_stats())
