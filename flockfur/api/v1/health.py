"""
==============================================================================
Health Check Endpoints
==============================================================================

System health status endpoints for monitoring and orchestration.

==============================================================================
"""

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy import text

from flockfur.db.database import get_db
from flockfur.core.dependencies import get_integrations
from flockfur.integrations import Integrations


router = APIRouter(prefix="/health", tags=["Health"])


class HealthController:
    """Controller for health check operations."""

    def __init__(self, db: Session, integrations: Integrations):
        self._db = db
        self._integrations = integrations

    def check_database(self) -> str:
        try:
            self._db.execute(text("SELECT 1"))
            return "healthy"
        except SQLAlchemyError:
            return "unhealthy"

    def check_integrations(self) -> dict:
        """Which external services are configured (not whether they are reachable)."""
        return {
            "payments": "configured" if self._integrations.payments else "not_configured",
            "storage": "configured" if self._integrations.storage else "not_configured",
            "email": "configured" if self._integrations.email.enabled else "not_configured",
        }

    def get_health(self) -> dict:
        db_status = self.check_database()

        return {
            "status": "healthy" if db_status == "healthy" else "degraded",
            "components": {
                "api": "healthy",
                "database": db_status,
                **self.check_integrations(),
            },
        }


@router.get("")
async def health_check(
    db: Session = Depends(get_db),
    integrations: Integrations = Depends(get_integrations)
):
    """
    Health check endpoint.

    Returns API and database status plus which integrations are configured.
    """
    controller = HealthController(db, integrations)
    return controller.get_health()


@router.get("/ready")
async def readiness_check():
    """Readiness probe for container orchestration."""
    return {"ready": True}


@router.get("/live")
async def liveness_check():
    """Liveness probe for container orchestration."""
    return {"alive": True}
