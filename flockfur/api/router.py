"""
==============================================================================
Main API Router
==============================================================================

Combines all v1 API routes under /api/v1 prefix.

==============================================================================
"""

from fastapi import APIRouter

from flockfur.api.v1 import (
    health,
    auth,
    users,
    jobs,
    applications,
    photos,
    reviews,
    disputes,
    payments,
    profiles,
    admin,
)


class MainAPIRouter:
    """
    Main API router combining all versioned routes.

    Provides a single entry point for all API endpoints.
    """

    def __init__(self):
        self._router = APIRouter(prefix="/api/v1")
        self._include_routers()

    def _include_routers(self) -> None:
        self._router.include_router(health.router)
        self._router.include_router(auth.router)
        self._router.include_router(users.router)
        self._router.include_router(jobs.router)
        self._router.include_router(applications.router)
        self._router.include_router(photos.router)
        self._router.include_router(reviews.router)
        self._router.include_router(disputes.router)
        self._router.include_router(payments.router)
        self._router.include_router(profiles.cleaners_router)
        self._router.include_router(profiles.favorites_router)
        self._router.include_router(admin.router)

    @property
    def router(self):
        """Get the FastAPI router instance."""
        return self._router


# Create main API router instance
api_router = MainAPIRouter().router
