"""
==============================================================================
Cleaner Profile & Favorites Endpoints
==============================================================================

- /cleaners/me         the calling cleaner's own profile
- /cleaners/{id}       public cleaner page with rating summary
- /favorites           a client's favorite cleaners

==============================================================================
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from flockfur.db.database import get_db
from flockfur.db.models import User
from flockfur.core.dependencies import get_current_user, require_cleaner, require_client
from flockfur.services.profile_service import FavoriteService, ProfileService
from flockfur.schemas.profile import (
    CleanerProfileDetail,
    CleanerProfileResponse,
    CleanerProfileUpdate,
    FavoriteListResponse,
    FavoriteStatusResponse,
    PublicCleanerResponse,
)


cleaners_router = APIRouter(prefix="/cleaners", tags=["Cleaners"])

favorites_router = APIRouter(prefix="/favorites", tags=["Favorites"])


class ProfileController:
    """Controller for cleaner profiles and favorites."""

    def __init__(self, db: Session):
        self._profiles = ProfileService(db)
        self._favorites = FavoriteService(db)

    def get_own(self, cleaner: User) -> CleanerProfileResponse:
        profile = self._profiles.get_own(cleaner)
        return CleanerProfileResponse(profile=CleanerProfileDetail.model_validate(profile))

    def update_own(self, cleaner: User, data: CleanerProfileUpdate) -> CleanerProfileResponse:
        profile = self._profiles.update_own(cleaner, data)
        return CleanerProfileResponse(profile=CleanerProfileDetail.model_validate(profile))

    def get_public(self, cleaner_id: str) -> PublicCleanerResponse:
        return PublicCleanerResponse(cleaner=self._profiles.get_public_cleaner(cleaner_id))

    def list_favorites(self, client: User) -> FavoriteListResponse:
        cleaners = self._favorites.list_favorites(client)
        return FavoriteListResponse(cleaners=cleaners, total=len(cleaners))

    def add_favorite(self, client: User, cleaner_id: str) -> FavoriteStatusResponse:
        self._favorites.add(client, cleaner_id)
        return FavoriteStatusResponse(cleaner_id=cleaner_id, is_favorite=True)

    def remove_favorite(self, client: User, cleaner_id: str) -> FavoriteStatusResponse:
        self._favorites.remove(client, cleaner_id)
        return FavoriteStatusResponse(cleaner_id=cleaner_id, is_favorite=False)

    def favorite_status(self, client: User, cleaner_id: str) -> FavoriteStatusResponse:
        return FavoriteStatusResponse(
            cleaner_id=cleaner_id,
            is_favorite=self._favorites.is_favorite(client, cleaner_id)
        )


# =============================================================================
# CLEANER PROFILES
# =============================================================================

@cleaners_router.get("/me", response_model=CleanerProfileResponse)
async def get_my_profile(
    cleaner: User = Depends(require_cleaner),
    db: Session = Depends(get_db)
):
    """The calling cleaner's profile (Cleaner only)."""
    controller = ProfileController(db)
    return controller.get_own(cleaner)


@cleaners_router.put("/me", response_model=CleanerProfileResponse)
async def update_my_profile(
    request: CleanerProfileUpdate,
    cleaner: User = Depends(require_cleaner),
    db: Session = Depends(get_db)
):
    """Update the calling cleaner's profile; omitted fields are kept."""
    controller = ProfileController(db)
    return controller.update_own(cleaner, request)


@cleaners_router.get("/{cleaner_id}", response_model=PublicCleanerResponse)
async def get_cleaner(
    cleaner_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Public cleaner page."""
    controller = ProfileController(db)
    return controller.get_public(cleaner_id)


# =============================================================================
# FAVORITES
# =============================================================================

@favorites_router.get("", response_model=FavoriteListResponse)
async def list_favorites(
    client: User = Depends(require_client),
    db: Session = Depends(get_db)
):
    """The calling client's favorite cleaners (Client only)."""
    controller = ProfileController(db)
    return controller.list_favorites(client)


@favorites_router.get("/{cleaner_id}", response_model=FavoriteStatusResponse)
async def get_favorite_status(
    cleaner_id: str,
    client: User = Depends(require_client),
    db: Session = Depends(get_db)
):
    controller = ProfileController(db)
    return controller.favorite_status(client, cleaner_id)


@favorites_router.post("/{cleaner_id}", response_model=FavoriteStatusResponse)
async def add_favorite(
    cleaner_id: str,
    client: User = Depends(require_client),
    db: Session = Depends(get_db)
):
    """Favorite a cleaner."""
    controller = ProfileController(db)
    return controller.add_favorite(client, cleaner_id)


@favorites_router.delete("/{cleaner_id}", response_model=FavoriteStatusResponse)
async def remove_favorite(
    cleaner_id: str,
    client: User = Depends(require_client),
    db: Session = Depends(get_db)
):
    """Remove a cleaner from favorites."""
    controller = ProfileController(db)
    return controller.remove_favorite(client, cleaner_id)
