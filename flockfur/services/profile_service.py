"""
==============================================================================
Cleaner Profile & Favorites Service Module
==============================================================================

- ProfileService: a cleaner's own profile (created lazily on first use)
  and the public cleaner page shown to clients
- FavoriteService: clients bookmarking cleaners they liked

==============================================================================
"""

from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from flockfur.core import exceptions
from flockfur.db.models import CleanerProfile, User, UserRole
from flockfur.schemas.profile import CleanerProfileUpdate, PublicCleaner
from flockfur.services.review_service import ReviewService


# Module logger
logger = logging.getLogger(__name__)


class ProfileService:
    """
    Example:
        >>> service = ProfileService(db_session)
        >>> profile = service.update_own(cleaner, CleanerProfileUpdate(bio="Goat whisperer"))
        >>> service.get_public_cleaner(cleaner.id).rating.count
        0
    """

    def __init__(self, db: Session) -> None:
        self._db = db

    def get_or_create(self, cleaner: User) -> CleanerProfile:
        """
        The cleaner's profile, created if missing (accounts made before
        profiles existed have none). Flushed, not committed.
        """
        if cleaner.role != UserRole.CLEANER:
            raise exceptions.cleaner_required()

        if cleaner.cleaner_profile is None:
            cleaner.cleaner_profile = CleanerProfile(service_areas=[])
            self._db.flush()
            logger.info(f"Created cleaner profile for {cleaner.email}")

        return cleaner.cleaner_profile

    def get_own(self, cleaner: User) -> CleanerProfile:
        profile = self.get_or_create(cleaner)
        self._db.commit()
        return profile

    def update_own(self, cleaner: User, data: CleanerProfileUpdate) -> CleanerProfile:
        """Apply the fields that were sent; others stay as they are."""
        profile = self.get_or_create(cleaner)

        changes = data.model_dump(exclude_unset=True)

        # NOT NULL columns: an explicit null means "leave as is"
        for field in ("has_transportation", "service_areas"):
            if field in changes and changes[field] is None:
                del changes[field]

        for field, value in changes.items():
            setattr(profile, field, value)

        self._db.commit()
        self._db.refresh(profile)

        logger.info(f"✅ Profile updated: {cleaner.email}")
        return profile

    def get_cleaner(self, cleaner_id: str) -> User:
        """
        Raises:
            AppException: PROFILE_NOT_FOUND unless the id is an active cleaner
        """
        user = self._db.query(User).filter(User.id == cleaner_id).first()

        if not user or user.role != UserRole.CLEANER or not user.is_active:
            raise exceptions.profile_not_found(cleaner_id)

        return user

    def to_public(self, cleaner: User) -> PublicCleaner:
        rating = ReviewService(self._db).get_user_rating(cleaner.id)
        return PublicCleaner.from_model(cleaner, cleaner.cleaner_profile, rating)

    def get_public_cleaner(self, cleaner_id: str) -> PublicCleaner:
        return self.to_public(self.get_cleaner(cleaner_id))


class FavoriteService:
    """
    Client favorites. Adding and removing are idempotent.

    Example:
        >>> service = FavoriteService(db_session)
        >>> service.add(client, cleaner.id)
        >>> service.is_favorite(client, cleaner.id)
        True
    """

    def __init__(self, db: Session) -> None:
        self._db = db
        self._profiles = ProfileService(db)

    @staticmethod
    def _require_client(user: User) -> None:
        if user.role != UserRole.CLIENT:
            raise exceptions.client_required()

    def add(self, client: User, cleaner_id: str) -> User:
        """
        Raises:
            AppException: CLIENT_REQUIRED, PROFILE_NOT_FOUND when the target
                is not an active cleaner
        """
        self._require_client(client)
        cleaner = self._profiles.get_cleaner(cleaner_id)

        if cleaner not in client.favorites:
            client.favorites.append(cleaner)
            self._db.commit()
            logger.info(f"⭐ {client.email} favorited {cleaner.email}")

        return cleaner

    def remove(self, client: User, cleaner_id: str) -> bool:
        """Returns True if the cleaner was a favorite."""
        self._require_client(client)

        for cleaner in list(client.favorites):
            if cleaner.id == cleaner_id:
                client.favorites.remove(cleaner)
                self._db.commit()
                logger.info(f"{client.email} unfavorited {cleaner.email}")
                return True

        return False

    def list_favorites(self, client: User) -> List[PublicCleaner]:
        self._require_client(client)
        return [
            self._profiles.to_public(cleaner)
            for cleaner in sorted(client.favorites, key=lambda c: c.name.lower())
        ]

    def is_favorite(self, client: User, cleaner_id: Optional[str]) -> bool:
        self._require_client(client)
        return any(cleaner.id == cleaner_id for cleaner in client.favorites)
