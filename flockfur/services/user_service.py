"""
==============================================================================
User Service Module
==============================================================================

Admin user management: lookup, filtered listing and account activation.

Roles never change after registration, so there is no role update here.
The API layer restricts these operations to admins.

==============================================================================
"""

from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from flockfur.core import exceptions
from flockfur.db.models import User, UserRole


# Module logger
logger = logging.getLogger(__name__)


class UserService:
    """
    User management service for admin operations.

    Example:
        >>> user_service = UserService(db_session)
        >>> cleaners = user_service.list_users(role=UserRole.CLEANER)
        >>> user_service.set_active(cleaners[0].id, False, acting_admin=admin)
    """

    def __init__(self, db: Session) -> None:
        self._db = db

    # =========================================================================
    # READ OPERATIONS
    # =========================================================================

    def get_by_id(self, user_id: str) -> User:
        """
        Get user by ID.

        Raises:
            AppException: USER_NOT_FOUND if user doesn't exist
        """
        user = self._db.query(User).filter(User.id == user_id).first()

        if not user:
            logger.warning(f"User not found: {user_id}")
            raise exceptions.user_not_found(user_id)

        return user

    def get_by_email(self, email: str) -> Optional[User]:
        return self._db.query(User).filter(User.email == email.lower().strip()).first()

    def _filtered(
        self,
        role: Optional[UserRole],
        is_active: Optional[bool],
        search: Optional[str],
    ):
        query = self._db.query(User)

        if role is not None:
            query = query.filter(User.role == role)

        if is_active is not None:
            query = query.filter(User.is_active == is_active)

        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(or_(User.email.ilike(pattern), User.name.ilike(pattern)))

        return query

    def list_users(
        self,
        role: Optional[UserRole] = None,
        is_active: Optional[bool] = None,
        search: Optional[str] = None,
        offset: int = 0,
        limit: int = 100
    ) -> List[User]:
        """List users, newest first, with optional role/status/text filters."""
        return (
            self._filtered(role, is_active, search)
            .order_by(User.created_at.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )

    def count_users(
        self,
        role: Optional[UserRole] = None,
        is_active: Optional[bool] = None,
        search: Optional[str] = None,
    ) -> int:
        return self._filtered(role, is_active, search).count()

    # =========================================================================
    # UPDATE OPERATIONS
    # =========================================================================

    def set_active(self, user_id: str, is_active: bool, acting_admin: User) -> User:
        """
        Activate or deactivate an account.

        A disabled account can neither log in nor use existing tokens.

        Raises:
            AppException: USER_NOT_FOUND, or FORBIDDEN when an admin tries
                to disable their own account
        """
        user = self.get_by_id(user_id)

        if not is_active and user.id == acting_admin.id:
            raise exceptions.forbidden("You cannot deactivate your own account")

        if user.is_active == is_active:
            logger.info(f"User {user.email} already {'active' if is_active else 'inactive'}")
            return user

        user.is_active = is_active
        self._db.commit()
        self._db.refresh(user)

        status = "activated" if is_active else "deactivated"
        logger.info(f"✅ User {status}: {user.email} by {acting_admin.email}")
        return user
