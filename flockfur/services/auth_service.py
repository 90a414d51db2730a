"""
==============================================================================
Authentication Service Module
==============================================================================

Registration, login, token refresh and password changes.

Authentication Flow:
-------------------
    Find user by email ──▶ not found ──────────▶ INVALID_CREDENTIALS
          │
    Verify password ─────▶ wrong ──────────────▶ INVALID_CREDENTIALS
          │
    Check active ────────▶ disabled ───────────▶ ACCOUNT_DISABLED
          │
    Issue access + refresh tokens

Registration creates an empty CleanerProfile for cleaner accounts so the
profile exists before the first edit.

==============================================================================
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from flockfur.config import get_settings
from flockfur.core import exceptions
from flockfur.core.security import SecurityManager, get_security_manager
from flockfur.db.models import CleanerProfile, User, UserRole
from flockfur.schemas.auth import RegisterRequest


# Module logger
logger = logging.getLogger(__name__)


class AuthService:
    """
    Authentication service for user accounts and tokens.

    Example:
        >>> auth_service = AuthService(db_session)
        >>> user = auth_service.register(RegisterRequest(
        ...     email="jane@example.com", password="secret123", name="Jane"
        ... ))
        >>> user, access, refresh = auth_service.authenticate("jane@example.com", "secret123")
    """

    def __init__(
        self,
        db: Session,
        security: Optional[SecurityManager] = None
    ) -> None:
        self._db = db
        self._security = security or get_security_manager()
        self._settings = get_settings()

    # =========================================================================
    # REGISTRATION
    # =========================================================================

    def register(self, data: RegisterRequest) -> User:
        """
        Create a client or cleaner account.

        Raises:
            AppException: EMAIL_EXISTS if the email is already registered
        """
        email = data.email.lower().strip()

        existing = self._db.query(User).filter(User.email == email).first()
        if existing:
            logger.warning(f"Registration failed: email exists - {email}")
            raise exceptions.email_exists(email)

        user = User(
            email=email,
            name=data.name,
            phone=data.phone,
            password_hash=self._security.hash_password(data.password),
            role=data.role,
            is_active=True,
        )
        self._db.add(user)

        if data.role == UserRole.CLEANER:
            user.cleaner_profile = CleanerProfile(service_areas=[])

        try:
            self._db.commit()
        except IntegrityError:
            self._db.rollback()
            logger.warning(f"Registration failed: concurrent signup - {email}")
            raise exceptions.email_exists(email)

        self._db.refresh(user)
        logger.info(f"✅ User registered: {user.email} ({user.role.value})")
        return user

    # =========================================================================
    # AUTHENTICATION METHODS
    # =========================================================================

    def authenticate(self, email: str, password: str) -> Tuple[User, str, str]:
        """
        Authenticate a user with email and password.

        Returns:
            Tuple of (User, access_token, refresh_token)

        Raises:
            AppException: INVALID_CREDENTIALS if user not found or password wrong
            AppException: ACCOUNT_DISABLED if user is inactive
        """
        normalized_email = email.lower().strip()

        user = self._db.query(User).filter(User.email == normalized_email).first()

        if not user or not self._security.verify_password(password, user.password_hash):
            logger.warning(f"Login failed: invalid credentials - {normalized_email}")
            raise exceptions.invalid_credentials()

        if not user.is_active:
            logger.warning(f"Login failed: account disabled - {normalized_email}")
            raise exceptions.account_disabled()

        access_token, refresh_token = self._generate_tokens(user)

        logger.info(f"✅ User authenticated: {user.email}")
        return user, access_token, refresh_token

    def refresh_tokens(self, refresh_token: str) -> Tuple[User, str, str]:
        """
        Exchange a valid refresh token for a new token pair.

        Raises:
            AppException: TOKEN_EXPIRED / TOKEN_INVALID for a bad token,
                USER_NOT_FOUND or ACCOUNT_DISABLED for the subject
        """
        payload = self._security.verify_token(
            refresh_token, SecurityManager.TOKEN_TYPE_REFRESH
        )
        user_id = payload["sub"]

        user = self._db.query(User).filter(User.id == user_id).first()

        if not user:
            logger.warning(f"Token refresh failed: user not found - {user_id}")
            raise exceptions.user_not_found(user_id)

        if not user.is_active:
            logger.warning(f"Token refresh failed: account disabled - {user.email}")
            raise exceptions.account_disabled()

        access_token, new_refresh_token = self._generate_tokens(user)

        logger.info(f"✅ Tokens refreshed for: {user.email}")
        return user, access_token, new_refresh_token

    # =========================================================================
    # PASSWORD MANAGEMENT
    # =========================================================================

    def change_password(
        self,
        user: User,
        current_password: str,
        new_password: str
    ) -> User:
        """
        Change a user's password after verifying the current one.

        Raises:
            AppException: INVALID_CREDENTIALS if current password is wrong
        """
        if not self._security.verify_password(current_password, user.password_hash):
            logger.warning(f"Password change failed: invalid current password - {user.email}")
            raise exceptions.invalid_credentials()

        user.password_hash = self._security.hash_password(new_password)

        self._db.commit()
        self._db.refresh(user)

        logger.info(f"✅ Password changed for: {user.email}")
        return user

    # =========================================================================
    # TOKEN GENERATION
    # =========================================================================

    def _generate_tokens(self, user: User) -> Tuple[str, str]:
        token_data = {
            "sub": user.id,
            "email": user.email,
            "role": user.role.value,
        }
        return (
            self._security.create_access_token(token_data),
            self._security.create_refresh_token({"sub": user.id}),
        )

    def get_token_expiry_seconds(self) -> int:
        """Access token lifetime, reported to clients as ``expires_in``."""
        return self._settings.access_token_expire_seconds
