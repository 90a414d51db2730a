"""
==============================================================================
FastAPI Dependencies Module
==============================================================================

Dependency injection for authentication, authorization, pagination and the
external service gateways.

Dependency Hierarchy:
--------------------
                    ┌─────────────────┐
                    │   get_db()      │
                    └────────┬────────┘
                             │
                    ┌────────▼────────┐
                    │get_current_user │
                    └────────┬────────┘
                             │
        ┌────────────────────┼────────────────────┐
        │                    │                    │
┌───────▼───────┐   ┌───────▼───────┐   ┌───────▼───────┐
│ require_admin │   │require_client │   │require_cleaner│
└───────────────┘   └───────────────┘   └───────────────┘

Gateways:
--------
``app.state.integrations`` is built once at startup. ``get_payment_gateway``
and ``get_storage_gateway`` answer 503 when the service is not configured;
``get_optional_payment_gateway`` hands out None instead, for flows where
payment is best effort. Tests override these with in-memory fakes.

Usage Examples:
--------------
    @router.get("/auth/me")
    async def me(user: User = Depends(get_current_user)):
        ...

    @router.post("/jobs")
    async def create_job(user: User = Depends(require_client)):
        ...

==============================================================================
"""

from __future__ import annotations

import logging
from typing import Dict, Optional

from fastapi import Depends, Query, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from flockfur.config import Settings, get_settings
from flockfur.core import exceptions
from flockfur.core.security import SecurityManager, get_security_manager
from flockfur.db.database import get_db
from flockfur.db.models import User, UserRole
from flockfur.integrations import EmailSender, Integrations, PaymentGateway, StorageGateway
from flockfur.services.notification_service import NotificationService


# Module logger
logger = logging.getLogger(__name__)

# HTTP Bearer security scheme for Swagger UI
security_scheme = HTTPBearer(auto_error=False)


class AuthenticationManager:
    """
    Token extraction, user loading and role checks.

    Example:
        >>> auth = AuthenticationManager(security_manager, db_session)
        >>> user = auth.get_current_user(credentials)
        >>> auth.require_role(user, UserRole.ADMIN)
    """

    def __init__(self, security: SecurityManager, db: Optional[Session]) -> None:
        self._security = security
        self._db = db

    def extract_token_from_header(
        self,
        credentials: Optional[HTTPAuthorizationCredentials]
    ) -> str:
        """
        Raises:
            AppException: TOKEN_INVALID if no credentials were sent
        """
        if not credentials:
            logger.debug("No authorization credentials provided")
            raise exceptions.token_invalid()

        return credentials.credentials

    def authenticate_from_token(self, token: str) -> User:
        """
        Verify an access token and load its active user.

        Raises:
            AppException: TOKEN_EXPIRED, TOKEN_INVALID, ACCOUNT_DISABLED
        """
        payload = self._security.verify_token(token, SecurityManager.TOKEN_TYPE_ACCESS)
        user_id = payload["sub"]

        user = self._db.query(User).filter(User.id == user_id).first()

        if not user:
            logger.warning(f"User not found for token: {user_id}")
            raise exceptions.token_invalid()

        if not user.is_active:
            logger.warning(f"Disabled user attempted access: {user.email}")
            raise exceptions.account_disabled()

        return user

    def get_current_user(self, credentials: Optional[HTTPAuthorizationCredentials]) -> User:
        token = self.extract_token_from_header(credentials)
        return self.authenticate_from_token(token)

    # =========================================================================
    # ROLE-BASED ACCESS CONTROL METHODS
    # =========================================================================

    def require_role(self, user: User, *allowed_roles: UserRole) -> User:
        """
        Raises:
            AppException: ADMIN_REQUIRED / CLIENT_REQUIRED / CLEANER_REQUIRED
        """
        if user.role not in allowed_roles:
            logger.warning(
                f"Role check failed for {user.email}: "
                f"has {user.role.value}, needs {[r.value for r in allowed_roles]}"
            )

            if UserRole.CLIENT in allowed_roles:
                raise exceptions.client_required()
            elif UserRole.CLEANER in allowed_roles:
                raise exceptions.cleaner_required()
            elif UserRole.ADMIN in allowed_roles:
                raise exceptions.admin_required()
            else:
                raise exceptions.forbidden()

        return user


# =============================================================================
# AUTHENTICATION DEPENDENCIES
# =============================================================================

async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security_scheme),
    db: Session = Depends(get_db)
) -> User:
    """The authenticated, active user behind the bearer token."""
    auth_manager = AuthenticationManager(get_security_manager(), db)
    return auth_manager.get_current_user(credentials)


async def require_admin(user: User = Depends(get_current_user)) -> User:
    return AuthenticationManager(get_security_manager(), None).require_role(user, UserRole.ADMIN)


async def require_client(user: User = Depends(get_current_user)) -> User:
    """Client accounts only; admins are not clients."""
    return AuthenticationManager(get_security_manager(), None).require_role(user, UserRole.CLIENT)


async def require_cleaner(user: User = Depends(get_current_user)) -> User:
    return AuthenticationManager(get_security_manager(), None).require_role(user, UserRole.CLEANER)


async def require_client_or_admin(user: User = Depends(get_current_user)) -> User:
    return AuthenticationManager(get_security_manager(), None).require_role(
        user, UserRole.CLIENT, UserRole.ADMIN
    )


# =============================================================================
# INTEGRATION DEPENDENCIES
# =============================================================================

def get_integrations(request: Request) -> Integrations:
    return request.app.state.integrations


def get_optional_payment_gateway(
    integrations: Integrations = Depends(get_integrations)
) -> Optional[PaymentGateway]:
    return integrations.payments


def get_payment_gateway(
    gateway: Optional[PaymentGateway] = Depends(get_optional_payment_gateway)
) -> PaymentGateway:
    """
    Raises:
        AppException: PAYMENTS_NOT_CONFIGURED (503)
    """
    if gateway is None:
        raise exceptions.payments_not_configured()
    return gateway


def get_storage_gateway(
    integrations: Integrations = Depends(get_integrations)
) -> StorageGateway:
    """
    Raises:
        AppException: STORAGE_NOT_CONFIGURED (503)
    """
    if integrations.storage is None:
        raise exceptions.storage_not_configured()
    return integrations.storage


def get_email_sender(integrations: Integrations = Depends(get_integrations)) -> EmailSender:
    return integrations.email


def get_notifier(
    sender: EmailSender = Depends(get_email_sender),
    settings: Settings = Depends(get_settings),
) -> NotificationService:
    return NotificationService(sender, settings.base_url)


# =============================================================================
# PAGINATION DEPENDENCY
# =============================================================================

def get_pagination(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(20, ge=1, le=100, description="Items per page")
) -> Dict[str, int]:
    """
    Pagination values for list endpoints.

    Usage:
        @router.get("/jobs")
        async def list_jobs(pagination: dict = Depends(get_pagination)):
            service.list_jobs(user, offset=pagination["offset"], limit=pagination["page_size"])
    """
    return {
        "page": page,
        "page_size": page_size,
        "offset": (page - 1) * page_size
    }
