"""
==============================================================================
User Management Endpoints
==============================================================================

Admin-only endpoints for browsing and (de)activating accounts.

==============================================================================
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from flockfur.db.database import get_db
from flockfur.db.models import User, UserRole
from flockfur.core.dependencies import require_admin
from flockfur.services.user_service import UserService
from flockfur.schemas.user import (
    UserStatusUpdate,
    UserResponse,
    UserListResponse,
    UserDetail,
)


router = APIRouter(prefix="/users", tags=["Users"])


class UserController:
    """Controller for user management operations."""

    def __init__(self, db: Session):
        self._service = UserService(db)

    def list_all(
        self,
        role: Optional[UserRole],
        is_active: Optional[bool],
        search: Optional[str],
        offset: int,
        limit: int
    ) -> UserListResponse:
        users = self._service.list_users(
            role=role, is_active=is_active, search=search, offset=offset, limit=limit
        )
        total = self._service.count_users(role=role, is_active=is_active, search=search)
        return UserListResponse(
            users=[UserDetail.model_validate(u) for u in users],
            total=total
        )

    def get(self, user_id: str) -> UserResponse:
        user = self._service.get_by_id(user_id)
        return UserResponse(user=UserDetail.model_validate(user))

    def set_status(self, user_id: str, data: UserStatusUpdate, admin: User) -> UserResponse:
        user = self._service.set_active(user_id, data.is_active, acting_admin=admin)
        return UserResponse(user=UserDetail.model_validate(user))


@router.get("", response_model=UserListResponse)
async def list_users(
    role: Optional[UserRole] = Query(None),
    is_active: Optional[bool] = Query(None),
    search: Optional[str] = Query(None, max_length=100),
    offset: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=100),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """List all users with optional filters (Admin only)."""
    controller = UserController(db)
    return controller.list_all(role, is_active, search, offset, limit)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Get user by ID (Admin only)."""
    controller = UserController(db)
    return controller.get(user_id)


@router.patch("/{user_id}/status", response_model=UserResponse)
async def update_user_status(
    user_id: str,
    request: UserStatusUpdate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Activate or deactivate an account (Admin only)."""
    controller = UserController(db)
    return controller.set_status(user_id, request, admin)
