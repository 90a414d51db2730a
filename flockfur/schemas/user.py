"""
==============================================================================
User Schemas Module
==============================================================================

Schemas for admin user management.

==============================================================================
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field
from flockfur.db.models import UserRole


class UserStatusUpdate(BaseModel):
    """Activate or deactivate an account."""
    is_active: bool


class UserDetail(BaseModel):
    """Detailed user information."""
    id: str
    email: str
    name: str
    phone: Optional[str] = None
    role: UserRole
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class UserResponse(BaseModel):
    """Single user response."""
    success: bool = Field(default=True)
    user: UserDetail


class UserListResponse(BaseModel):
    """List of users response."""
    success: bool = Field(default=True)
    users: List[UserDetail]
    total: int
