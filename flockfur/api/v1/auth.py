"""
==============================================================================
Authentication Endpoints
==============================================================================

Sign-up, login, token refresh and password management.

==============================================================================
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from flockfur.db.database import get_db
from flockfur.db.models import User
from flockfur.core.dependencies import get_current_user
from flockfur.services.auth_service import AuthService
from flockfur.schemas.auth import (
    RegisterRequest,
    LoginRequest,
    TokenResponse,
    RefreshRequest,
    ChangePasswordRequest,
    UserInfo,
    CurrentUserResponse,
    CurrentUserInfo,
)
from flockfur.schemas.common import MessageResponse


router = APIRouter(prefix="/auth", tags=["Authentication"])


class AuthController:
    """Controller for authentication operations."""

    def __init__(self, db: Session):
        self._service = AuthService(db)

    def _token_response(self, user: User, access_token: str, refresh_token: str) -> TokenResponse:
        return TokenResponse(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=self._service.get_token_expiry_seconds(),
            user=UserInfo.model_validate(user)
        )

    def register(self, request: RegisterRequest) -> TokenResponse:
        """Create the account and sign it in."""
        self._service.register(request)
        user, access_token, refresh_token = self._service.authenticate(
            request.email,
            request.password
        )
        return self._token_response(user, access_token, refresh_token)

    def login(self, request: LoginRequest) -> TokenResponse:
        user, access_token, refresh_token = self._service.authenticate(
            request.email,
            request.password
        )
        return self._token_response(user, access_token, refresh_token)

    def refresh(self, request: RefreshRequest) -> TokenResponse:
        user, access_token, refresh_token = self._service.refresh_tokens(
            request.refresh_token
        )
        return self._token_response(user, access_token, refresh_token)

    def change_password(self, user: User, request: ChangePasswordRequest) -> MessageResponse:
        self._service.change_password(user, request.current_password, request.new_password)
        return MessageResponse(message="Password changed successfully")


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(request: RegisterRequest, db: Session = Depends(get_db)):
    """Register a client or cleaner account and get tokens."""
    controller = AuthController(db)
    return controller.register(request)


@router.post("/login", response_model=TokenResponse)
async def login(request: LoginRequest, db: Session = Depends(get_db)):
    """Authenticate user and get tokens."""
    controller = AuthController(db)
    return controller.login(request)


@router.post("/refresh", response_model=TokenResponse)
async def refresh_token(request: RefreshRequest, db: Session = Depends(get_db)):
    """Refresh access token using refresh token."""
    controller = AuthController(db)
    return controller.refresh(request)


@router.get("/me", response_model=CurrentUserResponse)
async def get_current_user_info(user: User = Depends(get_current_user)):
    """Get current authenticated user information."""
    return CurrentUserResponse(user=CurrentUserInfo.model_validate(user))


@router.put("/change-password", response_model=MessageResponse)
async def change_password(
    request: ChangePasswordRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Change current user's password."""
    controller = AuthController(db)
    return controller.change_password(user, request)
