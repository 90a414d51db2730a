"""
==============================================================================
Schemas Package - Pydantic Models
==============================================================================

Request and response schemas using Pydantic for validation.

- common: Shared response wrappers
- auth / user: Accounts and admin user management
- job / application: Job posting, workflow and matching
- photo / review / dispute / payment: Job follow-up
- profile: Cleaner profiles and client favorites
- admin: Marketplace statistics

==============================================================================
"""

from .common import SuccessResponse, MessageResponse, PaginatedResponse
from .auth import (
    RegisterRequest,
    LoginRequest,
    TokenResponse,
    RefreshRequest,
    ChangePasswordRequest,
    CurrentUserResponse,
)
from .user import UserStatusUpdate, UserDetail, UserResponse, UserListResponse
from .job import JobCreate, JobStatusUpdate, JobDetail, JobResponse, JobStatusResponse
from .application import (
    ApplicationCreate,
    ApplicationDetail,
    ApplicationResponse,
    ApplicationListResponse,
    AcceptApplicationResponse,
)
from .photo import UploadUrlRequest, UploadUrlResponse, PhotoCreate, PhotoDetail, PhotoResponse, PhotoListResponse
from .review import ReviewCreate, ReviewDetail, ReviewResponse, ReviewListResponse, RatingSummary, RatingResponse
from .dispute import DisputeCreate, DisputeResolve, DisputeResponse, DisputeListResponse
from .payment import CheckoutResponse, ConnectResponse, ConnectStatusResponse, WebhookAck
from .profile import (
    CleanerProfileUpdate,
    CleanerProfileDetail,
    CleanerProfileResponse,
    PublicCleaner,
    PublicCleanerResponse,
    FavoriteListResponse,
    FavoriteStatusResponse,
)
from .admin import MarketplaceStats, StatsResponse

__all__ = [
    # Common
    "SuccessResponse",
    "MessageResponse",
    "PaginatedResponse",
    # Auth
    "RegisterRequest",
    "LoginRequest",
    "TokenResponse",
    "RefreshRequest",
    "ChangePasswordRequest",
    "CurrentUserResponse",
    # User
    "UserStatusUpdate",
    "UserDetail",
    "UserResponse",
    "UserListResponse",
    # Job
    "JobCreate",
    "JobStatusUpdate",
    "JobDetail",
    "JobResponse",
    "JobStatusResponse",
    # Application
    "ApplicationCreate",
    "ApplicationDetail",
    "ApplicationResponse",
    "ApplicationListResponse",
    "AcceptApplicationResponse",
    # Photo
    "UploadUrlRequest",
    "UploadUrlResponse",
    "PhotoCreate",
    "PhotoDetail",
    "PhotoResponse",
    "PhotoListResponse",
    # Review
    "ReviewCreate",
    "ReviewDetail",
    "ReviewResponse",
    "ReviewListResponse",
    "RatingSummary",
    "RatingResponse",
    # Dispute
    "DisputeCreate",
    "DisputeResolve",
    "DisputeResponse",
    "DisputeListResponse",
    # Payment
    "CheckoutResponse",
    "ConnectResponse",
    "ConnectStatusResponse",
    "WebhookAck",
    # Profile
    "CleanerProfileUpdate",
    "CleanerProfileDetail",
    "CleanerProfileResponse",
    "PublicCleaner",
    "PublicCleanerResponse",
    "FavoriteListResponse",
    "FavoriteStatusResponse",
    # Admin
    "MarketplaceStats",
    "StatsResponse",
]
