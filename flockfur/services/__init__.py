"""
==============================================================================
Services Package - Business Logic Layer
==============================================================================

Service classes implementing the marketplace's business rules.

- AuthService / UserService: accounts, tokens, admin user management
- JobService: job posting, browsing and the user-driven workflow
- ApplicationService: applying to jobs and accepting a cleaner
- PhotoService: two-phase before/after/issue photo uploads
- ReviewService: post-payment ratings
- DisputeService: client disputes and admin resolutions
- PaymentService: checkout, payout onboarding and webhooks
- ProfileService / FavoriteService: cleaner profiles and client favorites
- AdminService: marketplace statistics
- NotificationService: workflow emails
- job_lifecycle: the job state machine every status change goes through

Architecture Pattern: Service Layer
----------------------------------

    ┌─────────────────┐
    │   API Router    │
    └────────┬────────┘
             │
    ┌────────▼────────┐      ┌──────────────────┐
    │    Service      │ ───▶ │  job_lifecycle   │
    └────────┬────────┘      └──────────────────┘
             │
    ┌────────▼────────┐      ┌──────────────────┐
    │   ORM Session   │      │   Integrations   │
    └─────────────────┘      └──────────────────┘

Services receive the session and gateways through their constructor, own
their transactions, and raise AppException for every rejected operation.
Emails are sent only after the transaction that caused them committed.

==============================================================================
"""

from . import job_lifecycle
from .admin_service import AdminService
from .application_service import ApplicationService
from .auth_service import AuthService
from .dispute_service import DisputeService
from .job_service import JobService
from .notification_service import NotificationService
from .payment_service import PaymentService
from .photo_service import PhotoService
from .profile_service import FavoriteService, ProfileService
from .review_service import ReviewService
from .user_service import UserService

__all__ = [
    "job_lifecycle",
    "AdminService",
    "ApplicationService",
    "AuthService",
    "DisputeService",
    "JobService",
    "NotificationService",
    "PaymentService",
    "PhotoService",
    "FavoriteService",
    "ProfileService",
    "ReviewService",
    "UserService",
]
