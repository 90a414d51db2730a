"""
==============================================================================
API v1 Endpoints
==============================================================================

Version 1 of the REST API.

Routers:
--------
- health: Health check endpoints
- auth: Registration, login and tokens
- users: User management (admin)
- jobs: Job posting and workflow
- applications: Applying to and accepting jobs
- photos: Before/after/issue photo uploads
- reviews: Post-payment ratings
- disputes: Dispute filing and resolution
- payments: Checkout, payout onboarding, webhook
- profiles: Cleaner profiles and client favorites
- admin: Marketplace statistics

==============================================================================
"""

from . import (
    health,
    auth,
    users,
    jobs,
    applications,
    photos,
    reviews,
    disputes,
    payments,
    profiles,
    admin,
)

__all__ = [
    "health",
    "auth",
    "users",
    "jobs",
    "applications",
    "photos",
    "reviews",
    "disputes",
    "payments",
    "profiles",
    "admin",
]
