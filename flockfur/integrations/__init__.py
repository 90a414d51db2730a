"""
==============================================================================
External Service Integrations
==============================================================================

Clients for the payment processor, object storage and email delivery.

They are built once at startup from validated settings, stored on
``app.state.integrations`` and handed to services through FastAPI
dependencies. Tests override those dependencies with in-memory fakes.

A service whose credentials are missing is ``None``; the dependency that
hands it out answers 503 (PAYMENTS_NOT_CONFIGURED / STORAGE_NOT_CONFIGURED).
Production settings refuse to load with missing credentials.

==============================================================================
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from flockfur.config import Settings

from .mailer import EmailSender, ResendEmailSender
from .payments import (
    EVENT_ACCOUNT_UPDATED,
    EVENT_CHECKOUT_COMPLETED,
    AccountStatus,
    CheckoutSession,
    PaymentEvent,
    PaymentGateway,
    StripePaymentGateway,
)
from .storage import S3StorageGateway, StorageGateway


logger = logging.getLogger(__name__)


@dataclass
class Integrations:
    payments: Optional[PaymentGateway]
    storage: Optional[StorageGateway]
    email: EmailSender


def build_integrations(settings: Settings) -> Integrations:
    """Construct the external service clients described by ``settings``."""
    payments = None
    if settings.payments_configured:
        payments = StripePaymentGateway(
            settings.stripe_secret_key,
            settings.stripe_webhook_secret,
        )
    else:
        logger.warning("⚠️ Payments not configured: checkout and payouts disabled")

    storage = None
    if settings.storage_configured:
        storage = S3StorageGateway(
            bucket=settings.aws_s3_bucket,
            region=settings.aws_region,
            expires_in=settings.upload_url_expire_seconds,
            access_key_id=settings.aws_access_key_id,
            secret_access_key=settings.aws_secret_access_key,
        )
    else:
        logger.warning("⚠️ Storage not configured: photo uploads disabled")

    email = ResendEmailSender(settings.resend_api_key, settings.email_from)
    if not email.enabled:
        logger.warning("⚠️ Email not configured: notifications will be logged only")

    return Integrations(payments=payments, storage=storage, email=email)


__all__ = [
    "Integrations",
    "build_integrations",
    "PaymentGateway",
    "StripePaymentGateway",
    "CheckoutSession",
    "AccountStatus",
    "PaymentEvent",
    "EVENT_CHECKOUT_COMPLETED",
    "EVENT_ACCOUNT_UPDATED",
    "StorageGateway",
    "S3StorageGateway",
    "EmailSender",
    "ResendEmailSender",
]
