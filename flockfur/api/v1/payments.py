"""
==============================================================================
Payment Endpoints
==============================================================================

Checkout for confirmed jobs, cleaner payout onboarding and the payment
processor's webhook.

The webhook is unauthenticated; it is trusted only after its signature
verifies against the configured webhook secret.

==============================================================================
"""

from typing import Optional
from fastapi import APIRouter, Depends, Header, Request
from sqlalchemy.orm import Session

from flockfur.config import Settings, get_settings
from flockfur.db.database import get_db
from flockfur.db.models import User
from flockfur.core.dependencies import (
    get_current_user,
    get_notifier,
    get_payment_gateway,
    require_cleaner,
)
from flockfur.integrations import PaymentGateway
from flockfur.services.notification_service import NotificationService
from flockfur.services.payment_service import PaymentService
from flockfur.schemas.payment import (
    CheckoutResponse,
    ConnectResponse,
    ConnectStatusResponse,
    WebhookAck,
)


router = APIRouter(prefix="/payments", tags=["Payments"])


class PaymentController:
    """Controller for payment operations."""

    def __init__(
        self,
        db: Session,
        gateway: PaymentGateway,
        notifier: Optional[NotificationService] = None,
        settings: Optional[Settings] = None,
    ):
        self._service = PaymentService(db, gateway, notifier, settings)

    def checkout(self, job_id: str, user: User) -> CheckoutResponse:
        session = self._service.create_checkout(job_id, user)
        return CheckoutResponse(checkout_url=session.url, session_id=session.id)

    def connect(self, cleaner: User) -> ConnectResponse:
        url, account_id = self._service.connect_account(cleaner)
        return ConnectResponse(onboarding_url=url, account_id=account_id)

    def connect_status(self, cleaner: User) -> ConnectStatusResponse:
        account = self._service.get_connect_status(cleaner)
        if account is None:
            return ConnectStatusResponse(account_id=None, onboarded=False)
        return ConnectStatusResponse(
            account_id=account.account_id,
            onboarded=account.onboarded,
            charges_enabled=account.charges_enabled,
            payouts_enabled=account.payouts_enabled
        )

    def webhook(self, payload: bytes, signature: Optional[str]) -> WebhookAck:
        self._service.handle_webhook(payload, signature)
        return WebhookAck()


@router.post("/checkout/{job_id}", response_model=CheckoutResponse)
async def create_checkout(
    job_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    gateway: PaymentGateway = Depends(get_payment_gateway),
    settings: Settings = Depends(get_settings)
):
    """Start (or retry) payment for a confirmed job."""
    controller = PaymentController(db, gateway, settings=settings)
    return controller.checkout(job_id, user)


@router.post("/connect", response_model=ConnectResponse)
async def connect_account(
    cleaner: User = Depends(require_cleaner),
    db: Session = Depends(get_db),
    gateway: PaymentGateway = Depends(get_payment_gateway),
    settings: Settings = Depends(get_settings)
):
    """Get a payout onboarding link (Cleaner only)."""
    controller = PaymentController(db, gateway, settings=settings)
    return controller.connect(cleaner)


@router.get("/connect/status", response_model=ConnectStatusResponse)
async def connect_status(
    cleaner: User = Depends(require_cleaner),
    db: Session = Depends(get_db),
    gateway: PaymentGateway = Depends(get_payment_gateway),
    settings: Settings = Depends(get_settings)
):
    """Refresh and return the cleaner's payout onboarding status."""
    controller = PaymentController(db, gateway, settings=settings)
    return controller.connect_status(cleaner)


@router.post("/webhook", response_model=WebhookAck)
async def payment_webhook(
    request: Request,
    stripe_signature: Optional[str] = Header(None, alias="stripe-signature"),
    db: Session = Depends(get_db),
    gateway: PaymentGateway = Depends(get_payment_gateway),
    notifier: NotificationService = Depends(get_notifier),
    settings: Settings = Depends(get_settings)
):
    """Payment processor webhook."""
    payload = await request.body()
    controller = PaymentController(db, gateway, notifier, settings)
    return controller.webhook(payload, stripe_signature)
