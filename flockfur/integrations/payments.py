"""
==============================================================================
Payment Gateway
==============================================================================

Narrow interface over the payment processor (Stripe Connect, Express
accounts):

- create_checkout: hosted checkout for a CONFIRMED job, charging the
  client and routing the payout to the cleaner's connected account minus
  the platform's application fee
- create_connected_account / create_onboarding_link / get_account_status:
  cleaner payout onboarding
- construct_event: verify a webhook signature and decode the event

The rest of the application only sees the dataclasses defined here, never
SDK objects.

==============================================================================
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import stripe

from flockfur.core import exceptions


# Module logger
logger = logging.getLogger(__name__)


EVENT_CHECKOUT_COMPLETED = "checkout.session.completed"
EVENT_ACCOUNT_UPDATED = "account.updated"


@dataclass(frozen=True)
class CheckoutSession:
    id: str
    url: str


@dataclass(frozen=True)
class AccountStatus:
    account_id: str
    charges_enabled: bool
    payouts_enabled: bool

    @property
    def onboarded(self) -> bool:
        return self.charges_enabled and self.payouts_enabled


@dataclass(frozen=True)
class PaymentEvent:
    """A verified webhook event; ``data`` is the event's object payload."""

    id: str
    type: str
    data: Dict[str, Any] = field(default_factory=dict)


class PaymentGateway(ABC):
    """Payment processor operations used by the payment service."""

    @abstractmethod
    def create_checkout(
        self,
        *,
        title: str,
        amount_cents: int,
        application_fee_cents: int,
        destination_account: str,
        success_url: str,
        cancel_url: str,
        metadata: Dict[str, str],
    ) -> CheckoutSession:
        ...

    @abstractmethod
    def create_connected_account(self, *, email: str, user_id: str) -> str:
        """Create a connected account and return its id."""

    @abstractmethod
    def create_onboarding_link(
        self,
        *,
        account_id: str,
        refresh_url: str,
        return_url: str,
    ) -> str:
        """Return a one-time onboarding URL for the account."""

    @abstractmethod
    def get_account_status(self, account_id: str) -> AccountStatus:
        ...

    @abstractmethod
    def construct_event(self, payload: bytes, signature: Optional[str]) -> PaymentEvent:
        """
        Verify and decode a webhook payload.

        Raises:
            AppException: INVALID_SIGNATURE when verification fails
        """


class StripePaymentGateway(PaymentGateway):
    """
    Stripe implementation of the payment gateway.

    The API key is passed per request instead of being set on the global
    ``stripe`` module.

    Example:
        >>> gateway = StripePaymentGateway(settings.stripe_secret_key, settings.stripe_webhook_secret)
        >>> session = gateway.create_checkout(title="Barn cleanup", amount_cents=9000, ...)
    """

    CURRENCY = "usd"
    COUNTRY = "US"

    def __init__(self, secret_key: str, webhook_secret: str) -> None:
        self._secret_key = secret_key
        self._webhook_secret = webhook_secret

    # =========================================================================
    # CHECKOUT
    # =========================================================================

    def create_checkout(
        self,
        *,
        title: str,
        amount_cents: int,
        application_fee_cents: int,
        destination_account: str,
        success_url: str,
        cancel_url: str,
        metadata: Dict[str, str],
    ) -> CheckoutSession:
        try:
            session = stripe.checkout.Session.create(
                api_key=self._secret_key,
                mode="payment",
                payment_method_types=["card"],
                line_items=[{
                    "price_data": {
                        "currency": self.CURRENCY,
                        "product_data": {"name": title},
                        "unit_amount": amount_cents,
                    },
                    "quantity": 1,
                }],
                payment_intent_data={
                    "application_fee_amount": application_fee_cents,
                    "transfer_data": {"destination": destination_account},
                },
                success_url=success_url,
                cancel_url=cancel_url,
                metadata=metadata,
            )
        except stripe.StripeError as e:
            logger.error(f"❌ Checkout session creation failed: {e}")
            raise exceptions.external_service_error("payments", str(e))

        return CheckoutSession(id=session.id, url=session.url)

    # =========================================================================
    # CONNECTED ACCOUNTS
    # =========================================================================

    def create_connected_account(self, *, email: str, user_id: str) -> str:
        try:
            account = stripe.Account.create(
                api_key=self._secret_key,
                type="express",
                country=self.COUNTRY,
                email=email,
                capabilities={
                    "card_payments": {"requested": True},
                    "transfers": {"requested": True},
                },
                metadata={"userId": user_id},
            )
        except stripe.StripeError as e:
            logger.error(f"❌ Connected account creation failed for {user_id}: {e}")
            raise exceptions.external_service_error("payments", str(e))

        return account.id

    def create_onboarding_link(
        self,
        *,
        account_id: str,
        refresh_url: str,
        return_url: str,
    ) -> str:
        try:
            link = stripe.AccountLink.create(
                api_key=self._secret_key,
                account=account_id,
                refresh_url=refresh_url,
                return_url=return_url,
                type="account_onboarding",
            )
        except stripe.StripeError as e:
            logger.error(f"❌ Onboarding link creation failed for {account_id}: {e}")
            raise exceptions.external_service_error("payments", str(e))

        return link.url

    def get_account_status(self, account_id: str) -> AccountStatus:
        try:
            account = stripe.Account.retrieve(account_id, api_key=self._secret_key)
        except stripe.StripeError as e:
            logger.error(f"❌ Account lookup failed for {account_id}: {e}")
            raise exceptions.external_service_error("payments", str(e))

        return AccountStatus(
            account_id=account_id,
            charges_enabled=bool(account.charges_enabled),
            payouts_enabled=bool(account.payouts_enabled),
        )

    # =========================================================================
    # WEBHOOKS
    # =========================================================================

    def construct_event(self, payload: bytes, signature: Optional[str]) -> PaymentEvent:
        if not signature:
            logger.warning("⚠️ Webhook received without signature header")
            raise exceptions.invalid_signature()

        try:
            stripe.Webhook.construct_event(payload, signature, self._webhook_secret)
        except (ValueError, stripe.SignatureVerificationError) as e:
            logger.warning(f"⚠️ Webhook signature verification failed: {e}")
            raise exceptions.invalid_signature()

        # Signature is valid; decode into plain dicts for the service layer
        event = json.loads(payload)
        return PaymentEvent(
            id=event.get("id", ""),
            type=event.get("type", ""),
            data=event.get("data", {}).get("object", {}),
        )
