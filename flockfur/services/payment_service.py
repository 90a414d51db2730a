"""
==============================================================================
Payment Service Module
==============================================================================

Client checkout, cleaner payout onboarding and payment webhooks.

Payment Flow:
------------
    confirm job ──▶ create_checkout ──▶ client pays on hosted page
                                              │
    webhook checkout.session.completed ◀──────┘
          │
    UPDATE jobs SET status = PAID ... WHERE id = :job_id AND status = CONFIRMED
          │
    1 row  ──▶ notify cleaner
    0 rows ──▶ already paid or not payable, acknowledged and ignored

The processor retries webhooks, so the PAID transition has to be a
conditional update; replays never send a second email.

==============================================================================
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Tuple

from sqlalchemy.orm import Session

from flockfur.config import Settings, get_settings
from flockfur.core import exceptions
from flockfur.db.models import CleanerProfile, Job, JobStatus, User, UserRole
from flockfur.integrations import (
    EVENT_ACCOUNT_UPDATED,
    EVENT_CHECKOUT_COMPLETED,
    AccountStatus,
    CheckoutSession,
    PaymentEvent,
    PaymentGateway,
)
from flockfur.services.notification_service import NotificationService
from flockfur.services.profile_service import ProfileService
from flockfur.utils.fees import calculate_split, to_minor_units


# Module logger
logger = logging.getLogger(__name__)


class PaymentService:
    """
    Example:
        >>> service = PaymentService(db_session, gateway, notifier)
        >>> session = service.create_checkout(job.id, client)
        >>> service.handle_webhook(request_body, signature_header)
    """

    def __init__(
        self,
        db: Session,
        gateway: Optional[PaymentGateway],
        notifier: Optional[NotificationService] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._db = db
        self._gateway = gateway
        self._notifier = notifier
        self._settings = settings or get_settings()

    @property
    def gateway(self) -> PaymentGateway:
        if self._gateway is None:
            raise exceptions.payments_not_configured()
        return self._gateway

    # =========================================================================
    # CHECKOUT
    # =========================================================================

    def create_checkout(self, job_id: str, user: User) -> CheckoutSession:
        """
        Open a hosted checkout for a CONFIRMED job.

        Raises:
            AppException: JOB_NOT_FOUND, FORBIDDEN, INVALID_STATE,
                VALIDATION_ERROR when the cleaner cannot receive payouts,
                PRICE_REQUIRED, EXTERNAL_SERVICE_ERROR
        """
        job = self._db.query(Job).filter(Job.id == job_id).first()
        if not job:
            raise exceptions.job_not_found(job_id)

        if user.role != UserRole.ADMIN and job.client_id != user.id:
            raise exceptions.forbidden("Only the job owner can pay for this job")

        if job.status != JobStatus.CONFIRMED:
            raise exceptions.invalid_state(job.status.value, "Only confirmed jobs can be paid")

        profile = job.cleaner.cleaner_profile if job.cleaner else None
        if profile is None or not profile.can_receive_payments:
            raise exceptions.validation_error(
                "The cleaner has not finished payout onboarding yet",
                {"cleaner_id": job.cleaner_id}
            )

        if job.agreed_price is None:
            raise exceptions.price_required(job.id)

        split = calculate_split(job.agreed_price)
        job_url = f"{self._settings.base_url}/client/jobs/{job.id}"

        session = self.gateway.create_checkout(
            title=job.title,
            amount_cents=to_minor_units(split.agreed_price),
            application_fee_cents=to_minor_units(split.platform_fee),
            destination_account=profile.stripe_account_id,
            success_url=f"{job_url}?payment=success",
            cancel_url=f"{job_url}?payment=cancelled",
            metadata={
                "jobId": job.id,
                "clientId": job.client_id,
                "cleanerId": job.cleaner_id,
            },
        )

        logger.info(f"✅ Checkout {session.id} created for job {job.id}")
        return session

    # =========================================================================
    # PAYOUT ONBOARDING
    # =========================================================================

    def _cleaner_profile(self, cleaner: User) -> CleanerProfile:
        return ProfileService(self._db).get_or_create(cleaner)

    def connect_account(self, cleaner: User) -> Tuple[str, str]:
        """
        Create the cleaner's connected account on first use and return an
        onboarding link.

        Returns:
            Tuple of (onboarding URL, account id)
        """
        profile = self._cleaner_profile(cleaner)

        if not profile.stripe_account_id:
            profile.stripe_account_id = self.gateway.create_connected_account(
                email=cleaner.email, user_id=cleaner.id
            )
            self._db.commit()
            logger.info(f"✅ Connected account {profile.stripe_account_id} for {cleaner.email}")

        profile_url = f"{self._settings.base_url}/cleaner/profile"
        url = self.gateway.create_onboarding_link(
            account_id=profile.stripe_account_id,
            refresh_url=f"{profile_url}?stripe=refresh",
            return_url=f"{profile_url}?stripe=success",
        )
        return url, profile.stripe_account_id

    def get_connect_status(self, cleaner: User) -> Optional[AccountStatus]:
        """
        Refresh the onboarding flag from the processor.

        Returns None when the cleaner has no connected account yet.
        """
        profile = self._cleaner_profile(cleaner)

        if not profile.stripe_account_id:
            self._db.commit()
            return None

        status = self.gateway.get_account_status(profile.stripe_account_id)
        if profile.stripe_onboarded != status.onboarded:
            profile.stripe_onboarded = status.onboarded
            logger.info(f"Payout onboarding for {cleaner.email}: {status.onboarded}")
        self._db.commit()
        return status

    # =========================================================================
    # WEBHOOKS
    # =========================================================================

    def handle_webhook(self, payload: bytes, signature: Optional[str]) -> PaymentEvent:
        """
        Verify and apply a processor event.

        Raises:
            AppException: INVALID_SIGNATURE
        """
        event = self.gateway.construct_event(payload, signature)

        if event.type == EVENT_CHECKOUT_COMPLETED:
            self._handle_checkout_completed(event)
        elif event.type == EVENT_ACCOUNT_UPDATED:
            self._handle_account_updated(event)
        else:
            logger.info(f"Ignoring webhook event {event.id} ({event.type})")

        return event

    def mark_paid(self, job_id: str, payment_reference: Optional[str]) -> bool:
        """
        CONFIRMED -> PAID exactly once.

        Returns:
            True if this call moved the job to PAID
        """
        updated = self._db.query(Job).filter(
            Job.id == job_id,
            Job.status == JobStatus.CONFIRMED,
        ).update(
            {
                Job.status: JobStatus.PAID,
                Job.stripe_payment_id: payment_reference,
                Job.paid_at: datetime.utcnow(),
            },
            synchronize_session=False,
        )
        self._db.commit()

        if updated != 1:
            logger.info(f"Payment for job {job_id} already recorded or not payable")
            return False

        logger.info(f"✅ Job paid: {job_id} ({payment_reference})")
        return True

    def _handle_checkout_completed(self, event: PaymentEvent) -> None:
        metadata = event.data.get("metadata") or {}
        job_id = metadata.get("jobId")

        if not job_id:
            logger.warning(f"⚠️ Checkout event {event.id} without jobId metadata")
            return

        reference = event.data.get("payment_intent") or event.data.get("id")
        if not self.mark_paid(job_id, reference):
            return

        job = self._db.query(Job).filter(Job.id == job_id).first()
        if job is not None:
            self._db.refresh(job)
            if self._notifier:
                self._notifier.payment_processed(job)

    def _handle_account_updated(self, event: PaymentEvent) -> None:
        account_id = event.data.get("id")
        profile = (
            self._db.query(CleanerProfile)
            .filter(CleanerProfile.stripe_account_id == account_id)
            .first()
        )

        if profile is None:
            logger.warning(f"⚠️ account.updated for unknown account {account_id}")
            return

        onboarded = bool(event.data.get("charges_enabled")) and bool(event.data.get("payouts_enabled"))
        profile.stripe_onboarded = onboarded
        self._db.commit()
        logger.info(f"Account {account_id} onboarded={onboarded}")
