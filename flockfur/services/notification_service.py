"""
==============================================================================
Notification Service Module
==============================================================================

Transactional emails for every step of the job workflow.

Delivery is best effort: a provider failure is logged and never fails the
request that triggered it. Callers notify only after their own transaction
has committed.

==============================================================================
"""

from __future__ import annotations

import logging
from typing import Optional

from flockfur.core.exceptions import AppException
from flockfur.db.models import Job, JobApplication, Review, User
from flockfur.integrations import EmailSender
from flockfur.utils import email_templates


# Module logger
logger = logging.getLogger(__name__)


class NotificationService:
    """
    Builds and sends workflow emails.

    Example:
        >>> notifier = NotificationService(sender, "https://flockfur.com")
        >>> notifier.application_received(job, application)
    """

    def __init__(self, sender: EmailSender, base_url: str) -> None:
        self._sender = sender
        self._base_url = base_url

    # =========================================================================
    # URL HELPERS
    # =========================================================================

    def client_job_url(self, job: Job) -> str:
        return f"{self._base_url}/client/jobs/{job.id}"

    def cleaner_job_url(self, job: Job) -> str:
        return f"{self._base_url}/cleaner/jobs/{job.id}"

    def _deliver(self, recipient: Optional[User], content: email_templates.EmailContent) -> bool:
        if recipient is None:
            return False

        subject, html = content
        try:
            return self._sender.send(recipient.email, subject, html)
        except AppException as e:
            logger.error(f"❌ Failed to send {subject!r} to {recipient.email}: {e.message}")
            return False

    # =========================================================================
    # APPLICATIONS
    # =========================================================================

    def application_received(self, job: Job, application: JobApplication) -> bool:
        return self._deliver(job.client, email_templates.application_received(
            client_name=job.client.name,
            cleaner_name=application.cleaner.name,
            job_title=job.title,
            proposed_price=application.proposed_price,
            message=application.message,
            job_url=self.client_job_url(job),
            base_url=self._base_url,
        ))

    def application_accepted(self, job: Job) -> bool:
        return self._deliver(job.cleaner, email_templates.application_accepted(
            cleaner_name=job.cleaner.name,
            client_name=job.client.name,
            job_title=job.title,
            agreed_price=job.agreed_price,
            cleaner_payout=job.cleaner_payout,
            job_address=f"{job.address}, {job.city}, {job.state} {job.zip_code}",
            job_url=self.cleaner_job_url(job),
            base_url=self._base_url,
        ))

    # =========================================================================
    # JOB PROGRESS
    # =========================================================================

    def job_started(self, job: Job) -> bool:
        return self._deliver(job.client, email_templates.job_started(
            client_name=job.client.name,
            cleaner_name=job.cleaner.name,
            job_title=job.title,
            job_url=self.client_job_url(job),
            base_url=self._base_url,
        ))

    def job_completed(self, job: Job) -> bool:
        return self._deliver(job.client, email_templates.job_completed(
            client_name=job.client.name,
            cleaner_name=job.cleaner.name,
            job_title=job.title,
            agreed_price=job.agreed_price,
            job_url=self.client_job_url(job),
            base_url=self._base_url,
        ))

    def job_confirmed(self, job: Job) -> bool:
        return self._deliver(job.cleaner, email_templates.job_confirmed(
            cleaner_name=job.cleaner.name,
            client_name=job.client.name,
            job_title=job.title,
            cleaner_payout=job.cleaner_payout,
            job_url=self.cleaner_job_url(job),
            base_url=self._base_url,
        ))

    def payment_processed(self, job: Job) -> bool:
        return self._deliver(job.cleaner, email_templates.payment_processed(
            cleaner_name=job.cleaner.name,
            job_title=job.title,
            cleaner_payout=job.cleaner_payout,
            job_url=self.cleaner_job_url(job),
            base_url=self._base_url,
        ))

    # =========================================================================
    # REVIEWS & DISPUTES
    # =========================================================================

    def review_received(self, review: Review) -> bool:
        return self._deliver(review.reviewee, email_templates.review_received(
            reviewee_name=review.reviewee.name,
            reviewer_name=review.reviewer.name,
            job_title=review.job.title,
            rating=review.rating,
            comment=review.comment,
            profile_url=f"{self._base_url}/cleaners/{review.reviewee_id}",
            base_url=self._base_url,
        ))

    def dispute_filed(self, job: Job) -> bool:
        return self._deliver(job.cleaner, email_templates.dispute_filed(
            cleaner_name=job.cleaner.name if job.cleaner else "",
            job_title=job.title,
            reason=job.dispute_reason or "",
            job_url=self.cleaner_job_url(job),
            base_url=self._base_url,
        ))

    def dispute_resolved(self, job: Job) -> int:
        """Notify both parties; returns how many emails went out."""
        sent = 0
        for recipient, url in (
            (job.client, self.client_job_url(job)),
            (job.cleaner, self.cleaner_job_url(job)),
        ):
            if recipient is None:
                continue
            sent += self._deliver(recipient, email_templates.dispute_resolved(
                recipient_name=recipient.name,
                job_title=job.title,
                resolution=job.resolution_type.value if job.resolution_type else "",
                notes=job.resolution_notes,
                job_url=url,
                base_url=self._base_url,
            ))
        return sent
