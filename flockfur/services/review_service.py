"""
==============================================================================
Review Service Module
==============================================================================

Ratings exchanged between a job's client and cleaner once the job is PAID.
Each party may review the other once per job.

==============================================================================
"""

from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from flockfur.core import exceptions
from flockfur.db.models import Job, JobStatus, Review, User
from flockfur.schemas.review import RatingSummary
from flockfur.services.notification_service import NotificationService


# Module logger
logger = logging.getLogger(__name__)


MIN_RATING = 1
MAX_RATING = 5


class ReviewService:
    """
    Example:
        >>> service = ReviewService(db_session, notifier)
        >>> service.create_review(job.id, client, job.cleaner_id, 5, "Spotless coop")
        >>> service.get_user_rating(job.cleaner_id)
        RatingSummary(average=5.0, count=1)
    """

    def __init__(self, db: Session, notifier: Optional[NotificationService] = None) -> None:
        self._db = db
        self._notifier = notifier

    def create_review(
        self,
        job_id: str,
        reviewer: User,
        reviewee_id: str,
        rating: int,
        comment: Optional[str] = None,
    ) -> Review:
        """
        Review the other party of a PAID job.

        Raises:
            AppException: VALIDATION_ERROR for a rating outside 1-5 or the
                wrong reviewee, JOB_NOT_FOUND, INVALID_STATE unless PAID,
                FORBIDDEN for a non-party, DUPLICATE_REVIEW
        """
        if not MIN_RATING <= rating <= MAX_RATING:
            raise exceptions.validation_error(
                f"Rating must be between {MIN_RATING} and {MAX_RATING}",
                {"rating": rating}
            )

        job = self._db.query(Job).filter(Job.id == job_id).first()
        if not job:
            raise exceptions.job_not_found(job_id)

        if job.status != JobStatus.PAID:
            raise exceptions.invalid_state(job.status.value, "Reviews open once the job is paid")

        if not job.is_party(reviewer.id):
            raise exceptions.forbidden("Only the job's client or cleaner can leave a review")

        other_party = job.cleaner_id if reviewer.id == job.client_id else job.client_id
        if reviewee_id != other_party:
            raise exceptions.validation_error(
                "You can only review the other party of this job",
                {"reviewee_id": reviewee_id}
            )

        existing = self._db.query(Review.id).filter(
            Review.job_id == job.id,
            Review.reviewer_id == reviewer.id,
        ).first()
        if existing:
            raise exceptions.duplicate_review(job.id)

        review = Review(
            job_id=job.id,
            reviewer_id=reviewer.id,
            reviewee_id=reviewee_id,
            rating=rating,
            comment=comment.strip() if comment and comment.strip() else None,
        )
        self._db.add(review)

        try:
            self._db.commit()
        except IntegrityError:
            self._db.rollback()
            raise exceptions.duplicate_review(job.id)

        self._db.refresh(review)
        logger.info(f"✅ Review {review.id}: {reviewer.email} rated {reviewee_id} {rating}/5")

        if self._notifier:
            self._notifier.review_received(review)
        return review

    def get_user_rating(self, user_id: str) -> RatingSummary:
        average, count = self._db.query(
            func.avg(Review.rating), func.count(Review.id)
        ).filter(Review.reviewee_id == user_id).one()

        if not count:
            return RatingSummary(average=None, count=0)
        return RatingSummary(average=round(float(average), 2), count=count)

    def list_for_job(self, job_id: str) -> List[Review]:
        if not self._db.query(Job.id).filter(Job.id == job_id).first():
            raise exceptions.job_not_found(job_id)

        return (
            self._db.query(Review)
            .filter(Review.job_id == job_id)
            .order_by(Review.created_at.asc())
            .all()
        )

    def list_for_user(self, user_id: str) -> List[Review]:
        """Reviews a user has received, newest first."""
        return (
            self._db.query(Review)
            .filter(Review.reviewee_id == user_id)
            .order_by(Review.created_at.desc())
            .all()
        )
