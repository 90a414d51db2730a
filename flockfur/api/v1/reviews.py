"""
==============================================================================
Review Endpoints
==============================================================================

Ratings between client and cleaner after a job is paid.

==============================================================================
"""

from typing import Optional
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from flockfur.db.database import get_db
from flockfur.db.models import User
from flockfur.core.dependencies import get_current_user, get_notifier
from flockfur.services.job_service import JobService
from flockfur.services.notification_service import NotificationService
from flockfur.services.review_service import ReviewService
from flockfur.services.user_service import UserService
from flockfur.schemas.review import (
    RatingResponse,
    ReviewCreate,
    ReviewDetail,
    ReviewListResponse,
    ReviewResponse,
)


router = APIRouter(tags=["Reviews"])


class ReviewController:
    """Controller for review operations."""

    def __init__(self, db: Session, notifier: Optional[NotificationService] = None):
        self._db = db
        self._service = ReviewService(db, notifier)

    def create(self, job_id: str, user: User, data: ReviewCreate) -> ReviewResponse:
        review = self._service.create_review(
            job_id, user, data.reviewee_id, data.rating, data.comment
        )
        return ReviewResponse(review=ReviewDetail.model_validate(review))

    def list_for_job(self, job_id: str, user: User) -> ReviewListResponse:
        JobService(self._db).get_job_for_user(job_id, user)
        reviews = self._service.list_for_job(job_id)
        return ReviewListResponse(
            reviews=[ReviewDetail.model_validate(r) for r in reviews],
            total=len(reviews)
        )

    def rating(self, user_id: str) -> RatingResponse:
        UserService(self._db).get_by_id(user_id)
        return RatingResponse(user_id=user_id, rating=self._service.get_user_rating(user_id))


@router.post(
    "/jobs/{job_id}/reviews",
    response_model=ReviewResponse,
    status_code=status.HTTP_201_CREATED
)
async def create_review(
    job_id: str,
    request: ReviewCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    notifier: NotificationService = Depends(get_notifier)
):
    """Review the other party of a paid job."""
    controller = ReviewController(db, notifier)
    return controller.create(job_id, user, request)


@router.get("/jobs/{job_id}/reviews", response_model=ReviewListResponse)
async def list_job_reviews(
    job_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Reviews left on a job."""
    controller = ReviewController(db)
    return controller.list_for_job(job_id, user)


@router.get("/users/{user_id}/rating", response_model=RatingResponse)
async def get_user_rating(
    user_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Average rating and review count of a user."""
    controller = ReviewController(db)
    return controller.rating(user_id)
