"""
==============================================================================
Review Schemas Module
==============================================================================

Post-payment ratings between a job's client and cleaner.

==============================================================================
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field


class ReviewCreate(BaseModel):
    reviewee_id: str = Field(..., min_length=1)
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = Field(default=None, max_length=2000)


class ReviewDetail(BaseModel):
    id: str
    job_id: str
    reviewer_id: str
    reviewee_id: str
    rating: int
    comment: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class ReviewResponse(BaseModel):
    success: bool = Field(default=True)
    review: ReviewDetail


class ReviewListResponse(BaseModel):
    success: bool = Field(default=True)
    reviews: List[ReviewDetail]
    total: int


class RatingSummary(BaseModel):
    """Average rating (None when unrated) and number of reviews."""
    average: Optional[float] = None
    count: int = 0


class RatingResponse(BaseModel):
    success: bool = Field(default=True)
    user_id: str
    rating: RatingSummary
