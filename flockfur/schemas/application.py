"""
==============================================================================
Application Schemas Module
==============================================================================

Request and response schemas for cleaner applications and acceptance.

==============================================================================
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator
from flockfur.db.models import ApplicationStatus, JobApplication
from flockfur.schemas.job import JobDetail


class ApplicationCreate(BaseModel):
    """Cleaner's application to an open job."""
    message: Optional[str] = Field(default=None, max_length=2000)
    proposed_price: Optional[Decimal] = Field(
        default=None, gt=0, le=100000, decimal_places=2
    )

    @field_validator("message")
    @classmethod
    def strip_message(cls, v: Optional[str]) -> Optional[str]:
        if v:
            v = v.strip()
            return v if v else None
        return None


class ApplicationDetail(BaseModel):
    """Application with the applicant's display name."""
    id: str
    job_id: str
    cleaner_id: str
    cleaner_name: Optional[str] = None
    message: Optional[str] = None
    proposed_price: Optional[Decimal] = None
    status: ApplicationStatus
    created_at: datetime

    class Config:
        from_attributes = True

    @classmethod
    def from_model(cls, application: JobApplication) -> "ApplicationDetail":
        return cls(
            id=application.id,
            job_id=application.job_id,
            cleaner_id=application.cleaner_id,
            cleaner_name=application.cleaner.name if application.cleaner else None,
            message=application.message,
            proposed_price=application.proposed_price,
            status=application.status,
            created_at=application.created_at,
        )


class ApplicationResponse(BaseModel):
    success: bool = Field(default=True)
    application: ApplicationDetail


class ApplicationListResponse(BaseModel):
    success: bool = Field(default=True)
    applications: List[ApplicationDetail]
    total: int


class AcceptApplicationResponse(BaseModel):
    """Accepted application together with the now PENDING job."""
    success: bool = Field(default=True)
    application: ApplicationDetail
    job: JobDetail
