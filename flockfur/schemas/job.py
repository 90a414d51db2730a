"""
==============================================================================
Job Schemas Module
==============================================================================

Request and response schemas for job posting and the status workflow.

==============================================================================
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator
from flockfur.db.models import AnimalType, EnclosureType, JobStatus, ResolutionType


# Statuses a user can request through the generic status endpoint
USER_SETTABLE_STATUSES = (
    JobStatus.IN_PROGRESS,
    JobStatus.COMPLETED,
    JobStatus.CONFIRMED,
    JobStatus.CANCELLED,
)


# =============================================================================
# CREATE / UPDATE SCHEMAS
# =============================================================================

class JobCreate(BaseModel):
    """
    New job posted by a client.

    City and state are not accepted; every job is in the service area.
    """
    title: str = Field(..., min_length=3, max_length=200)
    description: str = Field(..., min_length=10, max_length=5000)
    animal_types: List[AnimalType] = Field(..., min_length=1)
    enclosure_type: EnclosureType
    enclosure_size: Optional[str] = Field(default=None, max_length=100)
    number_of_animals: int = Field(default=1, ge=1, le=1000)
    address: str = Field(..., min_length=3, max_length=255)
    zip_code: str = Field(..., pattern=r"^\d{5}(-\d{4})?$")
    scheduled_date: Optional[datetime] = None
    suggested_price: Optional[Decimal] = Field(
        default=None, gt=0, le=100000, decimal_places=2
    )

    @field_validator("title", "description", "address")
    @classmethod
    def strip_whitespace(cls, v: str) -> str:
        return v.strip()

    @field_validator("animal_types")
    @classmethod
    def dedupe_animal_types(cls, v: List[AnimalType]) -> List[AnimalType]:
        return list(dict.fromkeys(v))


class JobStatusUpdate(BaseModel):
    """Generic status change: start, complete, confirm or cancel."""
    status: JobStatus

    @field_validator("status")
    @classmethod
    def validate_settable(cls, v: JobStatus) -> JobStatus:
        if v not in USER_SETTABLE_STATUSES:
            allowed = ", ".join(s.value for s in USER_SETTABLE_STATUSES)
            raise ValueError(f"Status must be one of: {allowed}")
        return v


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class JobDetail(BaseModel):
    """Full job information."""
    id: str
    client_id: str
    cleaner_id: Optional[str] = None
    title: str
    description: str
    animal_types: List[AnimalType]
    enclosure_type: EnclosureType
    enclosure_size: Optional[str] = None
    number_of_animals: int
    address: str
    city: str
    state: str
    zip_code: str
    scheduled_date: Optional[datetime] = None
    suggested_price: Optional[Decimal] = None
    agreed_price: Optional[Decimal] = None
    platform_fee: Optional[Decimal] = None
    cleaner_payout: Optional[Decimal] = None
    status: JobStatus
    dispute_reason: Optional[str] = None
    disputed_at: Optional[datetime] = None
    resolution_type: Optional[ResolutionType] = None
    resolution_notes: Optional[str] = None
    resolution_amount: Optional[Decimal] = None
    resolved_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    completed_at: Optional[datetime] = None
    confirmed_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class JobResponse(BaseModel):
    """Single job response."""
    success: bool = Field(default=True)
    job: JobDetail


class JobStatusResponse(BaseModel):
    """
    Result of a status change.

    ``checkout_url`` is set after confirmation when a payment session
    could be created.
    """
    success: bool = Field(default=True)
    job: JobDetail
    checkout_url: Optional[str] = None
