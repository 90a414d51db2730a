"""
==============================================================================
Dispute Schemas Module
==============================================================================

Client dispute filing and admin resolution.

==============================================================================
"""

from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator, model_validator
from flockfur.db.models import ResolutionType
from flockfur.schemas.job import JobDetail


class DisputeCreate(BaseModel):
    reason: str = Field(..., min_length=5, max_length=2000)

    @field_validator("reason")
    @classmethod
    def strip_reason(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 5:
            raise ValueError("Reason must be at least 5 characters")
        return v


class DisputeResolve(BaseModel):
    """
    Admin resolution.

    ``amount`` is the sum released to the cleaner and is required for (and
    only accepted with) a partial refund.
    """
    resolution: ResolutionType
    notes: Optional[str] = Field(default=None, max_length=2000)
    amount: Optional[Decimal] = Field(default=None, gt=0, decimal_places=2)

    @model_validator(mode="after")
    def validate_amount(self):
        if self.resolution == ResolutionType.PARTIAL_REFUND:
            if self.amount is None:
                raise ValueError("Amount is required for a partial refund")
        elif self.amount is not None:
            raise ValueError("Amount is only accepted for a partial refund")
        return self


class DisputeResponse(BaseModel):
    success: bool = Field(default=True)
    job: JobDetail


class DisputeListResponse(BaseModel):
    success: bool = Field(default=True)
    disputes: List[JobDetail]
    total: int
