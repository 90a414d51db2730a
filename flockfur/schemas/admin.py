"""
==============================================================================
Admin Schemas Module
==============================================================================

Marketplace statistics for the admin dashboard.

==============================================================================
"""

from decimal import Decimal
from typing import Dict
from pydantic import BaseModel, Field


class MarketplaceStats(BaseModel):
    """
    Counts and revenue.

    ``gross_revenue`` sums agreed prices of PAID jobs; ``platform_revenue``
    sums their platform fees.
    """
    users_by_role: Dict[str, int]
    jobs_by_status: Dict[str, int]
    total_users: int
    total_jobs: int
    open_disputes: int
    gross_revenue: Decimal
    platform_revenue: Decimal


class StatsResponse(BaseModel):
    success: bool = Field(default=True)
    stats: MarketplaceStats
