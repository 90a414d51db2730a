"""
Marketplace statistics for the admin dashboard.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from sqlalchemy import func
from sqlalchemy.orm import Session

from flockfur.db.models import Job, JobStatus, User, UserRole
from flockfur.schemas.admin import MarketplaceStats
from flockfur.utils.fees import to_money


# Module logger
logger = logging.getLogger(__name__)


class AdminService:

    def __init__(self, db: Session) -> None:
        self._db = db

    def get_stats(self) -> MarketplaceStats:
        """
        User counts by role, job counts by status and revenue over PAID jobs.

        Every role and status is present in the result, with zero counts
        where nothing matches.
        """
        users_by_role = {role.value: 0 for role in UserRole}
        for role, count in self._db.query(User.role, func.count(User.id)).group_by(User.role):
            users_by_role[role.value] = count

        jobs_by_status = {status.value: 0 for status in JobStatus}
        for status, count in self._db.query(Job.status, func.count(Job.id)).group_by(Job.status):
            jobs_by_status[status.value] = count

        gross, fees = self._db.query(
            func.coalesce(func.sum(Job.agreed_price), 0),
            func.coalesce(func.sum(Job.platform_fee), 0),
        ).filter(Job.status == JobStatus.PAID).one()

        stats = MarketplaceStats(
            users_by_role=users_by_role,
            jobs_by_status=jobs_by_status,
            total_users=sum(users_by_role.values()),
            total_jobs=sum(jobs_by_status.values()),
            open_disputes=jobs_by_status[JobStatus.DISPUTED.value],
            gross_revenue=to_money(Decimal(str(gross))),
            platform_revenue=to_money(Decimal(str(fees))),
        )

        logger.debug(f"Stats computed: {stats.total_users} users, {stats.total_jobs} jobs")
        return stats
