"""
==============================================================================
Job Lifecycle Module
==============================================================================

The job state machine: which status changes exist, who may trigger each
one, and the timestamps each one records.

Transition Table:
----------------

    From         To           Actors
    ───────────  ───────────  ─────────────────────────
    OPEN         PENDING      system (application acceptance)
    PENDING      IN_PROGRESS  assigned cleaner, admin
    IN_PROGRESS  COMPLETED    assigned cleaner, admin
    COMPLETED    CONFIRMED    owning client, admin
    CONFIRMED    PAID         payment webhook
    OPEN         CANCELLED    owning client, admin
    PENDING      CANCELLED    owning client, admin
    COMPLETED    DISPUTED     owning client
    CONFIRMED    DISPUTED     owning client
    DISPUTED     CANCELLED    admin
    DISPUTED     PAID         admin

Anything not in the table is rejected: an unknown edge raises INVALID_STATE,
a known edge requested by the wrong actor raises FORBIDDEN. A user with no
relationship to the job is always FORBIDDEN, whatever the job's state.

Actors are derived on every call from ``job.client_id``, ``job.cleaner_id``
and the user's role; nothing about permissions is stored.

==============================================================================
"""

from __future__ import annotations

import enum
import logging
from datetime import datetime
from typing import Dict, FrozenSet, Iterable, Optional, Tuple

from flockfur.core import exceptions
from flockfur.db.models import Job, JobStatus, User, UserRole


# Module logger
logger = logging.getLogger(__name__)


class Actor(str, enum.Enum):
    """Capacity in which a caller acts on a particular job."""

    CLIENT = "client"
    CLEANER = "cleaner"
    ADMIN = "admin"
    SYSTEM = "system"
    PAYMENT_WEBHOOK = "payment_webhook"

    def __str__(self) -> str:
        return self.value


TRANSITIONS: Dict[Tuple[JobStatus, JobStatus], FrozenSet[Actor]] = {
    (JobStatus.OPEN, JobStatus.PENDING): frozenset({Actor.SYSTEM}),
    (JobStatus.PENDING, JobStatus.IN_PROGRESS): frozenset({Actor.CLEANER, Actor.ADMIN}),
    (JobStatus.IN_PROGRESS, JobStatus.COMPLETED): frozenset({Actor.CLEANER, Actor.ADMIN}),
    (JobStatus.COMPLETED, JobStatus.CONFIRMED): frozenset({Actor.CLIENT, Actor.ADMIN}),
    (JobStatus.CONFIRMED, JobStatus.PAID): frozenset({Actor.PAYMENT_WEBHOOK}),
    (JobStatus.OPEN, JobStatus.CANCELLED): frozenset({Actor.CLIENT, Actor.ADMIN}),
    (JobStatus.PENDING, JobStatus.CANCELLED): frozenset({Actor.CLIENT, Actor.ADMIN}),
    (JobStatus.COMPLETED, JobStatus.DISPUTED): frozenset({Actor.CLIENT}),
    (JobStatus.CONFIRMED, JobStatus.DISPUTED): frozenset({Actor.CLIENT}),
    (JobStatus.DISPUTED, JobStatus.CANCELLED): frozenset({Actor.ADMIN}),
    (JobStatus.DISPUTED, JobStatus.PAID): frozenset({Actor.ADMIN}),
}


# =============================================================================
# ACTOR RESOLUTION
# =============================================================================

def actors_for(user: User, job: Job) -> FrozenSet[Actor]:
    """
    Resolve the capacities in which ``user`` may act on ``job``.

    An admin who posted the job also acts as its client.

    Raises:
        ValueError: If the user's role is not a known UserRole
    """
    actors = set()

    if user.role == UserRole.ADMIN:
        actors.add(Actor.ADMIN)
        if job.client_id == user.id:
            actors.add(Actor.CLIENT)
    elif user.role == UserRole.CLIENT:
        if job.client_id == user.id:
            actors.add(Actor.CLIENT)
    elif user.role == UserRole.CLEANER:
        if job.cleaner_id == user.id:
            actors.add(Actor.CLEANER)
    else:
        raise ValueError(f"Unknown user role: {user.role!r}")

    return frozenset(actors)


# =============================================================================
# TRANSITION CHECKS
# =============================================================================

def allowed_actors(current: JobStatus, target: JobStatus) -> Optional[FrozenSet[Actor]]:
    """Actors permitted on the edge, or None if the edge does not exist."""
    return TRANSITIONS.get((current, target))


def is_allowed(current: JobStatus, target: JobStatus, actor: Actor) -> bool:
    permitted = allowed_actors(current, target)
    return permitted is not None and actor in permitted


def check_transition(job: Job, target: JobStatus, actors: Iterable[Actor]) -> None:
    """
    Validate a status change before any write happens.

    Args:
        job: Job in its current state
        target: Requested status
        actors: Capacities of the caller (see ``actors_for``)

    Raises:
        AppException: FORBIDDEN if the caller has no relationship to the job
            or the edge exists but not for these actors; INVALID_STATE if the
            edge does not exist
    """
    actors = frozenset(actors)
    if not actors:
        raise exceptions.forbidden("You are not a party to this job")

    permitted = allowed_actors(job.status, target)
    if permitted is None:
        raise exceptions.invalid_state(
            job.status.value,
            f"Cannot move job from {job.status.value} to {target.value}"
        )

    if not actors & permitted:
        logger.warning(
            f"Transition {job.status.value} -> {target.value} denied for "
            f"{sorted(a.value for a in actors)} on job {job.id}"
        )
        raise exceptions.forbidden(
            f"You are not allowed to move this job to {target.value}"
        )


def check_user_transition(job: Job, target: JobStatus, user: User) -> FrozenSet[Actor]:
    """``check_transition`` for an authenticated user; returns the resolved actors."""
    actors = actors_for(user, job)
    check_transition(job, target, actors)
    return actors


# =============================================================================
# SIDE EFFECTS
# =============================================================================

def apply_transition(job: Job, target: JobStatus, now: Optional[datetime] = None) -> Job:
    """
    Set the new status and the timestamp that goes with it.

    The caller is responsible for having called ``check_transition`` and
    for committing.
    """
    now = now or datetime.utcnow()
    previous = job.status

    job.status = target

    if target == JobStatus.COMPLETED:
        job.completed_at = now
    elif target == JobStatus.CONFIRMED:
        job.confirmed_at = now
    elif target == JobStatus.PAID:
        job.paid_at = now
    elif target == JobStatus.DISPUTED:
        job.disputed_at = now
    elif target == JobStatus.CANCELLED:
        job.cancelled_at = now

    if previous == JobStatus.DISPUTED:
        job.resolved_at = now

    logger.info(f"Job {job.id}: {previous.value} -> {target.value}")
    return job
