"""
==============================================================================
SQLAlchemy ORM Models Module
==============================================================================

ORM models for the Flock & Fur cleanup marketplace.

This module defines:
- UserRole, JobStatus, ApplicationStatus, PhotoType: workflow enums
- AnimalType, EnclosureType, ResolutionType: closed vocabularies
- User, CleanerProfile, Job, JobApplication, Photo, Review
- favorite_cleaners: client -> cleaner association table

Database Schema:
---------------

    users ──1:1── cleaner_profiles
      │
      ├──1:N (client_id)──── jobs ──1:N── job_applications
      ├──1:N (cleaner_id)─────┘  ├──1:N── photos
      │                          └──1:N── reviews
      └──N:M── favorite_cleaners (client_id, cleaner_id)

Money columns are NUMERIC(10, 2) and map to ``decimal.Decimal``. The price
triple (agreed_price, platform_fee, cleaner_payout) is either all NULL or
all set; it is written once, at acceptance.

Job State Machine:
-----------------

    OPEN ──accept──▶ PENDING ──start──▶ IN_PROGRESS ──complete──▶ COMPLETED
      │                 │                                           │
      └──cancel──┬──────┘                                  confirm  │  dispute
                 ▼                                                  ▼
             CANCELLED ◀──refund── DISPUTED ◀──dispute── CONFIRMED ──webhook──▶ PAID
                                       └───────────pay / partial──────────────▶ PAID

=============================================================================
"""

from __future__ import annotations

import enum
import uuid
from typing import List, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Table,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, relationship

from flockfur.db.database import Base


# =============================================================================
# ENUMS
# =============================================================================

class UserRole(str, enum.Enum):
    """
    User role enumeration.

    - CLIENT: Posts jobs, accepts applications, confirms and pays
    - CLEANER: Applies to jobs and performs the cleanup
    - ADMIN: Moderates users and resolves disputes
    """

    CLIENT = "client"
    CLEANER = "cleaner"
    ADMIN = "admin"

    def __str__(self) -> str:
        return self.value


class JobStatus(str, enum.Enum):
    """
    Job status enumeration.

    PAID and CANCELLED are terminal. The legal edges between the other
    states live in ``flockfur.services.job_lifecycle``.
    """

    OPEN = "open"
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CONFIRMED = "confirmed"
    PAID = "paid"
    CANCELLED = "cancelled"
    DISPUTED = "disputed"

    def __str__(self) -> str:
        return self.value

    @property
    def is_terminal(self) -> bool:
        """Check if status is a terminal (final) state."""
        return self in (JobStatus.PAID, JobStatus.CANCELLED)

    @property
    def is_disputable(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.CONFIRMED)


class ApplicationStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"

    def __str__(self) -> str:
        return self.value


class PhotoType(str, enum.Enum):
    """
    Photo categories.

    BEFORE photos document the enclosure when the job is posted, AFTER
    photos prove the cleanup, ISSUE photos document problems found on site.
    """

    BEFORE = "before"
    AFTER = "after"
    ISSUE = "issue"

    def __str__(self) -> str:
        return self.value


class AnimalType(str, enum.Enum):
    DOG = "dog"
    CAT = "cat"
    BIRD = "bird"
    HORSE = "horse"
    GOAT = "goat"
    CHICKEN = "chicken"
    PIG = "pig"
    COW = "cow"
    RABBIT = "rabbit"
    OTHER = "other"

    def __str__(self) -> str:
        return self.value


class EnclosureType(str, enum.Enum):
    CAGE = "cage"
    PEN = "pen"
    BARN = "barn"
    STABLE = "stable"
    COOP = "coop"
    YARD = "yard"
    KENNEL = "kennel"
    OTHER = "other"

    def __str__(self) -> str:
        return self.value


class ResolutionType(str, enum.Enum):
    """
    Admin dispute outcomes.

    - REFUND_CLIENT: Job is cancelled, nothing is paid out
    - PAY_CLEANER: Job is paid with the normal split
    - PARTIAL_REFUND: Job is paid, admin records the amount released
    """

    REFUND_CLIENT = "refund_client"
    PAY_CLEANER = "pay_cleaner"
    PARTIAL_REFUND = "partial_refund"

    def __str__(self) -> str:
        return self.value


# =============================================================================
# ASSOCIATION TABLES
# =============================================================================

favorite_cleaners = Table(
    "favorite_cleaners",
    Base.metadata,
    Column(
        "client_id",
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "cleaner_id",
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column("created_at", DateTime, default=func.now(), nullable=False),
)


# =============================================================================
# USER MODEL
# =============================================================================

class User(Base):
    """
    Marketplace account.

    Attributes:
        id: Unique identifier (UUID)
        email: Unique login email (lowercase)
        name: Display name
        password_hash: Bcrypt hashed password
        role: client / cleaner / admin, fixed at registration
        is_active: False blocks login and token use

    Example:
        >>> user = User(
        ...     email="jane@example.com",
        ...     name="Jane",
        ...     password_hash=security.hash_password("secret"),
        ...     role=UserRole.CLIENT
        ... )
    """

    __tablename__ = "users"

    # =========================================================================
    # COLUMNS
    # =========================================================================

    id = Column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
        doc="Unique user identifier (UUID)"
    )

    email = Column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
        doc="Unique login email (lowercase)"
    )

    name = Column(String(100), nullable=False, doc="Display name")

    password_hash = Column(String(255), nullable=False, doc="Bcrypt hashed password")

    phone = Column(String(30), nullable=True)

    role = Column(
        Enum(UserRole),
        default=UserRole.CLIENT,
        nullable=False,
        doc="User role for access control"
    )

    is_active = Column(
        Boolean,
        default=True,
        nullable=False,
        doc="Account status (False = disabled by an admin)"
    )

    created_at = Column(DateTime, default=func.now(), nullable=False)

    updated_at = Column(
        DateTime,
        default=func.now(),
        onupdate=func.now(),
        nullable=False
    )

    # =========================================================================
    # RELATIONSHIPS
    # =========================================================================

    cleaner_profile: Mapped[Optional["CleanerProfile"]] = relationship(
        "CleanerProfile",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
    )

    client_jobs: Mapped[List["Job"]] = relationship(
        "Job",
        back_populates="client",
        foreign_keys="Job.client_id",
    )

    cleaner_jobs: Mapped[List["Job"]] = relationship(
        "Job",
        back_populates="cleaner",
        foreign_keys="Job.cleaner_id",
    )

    favorites: Mapped[List["User"]] = relationship(
        "User",
        secondary=favorite_cleaners,
        primaryjoin=lambda: User.id == favorite_cleaners.c.client_id,
        secondaryjoin=lambda: User.id == favorite_cleaners.c.cleaner_id,
        doc="Cleaners this client has favorited"
    )

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_client(self) -> bool:
        return self.role == UserRole.CLIENT

    @property
    def is_cleaner(self) -> bool:
        return self.role == UserRole.CLEANER

    def __repr__(self) -> str:
        return (
            f"User(id={self.id!r}, "
            f"email={self.email!r}, "
            f"role={self.role.value!r}, "
            f"is_active={self.is_active})"
        )

    def __str__(self) -> str:
        return f"{self.email} ({self.role.value})"


# =============================================================================
# CLEANER PROFILE MODEL
# =============================================================================

class CleanerProfile(Base):
    """
    Public profile and payout account of a cleaner (1:1 with User).

    ``stripe_account_id`` is set the first time the cleaner starts payout
    onboarding; ``stripe_onboarded`` mirrors the processor's
    charges_enabled and payouts_enabled flags.
    """

    __tablename__ = "cleaner_profiles"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    user_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
        index=True,
    )

    bio = Column(Text, nullable=True)

    animal_experience = Column(Text, nullable=True, doc="Free-text animal experience")

    years_experience = Column(Integer, nullable=True)

    has_transportation = Column(Boolean, default=False, nullable=False)

    service_areas = Column(JSON, default=list, nullable=False, doc="Neighborhoods served")

    stripe_account_id = Column(String(255), nullable=True, unique=True)

    stripe_onboarded = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=func.now(), nullable=False)

    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    user: Mapped["User"] = relationship("User", back_populates="cleaner_profile")

    @property
    def can_receive_payments(self) -> bool:
        return bool(self.stripe_account_id) and bool(self.stripe_onboarded)

    def __repr__(self) -> str:
        return (
            f"CleanerProfile(user_id={self.user_id!r}, "
            f"onboarded={self.stripe_onboarded})"
        )


# =============================================================================
# JOB MODEL
# =============================================================================

class Job(Base):
    """
    A cleanup job posted by a client.

    Attributes:
        client_id: Owning client
        cleaner_id: Assigned cleaner, NULL until an application is accepted
        suggested_price: Client's asking price (optional)
        agreed_price / platform_fee / cleaner_payout: Set together at acceptance
        status: Current JobStatus
        stripe_payment_id: Processor payment reference, set when PAID
        dispute_reason / disputed_at: Filled when the client disputes
        resolution_type / resolution_notes / resolution_amount / resolved_at:
            Filled when an admin resolves the dispute

    Jobs are never deleted; cancellation is a status.
    """

    __tablename__ = "jobs"

    # =========================================================================
    # COLUMNS
    # =========================================================================

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    client_id = Column(
        String(36),
        ForeignKey("users.id"),
        nullable=False,
        index=True,
        doc="UUID of the client who posted the job"
    )

    cleaner_id = Column(
        String(36),
        ForeignKey("users.id"),
        nullable=True,
        index=True,
        doc="UUID of the accepted cleaner"
    )

    title = Column(String(200), nullable=False)

    description = Column(Text, nullable=False)

    animal_types = Column(JSON, default=list, nullable=False, doc="List of AnimalType values")

    enclosure_type = Column(Enum(EnclosureType), nullable=False)

    enclosure_size = Column(String(100), nullable=True)

    number_of_animals = Column(Integer, default=1, nullable=False)

    address = Column(String(255), nullable=False)

    city = Column(String(100), default="Birmingham", nullable=False)

    state = Column(String(2), default="AL", nullable=False)

    zip_code = Column(String(10), nullable=False)

    scheduled_date = Column(DateTime, nullable=True)

    suggested_price = Column(Numeric(10, 2), nullable=True)

    agreed_price = Column(Numeric(10, 2), nullable=True)

    platform_fee = Column(Numeric(10, 2), nullable=True)

    cleaner_payout = Column(Numeric(10, 2), nullable=True)

    status = Column(
        Enum(JobStatus),
        default=JobStatus.OPEN,
        nullable=False,
        index=True,
        doc="Current job status"
    )

    stripe_payment_id = Column(String(255), nullable=True)

    dispute_reason = Column(Text, nullable=True)

    disputed_at = Column(DateTime, nullable=True)

    resolution_type = Column(Enum(ResolutionType), nullable=True)

    resolution_notes = Column(Text, nullable=True)

    resolution_amount = Column(Numeric(10, 2), nullable=True)

    resolved_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=func.now(), nullable=False)

    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    completed_at = Column(DateTime, nullable=True)

    confirmed_at = Column(DateTime, nullable=True)

    paid_at = Column(DateTime, nullable=True)

    cancelled_at = Column(DateTime, nullable=True)

    # =========================================================================
    # RELATIONSHIPS
    # =========================================================================

    client: Mapped["User"] = relationship(
        "User",
        back_populates="client_jobs",
        foreign_keys=[client_id],
    )

    cleaner: Mapped[Optional["User"]] = relationship(
        "User",
        back_populates="cleaner_jobs",
        foreign_keys=[cleaner_id],
    )

    applications: Mapped[List["JobApplication"]] = relationship(
        "JobApplication",
        back_populates="job",
        order_by="JobApplication.created_at",
    )

    photos: Mapped[List["Photo"]] = relationship(
        "Photo",
        back_populates="job",
        order_by="Photo.created_at",
    )

    reviews: Mapped[List["Review"]] = relationship("Review", back_populates="job")

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def is_open(self) -> bool:
        return self.status == JobStatus.OPEN

    @property
    def has_price(self) -> bool:
        """Check if the agreed price triple has been set."""
        return self.agreed_price is not None

    def is_party(self, user_id: str) -> bool:
        """Check if a user is the job's client or assigned cleaner."""
        return user_id in (self.client_id, self.cleaner_id)

    def __repr__(self) -> str:
        return (
            f"Job(id={self.id!r}, "
            f"title={self.title!r}, "
            f"status={self.status.value!r})"
        )

    def __str__(self) -> str:
        return f"{self.title} ({self.status.value})"


# =============================================================================
# JOB APPLICATION MODEL
# =============================================================================

class JobApplication(Base):
    """
    A cleaner's application to an OPEN job.

    One per (job, cleaner). Acceptance marks exactly one application
    ACCEPTED and every sibling REJECTED in the same transaction.
    """

    __tablename__ = "job_applications"
    __table_args__ = (
        UniqueConstraint("job_id", "cleaner_id", name="uq_application_job_cleaner"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    job_id = Column(
        String(36),
        ForeignKey("jobs.id"),
        nullable=False,
        index=True,
    )

    cleaner_id = Column(
        String(36),
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )

    message = Column(Text, nullable=True)

    proposed_price = Column(Numeric(10, 2), nullable=True)

    status = Column(
        Enum(ApplicationStatus),
        default=ApplicationStatus.PENDING,
        nullable=False,
    )

    created_at = Column(DateTime, default=func.now(), nullable=False)

    job: Mapped["Job"] = relationship("Job", back_populates="applications")

    cleaner: Mapped["User"] = relationship("User")

    def __repr__(self) -> str:
        return (
            f"JobApplication(id={self.id!r}, "
            f"job_id={self.job_id!r}, "
            f"status={self.status.value!r})"
        )


# =============================================================================
# PHOTO MODEL
# =============================================================================

class Photo(Base):
    """Write-once record of an uploaded job photo."""

    __tablename__ = "photos"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    job_id = Column(String(36), ForeignKey("jobs.id"), nullable=False, index=True)

    uploader_id = Column(String(36), ForeignKey("users.id"), nullable=False)

    type = Column(Enum(PhotoType), nullable=False)

    s3_key = Column(String(500), nullable=False, doc="Object storage key")

    url = Column(String(1000), nullable=False, doc="Public object URL")

    caption = Column(String(500), nullable=True)

    created_at = Column(DateTime, default=func.now(), nullable=False)

    job: Mapped["Job"] = relationship("Job", back_populates="photos")

    uploader: Mapped["User"] = relationship("User")

    def __repr__(self) -> str:
        return f"Photo(id={self.id!r}, job_id={self.job_id!r}, type={self.type.value!r})"


# =============================================================================
# REVIEW MODEL
# =============================================================================

class Review(Base):
    """
    Rating left by one job party for the other after payment.

    Append-only; one per (job, reviewer).
    """

    __tablename__ = "reviews"
    __table_args__ = (
        UniqueConstraint("job_id", "reviewer_id", name="uq_review_job_reviewer"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    job_id = Column(String(36), ForeignKey("jobs.id"), nullable=False, index=True)

    reviewer_id = Column(String(36), ForeignKey("users.id"), nullable=False)

    reviewee_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)

    rating = Column(Integer, nullable=False)

    comment = Column(Text, nullable=True)

    created_at = Column(DateTime, default=func.now(), nullable=False)

    job: Mapped["Job"] = relationship("Job", back_populates="reviews")

    reviewer: Mapped["User"] = relationship("User", foreign_keys=[reviewer_id])

    reviewee: Mapped["User"] = relationship("User", foreign_keys=[reviewee_id])

    def __repr__(self) -> str:
        return (
            f"Review(id={self.id!r}, "
            f"job_id={self.job_id!r}, "
            f"rating={self.rating})"
        )
