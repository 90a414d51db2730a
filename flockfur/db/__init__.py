"""
==============================================================================
Database Package
==============================================================================

SQLAlchemy database infrastructure and ORM models.

Architecture:
------------
├── database.py   - DatabaseManager class, session factory
├── models.py     - SQLAlchemy ORM model classes
└── init_db.py    - DatabaseInitializer for setup

Usage:
------
    from flockfur.db import DatabaseManager, Job, JobStatus

    with DatabaseManager().session_scope() as session:
        open_jobs = session.query(Job).filter(Job.status == JobStatus.OPEN).all()

==============================================================================
"""

from .database import DatabaseManager, Base, get_db
from .models import (
    AnimalType,
    ApplicationStatus,
    CleanerProfile,
    EnclosureType,
    Job,
    JobApplication,
    JobStatus,
    Photo,
    PhotoType,
    ResolutionType,
    Review,
    User,
    UserRole,
    favorite_cleaners,
)
from .init_db import DatabaseInitializer, init_db

__all__ = [
    # Database management
    "DatabaseManager",
    "Base",
    "get_db",
    # Models
    "User",
    "CleanerProfile",
    "Job",
    "JobApplication",
    "Photo",
    "Review",
    "favorite_cleaners",
    # Enums
    "UserRole",
    "JobStatus",
    "ApplicationStatus",
    "PhotoType",
    "AnimalType",
    "EnclosureType",
    "ResolutionType",
    # Initialization
    "DatabaseInitializer",
    "init_db",
]
