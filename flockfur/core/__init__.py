"""
==============================================================================
Core Package
==============================================================================

Core utilities and infrastructure for the application.

Modules:
--------
- exceptions: AppException class and error factory functions
- security: SecurityManager for password hashing and JWT tokens
- dependencies: FastAPI dependency injection functions (auth, roles,
  pagination, external service clients)

Usage:
------
    from flockfur.core import exceptions
    raise exceptions.job_not_found(job_id)

    from flockfur.core.dependencies import get_current_user, require_admin

==============================================================================
"""

from .exceptions import (
    AppException,
    register_exception_handlers,
)
from .security import SecurityManager, get_security_manager

__all__ = [
    # Exceptions
    "AppException",
    "register_exception_handlers",
    # Security
    "SecurityManager",
    "get_security_manager",
]
