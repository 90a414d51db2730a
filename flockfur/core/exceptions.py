"""
Application Exception Handling

Single AppException class for all application errors with FastAPI integration.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


logger = logging.getLogger(__name__)


class AppException(Exception):
    """
    Unified application exception for all error scenarios.

    Provides consistent error response format across the entire API.

    Usage:
        raise AppException("Invalid credentials", "INVALID_CREDENTIALS", 401)
        raise AppException("Job is not open", "INVALID_STATE", 409, {"status": "pending"})

    Error Codes:
        Authentication:
            - INVALID_CREDENTIALS (401)
            - TOKEN_EXPIRED (401)
            - TOKEN_INVALID (401)

        Authorization:
            - FORBIDDEN (403)
            - ADMIN_REQUIRED (403)
            - CLIENT_REQUIRED (403)
            - CLEANER_REQUIRED (403)
            - ACCOUNT_DISABLED (403)

        Not found:
            - USER_NOT_FOUND (404)
            - JOB_NOT_FOUND (404)
            - APPLICATION_NOT_FOUND (404)
            - PROFILE_NOT_FOUND (404)

        Workflow:
            - INVALID_STATE (409)
            - EMAIL_EXISTS (409)
            - DUPLICATE_APPLICATION (409)
            - DUPLICATE_REVIEW (409)

        Validation:
            - VALIDATION_ERROR (422)
            - PRICE_REQUIRED (422)

        External services:
            - INVALID_SIGNATURE (400)
            - EXTERNAL_SERVICE_ERROR (502)
            - PAYMENTS_NOT_CONFIGURED (503)
            - STORAGE_NOT_CONFIGURED (503)
    """

    def __init__(
        self,
        message: str,
        code: str,
        status_code: int = 400,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize application exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code (e.g., "JOB_NOT_FOUND")
            status_code: HTTP status code (default: 400)
            details: Additional error context (optional)
        """
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.utcnow().isoformat()
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON response."""
        error_dict = {
            "success": False,
            "error": {
                "code": self.code,
                "message": self.message,
                "timestamp": self.timestamp
            }
        }

        if self.details:
            error_dict["error"]["details"] = self.details

        return error_dict


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    FastAPI exception handler for AppException.

    Converts AppException to consistent JSON error response.
    """
    if exc.status_code >= 500:
        logger.error(f"❌ {request.method} {request.url.path}: {exc.code} {exc.message}")

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def request_validation_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """Render request body/query validation failures in the error envelope."""
    error = validation_error(
        "Request validation failed",
        {"errors": jsonable_encoder(exc.errors())}
    )
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register all exception handlers with FastAPI app.

    Call this in main.py after creating the FastAPI instance.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)


# ============================================
# AUTHENTICATION
# ============================================

def invalid_credentials() -> AppException:
    """Create invalid credentials exception."""
    return AppException("Invalid email or password", "INVALID_CREDENTIALS", 401)


def token_expired() -> AppException:
    """Create token expired exception."""
    return AppException("Token has expired", "TOKEN_EXPIRED", 401)


def token_invalid() -> AppException:
    """Create invalid token exception."""
    return AppException("Invalid or malformed token", "TOKEN_INVALID", 401)


# ============================================
# AUTHORIZATION
# ============================================

def account_disabled() -> AppException:
    """Create account disabled exception."""
    return AppException("Account has been disabled", "ACCOUNT_DISABLED", 403)


def forbidden(message: str = "Access denied") -> AppException:
    """Create forbidden access exception."""
    return AppException(message, "FORBIDDEN", 403)


def admin_required() -> AppException:
    return AppException("Admin role required", "ADMIN_REQUIRED", 403)


def client_required() -> AppException:
    return AppException("Client role required", "CLIENT_REQUIRED", 403)


def cleaner_required() -> AppException:
    return AppException("Cleaner role required", "CLEANER_REQUIRED", 403)


# ============================================
# NOT FOUND
# ============================================

def user_not_found(user_id: Optional[str] = None) -> AppException:
    """Create user not found exception."""
    details = {"user_id": user_id} if user_id else {}
    return AppException("User not found", "USER_NOT_FOUND", 404, details)


def job_not_found(job_id: Optional[str] = None) -> AppException:
    """Create job not found exception."""
    details = {"job_id": job_id} if job_id else {}
    return AppException("Job not found", "JOB_NOT_FOUND", 404, details)


def application_not_found(application_id: Optional[str] = None) -> AppException:
    details = {"application_id": application_id} if application_id else {}
    return AppException("Application not found", "APPLICATION_NOT_FOUND", 404, details)


def profile_not_found(user_id: Optional[str] = None) -> AppException:
    details = {"user_id": user_id} if user_id else {}
    return AppException("Cleaner profile not found", "PROFILE_NOT_FOUND", 404, details)


# ============================================
# WORKFLOW / CONFLICTS
# ============================================

def invalid_state(current: str, message: Optional[str] = None) -> AppException:
    """Create invalid job state exception."""
    return AppException(
        message or f"Operation not allowed while job is {current}",
        "INVALID_STATE",
        409,
        {"current_status": current}
    )


def email_exists(email: str) -> AppException:
    """Create email already registered exception."""
    return AppException(
        f"Email '{email}' is already registered",
        "EMAIL_EXISTS",
        409,
        {"email": email}
    )


def duplicate_application(job_id: str) -> AppException:
    return AppException(
        "You have already applied to this job",
        "DUPLICATE_APPLICATION",
        409,
        {"job_id": job_id}
    )


def duplicate_review(job_id: str) -> AppException:
    return AppException(
        "You have already reviewed this job",
        "DUPLICATE_REVIEW",
        409,
        {"job_id": job_id}
    )


# ============================================
# VALIDATION
# ============================================

def validation_error(message: str, details: Optional[Dict[str, Any]] = None) -> AppException:
    """Create validation error exception."""
    return AppException(message, "VALIDATION_ERROR", 422, details)


def price_required(job_id: str) -> AppException:
    return AppException(
        "Job has no suggested price and the application has no proposed price",
        "PRICE_REQUIRED",
        422,
        {"job_id": job_id}
    )


# ============================================
# EXTERNAL SERVICES
# ============================================

def invalid_signature() -> AppException:
    """Create webhook signature failure exception."""
    return AppException("Invalid webhook signature", "INVALID_SIGNATURE", 400)


def external_service_error(service: str, message: str) -> AppException:
    """Create upstream service failure exception."""
    return AppException(
        f"{service} request failed: {message}",
        "EXTERNAL_SERVICE_ERROR",
        502,
        {"service": service}
    )


def payments_not_configured() -> AppException:
    return AppException(
        "Payment processing is not configured",
        "PAYMENTS_NOT_CONFIGURED",
        503
    )


def storage_not_configured() -> AppException:
    return AppException(
        "Photo storage is not configured",
        "STORAGE_NOT_CONFIGURED",
        503
    )
