"""
==============================================================================
Security Module - Authentication & Cryptography
==============================================================================

JWT token issuing/verification and password hashing for marketplace users.

Token Structure:
---------------
{
    "sub": "user-uuid",           # Subject (user ID)
    "email": "jane@example.com",  # Login email
    "role": "client",             # client | cleaner | admin
    "type": "access|refresh",     # Token type
    "exp": 1234567890,            # Expiration timestamp
    "iat": 1234567890             # Issued at timestamp
}

Verification distinguishes an expired token (TOKEN_EXPIRED) from any other
decoding failure (TOKEN_INVALID) so clients know when to refresh.

==============================================================================
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any, Dict, Optional

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from flockfur.config import Settings, get_settings
from flockfur.core import exceptions


# Module logger
logger = logging.getLogger(__name__)


class SecurityManager:
    """
    Centralized security manager for authentication operations.

    Example:
        >>> security = SecurityManager()
        >>> hashed = security.hash_password("secret123")
        >>> security.verify_password("secret123", hashed)
        True
        >>> token = security.create_access_token({"sub": "user-id", "role": "client"})
        >>> security.verify_token(token)["sub"]
        'user-id'
    """

    # =========================================================================
    # CLASS CONSTANTS
    # =========================================================================

    TOKEN_TYPE_ACCESS = "access"
    TOKEN_TYPE_REFRESH = "refresh"

    BCRYPT_SCHEMES = ["bcrypt"]
    BCRYPT_DEPRECATED = "auto"

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._pwd_context = CryptContext(
            schemes=self.BCRYPT_SCHEMES,
            deprecated=self.BCRYPT_DEPRECATED
        )
        self._settings = settings or get_settings()

        logger.debug("SecurityManager initialized")

    # =========================================================================
    # PASSWORD HASHING METHODS
    # =========================================================================

    def hash_password(self, plain_password: str) -> str:
        """
        Hash a plain text password using bcrypt.

        Raises:
            ValueError: If the password is empty
        """
        if not plain_password:
            raise ValueError("Password cannot be empty")

        return self._pwd_context.hash(plain_password)

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        """
        Verify a plain text password against a bcrypt hash.

        Malformed hashes count as a mismatch.
        """
        try:
            return self._pwd_context.verify(plain_password, hashed_password)
        except (ValueError, TypeError) as e:
            logger.warning(f"Password verification error: {type(e).__name__}")
            return False

    # =========================================================================
    # JWT TOKEN CREATION METHODS
    # =========================================================================

    def create_access_token(
        self,
        data: Dict[str, Any],
        expires_delta: Optional[timedelta] = None
    ) -> str:
        """Create a short-lived access token for the Authorization header."""
        return self._create_token(
            data=data,
            token_type=self.TOKEN_TYPE_ACCESS,
            expires_delta=expires_delta or timedelta(
                minutes=self._settings.access_token_expire_minutes
            )
        )

    def create_refresh_token(
        self,
        data: Dict[str, Any],
        expires_delta: Optional[timedelta] = None
    ) -> str:
        """Create a long-lived refresh token used to obtain new access tokens."""
        return self._create_token(
            data=data,
            token_type=self.TOKEN_TYPE_REFRESH,
            expires_delta=expires_delta or timedelta(
                days=self._settings.refresh_token_expire_days
            )
        )

    def _create_token(
        self,
        data: Dict[str, Any],
        token_type: str,
        expires_delta: timedelta
    ) -> str:
        payload = data.copy()

        now = datetime.now(timezone.utc)
        expire = now + expires_delta

        payload.update({
            "type": token_type,
            "exp": expire,
            "iat": now
        })

        return jwt.encode(
            payload,
            self._settings.jwt_secret_key,
            algorithm=self._settings.jwt_algorithm
        )

    # =========================================================================
    # JWT TOKEN VERIFICATION METHODS
    # =========================================================================

    def verify_token(
        self,
        token: str,
        token_type: str = TOKEN_TYPE_ACCESS
    ) -> Dict[str, Any]:
        """
        Verify and decode a JWT token.

        Validates signature, expiration and the token type claim.

        Args:
            token: The JWT token string to verify
            token_type: Expected token type ('access' or 'refresh')

        Returns:
            Decoded payload dictionary

        Raises:
            AppException: TOKEN_EXPIRED or TOKEN_INVALID
        """
        try:
            payload = jwt.decode(
                token,
                self._settings.jwt_secret_key,
                algorithms=[self._settings.jwt_algorithm]
            )
        except ExpiredSignatureError:
            logger.debug("Token verification failed: token expired")
            raise exceptions.token_expired()
        except JWTError as e:
            logger.warning(f"Token verification failed: {e}")
            raise exceptions.token_invalid()

        if payload.get("type") != token_type:
            logger.warning(
                f"Token type mismatch: expected {token_type}, "
                f"got {payload.get('type')}"
            )
            raise exceptions.token_invalid()

        if not payload.get("sub"):
            raise exceptions.token_invalid()

        return payload

    # =========================================================================
    # UTILITY METHODS
    # =========================================================================

    def get_access_token_expire_seconds(self) -> int:
        """Get access token expiration time in seconds."""
        return self._settings.access_token_expire_minutes * 60


# =============================================================================
# SINGLETON INSTANCE MANAGEMENT
# =============================================================================

@lru_cache(maxsize=1)
def get_security_manager() -> SecurityManager:
    """Get the global SecurityManager instance."""
    return SecurityManager()
