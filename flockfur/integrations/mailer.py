"""
Transactional email delivery through the Resend HTTP API.

Without an API key every send is skipped and logged, so local development
works with no email account.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional

import httpx

from flockfur.core import exceptions


logger = logging.getLogger(__name__)


RESEND_API_URL = "https://api.resend.com/emails"


class EmailSender(ABC):
    @property
    def enabled(self) -> bool:
        return True

    @abstractmethod
    def send(self, to: str, subject: str, html: str) -> bool:
        """
        Send one email.

        Returns:
            True if the message was handed to the provider, False if skipped

        Raises:
            AppException: EXTERNAL_SERVICE_ERROR when the provider rejects it
        """


class ResendEmailSender(EmailSender):
    """
    Resend client.

    Example:
        >>> sender = ResendEmailSender(api_key, "Flock & Fur <noreply@flockfur.com>")
        >>> sender.send("jane@example.com", "Hello", "<p>Hi</p>")
        True
    """

    def __init__(
        self,
        api_key: Optional[str],
        from_address: str,
        timeout: float = 10.0,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self._api_key = api_key
        self._from_address = from_address
        self._client = client or httpx.Client(timeout=timeout)

    @property
    def enabled(self) -> bool:
        return bool(self._api_key)

    def send(self, to: str, subject: str, html: str) -> bool:
        if not self.enabled:
            logger.info(f"Email skipped (no API key): {subject!r} -> {to}")
            return False

        try:
            response = self._client.post(
                RESEND_API_URL,
                headers={"Authorization": f"Bearer {self._api_key}"},
                json={
                    "from": self._from_address,
                    "to": [to],
                    "subject": subject,
                    "html": html,
                },
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise exceptions.external_service_error("email", str(e))

        logger.info(f"📧 Email sent: {subject!r} -> {to}")
        return True

    def close(self) -> None:
        self._client.close()
