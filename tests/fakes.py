"""
In-memory stand-ins for the payment processor, object storage and email
provider, used through the same interfaces as the real clients.
"""

import json
from typing import Dict, List, Optional

from flockfur.core import exceptions
from flockfur.integrations import (
    AccountStatus,
    CheckoutSession,
    EmailSender,
    PaymentEvent,
    PaymentGateway,
    StorageGateway,
)


VALID_SIGNATURE = "t=1,v1=valid"


class FakePaymentGateway(PaymentGateway):
    def __init__(self) -> None:
        self.checkouts: List[dict] = []
        self.accounts: Dict[str, AccountStatus] = {}
        self.fail_checkout = False

    def create_checkout(self, **kwargs) -> CheckoutSession:
        if self.fail_checkout:
            raise exceptions.external_service_error("payments", "card network down")
        self.checkouts.append(kwargs)
        session_id = f"cs_test_{len(self.checkouts)}"
        return CheckoutSession(id=session_id, url=f"https://checkout.example.com/{session_id}")

    def create_connected_account(self, *, email: str, user_id: str) -> str:
        account_id = f"acct_{len(self.accounts) + 1}"
        self.accounts[account_id] = AccountStatus(account_id, False, False)
        return account_id

    def create_onboarding_link(self, *, account_id: str, refresh_url: str, return_url: str) -> str:
        return f"https://connect.example.com/{account_id}"

    def get_account_status(self, account_id: str) -> AccountStatus:
        return self.accounts.get(account_id, AccountStatus(account_id, False, False))

    def construct_event(self, payload: bytes, signature: Optional[str]) -> PaymentEvent:
        if signature != VALID_SIGNATURE:
            raise exceptions.invalid_signature()
        body = json.loads(payload)
        return PaymentEvent(
            id=body["id"],
            type=body["type"],
            data=body.get("data", {}).get("object", {}),
        )


class FakeStorage(StorageGateway):
    def get_upload_url(self, key: str, content_type: str) -> str:
        return f"https://uploads.example.com/{key}?signature=abc"

    def get_public_url(self, key: str) -> str:
        return f"https://cdn.example.com/{key}"


class FakeEmailSender(EmailSender):
    def __init__(self) -> None:
        self.sent: List[dict] = []
        self.fail = False

    def send(self, to: str, subject: str, html: str) -> bool:
        if self.fail:
            raise exceptions.external_service_error("email", "provider unavailable")
        self.sent.append({"to": to, "subject": subject, "html": html})
        return True

    def sent_to(self, email: str) -> List[dict]:
        return [m for m in self.sent if m["to"] == email]
