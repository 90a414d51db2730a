"""
==============================================================================
Payment Tests
==============================================================================

Checkout on confirmation, webhook handling and payout onboarding, all
against the in-memory payment gateway.

==============================================================================
"""

import json

from fastapi.testclient import TestClient

from flockfur.core.dependencies import get_integrations
from flockfur.db.models import CleanerProfile, Job, JobStatus
from flockfur.integrations import AccountStatus, Integrations
from flockfur.main import app

from fakes import VALID_SIGNATURE, FakeEmailSender


def checkout_completed(job_id: str, event_id: str = "evt_1") -> dict:
    return {
        "id": event_id,
        "type": "checkout.session.completed",
        "data": {"object": {
            "id": "cs_test_1",
            "payment_intent": "pi_123",
            "metadata": {"jobId": job_id},
        }},
    }


def send_webhook(client: TestClient, event: dict, signature: str = VALID_SIGNATURE):
    return client.post(
        "/api/v1/payments/webhook",
        content=json.dumps(event),
        headers={"stripe-signature": signature, "Content-Type": "application/json"}
    )


class TestCheckout:

    def test_confirm_returns_checkout_url(
        self,
        market,
        payments,
        onboarded_cleaner,
        client_headers: dict,
        cleaner_headers: dict,
    ):
        result = market.confirmed_job(client_headers, cleaner_headers)

        assert result["checkout_url"] == "https://checkout.example.com/cs_test_1"
        checkout = payments.checkouts[0]
        assert checkout["amount_cents"] == 10000
        assert checkout["application_fee_cents"] == 2000
        assert checkout["destination_account"] == "acct_cleaner"
        assert checkout["metadata"]["jobId"] == result["job"]["id"]
        assert checkout["success_url"].endswith(f"/client/jobs/{result['job']['id']}?payment=success")

    def test_confirm_without_onboarded_cleaner(
        self, market, payments, client_headers: dict, cleaner_headers: dict
    ):
        result = market.confirmed_job(client_headers, cleaner_headers)

        assert result["job"]["status"] == "confirmed"
        assert result["checkout_url"] is None
        assert payments.checkouts == []

    def test_confirm_survives_processor_outage(
        self,
        market,
        payments,
        onboarded_cleaner,
        client_headers: dict,
        cleaner_headers: dict,
    ):
        payments.fail_checkout = True
        result = market.confirmed_job(client_headers, cleaner_headers)

        assert result["job"]["status"] == "confirmed"
        assert result["checkout_url"] is None

    def test_retry_checkout(
        self,
        market,
        client: TestClient,
        payments,
        onboarded_cleaner,
        client_headers: dict,
        cleaner_headers: dict,
    ):
        result = market.confirmed_job(client_headers, cleaner_headers)

        response = client.post(f"/api/v1/payments/checkout/{result['job']['id']}", headers=client_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["session_id"] == "cs_test_2"
        assert data["checkout_url"] == "https://checkout.example.com/cs_test_2"

    def test_checkout_requires_confirmed_job(
        self, market, client: TestClient, onboarded_cleaner, client_headers: dict, cleaner_headers: dict
    ):
        job = market.completed_job(client_headers, cleaner_headers)
        response = client.post(f"/api/v1/payments/checkout/{job['id']}", headers=client_headers)
        assert response.status_code == 409
        assert response.json()["error"]["code"] == "INVALID_STATE"

    def test_checkout_by_stranger(
        self,
        market,
        client: TestClient,
        onboarded_cleaner,
        client_headers: dict,
        other_client_headers: dict,
        cleaner_headers: dict,
    ):
        result = market.confirmed_job(client_headers, cleaner_headers)
        response = client.post(
            f"/api/v1/payments/checkout/{result['job']['id']}", headers=other_client_headers
        )
        assert response.status_code == 403


class TestWebhook:

    def test_checkout_completed_marks_paid_once(
        self,
        market,
        client: TestClient,
        mailer,
        onboarded_cleaner,
        client_headers: dict,
        cleaner_headers: dict,
        db,
    ):
        result = market.confirmed_job(client_headers, cleaner_headers)
        job_id = result["job"]["id"]

        response = send_webhook(client, checkout_completed(job_id))
        assert response.status_code == 200
        assert response.json() == {"received": True}

        job = db.query(Job).filter(Job.id == job_id).one()
        db.refresh(job)
        assert job.status == JobStatus.PAID
        assert job.paid_at is not None
        assert job.stripe_payment_id == "pi_123"

        response = send_webhook(client, checkout_completed(job_id, event_id="evt_1_retry"))
        assert response.status_code == 200

        payment_emails = [
            m for m in mailer.sent_to(onboarded_cleaner.email)
            if m["subject"].startswith("Payment received")
        ]
        assert len(payment_emails) == 1

    def test_checkout_for_unconfirmed_job_ignored(
        self, market, client: TestClient, client_headers: dict, cleaner_headers: dict, db
    ):
        job = market.assigned_job(client_headers, cleaner_headers)

        response = send_webhook(client, checkout_completed(job["id"]))
        assert response.status_code == 200

        stored = db.query(Job).filter(Job.id == job["id"]).one()
        db.refresh(stored)
        assert stored.status == JobStatus.PENDING

    def test_event_without_job_metadata_acknowledged(self, client: TestClient):
        event = {"id": "evt_2", "type": "checkout.session.completed", "data": {"object": {"id": "cs_x"}}}
        response = send_webhook(client, event)
        assert response.status_code == 200

    def test_unrelated_event_acknowledged(self, client: TestClient):
        event = {"id": "evt_3", "type": "invoice.paid", "data": {"object": {}}}
        assert send_webhook(client, event).status_code == 200

    def test_invalid_signature(self, market, client: TestClient, client_headers: dict, db):
        job = market.create_job(client_headers)
        response = send_webhook(client, checkout_completed(job["id"]), signature="t=1,v1=forged")
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_SIGNATURE"

    def test_missing_signature(self, client: TestClient):
        response = client.post("/api/v1/payments/webhook", content=b"{}")
        assert response.status_code == 400

    def test_account_updated_sets_onboarded(self, client: TestClient, cleaner_user, db):
        cleaner_user.cleaner_profile.stripe_account_id = "acct_42"
        db.commit()

        event = {
            "id": "evt_4",
            "type": "account.updated",
            "data": {"object": {"id": "acct_42", "charges_enabled": True, "payouts_enabled": True}},
        }
        assert send_webhook(client, event).status_code == 200

        profile = db.query(CleanerProfile).filter(CleanerProfile.user_id == cleaner_user.id).one()
        db.refresh(profile)
        assert profile.stripe_onboarded is True

        event["data"]["object"]["payouts_enabled"] = False
        send_webhook(client, event)
        db.refresh(profile)
        assert profile.stripe_onboarded is False

    def test_account_updated_for_unknown_account(self, client: TestClient):
        event = {
            "id": "evt_5",
            "type": "account.updated",
            "data": {"object": {"id": "acct_nobody", "charges_enabled": True, "payouts_enabled": True}},
        }
        assert send_webhook(client, event).status_code == 200


class TestConnect:

    def test_connect_creates_account_once(self, client: TestClient, cleaner_headers: dict, cleaner_user, db):
        response = client.post("/api/v1/payments/connect", headers=cleaner_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["account_id"] == "acct_1"
        assert data["onboarding_url"] == "https://connect.example.com/acct_1"

        response = client.post("/api/v1/payments/connect", headers=cleaner_headers)
        assert response.json()["account_id"] == "acct_1"

        profile = db.query(CleanerProfile).filter(CleanerProfile.user_id == cleaner_user.id).one()
        assert profile.stripe_account_id == "acct_1"

    def test_connect_is_for_cleaners(self, client: TestClient, client_headers: dict):
        response = client.post("/api/v1/payments/connect", headers=client_headers)
        assert response.status_code == 403
        assert response.json()["error"]["code"] == "CLEANER_REQUIRED"

    def test_status_without_account(self, client: TestClient, cleaner_headers: dict):
        response = client.get("/api/v1/payments/connect/status", headers=cleaner_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["account_id"] is None
        assert data["onboarded"] is False

    def test_status_refreshes_onboarding(
        self, client: TestClient, payments, cleaner_headers: dict, cleaner_user, db
    ):
        client.post("/api/v1/payments/connect", headers=cleaner_headers)
        payments.accounts["acct_1"] = AccountStatus("acct_1", True, True)

        response = client.get("/api/v1/payments/connect/status", headers=cleaner_headers)
        data = response.json()
        assert data["onboarded"] is True
        assert data["charges_enabled"] is True
        assert data["payouts_enabled"] is True

        profile = db.query(CleanerProfile).filter(CleanerProfile.user_id == cleaner_user.id).one()
        assert profile.stripe_onboarded is True

    def test_payments_not_configured(self, client: TestClient, cleaner_headers: dict):
        app.dependency_overrides[get_integrations] = lambda: Integrations(
            payments=None, storage=None, email=FakeEmailSender()
        )
        response = client.post("/api/v1/payments/connect", headers=cleaner_headers)
        assert response.status_code == 503
        assert response.json()["error"]["code"] == "PAYMENTS_NOT_CONFIGURED"
