"""
==============================================================================
Notification Tests
==============================================================================

Email templates, the Resend client and delivery failures.

==============================================================================
"""

import json
from decimal import Decimal

import httpx
import pytest
from fastapi.testclient import TestClient

from flockfur.core.exceptions import AppException
from flockfur.integrations.mailer import RESEND_API_URL, ResendEmailSender
from flockfur.utils import email_templates


class TestTemplates:

    def test_user_text_is_escaped(self):
        subject, html = email_templates.application_received(
            client_name="Fiona <b>",
            cleaner_name="<script>alert(1)</script>",
            job_title="Barn & stable",
            proposed_price=Decimal("90"),
            message='Bring "boots"',
            job_url="https://flockfur.example.com/client/jobs/1",
            base_url="https://flockfur.example.com",
        )
        assert subject == 'New application for "Barn & stable"'
        assert "<script>" not in html
        assert "&lt;script&gt;" in html
        assert "Barn &amp; stable" in html
        assert "$90.00" in html

    def test_money_formatting(self):
        _, html = email_templates.payment_processed(
            cleaner_name="Carl",
            job_title="Coop",
            cleaner_payout=Decimal("72"),
            job_url="https://flockfur.example.com/cleaner/jobs/1",
            base_url="https://flockfur.example.com",
        )
        assert "$72.00" in html


class TestResendEmailSender:

    def test_sends_through_api(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={"id": "email_1"})

        sender = ResendEmailSender(
            "re_test", "Flock & Fur <noreply@flockfur.com>",
            client=httpx.Client(transport=httpx.MockTransport(handler))
        )
        assert sender.send("jane@example.com", "Hello", "<p>Hi</p>") is True

        request = requests[0]
        assert str(request.url) == RESEND_API_URL
        assert request.headers["Authorization"] == "Bearer re_test"
        body = json.loads(request.content)
        assert body["to"] == ["jane@example.com"]
        assert body["subject"] == "Hello"

    def test_skips_without_api_key(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        sender = ResendEmailSender(
            None, "noreply@flockfur.com",
            client=httpx.Client(transport=httpx.MockTransport(handler))
        )
        assert sender.enabled is False
        assert sender.send("jane@example.com", "Hello", "<p>Hi</p>") is False

    def test_provider_error(self):
        sender = ResendEmailSender(
            "re_test", "noreply@flockfur.com",
            client=httpx.Client(transport=httpx.MockTransport(lambda r: httpx.Response(422)))
        )
        with pytest.raises(AppException) as exc:
            sender.send("jane@example.com", "Hello", "<p>Hi</p>")
        assert exc.value.code == "EXTERNAL_SERVICE_ERROR"


class TestDeliveryFailures:

    def test_email_outage_does_not_fail_request(
        self, market, client: TestClient, mailer, client_headers: dict, cleaner_headers: dict
    ):
        mailer.fail = True
        job = market.create_job(client_headers)

        response = client.post(
            f"/api/v1/jobs/{job['id']}/applications", json={}, headers=cleaner_headers
        )
        assert response.status_code == 201
        assert mailer.sent == []
