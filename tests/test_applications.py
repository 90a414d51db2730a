"""
==============================================================================
Application & Acceptance Tests
==============================================================================

Applying to jobs, accepting one applicant and the price split that
acceptance fixes on the job.

==============================================================================
"""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from flockfur.core.exceptions import AppException
from flockfur.db.models import ApplicationStatus, Job, JobApplication, JobStatus
from flockfur.services.application_service import ApplicationService


class TestApply:

    def test_cleaner_applies(
        self, market, client: TestClient, client_headers: dict, cleaner_headers: dict, cleaner_user
    ):
        job = market.create_job(client_headers)
        response = client.post(
            f"/api/v1/jobs/{job['id']}/applications",
            json={"message": "  I muck out coops every week.  ", "proposed_price": "90.00"},
            headers=cleaner_headers
        )
        assert response.status_code == 201
        application = response.json()["application"]
        assert application["status"] == "pending"
        assert application["cleaner_id"] == cleaner_user.id
        assert application["cleaner_name"] == "Carl Cleaner"
        assert application["message"] == "I muck out coops every week."
        assert application["proposed_price"] == "90.00"

    def test_owner_is_emailed(
        self, market, client_headers: dict, cleaner_headers: dict, mailer, client_user
    ):
        job = market.create_job(client_headers)
        market.apply(job["id"], cleaner_headers, proposed_price="90.00")

        sent = mailer.sent_to(client_user.email)
        assert len(sent) == 1
        assert sent[0]["subject"] == 'New application for "Clean out the chicken coop"'

    def test_client_cannot_apply(self, market, client: TestClient, client_headers: dict, other_client_headers: dict):
        job = market.create_job(client_headers)
        response = client.post(
            f"/api/v1/jobs/{job['id']}/applications", json={}, headers=other_client_headers
        )
        assert response.status_code == 403
        assert response.json()["error"]["code"] == "CLEANER_REQUIRED"

    def test_duplicate_application(self, market, client: TestClient, client_headers: dict, cleaner_headers: dict):
        job = market.create_job(client_headers)
        market.apply(job["id"], cleaner_headers)

        response = client.post(
            f"/api/v1/jobs/{job['id']}/applications", json={}, headers=cleaner_headers
        )
        assert response.status_code == 409
        assert response.json()["error"]["code"] == "DUPLICATE_APPLICATION"

    def test_unknown_job(self, client: TestClient, cleaner_headers: dict):
        response = client.post("/api/v1/jobs/missing/applications", json={}, headers=cleaner_headers)
        assert response.status_code == 404

    def test_cannot_apply_to_pending_job(
        self,
        market,
        client: TestClient,
        client_headers: dict,
        cleaner_headers: dict,
        other_cleaner_headers: dict,
    ):
        job = market.assigned_job(client_headers, cleaner_headers)

        response = client.post(
            f"/api/v1/jobs/{job['id']}/applications", json={}, headers=other_cleaner_headers
        )
        assert response.status_code == 409
        error = response.json()["error"]
        assert error["code"] == "INVALID_STATE"
        assert error["details"]["current_status"] == "pending"

    def test_non_positive_proposal_rejected(self, market, client: TestClient, client_headers: dict, cleaner_headers: dict):
        job = market.create_job(client_headers)
        response = client.post(
            f"/api/v1/jobs/{job['id']}/applications",
            json={"proposed_price": "-10.00"},
            headers=cleaner_headers
        )
        assert response.status_code == 422


class TestAccept:

    def test_accept_splits_price_and_rejects_others(
        self,
        market,
        client: TestClient,
        client_headers: dict,
        cleaner_headers: dict,
        other_cleaner_headers: dict,
        cleaner_user,
        db,
    ):
        job = market.create_job(client_headers, suggested_price="100.00")
        chosen = market.apply(job["id"], cleaner_headers, proposed_price="90.00")
        other = market.apply(job["id"], other_cleaner_headers, proposed_price="95.00")

        result = market.accept(chosen["id"], client_headers)

        assert result["application"]["status"] == "accepted"
        accepted_job = result["job"]
        assert accepted_job["status"] == "pending"
        assert accepted_job["cleaner_id"] == cleaner_user.id
        assert accepted_job["agreed_price"] == "90.00"
        assert accepted_job["platform_fee"] == "18.00"
        assert accepted_job["cleaner_payout"] == "72.00"

        rejected = db.query(JobApplication).filter(JobApplication.id == other["id"]).one()
        db.refresh(rejected)
        assert rejected.status == ApplicationStatus.REJECTED

    def test_falls_back_to_suggested_price(
        self, market, client_headers: dict, cleaner_headers: dict
    ):
        job = market.create_job(client_headers, suggested_price="100.00")
        application = market.apply(job["id"], cleaner_headers)

        accepted_job = market.accept(application["id"], client_headers)["job"]
        assert accepted_job["agreed_price"] == "100.00"
        assert accepted_job["platform_fee"] == "20.00"
        assert accepted_job["cleaner_payout"] == "80.00"

    def test_no_price_at_all(self, market, client: TestClient, client_headers: dict, cleaner_headers: dict, db):
        job = market.create_job(client_headers, suggested_price=None)
        application = market.apply(job["id"], cleaner_headers)

        response = client.post(f"/api/v1/applications/{application['id']}/accept", headers=client_headers)
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "PRICE_REQUIRED"

        stored = db.query(Job).filter(Job.id == job["id"]).one()
        db.refresh(stored)
        assert stored.status == JobStatus.OPEN

    def test_cleaner_is_emailed(self, market, client_headers: dict, cleaner_headers: dict, mailer, cleaner_user):
        market.assigned_job(client_headers, cleaner_headers)

        subjects = [m["subject"] for m in mailer.sent_to(cleaner_user.email)]
        assert subjects == ['You\'ve been accepted for "Clean out the chicken coop"']

    def test_only_owner_can_accept(
        self,
        market,
        client: TestClient,
        client_headers: dict,
        other_client_headers: dict,
        cleaner_headers: dict,
    ):
        job = market.create_job(client_headers)
        application = market.apply(job["id"], cleaner_headers)

        response = client.post(
            f"/api/v1/applications/{application['id']}/accept", headers=other_client_headers
        )
        assert response.status_code == 403

        response = client.post(
            f"/api/v1/applications/{application['id']}/accept", headers=cleaner_headers
        )
        assert response.status_code == 403

    def test_admin_can_accept(self, market, client_headers: dict, admin_headers: dict, cleaner_headers: dict):
        job = market.create_job(client_headers)
        application = market.apply(job["id"], cleaner_headers)
        result = market.accept(application["id"], admin_headers)
        assert result["job"]["status"] == "pending"

    def test_second_accept_conflicts(
        self,
        market,
        client: TestClient,
        client_headers: dict,
        cleaner_headers: dict,
        other_cleaner_headers: dict,
    ):
        job = market.create_job(client_headers)
        first = market.apply(job["id"], cleaner_headers)
        second = market.apply(job["id"], other_cleaner_headers)
        market.accept(first["id"], client_headers)

        response = client.post(f"/api/v1/applications/{second['id']}/accept", headers=client_headers)
        assert response.status_code == 409
        assert response.json()["error"]["code"] == "INVALID_STATE"

    def test_unknown_application(self, client: TestClient, client_headers: dict):
        response = client.post("/api/v1/applications/missing/accept", headers=client_headers)
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "APPLICATION_NOT_FOUND"

    def test_lost_race_rolls_back(
        self,
        market,
        client_headers: dict,
        cleaner_headers: dict,
        other_cleaner_headers: dict,
        client_user,
        db,
    ):
        job = market.create_job(client_headers)
        first = market.apply(job["id"], cleaner_headers)
        second = market.apply(job["id"], other_cleaner_headers)

        # Load the job while OPEN, then move it on behind the session's back
        stale_job = db.query(Job).filter(Job.id == job["id"]).one()
        assert stale_job.status == JobStatus.OPEN
        db.query(Job).filter(Job.id == job["id"]).update(
            {Job.status: JobStatus.PENDING}, synchronize_session=False
        )
        db.commit()

        with pytest.raises(AppException) as exc:
            ApplicationService(db).accept(second["id"], client_user)
        assert exc.value.code == "INVALID_STATE"

        for application_id in (first["id"], second["id"]):
            application = db.query(JobApplication).filter(JobApplication.id == application_id).one()
            db.refresh(application)
            assert application.status == ApplicationStatus.PENDING

        db.refresh(stale_job)
        assert stale_job.cleaner_id is None
        assert stale_job.agreed_price is None


class TestListApplications:

    def test_owner_lists_job_applications(
        self,
        market,
        client: TestClient,
        client_headers: dict,
        cleaner_headers: dict,
        other_cleaner_headers: dict,
    ):
        job = market.create_job(client_headers)
        market.apply(job["id"], cleaner_headers)
        market.apply(job["id"], other_cleaner_headers)

        response = client.get(f"/api/v1/jobs/{job['id']}/applications", headers=client_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 2
        assert {a["cleaner_name"] for a in data["applications"]} == {"Carl Cleaner", "Hana Helper"}

    def test_cleaners_cannot_list_job_applications(
        self, market, client: TestClient, client_headers: dict, cleaner_headers: dict
    ):
        job = market.create_job(client_headers)
        market.apply(job["id"], cleaner_headers)

        response = client.get(f"/api/v1/jobs/{job['id']}/applications", headers=cleaner_headers)
        assert response.status_code == 403

    def test_cleaner_lists_own_applications(
        self,
        market,
        client: TestClient,
        client_headers: dict,
        cleaner_headers: dict,
        other_cleaner_headers: dict,
    ):
        won = market.create_job(client_headers)
        lost = market.create_job(client_headers)
        mine = market.apply(won["id"], cleaner_headers)
        market.accept(mine["id"], client_headers)
        market.apply(lost["id"], cleaner_headers)
        theirs = market.apply(lost["id"], other_cleaner_headers)
        market.accept(theirs["id"], client_headers)

        response = client.get("/api/v1/applications/mine", headers=cleaner_headers)
        assert response.json()["total"] == 2

        response = client.get("/api/v1/applications/mine?status=rejected", headers=cleaner_headers)
        applications = response.json()["applications"]
        assert [a["job_id"] for a in applications] == [lost["id"]]

    def test_clients_have_no_application_list(self, client: TestClient, client_headers: dict):
        response = client.get("/api/v1/applications/mine", headers=client_headers)
        assert response.status_code == 403
