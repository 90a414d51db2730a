"""
==============================================================================
Photo Tests
==============================================================================

Presigned uploads, recording and listing of before / after / issue photos.

==============================================================================
"""

import pytest
from fastapi.testclient import TestClient

from flockfur.core.dependencies import get_integrations
from flockfur.db.models import PhotoType
from flockfur.integrations import Integrations
from flockfur.main import app
from flockfur.services.photo_service import build_photo_key


def request_upload(client: TestClient, job_id: str, headers: dict, photo_type: str = "after", **overrides):
    body = {"type": photo_type, "filename": "coop.jpg", "content_type": "image/jpeg", **overrides}
    return client.post(f"/api/v1/jobs/{job_id}/photos/upload-url", json=body, headers=headers)


class TestPhotoKeys:

    def test_key_layout(self):
        key = build_photo_key("job-1", PhotoType.AFTER, "Coop.PNG", now_ms=1700000000000)
        assert key == "jobs/job-1/after/1700000000000.png"

    @pytest.mark.parametrize("filename", ["no-extension", "weird.p/g", "trailing."])
    def test_fallback_extension(self, filename):
        key = build_photo_key("job-1", PhotoType.ISSUE, filename, now_ms=1)
        assert key == "jobs/job-1/issue/1.jpg"


class TestUploadUrl:

    def test_cleaner_gets_upload_url(
        self, market, client: TestClient, client_headers: dict, cleaner_headers: dict
    ):
        job = market.assigned_job(client_headers, cleaner_headers)

        response = request_upload(client, job["id"], cleaner_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["key"].startswith(f"jobs/{job['id']}/after/")
        assert data["key"].endswith(".jpg")
        assert data["upload_url"] == f"https://uploads.example.com/{data['key']}?signature=abc"
        assert data["public_url"] == f"https://cdn.example.com/{data['key']}"

    def test_client_uploads_before_photos_only(
        self, market, client: TestClient, client_headers: dict, cleaner_headers: dict
    ):
        job = market.assigned_job(client_headers, cleaner_headers)

        assert request_upload(client, job["id"], client_headers, "before").status_code == 200
        assert request_upload(client, job["id"], client_headers, "after").status_code == 403

    def test_cleaner_cannot_upload_before_photos(
        self, market, client: TestClient, client_headers: dict, cleaner_headers: dict
    ):
        job = market.assigned_job(client_headers, cleaner_headers)
        assert request_upload(client, job["id"], cleaner_headers, "before").status_code == 403

    def test_unassigned_cleaner_forbidden(
        self,
        market,
        client: TestClient,
        client_headers: dict,
        cleaner_headers: dict,
        other_cleaner_headers: dict,
    ):
        job = market.assigned_job(client_headers, cleaner_headers)
        assert request_upload(client, job["id"], other_cleaner_headers, "issue").status_code == 403

    def test_non_image_rejected(self, market, client: TestClient, client_headers: dict, cleaner_headers: dict):
        job = market.assigned_job(client_headers, cleaner_headers)
        response = request_upload(client, job["id"], cleaner_headers, content_type="application/pdf")
        assert response.status_code == 422

    def test_unknown_job(self, client: TestClient, cleaner_headers: dict):
        assert request_upload(client, "missing", cleaner_headers).status_code == 404

    def test_storage_not_configured(self, market, client: TestClient, client_headers: dict, mailer):
        job = market.create_job(client_headers)
        app.dependency_overrides[get_integrations] = lambda: Integrations(
            payments=None, storage=None, email=mailer
        )

        response = request_upload(client, job["id"], client_headers, "before")
        assert response.status_code == 503
        assert response.json()["error"]["code"] == "STORAGE_NOT_CONFIGURED"


class TestRecordPhoto:

    def test_record_and_list(self, market, client: TestClient, client_headers: dict, cleaner_headers: dict):
        job = market.assigned_job(client_headers, cleaner_headers)
        before = market.add_photo(job["id"], client_headers, "before")
        after = market.add_photo(job["id"], cleaner_headers, "after")

        assert before["type"] == "before"
        assert after["url"].startswith(f"https://cdn.example.com/jobs/{job['id']}/after/")

        response = client.get(f"/api/v1/jobs/{job['id']}/photos", headers=client_headers)
        assert response.status_code == 200
        assert response.json()["total"] == 2

        response = client.get(f"/api/v1/jobs/{job['id']}/photos?type=after", headers=client_headers)
        assert [p["id"] for p in response.json()["photos"]] == [after["id"]]

    def test_caption_is_trimmed(self, market, client: TestClient, client_headers: dict, cleaner_headers: dict):
        job = market.assigned_job(client_headers, cleaner_headers)
        key = request_upload(client, job["id"], cleaner_headers, "issue").json()["key"]

        response = client.post(
            f"/api/v1/jobs/{job['id']}/photos",
            json={"key": key, "type": "issue", "caption": "  Broken latch on the gate  "},
            headers=cleaner_headers
        )
        assert response.status_code == 201
        assert response.json()["photo"]["caption"] == "Broken latch on the gate"

    def test_key_from_another_job_rejected(
        self, market, client: TestClient, client_headers: dict, cleaner_headers: dict
    ):
        first = market.assigned_job(client_headers, cleaner_headers)
        second = market.assigned_job(client_headers, cleaner_headers)
        key = request_upload(client, first["id"], cleaner_headers).json()["key"]

        response = client.post(
            f"/api/v1/jobs/{second['id']}/photos",
            json={"key": key, "type": "after"},
            headers=cleaner_headers
        )
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_key_with_wrong_type_rejected(
        self, market, client: TestClient, client_headers: dict, cleaner_headers: dict
    ):
        job = market.assigned_job(client_headers, cleaner_headers)
        key = request_upload(client, job["id"], cleaner_headers, "issue").json()["key"]

        response = client.post(
            f"/api/v1/jobs/{job['id']}/photos",
            json={"key": key, "type": "after"},
            headers=cleaner_headers
        )
        assert response.status_code == 422

    def test_path_traversal_rejected(
        self, market, client: TestClient, client_headers: dict, cleaner_headers: dict
    ):
        job = market.assigned_job(client_headers, cleaner_headers)

        response = client.post(
            f"/api/v1/jobs/{job['id']}/photos",
            json={"key": f"jobs/{job['id']}/after/../../other/1.jpg", "type": "after"},
            headers=cleaner_headers
        )
        assert response.status_code == 422

    def test_photos_hidden_from_strangers(
        self, market, client: TestClient, client_headers: dict, other_client_headers: dict, cleaner_headers: dict
    ):
        job = market.assigned_job(client_headers, cleaner_headers)
        response = client.get(f"/api/v1/jobs/{job['id']}/photos", headers=other_client_headers)
        assert response.status_code == 403
