"""
Media library. Supabase Storage calls are patched out.
"""
import asyncio
import uuid
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"0" * 64


@pytest.fixture
def storage_mocks():
    with patch(
        "app.services.media_service.upload_to_storage",
        side_effect=lambda path, data, ctype: f"https://cdn.test/{path}",
    ) as upload, patch("app.services.media_service.delete_from_storage") as delete:
        yield upload, delete


def _upload(client: TestClient, headers, files):
    return client.post(
        "/api/media/upload",
        files=[("images", f) for f in files],
        headers=headers,
    )


class TestUpload:
    def test_upload_images(self, test_client: TestClient, admin_headers, storage_mocks):
        # Act
        response = _upload(
            test_client,
            admin_headers,
            [("front bumper.png", PNG_BYTES, "image/png"), ("rear.jpg", b"jpeg", "image/jpeg")],
        )

        # Assert
        assert response.status_code == 200
        body = response.json()
        assert len(body["uploaded_images"]) == 2
        assert body["errors"] == []
        first = body["uploaded_images"][0]
        assert first["name"] == "front bumper"
        assert first["url"].startswith("https://cdn.test/media/")
        assert storage_mocks[0].call_count == 2

    def test_bad_files_reported_per_file(self, test_client: TestClient, admin_headers, storage_mocks):
        response = _upload(
            test_client,
            admin_headers,
            [
                ("ok.png", PNG_BYTES, "image/png"),
                ("notes.txt", b"hello", "text/plain"),
                ("anim.gif", b"GIF89a", "image/gif"),
            ],
        )

        body = response.json()
        assert response.status_code == 200
        assert len(body["uploaded_images"]) == 1
        assert {e["file_name"] for e in body["errors"]} == {"notes.txt", "anim.gif"}

    def test_oversized_image(self, test_client: TestClient, admin_headers, storage_mocks):
        big = b"0" * (5 * 1024 * 1024 + 1)

        response = _upload(test_client, admin_headers, [("huge.png", big, "image/png")])

        assert response.status_code == 400
        assert response.json()["detail"]["errors"][0]["error"] == "Image too large (max 5MB)"

    def test_too_many_files(self, test_client: TestClient, admin_headers, storage_mocks):
        files = [(f"{i}.png", PNG_BYTES, "image/png") for i in range(11)]

        response = _upload(test_client, admin_headers, files)

        assert response.status_code == 400
        storage_mocks[0].assert_not_called()

    def test_storage_failure_is_collected(self, test_client: TestClient, admin_headers):
        with patch(
            "app.services.media_service.upload_to_storage",
            side_effect=RuntimeError("bucket missing"),
        ):
            response = _upload(test_client, admin_headers, [("a.png", PNG_BYTES, "image/png")])

        assert response.status_code == 400
        assert response.json()["detail"]["message"] == "Failed to upload any images"

    def test_admin_only(self, test_client: TestClient, customer_headers, storage_mocks):
        response = _upload(test_client, customer_headers, [("a.png", PNG_BYTES, "image/png")])
        assert response.status_code == 403

    def test_storage_upload_runs_off_the_event_loop(self, test_client: TestClient, admin_headers):
        loops = []

        def fake_upload(path, data, ctype):
            try:
                loops.append(asyncio.get_running_loop())
            except RuntimeError:
                loops.append(None)
            return f"https://cdn.test/{path}"

        with patch("app.services.media_service.upload_to_storage", side_effect=fake_upload):
            response = _upload(test_client, admin_headers, [("a.png", PNG_BYTES, "image/png")])

        assert response.status_code == 200
        assert loops == [None]


class TestListAndDelete:
    def test_list_and_delete(self, test_client: TestClient, admin_headers, storage_mocks):
        # Arrange
        uploaded = _upload(
            test_client,
            admin_headers,
            [(f"{i}.png", PNG_BYTES, "image/png") for i in range(3)],
        ).json()["uploaded_images"]

        # Act
        listing = test_client.get("/api/media", params={"limit": 2}, headers=admin_headers).json()
        deleted = test_client.delete(f"/api/media/{uploaded[0]['id']}", headers=admin_headers)
        missing = test_client.delete(f"/api/media/{uploaded[0]['id']}", headers=admin_headers)

        # Assert
        assert len(listing["media"]) == 2
        assert listing["pagination"]["totalItems"] == 3
        assert deleted.json() == {"success": True, "id": uploaded[0]["id"], "name": "0"}
        assert missing.status_code == 404
        storage_mocks[1].assert_called_once()

    def test_bulk_delete(self, test_client: TestClient, admin_headers, storage_mocks):
        uploaded = _upload(
            test_client,
            admin_headers,
            [(f"{i}.png", PNG_BYTES, "image/png") for i in range(2)],
        ).json()["uploaded_images"]
        ids = [m["id"] for m in uploaded] + [str(uuid.uuid4())]

        response = test_client.request(
            "DELETE", "/api/media/bulk", json={"ids": ids}, headers=admin_headers
        )

        body = response.json()
        assert body["deleted_count"] == 2
        assert body["requested_count"] == 3
        assert storage_mocks[1].call_count == 2

    def test_bulk_delete_nothing_found(self, test_client: TestClient, admin_headers, storage_mocks):
        response = test_client.request(
            "DELETE", "/api/media/bulk", json={"ids": [str(uuid.uuid4())]}, headers=admin_headers
        )
        assert response.status_code == 404

    def test_storage_cleanup_failure_does_not_fail_delete(
        self, test_client: TestClient, admin_headers, storage_mocks
    ):
        uploaded = _upload(
            test_client, admin_headers, [("a.png", PNG_BYTES, "image/png")]
        ).json()["uploaded_images"]
        storage_mocks[1].side_effect = RuntimeError("network")

        response = test_client.delete(f"/api/media/{uploaded[0]['id']}", headers=admin_headers)

        assert response.status_code == 200
