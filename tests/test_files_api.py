"""HTTP tests for upload, list, metadata, download, update and delete."""

import io
import os

import pytest

from tests.helpers import bearer, signup, upload


@pytest.fixture
def other_tokens(client):
    response = signup(client, identifier="other@example.com")
    assert response.status_code == 201
    return response.get_json()


@pytest.fixture
def uploaded(client, auth_tokens):
    response = upload(
        client, auth_tokens["accessToken"], content=b"%PDF-1.4 test", filename="report.pdf", mime="application/pdf"
    )
    assert response.status_code == 201
    return response.get_json()


def stored_files(app):
    folder = app.config["UPLOAD_FOLDER"]
    return sorted(os.listdir(folder)) if os.path.isdir(folder) else []


class TestUpload:
    def test_upload_returns_metadata(self, uploaded):
        assert uploaded["name"] == "report"
        assert uploaded["extension"] == "pdf"
        assert uploaded["mimeType"] == "application/pdf"
        assert uploaded["size"] == len(b"%PDF-1.4 test")
        assert uploaded["id"] > 0
        assert uploaded["uploadDate"]

    def test_payload_written_to_upload_folder(self, app, uploaded):
        assert len(stored_files(app)) == 1

    def test_file_without_extension(self, client, auth_tokens):
        body = upload(client, auth_tokens["accessToken"], filename="README").get_json()

        assert body["name"] == "README"
        assert body["extension"] == ""

    def test_no_file(self, client, auth_tokens):
        response = client.post(
            "/file/upload",
            data={},
            headers=bearer(auth_tokens["accessToken"]),
            content_type="multipart/form-data",
        )

        assert response.status_code == 400
        assert response.get_json()["message"] == "No file uploaded"

    @pytest.mark.parametrize("filename", ["a" * 256 + ".txt", "report." + "x" * 33])
    def test_overlong_filename(self, app, client, auth_tokens, filename):
        response = upload(client, auth_tokens["accessToken"], filename=filename)

        assert response.status_code == 400
        assert response.get_json()["message"] == "File name is too long"
        assert stored_files(app) == []

    def test_requires_token(self, client):
        response = client.post(
            "/file/upload",
            data={"file": (io.BytesIO(b"x"), "x.txt")},
            content_type="multipart/form-data",
        )

        assert response.status_code == 401


class TestGetAndDownload:
    def test_get_metadata(self, client, auth_tokens, uploaded):
        response = client.get(f"/file/{uploaded['id']}", headers=bearer(auth_tokens["accessToken"]))

        assert response.status_code == 200
        body = response.get_json()
        for key in ("name", "extension", "mimeType", "size"):
            assert body[key] == uploaded[key]

    @pytest.mark.parametrize("bad_id", ["abc", "0", "-3"])
    def test_invalid_id(self, client, auth_tokens, bad_id):
        response = client.get(f"/file/{bad_id}", headers=bearer(auth_tokens["accessToken"]))

        assert response.status_code == 400
        assert response.get_json()["message"] == "Invalid file ID"

    def test_unknown_id(self, client, auth_tokens):
        assert client.get("/file/12345", headers=bearer(auth_tokens["accessToken"])).status_code == 404

    def test_download(self, client, auth_tokens, uploaded):
        response = client.get(f"/file/download/{uploaded['id']}", headers=bearer(auth_tokens["accessToken"]))

        assert response.status_code == 200
        assert response.data == b"%PDF-1.4 test"
        assert response.headers["Content-Type"].startswith("application/pdf")
        assert "attachment" in response.headers["Content-Disposition"]
        assert "report.pdf" in response.headers["Content-Disposition"]
        response.close()

    def test_download_with_missing_payload(self, app, client, auth_tokens, uploaded):
        for name in stored_files(app):
            os.remove(os.path.join(app.config["UPLOAD_FOLDER"], name))

        response = client.get(f"/file/download/{uploaded['id']}", headers=bearer(auth_tokens["accessToken"]))

        assert response.status_code == 404


class TestList:
    def test_pagination(self, client, auth_tokens):
        for i in range(15):
            upload(client, auth_tokens["accessToken"], filename=f"file-{i:02d}.txt")

        response = client.get("/file/list?list_size=10&page=2", headers=bearer(auth_tokens["accessToken"]))

        assert response.status_code == 200
        body = response.get_json()
        assert body["pagination"] == {"page": 2, "list_size": 10, "total": 15, "total_pages": 2}
        assert [f["name"] for f in body["files"]] == [f"file-{i:02d}" for i in range(4, -1, -1)]

    def test_defaults(self, client, auth_tokens, uploaded):
        body = client.get("/file/list", headers=bearer(auth_tokens["accessToken"])).get_json()

        assert body["pagination"] == {"page": 1, "list_size": 10, "total": 1, "total_pages": 1}

    @pytest.mark.parametrize("query", ["list_size=0", "list_size=101", "page=0", "list_size=abc", "page=x"])
    def test_bad_query(self, client, auth_tokens, query):
        response = client.get(f"/file/list?{query}", headers=bearer(auth_tokens["accessToken"]))

        assert response.status_code == 400


class TestUpdate:
    def test_update_replaces_file(self, app, client, auth_tokens, uploaded):
        before = stored_files(app)

        response = client.put(
            f"/file/update/{uploaded['id']}",
            data={"file": (io.BytesIO(b"\x89PNG...."), "photo.png", "image/png")},
            headers=bearer(auth_tokens["accessToken"]),
            content_type="multipart/form-data",
        )

        assert response.status_code == 200
        fetched = client.get(f"/file/{uploaded['id']}", headers=bearer(auth_tokens["accessToken"])).get_json()
        assert (fetched["name"], fetched["extension"], fetched["mimeType"], fetched["size"]) == (
            "photo",
            "png",
            "image/png",
            len(b"\x89PNG...."),
        )
        after = stored_files(app)
        assert len(after) == 1
        assert after != before

    def test_update_without_file(self, client, auth_tokens, uploaded):
        response = client.put(
            f"/file/update/{uploaded['id']}",
            data={},
            headers=bearer(auth_tokens["accessToken"]),
            content_type="multipart/form-data",
        )

        assert response.status_code == 400

    def test_update_unknown_file_leaves_no_orphan(self, app, client, auth_tokens, uploaded):
        response = client.put(
            "/file/update/999",
            data={"file": (io.BytesIO(b"new"), "new.txt", "text/plain")},
            headers=bearer(auth_tokens["accessToken"]),
            content_type="multipart/form-data",
        )

        assert response.status_code == 404
        assert len(stored_files(app)) == 1


class TestDelete:
    def test_delete(self, app, client, auth_tokens, uploaded):
        headers = bearer(auth_tokens["accessToken"])

        response = client.delete(f"/file/delete/{uploaded['id']}", headers=headers)

        assert response.status_code == 200
        assert response.get_json() == {"message": "File deleted successfully"}
        assert client.get(f"/file/{uploaded['id']}", headers=headers).status_code == 404
        assert stored_files(app) == []

    def test_delete_unknown(self, client, auth_tokens):
        assert client.delete("/file/delete/77", headers=bearer(auth_tokens["accessToken"])).status_code == 404


class TestIsolation:
    def test_other_account_cannot_touch_file(self, app, client, uploaded, auth_tokens, other_tokens):
        intruder = bearer(other_tokens["accessToken"])
        file_id = uploaded["id"]

        assert client.get(f"/file/{file_id}", headers=intruder).status_code == 404
        assert client.get(f"/file/download/{file_id}", headers=intruder).status_code == 404
        update = client.put(
            f"/file/update/{file_id}",
            data={"file": (io.BytesIO(b"evil"), "evil.txt", "text/plain")},
            headers=intruder,
            content_type="multipart/form-data",
        )
        assert update.status_code == 404
        assert client.delete(f"/file/delete/{file_id}", headers=intruder).status_code == 404

        listing = client.get("/file/list", headers=intruder).get_json()
        assert listing["files"] == []
        assert listing["pagination"]["total"] == 0

        owner_view = client.get(f"/file/{file_id}", headers=bearer(auth_tokens["accessToken"])).get_json()
        assert owner_view["name"] == "report"
        assert len(stored_files(app)) == 1
