"""HTTP helpers shared by the API tests."""

import io

JWT_SECRET = "test-secret-key-for-testing-only-do-not-use-in-production"


def signup(client, identifier="user@example.com", password="secret123", user_agent="pytest-device"):
    return client.post(
        "/signup",
        json={"id": identifier, "password": password},
        headers={"User-Agent": user_agent},
    )


def signin(client, identifier="user@example.com", password="secret123", user_agent="pytest-device"):
    return client.post(
        "/signin",
        json={"id": identifier, "password": password},
        headers={"User-Agent": user_agent},
    )


def bearer(access_token):
    return {"Authorization": f"Bearer {access_token}"}


def upload(client, access_token, content=b"hello world", filename="notes.txt", mime="text/plain"):
    return client.post(
        "/file/upload",
        data={"file": (io.BytesIO(content), filename, mime)},
        headers=bearer(access_token),
        content_type="multipart/form-data",
    )
