import io
import re

import pytest
from fastapi.testclient import TestClient

import curriculum.api.routes.files
from curriculum.core.storage import FileTooLarge, save_file_local
from curriculum.main import create_app
from conftest import data, error

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def test_upload_and_serve(client):
    resp = client.post("/api/upload", files={"file": ("my pic.png", PNG, "image/png")})
    assert resp.status_code == 201
    body = data(resp)
    assert re.fullmatch(r"\d{13}-my_pic\.png", body["filename"])
    assert body["url"] == f"/uploads/{body['filename']}"

    served = client.get(body["url"])
    assert served.status_code == 200
    assert served.content == PNG


def test_upload_rejects_non_images(client):
    resp = client.post("/api/upload", files={"file": ("run.exe", b"MZ", "application/octet-stream")})
    assert resp.status_code == 415
    assert error(resp)["code"] == "FILE_TYPE_NOT_ALLOWED"


def test_upload_size_cap(client):
    big = b"\x00" * (1024 * 1024 + 1)
    resp = client.post("/api/upload", files={"file": ("big.jpg", big, "image/jpeg")})
    assert resp.status_code == 413
    assert error(resp)["code"] == "FILE_TOO_LARGE"


def test_save_file_local_cap(tmp_path):
    target = tmp_path / "big.png"
    with pytest.raises(FileTooLarge):
        save_file_local(io.BytesIO(b"\x00" * 11), str(target), max_bytes=10)
    assert not target.exists()
    assert save_file_local(io.BytesIO(b"\x00" * 10), str(target), max_bytes=10) == 10


def test_other_storage_errors_are_not_size_errors(database, monkeypatch):
    def broken(*args, **kwargs):
        raise ValueError("bad storage path")

    monkeypatch.setattr(curriculum.api.routes.files, "save_file_local", broken)
    with TestClient(create_app(database), raise_server_exceptions=False) as c:
        resp = c.post("/api/upload", files={"file": ("pic.png", PNG, "image/png")})
    assert resp.status_code == 500
    assert error(resp)["code"] == "INTERNAL_ERROR"


def test_health_and_request_id(client):
    resp = client.get("/health", headers={"X-Request-ID": "abc-123"})
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}
    assert resp.headers["X-Request-ID"] == "abc-123"


def test_envelope_carries_request_id(client):
    resp = client.get("/api/courses")
    body = resp.json()
    assert body["success"] is True
    assert body["request_id"] == resp.headers["X-Request-ID"]


def test_frontend_fallback(client):
    resp = client.get("/study-plans/12")
    assert resp.status_code == 200
    assert "login page" in resp.text

    resp = client.get("/app.js")
    assert "console.log" in resp.text

    resp = client.get("/api/does-not-exist")
    assert resp.status_code == 404
    assert error(resp)["code"] == "RESOURCE_NOT_FOUND"
