import os
import tempfile
from pathlib import Path

import pytest

_TMP = Path(tempfile.mkdtemp(prefix="curriculum-tests-"))
(_TMP / "frontend").mkdir()
(_TMP / "frontend" / "login.html").write_text("<html>login page</html>", encoding="utf-8")
(_TMP / "frontend" / "app.js").write_text("console.log('app');", encoding="utf-8")

os.environ["DATABASE_URL"] = f"sqlite:///{_TMP / 'boot.db'}"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["UPLOAD_DIR"] = str(_TMP / "uploads")
os.environ["LOG_DIR"] = str(_TMP / "logs")
os.environ["FRONTEND_DIR"] = str(_TMP / "frontend")
os.environ["FRONTEND_ENTRY"] = "login.html"
os.environ["MAX_UPLOAD_MB"] = "1"
os.environ["STORAGE_BACKEND"] = "local"

from fastapi.testclient import TestClient  # noqa: E402
from curriculum.db.session import Database  # noqa: E402
from curriculum.main import create_app  # noqa: E402


@pytest.fixture()
def database(tmp_path):
    db = Database(f"sqlite:///{tmp_path / 'test.db'}")
    yield db
    db.dispose()


@pytest.fixture()
def client(database):
    with TestClient(create_app(database)) as c:
        yield c


def data(resp):
    body = resp.json()
    assert body["success"] is True, body
    return body["data"]


def error(resp):
    body = resp.json()
    assert body["success"] is False, body
    return body["error"]


@pytest.fixture()
def course(client):
    return data(client.post("/api/courses", json={"code": "CS", "name_th": "วิทยาการคอมพิวเตอร์"}))


@pytest.fixture()
def program(client, course):
    return data(
        client.post(
            "/api/programs",
            json={"code": "CS-2567", "name_th": "หลักสูตรวิทยาการคอมพิวเตอร์", "course_id": course["id"], "year": 2567},
        )
    )
