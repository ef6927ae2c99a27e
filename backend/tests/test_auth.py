import pytest

from curriculum.db.init_db import seed_admin
from curriculum.models.user import User
from conftest import data, error


def _login(client, email, password):
    resp = client.post("/api/login", json={"email": email, "password": password})
    return {"Authorization": f"Bearer {data(resp)['access_token']}"}


@pytest.fixture()
def admin_headers(client, database):
    with database.session() as db:
        seed_admin(db, "admin@example.com", "adm1n!")
    return _login(client, "admin@example.com", "adm1n!")


def _register(client, headers, email="lecturer@example.com", password="s3cret!", **extra):
    payload = {"email": email, "password": password, "name": "Lecturer", **extra}
    return client.post("/api/users", json=payload, headers=headers)


def test_register_and_login(client, database, admin_headers):
    resp = _register(client, admin_headers)
    assert resp.status_code == 201
    user = data(resp)["user"]
    assert "password_hash" not in user
    assert user["role"] == "staff"

    with database.session() as db:
        stored = db.query(User).filter(User.email == "lecturer@example.com").one()
        assert stored.password_hash != "s3cret!"
        assert stored.password_hash.startswith("$2")

    resp = client.post("/api/login", json={"email": "Lecturer@Example.com", "password": "s3cret!"})
    assert resp.status_code == 200
    body = data(resp)
    assert body["user"]["email"] == "lecturer@example.com"
    assert "password_hash" not in body["user"]
    assert body["token_type"] == "Bearer"

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert me.status_code == 200
    assert data(me)["email"] == "lecturer@example.com"
    assert data(me)["last_login_at"] is not None


def test_create_user_requires_login(client, database):
    resp = client.post("/api/users", json={"email": "intruder@example.com", "password": "x", "role": "admin"})
    assert resp.status_code == 401
    assert error(resp)["code"] == "AUTH_REQUIRED"
    with database.session() as db:
        assert db.query(User).count() == 0


def test_create_user_requires_admin(client, database, admin_headers):
    assert _register(client, admin_headers).status_code == 201
    staff_headers = _login(client, "lecturer@example.com", "s3cret!")

    resp = _register(client, staff_headers, email="other@example.com", role="admin")
    assert resp.status_code == 403
    assert error(resp)["code"] == "PERMISSION_DENIED"
    with database.session() as db:
        assert db.query(User).filter(User.email == "other@example.com").count() == 0


def test_create_user_role(client, admin_headers):
    resp = _register(client, admin_headers, email="second-admin@example.com", role="admin")
    assert resp.status_code == 201
    assert data(resp)["user"]["role"] == "admin"

    resp = _register(client, admin_headers, email="root@example.com", role="superuser")
    assert resp.status_code == 400
    assert error(resp)["code"] == "VALIDATION_ERROR"


def test_login_wrong_password(client, admin_headers):
    _register(client, admin_headers)
    resp = client.post("/api/login", json={"email": "lecturer@example.com", "password": "nope"})
    assert resp.status_code == 401
    assert error(resp)["code"] == "AUTH_INVALID_CREDENTIALS"


def test_login_unknown_email(client):
    resp = client.post("/api/login", json={"email": "ghost@example.com", "password": "x"})
    assert resp.status_code == 401


def test_login_missing_field(client):
    resp = client.post("/api/login", json={"email": "lecturer@example.com"})
    assert resp.status_code == 400
    err = error(resp)
    assert err["code"] == "VALIDATION_ERROR"
    assert err["details"]["missing"] == ["password"]


def test_inactive_user_cannot_login(client, database, admin_headers):
    _register(client, admin_headers)
    with database.session() as db:
        db.query(User).filter(User.email == "lecturer@example.com").update({User.is_active: False})
        db.commit()
    resp = client.post("/api/login", json={"email": "lecturer@example.com", "password": "s3cret!"})
    assert resp.status_code == 401


def test_duplicate_email(client, admin_headers):
    assert _register(client, admin_headers).status_code == 201
    resp = _register(client, admin_headers)
    assert resp.status_code == 409
    assert error(resp)["code"] == "RESOURCE_CONFLICT"


def test_me_requires_token(client):
    resp = client.get("/api/auth/me")
    assert resp.status_code == 401
    assert error(resp)["code"] == "AUTH_REQUIRED"

    resp = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401
    assert error(resp)["code"] == "AUTH_INVALID_CREDENTIALS"
