from datetime import datetime, timedelta, timezone

from jose import jwt

from agency_admin.models.account import Account
from agency_admin.tests.factories import PASSWORD, login, make_account


def test_login_by_email_sets_cookie_and_returns_token(client, admin):
    r = client.post(
        "/api/v1/auth/login",
        json={"identifier": "  ADMIN@agency.test ", "password": PASSWORD},
    )
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["token"] == body["access_token"]
    assert body["account"]["role"] == "admin"
    assert "admin_token" in r.cookies

    claims = jwt.get_unverified_claims(body["access_token"])
    assert claims["sub"] == str(admin.id)
    assert claims["role"] == "admin"
    assert claims["exp"] - claims["iat"] == 24 * 3600


def test_login_by_handle(client, admin):
    r = client.post("/api/v1/auth/login", json={"identifier": "BOSS", "password": PASSWORD})
    assert r.status_code == 200


def test_login_accepts_email_field(client, admin):
    r = client.post("/api/v1/auth/login", json={"email": "admin@agency.test", "password": PASSWORD})
    assert r.status_code == 200


def test_login_updates_last_login(client, db, admin, clock):
    login(client, admin.email)
    db.expire_all()
    seen = db.get(Account, admin.id).last_login_at
    assert seen is not None
    assert seen.replace(tzinfo=None) == clock.now.replace(tzinfo=None)


def test_login_failures_are_indistinguishable(client, db, admin):
    inactive = make_account(db, "gone@agency.test")
    inactive.is_active = False
    db.commit()

    bodies = []
    for ident, pw in (
        ("admin@agency.test", "wrong-password"),
        ("nobody@agency.test", PASSWORD),
        ("gone@agency.test", PASSWORD),
    ):
        r = client.post("/api/v1/auth/login", json={"identifier": ident, "password": pw})
        assert r.status_code == 401
        bodies.append(r.json()["error"])

    assert all(b == bodies[0] for b in bodies)
    assert bodies[0]["message"] == "Invalid credentials."


def test_login_requires_fields(client):
    r = client.post("/api/v1/auth/login", json={"identifier": "", "password": ""})
    assert r.status_code == 422
    assert r.json()["error"]["code"] == "VALIDATION_ERROR"


def test_missing_token_is_unauthenticated(client):
    r = client.get("/api/v1/auth/me")
    assert r.status_code == 401
    assert r.json()["error"]["message"] == "Missing token."


def test_tampered_or_expired_token_is_invalid(client, settings, admin):
    r = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401
    assert r.json()["error"]["code"] == "INVALID_TOKEN"

    past = datetime.now(timezone.utc) - timedelta(days=2)
    expired = jwt.encode(
        {"sub": str(admin.id), "role": "admin", "iat": int(past.timestamp()), "exp": int((past + timedelta(hours=24)).timestamp())},
        settings.jwt_secret_key,
        algorithm="HS256",
    )
    r = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {expired}"})
    assert r.status_code == 401
    assert r.json()["error"]["code"] == "INVALID_TOKEN"

    forged = jwt.encode({"sub": str(admin.id), "role": "admin"}, "other-secret", algorithm="HS256")
    r = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {forged}"})
    assert r.status_code == 401


def test_token_without_role_is_forbidden(client, settings, admin):
    exp = int((datetime.now(timezone.utc) + timedelta(hours=1)).timestamp())
    token = jwt.encode({"sub": str(admin.id), "exp": exp}, settings.jwt_secret_key, algorithm="HS256")
    r = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 403


def test_cookie_session_and_logout(client, admin):
    r = client.post("/api/v1/auth/login", json={"identifier": admin.email, "password": PASSWORD})
    assert r.status_code == 200

    me = client.get("/api/v1/auth/me")
    assert me.status_code == 200
    assert me.json()["email"] == "admin@agency.test"

    out = client.post("/api/v1/auth/logout")
    assert out.status_code == 200
    client.cookies.clear()
    assert client.get("/api/v1/auth/me").status_code == 401


def test_request_id_is_echoed(client):
    r = client.get("/api/v1/health/live", headers={"X-Request-Id": "abc-123"})
    assert r.headers["X-Request-Id"] == "abc-123"
    assert r.json()["request_id"] == "abc-123"


def test_unsafe_request_id_is_replaced(client):
    r = client.get("/api/v1/health/live", headers={"X-Request-Id": "bad id with spaces"})
    rid = r.headers["X-Request-Id"]
    assert rid != "bad id with spaces"
    assert len(rid) == 32
    assert r.json()["request_id"] == rid
