from agency_admin.tests.factories import login


def test_account_lifecycle(client, admin, admin_headers):
    r = client.post(
        "/api/v1/admin/accounts",
        json={"name": "Priya", "email": "Priya@Agency.test", "handle": "Priya", "password": "secret99"},
        headers=admin_headers,
    )
    assert r.status_code == 201, r.text
    created = r.json()
    assert created["email"] == "priya@agency.test"
    assert created["handle"] == "priya"
    assert created["role"] == "staff"
    assert "password_hash" not in created

    dup = client.post(
        "/api/v1/admin/accounts",
        json={"name": "Other", "email": "priya@agency.test", "password": "secret99"},
        headers=admin_headers,
    )
    assert dup.status_code == 409

    r = client.patch(
        f"/api/v1/admin/accounts/{created['id']}",
        json={"role": "admin", "password": "newsecret"},
        headers=admin_headers,
    )
    assert r.status_code == 200
    assert r.json()["role"] == "admin"
    login(client, "priya", "newsecret")

    short = client.patch(f"/api/v1/admin/accounts/{created['id']}", json={"password": "123"}, headers=admin_headers)
    assert short.status_code == 422
    assert "password" in short.json()["error"]["details"]["fields"]

    listing = client.get("/api/v1/admin/accounts?search=priya", headers=admin_headers).json()
    assert listing["total"] == 1

    assert client.delete(f"/api/v1/admin/accounts/{admin.id}", headers=admin_headers).status_code == 422
    assert client.delete(f"/api/v1/admin/accounts/{created['id']}", headers=admin_headers).status_code == 200


def test_handle_cannot_look_like_email(client, admin_headers):
    r = client.post(
        "/api/v1/admin/accounts",
        json={"name": "X", "email": "x@agency.test", "handle": "x@y", "password": "secret99"},
        headers=admin_headers,
    )
    assert r.status_code == 422
