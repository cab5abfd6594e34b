from agency_admin.tests.factories import login, make_account, make_candidate


def _create_client_and_project(client, admin_headers):
    r = client.post(
        "/api/v1/admin/clients",
        json={"name": "Client C", "email": "c@client.test", "phone": "9876543210", "company": "C Corp"},
        headers=admin_headers,
    )
    assert r.status_code == 201, r.text
    client_id = r.json()["id"]

    r = client.post(
        "/api/v1/admin/projects",
        json={"client_id": client_id, "name": "Project P", "description": "v1", "type": "web_development"},
        headers=admin_headers,
    )
    assert r.status_code == 201, r.text
    return client_id, r.json()


def test_edit_allowed_payments_forbidden_then_revoked(client, db, admin_headers):
    client_id, project = _create_client_and_project(client, admin_headers)
    pid = project["id"]
    assert project["code"].startswith("PRJ-")
    assert project["tracking_id"].startswith("TRK-")

    u = make_account(db, "u@agency.test")
    r = client.post(
        f"/api/v1/admin/projects/{pid}/members",
        json={"account_id": u.id, "can_edit": True, "can_manage_payments": False},
        headers=admin_headers,
    )
    assert r.status_code == 201, r.text

    u_headers = login(client, "u@agency.test")

    r = client.patch(f"/api/v1/admin/projects/{pid}", json={"description": "updated by U"}, headers=u_headers)
    assert r.status_code == 200, r.text
    assert r.json()["description"] == "updated by U"
    assert r.json()["updated_by"] == u.id
    assert r.json()["my_perms"] == {"can_edit": True, "can_manage_payments": False}

    r = client.post(f"/api/v1/admin/projects/{pid}/payment-links", json={"amount": "500"}, headers=u_headers)
    assert r.status_code == 403

    r = client.delete(f"/api/v1/admin/projects/{pid}/members/{u.id}", headers=admin_headers)
    assert r.status_code == 200

    r = client.patch(f"/api/v1/admin/projects/{pid}", json={"description": "again"}, headers=u_headers)
    assert r.status_code == 403
    assert r.json()["error"]["code"] == "FORBIDDEN"


def test_onboarding_link_valid_now_and_gone_after_window(client, db, admin_headers, clock):
    cand = make_candidate(db, name="Candidate X")

    r = client.post("/api/v1/admin/candidate-links", json={"candidate_id": cand.id}, headers=admin_headers)
    assert r.status_code == 201, r.text
    token = r.json()["token"]

    r = client.get(f"/api/v1/public/candidate-links/{token}")
    assert r.status_code == 200
    body = r.json()
    assert body["candidate"]["id"] == cand.id
    assert body["candidate"]["has_uploaded"] is False

    clock.advance(hours=6)

    r = client.get(f"/api/v1/public/candidate-links/{token}")
    assert r.status_code == 404
    assert r.json()["error"]["message"] == "Link not found, expired, or inactive."


def test_payment_manager_can_issue_links(client, db, admin_headers):
    _, project = _create_client_and_project(client, admin_headers)
    pid = project["id"]
    payer = make_account(db, "payer@agency.test")
    client.post(
        f"/api/v1/admin/projects/{pid}/members",
        json={"account_id": payer.id, "can_edit": False, "can_manage_payments": True},
        headers=admin_headers,
    )
    headers = login(client, "payer@agency.test")

    r = client.post(
        f"/api/v1/admin/projects/{pid}/payment-links",
        json={"amount": "750.00", "kind": "registration"},
        headers=headers,
    )
    assert r.status_code == 201, r.text
    assert r.json()["url"].endswith(f"/payment/{r.json()['token']}")
    assert r.json()["payment_kind"] == "registration"

    r = client.get(f"/api/v1/admin/projects/{pid}/payment-links", headers=headers)
    assert r.status_code == 200
    assert len(r.json()["links"]) == 1

    r = client.patch(f"/api/v1/admin/projects/{pid}", json={"name": "nope"}, headers=headers)
    assert r.status_code == 403


def test_listing_is_filtered_by_membership(client, db, admin_headers):
    visible_client, visible_project = _create_client_and_project(client, admin_headers)
    hidden_client, _ = _create_client_and_project(client, admin_headers)

    u = make_account(db, "u@agency.test")
    client.post(
        f"/api/v1/admin/projects/{visible_project['id']}/members",
        json={"account_id": u.id, "can_edit": False, "can_manage_payments": False},
        headers=admin_headers,
    )
    headers = login(client, "u@agency.test")

    r = client.get("/api/v1/admin/clients", headers=headers)
    assert r.status_code == 200
    rows = r.json()["data"]
    assert [c["id"] for c in rows] == [visible_client]
    assert rows[0]["project_count"] == 1

    r = client.get(f"/api/v1/admin/clients/{visible_client}/projects", headers=headers)
    assert [p["id"] for p in r.json()["data"]] == [visible_project["id"]]
    assert r.json()["data"][0]["my_perms"] == {"can_edit": False, "can_manage_payments": False}

    assert client.get(f"/api/v1/admin/clients/{hidden_client}", headers=headers).status_code == 403

    admin_rows = client.get("/api/v1/admin/clients", headers=admin_headers).json()["data"]
    assert {c["id"] for c in admin_rows} == {visible_client, hidden_client}


def test_admin_only_surfaces(client, db, admin_headers):
    make_account(db, "u@agency.test")
    headers = login(client, "u@agency.test")

    assert client.get("/api/v1/admin/accounts", headers=headers).status_code == 403
    assert client.post(
        "/api/v1/admin/clients",
        json={"name": "X", "email": "x@x.test", "phone": "9876543210"},
        headers=headers,
    ).status_code == 403
    assert client.get("/api/v1/admin/candidates", headers=headers).status_code == 403


def test_granting_twice_through_api_upserts(client, db, admin_headers):
    _, project = _create_client_and_project(client, admin_headers)
    pid = project["id"]
    u = make_account(db, "u@agency.test")

    for flags in ({"can_edit": True, "can_manage_payments": False}, {"can_edit": False, "can_manage_payments": True}):
        r = client.post(
            f"/api/v1/admin/projects/{pid}/members",
            json={"account_id": u.id, **flags},
            headers=admin_headers,
        )
        assert r.status_code == 201

    members = client.get(f"/api/v1/admin/projects/{pid}/members", headers=admin_headers).json()["data"]
    assert len(members) == 1
    assert members[0]["can_edit"] is False
    assert members[0]["can_manage_payments"] is True
