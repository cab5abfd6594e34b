from sqlalchemy.exc import OperationalError

from agency_admin.db.session import get_db


def test_live(client):
    r = client.get("/api/v1/health/live")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


def test_ready_checks_database(client):
    r = client.get("/api/v1/health/ready")
    assert r.status_code == 200
    assert r.json()["database"] == "up"


def test_ready_reports_unavailable_store(app, client):
    class DownSession:
        def execute(self, *args, **kwargs):
            raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    app.dependency_overrides[get_db] = lambda: DownSession()
    r = client.get("/api/v1/health/ready")
    assert r.status_code == 503
    assert r.json()["database"] == "down"
