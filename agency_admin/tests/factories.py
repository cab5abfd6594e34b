import os
from decimal import Decimal

from agency_admin.models.candidate import Candidate
from agency_admin.models.client import Client
from agency_admin.models.enums import AccountRole, ProjectType
from agency_admin.services.accounts_service import AccountsService
from agency_admin.services.candidates_service import CandidatesService
from agency_admin.services.projects_service import ProjectsService

PASSWORD = "pass1234"

PDF_BYTES = b"%PDF-1.4\n1 0 obj<<>>endobj\ntrailer<<>>\n%%EOF\n"


def make_account(db, email, role=AccountRole.STAFF, handle=None, name=None):
    return AccountsService().create(
        db,
        name=name or email.split("@")[0],
        email=email,
        password=PASSWORD,
        role=role,
        handle=handle,
    )


def make_client(db, name="Acme Ltd") -> Client:
    c = Client(name=name, email="billing@acme.test", phone="9876543210", company=name)
    db.add(c)
    db.commit()
    return c


def make_project(db, client: Client, actor_id: int, name="Website revamp"):
    return ProjectsService().create(
        db,
        client_id=client.id,
        name=name,
        description="initial",
        type=ProjectType.WEB_DEVELOPMENT,
        other_type=None,
        actor_id=actor_id,
    )


def make_candidate(db, name="Ravi Kumar") -> Candidate:
    return CandidatesService().create(
        db, name=name, email="ravi@example.com", phone="9123456780", position="Intern"
    )


def login(client, identifier, password=PASSWORD) -> dict:
    r = client.post("/api/v1/auth/login", json={"identifier": identifier, "password": password})
    assert r.status_code == 200, r.text
    # keep requests explicit: the login cookie would otherwise ride along
    client.cookies.clear()
    return {"Authorization": f"Bearer {r.json()['access_token']}"}


def files_in(path) -> list:
    """Stored artifacts, ignoring the staging directory."""
    if not os.path.isdir(path):
        return []
    return sorted(name for name in os.listdir(path) if not name.startswith("."))


def staged_in(path) -> list:
    staging = os.path.join(path, ".staging")
    if not os.path.isdir(staging):
        return []
    return os.listdir(staging)


def money(value) -> Decimal:
    return Decimal(str(value)).quantize(Decimal("0.01"))
