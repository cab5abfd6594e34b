import io
from decimal import Decimal

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from agency_admin.core.artifacts import ArtifactPolicy, IncomingArtifact
from agency_admin.core.errors import AlreadySubmitted, InvalidArtifact, LinkUnavailable, ValidationError
from agency_admin.core.storage import ArtifactStorage
from agency_admin.models.candidate import Candidate
from agency_admin.models.submission import Submission
from agency_admin.models.token_link import TokenLink
from agency_admin.services.links_service import TokenLinkService
from agency_admin.services.submissions_service import SubmissionService, parse_amount
from agency_admin.tests.factories import (
    PDF_BYTES,
    files_in,
    make_candidate,
    make_client,
    make_project,
    staged_in,
)


@pytest.fixture
def links(settings, clock):
    return TokenLinkService(settings, clock=clock)


@pytest.fixture
def submissions(settings, links, clock):
    return SubmissionService(
        links,
        ArtifactStorage(settings.upload_dir),
        ArtifactPolicy.from_settings(settings),
        clock=clock,
    )


def pdf(name="certificate.pdf", data=PDF_BYTES, content_type="application/pdf"):
    return IncomingArtifact(filename=name, content_type=content_type, stream=io.BytesIO(data))


def _count(db, *where):
    return db.execute(select(func.count()).select_from(Submission).where(*where)).scalar_one()


def test_candidate_upload_records_once_and_flips_state(db, admin, links, submissions, upload_dir):
    cand = make_candidate(db)
    link = links.issue_onboarding(db, candidate_id=cand.id, actor_id=admin.id)

    sub = submissions.submit_candidate_upload(db, link.token, pdf())

    db.expire_all()
    assert sub.candidate_id == cand.id
    assert sub.file_size == len(PDF_BYTES)
    assert db.get(Candidate, cand.id).status == "documents_uploaded"
    assert db.get(TokenLink, link.id).upload_completed is True
    assert len(files_in(upload_dir)) == 1

    with pytest.raises(AlreadySubmitted):
        submissions.submit_candidate_upload(db, link.token, pdf())

    assert _count(db, Submission.candidate_id == cand.id) == 1
    assert len(files_in(upload_dir)) == 1
    assert staged_in(upload_dir) == []


def test_disallowed_type_rejected_before_any_write(db, admin, links, submissions, upload_dir):
    cand = make_candidate(db)
    link = links.issue_onboarding(db, candidate_id=cand.id, actor_id=admin.id)

    bad = pdf(name="notes.txt", data=b"hello", content_type="text/plain")
    with pytest.raises(InvalidArtifact):
        submissions.submit_candidate_upload(db, link.token, bad)

    assert bad.stream.closed
    assert _count(db) == 0
    assert files_in(upload_dir) == []
    db.expire_all()
    assert db.get(Candidate, cand.id).status == "pending"


def test_mismatched_extension_rejected(db, admin, links, submissions, upload_dir):
    cand = make_candidate(db)
    link = links.issue_onboarding(db, candidate_id=cand.id, actor_id=admin.id)

    with pytest.raises(InvalidArtifact):
        submissions.submit_candidate_upload(db, link.token, pdf(name="payload.exe"))
    assert files_in(upload_dir) == []


def test_missing_artifact_rejected(db, admin, links, submissions):
    cand = make_candidate(db)
    link = links.issue_onboarding(db, candidate_id=cand.id, actor_id=admin.id)

    with pytest.raises(InvalidArtifact) as exc:
        submissions.submit_candidate_upload(db, link.token, None)
    assert exc.value.message == "No file uploaded."


def test_oversized_artifact_leaves_nothing_behind(db, admin, links, submissions, upload_dir):
    cand = make_candidate(db)
    link = links.issue_onboarding(db, candidate_id=cand.id, actor_id=admin.id)

    with pytest.raises(InvalidArtifact):
        submissions.submit_candidate_upload(db, link.token, pdf(data=b"x" * 4096))

    assert files_in(upload_dir) == []
    assert staged_in(upload_dir) == []
    assert _count(db) == 0


def test_invalid_link_discards_upload(db, submissions, upload_dir):
    artifact = pdf()
    with pytest.raises(LinkUnavailable):
        submissions.submit_candidate_upload(db, "f" * 64, artifact)

    assert artifact.stream.closed
    assert files_in(upload_dir) == []


def test_store_failure_after_write_removes_file(db, admin, links, submissions, upload_dir, monkeypatch):
    cand = make_candidate(db)
    link = links.issue_onboarding(db, candidate_id=cand.id, actor_id=admin.id)

    def broken_commit():
        raise OperationalError("INSERT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(db, "commit", broken_commit)
    with pytest.raises(OperationalError):
        submissions.submit_candidate_upload(db, link.token, pdf())
    monkeypatch.undo()

    assert files_in(upload_dir) == []
    assert _count(db) == 0


def test_payment_submission_keeps_link_reusable(db, admin, links, submissions, clock):
    client = make_client(db)
    p = make_project(db, client, admin.id)
    link = links.issue_payment(db, project_id=p.id, actor_id=admin.id, amount=Decimal("1500.00"))

    first = submissions.submit_payment(db, link.token, pdf(name="receipt.png", content_type="image/png"))
    second = submissions.submit_payment(db, link.token, pdf(name="receipt.jpg", content_type="image/jpeg"))

    assert first.reference_id != second.reference_id
    assert first.reference_id.startswith(f"PAY-{clock.now.year}-")
    assert first.amount == Decimal("1500.00")
    assert first.project_code == p.code
    assert first.tracking_id == p.tracking_id
    assert first.client_name == client.name
    assert first.status == "pending"
    assert _count(db, Submission.link_id == link.id) == 2
    assert links.validate_payment(db, link.token).link.id == link.id


def test_payment_amount_and_type_resolution(db, admin, links, submissions):
    client = make_client(db)
    p = make_project(db, client, admin.id)
    link = links.issue_payment(
        db, project_id=p.id, actor_id=admin.id, amount=Decimal("99.00"), payment_kind="registration"
    )

    explicit = submissions.submit_payment(db, link.token, pdf(), amount="120.5")
    assert explicit.amount == Decimal("120.50")
    assert explicit.payment_kind == "registration"
    assert explicit.payment_type == "registration"

    typed = submissions.submit_payment(
        db, link.token, pdf(), payment_kind="project", payment_type="web_development"
    )
    assert typed.amount == Decimal("99.00")
    assert typed.payment_kind == "project"
    assert typed.payment_type == "web_development"


def test_parse_amount():
    assert parse_amount(None) is None
    assert parse_amount("12") == Decimal("12.00")
    assert parse_amount("abc") == Decimal("0")
    assert parse_amount("NaN") == Decimal("0")


def test_parse_amount_rejects_values_the_column_cannot_hold():
    assert parse_amount("99999999.99") == Decimal("99999999.99")
    assert parse_amount("1e-9") == Decimal("0.00")
    for raw in ("1e1000", "123456789012", "-5"):
        with pytest.raises(ValidationError) as exc:
            parse_amount(raw)
        assert "amount" in exc.value.details["fields"]


def test_out_of_range_amount_writes_nothing(db, admin, links, submissions, upload_dir):
    client = make_client(db)
    p = make_project(db, client, admin.id)
    link = links.issue_payment(db, project_id=p.id, actor_id=admin.id)

    receipt = pdf()
    with pytest.raises(ValidationError):
        submissions.submit_payment(db, link.token, receipt, amount="1e1000")

    assert receipt.stream.closed
    assert files_in(upload_dir) == []
    assert _count(db) == 0


def test_lost_upload_race_maps_to_already_submitted(db, admin, links, submissions, upload_dir, monkeypatch):
    cand = make_candidate(db)
    link = links.issue_onboarding(db, candidate_id=cand.id, actor_id=admin.id)
    link_id = link.id
    real_save = submissions.storage.save

    def save_while_another_upload_lands(artifact, **kwargs):
        stored = real_save(artifact, **kwargs)
        # a concurrent request commits its row after our existence check
        db.add(
            Submission(
                kind="onboarding",
                link_id=link_id,
                candidate_id=cand.id,
                file_name="other.pdf",
                file_path="/elsewhere/other.pdf",
                file_size=10,
                content_type="application/pdf",
                status="uploaded",
            )
        )
        db.commit()
        return stored

    monkeypatch.setattr(submissions.storage, "save", save_while_another_upload_lands)
    with pytest.raises(AlreadySubmitted):
        submissions.submit_candidate_upload(db, link.token, pdf())

    assert _count(db, Submission.candidate_id == cand.id) == 1
    assert db.execute(select(Submission.file_name)).scalar_one() == "other.pdf"
    assert files_in(upload_dir) == []
    assert staged_in(upload_dir) == []
