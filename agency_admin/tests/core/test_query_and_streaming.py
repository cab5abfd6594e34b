from sqlalchemy import select

from agency_admin.core.query import PageParams, SortParams
from agency_admin.core.rate_limit import InMemoryRateLimiter
from agency_admin.core.streaming import csv_stream
from agency_admin.models.contact import Contact
from agency_admin.services.contacts_service import SORTABLE


def test_page_params_clamp():
    p = PageParams.normalize(0, 10_000)
    assert p.page == 1
    assert p.limit == 200
    assert PageParams.normalize(3, 20).offset == 40
    assert PageParams(page=1, limit=20).total_pages(41) == 3
    assert PageParams(page=1, limit=20).total_pages(0) == 0


def test_sort_params_fall_back_to_default():
    s = SortParams.normalize("password", "asc", SORTABLE, default="created_at")
    assert s.key == "created_at"
    assert s.descending is False

    s = SortParams.normalize("email", None, SORTABLE, default="created_at")
    assert s.key == "email"
    assert s.descending is True

    sql = str(s.apply(select(Contact), SORTABLE))
    assert "ORDER BY contacts.email DESC" in sql


def test_rate_limiter_refills_over_time():
    now = [0.0]
    limiter = InMemoryRateLimiter(capacity=2, refill_per_sec=1 / 30, clock=lambda: now[0])

    assert limiter.allow("1.2.3.4", "contact")
    assert limiter.allow("1.2.3.4", "contact")
    assert not limiter.allow("1.2.3.4", "contact")
    assert limiter.allow("5.6.7.8", "contact")

    now[0] += 30
    assert limiter.allow("1.2.3.4", "contact")


def test_csv_stream_escapes_formulas():
    out = b"".join(csv_stream([{"a": "=1+1", "b": "plain"}, {"a": "-5", "b": 3}], ["a", "b"])).decode()
    lines = out.splitlines()
    assert lines[0] == "a,b"
    assert lines[1] == "'=1+1,plain"
    assert lines[2] == "'-5,3"
