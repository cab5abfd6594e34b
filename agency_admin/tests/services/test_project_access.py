from sqlalchemy import func, select

from agency_admin.models.enums import AccountRole
from agency_admin.models.project_membership import ProjectMembership
from agency_admin.policies.project_access import (
    can_edit_project,
    can_manage_payments,
    can_view_client,
    can_view_project,
    permissions_for,
)
from agency_admin.services.auth_service import principal_for
from agency_admin.services.memberships_service import MembershipsService
from agency_admin.tests.factories import make_account, make_client, make_project


def test_admin_passes_every_predicate_without_membership(db, admin):
    client = make_client(db)
    projects = [make_project(db, client, admin.id, name=f"P{i}") for i in range(3)]
    principal = principal_for(admin)

    for p in projects:
        assert can_edit_project(db, principal, p.id) is True
        assert can_manage_payments(db, principal, p.id) is True
        assert can_view_project(db, principal, p.id) is True
    assert can_view_client(db, principal, client.id) is True


def test_staff_without_membership_fails_both_predicates(db, admin):
    client = make_client(db)
    p = make_project(db, client, admin.id)
    staff = principal_for(make_account(db, "u@agency.test"))

    assert can_edit_project(db, staff, p.id) is False
    assert can_manage_payments(db, staff, p.id) is False
    assert can_view_project(db, staff, p.id) is False
    assert can_view_client(db, staff, client.id) is False


def test_flags_are_checked_independently(db, admin):
    client = make_client(db)
    p = make_project(db, client, admin.id)
    u = make_account(db, "u@agency.test")
    MembershipsService().grant(db, project_id=p.id, account_id=u.id, can_edit=True, can_manage_payments=False)

    staff = principal_for(u)
    assert can_edit_project(db, staff, p.id) is True
    assert can_manage_payments(db, staff, p.id) is False
    assert can_view_project(db, staff, p.id) is True
    assert can_view_client(db, staff, client.id) is True


def test_granting_twice_keeps_one_row_and_last_flags_win(db, admin):
    client = make_client(db)
    p = make_project(db, client, admin.id)
    u = make_account(db, "u@agency.test")
    svc = MembershipsService()

    svc.grant(db, project_id=p.id, account_id=u.id, can_edit=True, can_manage_payments=False)
    m = svc.grant(db, project_id=p.id, account_id=u.id, can_edit=False, can_manage_payments=True)

    count = db.execute(
        select(func.count()).select_from(ProjectMembership).where(
            ProjectMembership.project_id == p.id, ProjectMembership.account_id == u.id
        )
    ).scalar_one()
    assert count == 1
    assert m.can_edit is False
    assert m.can_manage_payments is True

    staff = principal_for(u)
    assert can_edit_project(db, staff, p.id) is False
    assert can_manage_payments(db, staff, p.id) is True


def test_revoke_takes_effect_on_next_check(db, admin):
    client = make_client(db)
    p = make_project(db, client, admin.id)
    u = make_account(db, "u@agency.test")
    svc = MembershipsService()
    svc.grant(db, project_id=p.id, account_id=u.id, can_edit=True, can_manage_payments=True)
    staff = principal_for(u)
    assert can_edit_project(db, staff, p.id) is True

    svc.revoke(db, project_id=p.id, account_id=u.id)

    assert can_edit_project(db, staff, p.id) is False
    assert can_manage_payments(db, staff, p.id) is False


def test_permissions_for_reports_per_project(db, admin):
    client = make_client(db)
    p1 = make_project(db, client, admin.id, name="One")
    p2 = make_project(db, client, admin.id, name="Two")
    u = make_account(db, "u@agency.test")
    MembershipsService().grant(db, project_id=p1.id, account_id=u.id, can_edit=False, can_manage_payments=True)

    perms = permissions_for(db, principal_for(u), [p1.id, p2.id])
    assert perms[p1.id] == {"can_edit": False, "can_manage_payments": True}
    assert perms[p2.id] == {"can_edit": False, "can_manage_payments": False}

    admin_perms = permissions_for(db, principal_for(admin), [p1.id, p2.id])
    assert all(v == {"can_edit": True, "can_manage_payments": True} for v in admin_perms.values())


def test_admin_role_is_global_not_per_project(db):
    boss = make_account(db, "boss2@agency.test", role=AccountRole.ADMIN)
    other = make_account(db, "other@agency.test")
    client = make_client(db)
    p = make_project(db, client, other.id)

    assert can_edit_project(db, principal_for(boss), p.id) is True


def test_grant_that_loses_the_insert_race_updates_the_winner(db, admin, monkeypatch):
    client = make_client(db)
    p = make_project(db, client, admin.id)
    u = make_account(db, "racer@agency.test")
    svc = MembershipsService()

    # another request inserted the pair after this one looked it up
    db.add(ProjectMembership(project_id=p.id, account_id=u.id, can_edit=True, can_manage_payments=False))
    db.commit()

    real_find = svc._find
    lookups = []

    def stale_first_lookup(*args):
        lookups.append(args)
        return None if len(lookups) == 1 else real_find(*args)

    monkeypatch.setattr(svc, "_find", stale_first_lookup)
    m = svc.grant(db, project_id=p.id, account_id=u.id, can_edit=False, can_manage_payments=True)

    assert len(lookups) == 2
    rows = db.execute(
        select(ProjectMembership).where(ProjectMembership.project_id == p.id, ProjectMembership.account_id == u.id)
    ).scalars().all()
    assert [r.id for r in rows] == [m.id]
    assert m.can_edit is False
    assert m.can_manage_payments is True
