"""Tests for the development seed script."""

import scripts.seed as seed
from services import project_service, user_identity_service, user_service


def test_seed_builds_demo_platform_once(engine, session, monkeypatch):
    monkeypatch.setattr(seed, "engine", engine)
    monkeypatch.setattr(seed, "create_db_and_tables", lambda: None)

    seed.seed_dev_data()
    seed.seed_dev_data()

    admin_identity = user_identity_service.get_identity_by_email(session, "admin@demo.com")
    member_identity = user_identity_service.get_identity_by_email(session, "member@demo.com")
    [admin] = user_service.list_for_identity(session, admin_identity.id)
    [member] = user_service.list_for_identity(session, member_identity.id)

    assert admin.is_platform_admin()
    assert [p.display_name for p in project_service.get_all_for_user(session, admin)] == [
        "Operations",
        "Member's Project",
    ]
    assert [p.display_name for p in project_service.get_all_for_user(session, member)] == [
        "Operations",
        "Member's Project",
    ]
