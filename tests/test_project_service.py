"""Tests for project visibility, default-project ordering and external-id rules."""

from datetime import datetime, timedelta, timezone

import pytest

from core.exceptions import EntityNotFoundError, ExternalIdAlreadyExistsError, NoProjectFoundError
from models.models import PlatformRole
from services import project_member_service, project_service


# ---------------------------------------------------------------------------
# Visibility
# ---------------------------------------------------------------------------


class TestVisibility:

    def test_admin_sees_every_active_project_of_its_platform(self, session, factory):
        platform = factory.platform()
        other_platform = factory.platform()
        admin = factory.user(platform, role=PlatformRole.ADMIN)
        member = factory.user(platform)
        outsider = factory.user(other_platform, role=PlatformRole.ADMIN)

        own = factory.project(admin)
        members = factory.project(member)
        deleted = factory.project(member)
        factory.project(outsider)
        project_service.soft_delete(session, deleted.id)

        visible = project_service.get_all_for_user(session, admin)

        assert factory.ids(visible) == [own.id, members.id]

    def test_member_sees_owned_and_shared_projects_only(self, session, factory):
        platform = factory.platform()
        admin = factory.user(platform, role=PlatformRole.ADMIN)
        member = factory.user(platform)
        other_member = factory.user(platform)

        owned = factory.project(member)
        shared = factory.project(admin)
        factory.project(admin)
        factory.project(other_member)
        project_member_service.upsert(session, project_id=shared.id, user_id=member.id, platform_id=platform.id)

        visible = project_service.get_all_for_user(session, member)

        assert factory.ids(visible) == [owned.id, shared.id]

    def test_owned_project_that_is_also_shared_is_listed_once(self, session, factory):
        platform = factory.platform()
        member = factory.user(platform)
        owned = factory.project(member)
        project_member_service.upsert(session, project_id=owned.id, user_id=member.id, platform_id=platform.id)

        visible = project_service.get_all_for_user(session, member)

        assert factory.ids(visible) == [owned.id]

    def test_shared_project_that_was_soft_deleted_is_hidden(self, session, factory):
        platform = factory.platform()
        admin = factory.user(platform, role=PlatformRole.ADMIN)
        member = factory.user(platform)
        shared = factory.project(admin)
        project_member_service.upsert(session, project_id=shared.id, user_id=member.id, platform_id=platform.id)
        project_service.soft_delete(session, shared.id)

        assert project_service.get_all_for_user(session, member) == []

    def test_projects_are_ordered_by_creation_time_not_id(self, session, factory):
        platform = factory.platform()
        member = factory.user(platform)
        now = datetime.now(timezone.utc)
        newer = factory.project(member, created_at=now)
        older = factory.project(member, created_at=now - timedelta(days=1))

        visible = project_service.get_all_for_user(session, member)

        assert factory.ids(visible) == [older.id, newer.id]
        assert project_service.get_user_project_or_throw(session, member.id).id == older.id

    def test_user_without_projects_has_no_default_project(self, session, factory):
        member = factory.user(factory.platform())

        with pytest.raises(NoProjectFoundError) as exc:
            project_service.get_user_project_or_throw(session, member.id)

        assert exc.value.error_code == "INVITATION_ONLY_SIGN_UP"


# ---------------------------------------------------------------------------
# External ids
# ---------------------------------------------------------------------------


class TestExternalId:

    def test_collision_in_same_platform_is_rejected(self, factory):
        owner = factory.user(factory.platform(), role=PlatformRole.ADMIN)
        factory.project(owner, external_id="crm-42")

        with pytest.raises(ExternalIdAlreadyExistsError):
            factory.project(owner, external_id="crm-42")

    def test_soft_deleted_project_releases_its_external_id(self, session, factory):
        owner = factory.user(factory.platform(), role=PlatformRole.ADMIN)
        first = factory.project(owner, external_id="crm-42")
        project_service.soft_delete(session, first.id)

        second = factory.project(owner, external_id="crm-42")

        assert second.external_id == "crm-42"
        found = project_service.get_by_platform_id_and_external_id(session, owner.platform_id, "crm-42")
        assert found.id == second.id

    def test_same_external_id_is_allowed_on_another_platform(self, factory):
        first_owner = factory.user(factory.platform())
        second_owner = factory.user(factory.platform())
        factory.project(first_owner, external_id="crm-42")

        assert factory.project(second_owner, external_id="crm-42").external_id == "crm-42"

    def test_update_rejects_external_id_of_another_project(self, session, factory):
        owner = factory.user(factory.platform())
        factory.project(owner, external_id="crm-1")
        second = factory.project(owner, external_id="crm-2")

        with pytest.raises(ExternalIdAlreadyExistsError):
            project_service.update(session, second.id, external_id="crm-1")

    def test_update_keeping_own_external_id_is_allowed(self, session, factory):
        owner = factory.user(factory.platform())
        project = factory.project(owner, external_id="crm-1")

        updated = project_service.update(session, project.id, display_name="Renamed", external_id="crm-1")

        assert updated.display_name == "Renamed"
        assert updated.external_id == "crm-1"


def test_soft_deleted_project_is_not_found(session, factory):
    owner = factory.user(factory.platform())
    project = factory.project(owner)
    project_service.soft_delete(session, project.id)

    assert project_service.get_one(session, project.id) is None
    with pytest.raises(EntityNotFoundError):
        project_service.get_one_or_throw(session, project.id)
