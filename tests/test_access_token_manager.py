"""Tests for credential scope construction and token-version revocation."""

from datetime import timedelta

import pytest

from core.exceptions import InvalidBearerTokenError, UserInactiveError
from core.security import sign
from models.models import UserStatus
from services import access_token_manager, project_service, user_identity_service, user_service
from services.access_token_manager import PrincipalType


@pytest.fixture
def scoped(session, factory):
    platform = factory.platform()
    user = factory.user(platform)
    project = factory.project(user)
    identity = user_identity_service.get_one_or_fail(session, user.identity_id)
    return user, project, identity


def _token_for(user, project, identity) -> str:
    return access_token_manager.generate_token(
        user_id=user.id,
        project_id=project.id,
        platform_id=user.platform_id,
        token_version=identity.token_version,
    )


def test_token_carries_exactly_the_issued_scope(scoped):
    user, project, identity = scoped

    principal = access_token_manager.decode_token(_token_for(user, project, identity))

    assert principal.id == user.id
    assert principal.type == PrincipalType.USER
    assert principal.project_id == project.id
    assert principal.platform_id == user.platform_id
    assert principal.token_version == identity.token_version


def test_fresh_token_verifies(session, scoped):
    user, project, identity = scoped
    principal = access_token_manager.decode_token(_token_for(user, project, identity))

    assert access_token_manager.verify_principal(session, principal).id == user.id


def test_bumping_token_version_revokes_previous_tokens(session, scoped):
    user, project, identity = scoped
    old_principal = access_token_manager.decode_token(_token_for(user, project, identity))

    identity = user_identity_service.increment_token_version(session, identity.id)

    with pytest.raises(InvalidBearerTokenError):
        access_token_manager.verify_principal(session, old_principal)
    new_principal = access_token_manager.decode_token(_token_for(user, project, identity))
    assert access_token_manager.verify_principal(session, new_principal).id == user.id


def test_inactive_user_is_rejected_at_use_time(session, scoped):
    user, project, identity = scoped
    principal = access_token_manager.decode_token(_token_for(user, project, identity))
    user_service.update(session, user.id, platform_id=user.platform_id, status=UserStatus.INACTIVE)

    with pytest.raises(UserInactiveError):
        access_token_manager.verify_principal(session, principal)


def test_token_for_another_platform_is_rejected(session, scoped):
    user, project, identity = scoped
    token = access_token_manager.generate_token(
        user_id=user.id,
        project_id=project.id,
        platform_id=user.platform_id + 1000,
        token_version=identity.token_version,
    )

    with pytest.raises(InvalidBearerTokenError):
        access_token_manager.verify_principal(session, access_token_manager.decode_token(token))


@pytest.mark.parametrize(
    "token",
    [
        "not-a-jwt",
        sign({"id": 1, "type": "user", "project_id": 1, "platform_id": 1, "token_version": 0}, timedelta(seconds=-5)),
        sign({"id": 1, "type": "user"}),
    ],
    ids=["garbage", "expired", "missing-scope"],
)
def test_malformed_tokens_are_rejected(token):
    with pytest.raises(InvalidBearerTokenError):
        access_token_manager.decode_token(token)


def test_token_scoped_to_deleted_project_is_rejected(session, scoped):
    user, project, identity = scoped
    principal = access_token_manager.decode_token(_token_for(user, project, identity))
    project_service.soft_delete(session, project.id)

    with pytest.raises(InvalidBearerTokenError):
        access_token_manager.verify_principal(session, principal)
