# ================================================================
# services/authentication_service.py — Sign up / sign in flows
# ================================================================
import logging
from typing import List, Optional

from sqlmodel import Session

from core.config import Edition, settings
from core.exceptions import (
    AccountNotFoundError,
    InvalidCredentialsError,
    NoProjectFoundError,
    SystemPropNotDefinedError,
    UserAlreadyExistsError,
)
from core.security import verify_password
from models.models import (
    PlatformRole,
    ProjectMemberRole,
    User,
    UserIdentity,
    UserIdentityProvider,
    UserInvitation,
)
from schemas.authentication_schema import AuthenticationResponse, SignInRequest, SignUpRequest
from services import (
    authentication_utils,
    invitation_service,
    platform_service,
    project_member_service,
    project_service,
    user_identity_service,
    user_service,
)
from services.appsumo_service import appsumo_service

logger = logging.getLogger(__name__)


def _resolve_sign_up_platform(request: SignUpRequest) -> Optional[int]:
    if request.platform_id is not None:
        return request.platform_id
    if settings.EDITION == Edition.CLOUD:
        if settings.CLOUD_PLATFORM_ID is None:
            raise SystemPropNotDefinedError("CLOUD_PLATFORM_ID")
        return settings.CLOUD_PLATFORM_ID
    return None


def _get_or_create_identity(session: Session, request: SignUpRequest) -> UserIdentity:
    identity = user_identity_service.get_identity_by_email(session, request.email)
    if identity is None:
        return user_identity_service.create(
            session,
            email=request.email,
            first_name=request.first_name,
            last_name=request.last_name,
            password=request.password,
            provider=UserIdentityProvider.EMAIL,
            track_events=request.track_events,
            news_letter=request.news_letter,
        )
    # joining another platform with an existing identity requires its password
    if not verify_password(request.password, identity.password_hash):
        raise UserAlreadyExistsError(identity.email)
    return identity


def _bootstrap_platform(session: Session, request: SignUpRequest) -> AuthenticationResponse:
    """Public sign-up: new identity, its own platform, admin membership and first project."""
    identity = user_identity_service.create(
        session,
        email=request.email,
        first_name=request.first_name,
        last_name=request.last_name,
        password=request.password,
        provider=UserIdentityProvider.EMAIL,
        track_events=request.track_events,
        news_letter=request.news_letter,
    )
    platform = platform_service.create(session, name=f"{request.first_name}'s Platform")
    user = user_service.create(
        session,
        identity_id=identity.id,
        platform_id=platform.id,
        platform_role=PlatformRole.ADMIN,
    )
    platform_service.update(session, platform.id, owner_id=user.id)
    project_service.create(
        session,
        owner_id=user.id,
        platform_id=platform.id,
        display_name=f"{request.first_name}'s Project",
    )
    logger.info("Bootstrapped platform %s for identity %s", platform.id, identity.id)
    return authentication_utils.complete_login(session, user.id, new_user=True)


def _assert_membership_resolves_a_project(
    session: Session,
    platform_id: int,
    role: PlatformRole,
    invitations: List[UserInvitation],
) -> None:
    """Refuse a join before any row is written when the new user would see no project."""
    candidate = User(platform_id=platform_id, platform_role=role.value)
    shared = {inv.project_id for inv in invitations if inv.project_id is not None}
    if not project_service.has_visible_projects(session, candidate, shared):
        raise NoProjectFoundError()


def sign_up(session: Session, request: SignUpRequest) -> AuthenticationResponse:
    platform_id = _resolve_sign_up_platform(request)
    if platform_id is None:
        return _bootstrap_platform(session, request)

    platform_service.get_one_or_throw(session, platform_id)
    is_cloud_platform = platform_id == settings.CLOUD_PLATFORM_ID

    authentication_utils.assert_domain_is_allowed(session, request.email, platform_id)
    authentication_utils.assert_email_auth_is_enabled(session, platform_id, UserIdentityProvider.EMAIL)
    if not is_cloud_platform:
        authentication_utils.assert_user_is_invited_to_platform_or_project(session, request.email, platform_id)

    existing = user_identity_service.get_identity_by_email(session, request.email)
    if existing is not None and user_service.get_one_by_identity_and_platform(session, existing.id, platform_id):
        raise UserAlreadyExistsError(existing.email)

    invitations = invitation_service.list_accepted(session, platform_id, request.email)
    role = (
        PlatformRole.ADMIN
        if any(inv.platform_role == PlatformRole.ADMIN.value for inv in invitations)
        else PlatformRole.MEMBER
    )
    # the cloud platform gives every member a personal project below
    if not is_cloud_platform:
        _assert_membership_resolves_a_project(session, platform_id, role, invitations)

    identity = _get_or_create_identity(session, request)
    user = user_service.create(session, identity_id=identity.id, platform_id=platform_id, platform_role=role)

    for invitation in invitations:
        if invitation.project_id is None:
            continue
        project_member_service.upsert(
            session,
            project_id=invitation.project_id,
            user_id=user.id,
            platform_id=platform_id,
            role=ProjectMemberRole(invitation.project_role),
        )

    if is_cloud_platform:
        project = project_service.create(
            session,
            owner_id=user.id,
            platform_id=platform_id,
            display_name=f"{request.first_name}'s Project",
        )
        appsumo_service.apply_parked_plan(session, identity.email, project.id)

    return authentication_utils.complete_login(session, user.id, new_user=True)


def sign_in(session: Session, request: SignInRequest) -> AuthenticationResponse:
    identity = user_identity_service.get_identity_by_email(session, request.email)
    if identity is None or not verify_password(request.password, identity.password_hash):
        raise InvalidCredentialsError(request.email)

    if request.platform_id is not None:
        user = user_service.get_one_by_identity_and_platform(session, identity.id, request.platform_id)
    else:
        memberships = user_service.list_for_identity(session, identity.id)
        user = memberships[0] if memberships else None
    if user is None:
        raise AccountNotFoundError(identity.id)

    authentication_utils.assert_domain_is_allowed(session, identity.email, user.platform_id)
    authentication_utils.assert_email_auth_is_enabled(session, user.platform_id, UserIdentityProvider.EMAIL)
    return authentication_utils.complete_login(session, user.id)


def sign_out_everywhere(session: Session, identity_id: int) -> None:
    user_identity_service.increment_token_version(session, identity_id)
