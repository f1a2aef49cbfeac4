# ================================================================
# services/authentication_utils.py — Login orchestration and policy gates
# ================================================================
import logging

import httpx
from sqlmodel import Session

from core.config import settings
from core.exceptions import (
    DomainNotAllowedError,
    EmailAuthDisabledError,
    InvitationOnlySignUpError,
    NoProjectFoundError,
    UserInactiveError,
)
from models.models import User, UserIdentity, UserIdentityProvider, UserStatus
from schemas.authentication_schema import AuthenticationResponse
from services import (
    access_token_manager,
    invitation_service,
    platform_service,
    project_service,
    user_identity_service,
    user_service,
)
from services.telemetry import TelemetryEventName, get_telemetry

logger = logging.getLogger(__name__)


# ==========================================================
# Policy gates (callers run these before completing a login)
# ==========================================================
def assert_user_is_invited_to_platform_or_project(session: Session, email: str, platform_id: int) -> None:
    if settings.IS_COMMUNITY:
        return
    if not invitation_service.has_any_accepted_invitations(session, platform_id, email):
        raise InvitationOnlySignUpError("User is not invited to the platform")


def assert_domain_is_allowed(session: Session, email: str, platform_id: int) -> None:
    if settings.IS_COMMUNITY:
        return
    platform = platform_service.get_one_or_throw(session, platform_id)
    if not platform.sso_enabled:
        return

    email_domain = user_identity_service.normalize_email(email).split("@")[-1]
    allowed = (
        not platform.enforce_allowed_auth_domains
        or email_domain in [d.lower() for d in platform.allowed_auth_domains]
    )
    if not allowed:
        raise DomainNotAllowedError(email_domain)


def assert_email_auth_is_enabled(session: Session, platform_id: int, provider: UserIdentityProvider) -> None:
    if settings.IS_COMMUNITY:
        return
    platform = platform_service.get_one_or_throw(session, platform_id)
    if not platform.sso_enabled:
        return
    if provider != UserIdentityProvider.EMAIL:
        return
    if not platform.email_auth_enabled:
        raise EmailAuthDisabledError()


# ==========================================================
# Session issuance
# ==========================================================
def get_project_and_token(session: Session, user_id: int) -> AuthenticationResponse:
    """
    Resolve the default project of a user and mint a token scoped to it.

    The default project is the first visible project in creation order.
    """
    user = user_service.get_one_or_fail(session, user_id)
    projects = project_service.get_all_for_user(session, user)
    if not projects:
        raise NoProjectFoundError()
    default_project = projects[0]

    platform = platform_service.get_one_or_throw(session, default_project.platform_id)
    identity = user_identity_service.get_one_or_fail(session, user.identity_id)
    if user.status == UserStatus.INACTIVE.value:
        raise UserInactiveError(identity.email)

    token = access_token_manager.generate_token(
        user_id=user.id,
        project_id=default_project.id,
        platform_id=platform.id,
        token_version=identity.token_version,
    )
    return AuthenticationResponse(
        id=user.id,
        platform_id=user.platform_id,
        platform_role=user.platform_role,
        status=user.status,
        identity_id=identity.id,
        external_id=user.external_id,
        created_at=user.created_at,
        first_name=identity.first_name,
        last_name=identity.last_name,
        email=identity.email,
        verified=identity.verified,
        track_events=identity.track_events,
        news_letter=identity.news_letter,
        token=token,
        project_id=default_project.id,
    )


# ==========================================================
# Best-effort side channels
# ==========================================================
def send_telemetry(user: User, identity: UserIdentity, project_id: int, new_user: bool = False) -> None:
    try:
        telemetry = get_telemetry()
        telemetry.identify(user, identity, project_id)
        if new_user:
            telemetry.track_project(
                project_id,
                TelemetryEventName.SIGNED_UP,
                {
                    "userId": identity.id,
                    "email": identity.email,
                    "firstName": identity.first_name,
                    "lastName": identity.last_name,
                    "projectId": project_id,
                },
            )
    except Exception as e:
        logger.warning("AuthenticationService#sendTelemetry failed: %s", e)


def save_newsletter_subscriber(user: User, identity: UserIdentity) -> None:
    is_platform_user = settings.CLOUD_PLATFORM_ID is None or user.platform_id != settings.CLOUD_PLATFORM_ID
    if is_platform_user or not identity.news_letter:
        return
    if not settings.IS_PRODUCTION or not settings.NEWSLETTER_URL:
        return

    try:
        response = httpx.post(
            settings.NEWSLETTER_URL,
            json={"email": identity.email},
            timeout=settings.OUTBOUND_TIMEOUT_SECONDS,
        )
        response.raise_for_status()
    except Exception as e:
        logger.warning("Failed to save newsletter subscriber %s: %s", identity.email, e)


# ==========================================================
# Complete login
# ==========================================================
def complete_login(session: Session, user_id: int, new_user: bool = False) -> AuthenticationResponse:
    response = get_project_and_token(session, user_id)

    user = user_service.get_one_or_fail(session, user_id)
    identity = user_identity_service.get_one_or_fail(session, user.identity_id)
    send_telemetry(user, identity, response.project_id, new_user=new_user)
    if new_user:
        save_newsletter_subscriber(user, identity)
    return response
