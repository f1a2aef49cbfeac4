# services/invitation_service.py
import logging
from datetime import timedelta
from typing import List, Optional

from sqlmodel import Session, select

from core.config import settings
from core.exceptions import EntityNotFoundError
from core.security import generate_invitation_token
from models.models import (
    InvitationStatus,
    PlatformRole,
    ProjectMemberRole,
    UserInvitation,
    utc_now,
)
from services.user_identity_service import normalize_email

logger = logging.getLogger(__name__)


def build_invitation_link(token: str) -> str:
    return f"{settings.FRONTEND_URL.rstrip('/')}/accept-invitation?token={token}"


def create(
    session: Session,
    *,
    platform_id: int,
    email: str,
    platform_role: PlatformRole = PlatformRole.MEMBER,
    project_id: Optional[int] = None,
    project_role: ProjectMemberRole = ProjectMemberRole.EDITOR,
) -> UserInvitation:
    invitation = UserInvitation(
        email=normalize_email(email),
        platform_id=platform_id,
        project_id=project_id,
        platform_role=platform_role.value,
        project_role=project_role.value,
        token=generate_invitation_token(),
        status=InvitationStatus.PENDING.value,
        expires_at=utc_now() + timedelta(days=settings.INVITATION_VALID_DAYS),
    )
    session.add(invitation)
    session.commit()
    session.refresh(invitation)
    logger.info("Invitation %s created on platform %s", invitation.id, platform_id)
    return invitation


def accept(session: Session, token: str) -> UserInvitation:
    invitation = session.exec(select(UserInvitation).where(UserInvitation.token == token)).first()
    if invitation is None or invitation.is_expired():
        raise EntityNotFoundError("invitation", token)

    if invitation.status != InvitationStatus.ACCEPTED.value:
        invitation.status = InvitationStatus.ACCEPTED.value
        invitation.accepted_at = utc_now()
        session.add(invitation)
        session.commit()
        session.refresh(invitation)
    return invitation


def list_accepted(session: Session, platform_id: int, email: str) -> List[UserInvitation]:
    return list(
        session.exec(
            select(UserInvitation).where(
                UserInvitation.platform_id == platform_id,
                UserInvitation.email == normalize_email(email),
                UserInvitation.status == InvitationStatus.ACCEPTED.value,
            ).order_by(UserInvitation.created_at, UserInvitation.id)
        ).all()
    )


def has_any_accepted_invitations(session: Session, platform_id: int, email: str) -> bool:
    return len(list_accepted(session, platform_id, email)) > 0
