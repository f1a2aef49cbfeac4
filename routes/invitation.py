# routes/invitation.py
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session

from core.database import get_session
from routes.dependencies import CurrentUser, get_current_platform_admin
from schemas.invitation_schema import InvitationAccept, InvitationCreate, InvitationRead
from services import invitation_service, project_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Invitations"])


# ==================================================================
# Create Invitation (platform admin)
# ==================================================================
@router.post("/", response_model=dict, status_code=status.HTTP_201_CREATED)
def invite(
    invite: InvitationCreate,
    current: CurrentUser = Depends(get_current_platform_admin),
    session: Session = Depends(get_session),
):
    if invite.project_id is not None:
        project = project_service.get_one_or_throw(session, invite.project_id)
        if project.platform_id != current.platform_id:
            raise HTTPException(status_code=400, detail="Project does not belong to your platform.")

    invitation = invitation_service.create(
        session,
        platform_id=current.platform_id,
        email=invite.email,
        platform_role=invite.platform_role,
        project_id=invite.project_id,
        project_role=invite.project_role,
    )
    return {
        "message": "Invitation created.",
        "invitation": InvitationRead.model_validate(invitation).model_dump(mode="json"),
        "invitation_link": invitation_service.build_invitation_link(invitation.token),
    }


# ==================================================================
# Accept Invitation (public, token based)
# ==================================================================
@router.post("/accept", response_model=InvitationRead)
def accept_invitation(data: InvitationAccept, session: Session = Depends(get_session)):
    invitation = invitation_service.accept(session, data.token)
    logger.info("Invitation %s accepted", invitation.id)
    return invitation
