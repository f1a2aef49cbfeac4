from fastapi import APIRouter, HTTPException, Depends, status
from sqlmodel import Session
from sqlalchemy.exc import SQLAlchemyError
import logging

from core.database import get_session
from routes.dependencies import CurrentUser, get_current_user
from schemas.authentication_schema import AuthenticationResponse, SignInRequest, SignUpRequest
from schemas.user_schema import UserRead
from services import authentication_service, user_identity_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Authentication"])


# ==========================================================
# ✅ Sign up — bootstraps a platform or joins an existing one
# ==========================================================
@router.post("/sign-up", response_model=AuthenticationResponse)
def sign_up(request: SignUpRequest, session: Session = Depends(get_session)):
    try:
        return authentication_service.sign_up(session, request)
    except SQLAlchemyError as e:
        session.rollback()
        logger.exception("Database error during sign-up: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Something went wrong while creating your account. Please try again later.",
        )


# ==========================================================
# ✅ Sign in — platform optional, defaults to earliest membership
# ==========================================================
@router.post("/sign-in", response_model=AuthenticationResponse)
def sign_in(request: SignInRequest, session: Session = Depends(get_session)):
    try:
        return authentication_service.sign_in(session, request)
    except SQLAlchemyError as e:
        session.rollback()
        logger.exception("Database error during sign-in: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="We're having trouble signing you in. Please try again later.",
        )


# ==========================================================
# ✅ Revoke every token issued to the current identity
# ==========================================================
@router.post("/sign-out-everywhere", status_code=status.HTTP_204_NO_CONTENT)
def sign_out_everywhere(
    current: CurrentUser = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    authentication_service.sign_out_everywhere(session, current.user.identity_id)


# ==========================================================
# ✅ Get Current Authenticated User
# ==========================================================
@router.get("/me", response_model=UserRead)
def get_current_user_info(
    current: CurrentUser = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Return the authenticated membership merged with its identity."""
    identity = user_identity_service.get_one_or_fail(session, current.user.identity_id)
    return UserRead.from_models(current.user, identity, project_id=current.project_id)
