# routes/appsumo.py
import logging
import secrets
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, status
from sqlmodel import Session

from core.config import Edition, settings
from core.database import get_session
from schemas.appsumo_schema import AppSumoActionRequest
from services.appsumo_service import appsumo_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/appsumo", tags=["AppSumo"])


def verify_appsumo_token(authorization: Optional[str] = Header(default=None)) -> None:
    """
    The webhook must present APPSUMO_TOKEN as a bearer token.

    Cloud and production deployments without a configured token reject every
    call; other deployments may leave it unset for local development.
    """
    expected = settings.APPSUMO_TOKEN
    if not expected:
        if settings.EDITION == Edition.CLOUD or settings.IS_PRODUCTION:
            logger.error("APPSUMO_TOKEN is not configured, rejecting AppSumo webhook")
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid AppSumo token")
        return
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not secrets.compare_digest(token, expected):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid AppSumo token")


@router.post("/action")
def appsumo_action(
    request: AppSumoActionRequest,
    _: None = Depends(verify_appsumo_token),
    session: Session = Depends(get_session),
):
    """Handle AppSumo license events (activate / upgrade / refund)."""
    logger.info("AppSumo %s for license %s (plan %s)", request.action, request.uuid, request.plan_id)
    appsumo_service.handle_request(session, request)
    return {"message": "success"}
