# routes/platforms.py
from fastapi import APIRouter, Depends
from sqlmodel import Session

from core.database import get_session
from routes.dependencies import CurrentUser, get_current_platform_admin, get_current_user
from schemas.platform_schema import PlatformRead, PlatformUpdate
from services import platform_service

router = APIRouter(tags=["Platforms"])


# ==================================================================
#  ✅ GET MY PLATFORM
# ==================================================================
@router.get("/current", response_model=PlatformRead)
def get_current_platform(
    current: CurrentUser = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return platform_service.get_one_or_throw(session, current.platform_id)


# ==================================================================
#  ✅ UPDATE MY PLATFORM (SSO / domain policy)
# ==================================================================
@router.patch("/current", response_model=PlatformRead)
def update_current_platform(
    platform_update: PlatformUpdate,
    current: CurrentUser = Depends(get_current_platform_admin),  # Only admins can update the platform
    session: Session = Depends(get_session),
):
    return platform_service.update(session, current.platform_id, **platform_update.model_dump())
