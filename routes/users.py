# routes/users.py
from fastapi import APIRouter, Depends
from sqlmodel import Session
from typing import List

from core.database import get_session
from routes.dependencies import CurrentUser, get_current_platform_admin
from schemas.user_schema import UserRead, UserUpdate
from services import user_identity_service, user_service

import logging
logger = logging.getLogger(__name__)


router = APIRouter(tags=["Users"])


# ----------------------------------------------------------------------
# ✅ Get All Users (Platform-Scoped, Admin only)
# ----------------------------------------------------------------------
@router.get("/", response_model=List[UserRead])
def get_all_users(
    current: CurrentUser = Depends(get_current_platform_admin),
    session: Session = Depends(get_session),
):
    """Admins: list all users in your platform."""
    return [
        UserRead.from_models(user, user_identity_service.get_one_or_fail(session, user.identity_id))
        for user in user_service.list_for_platform(session, current.platform_id)
    ]


# ----------------------------------------------------------------------
# ✅ Update status / role of a platform user (Admin only)
# ----------------------------------------------------------------------
@router.patch("/{user_id}", response_model=UserRead)
def update_user(
    user_id: int,
    user_update: UserUpdate,
    current: CurrentUser = Depends(get_current_platform_admin),
    session: Session = Depends(get_session),
):
    user = user_service.update(
        session,
        user_id,
        platform_id=current.platform_id,
        status=user_update.status,
        platform_role=user_update.platform_role,
    )
    logger.info("User %s updated by %s", user.id, current.user.id)
    return UserRead.from_models(user, user_identity_service.get_one_or_fail(session, user.identity_id))
