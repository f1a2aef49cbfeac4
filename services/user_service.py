# services/user_service.py
import logging
from typing import List, Optional

from sqlmodel import Session, select

from core.exceptions import AccountNotFoundError
from models.models import PlatformRole, User, UserStatus, utc_now

logger = logging.getLogger(__name__)


def create(
    session: Session,
    *,
    identity_id: int,
    platform_id: int,
    platform_role: PlatformRole = PlatformRole.MEMBER,
    external_id: Optional[str] = None,
) -> User:
    user = User(
        identity_id=identity_id,
        platform_id=platform_id,
        platform_role=platform_role.value,
        status=UserStatus.ACTIVE.value,
        external_id=external_id,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    logger.info("Identity %s joined platform %s as %s", identity_id, platform_id, platform_role.value)
    return user


def get_one(session: Session, user_id: int) -> Optional[User]:
    return session.get(User, user_id)


def get_one_or_fail(session: Session, user_id: int) -> User:
    user = get_one(session, user_id)
    if user is None:
        raise AccountNotFoundError(user_id)
    return user


def get_one_by_identity_and_platform(session: Session, identity_id: int, platform_id: int) -> Optional[User]:
    return session.exec(
        select(User).where(User.identity_id == identity_id, User.platform_id == platform_id)
    ).first()


def list_for_identity(session: Session, identity_id: int) -> List[User]:
    return list(
        session.exec(
            select(User).where(User.identity_id == identity_id).order_by(User.created_at, User.id)
        ).all()
    )


def list_for_platform(session: Session, platform_id: int) -> List[User]:
    return list(
        session.exec(
            select(User).where(User.platform_id == platform_id).order_by(User.created_at, User.id)
        ).all()
    )


def update(
    session: Session,
    user_id: int,
    *,
    platform_id: int,
    status: Optional[UserStatus] = None,
    platform_role: Optional[PlatformRole] = None,
) -> User:
    """Platform admins change status or role of users in their own platform only."""
    user = get_one(session, user_id)
    if user is None or user.platform_id != platform_id:
        raise AccountNotFoundError(user_id)

    if status is not None:
        user.status = status.value
    if platform_role is not None:
        user.platform_role = platform_role.value
    user.updated_at = utc_now()

    session.add(user)
    session.commit()
    session.refresh(user)
    return user
