# services/platform_service.py
from typing import List, Optional

from sqlmodel import Session

from core.exceptions import EntityNotFoundError
from models.models import Platform


def create(
    session: Session,
    *,
    name: str,
    owner_id: Optional[int] = None,
    sso_enabled: bool = False,
    enforce_allowed_auth_domains: bool = False,
    allowed_auth_domains: Optional[List[str]] = None,
    email_auth_enabled: bool = True,
) -> Platform:
    platform = Platform(
        name=name,
        owner_id=owner_id,
        sso_enabled=sso_enabled,
        enforce_allowed_auth_domains=enforce_allowed_auth_domains,
        allowed_auth_domains=[d.lower() for d in (allowed_auth_domains or [])],
        email_auth_enabled=email_auth_enabled,
    )
    session.add(platform)
    session.commit()
    session.refresh(platform)
    return platform


def get_one(session: Session, platform_id: Optional[int]) -> Optional[Platform]:
    if platform_id is None:
        return None
    return session.get(Platform, platform_id)


def get_one_or_throw(session: Session, platform_id: Optional[int]) -> Platform:
    platform = get_one(session, platform_id)
    if platform is None:
        raise EntityNotFoundError("platform", platform_id)
    return platform


def update(session: Session, platform_id: int, **changes) -> Platform:
    """Apply non-None policy changes to a platform."""
    platform = get_one_or_throw(session, platform_id)
    for field, value in changes.items():
        if value is None:
            continue
        if field == "allowed_auth_domains":
            value = [d.lower() for d in value]
        setattr(platform, field, value)
    session.add(platform)
    session.commit()
    session.refresh(platform)
    return platform
