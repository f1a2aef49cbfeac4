# ================================================================
# services/user_identity_service.py — Identity Resolver
# ================================================================
import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from core.exceptions import AccountNotFoundError, UserAlreadyExistsError
from core.security import hash_password
from models.models import UserIdentity, UserIdentityProvider, utc_now

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def get_identity_by_email(session: Session, email: str) -> Optional[UserIdentity]:
    """
    Resolve the canonical identity for an email address.

    Authentication and plan reconciliation both resolve people through this
    function so they always agree on who "the same person" is.
    """
    return session.exec(
        select(UserIdentity).where(UserIdentity.email == normalize_email(email))
    ).first()


def get_one(session: Session, identity_id: int) -> Optional[UserIdentity]:
    return session.get(UserIdentity, identity_id)


def get_one_or_fail(session: Session, identity_id: int) -> UserIdentity:
    identity = get_one(session, identity_id)
    if identity is None:
        raise AccountNotFoundError(identity_id)
    return identity


def create(
    session: Session,
    *,
    email: str,
    first_name: str,
    last_name: str = "",
    password: Optional[str] = None,
    provider: UserIdentityProvider = UserIdentityProvider.EMAIL,
    verified: bool = False,
    track_events: bool = True,
    news_letter: bool = False,
) -> UserIdentity:
    normalized = normalize_email(email)
    if get_identity_by_email(session, normalized) is not None:
        raise UserAlreadyExistsError(normalized)

    identity = UserIdentity(
        email=normalized,
        first_name=first_name,
        last_name=last_name,
        password_hash=hash_password(password) if password else None,
        provider=provider.value,
        verified=verified,
        track_events=track_events,
        news_letter=news_letter,
    )
    session.add(identity)
    try:
        session.commit()
    except IntegrityError:
        # concurrent sign-up with the same email
        session.rollback()
        raise UserAlreadyExistsError(normalized)
    session.refresh(identity)
    logger.info("Created identity %s", identity.id)
    return identity


def verify(session: Session, identity_id: int) -> UserIdentity:
    identity = get_one_or_fail(session, identity_id)
    identity.verified = True
    identity.updated_at = utc_now()
    session.add(identity)
    session.commit()
    session.refresh(identity)
    return identity


def increment_token_version(session: Session, identity_id: int) -> UserIdentity:
    """Invalidate every credential issued to this identity so far."""
    identity = get_one_or_fail(session, identity_id)
    identity.token_version += 1
    identity.updated_at = utc_now()
    session.add(identity)
    session.commit()
    session.refresh(identity)
    logger.info("Token version of identity %s bumped to %s", identity.id, identity.token_version)
    return identity
