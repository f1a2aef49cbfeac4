# ================================================================
# services/access_token_manager.py — Credential Issuer
# ================================================================
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ValidationError
from sqlmodel import Session

from core.exceptions import InvalidBearerTokenError, UserInactiveError
from core.security import sign, verify_signature
from models.models import User, UserIdentity, UserStatus
from services import project_service, user_identity_service, user_service


class PrincipalType(str, Enum):
    USER = "user"


class Principal(BaseModel):
    """Scope carried by an access token: one user, one project, one platform."""

    id: int
    type: PrincipalType = PrincipalType.USER
    project_id: int
    platform_id: int
    token_version: int


def generate_token(
    *,
    user_id: int,
    project_id: int,
    platform_id: int,
    token_version: int,
) -> str:
    principal = Principal(
        id=user_id,
        project_id=project_id,
        platform_id=platform_id,
        token_version=token_version,
    )
    return sign(principal.model_dump(mode="json"))


def decode_token(token: str) -> Principal:
    claims = verify_signature(token)
    if claims is None:
        raise InvalidBearerTokenError()
    claims.pop("exp", None)
    try:
        return Principal.model_validate(claims)
    except ValidationError:
        raise InvalidBearerTokenError("Invalid token payload")


def verify_principal(
    session: Session,
    principal: Principal,
    identity: Optional[UserIdentity] = None,
) -> User:
    """
    Check a decoded principal against the current records.

    The token version is compared with the identity on every use, so bumping
    it revokes all outstanding tokens immediately. A token whose project was
    soft-deleted stops working as well.
    """
    user = user_service.get_one(session, principal.id)
    if user is None or user.platform_id != principal.platform_id:
        raise InvalidBearerTokenError("User not found")

    identity = identity or user_identity_service.get_one(session, user.identity_id)
    if identity is None or identity.token_version != principal.token_version:
        raise InvalidBearerTokenError("Session expired, please sign in again")

    project = project_service.get_one(session, principal.project_id)
    if project is None or project.platform_id != principal.platform_id:
        raise InvalidBearerTokenError("Project not found, please sign in again")

    if user.status == UserStatus.INACTIVE.value:
        raise UserInactiveError(identity.email)
    return user
