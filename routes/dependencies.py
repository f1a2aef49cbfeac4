# routes/dependencies.py
from fastapi import Depends
from sqlmodel import Session

from core.database import get_session
from core.exceptions import PermissionDeniedError
from core.security import oauth2_scheme
from models.models import User
from services.access_token_manager import Principal, decode_token, verify_principal


class CurrentUser:
    """The authenticated membership together with the scope it was issued for."""

    def __init__(self, user: User, principal: Principal):
        self.user = user
        self.principal = principal

    @property
    def project_id(self) -> int:
        return self.principal.project_id

    @property
    def platform_id(self) -> int:
        return self.principal.platform_id


def get_current_user(
    token: str = Depends(oauth2_scheme),
    session: Session = Depends(get_session),
) -> CurrentUser:
    """Decode the bearer token and re-check it against the current records."""
    principal = decode_token(token)
    user = verify_principal(session, principal)
    return CurrentUser(user=user, principal=principal)


def get_current_platform_admin(current: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    """Only platform admins."""
    if not current.user.is_platform_admin():
        raise PermissionDeniedError("Platform admin privileges required")
    return current
