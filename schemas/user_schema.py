# user_schema.py
from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime

from models.models import PlatformRole, UserStatus


# ---------------------------
# Read / Update
# ---------------------------
class UserRead(BaseModel):
    id: int
    platform_id: int
    platform_role: str
    status: str
    identity_id: int
    email: str
    first_name: str
    last_name: str
    verified: bool
    created_at: datetime
    project_id: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_models(cls, user, identity, project_id: Optional[int] = None) -> "UserRead":
        return cls(
            id=user.id,
            platform_id=user.platform_id,
            platform_role=user.platform_role,
            status=user.status,
            identity_id=identity.id,
            email=identity.email,
            first_name=identity.first_name,
            last_name=identity.last_name,
            verified=identity.verified,
            created_at=user.created_at,
            project_id=project_id,
        )


class UserUpdate(BaseModel):
    status: Optional[UserStatus] = None
    platform_role: Optional[PlatformRole] = None
