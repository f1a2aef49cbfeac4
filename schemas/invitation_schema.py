# invitation_schema.py
from pydantic import BaseModel, EmailStr, ConfigDict
from typing import Optional
from datetime import datetime

from models.models import PlatformRole, ProjectMemberRole


class InvitationCreate(BaseModel):
    email: EmailStr
    platform_role: PlatformRole = PlatformRole.MEMBER
    project_id: Optional[int] = None
    project_role: ProjectMemberRole = ProjectMemberRole.EDITOR


class InvitationAccept(BaseModel):
    token: str


class InvitationRead(BaseModel):
    id: int
    email: str
    platform_id: int
    project_id: Optional[int] = None
    platform_role: str
    project_role: str
    status: str
    expires_at: datetime
    created_at: datetime
    accepted_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
