# project_schema.py
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from datetime import datetime

from models.models import ProjectMemberRole


class ProjectCreate(BaseModel):
    display_name: str = Field(..., min_length=1, max_length=100)
    external_id: Optional[str] = Field(default=None, min_length=1, max_length=255)
    # owner defaults to the caller; platform is always the caller's platform
    owner_id: Optional[int] = None


class ProjectRead(BaseModel):
    id: int
    display_name: str
    owner_id: int
    platform_id: int
    external_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProjectUpdate(BaseModel):
    display_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    external_id: Optional[str] = Field(default=None, min_length=1, max_length=255)


class ProjectMemberCreate(BaseModel):
    user_id: int
    role: ProjectMemberRole = ProjectMemberRole.EDITOR
