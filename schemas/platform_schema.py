# platform_schema.py
from pydantic import BaseModel, Field, ConfigDict
from typing import List, Optional
from datetime import datetime


class PlatformRead(BaseModel):
    id: int
    name: str
    owner_id: Optional[int] = None
    sso_enabled: bool
    enforce_allowed_auth_domains: bool
    allowed_auth_domains: List[str]
    email_auth_enabled: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PlatformUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    sso_enabled: Optional[bool] = None
    enforce_allowed_auth_domains: Optional[bool] = None
    allowed_auth_domains: Optional[List[str]] = None
    email_auth_enabled: Optional[bool] = None
    # owner cannot be changed via this endpoint
