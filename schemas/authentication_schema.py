# authentication_schema.py
from pydantic import BaseModel, EmailStr, Field, ConfigDict
from typing import Optional
from datetime import datetime


# ---------------------------
# Sign up / Sign in
# ---------------------------
class SignUpRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(default="", max_length=100)
    track_events: bool = True
    news_letter: bool = False
    # omitted: the sign-up bootstraps a new platform owned by the new user
    platform_id: Optional[int] = None


class SignInRequest(BaseModel):
    email: EmailStr
    password: str
    platform_id: Optional[int] = None


# ---------------------------
# Session response
# ---------------------------
class AuthenticationResponse(BaseModel):
    # platform membership
    id: int
    platform_id: int
    platform_role: str
    status: str
    identity_id: int
    external_id: Optional[str] = None
    created_at: datetime

    # canonical identity
    first_name: str
    last_name: str
    email: str
    verified: bool
    track_events: bool
    news_letter: bool

    token: str
    project_id: int

    model_config = ConfigDict(from_attributes=True)
