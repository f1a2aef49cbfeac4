# tenantflow_backend/models.py
from typing import Optional, List
from datetime import datetime, timedelta, timezone
from enum import Enum
from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import UniqueConstraint, Index, Column, JSON, text


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================
# ENUMS
# ============================================================
class PlatformRole(str, Enum):
    ADMIN = "admin"
    MEMBER = "member"


class UserStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class UserIdentityProvider(str, Enum):
    EMAIL = "email"
    GOOGLE = "google"
    SAML = "saml"
    JWT = "jwt"


class InvitationStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"


class ProjectMemberRole(str, Enum):
    ADMIN = "admin"
    EDITOR = "editor"
    VIEWER = "viewer"


# ============================================================
# USER IDENTITY (the canonical account, platform independent)
# ============================================================
class UserIdentity(SQLModel, table=True):
    __tablename__ = "user_identity"

    id: Optional[int] = Field(default=None, primary_key=True)
    # always stored lower-cased, see services.user_identity_service.normalize_email
    email: str = Field(max_length=255, unique=True, index=True, nullable=False)
    first_name: str = Field(max_length=100)
    last_name: str = Field(default="", max_length=100)
    password_hash: Optional[str] = Field(default=None)
    provider: str = Field(default=UserIdentityProvider.EMAIL.value, max_length=20)

    verified: bool = Field(default=False)
    track_events: bool = Field(default=True)
    news_letter: bool = Field(default=False)

    # Incrementing invalidates every credential issued before
    token_version: int = Field(default=0, nullable=False)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    users: List["User"] = Relationship(back_populates="identity")


# ============================================================
# PLATFORM (tenant)
# ============================================================
class Platform(SQLModel, table=True):
    __tablename__ = "platform"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=100)
    owner_id: Optional[int] = Field(default=None, nullable=True, index=True)

    # SSO / domain policy
    sso_enabled: bool = Field(default=False)
    enforce_allowed_auth_domains: bool = Field(default=False)
    allowed_auth_domains: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    email_auth_enabled: bool = Field(default=True)

    created_at: datetime = Field(default_factory=utc_now)

    users: List["User"] = Relationship(back_populates="platform")
    projects: List["Project"] = Relationship(back_populates="platform")


# ============================================================
# USER (membership of one identity in one platform)
# ============================================================
class User(SQLModel, table=True):
    __tablename__ = "user"
    __table_args__ = (UniqueConstraint("identity_id", "platform_id", name="uq_identity_platform"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    identity_id: int = Field(foreign_key="user_identity.id", nullable=False, index=True)
    platform_id: int = Field(foreign_key="platform.id", nullable=False, index=True)

    platform_role: str = Field(default=PlatformRole.MEMBER.value, max_length=20, index=True)
    status: str = Field(default=UserStatus.ACTIVE.value, max_length=20)
    external_id: Optional[str] = Field(default=None, max_length=255)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    identity: Optional["UserIdentity"] = Relationship(back_populates="users")
    platform: Optional["Platform"] = Relationship(back_populates="users")
    projects: List["Project"] = Relationship(back_populates="owner")

    def is_platform_admin(self) -> bool:
        return self.platform_role == PlatformRole.ADMIN.value


# ============================================================
# PROJECT (workspace, soft-deleted)
# ============================================================
class Project(SQLModel, table=True):
    __tablename__ = "project"
    __table_args__ = (
        Index(
            "idx_project_platform_id_external_id",
            "platform_id",
            "external_id",
            unique=True,
            postgresql_where=text("deleted IS NULL"),
            sqlite_where=text("deleted IS NULL"),
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    display_name: str = Field(max_length=100)
    owner_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    platform_id: int = Field(foreign_key="platform.id", nullable=False, index=True)
    external_id: Optional[str] = Field(default=None, max_length=255)

    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now)
    deleted: Optional[datetime] = Field(default=None)

    platform: Optional["Platform"] = Relationship(back_populates="projects")
    owner: Optional["User"] = Relationship(back_populates="projects")


# ============================================================
# PROJECT MEMBER (explicit sharing)
# ============================================================
class ProjectMember(SQLModel, table=True):
    __tablename__ = "project_member"
    __table_args__ = (UniqueConstraint("project_id", "user_id", name="uq_project_member"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    project_id: int = Field(foreign_key="project.id", nullable=False, index=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    platform_id: int = Field(foreign_key="platform.id", nullable=False, index=True)
    role: str = Field(default=ProjectMemberRole.EDITOR.value, max_length=20)
    created_at: datetime = Field(default_factory=utc_now)


# ============================================================
# USER INVITATION
# ============================================================
class UserInvitation(SQLModel, table=True):
    __tablename__ = "user_invitation"

    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(max_length=255, nullable=False, index=True)
    platform_id: int = Field(foreign_key="platform.id", nullable=False, index=True)
    project_id: Optional[int] = Field(default=None, foreign_key="project.id", index=True)
    platform_role: str = Field(default=PlatformRole.MEMBER.value, max_length=20)
    project_role: str = Field(default=ProjectMemberRole.EDITOR.value, max_length=20)
    token: str = Field(max_length=255, unique=True, nullable=False, index=True)
    status: str = Field(default=InvitationStatus.PENDING.value, max_length=20)
    expires_at: datetime = Field(default_factory=lambda: utc_now() + timedelta(days=7))
    created_at: datetime = Field(default_factory=utc_now)
    accepted_at: Optional[datetime] = None

    def is_expired(self) -> bool:
        expires_at = self.expires_at
        # SQLite hands back naive datetimes
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return utc_now() > expires_at


# ============================================================
# PROJECT PLAN (limits currently applied to a project)
# ============================================================
class ProjectPlan(SQLModel, table=True):
    __tablename__ = "project_plan"

    id: Optional[int] = Field(default=None, primary_key=True)
    project_id: int = Field(foreign_key="project.id", unique=True, nullable=False, index=True)
    name: str = Field(max_length=100)
    tasks: int = Field(nullable=False)
    minimum_polling_interval: int = Field(nullable=False)
    connections: int = Field(nullable=False)
    team_members: int = Field(nullable=False)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


# ============================================================
# PROJECT BILLING
# ============================================================
class ProjectBilling(SQLModel, table=True):
    __tablename__ = "project_billing"

    id: Optional[int] = Field(default=None, primary_key=True)
    project_id: int = Field(foreign_key="project.id", unique=True, nullable=False, index=True)
    included_tasks: int = Field(nullable=False)
    included_users: int = Field(nullable=False)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


# ============================================================
# APPSUMO (last known state of an external subscription)
# ============================================================
class AppSumoPlan(SQLModel, table=True):
    __tablename__ = "appsumo"

    uuid: str = Field(primary_key=True, max_length=255)
    plan_id: str = Field(max_length=100, nullable=False)
    activation_email: str = Field(max_length=255, nullable=False, index=True)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


# ============================================================
# EXPORTS
# ============================================================
__all__ = [
    "UserIdentity",
    "Platform",
    "User",
    "Project",
    "ProjectMember",
    "UserInvitation",
    "ProjectPlan",
    "ProjectBilling",
    "AppSumoPlan",
    "PlatformRole",
    "UserStatus",
    "UserIdentityProvider",
    "InvitationStatus",
    "ProjectMemberRole",
    "utc_now",
]
