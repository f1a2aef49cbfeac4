"""
Shared pytest fixtures and path setup for the test suite.
"""

import os
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

# Required settings must exist BEFORE any application import, otherwise
# core.config aborts while loading Settings.
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-unit-tests")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("EDITION", "community")

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from core.config import Edition, settings
from core.database import get_session
from models.models import (
    Platform,
    PlatformRole,
    Project,
    User,
    UserIdentity,
    UserStatus,
)
from services import (
    platform_service,
    project_service,
    user_identity_service,
    user_service,
)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(session):
    from main import app

    app.dependency_overrides[get_session] = lambda: session
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def edition(monkeypatch):
    """Switch the deployment edition for one test: ``edition(Edition.ENTERPRISE)``."""

    def _set(value: Edition, cloud_platform_id: Optional[int] = None) -> None:
        monkeypatch.setattr(settings, "EDITION", value)
        monkeypatch.setattr(settings, "CLOUD_PLATFORM_ID", cloud_platform_id)

    return _set


class Factory:
    """Creates persisted platforms, identities, memberships and projects."""

    def __init__(self, session: Session):
        self.session = session
        self._seq = 0

    def _next(self) -> int:
        self._seq += 1
        return self._seq

    def platform(self, name: Optional[str] = None, **policy) -> Platform:
        return platform_service.create(self.session, name=name or f"Platform {self._next()}", **policy)

    def identity(self, email: Optional[str] = None, password: str = "s3cret-password", **kwargs) -> UserIdentity:
        kwargs.setdefault("first_name", "Ada")
        return user_identity_service.create(
            self.session,
            email=email or f"user{self._next()}@example.com",
            password=password,
            **kwargs,
        )

    def user(
        self,
        platform: Platform,
        identity: Optional[UserIdentity] = None,
        role: PlatformRole = PlatformRole.MEMBER,
        status: UserStatus = UserStatus.ACTIVE,
    ) -> User:
        identity = identity or self.identity()
        user = user_service.create(
            self.session,
            identity_id=identity.id,
            platform_id=platform.id,
            platform_role=role,
        )
        if status != UserStatus.ACTIVE:
            user = user_service.update(self.session, user.id, platform_id=platform.id, status=status)
        return user

    def project(
        self,
        owner: User,
        display_name: Optional[str] = None,
        external_id: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> Project:
        project = project_service.create(
            self.session,
            owner_id=owner.id,
            platform_id=owner.platform_id,
            display_name=display_name or f"Project {self._next()}",
            external_id=external_id,
        )
        if created_at is not None:
            project.created_at = created_at
            self.session.add(project)
            self.session.commit()
            self.session.refresh(project)
        return project

    def ids(self, projects: List[Project]) -> List[int]:
        return [p.id for p in projects]


@pytest.fixture
def factory(session) -> Factory:
    return Factory(session)
