# ================================================================
# services/project_service.py — Tenant graph: projects visible to a user
# ================================================================
import logging
from typing import Iterable, List, Optional

from sqlalchemy import and_, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.sql.elements import ColumnElement
from sqlmodel import Session, select

from core.exceptions import EntityNotFoundError, ExternalIdAlreadyExistsError, NoProjectFoundError
from models.models import PlatformRole, Project, User, utc_now
from services import project_member_service, user_service

logger = logging.getLogger(__name__)


# ============================================================
# Scoped queries
# ============================================================
def select_active_projects(*criteria):
    """Every project read goes through here so soft-deleted rows never leak."""
    return select(Project).where(Project.deleted.is_(None), *criteria)


def visibility_filter(user: User, shared_project_ids: Iterable[int] = ()) -> ColumnElement:
    """
    Build the visibility predicate for a user.

    Admins see every project of their platform; members see the projects they
    own. Projects shared through a project membership are added for both.
    """
    role = PlatformRole(user.platform_role)
    if role == PlatformRole.ADMIN:
        scope = Project.platform_id == user.platform_id
    elif role == PlatformRole.MEMBER:
        scope = and_(Project.owner_id == user.id, Project.platform_id == user.platform_id)
    else:
        raise ValueError(f"Unsupported platform role: {role}")

    shared = sorted(set(shared_project_ids))
    if shared:
        scope = or_(scope, Project.id.in_(shared))
    return scope


# ============================================================
# Reads
# ============================================================
def get_all_for_user(session: Session, user: User) -> List[Project]:
    """Visible projects in creation order; index 0 is the user's default project."""
    shared = project_member_service.get_ids_of_projects(session, user.platform_id, user.id)
    statement = select_active_projects(visibility_filter(user, shared)).order_by(
        Project.created_at, Project.id
    )
    return list(session.exec(statement).all())


def has_visible_projects(session: Session, user: User, shared_project_ids: Iterable[int] = ()) -> bool:
    """Whether ``user`` (persisted or not yet) would resolve a default project."""
    statement = select_active_projects(visibility_filter(user, shared_project_ids)).limit(1)
    return session.exec(statement).first() is not None


def get_user_project_or_throw(session: Session, user_id: int) -> Project:
    user = user_service.get_one_or_fail(session, user_id)
    projects = get_all_for_user(session, user)
    if not projects:
        raise NoProjectFoundError()
    return projects[0]


def get_one(session: Session, project_id: Optional[int]) -> Optional[Project]:
    if project_id is None:
        return None
    return session.exec(select_active_projects(Project.id == project_id)).first()


def get_one_or_throw(session: Session, project_id: int) -> Project:
    project = get_one(session, project_id)
    if project is None:
        raise EntityNotFoundError("project", project_id)
    return project


def get_platform_id(session: Session, project_id: int) -> int:
    return get_one_or_throw(session, project_id).platform_id


def get_by_platform_id_and_external_id(session: Session, platform_id: int, external_id: str) -> Optional[Project]:
    return session.exec(
        select_active_projects(Project.platform_id == platform_id, Project.external_id == external_id)
    ).first()


# ============================================================
# Writes
# ============================================================
def _assert_external_id_is_unique(
    session: Session,
    platform_id: int,
    external_id: Optional[str],
    project_id: Optional[int] = None,
) -> None:
    if external_id is None:
        return
    existing = get_by_platform_id_and_external_id(session, platform_id, external_id)
    if existing is not None and existing.id != project_id:
        raise ExternalIdAlreadyExistsError(external_id)


def _commit(session: Session, project: Project) -> Project:
    session.add(project)
    try:
        session.commit()
    except IntegrityError:
        # the partial unique index caught a concurrent writer
        session.rollback()
        raise ExternalIdAlreadyExistsError(project.external_id)
    session.refresh(project)
    return project


def create(
    session: Session,
    *,
    owner_id: int,
    platform_id: int,
    display_name: str,
    external_id: Optional[str] = None,
) -> Project:
    _assert_external_id_is_unique(session, platform_id, external_id)
    project = _commit(
        session,
        Project(
            display_name=display_name,
            owner_id=owner_id,
            platform_id=platform_id,
            external_id=external_id,
        ),
    )
    logger.info("Created project %s on platform %s", project.id, platform_id)
    return project


def update(
    session: Session,
    project_id: int,
    *,
    display_name: Optional[str] = None,
    external_id: Optional[str] = None,
) -> Project:
    project = get_one_or_throw(session, project_id)
    _assert_external_id_is_unique(session, project.platform_id, external_id, project_id=project.id)

    if display_name is not None:
        project.display_name = display_name
    if external_id is not None:
        project.external_id = external_id
    project.updated_at = utc_now()
    return _commit(session, project)


def soft_delete(session: Session, project_id: int) -> None:
    project = get_one_or_throw(session, project_id)
    project.deleted = utc_now()
    session.add(project)
    session.commit()
    logger.info("Soft-deleted project %s", project_id)
