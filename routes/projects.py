# routes/projects.py
from fastapi import APIRouter, HTTPException, Depends, status
from sqlmodel import Session
from typing import List
from sqlalchemy.exc import SQLAlchemyError
import logging

from core.database import get_session
from core.exceptions import EntityNotFoundError, PermissionDeniedError
from routes.dependencies import CurrentUser, get_current_platform_admin, get_current_user
from schemas.project_schema import ProjectCreate, ProjectMemberCreate, ProjectRead, ProjectUpdate
from services import project_member_service, project_service, user_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Projects"])


def _get_visible_project(session: Session, current: CurrentUser, project_id: int):
    """Resolve a project only if the caller can see it."""
    for project in project_service.get_all_for_user(session, current.user):
        if project.id == project_id:
            return project
    raise EntityNotFoundError("project", project_id)


# ==================================================================
#  ✅ Get All Visible Projects (default project first)
# ==================================================================
@router.get("/", response_model=List[ProjectRead])
def get_projects(
    current: CurrentUser = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return project_service.get_all_for_user(session, current.user)


# ==================================================================
#  ✅ Get Single Project (visibility check)
# ==================================================================
@router.get("/{project_id}", response_model=ProjectRead)
def get_project(
    project_id: int,
    current: CurrentUser = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return _get_visible_project(session, current, project_id)


# ==================================================================
#  ✅ Create New Project in the caller's platform (platform admin)
# ==================================================================
@router.post("/", response_model=ProjectRead, status_code=status.HTTP_201_CREATED)
def create_project(
    data: ProjectCreate,
    current: CurrentUser = Depends(get_current_platform_admin),
    session: Session = Depends(get_session),
):
    owner_id = data.owner_id or current.user.id
    owner = user_service.get_one(session, owner_id)
    if owner is None or owner.platform_id != current.platform_id:
        raise HTTPException(status_code=400, detail="Project owner must belong to your platform.")

    try:
        return project_service.create(
            session,
            owner_id=owner_id,
            platform_id=current.platform_id,
            display_name=data.display_name,
            external_id=data.external_id,
        )
    except SQLAlchemyError as e:
        session.rollback()
        logger.exception("Database error while creating project: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="A database error occurred while creating the project.",
        )


# ==================================================================
#  ✅ Update Project (platform admin or owner)
# ==================================================================
@router.patch("/{project_id}", response_model=ProjectRead)
def update_project(
    project_id: int,
    data: ProjectUpdate,
    current: CurrentUser = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    project = _get_visible_project(session, current, project_id)
    if not current.user.is_platform_admin() and project.owner_id != current.user.id:
        raise PermissionDeniedError("Only the project owner or a platform admin can update this project")

    try:
        return project_service.update(
            session,
            project_id,
            display_name=data.display_name,
            external_id=data.external_id,
        )
    except SQLAlchemyError as e:
        session.rollback()
        logger.exception("Database error while updating project %s: %s", project_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="A database error occurred while updating the project.",
        )


# ==================================================================
#  ✅ Soft Delete Project (platform admin)
# ==================================================================
@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_project(
    project_id: int,
    current: CurrentUser = Depends(get_current_platform_admin),
    session: Session = Depends(get_session),
):
    project = _get_visible_project(session, current, project_id)
    if project.id == current.project_id:
        raise HTTPException(status_code=400, detail="You cannot delete the project of your current session.")
    project_service.soft_delete(session, project.id)


# ==================================================================
#  ✅ Share Project with a platform user (platform admin)
# ==================================================================
@router.post("/{project_id}/members", status_code=status.HTTP_204_NO_CONTENT)
def add_project_member(
    project_id: int,
    data: ProjectMemberCreate,
    current: CurrentUser = Depends(get_current_platform_admin),
    session: Session = Depends(get_session),
):
    project = _get_visible_project(session, current, project_id)
    member = user_service.get_one(session, data.user_id)
    if member is None or member.platform_id != current.platform_id:
        raise HTTPException(status_code=400, detail="User must belong to your platform.")

    project_member_service.upsert(
        session,
        project_id=project.id,
        user_id=member.id,
        platform_id=current.platform_id,
        role=data.role,
    )
