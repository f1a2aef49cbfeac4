# services/project_member_service.py
from typing import Set

from sqlmodel import Session, select

from models.models import ProjectMember, ProjectMemberRole


def get_ids_of_projects(session: Session, platform_id: int, user_id: int) -> Set[int]:
    """Projects explicitly shared with a user inside one platform."""
    rows = session.exec(
        select(ProjectMember.project_id).where(
            ProjectMember.platform_id == platform_id,
            ProjectMember.user_id == user_id,
        )
    ).all()
    return set(rows)


def upsert(
    session: Session,
    *,
    project_id: int,
    user_id: int,
    platform_id: int,
    role: ProjectMemberRole = ProjectMemberRole.EDITOR,
) -> ProjectMember:
    member = session.exec(
        select(ProjectMember).where(
            ProjectMember.project_id == project_id,
            ProjectMember.user_id == user_id,
        )
    ).first()
    if member is None:
        member = ProjectMember(project_id=project_id, user_id=user_id, platform_id=platform_id)
    member.role = role.value

    session.add(member)
    session.commit()
    session.refresh(member)
    return member
