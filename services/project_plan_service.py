# services/project_plan_service.py
from typing import Optional

from pydantic import BaseModel, ConfigDict
from sqlmodel import Session, select

from core.database import commit_keyed_upsert
from models.models import ProjectBilling, ProjectPlan, utc_now


class PlanLimits(BaseModel):
    """Quota bundle applied to exactly one project at a time."""

    model_config = ConfigDict(frozen=True)

    nickname: str
    tasks: int
    minimum_polling_interval: int
    connections: int
    team_members: int


DEFAULT_FREE_PLAN_LIMIT = PlanLimits(
    nickname="free",
    tasks=1000,
    minimum_polling_interval=5,
    connections=100,
    team_members=1,
)


class ProjectLimitsService:
    """Keyed by project id: one plan row per project, overwritten in place."""

    @staticmethod
    def get_by_project_id(session: Session, project_id: int) -> Optional[ProjectPlan]:
        return session.exec(select(ProjectPlan).where(ProjectPlan.project_id == project_id)).first()

    @staticmethod
    def stage(session: Session, limits: PlanLimits, project_id: int) -> ProjectPlan:
        plan = ProjectLimitsService.get_by_project_id(session, project_id)
        if plan is None:
            plan = ProjectPlan(project_id=project_id)
        plan.name = limits.nickname
        plan.tasks = limits.tasks
        plan.minimum_polling_interval = limits.minimum_polling_interval
        plan.connections = limits.connections
        plan.team_members = limits.team_members
        plan.updated_at = utc_now()
        session.add(plan)
        return plan

    @staticmethod
    def upsert(session: Session, limits: PlanLimits, project_id: int) -> ProjectPlan:
        return commit_keyed_upsert(session, lambda: ProjectLimitsService.stage(session, limits, project_id))


class ProjectBillingService:

    @staticmethod
    def get_by_project_id(session: Session, project_id: int) -> Optional[ProjectBilling]:
        return session.exec(select(ProjectBilling).where(ProjectBilling.project_id == project_id)).first()

    @staticmethod
    def _stage_default(session: Session, project_id: int) -> ProjectBilling:
        billing = ProjectBillingService.get_by_project_id(session, project_id)
        if billing is None:
            billing = ProjectBilling(
                project_id=project_id,
                included_tasks=DEFAULT_FREE_PLAN_LIMIT.tasks,
                included_users=DEFAULT_FREE_PLAN_LIMIT.team_members,
            )
            session.add(billing)
        return billing

    @staticmethod
    def get_or_create_for_project(session: Session, project_id: int) -> ProjectBilling:
        """Never creates a second billing row for the same project."""
        billing = ProjectBillingService.get_by_project_id(session, project_id)
        if billing is not None:
            return billing
        return commit_keyed_upsert(session, lambda: ProjectBillingService._stage_default(session, project_id))

    @staticmethod
    def stage(session: Session, project_id: int, *, included_tasks: int, included_users: int) -> ProjectBilling:
        billing = ProjectBillingService._stage_default(session, project_id)
        billing.included_tasks = included_tasks
        billing.included_users = included_users
        billing.updated_at = utc_now()
        session.add(billing)
        return billing

    @staticmethod
    def update_by_project_id(
        session: Session,
        project_id: int,
        *,
        included_tasks: int,
        included_users: int,
    ) -> ProjectBilling:
        return commit_keyed_upsert(
            session,
            lambda: ProjectBillingService.stage(
                session,
                project_id,
                included_tasks=included_tasks,
                included_users=included_users,
            ),
        )


project_limits_service = ProjectLimitsService()
project_billing_service = ProjectBillingService()
