# ================================================================
# services/appsumo_service.py — Plan reconciliation for AppSumo licenses
# ================================================================
import logging
from typing import Dict, Optional

from sqlmodel import Session, select

from core.config import settings
from core.database import commit_keyed_upsert
from core.exceptions import SystemPropNotDefinedError, UnknownPlanError
from models.models import AppSumoPlan, utc_now
from schemas.appsumo_schema import AppSumoActionRequest
from services import project_service, user_identity_service, user_service
from services.project_plan_service import (
    DEFAULT_FREE_PLAN_LIMIT,
    PlanLimits,
    project_billing_service,
    project_limits_service,
)

logger = logging.getLogger(__name__)


# ============================================================
# PLAN CATALOG
# ============================================================
APPSUMO_PLANS: Dict[str, PlanLimits] = {
    "activepieces_tier1": PlanLimits(
        nickname="appsumo_activepieces_tier1",
        tasks=10000,
        minimum_polling_interval=10,
        connections=100,
        team_members=1,
    ),
    "activepieces_tier2": PlanLimits(
        nickname="appsumo_activepieces_tier2",
        tasks=50000,
        minimum_polling_interval=5,
        connections=100,
        team_members=1,
    ),
    "activepieces_tier3": PlanLimits(
        nickname="appsumo_activepieces_tier3",
        tasks=200000,
        minimum_polling_interval=1,
        connections=100,
        team_members=5,
    ),
    "activepieces_tier4": PlanLimits(
        nickname="appsumo_activepieces_tier4",
        tasks=500000,
        minimum_polling_interval=1,
        connections=100,
        team_members=5,
    ),
    "activepieces_tier5": PlanLimits(
        nickname="appsumo_activepieces_tier5",
        tasks=1000000,
        minimum_polling_interval=1,
        connections=100,
        team_members=5,
    ),
    "activepieces_tier6": PlanLimits(
        nickname="appsumo_activepieces_tier6",
        tasks=10000000,
        minimum_polling_interval=1,
        connections=100,
        team_members=5,
    ),
}


class AppSumoService:
    """
    Keeps a project's limits in line with its AppSumo license.

    - activate / upgrade (any non-refund action): apply the plan and upsert the license
    - refund: reset to the free baseline and drop the license
    - licenses for unknown emails are parked until that person signs up
    """

    @staticmethod
    def get_plan_information(plan_id: str) -> PlanLimits:
        plan = APPSUMO_PLANS.get(plan_id)
        if plan is None:
            raise UnknownPlanError(plan_id)
        return plan

    @staticmethod
    def get_by_email(session: Session, email: str) -> Optional[AppSumoPlan]:
        return session.exec(
            select(AppSumoPlan).where(
                AppSumoPlan.activation_email == user_identity_service.normalize_email(email)
            )
        ).first()

    @staticmethod
    def get_by_id(session: Session, uuid: str) -> Optional[AppSumoPlan]:
        return session.get(AppSumoPlan, uuid)

    @staticmethod
    def delete(session: Session, email: str) -> None:
        records = session.exec(
            select(AppSumoPlan).where(
                AppSumoPlan.activation_email == user_identity_service.normalize_email(email)
            )
        ).all()
        for record in records:
            session.delete(record)
        session.commit()

    @staticmethod
    def _stage_upsert(session: Session, uuid: str, plan_id: str, activation_email: str) -> AppSumoPlan:
        record = AppSumoService.get_by_id(session, uuid)
        if record is None:
            record = AppSumoPlan(uuid=uuid, plan_id=plan_id, activation_email=activation_email)
        else:
            record.plan_id = plan_id
            record.activation_email = activation_email
            record.updated_at = utc_now()
        session.add(record)
        return record

    @staticmethod
    def upsert(session: Session, *, uuid: str, plan_id: str, activation_email: str) -> AppSumoPlan:
        return commit_keyed_upsert(
            session,
            lambda: AppSumoService._stage_upsert(session, uuid, plan_id, activation_email),
        )

    # ------------------------------------------------------------
    # LIMITS
    # ------------------------------------------------------------
    @staticmethod
    def _apply_limits(session: Session, project_id: int, limits: PlanLimits) -> None:
        def stage():
            project_billing_service.stage(
                session,
                project_id,
                included_tasks=limits.tasks,
                included_users=limits.team_members,
            )
            return project_limits_service.stage(session, limits, project_id)

        # limits and billing commit together
        commit_keyed_upsert(session, stage)

    @staticmethod
    def apply_parked_plan(session: Session, email: str, project_id: int) -> bool:
        """Apply a license that arrived before its owner signed up."""
        record = AppSumoService.get_by_email(session, email)
        if record is None:
            return False
        limits = AppSumoService.get_plan_information(record.plan_id)
        AppSumoService._apply_limits(session, project_id, limits)
        logger.info("Applied parked license %s (%s) to project %s", record.uuid, record.plan_id, project_id)
        return True

    # ------------------------------------------------------------
    # WEBHOOK STATE MACHINE
    # ------------------------------------------------------------
    @staticmethod
    def handle_request(
        session: Session,
        request: AppSumoActionRequest,
        platform_id: Optional[int] = None,
    ) -> None:
        existing = AppSumoService.get_by_id(session, request.uuid)
        # once a license is bound its stored email wins over the payload
        activation_email = (
            existing.activation_email
            if existing is not None
            else user_identity_service.normalize_email(request.activation_email)
        )
        plan = AppSumoService.get_plan_information(request.plan_id)
        limits = DEFAULT_FREE_PLAN_LIMIT if request.is_refund else plan

        identity = user_identity_service.get_identity_by_email(session, activation_email)
        if identity is None:
            logger.info("No identity for license %s yet, parking the entitlement", request.uuid)
        else:
            cloud_platform_id = platform_id if platform_id is not None else settings.CLOUD_PLATFORM_ID
            if cloud_platform_id is None:
                raise SystemPropNotDefinedError("CLOUD_PLATFORM_ID")

            user = user_service.get_one_by_identity_and_platform(session, identity.id, cloud_platform_id)
            if user is None:
                logger.info("Identity %s has no cloud membership, parking license %s", identity.id, request.uuid)
            else:
                project = project_service.get_user_project_or_throw(session, user.id)
                AppSumoService._apply_limits(session, project.id, limits)
                logger.info(
                    "License %s: applied %s limits to project %s (action=%s)",
                    request.uuid,
                    limits.nickname,
                    project.id,
                    request.action,
                )

        if request.is_refund:
            AppSumoService.delete(session, activation_email)
        else:
            AppSumoService.upsert(
                session,
                uuid=request.uuid,
                plan_id=request.plan_id,
                activation_email=activation_email,
            )


appsumo_service = AppSumoService()
