# scripts/seed.py

import os
import sys
import argparse

from dotenv import load_dotenv
from sqlmodel import Session

# Ensure root path for relative imports
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# ✅ Load environment variables before settings are built
load_dotenv()

from core.database import engine, create_db_and_tables
from models.models import PlatformRole, ProjectMemberRole
from services import (
    platform_service,
    project_member_service,
    project_service,
    user_identity_service,
    user_service,
)


def _get_or_create_member(session: Session, platform_id: int, email: str, first_name: str, password: str, role: PlatformRole):
    identity = user_identity_service.get_identity_by_email(session, email)
    if identity is None:
        identity = user_identity_service.create(
            session,
            email=email,
            first_name=first_name,
            password=password,
            verified=True,
        )
        print(f"✅ Added identity {email}")

    user = user_service.get_one_by_identity_and_platform(session, identity.id, platform_id)
    if user is None:
        user = user_service.create(session, identity_id=identity.id, platform_id=platform_id, platform_role=role)
    return user


def seed_dev_data():
    """Seed development database with a demo platform, its users and projects."""
    print("🌱 Seeding development data...")
    create_db_and_tables()

    with Session(engine) as session:
        # -----------------------------
        # 🏢 Demo Platform
        # -----------------------------
        admin_identity = user_identity_service.get_identity_by_email(session, "admin@demo.com")
        admin_membership = user_service.list_for_identity(session, admin_identity.id) if admin_identity else []
        if admin_membership:
            print("ℹ️ Demo platform already seeded")
            return

        platform = platform_service.create(session, name="Demo Platform")
        print("✅ Created Demo Platform")

        # -----------------------------
        # 👑 Admin + 👥 Member
        # -----------------------------
        admin = _get_or_create_member(session, platform.id, "admin@demo.com", "Admin", "admin1234", PlatformRole.ADMIN)
        member = _get_or_create_member(session, platform.id, "member@demo.com", "Member", "member1234", PlatformRole.MEMBER)
        platform_service.update(session, platform.id, owner_id=admin.id)

        # -----------------------------
        # 📁 Projects
        # -----------------------------
        shared = project_service.create(session, owner_id=admin.id, platform_id=platform.id, display_name="Operations")
        project_service.create(session, owner_id=member.id, platform_id=platform.id, display_name="Member's Project")
        project_member_service.upsert(
            session,
            project_id=shared.id,
            user_id=member.id,
            platform_id=platform.id,
            role=ProjectMemberRole.VIEWER,
        )

    print("🌱 Development data seeding complete.")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed the TenantFlow database.")
    parser.add_argument(
        "--env",
        choices=["dev"],
        default="dev",
        help="Select environment to seed",
    )
    args = parser.parse_args()

    if args.env == "dev":
        seed_dev_data()
