from .appsumo_schema import AppSumoActionRequest, AppSumoPlanRead, REFUND_ACTION
from .authentication_schema import AuthenticationResponse, SignInRequest, SignUpRequest
from .invitation_schema import InvitationAccept, InvitationCreate, InvitationRead
from .platform_schema import PlatformRead, PlatformUpdate
from .project_schema import ProjectCreate, ProjectMemberCreate, ProjectRead, ProjectUpdate
from .user_schema import UserRead, UserUpdate

__all__ = [
    # AppSumo
    "AppSumoActionRequest", "AppSumoPlanRead", "REFUND_ACTION",

    # Authentication
    "AuthenticationResponse", "SignInRequest", "SignUpRequest",

    # Invitation
    "InvitationAccept", "InvitationCreate", "InvitationRead",

    # Platform
    "PlatformRead", "PlatformUpdate",

    # Project
    "ProjectCreate", "ProjectMemberCreate", "ProjectRead", "ProjectUpdate",

    # User
    "UserRead", "UserUpdate",
]
