"""Error taxonomy for tenancy resolution, credential issuance and plan reconciliation.

Every error carries a stable ``error_code`` that clients can switch on, an HTTP
status code and a ``details`` mapping that is returned as ``params``.
"""

from typing import Any, Dict, Optional


class AppException(Exception):
    """Base exception for every caller-visible failure."""

    def __init__(
        self,
        message: str,
        error_code: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


# Identity / membership
class AccountNotFoundError(AppException):
    def __init__(self, account_id: Any):
        super().__init__(
            message=f"Account '{account_id}' not found",
            error_code="ACCOUNT_NOT_FOUND",
            status_code=404,
            details={"accountId": account_id},
        )


class EntityNotFoundError(AppException):
    def __init__(self, entity_type: str, entity_id: Any):
        super().__init__(
            message=f"{entity_type.capitalize()} '{entity_id}' not found",
            error_code="ENTITY_NOT_FOUND",
            status_code=404,
            details={"entityType": entity_type, "entityId": entity_id},
        )


class UserAlreadyExistsError(AppException):
    def __init__(self, email: str):
        super().__init__(
            message=f"An account with email '{email}' already exists",
            error_code="EXISTING_USER",
            status_code=409,
            details={"email": email},
        )


class UserInactiveError(AppException):
    def __init__(self, email: str):
        super().__init__(
            message="User is inactive",
            error_code="USER_IS_INACTIVE",
            status_code=403,
            details={"email": email},
        )


# Sign-up / sign-in policy
class InvitationOnlySignUpError(AppException):
    """Raised when sign-up requires an invitation the caller does not have."""

    def __init__(self, message: str = "User is not invited to the platform"):
        super().__init__(
            message=message,
            error_code="INVITATION_ONLY_SIGN_UP",
            status_code=403,
            details={"message": message},
        )


class NoProjectFoundError(InvitationOnlySignUpError):
    """No project is visible to the user; surfaced as invitation-required."""

    def __init__(self):
        super().__init__(message="No project found for user")


class DomainNotAllowedError(AppException):
    def __init__(self, domain: str):
        super().__init__(
            message=f"Domain '{domain}' is not allowed on this platform",
            error_code="DOMAIN_NOT_ALLOWED",
            status_code=403,
            details={"domain": domain},
        )


class EmailAuthDisabledError(AppException):
    def __init__(self):
        super().__init__(
            message="Email authentication is disabled on this platform",
            error_code="EMAIL_AUTH_DISABLED",
            status_code=403,
        )


class InvalidCredentialsError(AppException):
    def __init__(self, email: str):
        super().__init__(
            message="Invalid email or password",
            error_code="INVALID_CREDENTIALS",
            status_code=401,
            details={"email": email},
        )


class InvalidBearerTokenError(AppException):
    def __init__(self, message: str = "Invalid or expired token"):
        super().__init__(
            message=message,
            error_code="INVALID_BEARER_TOKEN",
            status_code=401,
        )


class PermissionDeniedError(AppException):
    def __init__(self, message: str = "Permission denied"):
        super().__init__(
            message=message,
            error_code="PERMISSION_DENIED",
            status_code=403,
        )


# Projects
class ExternalIdAlreadyExistsError(AppException):
    def __init__(self, external_id: str):
        super().__init__(
            message=f"A project with external id '{external_id}' already exists",
            error_code="PROJECT_EXTERNAL_ID_ALREADY_EXISTS",
            status_code=409,
            details={"externalId": external_id},
        )


# Configuration defects
class UnknownPlanError(AppException):
    def __init__(self, plan_id: str):
        super().__init__(
            message=f"Plan '{plan_id}' is not in the plan catalog",
            error_code="UNKNOWN_PLAN",
            status_code=500,
            details={"planId": plan_id},
        )


class SystemPropNotDefinedError(AppException):
    def __init__(self, prop: str):
        super().__init__(
            message=f"System property '{prop}' is not defined",
            error_code="SYSTEM_PROP_NOT_DEFINED",
            status_code=500,
            details={"prop": prop},
        )
