"""End-to-end tests through the HTTP surface."""

import pytest

from core.config import Edition, Environment, settings
from services import access_token_manager, project_service, user_identity_service, user_service
from services.appsumo_service import APPSUMO_PLANS, appsumo_service
from services.project_plan_service import project_billing_service, project_limits_service


def _sign_up(client, email="owner@example.com", first_name="Olivia", **extra):
    payload = {"email": email, "password": "s3cret-password", "first_name": first_name}
    payload.update(extra)
    return client.post("/authentication/sign-up", json=payload)


def _auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def owner(client):
    response = _sign_up(client)
    assert response.status_code == 200, response.text
    return response.json()


def test_health(client):
    assert client.get("/health").json()["status"] == "ok"


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------


def test_sign_up_bootstraps_platform_and_project(client, owner):
    assert owner["platform_role"] == "admin"
    assert owner["email"] == "owner@example.com"

    projects = client.get("/projects/", headers=_auth(owner["token"])).json()
    assert [p["id"] for p in projects] == [owner["project_id"]]
    assert projects[0]["display_name"] == "Olivia's Project"

    platform = client.get("/platforms/current", headers=_auth(owner["token"])).json()
    assert platform["id"] == owner["platform_id"]
    assert platform["owner_id"] == owner["id"]


def test_sign_up_twice_with_same_email_conflicts(client, owner):
    response = _sign_up(client)

    assert response.status_code == 409
    assert response.json()["code"] == "EXISTING_USER"


def test_sign_in_returns_the_same_scope(client, owner):
    response = client.post(
        "/authentication/sign-in",
        json={"email": "OWNER@example.com", "password": "s3cret-password"},
    )

    assert response.status_code == 200
    body = response.json()
    first = access_token_manager.decode_token(owner["token"])
    second = access_token_manager.decode_token(body["token"])
    assert first == second


def test_sign_in_with_wrong_password_is_unauthorized(client, owner):
    response = client.post(
        "/authentication/sign-in",
        json={"email": "owner@example.com", "password": "not-the-password"},
    )

    assert response.status_code == 401
    assert response.json()["code"] == "INVALID_CREDENTIALS"


def test_me_reflects_token_scope(client, owner):
    me = client.get("/authentication/me", headers=_auth(owner["token"])).json()

    assert me["id"] == owner["id"]
    assert me["project_id"] == owner["project_id"]
    assert me["email"] == "owner@example.com"


def test_missing_or_bad_token_is_rejected(client):
    assert client.get("/authentication/me").status_code == 401

    response = client.get("/authentication/me", headers=_auth("garbage"))
    assert response.status_code == 401
    assert response.json()["code"] == "INVALID_BEARER_TOKEN"


def test_sign_out_everywhere_revokes_outstanding_tokens(client, owner):
    headers = _auth(owner["token"])

    assert client.post("/authentication/sign-out-everywhere", headers=headers).status_code == 204
    assert client.get("/authentication/me", headers=headers).status_code == 401

    fresh = client.post(
        "/authentication/sign-in",
        json={"email": "owner@example.com", "password": "s3cret-password"},
    ).json()
    assert client.get("/authentication/me", headers=_auth(fresh["token"])).status_code == 200


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------


def test_duplicate_external_id_conflicts(client, owner):
    headers = _auth(owner["token"])
    first = client.post("/projects/", json={"display_name": "CRM", "external_id": "crm-1"}, headers=headers)
    second = client.post("/projects/", json={"display_name": "CRM 2", "external_id": "crm-1"}, headers=headers)

    assert first.status_code == 201
    assert second.status_code == 409
    assert second.json()["code"] == "PROJECT_EXTERNAL_ID_ALREADY_EXISTS"


def test_deleted_project_disappears_from_listing(client, owner):
    headers = _auth(owner["token"])
    extra = client.post("/projects/", json={"display_name": "Scratch"}, headers=headers).json()

    assert client.delete(f"/projects/{extra['id']}", headers=headers).status_code == 204

    ids = [p["id"] for p in client.get("/projects/", headers=headers).json()]
    assert ids == [owner["project_id"]]
    assert client.get(f"/projects/{extra['id']}", headers=headers).status_code == 404


def test_current_session_project_cannot_be_deleted(client, owner):
    response = client.delete(f"/projects/{owner['project_id']}", headers=_auth(owner["token"]))

    assert response.status_code == 400


# ---------------------------------------------------------------------------
# Invitations
# ---------------------------------------------------------------------------


def test_invited_member_joins_platform_and_sees_shared_project(client, owner):
    headers = _auth(owner["token"])
    created = client.post(
        "/invitations/",
        json={"email": "member@example.com", "project_id": owner["project_id"], "project_role": "viewer"},
        headers=headers,
    )
    assert created.status_code == 201
    token = created.json()["invitation_link"].split("token=")[-1]

    accepted = client.post("/invitations/accept", json={"token": token})
    assert accepted.status_code == 200
    assert accepted.json()["status"] == "accepted"

    member = _sign_up(client, email="member@example.com", first_name="Max", platform_id=owner["platform_id"])
    assert member.status_code == 200, member.text
    body = member.json()
    assert body["platform_role"] == "member"
    assert body["platform_id"] == owner["platform_id"]
    assert body["project_id"] == owner["project_id"]

    # members may not manage the platform directory
    users = client.get("/users/", headers=_auth(body["token"]))
    assert users.status_code == 403
    assert users.json()["code"] == "PERMISSION_DENIED"


def test_unknown_invitation_token_is_not_found(client):
    response = client.post("/invitations/accept", json={"token": "does-not-exist"})

    assert response.status_code == 404


# ---------------------------------------------------------------------------
# AppSumo webhook
# ---------------------------------------------------------------------------


def test_appsumo_webhook_requires_configured_token(client, monkeypatch):
    monkeypatch.setattr(settings, "APPSUMO_TOKEN", "hook-secret")
    payload = {
        "plan_id": "activepieces_tier1",
        "action": "activate",
        "uuid": "lic-api-1",
        "activation_email": "buyer@example.com",
    }

    assert client.post("/appsumo/action", json=payload).status_code == 401
    assert client.post("/appsumo/action", json=payload, headers=_auth("wrong")).status_code == 401

    response = client.post("/appsumo/action", json=payload, headers=_auth("hook-secret"))
    assert response.status_code == 200
    assert response.json() == {"message": "success"}


_WEBHOOK = {
    "plan_id": "activepieces_tier6",
    "action": "activate",
    "uuid": "lic-open-1",
    "activation_email": "someone@example.com",
}


@pytest.mark.parametrize(
    "edition_value, environment",
    [(Edition.CLOUD, Environment.DEVELOPMENT), (Edition.COMMUNITY, Environment.PRODUCTION)],
    ids=["cloud", "production"],
)
def test_appsumo_webhook_without_configured_token_fails_closed(
    client, session, factory, edition, monkeypatch, edition_value, environment
):
    edition(edition_value, cloud_platform_id=factory.platform().id)
    monkeypatch.setattr(settings, "ENVIRONMENT", environment)
    monkeypatch.setattr(settings, "APPSUMO_TOKEN", None)

    response = client.post("/appsumo/action", json=_WEBHOOK)

    assert response.status_code == 401
    assert appsumo_service.get_by_id(session, "lic-open-1") is None


def test_appsumo_webhook_token_is_optional_for_local_community(client, session, monkeypatch):
    monkeypatch.setattr(settings, "APPSUMO_TOKEN", None)

    assert client.post("/appsumo/action", json=_WEBHOOK).status_code == 200
    assert appsumo_service.get_by_id(session, "lic-open-1") is not None


# ---------------------------------------------------------------------------
# Sign-up onto an existing platform
# ---------------------------------------------------------------------------


def test_cloud_sign_up_creates_personal_project_with_parked_license(client, session, factory, edition, monkeypatch):
    cloud = factory.platform(name="Cloud")
    edition(Edition.CLOUD, cloud_platform_id=cloud.id)
    monkeypatch.setattr(settings, "APPSUMO_TOKEN", "hook-secret")
    webhook = client.post(
        "/appsumo/action",
        json={
            "plan_id": "activepieces_tier3",
            "action": "activate",
            "uuid": "lic-early",
            "activation_email": "early@example.com",
        },
        headers=_auth("hook-secret"),
    )
    assert webhook.status_code == 200

    response = _sign_up(client, email="early@example.com", first_name="Eve")

    assert response.status_code == 200, response.text
    body = response.json()
    assert body["platform_id"] == cloud.id
    assert body["platform_role"] == "member"
    project = project_service.get_one_or_throw(session, body["project_id"])
    assert project.owner_id == body["id"]
    assert project.display_name == "Eve's Project"
    tier3 = APPSUMO_PLANS["activepieces_tier3"]
    assert project_limits_service.get_by_project_id(session, project.id).tasks == tier3.tasks
    assert project_billing_service.get_by_project_id(session, project.id).included_users == tier3.team_members


def test_enterprise_sign_up_without_invitation_is_refused(client, session, owner, edition):
    edition(Edition.ENTERPRISE)

    response = _sign_up(client, email="stranger@example.com", platform_id=owner["platform_id"])

    assert response.status_code == 403
    assert response.json()["code"] == "INVITATION_ONLY_SIGN_UP"
    assert user_identity_service.get_identity_by_email(session, "stranger@example.com") is None


@pytest.mark.parametrize(
    "policy, email, code",
    [
        (
            {"sso_enabled": True, "enforce_allowed_auth_domains": True, "allowed_auth_domains": ["acme.com"]},
            "dev@other.com",
            "DOMAIN_NOT_ALLOWED",
        ),
        ({"sso_enabled": True, "email_auth_enabled": False}, "dev@acme.com", "EMAIL_AUTH_DISABLED"),
    ],
    ids=["domain", "email-auth"],
)
def test_enterprise_sign_up_enforces_platform_policy(client, session, owner, edition, policy, email, code):
    edition(Edition.ENTERPRISE)
    patched = client.patch("/platforms/current", json=policy, headers=_auth(owner["token"]))
    assert patched.status_code == 200

    response = _sign_up(client, email=email, platform_id=owner["platform_id"])

    assert response.status_code == 403
    assert response.json()["code"] == code
    assert user_identity_service.get_identity_by_email(session, email) is None


def _invite_and_accept(client, owner, **invitation):
    created = client.post("/invitations/", json=invitation, headers=_auth(owner["token"]))
    assert created.status_code == 201
    token = created.json()["invitation_link"].split("token=")[-1]
    assert client.post("/invitations/accept", json={"token": token}).status_code == 200


def test_platform_invitation_without_project_does_not_strand_the_account(client, session, owner, edition):
    edition(Edition.ENTERPRISE)
    _invite_and_accept(client, owner, email="m@example.com")

    for _ in range(2):
        response = _sign_up(client, email="m@example.com", platform_id=owner["platform_id"])
        assert response.status_code == 403
        assert response.json()["code"] == "INVITATION_ONLY_SIGN_UP"

    assert user_identity_service.get_identity_by_email(session, "m@example.com") is None
    assert [u.id for u in user_service.list_for_platform(session, owner["platform_id"])] == [owner["id"]]


def test_admin_invitation_without_project_sees_platform_projects(client, owner, edition):
    edition(Edition.ENTERPRISE)
    _invite_and_accept(client, owner, email="ops@example.com", platform_role="admin")

    response = _sign_up(client, email="ops@example.com", platform_id=owner["platform_id"])

    assert response.status_code == 200, response.text
    assert response.json()["platform_role"] == "admin"
    assert response.json()["project_id"] == owner["project_id"]
