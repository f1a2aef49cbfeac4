# ================================================================
# services/telemetry.py — Analytics identification and product events
# ================================================================
import logging
from enum import Enum
from typing import Any, Dict, Optional

import httpx

from core.config import settings
from models.models import User, UserIdentity

logger = logging.getLogger(__name__)


class TelemetryEventName(str, Enum):
    SIGNED_UP = "signed.up"


class Telemetry:
    """
    Thin analytics client.

    Posts JSON to ``TELEMETRY_URL`` when telemetry is enabled and logs the call
    otherwise. Transport errors propagate; callers treat telemetry as best effort.
    """

    def __init__(self, url: Optional[str] = None, enabled: Optional[bool] = None):
        self.url = url if url is not None else settings.TELEMETRY_URL
        self.enabled = enabled if enabled is not None else settings.TELEMETRY_ENABLED

    def _send(self, path: str, body: Dict[str, Any]) -> None:
        if not self.enabled or not self.url:
            logger.debug("Telemetry disabled, dropping %s %s", path, body)
            return
        response = httpx.post(
            f"{self.url.rstrip('/')}/{path}",
            json=body,
            timeout=settings.OUTBOUND_TIMEOUT_SECONDS,
        )
        response.raise_for_status()

    def identify(self, user: User, identity: UserIdentity, project_id: int) -> None:
        if not identity.track_events:
            return
        self._send(
            "identify",
            {
                "userId": user.id,
                "traits": {
                    "email": identity.email,
                    "firstName": identity.first_name,
                    "lastName": identity.last_name,
                    "platformId": user.platform_id,
                    "projectId": project_id,
                },
            },
        )

    def track_project(self, project_id: int, name: TelemetryEventName, payload: Dict[str, Any]) -> None:
        self._send(
            "track",
            {"event": name.value, "projectId": project_id, "properties": payload},
        )


def get_telemetry() -> Telemetry:
    return Telemetry()
