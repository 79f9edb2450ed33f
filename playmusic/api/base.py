"""Shared plumbing for the ``sj`` JSON endpoints."""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass
from typing import Any, Mapping

from playmusic.api.transport import AuthenticatedTransport
from playmusic.config import Settings, get_settings
from playmusic.logging import get_logger

ALT_JSON = {"alt": "json"}


@dataclass(slots=True)
class ServiceRequest:
    """Description of a request to send to the ``sj`` service."""

    method: str
    path: str
    params: Mapping[str, Any] | None = None
    json: Any | None = None
    content_type: str | None = None


def client_id() -> str:
    """Time-based id the service uses to de-duplicate mutations."""

    return str(uuid.uuid1())


def now_millis() -> int:
    return int(time.time() * 1000)


def mutations(*items: Mapping[str, Any]) -> dict[str, list[Mapping[str, Any]]]:
    return {"mutations": list(items)}


class SjService:
    """Base for the pass-through JSON endpoint groups."""

    component = "sj_service"

    def __init__(self, transport: AuthenticatedTransport, *, settings: Settings | None = None) -> None:
        self.transport = transport
        self.settings = settings or get_settings()
        self._logger = get_logger(__name__).bind(component=self.component)

    def url(self, path: str) -> str:
        return f"{self.settings.sj_base_url.rstrip('/')}/{path.lstrip('/')}"

    async def call(self, token: str, request: ServiceRequest) -> Any:
        self._logger.debug("sj_request", method=request.method, path=request.path)
        return await self.transport.send_json(
            request.method,
            self.url(request.path),
            token=token,
            params=request.params,
            json_body=request.json,
            content_type=request.content_type,
        )
