"""Shared fixtures: isolated settings, an httpx.MockTransport router and a bound session."""

from __future__ import annotations

import json
from typing import Callable

import httpx
import pytest

from playmusic.auth.signing_key import derive_signing_key
from playmusic.config import Settings
from playmusic.session import Session

Responder = Callable[[httpx.Request], httpx.Response]


class Router:
    """Dispatch requests to responders by URL substring and record what was sent."""

    def __init__(self) -> None:
        self.routes: list[tuple[str, Responder]] = []
        self.requests: list[httpx.Request] = []

    def add(self, fragment: str, responder: Responder | httpx.Response) -> "Router":
        if isinstance(responder, httpx.Response):
            fixed = responder
            self.routes.append(
                (
                    fragment,
                    lambda request: httpx.Response(fixed.status_code, headers=fixed.headers, content=fixed.content),
                )
            )
        else:
            self.routes.append((fragment, responder))
        return self

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url)
        for fragment, responder in self.routes:
            if fragment in url:
                return responder(request)
        return httpx.Response(404, text=f"no route for {url}")

    def sent_to(self, fragment: str) -> list[httpx.Request]:
        return [r for r in self.requests if fragment in str(r.url)]


def settings_response(devices: list[dict], *, is_subscription: bool = True) -> httpx.Response:
    """loadsettings reply: JSON body declared as text/plain."""

    body = json.dumps({"settings": {"isSubscription": is_subscription, "devices": devices}})
    return httpx.Response(200, text=body, headers={"content-type": "text/plain; charset=utf-8"})


def auth_response(token: str = "session-token") -> httpx.Response:
    return httpx.Response(200, text=f"SID=sid\nLSID=lsid\nAuth={token}\n")


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        email=None,
        password=None,
        master_token=None,
        android_id="0123456789abcdef",
    )


@pytest.fixture
def router() -> Router:
    return Router()


@pytest.fixture
def http_client(router: Router) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(router), follow_redirects=False)


@pytest.fixture
def session() -> Session:
    return Session(
        session_token="session-token",
        device_id="1234",
        signing_key=derive_signing_key(),
        is_subscription=True,
        android_id="0123456789abcdef",
    )
