"""Authenticated HTTP transport shared by the auth core and every endpoint wrapper."""

from __future__ import annotations

import json
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator, Mapping, MutableMapping
from urllib.parse import urlencode

import httpx

from playmusic.config import Settings, get_settings
from playmusic.errors import ParseError, ProtocolError, TransportError
from playmusic.logging import get_logger

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
JSON_CONTENT_TYPE = "application/json"

_LOGGER = get_logger(__name__).bind(component="transport")


def auth_header(token: str) -> str:
    return f"GoogleLogin auth={token}"


def media_type(headers: Mapping[str, str]) -> str | None:
    """Return the bare, lower-cased media type of a Content-Type header."""

    value = headers.get("content-type")
    if not isinstance(value, str):
        return None
    return value.split(";", 1)[0].strip().lower()


def parse_json_text(text: str, *, status_code: int | None = None, url: str | None = None) -> Any:
    """Parse a JSON document, raising ``ParseError`` that keeps the raw body."""

    try:
        return json.loads(text)
    except ValueError as exc:
        raise ParseError(
            f"unable to parse json response: {exc}",
            status_code=status_code,
            url=url,
            body=text,
        ) from exc


@dataclass(slots=True)
class TransportResponse:
    """A fully buffered response.

    ``body`` is the parsed JSON document when the server declared
    ``application/json`` and the raw text otherwise.
    """

    status_code: int
    headers: httpx.Headers
    text: str
    body: Any
    url: str

    @property
    def location(self) -> str | None:
        return self.headers.get("location")

    def json(self) -> Any:
        """Parse the raw text as JSON regardless of the declared content type."""

        if isinstance(self.body, (dict, list)):
            return self.body
        return parse_json_text(self.text, status_code=self.status_code, url=self.url)


class AuthenticatedTransport:
    """Thin wrapper around httpx that attaches the session token.

    The transport never retries and never follows redirects; the stream signer
    needs to see the raw 302 from the redirect endpoint.
    """

    def __init__(
        self,
        *,
        settings: Settings | None = None,
        client: httpx.AsyncClient | None = None,
        default_headers: Mapping[str, str] | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._client = client
        self._default_headers = dict(default_headers or {})
        if "User-Agent" not in self._default_headers:
            self._default_headers["User-Agent"] = self.settings.user_agent
        self._logger = _LOGGER

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError("AuthenticatedTransport.lifecycle must be entered before requesting")
        return self._client

    @asynccontextmanager
    async def lifecycle(self) -> AsyncIterator["AuthenticatedTransport"]:
        """Ensure an AsyncClient is available for the duration of the context."""

        if self._client is not None:
            yield self
            return

        timeout = httpx.Timeout(self.settings.request_timeout_seconds)
        async with httpx.AsyncClient(timeout=timeout, follow_redirects=False) as client:
            self._client = client
            try:
                yield self
            finally:
                self._client = None

    async def send(
        self,
        method: str,
        url: str,
        *,
        token: str | None = None,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        data: Mapping[str, Any] | str | bytes | None = None,
        json_body: Any | None = None,
        content_type: str | None = None,
        raise_for_status: bool = True,
        parse_json: bool = True,
    ) -> TransportResponse:
        """Send one request and buffer the whole response.

        ``json_body`` is serialized and sent as ``application/json``; anything in
        ``data`` goes out form-encoded unless ``content_type`` says otherwise.
        """

        request_headers: MutableMapping[str, str] = dict(self._default_headers)
        if token is not None:
            request_headers["Authorization"] = auth_header(token)

        content: str | bytes | None
        if json_body is not None:
            content = json.dumps(json_body)
            request_headers["Content-Type"] = content_type or JSON_CONTENT_TYPE
        else:
            content = urlencode(data) if isinstance(data, Mapping) else data
            request_headers["Content-Type"] = content_type or FORM_CONTENT_TYPE
        if headers:
            request_headers |= headers

        self._logger.debug(
            "transport_request",
            method=method,
            url=url,
            authenticated=token is not None,
            has_body=content is not None,
            params_present=bool(params),
        )

        try:
            response = await self.client.request(
                method,
                url,
                params=params,
                content=content,
                headers=request_headers,
                follow_redirects=False,
            )
        except httpx.RequestError as exc:
            self._logger.warning("transport_failed", method=method, url=url, error=str(exc))
            raise TransportError(f"error making https request to {url}: {exc}") from exc

        text = response.text
        response_url = str(response.request.url)

        if raise_for_status and response.status_code >= 400:
            self._logger.warning(
                "transport_status_error",
                status_code=response.status_code,
                url=response_url,
            )
            raise ProtocolError(
                f"{response.status_code} error from server",
                status_code=response.status_code,
                url=response_url,
                body=text,
            )

        body: Any = text
        if parse_json and media_type(response.headers) == JSON_CONTENT_TYPE and text:
            body = parse_json_text(text, status_code=response.status_code, url=response_url)

        return TransportResponse(
            status_code=response.status_code,
            headers=response.headers,
            text=text,
            body=body,
            url=response_url,
        )

    async def send_json(
        self,
        method: str,
        url: str,
        *,
        token: str,
        params: Mapping[str, Any] | None = None,
        json_body: Any | None = None,
        content_type: str | None = None,
    ) -> Any:
        """Convenience helper for the pass-through JSON endpoints."""

        response = await self.send(
            method,
            url,
            token=token,
            params=params,
            json_body=json_body,
            content_type=content_type,
        )
        return response.body
