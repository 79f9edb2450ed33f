from __future__ import annotations

import asyncio
from urllib.parse import parse_qs

import httpx
import pytest

from playmusic.auth.credentials import Credential
from playmusic.auth.signing_key import derive_signing_key
from playmusic.auth.stream_signer import compute_signature
from playmusic.client import PlayMusicClient
from playmusic.errors import AuthError, BindError, ConfigurationError, StreamUrlError

from .conftest import auth_response, settings_response

PHONE = [{"type": "CHROME", "id": "c"}, {"type": "PHONE", "id": "0x1234"}]
STREAM_URL = "https://example/stream?x=1"


def _client(settings, http_client, session=None) -> PlayMusicClient:
    client = PlayMusicClient(settings=settings, client=http_client)
    if session is not None:
        client._session = session
    return client


@pytest.mark.asyncio
async def test_login_runs_resolver_then_binder(settings, router, http_client):
    router.add("/auth", auth_response("tok-1")).add("loadsettings", settings_response(PHONE, is_subscription=False))
    client = _client(settings, http_client)

    session = await client.login(Credential(master_token="aas_et/master"))

    assert [r.url.path for r in router.requests] == ["/auth", "/music/services/loadsettings"]
    assert router.requests[1].headers["authorization"] == "GoogleLogin auth=tok-1"
    assert session.session_token == "tok-1"
    assert session.device_id == "1234"
    assert session.is_subscription is False
    assert session.signing_key == derive_signing_key()
    assert client.session is session


@pytest.mark.asyncio
async def test_login_uses_settings_credentials(settings, router, http_client):
    settings = settings.model_copy(update={"email": "someone@example.com", "password": "pw"})
    router.add("/auth", auth_response()).add("loadsettings", settings_response(PHONE))

    await _client(settings, http_client).login()

    form = parse_qs(router.requests[0].content.decode())
    assert form["Email"] == ["someone@example.com"]
    assert form["androidId"] == ["0123456789abcdef"]


@pytest.mark.asyncio
async def test_login_generates_android_id_once(settings, router, http_client):
    settings = settings.model_copy(update={"android_id": None})
    router.add("/auth", auth_response()).add("loadsettings", settings_response(PHONE))
    client = _client(settings, http_client)

    first = await client.login(Credential(master_token="m"))
    second = await client.login(Credential(master_token="m"))

    assert len(first.android_id) == 16
    assert second.android_id == first.android_id
    sent = [parse_qs(r.content.decode())["androidId"][0] for r in router.sent_to("/auth")]
    assert sent == [first.android_id, first.android_id]


@pytest.mark.asyncio
async def test_login_without_credentials_sends_nothing(settings, router, http_client):
    client = _client(settings, http_client)

    with pytest.raises(ConfigurationError):
        await client.login()

    assert router.requests == []
    assert not client.is_logged_in


@pytest.mark.asyncio
async def test_auth_and_bind_failures_are_distinguishable(settings, router, http_client):
    router.add("/auth", httpx.Response(403, text="Error=BadAuthentication"))
    with pytest.raises(AuthError):
        await _client(settings, http_client).login(Credential(master_token="m"))

    router.routes.clear()
    router.add("/auth", auth_response()).add("loadsettings", settings_response([{"type": "CHROME"}]))
    with pytest.raises(BindError):
        await _client(settings, http_client).login(Credential(master_token="m"))


@pytest.mark.asyncio
async def test_failed_relogin_keeps_previous_session(settings, router, http_client, session):
    router.add("/auth", auth_response()).add("loadsettings", settings_response([{"type": "CHROME"}]))
    client = _client(settings, http_client, session)

    with pytest.raises(BindError):
        await client.login(Credential(master_token="m"))

    assert client.session is session


@pytest.mark.asyncio
async def test_relogin_replaces_session_whole(settings, router, http_client, session):
    router.add("/auth", auth_response("tok-2")).add("loadsettings", settings_response([{"type": "IOS", "id": "0x9999"}]))
    client = _client(settings, http_client, session)

    replacement = await client.login(Credential(master_token="m"))

    assert replacement is not session
    assert (client.session.session_token, client.session.device_id) == ("tok-2", "9999")
    assert (session.session_token, session.device_id) == ("session-token", "1234")


def test_session_before_login_is_a_configuration_error(settings):
    with pytest.raises(ConfigurationError):
        PlayMusicClient(settings=settings).session


@pytest.mark.asyncio
async def test_get_stream_url_returns_location_unchanged(settings, router, http_client, session):
    router.add("mplay", httpx.Response(302, headers={"Location": STREAM_URL}))
    client = _client(settings, http_client, session)

    url = await client.get_stream_url("Tabc123")

    assert url == STREAM_URL
    (request,) = router.requests
    assert request.method == "GET"
    assert request.url.host == "android.clients.google.com"
    assert request.url.path == "/music/mplay"
    assert request.headers["x-device-id"] == "1234"
    assert request.headers["authorization"] == "GoogleLogin auth=session-token"
    params = request.url.params
    assert params["mjck"] == "Tabc123"
    assert "songid" not in params
    assert (params["u"], params["net"], params["pt"], params["targetkbps"]) == ("0", "wifi", "e", "8310")
    assert len(params["slt"]) == 13
    assert params["sig"] == compute_signature(derive_signing_key(), "Tabc123", params["slt"])


@pytest.mark.asyncio
async def test_get_stream_url_library_track_uses_songid(settings, router, http_client, session):
    router.add("mplay", httpx.Response(302, headers={"Location": STREAM_URL}))

    await _client(settings, http_client, session).get_stream_url("abc-123")

    params = router.requests[0].url.params
    assert params["songid"] == "abc-123"
    assert "mjck" not in params


@pytest.mark.asyncio
async def test_get_stream_url_rejects_200(settings, router, http_client, session):
    router.add("mplay", httpx.Response(200, text="not a redirect"))

    with pytest.raises(StreamUrlError) as excinfo:
        await _client(settings, http_client, session).get_stream_url("Tabc123")

    assert excinfo.value.status_code == 200


@pytest.mark.asyncio
async def test_get_stream_url_rejects_redirect_without_location(settings, router, http_client, session):
    router.add("mplay", httpx.Response(302))

    with pytest.raises(StreamUrlError):
        await _client(settings, http_client, session).get_stream_url("Tabc123")


@pytest.mark.asyncio
async def test_get_stream_url_error_status_is_stream_url_error(settings, router, http_client, session):
    router.add("mplay", httpx.Response(403, text="{bad", headers={"content-type": "application/json"}))

    with pytest.raises(StreamUrlError) as excinfo:
        await _client(settings, http_client, session).get_stream_url("Tabc123")

    assert excinfo.value.status_code == 403


@pytest.mark.asyncio
async def test_concurrent_stream_requests_use_fresh_salts(settings, router, http_client, session):
    router.add("mplay", httpx.Response(302, headers={"Location": STREAM_URL}))
    client = _client(settings, http_client, session)

    urls = await asyncio.gather(*(client.get_stream_url("Tabc123") for _ in range(20)))

    assert urls == [STREAM_URL] * 20
    assert len({r.url.params["slt"] for r in router.requests}) == 20
