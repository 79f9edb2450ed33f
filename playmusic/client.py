"""Stateful service object for the Play Music mobile protocol.

Usage:
    ```python
    client = PlayMusicClient()
    async with client.lifecycle():
        await client.login(Credential(master_token="..."))
        url = await client.get_stream_url("Tabc123")
    ```

The ``Session`` is written only by ``login`` and replaced in one assignment.
Every operation reads ``self.session`` once up front, so a concurrent re-login
never mixes the old token with the new device id.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator

import httpx

from playmusic.api.library import LibraryService
from playmusic.api.playlists import PlaylistService
from playmusic.api.stations import StationService
from playmusic.api.transport import AuthenticatedTransport
from playmusic.auth.credentials import Credential, CredentialResolver, generate_android_id
from playmusic.auth.session_binder import SessionBinder
from playmusic.auth.signing_key import derive_signing_key
from playmusic.auth.stream_signer import StreamParams, sign_stream_request
from playmusic.config import Settings, get_settings
from playmusic.errors import ConfigurationError, StreamUrlError
from playmusic.logging import get_logger
from playmusic.session import Session

DEVICE_ID_HEADER = "X-Device-ID"


class PlayMusicClient:
    """Login sequence, stream URL signing and the pass-through endpoints."""

    def __init__(
        self,
        *,
        settings: Settings | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.transport = AuthenticatedTransport(settings=self.settings, client=client)
        self.resolver = CredentialResolver(self.transport, settings=self.settings)
        self.binder = SessionBinder(self.transport, settings=self.settings)
        self.library = LibraryService(self.transport, settings=self.settings)
        self.playlists = PlaylistService(self.transport, settings=self.settings)
        self.stations = StationService(self.transport, settings=self.settings)
        self._stream_params = StreamParams(
            account_index=self.settings.account_index,
            network_type=self.settings.network_type,
            playback_type=self.settings.playback_type,
            target_kbps=self.settings.target_kbps,
        )
        self._android_id = self.settings.android_id
        self._session: Session | None = None
        self._logger = get_logger(__name__).bind(component="play_music_client")

    @asynccontextmanager
    async def lifecycle(self) -> AsyncIterator["PlayMusicClient"]:
        """Keep an httpx client open for the duration of the context."""

        async with self.transport.lifecycle():
            yield self

    @property
    def http(self) -> httpx.AsyncClient:
        return self.transport.client

    @property
    def session(self) -> Session:
        if self._session is None:
            raise ConfigurationError("PlayMusicClient.login must complete before making authenticated calls")
        return self._session

    @property
    def is_logged_in(self) -> bool:
        return self._session is not None

    @property
    def android_id(self) -> str | None:
        return self._android_id

    @property
    def stream_url_endpoint(self) -> str:
        return f"{self.settings.mobile_base_url.rstrip('/')}/mplay"

    async def login(self, credential: Credential | None = None, *, android_id: str | None = None) -> Session:
        """Resolve a session token, bind a device and install the new ``Session``.

        Nothing is replaced unless both steps succeed; on failure the previous
        session (if any) stays in place.
        """

        if credential is None:
            credential = Credential.from_settings(self.settings)
        android_id = android_id or self._android_id or generate_android_id()

        token = await self.resolver.acquire_session_token(credential, android_id)
        session = await self.binder.bind_session(
            token,
            android_id=android_id,
            signing_key=derive_signing_key(),
        )

        self._android_id = android_id
        self._session = session
        self._logger.info("login_complete", is_subscription=session.is_subscription)
        return session

    def logout(self) -> None:
        self._session = None

    async def get_stream_url(self, track_id: str) -> str:
        """Return the short-lived streaming URL for ``track_id``.

        The URL is good for one playback attempt; ask again instead of caching it.
        """

        session = self.session
        signed = sign_stream_request(
            track_id,
            session.signing_key,
            params=self._stream_params,
            salt_length=self.settings.salt_length,
        )
        response = await self.transport.send(
            "GET",
            self.stream_url_endpoint,
            token=session.session_token,
            params=signed.query_params,
            headers={DEVICE_ID_HEADER: session.device_id},
            raise_for_status=False,
            parse_json=False,
        )

        location = response.location
        if response.status_code != 302 or not location:
            self._logger.warning(
                "stream_url_failed",
                status_code=response.status_code,
                has_location=bool(location),
                id_param=signed.id_param,
            )
            raise StreamUrlError(
                f"Unable to get stream url: {response.status_code} from redirect endpoint",
                status_code=response.status_code,
            )

        self._logger.debug("stream_url_resolved", id_param=signed.id_param)
        return location

    # Account / library / catalog

    async def get_account_settings(self) -> Any:
        return await self.binder.load_settings(self.session.session_token)

    async def get_library(self) -> Any:
        return await self.library.get_library(self.session.session_token)

    async def search(self, text: str, max_results: int = 20) -> Any:
        return await self.library.search(self.session.session_token, text, max_results)

    async def get_album(self, album_id: str, include_tracks: bool = True) -> Any:
        return await self.library.get_album(self.session.session_token, album_id, include_tracks)

    async def get_all_access_track(self, track_id: str) -> Any:
        return await self.library.get_all_access_track(self.session.session_token, track_id)

    async def get_artist(
        self,
        artist_id: str,
        include_albums: bool = True,
        top_track_count: int = 5,
        related_artist_count: int = 5,
    ) -> Any:
        return await self.library.get_artist(
            self.session.session_token,
            artist_id,
            include_albums,
            top_track_count,
            related_artist_count,
        )

    # Playlists

    async def get_playlists(self) -> Any:
        return await self.playlists.get_playlists(self.session.session_token)

    async def get_playlist_entries(self) -> Any:
        return await self.playlists.get_playlist_entries(self.session.session_token)

    async def add_playlist(self, name: str) -> Any:
        return await self.playlists.add_playlist(self.session.session_token, name)

    async def add_track_to_playlist(self, track_id: str, playlist_id: str) -> Any:
        return await self.playlists.add_track_to_playlist(self.session.session_token, track_id, playlist_id)

    async def remove_playlist_entry(self, entry_id: str) -> Any:
        return await self.playlists.remove_playlist_entry(self.session.session_token, entry_id)

    async def increment_track_playcount(self, track_id: str) -> Any:
        return await self.playlists.increment_track_playcount(self.session.session_token, track_id)

    # Stations

    async def get_stations(self) -> Any:
        return await self.stations.get_stations(self.session.session_token)

    async def create_station(self, name: str, seed_id: str, seed_type: str) -> Any:
        return await self.stations.create_station(self.session.session_token, name, seed_id, seed_type)

    async def get_station_tracks(self, station_id: str, num_tracks: int = 25) -> Any:
        return await self.stations.get_station_tracks(self.session.session_token, station_id, num_tracks)

    # Downloads

    async def stream_to_file(self, track_id: str, path: str | Path) -> Path:
        from playmusic.pipelines.download import stream_to_file

        return await stream_to_file(self, track_id, path)

    async def download(self, track_id: str, path: str | Path) -> dict[str, Any]:
        from playmusic.pipelines.download import download

        return await download(self, track_id, path)


__all__ = ["DEVICE_ID_HEADER", "PlayMusicClient"]
