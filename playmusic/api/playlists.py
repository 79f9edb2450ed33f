"""Playlist feeds, playlist mutations and play counts."""

from __future__ import annotations

from typing import Any

from playmusic.api.base import ALT_JSON, ServiceRequest, SjService, client_id, mutations, now_millis
from playmusic.api.transport import JSON_CONTENT_TYPE
from playmusic.auth.stream_signer import is_all_access_id

ALL_ACCESS_SOURCE = "2"
LIBRARY_SOURCE = "1"


def track_source(track_id: str) -> str:
    """Numeric source/type code the mutation payloads use for ``track_id``."""

    return ALL_ACCESS_SOURCE if is_all_access_id(track_id) else LIBRARY_SOURCE


class PlaylistService(SjService):
    component = "playlist_service"

    async def get_playlists(self, token: str) -> Any:
        return await self.call(token, ServiceRequest("POST", "playlistfeed"))

    async def get_playlist_entries(self, token: str) -> Any:
        """Entries of every playlist, flattened."""

        return await self.call(token, ServiceRequest("POST", "plentryfeed"))

    async def add_playlist(self, token: str, name: str) -> Any:
        body = mutations(
            {
                "create": {
                    "creationTimestamp": -1,
                    "deleted": False,
                    "lastModifiedTimestamp": 0,
                    "name": name,
                    "type": "USER_GENERATED",
                }
            }
        )
        return await self.call(
            token,
            ServiceRequest("POST", "playlistbatch", params=ALT_JSON, json=body, content_type=JSON_CONTENT_TYPE),
        )

    async def add_track_to_playlist(self, token: str, track_id: str, playlist_id: str) -> Any:
        """Append ``track_id`` to the end of ``playlist_id``."""

        body = mutations(
            {
                "create": {
                    "clientId": client_id(),
                    "creationTimestamp": "-1",
                    "deleted": "false",
                    "lastModifiedTimestamp": "0",
                    "playlistId": playlist_id,
                    "source": track_source(track_id),
                    "trackId": track_id,
                }
            }
        )
        return await self.call(
            token,
            ServiceRequest("POST", "plentriesbatch", params=ALT_JSON, json=body, content_type=JSON_CONTENT_TYPE),
        )

    async def remove_playlist_entry(self, token: str, entry_id: str) -> Any:
        body = mutations({"delete": entry_id})
        return await self.call(
            token,
            ServiceRequest("POST", "plentriesbatch", params=ALT_JSON, json=body, content_type=JSON_CONTENT_TYPE),
        )

    async def increment_track_playcount(self, token: str, track_id: str) -> Any:
        stats = [
            {
                "id": track_id,
                "incremental_plays": "1",
                "last_play_time_millis": str(now_millis()),
                "type": track_source(track_id),
                "track_events": [],
            }
        ]
        return await self.call(
            token,
            ServiceRequest(
                "POST",
                "trackstats",
                params=ALT_JSON,
                json={"track_stats": stats},
                content_type=JSON_CONTENT_TYPE,
            ),
        )
