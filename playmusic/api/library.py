"""Library and all-access catalog lookups."""

from __future__ import annotations

from typing import Any

from playmusic.api.base import ALT_JSON, ServiceRequest, SjService


def _flag(value: bool) -> str:
    return "true" if value else "false"


class LibraryService(SjService):
    component = "library_service"

    async def get_library(self, token: str) -> Any:
        """Every track in the user's library."""

        return await self.call(token, ServiceRequest("POST", "trackfeed"))

    async def search(self, token: str, text: str, max_results: int) -> Any:
        return await self.call(
            token,
            ServiceRequest("GET", "query", params={"q": text, "max-results": max_results}),
        )

    async def get_album(self, token: str, album_id: str, include_tracks: bool = True) -> Any:
        """All-access album by ``nid`` (uploaded albums are not served here)."""

        params = {"nid": album_id, "include-tracks": _flag(include_tracks), **ALT_JSON}
        return await self.call(token, ServiceRequest("GET", "fetchalbum", params=params))

    async def get_all_access_track(self, token: str, track_id: str) -> Any:
        return await self.call(
            token,
            ServiceRequest("GET", "fetchtrack", params={"nid": track_id, **ALT_JSON}),
        )

    async def get_artist(
        self,
        token: str,
        artist_id: str,
        include_albums: bool = True,
        top_track_count: int = 5,
        related_artist_count: int = 5,
    ) -> Any:
        params = {
            "nid": artist_id,
            "include-albums": _flag(include_albums),
            "num-top-tracks": top_track_count,
            "num-related-artists": related_artist_count,
            **ALT_JSON,
        }
        return await self.call(token, ServiceRequest("GET", "fetchartist", params=params))
