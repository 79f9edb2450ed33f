"""Radio stations: listing, creation from a seed, and station track feeds."""

from __future__ import annotations

import time
from typing import Any, Final

from playmusic.api.base import ALT_JSON, ServiceRequest, SjService, client_id, mutations
from playmusic.api.transport import JSON_CONTENT_TYPE
from playmusic.auth.stream_signer import is_all_access_id

SEED_TYPES: Final[dict[str, tuple[str, int]]] = {
    "artist": ("artistId", 3),
    "album": ("albumId", 4),
    "genre": ("genreId", 5),
}
ALL_ACCESS_TRACK_SEED: Final[int] = 2
LIBRARY_TRACK_SEED: Final[int] = 1
CONTENT_FILTER: Final[int] = 1


def build_seed(seed_id: str, seed_type: str) -> dict[str, Any]:
    """Seed object for ``create_station``; ``seed_type`` is track, artist, album or genre."""

    if seed_type == "track":
        code = ALL_ACCESS_TRACK_SEED if is_all_access_id(seed_id) else LIBRARY_TRACK_SEED
        return {"trackId": seed_id, "seedType": code}
    try:
        key, code = SEED_TYPES[seed_type]
    except KeyError:
        raise ValueError(f"Invalid seed type: {seed_type!r}") from None
    return {key: seed_id, "seedType": code}


class StationService(SjService):
    component = "station_service"

    async def get_stations(self, token: str) -> Any:
        return await self.call(
            token,
            ServiceRequest("POST", "radio/station", content_type=JSON_CONTENT_TYPE),
        )

    async def create_station(self, token: str, name: str, seed_id: str, seed_type: str) -> Any:
        seed = build_seed(seed_id, seed_type)
        body = mutations(
            {
                "createOrGet": {
                    "clientId": client_id(),
                    "deleted": False,
                    "imageType": 1,
                    "lastModifiedTimestamp": "-1",
                    "name": name,
                    "recentTimeStamp": str(int(time.time() * 1_000_000)),
                    "seed": seed,
                    "tracks": [],
                },
                "includeFeed": False,
                "numEntries": 0,
                "params": {"contentFilter": CONTENT_FILTER},
            }
        )
        return await self.call(
            token,
            ServiceRequest("POST", "radio/editstation", params=ALT_JSON, json=body, content_type=JSON_CONTENT_TYPE),
        )

    async def get_station_tracks(self, token: str, station_id: str, num_tracks: int) -> Any:
        body = {
            "contentFilter": CONTENT_FILTER,
            "stations": [{"radioId": station_id, "numEntries": num_tracks, "recentlyPlayed": []}],
        }
        return await self.call(
            token,
            ServiceRequest(
                "POST",
                "radio/stationfeed",
                params={**ALT_JSON, "include-tracks": "true"},
                json=body,
                content_type=JSON_CONTENT_TYPE,
            ),
        )
