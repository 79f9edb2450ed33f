"""Stream a track to disk and tag it with catalog metadata."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, AsyncIterator, Mapping

import aiofiles
import httpx
from mutagen import MutagenError
from mutagen.easyid3 import EasyID3
from mutagen.id3 import ID3NoHeaderError

from playmusic.errors import PlayMusicError, StreamUrlError, TransportError
from playmusic.logging import get_logger

if TYPE_CHECKING:
    from playmusic.client import PlayMusicClient

_LOGGER = get_logger(__name__).bind(component="download_pipeline")

# catalog field -> EasyID3 key
_TAG_FIELDS = {
    "title": "title",
    "artist": "artist",
    "album": "album",
    "track_number": "tracknumber",
    "composer": "composer",
    "disc_number": "discnumber",
    "year": "date",
}


@dataclass(slots=True)
class TrackTags:
    """ID3 fields taken from a catalog track document."""

    title: str | None = None
    artist: str | None = None
    album: str | None = None
    track_number: str | None = None
    composer: str | None = None
    disc_number: str | None = None
    year: str | None = None

    @classmethod
    def from_track(cls, track: Mapping[str, Any]) -> "TrackTags":
        def text(key: str) -> str | None:
            value = track.get(key)
            if value is None or value == "":
                return None
            return str(value)

        return cls(
            title=text("title"),
            artist=text("artist"),
            album=text("album"),
            track_number=text("trackNumber"),
            composer=text("composer"),
            disc_number=text("discNumber"),
            year=text("year"),
        )

    def as_easyid3(self) -> dict[str, str]:
        return {_TAG_FIELDS[name]: value for name, value in asdict(self).items() if value is not None}


@asynccontextmanager
async def open_stream(http: httpx.AsyncClient, stream_url: str) -> AsyncIterator[httpx.Response]:
    """GET the signed streaming URL and yield the un-read response."""

    try:
        async with http.stream("GET", stream_url) as response:
            if response.status_code != 200:
                raise StreamUrlError("Unable to get stream", status_code=response.status_code)
            yield response
    except httpx.RequestError as exc:
        raise TransportError(f"Error processing stream: {exc}") from exc


async def stream_to_file(client: "PlayMusicClient", track_id: str, path: str | Path) -> Path:
    """Resolve the stream URL for ``track_id`` and write the audio body to ``path``."""

    target = Path(path)
    stream_url = await client.get_stream_url(track_id)
    written = 0
    opened = False
    try:
        async with open_stream(client.http, stream_url) as response:
            try:
                async with aiofiles.open(target, "wb") as handle:
                    opened = True
                    async for chunk in response.aiter_bytes(client.settings.download_chunk_size):
                        await handle.write(chunk)
                        written += len(chunk)
            except OSError as exc:
                raise PlayMusicError(f"Error writing to file: {target}") from exc
    except BaseException:
        # never leave a truncated file behind, cancellation included
        if opened:
            target.unlink(missing_ok=True)
            _LOGGER.warning("partial_file_removed", path=str(target), bytes=written)
        raise

    _LOGGER.info("stream_written", path=str(target), bytes=written)
    return target


def _write_tags(path: Path, tags: TrackTags, v2_version: int) -> None:
    try:
        audio = EasyID3(path)
    except ID3NoHeaderError:
        audio = EasyID3()
    for key, value in tags.as_easyid3().items():
        audio[key] = value
    audio.save(path, v2_version=v2_version)


async def tag_file(track: Mapping[str, Any], path: str | Path, *, v2_version: int = 3) -> TrackTags:
    """Write ID3 tags for ``track`` into ``path`` off the event loop."""

    target = Path(path)
    tags = TrackTags.from_track(track)
    try:
        await asyncio.to_thread(_write_tags, target, tags, v2_version)
    except (MutagenError, OSError) as exc:
        raise PlayMusicError(f"Error writing id3 tags to {target}: {exc}") from exc
    return tags


async def download(client: "PlayMusicClient", track_id: str, path: str | Path) -> dict[str, Any]:
    """Fetch metadata and audio concurrently, then tag the file.

    If either branch fails the other is cancelled, tagging never starts and
    the first failure is raised as-is.
    """

    target = Path(path)
    try:
        async with asyncio.TaskGroup() as group:
            metadata_task = group.create_task(client.get_all_access_track(track_id))
            file_task = group.create_task(stream_to_file(client, track_id, target))
    except ExceptionGroup as exc:
        # the audio branch may have finished before the metadata branch failed
        if file_task.done() and not file_task.cancelled() and file_task.exception() is None:
            target.unlink(missing_ok=True)
        _LOGGER.warning("download_failed", track_id=track_id, errors=[repr(e) for e in exc.exceptions])
        raise exc.exceptions[0] from None

    track = metadata_task.result()
    await tag_file(track, file_task.result(), v2_version=client.settings.id3_v2_version)
    _LOGGER.info("download_complete", track_id=track_id, path=str(target))
    return track


__all__ = ["TrackTags", "download", "open_stream", "stream_to_file", "tag_file"]
