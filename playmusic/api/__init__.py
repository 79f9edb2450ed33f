"""HTTP transport and the pass-through JSON endpoint groups."""

from .library import LibraryService
from .playlists import PlaylistService
from .stations import StationService, build_seed
from .transport import AuthenticatedTransport, TransportResponse

__all__ = [
    "AuthenticatedTransport",
    "LibraryService",
    "PlaylistService",
    "StationService",
    "TransportResponse",
    "build_seed",
]
