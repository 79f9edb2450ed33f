"""Play Music mobile: async client for the Play Music mobile protocol."""

from __future__ import annotations

from .auth import Credential, derive_signing_key, sign_stream_request
from .client import PlayMusicClient
from .config import Settings, get_settings
from .errors import (
    AuthError,
    BindError,
    ConfigurationError,
    ParseError,
    PlayMusicError,
    ProtocolError,
    StreamUrlError,
    TransportError,
)
from .session import Session

__all__ = [
    "AuthError",
    "BindError",
    "ConfigurationError",
    "Credential",
    "ParseError",
    "PlayMusicClient",
    "PlayMusicError",
    "ProtocolError",
    "Session",
    "Settings",
    "StreamUrlError",
    "TransportError",
    "derive_signing_key",
    "get_settings",
    "sign_stream_request",
]
