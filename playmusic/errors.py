"""Exception hierarchy for the Play Music mobile client.

Callers composing login/stream/catalog calls should branch on type:

* ``ConfigurationError`` - fix the inputs, nothing was sent.
* ``TransportError`` / ``AuthError`` - the login can be retried.
* ``BindError`` - the account has no phone registered; retrying will not help.
"""

from __future__ import annotations


class PlayMusicError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(PlayMusicError):
    """Missing or contradictory inputs, detected before any request is sent."""


class TransportError(PlayMusicError):
    """Connection, TLS or timeout failure below the HTTP layer."""


class ProtocolError(PlayMusicError):
    """Server answered with an error status or an unexpected document shape."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        url: str | None = None,
        body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.url = url
        self.body = body


class ParseError(ProtocolError):
    """A payload that claimed to be structured could not be parsed.

    ``body`` always holds the raw text so callers can re-parse it themselves.
    """


class AuthError(ProtocolError):
    """The auth endpoint rejected the credential or returned no session token."""


class BindError(PlayMusicError):
    """The account has no PHONE/IOS device registration to sign streams with."""


class StreamUrlError(PlayMusicError):
    """The stream-redirect endpoint did not answer with a usable 302."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


__all__ = [
    "AuthError",
    "BindError",
    "ConfigurationError",
    "ParseError",
    "PlayMusicError",
    "ProtocolError",
    "StreamUrlError",
    "TransportError",
]
