"""Per-track signatures for the stream-redirect endpoint.

Each request carries a fresh 13 character salt; the signature is
``base64url(HMAC-SHA1(key, track_id + salt))`` without padding. The server
treats the salt as a nonce, so it only has to be unbiased, not secret.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import random
import string
from dataclasses import dataclass, field
from typing import Final

ALL_ACCESS_PREFIX: Final[str] = "T"
SALT_ALPHABET: Final[str] = string.ascii_lowercase + string.digits
DEFAULT_SALT_LENGTH: Final[int] = 13

ALL_ACCESS_PARAM: Final[str] = "mjck"
LIBRARY_PARAM: Final[str] = "songid"


def is_all_access_id(track_id: str) -> bool:
    """All-access catalog ids start with ``T``; uploaded library ids do not."""

    return track_id.startswith(ALL_ACCESS_PREFIX)


def make_salt(length: int = DEFAULT_SALT_LENGTH, *, rng: random.Random | None = None) -> str:
    chooser = rng or random
    return "".join(chooser.choice(SALT_ALPHABET) for _ in range(length))


def compute_signature(signing_key: bytes, track_id: str, salt: str) -> str:
    digest = hmac.new(signing_key, (track_id + salt).encode("utf-8"), hashlib.sha1).digest()
    return base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")


@dataclass(frozen=True, slots=True)
class StreamParams:
    """Fixed query parameters that accompany every signed stream request."""

    account_index: int = 0
    network_type: str = "wifi"
    playback_type: str = "e"
    target_kbps: int = 8310


@dataclass(frozen=True, slots=True)
class SignedStreamRequest:
    """Ephemeral signed request; build a new one for every playback attempt."""

    track_id: str
    salt: str
    signature: str
    query_params: dict[str, str] = field(default_factory=dict)

    @property
    def id_param(self) -> str:
        return ALL_ACCESS_PARAM if ALL_ACCESS_PARAM in self.query_params else LIBRARY_PARAM


def build_query_params(track_id: str, salt: str, signature: str, params: StreamParams) -> dict[str, str]:
    query = {
        "u": str(params.account_index),
        "net": params.network_type,
        "pt": params.playback_type,
        "targetkbps": str(params.target_kbps),
        "slt": salt,
        "sig": signature,
    }
    if is_all_access_id(track_id):
        query[ALL_ACCESS_PARAM] = track_id
    else:
        query[LIBRARY_PARAM] = track_id
    return query


def sign_stream_request(
    track_id: str,
    signing_key: bytes,
    *,
    params: StreamParams | None = None,
    salt_length: int = DEFAULT_SALT_LENGTH,
    salt: str | None = None,
) -> SignedStreamRequest:
    """Sign ``track_id`` and assemble the stream-redirect query.

    ``salt`` is only meant for reproducing a known request; leave it unset so a
    new nonce is drawn.
    """

    if not track_id:
        raise ValueError("track_id must be a non-empty string")

    salt = salt if salt is not None else make_salt(salt_length)
    signature = compute_signature(signing_key, track_id, salt)
    return SignedStreamRequest(
        track_id=track_id,
        salt=salt,
        signature=signature,
        query_params=build_query_params(track_id, salt, signature, params or StreamParams()),
    )


__all__ = [
    "ALL_ACCESS_PARAM",
    "LIBRARY_PARAM",
    "SALT_ALPHABET",
    "SignedStreamRequest",
    "StreamParams",
    "build_query_params",
    "compute_signature",
    "is_all_access_id",
    "make_salt",
    "sign_stream_request",
]
