"""Immutable login result shared by every authenticated call."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


@dataclass(frozen=True, slots=True)
class Session:
    """Session token, bound device and signing key for one login.

    A re-login builds a new ``Session`` and swaps it in whole; requests that
    already captured the old value finish with the old token.
    """

    session_token: str = field(repr=False)
    device_id: str
    signing_key: bytes = field(repr=False)
    is_subscription: bool
    android_id: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    settings: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @property
    def all_access(self) -> bool:
        return self.is_subscription
