"""Pick the mobile device registration a session signs stream requests for."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Mapping

from playmusic.api.transport import JSON_CONTENT_TYPE, AuthenticatedTransport, TransportResponse
from playmusic.auth.signing_key import derive_signing_key
from playmusic.config import Settings, get_settings
from playmusic.errors import BindError, ParseError
from playmusic.logging import get_logger
from playmusic.session import Session

DEVICE_ID_PREFIX_LENGTH = 2

NO_DEVICE_MESSAGE = "Unable to find a usable device on your account, access from a mobile device and try again"


class DeviceType(str, Enum):
    PHONE = "PHONE"
    IOS = "IOS"
    OTHER = "OTHER"

    @classmethod
    def parse(cls, value: Any) -> "DeviceType":
        try:
            return cls(value)
        except ValueError:
            return cls.OTHER


ELIGIBLE_DEVICE_TYPES = frozenset({DeviceType.PHONE, DeviceType.IOS})


@dataclass(frozen=True, slots=True)
class DeviceRegistration:
    id: str
    type: DeviceType
    raw_type: str | None = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "DeviceRegistration":
        raw_type = payload.get("type")
        raw_id = payload.get("id")
        return cls(
            id=raw_id if isinstance(raw_id, str) else "",
            type=DeviceType.parse(raw_type),
            raw_type=raw_type if isinstance(raw_type, str) else None,
        )

    @property
    def is_mobile(self) -> bool:
        return self.type in ELIGIBLE_DEVICE_TYPES

    @property
    def signing_id(self) -> str:
        """Registration id without its two character (``0x``) prefix."""

        return self.id[DEVICE_ID_PREFIX_LENGTH:]


@dataclass(frozen=True, slots=True)
class AccountSettings:
    is_subscription: bool
    devices: tuple[DeviceRegistration, ...]
    raw: dict[str, Any]


def parse_account_settings(document: Any, *, body: str | None = None) -> AccountSettings:
    """Pull ``settings.isSubscription`` and ``settings.devices`` out of a loadsettings document.

    A malformed document raises ``ParseError`` carrying ``body``; only a
    well-formed device list without a PHONE/IOS entry leads to ``BindError``.
    """

    raw = body if body is not None else repr(document)
    settings = document.get("settings") if isinstance(document, Mapping) else None
    if not isinstance(settings, Mapping):
        raise ParseError("settings payload has no 'settings' object", body=raw)

    devices = settings.get("devices")
    if not isinstance(devices, list):
        raise ParseError("settings.devices is missing or not a list", body=raw)

    is_subscription = settings.get("isSubscription", False)
    if not isinstance(is_subscription, bool):
        raise ParseError("settings.isSubscription is not a boolean", body=raw)

    registrations = []
    for entry in devices:
        if not isinstance(entry, Mapping):
            raise ParseError("settings.devices holds a non-object entry", body=raw)
        device = DeviceRegistration.from_payload(entry)
        if device.is_mobile and len(device.id) <= DEVICE_ID_PREFIX_LENGTH:
            raise ParseError(f"{device.type.value} device has no usable id", body=raw)
        registrations.append(device)

    return AccountSettings(
        is_subscription=is_subscription,
        devices=tuple(registrations),
        raw=dict(settings),
    )


def select_device(devices: Iterable[DeviceRegistration]) -> DeviceRegistration:
    """First PHONE or IOS registration in account order."""

    for device in devices:
        if device.is_mobile:
            return device
    raise BindError(NO_DEVICE_MESSAGE)


class SessionBinder:
    """Loads account settings with a session token and binds a device id."""

    def __init__(self, transport: AuthenticatedTransport, *, settings: Settings | None = None) -> None:
        self.transport = transport
        self.settings = settings or get_settings()
        self._logger = get_logger(__name__).bind(component="session_binder")

    @property
    def settings_url(self) -> str:
        return f"{self.settings.web_base_url.rstrip('/')}/services/loadsettings"

    async def load_settings(self, session_token: str) -> Any:
        return (await self._post_load_settings(session_token)).json()

    async def _post_load_settings(self, session_token: str) -> TransportResponse:
        # loadsettings answers text/plain even though the body is JSON
        return await self.transport.send(
            "POST",
            self.settings_url,
            token=session_token,
            params={"u": self.settings.account_index},
            json_body={"sessionId": ""},
            content_type=JSON_CONTENT_TYPE,
        )

    async def bind_session(
        self,
        session_token: str,
        *,
        android_id: str,
        signing_key: bytes | None = None,
    ) -> Session:
        """Build the ``Session`` for ``session_token``.

        Raises:
            ProtocolError / TransportError: the settings call failed.
            ParseError: the body is not the expected JSON document.
            BindError: no PHONE/IOS device is registered on the account.
        """

        response = await self._post_load_settings(session_token)
        account = parse_account_settings(response.json(), body=response.text)
        try:
            device = select_device(account.devices)
        except BindError:
            self._logger.warning(
                "no_mobile_device",
                device_types=[d.raw_type for d in account.devices],
            )
            raise

        self._logger.info(
            "session_bound",
            device_type=device.type.value,
            is_subscription=account.is_subscription,
        )
        return Session(
            session_token=session_token,
            device_id=device.signing_id,
            signing_key=signing_key if signing_key is not None else derive_signing_key(),
            is_subscription=account.is_subscription,
            android_id=android_id,
            settings=account.raw,
        )


__all__ = [
    "AccountSettings",
    "DeviceRegistration",
    "DeviceType",
    "SessionBinder",
    "parse_account_settings",
    "select_device",
]
