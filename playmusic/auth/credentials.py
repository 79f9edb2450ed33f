"""Exchange a password or master token for a short-lived session token."""

from __future__ import annotations

import secrets
from dataclasses import dataclass

from playmusic.api.transport import FORM_CONTENT_TYPE, AuthenticatedTransport
from playmusic.config import ClientIdentity, Settings, get_settings
from playmusic.errors import AuthError, ConfigurationError, ProtocolError
from playmusic.logging import fingerprint, get_logger

SESSION_TOKEN_FIELD = "Auth"


def parse_key_values(body: str) -> dict[str, str]:
    """Parse the auth endpoint's newline separated ``key=value`` body.

    Lines without ``=`` (or starting with it) are ignored; values may contain
    further ``=`` characters.
    """

    result: dict[str, str] = {}
    for line in body.splitlines():
        key, sep, value = line.partition("=")
        if sep and key:
            result[key] = value
    return result


def generate_android_id() -> str:
    """Random 8 byte hex id; persist it and pass it back on later logins."""

    return secrets.token_hex(8)


@dataclass(frozen=True, slots=True, repr=False)
class Credential:
    """Either an email/password pair or a master token, never both."""

    email: str | None = None
    password: str | None = None
    master_token: str | None = None

    def __post_init__(self) -> None:
        has_password = bool(self.password)
        has_token = bool(self.master_token)
        if has_password and has_token:
            raise ConfigurationError("Provide either an email address and password, or a master token, not both")
        if not has_password and not has_token:
            raise ConfigurationError("You must provide either an email address and password, or a master token")
        if has_password and not (self.email and self.email.strip()):
            raise ConfigurationError("An email address is required for password login")

    @classmethod
    def from_settings(cls, settings: Settings) -> "Credential":
        return cls(email=settings.email, password=settings.password, master_token=settings.master_token)

    @property
    def uses_master_token(self) -> bool:
        return bool(self.master_token)

    def as_form(self) -> dict[str, str]:
        if self.master_token:
            return {"Token": self.master_token}
        if not self.email or not self.password:
            raise ConfigurationError("An email address and password are required for password login")
        return {"Email": self.email.strip(), "Passwd": self.password}

    def __repr__(self) -> str:
        kind = "master_token" if self.uses_master_token else f"password email={self.email!r}"
        return f"Credential({kind})"


class CredentialResolver:
    """Runs the single form POST against the auth endpoint."""

    def __init__(
        self,
        transport: AuthenticatedTransport,
        *,
        settings: Settings | None = None,
        identity: ClientIdentity | None = None,
    ) -> None:
        self.transport = transport
        self.settings = settings or get_settings()
        self.identity = identity or self.settings.client_identity
        self._logger = get_logger(__name__).bind(component="credential_resolver")

    def build_form(self, credential: Credential, android_id: str) -> dict[str, str]:
        form = self.identity.as_form(android_id)
        form.update(credential.as_form())
        return form

    async def acquire_session_token(self, credential: Credential | None, android_id: str) -> str:
        """Return the ``Auth`` value for ``credential``.

        Raises:
            ConfigurationError: no credential or no android id; nothing is sent.
            TransportError: the request never got an answer.
            AuthError: status >= 400, or a success body without ``Auth``.
        """

        if credential is None:
            raise ConfigurationError("You must provide either an email address and password, or a master token")
        if not android_id:
            raise ConfigurationError("A device identifier (android_id) is required")

        self._logger.info(
            "auth_token_request",
            method="master_token" if credential.uses_master_token else "password",
            android_id=android_id,
        )
        try:
            response = await self.transport.send(
                "POST",
                self.settings.auth_url,
                data=self.build_form(credential, android_id),
                content_type=FORM_CONTENT_TYPE,
            )
        except ProtocolError as exc:
            self._logger.warning("auth_token_rejected", status_code=exc.status_code)
            raise AuthError(
                f"Unable to create oauth token: {exc}",
                status_code=exc.status_code,
                url=exc.url,
                body=exc.body,
            ) from exc

        values = parse_key_values(response.text)
        token = values.get(SESSION_TOKEN_FIELD)
        if not token:
            self._logger.warning("auth_token_missing", fields=sorted(values))
            raise AuthError(
                "Auth endpoint answered without a session token",
                status_code=response.status_code,
                url=response.url,
                body=response.text,
            )

        self._logger.info("auth_token_acquired", token_fingerprint=fingerprint(token))
        return token


__all__ = [
    "Credential",
    "CredentialResolver",
    "SESSION_TOKEN_FIELD",
    "generate_android_id",
    "parse_key_values",
]
