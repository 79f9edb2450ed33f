"""Application configuration for the Play Music mobile client."""

from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property, lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


@dataclass(frozen=True)
class ClientIdentity:
    """Fixed fields the auth endpoint expects from an Android music client."""

    account_type: str
    service: str
    source: str
    app: str
    device_country: str
    operator_country: str
    lang: str
    sdk_version: str

    def as_form(self, android_id: str) -> dict[str, str]:
        return {
            "accountType": self.account_type,
            "has_permission": "1",
            "service": self.service,
            "source": self.source,
            "androidId": android_id,
            "app": self.app,
            "device_country": self.device_country,
            "operatorCountry": self.operator_country,
            "lang": self.lang,
            "sdk_version": self.sdk_version,
        }


class Settings(BaseSettings):
    """Environment-driven runtime settings."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="PLAYMUSIC_", extra="allow")

    # General
    log_level: str = "INFO"

    # Credentials
    email: str | None = None
    password: str | None = None
    master_token: str | None = None
    android_id: str | None = Field(default=None, description="Stable per-install device identifier")

    # Client identity sent to the auth endpoint
    account_type: str = "HOSTED_OR_GOOGLE"
    service: str = "sj"
    source: str = "android"
    app_package: str = "com.google.android.music"
    device_country: str = "us"
    operator_country: str = "us"
    lang: str = "en"
    sdk_version: str = "17"

    # Endpoints
    auth_url: str = "https://android.clients.google.com/auth"
    sj_base_url: str = Field(default="https://www.googleapis.com/sj/v1.11/", description="Catalog/library API root")
    web_base_url: str = "https://play.google.com/music/"
    mobile_base_url: str = "https://android.clients.google.com/music/"

    # Stream signing
    account_index: int = 0
    network_type: str = "wifi"
    playback_type: str = "e"
    target_kbps: int = 8310
    salt_length: int = 13

    # Transport
    request_timeout_seconds: float = Field(
        default=30.0,
        description="HTTP timeout used when the client owns its httpx.AsyncClient",
    )
    user_agent: str = "playmusic-mobile/0.1 (python-httpx)"

    # Downloads
    download_chunk_size: int = 65536
    id3_v2_version: int = Field(default=3, description="ID3v2 minor version written when tagging")

    @cached_property
    def client_identity(self) -> ClientIdentity:
        return ClientIdentity(
            account_type=self.account_type,
            service=self.service,
            source=self.source,
            app=self.app_package,
            device_country=self.device_country,
            operator_country=self.operator_country,
            lang=self.lang,
            sdk_version=self.sdk_version,
        )


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()
