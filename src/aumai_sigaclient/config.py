"""Gateway connection settings for aumai-sigaclient."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class GatewaySettings(BaseSettings):
    """Connection parameters for the SiGa gateway.

    All values can be overridden via environment variables. Prefix: ``SIGA_``.
    ``client``, ``service``, ``uuid`` and ``secret`` are carried for the
    request-authentication hook and are not interpreted by the workflow.
    """

    url: str = Field(default="https://siga.example.com/siga")
    client: str = ""
    service: str = ""
    uuid: str = ""
    secret: SecretStr = SecretStr("")
    timeout: float = Field(default=30.0, gt=0)
    verify_ssl: bool = True

    model_config = SettingsConfigDict(env_prefix="SIGA_", extra="ignore")

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> GatewaySettings:
        """Build settings from an ``{url, client, service, uuid, secret}`` mapping.

        Keys missing from *options* fall back to the environment.
        """
        return cls(**dict(options))


__all__ = ["GatewaySettings"]
