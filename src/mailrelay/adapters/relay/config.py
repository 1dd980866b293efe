"""Relay settings and the immutable per-process relay configuration.

Two models, loaded in two steps so that the delivery log location is known
even when the credentials turn out to be missing:

* :class:`RelaySettings` - the ``[relay]`` section of the layered settings.
* :class:`RelayConfig` - settings plus the resolved sending domain and key,
  built once at startup and passed explicitly into the transport.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any, cast

from lib_layered_config import Config
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from mailrelay.domain.enums import Endpoint
from mailrelay.domain.errors import ConfigurationError

from ..config.credentials import discover_credentials


class RelaySettings(BaseModel):
    """Validated ``[relay]`` section.

    Example:
        >>> settings = RelaySettings()
        >>> settings.api_base_url, settings.timeout, settings.conduit_depth
        ('https://api.mailgun.net/v3', 0.0, 16)
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    api_base_url: str = "https://api.mailgun.net/v3"
    principal: str = "api"
    key_env_var: str = "MAILGUNKEY"
    user_key_file: str = "~/.mailgun.key"
    system_key_file: str = "/etc/mailgun.key"
    delivery_log: Path = Path("/var/log/mailgun.log")
    timeout: float = Field(default=0.0, ge=0)
    conduit_depth: int = Field(default=16, ge=1)

    @field_validator("api_base_url")
    @classmethod
    def _normalise_base_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"api_base_url must be an http(s) URL, got {v!r}")
        return v.rstrip("/")

    @classmethod
    def from_config(cls, config: Config) -> RelaySettings:
        """Validate the ``[relay]`` section of *config*.

        Raises:
            ConfigurationError: When the section is not a table or a value
                fails validation.

        Example:
            >>> RelaySettings.from_config(Config({"relay": {"timeout": 5}}, {})).timeout
            5.0
        """
        section: Any = config.get("relay", default={})
        if not isinstance(section, Mapping):
            raise ConfigurationError(f"invalid [relay] configuration: expected a table, got {type(section).__name__}")
        try:
            return cls.model_validate(dict(cast("Mapping[str, Any]", section)))
        except ValidationError as exc:
            raise ConfigurationError(f"invalid [relay] configuration: {exc}") from exc


class RelayConfig(BaseModel):
    """Everything the transport needs for one process, including the secret.

    Example:
        >>> cfg = RelayConfig(settings=RelaySettings(), domain="mg.example.com", api_key="key-9f2c")
        >>> cfg.endpoint_url(Endpoint.MIME)
        'https://api.mailgun.net/v3/mg.example.com/messages.mime'
        >>> "key-9f2c" in repr(cfg)
        False
    """

    model_config = ConfigDict(frozen=True)

    settings: RelaySettings
    domain: str
    api_key: str

    @property
    def principal(self) -> str:
        return self.settings.principal

    @property
    def http_timeout(self) -> float | None:
        """Timeout for httpx; None when the configured value is 0."""
        return self.settings.timeout or None

    @property
    def conduit_depth(self) -> int:
        return self.settings.conduit_depth

    def endpoint_url(self, endpoint: Endpoint) -> str:
        return f"{self.settings.api_base_url}/{self.domain}/{endpoint.value}"

    def __repr__(self) -> str:
        return f"RelayConfig(domain={self.domain!r}, api_key='[REDACTED]', settings={self.settings!r})"

    def __str__(self) -> str:
        return repr(self)


def load_relay_settings(config: Config) -> RelaySettings:
    """Port adapter around :meth:`RelaySettings.from_config`."""
    return RelaySettings.from_config(config)


def load_relay_config(settings: RelaySettings, *, environ: Mapping[str, str] | None = None) -> RelayConfig:
    """Resolve credentials and combine them with *settings*.

    Raises:
        ConfigurationError: When no credential source is usable.
    """
    credentials = discover_credentials(
        env_var=settings.key_env_var,
        user_file=settings.user_key_file,
        system_file=settings.system_key_file,
        environ=environ,
    )
    return RelayConfig(settings=settings, domain=credentials.domain, api_key=credentials.api_key)


__all__ = [
    "RelayConfig",
    "RelaySettings",
    "load_relay_config",
    "load_relay_settings",
]
