"""In-memory configuration adapters for testing.

Provides configuration functions that satisfy the same Protocols as
production adapters but operate entirely in memory -- no filesystem,
no lib_layered_config file layers.
"""

from __future__ import annotations

from lib_layered_config import Config

from ...domain.enums import OutputFormat
from ..relay.config import RelayConfig, RelaySettings

TEST_DOMAIN = "mg.example.com"
TEST_API_KEY = "key-0123456789abcdef"


def get_config_in_memory(
    *,
    profile: str | None = None,
    start_dir: str | None = None,
) -> Config:
    """Return an empty in-memory Config; every ``[relay]`` key takes its default."""
    return Config({}, {})


def display_config_in_memory(
    config: Config,
    *,
    output_format: OutputFormat = OutputFormat.HUMAN,
    section: str | None = None,
    profile: str | None = None,
) -> None:
    """No-op display -- satisfies the DisplayConfig protocol."""


def load_relay_config_in_memory(settings: RelaySettings) -> RelayConfig:
    """Combine *settings* with fixed test credentials instead of reading a key."""
    return RelayConfig(settings=settings, domain=TEST_DOMAIN, api_key=TEST_API_KEY)


__all__ = [
    "TEST_API_KEY",
    "TEST_DOMAIN",
    "display_config_in_memory",
    "get_config_in_memory",
    "load_relay_config_in_memory",
]
