"""Composition root wiring adapters to application ports."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..adapters.config.display import display_config

# Configuration services
from ..adapters.config.loader import get_config

# Logging services
from ..adapters.logging.audit import open_delivery_log
from ..adapters.logging.setup import init_logging

# Relay services
from ..adapters.relay.config import load_relay_config, load_relay_settings
from ..adapters.relay.transport import send_message, send_mime

# Static conformance assertions: pyright verifies that each adapter function
# structurally satisfies its corresponding Protocol at type-check time.
if TYPE_CHECKING:
    from ..adapters.memory import DeliveryLogSpy, RelaySpy
    from ..application.ports import (
        DisplayConfig,
        GetConfig,
        InitLogging,
        LoadRelayConfig,
        LoadRelaySettings,
        OpenDeliveryLog,
        SendMessage,
        SendMime,
    )

    _assert_get_config: GetConfig = get_config
    _assert_display_config: DisplayConfig = display_config
    _assert_init_logging: InitLogging = init_logging
    _assert_load_relay_settings: LoadRelaySettings = load_relay_settings
    _assert_load_relay_config: LoadRelayConfig = load_relay_config
    _assert_open_delivery_log: OpenDeliveryLog = open_delivery_log
    _assert_send_message: SendMessage = send_message
    _assert_send_mime: SendMime = send_mime


@dataclass(frozen=True, slots=True)
class AppServices:
    """Frozen container holding all application port implementations."""

    get_config: GetConfig
    display_config: DisplayConfig
    init_logging: InitLogging
    load_relay_settings: LoadRelaySettings
    load_relay_config: LoadRelayConfig
    open_delivery_log: OpenDeliveryLog
    send_message: SendMessage
    send_mime: SendMime


def build_production() -> AppServices:
    """Wire production adapters into an AppServices container."""
    return AppServices(
        get_config=get_config,
        display_config=display_config,
        init_logging=init_logging,
        load_relay_settings=load_relay_settings,
        load_relay_config=load_relay_config,
        open_delivery_log=open_delivery_log,
        send_message=send_message,
        send_mime=send_mime,
    )


def build_testing(*, relay: RelaySpy | None = None, journal: DeliveryLogSpy | None = None) -> AppServices:
    """Wire in-memory adapters into an AppServices container.

    Args:
        relay: Optional RelaySpy for capturing sends. When None, a fresh
            spy is created. Pass your own spy to assert on captured sends.
        journal: Optional DeliveryLogSpy for capturing delivery-log lines.

    Returns:
        AppServices container with in-memory adapters. Settings validation
        uses the production loader, which never touches the filesystem.
    """
    from ..adapters.memory import (
        DeliveryLogSpy,
        RelaySpy,
        display_config_in_memory,
        get_config_in_memory,
        init_logging_in_memory,
        load_relay_config_in_memory,
    )

    relay_spy = relay if relay is not None else RelaySpy()
    journal_spy = journal if journal is not None else DeliveryLogSpy()

    return AppServices(
        get_config=get_config_in_memory,
        display_config=display_config_in_memory,
        init_logging=init_logging_in_memory,
        load_relay_settings=load_relay_settings,
        load_relay_config=load_relay_config_in_memory,
        open_delivery_log=journal_spy.open,
        send_message=relay_spy.send_message,
        send_mime=relay_spy.send_mime,
    )


__all__ = [
    # Configuration
    "get_config",
    "display_config",
    "load_relay_settings",
    "load_relay_config",
    # Logging
    "init_logging",
    "open_delivery_log",
    # Relay
    "send_message",
    "send_mime",
    # Composition
    "AppServices",
    "build_production",
    "build_testing",
]
