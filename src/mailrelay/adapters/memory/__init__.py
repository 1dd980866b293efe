"""In-memory adapter implementations for testing.

Provides lightweight implementations of all application ports that operate
entirely in memory -- no key files, no HTTP, no logging framework.

Contents:
    * :mod:`.config` - In-memory configuration adapters
    * :mod:`.logging` - No-op logging initializer and DeliveryLogSpy
    * :mod:`.relay` - In-memory relay adapter (RelaySpy class)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .config import (
    TEST_API_KEY,
    TEST_DOMAIN,
    display_config_in_memory,
    get_config_in_memory,
    load_relay_config_in_memory,
)
from .logging import DeliveryLogSpy, init_logging_in_memory
from .relay import ACCEPTED_MESSAGE, RelaySpy

# Static conformance assertions
if TYPE_CHECKING:
    from mailrelay.application.ports import (
        DisplayConfig,
        GetConfig,
        InitLogging,
        LoadRelayConfig,
        OpenDeliveryLog,
        SendMessage,
        SendMime,
    )

    _assert_get_config: GetConfig = get_config_in_memory
    _assert_display_config: DisplayConfig = display_config_in_memory
    _assert_init_logging: InitLogging = init_logging_in_memory
    _assert_load_relay_config: LoadRelayConfig = load_relay_config_in_memory
    _assert_open_delivery_log: OpenDeliveryLog = DeliveryLogSpy().open
    _assert_send_message: SendMessage = RelaySpy().send_message
    _assert_send_mime: SendMime = RelaySpy().send_mime

__all__ = [
    "ACCEPTED_MESSAGE",
    "TEST_API_KEY",
    "TEST_DOMAIN",
    "DeliveryLogSpy",
    "RelaySpy",
    "display_config_in_memory",
    "get_config_in_memory",
    "init_logging_in_memory",
    "load_relay_config_in_memory",
]
