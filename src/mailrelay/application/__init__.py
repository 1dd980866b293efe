"""Application layer - port definitions.

Contents:
    * :mod:`.ports` - Callable Protocol definitions for adapter functions
"""

from __future__ import annotations

from .ports import (
    DeliveryJournal,
    Diagnostics,
    DisplayConfig,
    GetConfig,
    InitLogging,
    LoadRelayConfig,
    LoadRelaySettings,
    OpenDeliveryLog,
    SendMessage,
    SendMime,
)

__all__ = [
    "DeliveryJournal",
    "Diagnostics",
    "DisplayConfig",
    "GetConfig",
    "InitLogging",
    "LoadRelayConfig",
    "LoadRelaySettings",
    "OpenDeliveryLog",
    "SendMessage",
    "SendMime",
]
