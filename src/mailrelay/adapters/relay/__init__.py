"""Relay adapter - streaming delivery through the Mailgun HTTP API.

Contents:
    * :mod:`.config` - ``[relay]`` settings and resolved credentials
    * :mod:`.conduit` - bounded producer/consumer byte channel
    * :mod:`.multipart` - incremental form-data framing
    * :mod:`.response` - reply interpretation and :class:`DeliveryResult`
    * :mod:`.transport` - :func:`send_message` and :func:`send_mime`
    * :mod:`.validation` - post-qualification mailbox checks
"""

from __future__ import annotations

from .conduit import Conduit, ConduitClosed
from .config import RelayConfig, RelaySettings, load_relay_config, load_relay_settings
from .multipart import MultipartEncoder
from .response import SUPPRESSED_MESSAGE, DeliveryResult, RelayReply, interpret_response, suppressed_result
from .transport import Diagnostics, TransportSession, deliver, send_message, send_mime
from .validation import validate_mailbox, validate_mailboxes, validate_message

__all__ = [
    "SUPPRESSED_MESSAGE",
    "Conduit",
    "ConduitClosed",
    "DeliveryResult",
    "Diagnostics",
    "MultipartEncoder",
    "RelayConfig",
    "RelayReply",
    "RelaySettings",
    "TransportSession",
    "deliver",
    "interpret_response",
    "load_relay_config",
    "load_relay_settings",
    "send_message",
    "send_mime",
    "suppressed_result",
    "validate_mailbox",
    "validate_mailboxes",
    "validate_message",
]
