"""Public package surface exposing the message model, metadata, and configuration.

This module provides the stable public API for the package, routing imports
through the proper architectural layers:
- Domain exports: addresses, messages, and the error hierarchy
- Composition exports: Wired adapter services (configuration, sending)
- Metadata: Package information
"""

from __future__ import annotations

# Metadata
from .__init__conf__ import print_info

# Composition exports (wired adapters)
from .composition import get_config, send_message, send_mime

# Domain exports
from .domain import (
    Address,
    MailRelayError,
    Message,
    RawEnvelope,
    parse_address,
    parse_address_list,
)

__all__ = [
    "Address",
    "MailRelayError",
    "Message",
    "RawEnvelope",
    "get_config",
    "parse_address",
    "parse_address_list",
    "print_info",
    "send_message",
    "send_mime",
]
