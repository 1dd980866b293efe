"""Logging adapter - lib_log_rich setup and the delivery log.

Contents:
    * :func:`.setup.init_logging` - Idempotent process logging initialization
    * :func:`.audit.open_delivery_log` - Append-only delivery journal
"""

from __future__ import annotations

from .audit import DeliveryLog, InvocationContext, open_delivery_log
from .setup import init_logging

__all__ = ["DeliveryLog", "InvocationContext", "init_logging", "open_delivery_log"]
