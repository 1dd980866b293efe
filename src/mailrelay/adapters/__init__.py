"""Adapters layer - infrastructure and framework integrations.

Contains adapter implementations that connect the application to external
systems and frameworks (CLI, configuration, relay, logging).

Contents:
    * :mod:`.config` - Layered configuration, overrides, display, and API key lookup
    * :mod:`.relay` - Streaming multipart delivery to the Mailgun HTTP API
    * :mod:`.logging` - Logging setup with lib_log_rich and the delivery log
    * :mod:`.memory` - In-memory adapters for tests
    * :mod:`.cli` - Click CLI framework integration
"""

from __future__ import annotations

__all__: list[str] = []
