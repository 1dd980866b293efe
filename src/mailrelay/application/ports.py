"""Application ports: callable Protocol definitions for adapter functions.

Each Protocol class defines a ``__call__`` method whose signature exactly
matches the corresponding adapter function.  Existing module-level functions
satisfy these protocols automatically via structural subtyping (PEP 544).

System Role:
    Sits between domain and adapters.  Infrastructure types (``Config``,
    ``RelayConfig``, ``DeliveryResult``) are imported under ``TYPE_CHECKING``
    only so that the layer boundaries hold at runtime.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from ..domain.address import Address
from ..domain.enums import OutputFormat
from ..domain.message import Message, RawEnvelope

if TYPE_CHECKING:
    from lib_layered_config import Config

    from ..adapters.logging.audit import InvocationContext
    from ..adapters.relay.config import RelayConfig, RelaySettings
    from ..adapters.relay.response import DeliveryResult

Diagnostics = Callable[[str], None]


class GetConfig(Protocol):
    """Load layered configuration with application defaults."""

    def __call__(self, *, profile: str | None = ..., start_dir: str | None = ...) -> Config: ...


class DisplayConfig(Protocol):
    """Display the provided configuration in the requested format."""

    def __call__(
        self, config: Config, *, output_format: OutputFormat = ..., section: str | None = ..., profile: str | None = ...
    ) -> None: ...


class InitLogging(Protocol):
    """Initialize lib_log_rich runtime with the provided configuration."""

    def __call__(self, config: Config) -> None: ...


class LoadRelaySettings(Protocol):
    """Validate the ``[relay]`` section of the layered configuration."""

    def __call__(self, config: Config) -> RelaySettings: ...


class LoadRelayConfig(Protocol):
    """Resolve credentials and combine them with relay settings."""

    def __call__(self, settings: RelaySettings) -> RelayConfig: ...


class DeliveryJournal(Protocol):
    """Append-only record of delivery outcomes for one invocation."""

    def note(self, text: str) -> None: ...

    def failure(self, error: BaseException) -> None: ...

    def delivered(self, result: DeliveryResult) -> None: ...

    def close(self) -> None: ...


class OpenDeliveryLog(Protocol):
    """Open the delivery journal at the configured location."""

    def __call__(self, path: Path, invocation: InvocationContext) -> DeliveryJournal: ...


class SendMessage(Protocol):
    """Send a structured message to the ``messages`` endpoint."""

    def __call__(
        self,
        message: Message,
        config: RelayConfig,
        *,
        dry_run: bool = ...,
        diagnostics: Diagnostics | None = ...,
    ) -> DeliveryResult: ...


class SendMime(Protocol):
    """Send a rendered envelope to the ``messages.mime`` endpoint."""

    def __call__(
        self,
        envelope: RawEnvelope,
        *,
        sender: Address,
        recipients: Sequence[Address],
        config: RelayConfig,
        dry_run: bool = ...,
        diagnostics: Diagnostics | None = ...,
    ) -> DeliveryResult: ...


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
