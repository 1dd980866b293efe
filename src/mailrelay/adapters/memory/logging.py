"""In-memory logging adapters for testing.

Provides a no-op logging initializer and a delivery-journal spy that
satisfy the InitLogging and OpenDeliveryLog protocols.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from lib_layered_config import Config

from ..logging.audit import InvocationContext, quote, quote_argv
from ..relay.response import DeliveryResult


def init_logging_in_memory(config: Config) -> None:
    """No-op -- satisfies the InitLogging protocol without side effects."""


@dataclass
class DeliveryLogSpy:
    """Captures delivery-journal lines instead of writing a file.

    Attributes:
        records: Every journal line, in order, without the user/argv prefix.
        deliveries: Results passed to :meth:`delivered`.
        opened: Paths the CLI asked to open.
        closed: How many times the journal was closed.

    Example:
        >>> spy = DeliveryLogSpy()
        >>> journal = spy.open(Path("/var/log/mailgun.log"), InvocationContext(user="ops", argv=("mail",)))
        >>> journal.note("invalid command line")
        >>> spy.records
        ['invalid command line']
    """

    records: list[str] = field(default_factory=list)
    deliveries: list[DeliveryResult] = field(default_factory=list)
    opened: list[Path] = field(default_factory=list)
    closed: int = 0
    invocation: InvocationContext | None = None

    def open(self, path: Path, invocation: InvocationContext) -> DeliveryLogSpy:
        self.opened.append(path)
        self.invocation = invocation
        return self

    def note(self, text: str) -> None:
        self.records.append(text)

    def failure(self, error: BaseException) -> None:
        self.note(str(error))

    def delivered(self, result: DeliveryResult) -> None:
        self.deliveries.append(result)
        self.note(
            f"from={quote(result.sender)} to={quote_argv(result.recipients)} "
            f"len={result.bytes_sent} resp={result.raw.decode('utf-8', 'replace')}"
        )

    def close(self) -> None:
        self.closed += 1


__all__ = ["DeliveryLogSpy", "init_logging_in_memory"]
