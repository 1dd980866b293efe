"""In-memory relay adapter for testing.

Provides send functions that satisfy the SendMessage and SendMime protocols
but make no HTTP request. Address qualification and mailbox validation run
exactly as in production so CLI tests see the same failures.

Contents:
    * :class:`RelaySpy` - Captures relay calls for test assertions.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

import orjson

from ...domain.address import Address, apply_local_domain, apply_local_domain_all
from ...domain.message import Message, RawEnvelope
from ..relay.config import RelayConfig
from ..relay.response import DeliveryResult, suppressed_result
from ..relay.transport import Diagnostics
from ..relay.validation import validate_mailbox, validate_mailboxes, validate_message

ACCEPTED_MESSAGE = "Queued. Thank you."


def _empty_call_list() -> list[dict[str, Any]]:
    """Create an empty typed list for call records."""
    return []


@dataclass
class RelaySpy:
    """Captures relay operations for test assertions.

    Each test should create its own RelaySpy instance to avoid cross-test pollution.

    Attributes:
        messages: Captured :meth:`send_message` calls (qualified message included).
        envelopes: Captured :meth:`send_mime` calls; ``payload`` holds the fully
            rendered envelope bytes.
        message_id: Id reported for accepted messages.
        raise_exception: When set, send operations raise this exception after
            recording the call.

    Example:
        >>> from mailrelay.adapters.relay.config import RelaySettings
        >>> spy = RelaySpy()
        >>> cfg = RelayConfig(settings=RelaySettings(), domain="mg.example.com", api_key="key-1")
        >>> result = spy.send_message(Message(sender=Address("ops"), to=[Address("dev")], body="hi"), cfg)
        >>> result.sender, result.recipients
        ('ops@mg.example.com', ('dev@mg.example.com',))
    """

    messages: list[dict[str, Any]] = field(default_factory=_empty_call_list)
    envelopes: list[dict[str, Any]] = field(default_factory=_empty_call_list)
    message_id: str = "<20261018091402.1.A1B2@mg.example.com>"
    raise_exception: Exception | None = None

    def clear(self) -> None:
        """Reset captured data for next test."""
        self.messages.clear()
        self.envelopes.clear()
        self.raise_exception = None

    def _accepted(self, sender: Address, recipients: Sequence[Address], size: int, dry_run: bool) -> DeliveryResult:
        rendered = [str(a) for a in recipients]
        if dry_run:
            return suppressed_result(sender=str(sender), recipients=rendered, bytes_sent=size)
        payload = {"id": self.message_id, "message": ACCEPTED_MESSAGE}
        return DeliveryResult(
            message=ACCEPTED_MESSAGE,
            id=self.message_id,
            sender=str(sender),
            recipients=tuple(rendered),
            bytes_sent=size,
            raw=orjson.dumps(payload),
        )

    def send_message(
        self,
        message: Message,
        config: RelayConfig,
        *,
        dry_run: bool = False,
        diagnostics: Diagnostics | None = None,
    ) -> DeliveryResult:
        """Qualify, validate and record *message*.

        Raises:
            AddressParseError: When a qualified address is not a mailbox.
            Exception: If raise_exception is set, raises that exception.
        """
        qualified = message.qualified(config.domain)
        validate_message(qualified)
        body = qualified.body.encode("utf-8") if isinstance(qualified.body, str) else qualified.body
        self.messages.append(
            {
                "message": qualified,
                "config": config,
                "dry_run": dry_run,
                "diagnostics": diagnostics is not None,
            }
        )
        if self.raise_exception is not None:
            raise self.raise_exception
        return self._accepted(qualified.sender, qualified.recipients(), len(body), dry_run)

    def send_mime(
        self,
        envelope: RawEnvelope,
        *,
        sender: Address,
        recipients: Sequence[Address],
        config: RelayConfig,
        dry_run: bool = False,
        diagnostics: Diagnostics | None = None,
    ) -> DeliveryResult:
        """Qualify, validate and record a raw envelope, draining its body.

        Raises:
            AddressParseError: When a qualified address is not a mailbox.
            Exception: If raise_exception is set, raises that exception.
        """
        qualified_sender = apply_local_domain(sender, config.domain)
        qualified = apply_local_domain_all(recipients, config.domain)
        validate_mailbox(qualified_sender, field="From")
        validate_mailboxes(qualified, field="To")
        payload = b"".join(envelope.iter_bytes())
        self.envelopes.append(
            {
                "sender": qualified_sender,
                "recipients": qualified,
                "headers": envelope.header_lines(),
                "payload": payload,
                "config": config,
                "dry_run": dry_run,
                "diagnostics": diagnostics is not None,
            }
        )
        if self.raise_exception is not None:
            raise self.raise_exception
        return self._accepted(qualified_sender, qualified, len(payload), dry_run)


__all__ = ["ACCEPTED_MESSAGE", "RelaySpy"]
