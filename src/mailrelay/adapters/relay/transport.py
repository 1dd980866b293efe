"""Streaming HTTP transport for structured and raw-MIME messages.

Each send runs two sides over one :class:`~.conduit.Conduit`:

* the *producer*, on a ``ThreadPoolExecutor`` worker, frames the form
  fields and streams attachment (or raw message) bytes into the conduit;
* the *consumer*, on the calling thread, hands the conduit to httpx as the
  request body, so the POST is already on the wire while encoding goes on.

:func:`deliver` returns only after both sides are done. A failure on either
side is recorded in a first-wins slot and raised exactly once to the caller;
the producer records its error *before* closing the conduit with it, so a
producer failure that also breaks the upload is always the one reported.

Contents:
    * :class:`TransportSession` - per-send payload description.
    * :func:`send_message` - structured fields to the ``messages`` endpoint.
    * :func:`send_mime` - rendered envelope to the ``messages.mime`` endpoint.
    * :func:`deliver` - run one session.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path

import httpx

from mailrelay.domain.address import Address, apply_local_domain, apply_local_domain_all
from mailrelay.domain.enums import Endpoint
from mailrelay.domain.errors import AttachmentError, TransportError
from mailrelay.domain.message import FormValue, Message, RawEnvelope

from .conduit import Conduit, ConduitClosed
from .config import RelayConfig
from .multipart import MultipartEncoder
from .response import DeliveryResult, interpret_response, suppressed_result
from .validation import validate_mailbox, validate_mailboxes, validate_message

logger = logging.getLogger(__name__)

Diagnostics = Callable[[str], None]
"""Sink for request/response dumps in diagnostic mode."""

_READ_SIZE = 64 * 1024
_MIME_FILENAME = "mime.msg"


def _no_attachments() -> list[Path]:
    return []


@dataclass(slots=True)
class TransportSession:
    """Everything one send writes, in transmission order.

    Created per send and discarded when :func:`deliver` returns.

    Attributes:
        endpoint: Which API endpoint receives the payload.
        sender: Qualified sender, for the delivery record.
        recipients: Qualified recipients, for the delivery record.
        fields: Plain form fields, written first.
        attachments: Files streamed as ``attachment`` parts, in order.
        envelope: Raw message streamed as the single ``message`` part.
    """

    endpoint: Endpoint
    sender: Address
    recipients: list[Address]
    fields: list[tuple[str, FormValue]]
    attachments: list[Path] = field(default_factory=_no_attachments)
    envelope: RawEnvelope | None = None
    encoder: MultipartEncoder = field(default_factory=MultipartEncoder)

    @property
    def content_type(self) -> str:
        return self.encoder.content_type

    def write_payload(self, conduit: Conduit) -> None:
        """Encode every part into *conduit*.

        Raises:
            AttachmentError: An attachment cannot be opened or read.
            ConduitClosed: The consumer stopped reading.
        """
        for name, value in self.fields:
            conduit.write(self.encoder.field(name, value))
        for path in self.attachments:
            self._write_attachment(conduit, path)
        if self.envelope is not None:
            conduit.write(self.encoder.file_header("message", _MIME_FILENAME))
            for chunk in self.envelope.iter_bytes():
                conduit.write(chunk)
            conduit.write(self.encoder.file_trailer())
        conduit.write(self.encoder.closing())

    def _write_attachment(self, conduit: Conduit, path: Path) -> None:
        try:
            handle = path.open("rb")
        except OSError as exc:
            raise AttachmentError(f"attaching file: {exc}") from exc
        with handle:
            conduit.write(self.encoder.file_header("attachment", path.name))
            while True:
                try:
                    chunk = handle.read(_READ_SIZE)
                except OSError as exc:
                    raise AttachmentError(f"attaching file: {exc}") from exc
                if not chunk:
                    break
                conduit.write(chunk)
        conduit.write(self.encoder.file_trailer())


class _FirstFailure:
    """Thread-safe slot that keeps only the first recorded error."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._error: Exception | None = None

    def record(self, error: Exception) -> Exception:
        """Record *error* unless another is already held; return the winner."""
        with self._lock:
            if self._error is None:
                self._error = error
            return self._error


def _produce(session: TransportSession, conduit: Conduit, failures: _FirstFailure) -> None:
    try:
        session.write_payload(conduit)
    except ConduitClosed:
        logger.debug("Payload reader closed before encoding finished")
        return
    except Exception as exc:
        failures.record(exc)
        conduit.close(exc)
        return
    conduit.close()


def _dump_request(url: str, content_type: str, body: bytes) -> str:
    target = httpx.URL(url)
    head = (
        f"POST {target.raw_path.decode('ascii')} HTTP/1.1\r\n"
        f"Host: {target.host}\r\n"
        "Authorization: Basic [REDACTED]\r\n"
        f"Content-Length: {len(body)}\r\n"
        f"Content-Type: {content_type}\r\n\r\n"
    )
    return head + body.decode("utf-8", "replace") + "\n"


def _dump_response(response: httpx.Response) -> str:
    lines = [f"HTTP/1.1 {response.status_code} {response.reason_phrase}".rstrip()]
    lines.extend(f"{name}: {value}" for name, value in response.headers.items())
    return "\r\n".join(lines) + "\r\n\r\n" + response.content.decode("utf-8", "replace") + "\n"


def _consume(
    session: TransportSession,
    conduit: Conduit,
    config: RelayConfig,
    *,
    dry_run: bool,
    diagnostics: Diagnostics | None,
    transport: httpx.BaseTransport | None,
) -> DeliveryResult:
    url = config.endpoint_url(session.endpoint)
    sender = str(session.sender)
    recipients = [str(a) for a in session.recipients]

    content: bytes | None = None
    if diagnostics is not None:
        content = b"".join(conduit)
        diagnostics(_dump_request(url, session.content_type, content))

    if dry_run:
        if content is None:
            for _ in conduit:
                pass
        logger.info("Transmission disabled, payload discarded", extra={"bytes_sent": conduit.bytes_transferred})
        return suppressed_result(sender=sender, recipients=recipients, bytes_sent=conduit.bytes_transferred)

    with httpx.Client(timeout=config.http_timeout, transport=transport) as client:
        try:
            response = client.post(
                url,
                content=content if content is not None else iter(conduit),
                headers={"Content-Type": session.content_type},
                auth=(config.principal, config.api_key),
            )
        except httpx.HTTPError as exc:
            raise TransportError(f"sending mail: {exc}") from exc

    if diagnostics is not None:
        diagnostics(_dump_response(response))
    return interpret_response(
        response,
        sender=sender,
        recipients=recipients,
        bytes_sent=conduit.bytes_transferred,
    )


def deliver(
    session: TransportSession,
    config: RelayConfig,
    *,
    dry_run: bool = False,
    diagnostics: Diagnostics | None = None,
    transport: httpx.BaseTransport | None = None,
) -> DeliveryResult:
    """Encode and transmit *session*, blocking until both sides finish.

    When the HTTP side fails first, the reader end of the conduit is closed
    so a producer blocked on a conduit write stops at once. A producer
    blocked inside its own source read (a raw envelope whose body is still
    arriving on an interactive terminal) is only stopped by its next write,
    so the error surfaces after that read returns.

    Args:
        session: Payload description.
        config: Endpoint, credentials and conduit depth.
        dry_run: Encode and count the payload but skip the network call.
        diagnostics: When set, receives the full request before sending
            and the full response afterwards.
        transport: httpx transport override (tests use ``MockTransport``).

    Raises:
        AttachmentError: An attachment could not be read.
        TransportError: Network failure, non-200 status, or malformed reply.
    """
    conduit = Conduit(depth=config.conduit_depth)
    failures = _FirstFailure()
    logger.info(
        "Relaying message",
        extra={
            "endpoint": session.endpoint.value,
            "recipients": len(session.recipients),
            "attachments": len(session.attachments),
            "dry_run": dry_run,
        },
    )
    with ThreadPoolExecutor(max_workers=1, thread_name_prefix="mailrelay-encoder") as pool:
        pool.submit(_produce, session, conduit, failures)
        try:
            result = _consume(
                session,
                conduit,
                config,
                dry_run=dry_run,
                diagnostics=diagnostics,
                transport=transport,
            )
        except Exception as exc:
            first = failures.record(exc)
            if first is exc:
                raise
            raise first from None
        finally:
            conduit.close_reader()
    logger.info(
        "Relay accepted message",
        extra={"id": result.id, "bytes_sent": result.bytes_sent, "suppressed": result.suppressed},
    )
    return result


def send_message(
    message: Message,
    config: RelayConfig,
    *,
    dry_run: bool = False,
    diagnostics: Diagnostics | None = None,
    transport: httpx.BaseTransport | None = None,
) -> DeliveryResult:
    """Send a structured message to the ``messages`` endpoint.

    Every address is qualified with the configured domain and validated
    before anything is encoded.

    Raises:
        AddressParseError: A qualified address is still not a mailbox.
        AttachmentError: An attachment could not be read.
        TransportError: The API exchange failed.
    """
    qualified = message.qualified(config.domain)
    validate_message(qualified)
    session = TransportSession(
        endpoint=Endpoint.MESSAGES,
        sender=qualified.sender,
        recipients=qualified.recipients(),
        fields=qualified.form_fields(),
        attachments=list(qualified.attachments),
    )
    return deliver(session, config, dry_run=dry_run, diagnostics=diagnostics, transport=transport)


def send_mime(
    envelope: RawEnvelope,
    *,
    sender: Address,
    recipients: Sequence[Address],
    config: RelayConfig,
    dry_run: bool = False,
    diagnostics: Diagnostics | None = None,
    transport: httpx.BaseTransport | None = None,
) -> DeliveryResult:
    """Send a rendered envelope to the ``messages.mime`` endpoint.

    Every recipient becomes a ``to`` field; the envelope is streamed as the
    ``message`` file part.
    """
    qualified_sender = apply_local_domain(sender, config.domain)
    qualified = apply_local_domain_all(recipients, config.domain)
    validate_mailbox(qualified_sender, field="From")
    validate_mailboxes(qualified, field="To")
    session = TransportSession(
        endpoint=Endpoint.MIME,
        sender=qualified_sender,
        recipients=qualified,
        fields=[("to", str(a)) for a in qualified],
        envelope=envelope,
    )
    return deliver(session, config, dry_run=dry_run, diagnostics=diagnostics, transport=transport)


__all__ = [
    "Diagnostics",
    "TransportSession",
    "deliver",
    "send_message",
    "send_mime",
]
