"""Interpretation of the relay API's reply.

A send only succeeds on HTTP 200 with a JSON object body; anything else
is a :class:`~mailrelay.domain.errors.TransportError` that carries the
server's body verbatim so the operator sees what the API said.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

import httpx
import orjson
from pydantic import BaseModel, ConfigDict, ValidationError

from mailrelay.domain.errors import TransportError

SUPPRESSED_MESSAGE = "not sending mail (disabled)"


class RelayReply(BaseModel):
    """Success body: ``{"message": "...", "id": "..."}``."""

    model_config = ConfigDict(extra="ignore")

    message: str = ""
    id: str = ""


@dataclass(frozen=True, slots=True)
class DeliveryResult:
    """Outcome of one accepted (or deliberately suppressed) send.

    Attributes:
        message: Human-readable status from the API.
        id: Message id assigned by the API; empty when suppressed.
        sender: Qualified sender as transmitted.
        recipients: Qualified recipients as transmitted.
        bytes_sent: Encoded payload size, multipart framing included.
        raw: Compacted JSON response body.
        suppressed: True when transmission was disabled.
    """

    message: str
    id: str = ""
    sender: str = ""
    recipients: tuple[str, ...] = field(default_factory=tuple)
    bytes_sent: int = 0
    raw: bytes = b""
    suppressed: bool = False


def _text(body: bytes) -> str:
    return body.decode("utf-8", "replace")


def interpret_response(
    response: httpx.Response,
    *,
    sender: str,
    recipients: Sequence[str],
    bytes_sent: int,
) -> DeliveryResult:
    """Turn an HTTP response into a :class:`DeliveryResult`.

    Raises:
        TransportError: On a non-200 status (detail is the verbatim body),
            or a 200 whose body is not a JSON object with string fields.

    Example:
        >>> ok = httpx.Response(200, content=b'{"id": "<1@mg>", "message": "Queued. Thank you."}')
        >>> result = interpret_response(ok, sender="a@x.org", recipients=["b@x.org"], bytes_sent=42)
        >>> result.message, result.raw
        ('Queued. Thank you.', b'{"id":"<1@mg>","message":"Queued. Thank you."}')
    """
    body = response.content
    if response.status_code != 200:
        raise TransportError(
            f"sending mail: {response.status_code} {response.reason_phrase}".rstrip(),
            status_code=response.status_code,
            detail=_text(body),
        )
    try:
        payload = orjson.loads(body)
        reply = RelayReply.model_validate(payload)
    except (orjson.JSONDecodeError, ValidationError) as exc:
        reason = str(exc).splitlines()[0] if str(exc) else type(exc).__name__
        raise TransportError(
            f"sending mail: invalid JSON response: {reason}",
            status_code=response.status_code,
            detail=_text(body),
        ) from exc
    return DeliveryResult(
        message=reply.message,
        id=reply.id,
        sender=sender,
        recipients=tuple(recipients),
        bytes_sent=bytes_sent,
        raw=orjson.dumps(payload),
    )


def suppressed_result(*, sender: str, recipients: Sequence[str], bytes_sent: int) -> DeliveryResult:
    """Synthetic success for a run with transmission disabled."""
    return DeliveryResult(
        message=SUPPRESSED_MESSAGE,
        sender=sender,
        recipients=tuple(recipients),
        bytes_sent=bytes_sent,
        suppressed=True,
    )


__all__ = [
    "SUPPRESSED_MESSAGE",
    "DeliveryResult",
    "RelayReply",
    "interpret_response",
    "suppressed_result",
]
