"""Domain-specific exceptions for typed error handling at boundaries.

Every failure of a relay invocation is terminal: there is no retry and no
partial delivery. Command handlers catch :class:`MailRelayError` at the CLI
boundary, log it with process context, and exit with a uniform status.
"""

from __future__ import annotations


class MailRelayError(Exception):
    """Root of all relay failures.

    Example:
        >>> issubclass(TransportError, MailRelayError)
        True
    """


class ConfigurationError(MailRelayError):
    """Missing, invalid, or incomplete configuration.

    Raised when the API key cannot be found in any credential source, when
    the first credential source found is malformed, or when the ``[relay]``
    settings section fails validation.

    Example:
        >>> err = ConfigurationError("malformed mailgun API key in $MAILGUNKEY")
        >>> str(err)
        'malformed mailgun API key in $MAILGUNKEY'
    """


class AddressParseError(MailRelayError, ValueError):
    """Malformed sender or recipient text.

    Inherits from ValueError so generic ``except ValueError`` handlers
    (Click parameter callbacks, pydantic validators) continue to catch it.

    Attributes:
        field: Name of the offending field (``To``, ``From``, ``Cc`` ...),
            or None when parsing a standalone address.

    Example:
        >>> err = AddressParseError("missing @ in addr-spec", field="To")
        >>> str(err)
        'cannot parse To: address: missing @ in addr-spec'
        >>> isinstance(err, ValueError)
        True
    """

    def __init__(self, reason: str, *, field: str | None = None) -> None:
        self.reason = reason
        self.field = field
        if field:
            super().__init__(f"cannot parse {field}: address: {reason}")
        else:
            super().__init__(reason)


class InvocationError(MailRelayError):
    """Command-line arguments that select an unsupported mode or lack a value.

    Example:
        >>> str(InvocationError("only sendmail -bm is supported"))
        'only sendmail -bm is supported'
    """


class IngestError(MailRelayError):
    """Reading or structuring the input stream failed."""


class NoRecipientsError(MailRelayError):
    """Recipient extraction produced no destination.

    Example:
        >>> str(NoRecipientsError())
        'no recipients found in message'
    """

    def __init__(self, message: str = "no recipients found in message") -> None:
        super().__init__(message)


class AttachmentError(MailRelayError):
    """A named attachment could not be opened or read mid-stream."""


class TransportError(MailRelayError):
    """The HTTP exchange with the relay API failed.

    Covers network failures, non-200 statuses, and malformed success bodies.

    Attributes:
        status_code: HTTP status when a response was received, else None.
        detail: Verbatim server response text when available.

    Example:
        >>> err = TransportError("sending mail: 500 Internal Server Error", status_code=500, detail="boom")
        >>> str(err)
        'sending mail: 500 Internal Server Error\\nboom'
        >>> err.status_code
        500
    """

    def __init__(self, message: str, *, status_code: int | None = None, detail: str = "") -> None:
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"{message}\n{detail}" if detail else message)


__all__ = [
    "AddressParseError",
    "AttachmentError",
    "ConfigurationError",
    "IngestError",
    "InvocationError",
    "MailRelayError",
    "NoRecipientsError",
    "TransportError",
]
