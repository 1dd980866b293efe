"""Mailbox validation applied after local-domain qualification.

Uses ``btx_lib_mail`` and re-raises its ``ValueError`` as the domain's
:class:`~mailrelay.domain.errors.AddressParseError` naming the field.
"""

from __future__ import annotations

from collections.abc import Iterable

from btx_lib_mail import validate_email_address

from mailrelay.domain.address import Address
from mailrelay.domain.errors import AddressParseError
from mailrelay.domain.message import Message


def validate_mailbox(address: Address, *, field: str) -> None:
    """Validate the mailbox part of *address*.

    Raises:
        AddressParseError: When the mailbox is not a deliverable address.

    Example:
        >>> validate_mailbox(Address("ops@example.com"), field="To")
        >>> validate_mailbox(Address("ops"), field="To")  # doctest: +IGNORE_EXCEPTION_DETAIL
        Traceback (most recent call last):
        ...
        AddressParseError: cannot parse To: address: ...
    """
    try:
        validate_email_address(address.mailbox)
    except ValueError as exc:
        raise AddressParseError(str(exc) or address.mailbox, field=field) from exc


def validate_mailboxes(addresses: Iterable[Address], *, field: str) -> None:
    for address in addresses:
        validate_mailbox(address, field=field)


def validate_message(message: Message) -> None:
    """Validate sender and every recipient class of *message*."""
    validate_mailbox(message.sender, field="From")
    validate_mailboxes(message.to, field="To")
    validate_mailboxes(message.cc, field="Cc")
    validate_mailboxes(message.bcc, field="Bcc")


__all__ = ["validate_mailbox", "validate_mailboxes", "validate_message"]
