"""Address resolution for loosely formatted sender and recipient text.

Command-line users type addresses in many informal shapes. Bare mailboxes
(``root``, ``ops@example.com``) are accepted as-is, the common
``Name (comment) <addr>`` form that strict grammars reject is recovered by
hand, and everything else goes through the standard library's RFC 5322
header parser.

Contents:
    * :class:`Address` - display name plus mailbox.
    * :func:`parse_address` - parse one free-form address.
    * :func:`parse_address_list` - parse a header-style address list.
    * :func:`apply_local_domain` - qualify a domain-less mailbox.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable
from dataclasses import dataclass
from email import errors, policy
from email.utils import formataddr

from .errors import AddressParseError

_SPECIALS = frozenset('<>()" \t\r\n')


@dataclass(frozen=True, slots=True)
class Address:
    """A mailbox with an optional display name.

    Example:
        >>> str(Address(mailbox="ops@example.com"))
        'ops@example.com'
        >>> str(Address(display_name="Ops Team", mailbox="ops@example.com"))
        'Ops Team <ops@example.com>'
    """

    mailbox: str
    display_name: str = ""

    def __str__(self) -> str:
        return formataddr((self.display_name, self.mailbox))

    @property
    def is_qualified(self) -> bool:
        return "@" in self.mailbox


def parse_address(text: str, *, field: str | None = None) -> Address:
    """Parse a single free-form address.

    Args:
        text: Address text as typed by a user or found in a header.
        field: Field name used in the error message when parsing fails.

    Returns:
        The parsed address.

    Raises:
        AddressParseError: When the strict parser rejects the text.

    Example:
        >>> parse_address("root")
        Address(mailbox='root', display_name='')
        >>> parse_address("Jane Doe (ops) <jane@example.com>")
        Address(mailbox='jane@example.com', display_name='Jane Doe (ops)')
        >>> parse_address('"Doe, Jane" <jane@example.com>')
        Address(mailbox='jane@example.com', display_name='Doe, Jane')
    """
    if not _SPECIALS.intersection(text):
        return Address(mailbox=text)
    if text.endswith(">") and not text.startswith('"'):
        bracket = text.rfind("<")
        if bracket >= 0:
            return Address(mailbox=text[bracket + 1 : -1], display_name=text[:bracket].strip())
    addresses = _parse_strict(text, field=field)
    if len(addresses) != 1:
        raise AddressParseError(f"expected single address, got {len(addresses)}", field=field)
    return addresses[0]


def parse_address_list(text: str, *, field: str | None = None) -> list[Address]:
    """Parse a comma-separated address list as found in To/Cc/Bcc headers.

    A value that the strict list grammar rejects is retried as a single
    informal address, so ``Name (comment) <addr>`` is accepted here too.
    Group syntax contributes its members; an empty group contributes none.

    Raises:
        AddressParseError: When neither the list nor the single-address
            interpretation succeeds.

    Example:
        >>> [a.mailbox for a in parse_address_list("a@example.com, B <b@example.com>")]
        ['a@example.com', 'b@example.com']
        >>> parse_address_list("undisclosed-recipients:;")
        []
    """
    if not text.strip():
        return []
    try:
        return _parse_strict(text, field=field)
    except AddressParseError:
        if "," in text:
            raise
        return [parse_address(text.strip(), field=field)]


def _parse_strict(text: str, *, field: str | None) -> list[Address]:
    """Run the RFC 5322 address-list parser and reject anything defective.

    The stdlib parser raises bare ``IndexError`` or ``AttributeError`` on
    some truncated input instead of recording a defect; those are reported
    as parse errors too.
    """
    try:
        header = policy.default.header_factory("To", text)
        defects = list(header.defects)
        items = header.addresses
    except (errors.HeaderParseError, IndexError, AttributeError) as exc:
        raise AddressParseError(f"{text!r}: {exc}", field=field) from exc
    if defects:
        raise AddressParseError(str(defects[0]), field=field)
    parsed: list[Address] = []
    for item in items:
        if not item.addr_spec or item.addr_spec == "<>":
            raise AddressParseError(f"no address in {text!r}", field=field)
        parsed.append(Address(mailbox=item.addr_spec, display_name=item.display_name))
    if not parsed and ":" not in text:
        raise AddressParseError(f"no address in {text!r}", field=field)
    return parsed


def apply_local_domain(address: Address, domain: str) -> Address:
    """Qualify a domain-less mailbox with the configured sending domain.

    Addresses that already contain ``@`` are returned unchanged.

    Example:
        >>> apply_local_domain(Address(mailbox="root"), "mg.example.com").mailbox
        'root@mg.example.com'
        >>> apply_local_domain(Address(mailbox="a@b.org"), "mg.example.com").mailbox
        'a@b.org'
    """
    if address.is_qualified:
        return address
    return dataclasses.replace(address, mailbox=f"{address.mailbox}@{domain}")


def apply_local_domain_all(addresses: Iterable[Address], domain: str) -> list[Address]:
    """Qualify every address in *addresses*."""
    return [apply_local_domain(a, domain) for a in addresses]


__all__ = [
    "Address",
    "apply_local_domain",
    "apply_local_domain_all",
    "parse_address",
    "parse_address_list",
]
