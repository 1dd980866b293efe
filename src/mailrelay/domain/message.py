"""Outbound message models: structured :class:`Message` and :class:`RawEnvelope`.

The structured model backs the mail-compatible command (fields are posted
individually); the raw envelope backs the sendmail-compatible command
(a rendered header block plus the streamed body is posted as one part).
Neither model ever carries a ``Bcc`` header: blind-copy recipients exist only
as API recipient parameters.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path

from .address import Address, apply_local_domain, apply_local_domain_all, parse_address_list
from .headers import HeaderBlock

FormValue = str | bytes
"""Value type of a multipart form field."""


def _empty_addresses() -> list[Address]:
    return []


@dataclass(slots=True)
class Message:
    """A structured mail message to be sent.

    Example:
        >>> msg = Message(sender=Address("me"), to=[Address("you")], bcc=[Address("boss@example.com")])
        >>> [str(a) for a in msg.qualified("mg.example.com").recipients()]
        ['you@mg.example.com', 'boss@example.com']
    """

    sender: Address
    to: list[Address] = field(default_factory=_empty_addresses)
    cc: list[Address] = field(default_factory=_empty_addresses)
    bcc: list[Address] = field(default_factory=_empty_addresses)
    subject: str = ""
    body: FormValue = b""
    attachments: list[Path] = field(default_factory=list)

    def recipients(self) -> list[Address]:
        """All destinations in to, cc, bcc order."""
        return [*self.to, *self.cc, *self.bcc]

    def qualified(self, domain: str) -> Message:
        """Return a copy with the local domain applied to every address."""
        return dataclasses.replace(
            self,
            sender=apply_local_domain(self.sender, domain),
            to=apply_local_domain_all(self.to, domain),
            cc=apply_local_domain_all(self.cc, domain),
            bcc=apply_local_domain_all(self.bcc, domain),
        )

    def form_fields(self) -> list[tuple[str, FormValue]]:
        """Form fields in transmission order: from, to*, cc*, bcc*, subject, text.

        Example:
            >>> msg = Message(sender=Address("a@x.org"), to=[Address("b@x.org")], body="hi")
            >>> msg.form_fields()
            [('from', 'a@x.org'), ('to', 'b@x.org'), ('text', 'hi')]
        """
        fields: list[tuple[str, FormValue]] = [("from", str(self.sender))]
        fields.extend(("to", str(a)) for a in self.to)
        fields.extend(("cc", str(a)) for a in self.cc)
        fields.extend(("bcc", str(a)) for a in self.bcc)
        if self.subject:
            fields.append(("subject", self.subject))
        fields.append(("text", self.body))
        return fields


@dataclass(slots=True)
class HeaderFields:
    """Subject and recipients harvested from an input header block."""

    subject: str | None = None
    to: list[Address] = field(default_factory=_empty_addresses)
    cc: list[Address] = field(default_factory=_empty_addresses)
    bcc: list[Address] = field(default_factory=_empty_addresses)
    ignored: list[str] = field(default_factory=list)

    def recipients(self) -> list[Address]:
        return [*self.to, *self.cc, *self.bcc]


def extract_header_fields(headers: HeaderBlock, *, include_subject: bool = True) -> HeaderFields:
    """Harvest ``Subject``, ``To``, ``Cc`` and ``Bcc`` from *headers*.

    Field names match case-insensitively. The subject is taken verbatim and
    the last occurrence wins. Recipient fields are parsed as address lists.
    Any other field, and any line the lenient parse rejected, is reported
    in :attr:`HeaderFields.ignored` as it would be written.

    Raises:
        AddressParseError: When a recipient field cannot be parsed; the error
            names the field.

    Example:
        >>> block = HeaderBlock([("to", "a@x.org, b@x.org"), ("BCC", "c@x.org"), ("Subject", "hi")])
        >>> found = extract_header_fields(block)
        >>> found.subject, [a.mailbox for a in found.recipients()]
        ('hi', ['a@x.org', 'b@x.org', 'c@x.org'])
    """
    found = HeaderFields()
    targets = {"To": found.to, "Cc": found.cc, "Bcc": found.bcc}
    for name, value in headers:
        if name in targets:
            targets[name].extend(parse_address_list(value, field=name))
        elif name == "Subject" and include_subject:
            found.subject = value
        else:
            found.ignored.append(f"{name}: {value}")
    found.ignored.extend(headers.rejected)
    return found


class RawEnvelope:
    """Rendered header block plus a lazily streamed body.

    Any ``Bcc`` field is dropped on construction. A ``From`` field is added
    from *sender* when the headers carry none.

    Example:
        >>> env = RawEnvelope(HeaderBlock([("To", "a@x.org"), ("Bcc", "b@x.org")]), [b"hi\\n"],
        ...                   sender=Address("me@x.org"))
        >>> env.header_lines()
        [('From', 'me@x.org'), ('To', 'a@x.org')]
        >>> b"".join(env.iter_bytes())
        b'From: me@x.org\\nTo: a@x.org\\n\\nhi\\n'
    """

    def __init__(self, headers: HeaderBlock, body: Iterable[bytes], *, sender: Address | None = None) -> None:
        self._headers = headers.copy()
        self._headers.remove("Bcc")
        if sender is not None and "From" not in self._headers:
            self._headers.add("From", str(sender))
        self._body = body

    def header_lines(self) -> list[tuple[str, str]]:
        return self._headers.sorted_fields()

    def iter_bytes(self) -> Iterator[bytes]:
        """Yield the rendered header block, then each body chunk."""
        yield self._headers.render()
        yield from self._body


__all__ = [
    "FormValue",
    "HeaderFields",
    "Message",
    "RawEnvelope",
    "extract_header_fields",
]
