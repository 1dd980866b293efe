"""Header block model shared by ingestion and envelope rendering.

Header lines arrive as raw bytes from the input stream. They are decoded with
``surrogateescape`` so that non-UTF-8 octets survive a parse/render cycle
byte-for-byte.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from .errors import IngestError

_ENCODING = "utf-8"
_ERRORS = "surrogateescape"


def canonical_field_name(name: str) -> str:
    """Return the canonical spelling of a header field name.

    The first letter and every letter following a hyphen are upper-cased,
    the rest lower-cased. Names containing characters outside the RFC 5322
    field-name range are returned unchanged.

    Example:
        >>> canonical_field_name("content-TYPE")
        'Content-Type'
        >>> canonical_field_name("BCC")
        'Bcc'
        >>> canonical_field_name("x y")
        'x y'
    """
    if not is_valid_field_name(name):
        return name
    return "-".join(part[:1].upper() + part[1:].lower() for part in name.split("-"))


def is_valid_field_name(name: str) -> bool:
    """Whether *name* is a non-empty run of printable ASCII other than colon."""
    return bool(name) and all(33 <= ord(ch) <= 126 and ch != ":" for ch in name)


class HeaderBlock:
    """Ordered collection of ``(name, value)`` header fields.

    Lookups are case-insensitive. Names are stored canonically so that
    rendering is deterministic regardless of how the input spelled them.

    Example:
        >>> block = HeaderBlock([("subject", "hi"), ("TO", "a@example.com")])
        >>> block.get("Subject")
        'hi'
        >>> list(block)
        [('Subject', 'hi'), ('To', 'a@example.com')]
    """

    def __init__(self, fields: Iterable[tuple[str, str]] = ()) -> None:
        self._fields: list[tuple[str, str]] = []
        self.rejected: list[str] = []
        for name, value in fields:
            self.add(name, value)

    @classmethod
    def parse(cls, lines: Iterable[bytes], *, strict: bool = True) -> HeaderBlock:
        """Build a block from raw header lines, unfolding continuations.

        Continuation lines (leading space or tab) are joined to the previous
        field with a single space. With ``strict=False`` a malformed line is
        kept verbatim in :attr:`rejected` instead of failing the parse.

        Raises:
            IngestError: In strict mode, on a continuation with no preceding
                field, or a line whose field name is empty or contains
                illegal characters.

        Example:
            >>> block = HeaderBlock.parse([b"Subject: a long\\n", b"  subject\\n", b"To: x@example.com\\n"])
            >>> block.get("subject")
            'a long subject'
            >>> HeaderBlock.parse([b"Dear Bob: hi\\n"], strict=False).rejected
            ['Dear Bob: hi']
        """
        block = cls()
        for raw in lines:
            line = raw.decode(_ENCODING, _ERRORS).rstrip("\r\n")
            if line[:1] in (" ", "\t"):
                if not block._fields:
                    block._reject(line, strict, "malformed initial header line")
                    continue
                name, value = block._fields[-1]
                block._fields[-1] = (name, f"{value} {line.strip()}".strip())
                continue
            name, sep, value = line.partition(":")
            if not sep or not is_valid_field_name(name):
                block._reject(line, strict, "malformed header line")
                continue
            block.add(name, value.strip())
        return block

    def _reject(self, line: str, strict: bool, reason: str) -> None:
        if strict:
            raise IngestError(f"reading message header: {reason} {line!r}")
        self.rejected.append(line)

    def add(self, name: str, value: str) -> None:
        self._fields.append((canonical_field_name(name), value))

    def get_all(self, name: str) -> list[str]:
        wanted = canonical_field_name(name)
        return [value for key, value in self._fields if key == wanted]

    def get(self, name: str, default: str | None = None) -> str | None:
        """Return the last value of *name*, or *default*."""
        values = self.get_all(name)
        return values[-1] if values else default

    def remove(self, name: str) -> None:
        wanted = canonical_field_name(name)
        self._fields = [(key, value) for key, value in self._fields if key != wanted]

    def copy(self) -> HeaderBlock:
        return HeaderBlock(self._fields)

    def sorted_fields(self) -> list[tuple[str, str]]:
        """Fields ordered by name; values of one name keep their input order."""
        return sorted(self._fields, key=lambda field: field[0])

    def render(self) -> bytes:
        """Render the sorted block followed by the blank separator line.

        Example:
            >>> HeaderBlock([("To", "a@example.com"), ("From", "b@example.com")]).render()
            b'From: b@example.com\\nTo: a@example.com\\n\\n'
        """
        text = "".join(f"{name}: {value}\n" for name, value in self.sorted_fields())
        return (text + "\n").encode(_ENCODING, _ERRORS)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and bool(self.get_all(name))

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return iter(list(self._fields))

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"HeaderBlock({self._fields!r})"


__all__ = [
    "HeaderBlock",
    "canonical_field_name",
    "is_valid_field_name",
]
