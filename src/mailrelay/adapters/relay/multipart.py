"""Incremental ``multipart/form-data`` framing.

httpx only switches to multipart when at least one file part is present
and keeps its streaming encoder private, so the relay writes the framing
itself: each method returns the bytes for one boundary-delimited piece and
the caller pushes them through the conduit in order.
"""

from __future__ import annotations

import secrets

_CRLF = b"\r\n"


def _quote(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


class MultipartEncoder:
    """Frame form fields and file parts around a fixed boundary.

    Example:
        >>> enc = MultipartEncoder(boundary="xyz")
        >>> enc.field("to", "a@example.com")
        b'--xyz\\r\\nContent-Disposition: form-data; name="to"\\r\\n\\r\\na@example.com\\r\\n'
        >>> enc.closing()
        b'--xyz--\\r\\n'
    """

    def __init__(self, boundary: str | None = None) -> None:
        self.boundary = boundary or secrets.token_hex(16)

    @property
    def content_type(self) -> str:
        return f"multipart/form-data; boundary={self.boundary}"

    def field(self, name: str, value: str | bytes) -> bytes:
        """Complete part for a plain form field."""
        data = value.encode("utf-8", "surrogateescape") if isinstance(value, str) else value
        head = f'--{self.boundary}\r\nContent-Disposition: form-data; name="{_quote(name)}"\r\n\r\n'
        return head.encode("utf-8") + data + _CRLF

    def file_header(self, name: str, filename: str) -> bytes:
        """Opening of a file part; content and :meth:`file_trailer` follow."""
        head = (
            f"--{self.boundary}\r\n"
            f'Content-Disposition: form-data; name="{_quote(name)}"; filename="{_quote(filename)}"\r\n'
            "Content-Type: application/octet-stream\r\n\r\n"
        )
        return head.encode("utf-8", "surrogateescape")

    @staticmethod
    def file_trailer() -> bytes:
        return _CRLF

    def closing(self) -> bytes:
        return f"--{self.boundary}--\r\n".encode()


__all__ = ["MultipartEncoder"]
