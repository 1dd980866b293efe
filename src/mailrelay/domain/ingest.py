"""Line ingestion state machine for message input streams.

A message typed or piped into a sendmail-style program is ambiguous in two
ways: where it ends (a lone ``.`` line on a terminal, or end-of-stream) and
where the header block stops (legacy senders may start the body without a
blank line). :class:`LineIngestStateMachine` resolves both one line at a time
and reconstructs a well-formed stream in which a blank line always separates
headers from body and every line ends with a line break.

:func:`read_message` is the structured reader on top: it splits the
reconstructed stream at the first blank line, parses the header block
eagerly, and leaves the body as a lazy iterator so it can be streamed to the
transport without being buffered.

Contents:
    * :class:`IngestState` - InHeader / InBody / Terminated.
    * :class:`LineIngestStateMachine` - per-line classifier.
    * :class:`IngestedMessage` - parsed headers plus body iterator.
    * :func:`read_message` - convenience reader for a binary stream.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from typing import BinaryIO

from .enums import TerminationPolicy
from .errors import IngestError
from .headers import HeaderBlock

_NL = b"\n"
_DOT_LINE = b".\n"
_BLANK_LINES = (b"\n", b"\r\n")


class IngestState(Enum):
    """Position of the state machine within the message."""

    IN_HEADER = "in-header"
    IN_BODY = "in-body"
    TERMINATED = "terminated"


class LineIngestStateMachine:
    """Classify input lines and emit the reconstructed message stream.

    Args:
        stream: Binary input, read line by line.
        policy: How the end of the message is recognised.
        parse_headers: When False the machine starts in the body state, so
            nothing is treated as header material and no separator is added.

    Attributes:
        dot_state: The state the machine was in when a dot line ended the
            input, or None when it ended otherwise.

    Example:
        >>> import io
        >>> machine = LineIngestStateMachine(io.BytesIO(b"hello world"), TerminationPolicy.EOF)
        >>> list(machine.lines())
        [b'\\n', b'hello world\\n']
        >>> machine.state
        <IngestState.TERMINATED: 'terminated'>
    """

    def __init__(self, stream: BinaryIO, policy: TerminationPolicy, *, parse_headers: bool = True) -> None:
        self._stream = stream
        self._policy = policy
        self._state = IngestState.IN_HEADER if parse_headers else IngestState.IN_BODY
        self.dot_state: IngestState | None = None

    @property
    def state(self) -> IngestState:
        return self._state

    def lines(self) -> Iterator[bytes]:
        """Yield the reconstructed stream, one newline-terminated line at a time.

        Raises:
            IngestError: When reading the underlying stream fails.
        """
        while self._state is not IngestState.TERMINATED:
            line = self._readline()
            if not line:
                self._state = IngestState.TERMINATED
                return
            if self._policy.stops_at_dot and line == _DOT_LINE:
                self.dot_state = self._state
                self._state = IngestState.TERMINATED
                return
            if self._state is IngestState.IN_HEADER and not _is_header_line(line):
                self._state = IngestState.IN_BODY
                if line not in _BLANK_LINES:
                    yield _NL
            yield line if line.endswith(_NL) else line + _NL

    def _readline(self) -> bytes:
        try:
            return self._stream.readline()
        except (OSError, ValueError) as exc:
            raise IngestError(f"reading message: {exc}") from exc


def _is_header_line(line: bytes) -> bool:
    return line[:1] in (b" ", b"\t") or b":" in line


@dataclass(slots=True)
class IngestedMessage:
    """Header block plus the remaining body lines of an ingested message.

    The body iterator is single-use and reads from the input lazily.
    ``ended_in_header`` is set when a dot line closed the input before any
    body line arrived.
    """

    headers: HeaderBlock
    body: Iterator[bytes]
    ended_in_header: bool = False

    def read_body(self) -> bytes:
        """Drain the body iterator into memory."""
        return b"".join(self.body)


def read_message(stream: BinaryIO, policy: TerminationPolicy, *, strict: bool = True) -> IngestedMessage:
    """Read the header block of *stream* and return it with a lazy body.

    With ``strict=False`` malformed header lines are collected in
    ``headers.rejected`` instead of raising :class:`IngestError`.

    Example:
        >>> import io
        >>> src = io.BytesIO(b"Subject: hi\\n\\nhello\\n.\\nignored\\n")
        >>> msg = read_message(src, TerminationPolicy.DOT_LINE)
        >>> list(msg.headers)
        [('Subject', 'hi')]
        >>> msg.read_body()
        b'hello\\n'
    """
    machine = LineIngestStateMachine(stream, policy)
    lines = machine.lines()
    header_lines: list[bytes] = []
    for line in lines:
        if line in _BLANK_LINES:
            break
        header_lines.append(line)
    headers = HeaderBlock.parse(header_lines, strict=strict)
    return IngestedMessage(
        headers=headers,
        body=lines,
        ended_in_header=machine.dot_state is IngestState.IN_HEADER,
    )


def read_body(stream: BinaryIO, policy: TerminationPolicy) -> bytes:
    """Read an entire header-less body from *stream*.

    Example:
        >>> import io
        >>> read_body(io.BytesIO(b"To: not a header\\n.\\n"), TerminationPolicy.DOT_LINE)
        b'To: not a header\\n'
    """
    machine = LineIngestStateMachine(stream, policy, parse_headers=False)
    return b"".join(machine.lines())


__all__ = [
    "IngestState",
    "IngestedMessage",
    "LineIngestStateMachine",
    "read_body",
    "read_message",
]
