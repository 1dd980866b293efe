"""Type-safe domain enums for ingestion policy, endpoints, and output formats."""

from __future__ import annotations

from enum import Enum


class TerminationPolicy(str, Enum):
    """How a line stream signals the end of a message.

    Attributes:
        DOT_LINE: A line consisting only of ``.`` ends the message
            (interactive terminal input).
        EOF: Only end-of-stream ends the message (piped input).
        IGNORE_DOTS: Dot lines are ordinary text even on a terminal
            (sendmail ``-i``).

    Example:
        >>> TerminationPolicy.resolve(interactive=True, ignore_dots=False)
        <TerminationPolicy.DOT_LINE: 'dot-line'>
        >>> TerminationPolicy.resolve(interactive=True, ignore_dots=True).stops_at_dot
        False
    """

    DOT_LINE = "dot-line"
    EOF = "eof"
    IGNORE_DOTS = "ignore-dots"

    @property
    def stops_at_dot(self) -> bool:
        return self is TerminationPolicy.DOT_LINE

    @classmethod
    def resolve(cls, *, interactive: bool, ignore_dots: bool = False) -> TerminationPolicy:
        """Pick the policy for an input source.

        Args:
            interactive: Whether the input is a terminal.
            ignore_dots: Whether the caller asked for dot lines to be ignored.
        """
        if ignore_dots:
            return cls.IGNORE_DOTS
        return cls.DOT_LINE if interactive else cls.EOF


class Endpoint(str, Enum):
    """Relay API endpoint selector.

    Example:
        >>> Endpoint.MIME.value
        'messages.mime'
    """

    MESSAGES = "messages"
    MIME = "messages.mime"


class OutputFormat(str, Enum):
    """Output format options for configuration display.

    Inherits from str to allow direct string comparison and Click integration.

    Example:
        >>> OutputFormat.HUMAN.value
        'human'
        >>> OutputFormat.JSON == "json"
        True
    """

    HUMAN = "human"
    JSON = "json"


__all__ = [
    "Endpoint",
    "OutputFormat",
    "TerminationPolicy",
]
