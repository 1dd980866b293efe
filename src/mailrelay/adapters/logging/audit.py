"""Append-only delivery log.

Operators grep one flat file to see who relayed what and why a run failed,
so every line is prefixed with the invoking user and the quoted process
arguments::

    2026/10/18 09:14:02 [backup]["mailrelay-sendmail" "-t"] from="backup@mg.example.com" ...

The file must already exist; it is never created. When it is missing or
cannot be opened the journal silently discards everything, which is the
only failure the relay tolerates without reporting.

Contents:
    * :class:`InvocationContext` - user and argv captured once per process.
    * :class:`DeliveryLog` - the journal written by the CLI commands.
    * :func:`open_delivery_log` - attach the file (or a null sink).
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path

import orjson

from mailrelay.adapters.relay.response import DeliveryResult

logger = logging.getLogger(__name__)

DELIVERY_LOGGER_NAME = "mailrelay.delivery"
_FORMAT = "%(asctime)s %(message)s"
_DATEFMT = "%Y/%m/%d %H:%M:%S"


def quote(text: str) -> str:
    """Double-quote *text* with JSON escaping.

    Example:
        >>> quote('say "hi"')
        '"say \\\\"hi\\\\""'
    """
    return orjson.dumps(text).decode("utf-8")


def quote_argv(args: Iterable[str]) -> str:
    """Render a string list as ``["a" "b"]``.

    Example:
        >>> quote_argv(["mailrelay-mail", "-s", "disk full"])
        '["mailrelay-mail" "-s" "disk full"]'
    """
    return "[" + " ".join(quote(a) for a in args) + "]"


@dataclass(frozen=True, slots=True)
class InvocationContext:
    """Who ran the relay and with which arguments.

    Example:
        >>> InvocationContext(user="backup", argv=("mailrelay-sendmail", "-t")).prefix
        '[backup]["mailrelay-sendmail" "-t"]'
    """

    user: str
    argv: tuple[str, ...]

    @classmethod
    def current(cls, environ: Mapping[str, str] | None = None) -> InvocationContext:
        env = os.environ if environ is None else environ
        return cls(user=env.get("USER", ""), argv=tuple(sys.argv))

    @property
    def prefix(self) -> str:
        return f"[{self.user}]{quote_argv(self.argv)}"


class DeliveryLog:
    """Journal for delivery outcomes, fatal errors and notes."""

    def __init__(self, target: logging.Logger, invocation: InvocationContext) -> None:
        self._logger = target
        self._invocation = invocation

    @property
    def invocation(self) -> InvocationContext:
        return self._invocation

    def note(self, text: str) -> None:
        self._logger.info("%s %s", self._invocation.prefix, text)

    def failure(self, error: BaseException) -> None:
        self.note(str(error))

    def delivered(self, result: DeliveryResult) -> None:
        """Record an accepted message.

        The line carries sender, recipients, encoded payload size and the
        compacted API reply.
        """
        self.note(
            f"from={quote(result.sender)} to={quote_argv(result.recipients)} "
            f"len={result.bytes_sent} resp={result.raw.decode('utf-8', 'replace')}"
        )

    def close(self) -> None:
        """Detach and close the log file; later lines are dropped."""
        _detach_handlers(self._logger)


def _detach_handlers(target: logging.Logger) -> None:
    for handler in list(target.handlers):
        target.removeHandler(handler)
        handler.close()


def open_delivery_log(path: Path, invocation: InvocationContext) -> DeliveryLog:
    """Attach the delivery log file at *path* to the ``mailrelay.delivery`` logger.

    Any handler left from an earlier call is closed first. Records never
    propagate to the process log.
    """
    target = logging.getLogger(DELIVERY_LOGGER_NAME)
    _detach_handlers(target)
    target.propagate = False
    target.setLevel(logging.INFO)

    resolved = path.expanduser()
    handler: logging.Handler
    if resolved.is_file():
        try:
            handler = logging.FileHandler(resolved, mode="a", encoding="utf-8")
        except OSError as exc:
            logger.debug("Delivery log unavailable", extra={"path": str(resolved), "error": str(exc)})
            handler = logging.NullHandler()
    else:
        logger.debug("Delivery log absent, discarding journal", extra={"path": str(resolved)})
        handler = logging.NullHandler()
    handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATEFMT))
    target.addHandler(handler)
    return DeliveryLog(target, invocation)


__all__ = [
    "DELIVERY_LOGGER_NAME",
    "DeliveryLog",
    "InvocationContext",
    "open_delivery_log",
    "quote",
    "quote_argv",
]
