"""Shared plumbing for the ``sendmail`` and ``mail`` submission commands.

Both commands follow the same life cycle: validate ``[relay]``, open the
delivery log, resolve credentials, read standard input, send, and report.
Every domain failure along the way is handled by :meth:`Submission.fatal`:
logged to the process log and the delivery log, printed on stderr as
``<program>: <message>``, and turned into :data:`ExitCode.FAILURE`.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import Any, BinaryIO, NoReturn

import lib_log_rich.runtime
import rich_click as click

from mailrelay import __init__conf__
from mailrelay.adapters.relay.config import RelayConfig
from mailrelay.adapters.relay.response import DeliveryResult
from mailrelay.application.ports import DeliveryJournal
from mailrelay.domain.errors import ConfigurationError, MailRelayError

from ..context import CLIContext, get_cli_context
from ..exit_codes import ExitCode

logger = logging.getLogger(__name__)


def stdin_is_terminal() -> bool:
    """Whether standard input is an interactive terminal."""
    stream = sys.stdin
    return stream is not None and stream.isatty()


def binary_stdin() -> BinaryIO:
    """The byte stream under standard input."""
    return sys.stdin.buffer


def write_diagnostics(text: str) -> None:
    """Diagnostic dumps go to stderr unchanged."""
    click.echo(text, err=True, nl=False)


@contextmanager
def bound_job(job_id: str, **extra: Any) -> Iterator[None]:
    """Bind *job_id* and *extra* to log records when the logging runtime is up."""
    if not lib_log_rich.runtime.is_initialised():
        yield
        return
    with lib_log_rich.runtime.bind(job_id=job_id, extra=extra):
        yield


def open_journal(cli_ctx: CLIContext) -> DeliveryJournal:
    """Validate ``[relay]`` and open the delivery log it names.

    Raises:
        ConfigurationError: When the ``[relay]`` section is invalid.
    """
    settings = cli_ctx.services.load_relay_settings(cli_ctx.config)
    return cli_ctx.services.open_delivery_log(settings.delivery_log, cli_ctx.invocation)


class SubmissionCommand(click.RichCommand):
    """Click command that records usage errors in the delivery log."""

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        try:
            return super().parse_args(ctx, args)
        except click.UsageError:
            _note_usage_error(ctx)
            raise


def _note_usage_error(ctx: click.Context) -> None:
    if not isinstance(ctx.obj, CLIContext):
        return
    try:
        journal = open_journal(ctx.obj)
    except ConfigurationError:
        return
    journal.note("invalid command line")
    journal.close()


class Submission:
    """One run of a submission command.

    Example:
        >>> from unittest.mock import MagicMock
        >>> run = Submission(MagicMock(command_path="mailrelay mail"))
        >>> run.program
        'mailrelay mail'
    """

    def __init__(self, ctx: click.Context) -> None:
        self.ctx = ctx
        self.journal: DeliveryJournal | None = None

    @property
    def program(self) -> str:
        return self.ctx.command_path

    def start(self) -> RelayConfig:
        """Open the delivery log and resolve the relay configuration.

        Raises:
            ConfigurationError: Invalid settings or no usable API key.
        """
        cli_ctx = get_cli_context(self.ctx)
        settings = cli_ctx.services.load_relay_settings(cli_ctx.config)
        self.journal = cli_ctx.services.open_delivery_log(settings.delivery_log, cli_ctx.invocation)
        return cli_ctx.services.load_relay_config(settings)

    def note(self, text: str) -> None:
        logger.info(text)
        if self.journal is not None:
            self.journal.note(text)

    def warn(self, text: str) -> None:
        click.echo(f"{self.program}: {text}", err=True)

    def fatal(self, exc: MailRelayError) -> NoReturn:
        logger.error(
            "Relay failed",
            extra={"error": str(exc), "error_type": type(exc).__name__, "command": self.program},
        )
        if self.journal is not None:
            self.journal.failure(exc)
        click.echo(f"{self.program}: {exc}", err=True)
        raise SystemExit(ExitCode.FAILURE) from exc

    def report(self, result: DeliveryResult, *, interactive: bool, verbose: bool) -> None:
        """Record an accepted send and tell the operator when they are watching.

        A suppressed (dry-run) send only prints the suppression notice.
        """
        if result.suppressed:
            click.echo(result.message, err=True)
            return
        if self.journal is not None:
            self.journal.delivered(result)
        logger.info(
            "Message accepted",
            extra={"id": result.id, "recipients": list(result.recipients), "bytes_sent": result.bytes_sent},
        )
        if interactive or verbose:
            click.echo(f"{__init__conf__.shell_command}: {result.message}", err=True)

    def close(self) -> None:
        if self.journal is not None:
            self.journal.close()
            self.journal = None


@contextmanager
def submission(ctx: click.Context) -> Iterator[Submission]:
    """Run a submission, converting domain errors into a fatal exit.

    The delivery log is closed when the run ends, however it ends.
    """
    run = Submission(ctx)
    try:
        yield run
    except MailRelayError as exc:
        run.fatal(exc)
    finally:
        run.close()


def render_addresses(addresses: Sequence[object]) -> str:
    """Join addresses for the verbose summary.

    Example:
        >>> render_addresses(["a@x.org", "B <b@x.org>"])
        'a@x.org, B <b@x.org>'
    """
    return ", ".join(str(a) for a in addresses)


__all__ = [
    "Submission",
    "SubmissionCommand",
    "binary_stdin",
    "bound_job",
    "open_journal",
    "render_addresses",
    "stdin_is_terminal",
    "submission",
    "write_diagnostics",
]
