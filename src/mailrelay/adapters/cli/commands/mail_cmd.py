"""``mail``-compatible compose command.

Builds a structured message from flags and standard input and posts it
field by field. Only the sending half of ``mail`` exists; invoking it
without recipients (which would read a mailbox) is refused.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import BinaryIO

import rich_click as click

from mailrelay.adapters.logging.audit import quote
from mailrelay.domain.address import Address, parse_address
from mailrelay.domain.enums import TerminationPolicy
from mailrelay.domain.errors import IngestError, InvocationError, NoRecipientsError
from mailrelay.domain.ingest import IngestedMessage, read_body, read_message
from mailrelay.domain.message import Message, extract_header_fields

from ..constants import SUBMISSION_CONTEXT_SETTINGS
from ..context import get_cli_context
from ._common import (
    Submission,
    SubmissionCommand,
    binary_stdin,
    bound_job,
    render_addresses,
    stdin_is_terminal,
    submission,
    write_diagnostics,
)

logger = logging.getLogger(__name__)

_TEXT_ENCODING = "utf-8"
_TEXT_ERRORS = "surrogateescape"


def _sender(address: str | None) -> Address:
    """Parse ``-r`` or fall back to ``$USER``."""
    if address is not None:
        return parse_address(address, field="From")
    mailbox = os.environ.get("USER", "")
    if not mailbox:
        raise InvocationError("cannot determine From address: -r not used, and $USER not set")
    return Address(mailbox=mailbox)


def _prompt_subject(stream: BinaryIO) -> str | None:
    """Ask for a subject on stderr; None means input ended at the prompt."""
    click.echo("Subject: ", err=True, nl=False)
    try:
        line = stream.readline()
    except (OSError, ValueError) as exc:
        raise IngestError(f"reading subject: {exc}") from exc
    if not line:
        return None
    return line.decode(_TEXT_ENCODING, _TEXT_ERRORS).removesuffix("\n")


def _print_summary(message: Message) -> None:
    lines = [
        f"from: {message.sender}",
        f"to: {render_addresses(message.to)}",
        f"cc: {render_addresses(message.cc)}",
        f"bcc: {render_addresses(message.bcc)}",
        f"subject: {message.subject}",
        f"body: {len(message.body)} bytes",
    ]
    if message.attachments:
        lines.append("attachments:")
        lines.extend(f"\t{path}" for path in message.attachments)
    click.echo("\n".join(lines), err=True)


@click.command("mail", cls=SubmissionCommand, context_settings=SUBMISSION_CONTEXT_SETTINGS)
@click.option("-E", "skip_empty", is_flag=True, help="Discard (do not send) empty messages")
@click.option("-d", "debug", is_flag=True, help="Print the HTTP request and response")
@click.option("-n", "dry_run", is_flag=True, help="Do not send any mail")
@click.option("-t", "harvest", is_flag=True, help="Use Subject:, To:, Cc:, Bcc: lines from input")
@click.option("-v", "verbose", is_flag=True, help="Verbose mode")
@click.option(
    "-a",
    "attachments",
    metavar="FILE",
    multiple=True,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Attach FILE to the message (repeatable)",
)
@click.option("-b", "bcc", metavar="ADDR", multiple=True, help="Bcc the address (repeatable)")
@click.option("-c", "cc", metavar="ADDR", multiple=True, help="Cc the address (repeatable)")
@click.option("-r", "sender", metavar="ADDR", default=None, help="Send mail from ADDR (last one wins)")
@click.option("-s", "subject", metavar="SUBJECT", default=None, help="Set message subject (last one wins)")
@click.argument("recipients", nargs=-1)
@click.pass_context
def cli_mail(
    ctx: click.Context,
    skip_empty: bool,
    debug: bool,
    dry_run: bool,
    harvest: bool,
    verbose: bool,
    attachments: tuple[Path, ...],
    bcc: tuple[str, ...],
    cc: tuple[str, ...],
    sender: str | None,
    subject: str | None,
    recipients: tuple[str, ...],
) -> None:
    """Send a message composed from standard input to the given addresses.

    On a terminal the subject is prompted for unless -s is given, and the
    body ends at a line holding a single dot or at end of input.
    """
    cli_ctx = get_cli_context(ctx)
    interactive = stdin_is_terminal()
    extra = {"command": "mail", "recipients": list(recipients), "attachments": len(attachments)}

    with bound_job("cli-mail", **extra), submission(ctx) as run:
        config = run.start()

        if not recipients and not harvest:
            raise InvocationError("mail reading is not supported")

        message = Message(
            sender=_sender(sender),
            to=[parse_address(arg, field="To") for arg in recipients],
            cc=[parse_address(arg, field="Cc") for arg in cc],
            bcc=[parse_address(arg, field="Bcc") for arg in bcc],
            attachments=list(attachments),
        )

        stream = binary_stdin()
        if subject is None and interactive:
            subject = _prompt_subject(stream)
            if subject is None:
                run.note("no subject, no text, not sending")
                return
        message.subject = subject or ""

        policy = TerminationPolicy.resolve(interactive=interactive)
        ended_in_header = False
        if harvest:
            ingested = _harvest(run, stream, policy, message)
            message.body = ingested.read_body()
            ended_in_header = ingested.ended_in_header
        else:
            message.body = read_body(stream, policy)
        if interactive and not ended_in_header:
            click.echo("EOT", err=True)

        if skip_empty and not message.body:
            run.note("empty message body, not sending")
            return
        if verbose:
            _print_summary(message)
        if not message.recipients():
            raise NoRecipientsError()

        result = cli_ctx.services.send_message(
            message,
            config,
            dry_run=dry_run,
            diagnostics=write_diagnostics if debug else None,
        )
        run.report(result, interactive=interactive, verbose=verbose)


def _harvest(run: Submission, stream: BinaryIO, policy: TerminationPolicy, message: Message) -> IngestedMessage:
    """Harvest header fields into *message* and return the rest of the input.

    Lines that are not valid header fields are warned about and skipped.
    """
    ingested = read_message(stream, policy, strict=False)
    found = extract_header_fields(ingested.headers)
    for line in found.ignored:
        run.warn(f"ignoring header field {quote(line)}")
    if found.subject is not None:
        message.subject = found.subject
    message.to.extend(found.to)
    message.cc.extend(found.cc)
    message.bcc.extend(found.bcc)
    return ingested


__all__ = ["cli_mail"]
