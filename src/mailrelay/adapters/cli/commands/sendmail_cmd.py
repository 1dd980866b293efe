"""``sendmail``-compatible submission command.

Reads an already formatted message from standard input and relays it
unchanged apart from three header edits: ``From`` is added when missing,
``Bcc`` is removed, and the fields are sorted by name. Only the message
submission mode (``-bm``) exists; daemon, queue and SMTP modes are refused.
"""

from __future__ import annotations

import logging
import os

import rich_click as click

from mailrelay.domain.address import Address, apply_local_domain, parse_address
from mailrelay.domain.enums import TerminationPolicy
from mailrelay.domain.errors import InvocationError, NoRecipientsError
from mailrelay.domain.ingest import read_message
from mailrelay.domain.message import RawEnvelope, extract_header_fields

from ..constants import SUBMISSION_CONTEXT_SETTINGS
from ..context import get_cli_context
from ._common import (
    SubmissionCommand,
    binary_stdin,
    bound_job,
    stdin_is_terminal,
    submission,
    write_diagnostics,
)

logger = logging.getLogger(__name__)

_DEBUG_VALUES = ("http", "nosend")


def _sender(address: str | None, display_name: str | None) -> Address:
    """Build the sender from ``-f``/``-r`` and ``-F``, falling back to ``$USER``.

    Raises:
        InvocationError: When no address is given and ``$USER`` is unset.
    """
    mailbox = address or os.environ.get("USER", "")
    if not mailbox:
        raise InvocationError("cannot determine From address: -f/-r not used, and $USER not set")
    return Address(mailbox=mailbox, display_name=display_name or "")


@click.command("sendmail", cls=SubmissionCommand, context_settings=SUBMISSION_CONTEXT_SETTINGS)
@click.option("-i", "ignore_dots", is_flag=True, help="Ignore single dot lines on incoming message")
@click.option("-t", "harvest", is_flag=True, help="Read To:, Cc:, Bcc: lines from the message")
@click.option("-v", "verbose", is_flag=True, help="Verbose mode")
@click.option("-B", "body_type", metavar="TYPE", default=None, help="Set body type (ignored)")
@click.option("-b", "mode", metavar="CODE", default="m", show_default=True, help="Run operation named by CODE (must be m)")
@click.option("-d", "debug", metavar="VAL", multiple=True, help="Set debugging value (http, nosend)")
@click.option("-F", "full_name", metavar="NAME", default=None, help="Set the full name of the sender")
@click.option("-f", "-r", "sender", metavar="ADDR", default=None, help="Set the address of the sender")
@click.argument("recipients", nargs=-1)
@click.pass_context
def cli_sendmail(
    ctx: click.Context,
    ignore_dots: bool,
    harvest: bool,
    verbose: bool,
    body_type: str | None,
    mode: str,
    debug: tuple[str, ...],
    full_name: str | None,
    sender: str | None,
    recipients: tuple[str, ...],
) -> None:
    """Send the message on standard input to the given addresses.

    The message is read up to end of input, or up to a line holding a single
    dot when standard input is a terminal (unless -i is given).
    """
    cli_ctx = get_cli_context(ctx)
    services = cli_ctx.services
    interactive = stdin_is_terminal()
    extra = {"command": "sendmail", "recipients": list(recipients), "harvest": harvest}

    with bound_job("cli-sendmail", **extra), submission(ctx) as run:
        config = run.start()

        for value in debug:
            if value not in _DEBUG_VALUES:
                raise InvocationError(f"unknown debug value -d {value}")
        diagnostics = write_diagnostics if "http" in debug else None
        dry_run = "nosend" in debug

        if mode != "m":
            raise InvocationError("only sendmail -bm is supported")
        if not recipients and not harvest:
            raise InvocationError("no delivery addresses given")

        destinations = [parse_address(arg, field="To") for arg in recipients]
        from_address = apply_local_domain(_sender(sender, full_name), config.domain)

        policy = TerminationPolicy.resolve(interactive=interactive, ignore_dots=ignore_dots)
        ingested = read_message(binary_stdin(), policy)
        if harvest:
            destinations.extend(extract_header_fields(ingested.headers, include_subject=False).recipients())
            if not destinations:
                raise NoRecipientsError()

        envelope = RawEnvelope(ingested.headers, ingested.body, sender=from_address)
        logger.info(
            "Relaying raw message",
            extra={"sender": str(from_address), "recipients": len(destinations), "policy": policy.value},
        )
        result = services.send_mime(
            envelope,
            sender=from_address,
            recipients=destinations,
            config=config,
            dry_run=dry_run,
            diagnostics=diagnostics,
        )
        run.report(result, interactive=interactive, verbose=verbose)


__all__ = ["cli_sendmail"]
