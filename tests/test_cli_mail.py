"""CLI mail stories: composing from flags and stdin, header harvesting, prompts, and refusals."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

import pytest
from click.testing import CliRunner, Result

from mailrelay.adapters import cli as cli_mod
from mailrelay.adapters.memory import TEST_DOMAIN
from mailrelay.adapters.relay.response import SUPPRESSED_MESSAGE
from mailrelay.domain.message import Message

if TYPE_CHECKING:
    from conftest import RelayCliContext

_TERMINAL = "mailrelay.adapters.cli.commands.mail_cmd.stdin_is_terminal"


def _mail(runner: CliRunner, ctx: RelayCliContext, args: list[str], stdin: str = "") -> Result:
    return runner.invoke(cli_mod.cli, ["mail", *args], input=stdin, obj=ctx.factory)


def _sent(ctx: RelayCliContext) -> Message:
    return ctx.relay.messages[0]["message"]


# ======================== Composing ========================


@pytest.mark.os_agnostic
def test_when_subject_and_recipient_are_given_the_body_comes_from_stdin(
    cli_runner: CliRunner,
    relay_cli_context: Callable[..., RelayCliContext],
) -> None:
    ctx = relay_cli_context()

    result = _mail(cli_runner, ctx, ["-s", "disk full", "dev"], "df says 100%\n")

    assert result.exit_code == 0, result.output
    message = _sent(ctx)
    assert message.subject == "disk full"
    assert message.body == b"df says 100%\n"
    assert [str(a) for a in message.to] == [f"dev@{TEST_DOMAIN}"]
    assert str(message.sender) == f"ops@{TEST_DOMAIN}"


@pytest.mark.os_agnostic
def test_when_the_body_looks_like_headers_it_stays_body(
    cli_runner: CliRunner,
    relay_cli_context: Callable[..., RelayCliContext],
) -> None:
    ctx = relay_cli_context()

    _mail(cli_runner, ctx, ["dev@example.org"], "Status: degraded\nall else fine\n")

    assert _sent(ctx).body == b"Status: degraded\nall else fine\n"


@pytest.mark.os_agnostic
def test_when_cc_bcc_and_attachments_are_given_they_are_sent(
    cli_runner: CliRunner,
    relay_cli_context: Callable[..., RelayCliContext],
) -> None:
    ctx = relay_cli_context()
    args = ["-c", "lead@example.org", "-b", "audit@example.org", "-b", "archive", "-a", "report.pdf", "-a", "log.txt", "dev@example.org"]

    result = _mail(cli_runner, ctx, args, "see attached\n")

    assert result.exit_code == 0, result.output
    message = _sent(ctx)
    assert [a.mailbox for a in message.cc] == ["lead@example.org"]
    assert [a.mailbox for a in message.bcc] == ["audit@example.org", f"archive@{TEST_DOMAIN}"]
    assert message.attachments == [Path("report.pdf"), Path("log.txt")]


@pytest.mark.os_agnostic
def test_when_r_is_given_it_sets_the_sender(
    cli_runner: CliRunner,
    relay_cli_context: Callable[..., RelayCliContext],
) -> None:
    ctx = relay_cli_context()

    _mail(cli_runner, ctx, ["-r", "Night Job (cron) <job@example.org>", "dev@example.org"], "x\n")

    sender = _sent(ctx).sender
    assert sender.mailbox == "job@example.org"
    assert sender.display_name == "Night Job (cron)"


@pytest.mark.os_agnostic
def test_when_the_same_single_flag_repeats_the_last_one_wins(
    cli_runner: CliRunner,
    relay_cli_context: Callable[..., RelayCliContext],
) -> None:
    ctx = relay_cli_context()

    _mail(cli_runner, ctx, ["-s", "first", "-s", "second", "-r", "a@example.org", "-r", "b@example.org", "dev"], "x\n")

    message = _sent(ctx)
    assert message.subject == "second"
    assert message.sender.mailbox == "b@example.org"


@pytest.mark.os_agnostic
def test_when_t_is_given_headers_supply_subject_and_recipients(
    cli_runner: CliRunner,
    relay_cli_context: Callable[..., RelayCliContext],
) -> None:
    ctx = relay_cli_context()
    stdin = "To: a@example.org\nCc: b@example.org\nBcc: c@example.org\nSubject: from header\n\nbody\n"

    result = _mail(cli_runner, ctx, ["-t", "-s", "from flag", "extra@example.org"], stdin)

    assert result.exit_code == 0, result.output
    message = _sent(ctx)
    assert message.subject == "from header"
    assert [a.mailbox for a in message.to] == ["extra@example.org", "a@example.org"]
    assert [a.mailbox for a in message.cc] == ["b@example.org"]
    assert [a.mailbox for a in message.bcc] == ["c@example.org"]
    assert message.body == b"body\n"


@pytest.mark.os_agnostic
def test_when_t_sees_other_headers_it_warns_and_ignores_them(
    cli_runner: CliRunner,
    relay_cli_context: Callable[..., RelayCliContext],
) -> None:
    ctx = relay_cli_context()

    result = _mail(cli_runner, ctx, ["-t"], "To: a@example.org\nX-Mailer: cron\n\nbody\n")

    assert result.exit_code == 0, result.output
    assert 'mail: ignoring header field "X-Mailer: cron"' in result.stderr


@pytest.mark.os_agnostic
def test_when_t_sees_a_line_that_is_not_a_header_field_it_warns_and_continues(
    cli_runner: CliRunner,
    relay_cli_context: Callable[..., RelayCliContext],
) -> None:
    ctx = relay_cli_context()

    result = _mail(cli_runner, ctx, ["-t"], "To: dev@example.org\nDear Bob: hi\n\nbody\n")

    assert result.exit_code == 0, result.output
    assert 'mail: ignoring header field "Dear Bob: hi"' in result.stderr
    message = _sent(ctx)
    assert [a.mailbox for a in message.to] == ["dev@example.org"]
    assert message.body == b"body\n"


@pytest.mark.os_agnostic
def test_when_v_is_given_a_summary_is_printed(
    cli_runner: CliRunner,
    relay_cli_context: Callable[..., RelayCliContext],
) -> None:
    ctx = relay_cli_context()

    result = _mail(cli_runner, ctx, ["-v", "-s", "hi", "-a", "notes.txt", "dev@example.org"], "hello\n")

    assert "from: ops\n" in result.stderr
    assert "to: dev@example.org\n" in result.stderr
    assert "subject: hi\n" in result.stderr
    assert "body: 6 bytes\n" in result.stderr
    assert "attachments:\n\tnotes.txt\n" in result.stderr
    assert "mailrelay: Queued. Thank you." in result.stderr


@pytest.mark.os_agnostic
def test_when_n_is_given_nothing_is_transmitted(
    cli_runner: CliRunner,
    relay_cli_context: Callable[..., RelayCliContext],
) -> None:
    ctx = relay_cli_context()

    result = _mail(cli_runner, ctx, ["-n", "dev@example.org"], "x\n")

    assert result.exit_code == 0
    assert ctx.relay.messages[0]["dry_run"] is True
    assert SUPPRESSED_MESSAGE in result.stderr


@pytest.mark.os_agnostic
def test_when_d_is_given_diagnostics_are_enabled(
    cli_runner: CliRunner,
    relay_cli_context: Callable[..., RelayCliContext],
) -> None:
    ctx = relay_cli_context()

    _mail(cli_runner, ctx, ["-d", "dev@example.org"], "x\n")

    assert ctx.relay.messages[0]["diagnostics"] is True


@pytest.mark.os_agnostic
def test_when_E_is_given_an_empty_body_is_not_sent(
    cli_runner: CliRunner,
    relay_cli_context: Callable[..., RelayCliContext],
) -> None:
    ctx = relay_cli_context()

    result = _mail(cli_runner, ctx, ["-E", "dev@example.org"], "")

    assert result.exit_code == 0
    assert ctx.relay.messages == []
    assert ctx.journal.records == ["empty message body, not sending"]


@pytest.mark.os_agnostic
def test_without_E_an_empty_body_is_still_sent(
    cli_runner: CliRunner,
    relay_cli_context: Callable[..., RelayCliContext],
) -> None:
    ctx = relay_cli_context()

    _mail(cli_runner, ctx, ["dev@example.org"], "")

    assert _sent(ctx).body == b""


# ======================== Terminal input ========================


@pytest.mark.os_agnostic
def test_when_stdin_is_a_terminal_the_subject_is_prompted_for(
    cli_runner: CliRunner,
    relay_cli_context: Callable[..., RelayCliContext],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setattr(_TERMINAL, lambda: True)
    ctx = relay_cli_context()

    result = _mail(cli_runner, ctx, ["dev@example.org"], "weekly report\nall green\n.\nnot part of it\n")

    assert result.exit_code == 0, result.output
    message = _sent(ctx)
    assert message.subject == "weekly report"
    assert message.body == b"all green\n"
    assert "Subject: " in result.stderr
    assert "EOT" in result.stderr
    assert "mailrelay: Queued. Thank you." in result.stderr


@pytest.mark.os_agnostic
def test_when_the_terminal_closes_at_the_prompt_nothing_is_sent(
    cli_runner: CliRunner,
    relay_cli_context: Callable[..., RelayCliContext],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setattr(_TERMINAL, lambda: True)
    ctx = relay_cli_context()

    result = _mail(cli_runner, ctx, ["dev@example.org"], "")

    assert result.exit_code == 0
    assert ctx.relay.messages == []
    assert ctx.journal.records == ["no subject, no text, not sending"]


@pytest.mark.os_agnostic
def test_when_s_is_given_on_a_terminal_no_prompt_appears(
    cli_runner: CliRunner,
    relay_cli_context: Callable[..., RelayCliContext],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setattr(_TERMINAL, lambda: True)
    ctx = relay_cli_context()

    result = _mail(cli_runner, ctx, ["-s", "given", "dev@example.org"], "line\n.\n")

    assert "Subject: " not in result.stderr
    assert _sent(ctx).body == b"line\n"


@pytest.mark.os_agnostic
def test_when_t_input_ends_with_a_dot_among_the_headers_no_eot_is_echoed(
    cli_runner: CliRunner,
    relay_cli_context: Callable[..., RelayCliContext],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setattr(_TERMINAL, lambda: True)
    ctx = relay_cli_context()

    result = _mail(cli_runner, ctx, ["-t", "-s", "given"], "To: dev@example.org\n.\n")

    assert result.exit_code == 0, result.output
    assert "EOT" not in result.stderr
    message = _sent(ctx)
    assert [a.mailbox for a in message.to] == ["dev@example.org"]
    assert message.body == b""


@pytest.mark.os_agnostic
def test_when_t_input_ends_with_a_dot_in_the_body_eot_is_echoed(
    cli_runner: CliRunner,
    relay_cli_context: Callable[..., RelayCliContext],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setattr(_TERMINAL, lambda: True)
    ctx = relay_cli_context()

    result = _mail(cli_runner, ctx, ["-t", "-s", "given"], "To: dev@example.org\n\nline\n.\n")

    assert "EOT" in result.stderr
    assert _sent(ctx).body == b"line\n"


# ======================== Refusals and failures ========================


@pytest.mark.os_agnostic
def test_when_no_recipient_is_given_mailbox_reading_is_refused(
    cli_runner: CliRunner,
    relay_cli_context: Callable[..., RelayCliContext],
) -> None:
    ctx = relay_cli_context()

    result = _mail(cli_runner, ctx, [], "x\n")

    assert result.exit_code == 2
    assert "mail: mail reading is not supported" in result.stderr
    assert ctx.journal.records == ["mail reading is not supported"]


@pytest.mark.os_agnostic
def test_when_t_finds_no_recipients_it_exits_2(
    cli_runner: CliRunner,
    relay_cli_context: Callable[..., RelayCliContext],
) -> None:
    ctx = relay_cli_context()

    result = _mail(cli_runner, ctx, ["-t"], "Subject: nobody\n\nx\n")

    assert result.exit_code == 2
    assert "no recipients found in message" in result.stderr
    assert ctx.relay.messages == []


@pytest.mark.os_agnostic
def test_when_a_cc_address_is_malformed_the_field_is_named(
    cli_runner: CliRunner,
    relay_cli_context: Callable[..., RelayCliContext],
) -> None:
    ctx = relay_cli_context()

    result = _mail(cli_runner, ctx, ["-c", "a@example.org, b@example.org", "dev"], "x\n")

    assert result.exit_code == 2
    assert "cannot parse Cc: address" in result.stderr


@pytest.mark.os_agnostic
def test_when_a_cc_address_is_truncated_the_failure_is_reported_and_logged(
    cli_runner: CliRunner,
    relay_cli_context: Callable[..., RelayCliContext],
) -> None:
    ctx = relay_cli_context()

    result = _mail(cli_runner, ctx, ["-c", "x <", "dev"], "x\n")

    assert result.exit_code == 2
    assert isinstance(result.exception, SystemExit)
    assert "mail: cannot parse Cc: address: " in result.stderr
    assert ctx.journal.records[-1].startswith("cannot parse Cc: address: ")
    assert ctx.relay.messages == []


@pytest.mark.os_agnostic
def test_when_user_is_unset_and_no_sender_is_given_it_exits_2(
    cli_runner: CliRunner,
    relay_cli_context: Callable[..., RelayCliContext],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    ctx = relay_cli_context()
    monkeypatch.delenv("USER")

    result = _mail(cli_runner, ctx, ["dev@example.org"], "x\n")

    assert result.exit_code == 2
    assert "cannot determine From address: -r not used, and $USER not set" in result.stderr


@pytest.mark.os_agnostic
def test_when_an_unknown_flag_is_given_the_journal_notes_it(
    cli_runner: CliRunner,
    relay_cli_context: Callable[..., RelayCliContext],
) -> None:
    ctx = relay_cli_context()

    result = _mail(cli_runner, ctx, ["-Q", "dev@example.org"], "x\n")

    assert result.exit_code == 2
    assert ctx.journal.records == ["invalid command line"]
