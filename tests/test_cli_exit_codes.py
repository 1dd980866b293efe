"""Exit code stories: every fatal relay condition exits 2, success exits 0."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

import pytest
from click.testing import CliRunner, Result

from mailrelay.adapters import cli as cli_mod
from mailrelay.adapters.cli.exit_codes import ExitCode
from mailrelay.domain.errors import AttachmentError, ConfigurationError, TransportError

if TYPE_CHECKING:
    from conftest import RelayCliContext

MESSAGE = "Subject: nightly\n\nok\n"


@pytest.mark.os_agnostic
def test_when_the_relay_accepts_the_message_it_exits_0(
    cli_runner: CliRunner,
    relay_cli_context: Callable[..., RelayCliContext],
) -> None:
    ctx = relay_cli_context()

    result: Result = cli_runner.invoke(cli_mod.cli, ["sendmail", "ops"], input=MESSAGE, obj=ctx.factory)

    assert result.exit_code == ExitCode.SUCCESS


@pytest.mark.os_agnostic
@pytest.mark.parametrize(
    "failure",
    [
        TransportError("HTTP status 401", status_code=401),
        TransportError("connection refused"),
        AttachmentError("attachment /nope: no such file"),
        ConfigurationError("no API key found"),
    ],
    ids=["http-status", "network", "attachment", "credentials"],
)
def test_when_sending_fails_it_exits_2(
    cli_runner: CliRunner,
    relay_cli_context: Callable[..., RelayCliContext],
    failure: Exception,
) -> None:
    ctx = relay_cli_context()
    ctx.relay.raise_exception = failure

    result: Result = cli_runner.invoke(cli_mod.cli, ["mail", "-s", "x", "ops"], input="body\n", obj=ctx.factory)

    assert result.exit_code == ExitCode.FAILURE
    assert str(failure) in result.stderr
    assert ctx.journal.records[-1] == str(failure)


@pytest.mark.os_agnostic
@pytest.mark.parametrize(
    "argv",
    [
        ["sendmail", "-bd"],
        ["sendmail"],
        ["sendmail", "-d", "smtp", "ops"],
        ["mail"],
        ["mail", "-Z", "ops"],
        ["sendmail", "--no-such-option"],
    ],
    ids=["daemon-mode", "no-recipients", "bad-debug", "mail-reading", "bad-mail-flag", "bad-sendmail-flag"],
)
def test_when_the_command_line_is_refused_it_exits_2(
    cli_runner: CliRunner,
    relay_cli_context: Callable[..., RelayCliContext],
    argv: list[str],
) -> None:
    ctx = relay_cli_context()

    result: Result = cli_runner.invoke(cli_mod.cli, argv, input="", obj=ctx.factory)

    assert result.exit_code == ExitCode.FAILURE
    assert ctx.relay.messages == []
    assert ctx.relay.envelopes == []


@pytest.mark.os_agnostic
def test_when_relay_settings_fail_validation_it_exits_2(
    cli_runner: CliRunner,
    relay_cli_context: Callable[..., RelayCliContext],
) -> None:
    ctx = relay_cli_context({"relay": {"conduit_depth": 0}})

    result: Result = cli_runner.invoke(cli_mod.cli, ["sendmail", "ops"], input=MESSAGE, obj=ctx.factory)

    assert result.exit_code == ExitCode.FAILURE
    assert "conduit_depth" in result.stderr


@pytest.mark.os_agnostic
@pytest.mark.parametrize(
    ("argv", "failure", "expected_exit"),
    [
        (["sendmail", "ops"], None, ExitCode.SUCCESS),
        (["sendmail", "ops"], TransportError("HTTP status 500", status_code=500), ExitCode.FAILURE),
        (["sendmail", "-Z", "ops"], None, ExitCode.FAILURE),
    ],
    ids=["accepted", "relay-failure", "usage-error"],
)
def test_the_delivery_log_is_closed_however_the_run_ends(
    cli_runner: CliRunner,
    relay_cli_context: Callable[..., RelayCliContext],
    argv: list[str],
    failure: Exception | None,
    expected_exit: ExitCode,
) -> None:
    ctx = relay_cli_context()
    ctx.relay.raise_exception = failure

    result: Result = cli_runner.invoke(cli_mod.cli, argv, input=MESSAGE, obj=ctx.factory)

    assert result.exit_code == expected_exit
    assert ctx.journal.closed == 1
