"""Shared pytest fixtures for CLI, relay and module-entry tests.

Centralizes test infrastructure following clean architecture principles:
- All shared fixtures live here
- Tests import fixtures implicitly via pytest's conftest discovery
- Fixtures use descriptive names that read as plain English
"""

from __future__ import annotations

import dataclasses
import re
from collections.abc import Callable, Iterator
from dataclasses import dataclass, fields
from pathlib import Path
from typing import TYPE_CHECKING, Any

import lib_cli_exit_tools
import pytest
from click.testing import CliRunner
from lib_layered_config import Config

if TYPE_CHECKING:
    from mailrelay.adapters.memory import DeliveryLogSpy, RelaySpy
    from mailrelay.adapters.relay.config import RelayConfig
    from mailrelay.composition import AppServices


def _load_dotenv() -> None:
    """Load .env file when it exists for integration test configuration."""
    from dotenv import load_dotenv

    env_file = Path(__file__).parent.parent / ".env"
    if env_file.exists():
        load_dotenv(env_file)


_load_dotenv()

ANSI_ESCAPE_PATTERN = re.compile(r"\x1B\[[0-?]*[ -/]*[@-~]")
CONFIG_FIELDS: tuple[str, ...] = tuple(field.name for field in fields(type(lib_cli_exit_tools.config)))


def _remove_ansi_codes(text: str) -> str:
    """Return *text* stripped of ANSI escape sequences."""
    return ANSI_ESCAPE_PATTERN.sub("", text)


def _snapshot_cli_config() -> dict[str, object]:
    """Capture every attribute from ``lib_cli_exit_tools.config``."""
    return {name: getattr(lib_cli_exit_tools.config, name) for name in CONFIG_FIELDS}


def _restore_cli_config(snapshot: dict[str, object]) -> None:
    """Reapply a configuration snapshot captured by ``_snapshot_cli_config``."""
    for name, value in snapshot.items():
        setattr(lib_cli_exit_tools.config, name, value)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a fresh CliRunner per test.

    Click 8.2+ keeps ``result.stdout`` and ``result.stderr`` apart. The
    submission commands print every diagnostic on stderr, so assertions on
    operator-facing messages read ``result.stderr``.

    Returns:
        CliRunner: A fresh Click test runner instance.

    Example:
        def test_help(cli_runner: CliRunner) -> None:
            result = cli_runner.invoke(cli, ["--help"])
            assert result.exit_code == 0
    """
    return CliRunner()


@pytest.fixture
def strip_ansi() -> Callable[[str], str]:
    """Return a helper that strips ANSI escape sequences from a string.

    Useful for comparing CLI output that may contain rich formatting
    (colors, bold, etc.) against expected plain text.
    """

    def _strip(value: str) -> str:
        return _remove_ansi_codes(value)

    return _strip


@pytest.fixture
def managed_traceback_state() -> Iterator[None]:
    """Reset traceback flags to a known baseline and restore after the test.

    Use this whenever a test reads or mutates the global
    ``lib_cli_exit_tools.config`` traceback flags.

    Yields:
        None: Test runs with isolated traceback state.
    """
    lib_cli_exit_tools.reset_config()
    lib_cli_exit_tools.config.traceback = False
    lib_cli_exit_tools.config.traceback_force_color = False
    snapshot = _snapshot_cli_config()
    try:
        yield
    finally:
        _restore_cli_config(snapshot)


@pytest.fixture
def clear_config_cache() -> Iterator[None]:
    """Clear the get_config cache before each test.

    Note: Only clears before, not after, to avoid errors when the function
    has been monkeypatched during the test (losing cache_clear method).
    """
    from mailrelay.adapters.config import loader as config_mod

    config_mod.get_config.cache_clear()
    yield


@pytest.fixture
def config_factory() -> Callable[[dict[str, Any]], Config]:
    """Create real Config instances from test data dicts.

    Builds actual ``lib_layered_config.Config`` objects without filesystem I/O.
    The second argument (empty dict) represents no source provenance info.

    Example:
        def test_relay_section(config_factory: Callable[[dict[str, Any]], Config]) -> None:
            config = config_factory({"relay": {"timeout": 5}})
            assert config.get("relay.timeout") == 5
    """

    def _factory(data: dict[str, Any]) -> Config:
        return Config(data, {})

    return _factory


@pytest.fixture
def relay_config() -> RelayConfig:
    """A ready RelayConfig with fixed test credentials and default settings."""
    from mailrelay.adapters.memory import TEST_API_KEY, TEST_DOMAIN
    from mailrelay.adapters.relay.config import RelayConfig, RelaySettings

    return RelayConfig(settings=RelaySettings(), domain=TEST_DOMAIN, api_key=TEST_API_KEY)


@pytest.fixture
def clean_user_env(monkeypatch: pytest.MonkeyPatch) -> str:
    """Pin ``$USER`` so sender fallbacks are deterministic."""
    monkeypatch.setenv("USER", "ops")
    return "ops"


@dataclass
class RelayCliContext:
    """Container for submission CLI test setup.

    Attributes:
        factory: Callable that returns wired AppServices for CLI invocation.
        relay: RelaySpy capturing every send.
        journal: DeliveryLogSpy capturing every delivery-log line.
    """

    factory: Callable[[], Any]
    relay: RelaySpy
    journal: DeliveryLogSpy


@pytest.fixture
def relay_cli_context(
    clear_config_cache: None,
    clean_user_env: str,
) -> Callable[..., RelayCliContext]:
    """Create a submission CLI context with in-memory relay and journal.

    Returns a function taking an optional config dict (the full layered
    configuration, e.g. ``{"relay": {...}}``) and returning the wired
    factory plus both spies.

    Example:
        def test_mail(cli_runner: CliRunner, relay_cli_context: Callable[..., RelayCliContext]) -> None:
            ctx = relay_cli_context()
            result = cli_runner.invoke(cli, ["mail", "-s", "hi", "dev"], input="body\\n", obj=ctx.factory)
            assert ctx.relay.messages[0]["message"].subject == "hi"
    """
    from mailrelay.adapters.memory import DeliveryLogSpy, RelaySpy
    from mailrelay.composition import build_testing

    def _create(config_data: dict[str, Any] | None = None) -> RelayCliContext:
        relay = RelaySpy()
        journal = DeliveryLogSpy()
        services = build_testing(relay=relay, journal=journal)
        if config_data is not None:
            config = Config(config_data, {})

            def _fake_get_config(**_kwargs: Any) -> Config:
                return config

            services = dataclasses.replace(services, get_config=_fake_get_config)
        return RelayCliContext(factory=lambda: services, relay=relay, journal=journal)

    return _create


@pytest.fixture
def config_cli_context(
    clear_config_cache: None,
) -> Callable[[dict[str, Any]], Callable[[], AppServices]]:
    """Create a CLI services factory whose configuration is *config_data*.

    Keeps the production display so ``config`` output is real.

    Example:
        def test_config_display(cli_runner, config_cli_context) -> None:
            factory = config_cli_context({"relay": {"timeout": 7}})
            result = cli_runner.invoke(cli, ["config"], obj=factory)
            assert "timeout" in result.output
    """
    from mailrelay.composition import build_production

    def _create(config_data: dict[str, Any]) -> Callable[[], AppServices]:
        config = Config(config_data, {})

        def _fake_get_config(**_kwargs: Any) -> Config:
            return config

        prod = build_production()
        test_services = dataclasses.replace(prod, get_config=_fake_get_config)
        return lambda: test_services

    return _create


@pytest.fixture
def inject_config_with_profile_capture(
    clear_config_cache: None,
) -> Callable[[Config, list[str | None]], Callable[[], AppServices]]:
    """Return a factory that records the profile passed to get_config."""
    from mailrelay.composition import build_testing

    def _inject(config: Config, captured_profiles: list[str | None]) -> Callable[[], AppServices]:
        def _capturing_get_config(*, profile: str | None = None, **_kwargs: Any) -> Config:
            captured_profiles.append(profile)
            return config

        test_services = dataclasses.replace(build_testing(), get_config=_capturing_get_config)
        return lambda: test_services

    return _inject
