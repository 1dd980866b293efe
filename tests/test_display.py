"""Config display wrapper tests.

The wrapper flushes pending log output, then hands over to
``lib_layered_config``'s renderer; these tests pin the parts the relay
depends on (relay defaults visible, secrets masked, missing sections refused).
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest
from lib_layered_config import Config

from mailrelay.adapters.config.display import display_config
from mailrelay.domain.enums import OutputFormat


@pytest.mark.os_agnostic
@pytest.mark.parametrize("fmt", [OutputFormat.HUMAN, OutputFormat.JSON])
def test_display_config_raises_for_nonexistent_section(
    config_factory: Callable[[dict[str, Any]], Config],
    fmt: OutputFormat,
) -> None:
    config = config_factory({"relay": {"principal": "api"}})

    with pytest.raises(ValueError, match="not found"):
        display_config(config, output_format=fmt, section="smtp")


@pytest.mark.os_agnostic
def test_display_human_renders_relay_section(capsys: pytest.CaptureFixture[str]) -> None:
    config = Config({"relay": {"api_base_url": "https://api.mailgun.net/v3", "timeout": 0}}, {})

    display_config(config, output_format=OutputFormat.HUMAN)

    output = capsys.readouterr().out
    assert "[relay]" in output
    assert 'api_base_url = "https://api.mailgun.net/v3"' in output
    assert "timeout = 0" in output


@pytest.mark.os_agnostic
def test_display_json_renders_selected_section(capsys: pytest.CaptureFixture[str]) -> None:
    config = Config({"relay": {"conduit_depth": 16}, "lib_log_rich": {"console_level": "WARNING"}}, {})

    display_config(config, output_format=OutputFormat.JSON, section="relay")

    output = capsys.readouterr().out
    assert '"conduit_depth": 16' in output
    assert "console_level" not in output


@pytest.mark.os_agnostic
def test_display_masks_values_under_secret_looking_names(capsys: pytest.CaptureFixture[str]) -> None:
    config = Config({"relay": {"api_key": "key-0123456789abcdef", "principal": "api"}}, {})

    display_config(config, output_format=OutputFormat.JSON)

    output = capsys.readouterr().out
    assert "key-0123456789abcdef" not in output
    assert '"principal": "api"' in output


@pytest.mark.os_agnostic
def test_display_config_json_displays_section_with_falsey_values(capsys: pytest.CaptureFixture[str]) -> None:
    """A zero timeout must display (not raise as 'not found')."""
    config = Config({"relay": {"timeout": 0, "delivery_log": ""}}, {})

    display_config(config, output_format=OutputFormat.JSON, section="relay")

    output = capsys.readouterr().out
    assert '"timeout": 0' in output
    assert '"delivery_log": ""' in output
