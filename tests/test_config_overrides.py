"""``--set SECTION.KEY=VALUE`` parsing, coercion and merge tests."""

from __future__ import annotations

import pytest
from lib_layered_config import Config

from mailrelay.adapters.config.overrides import (
    ConfigOverride,
    apply_overrides,
    coerce_value,
    parse_override,
)

# ======================== parse_override ========================


@pytest.mark.os_agnostic
def test_parse_override_simple_key() -> None:
    result = parse_override("relay.timeout=30")

    assert result == ConfigOverride(section="relay", key_path=("timeout",), value=30)


@pytest.mark.os_agnostic
def test_parse_override_nested_key() -> None:
    result = parse_override("lib_log_rich.payload_limits.message_max_chars=8192")

    assert result.section == "lib_log_rich"
    assert result.key_path == ("payload_limits", "message_max_chars")
    assert result.value == 8192


@pytest.mark.os_agnostic
def test_parse_override_value_containing_equals() -> None:
    result = parse_override("relay.api_base_url=https://api.test/v3?a=b")

    assert result.value == "https://api.test/v3?a=b"


@pytest.mark.os_agnostic
def test_parse_override_empty_value() -> None:
    assert parse_override("relay.delivery_log=").value == ""


@pytest.mark.os_agnostic
@pytest.mark.parametrize(
    ("raw", "reason"),
    [
        ("relay.timeout", "must contain '='"),
        ("timeout=3", "at least one dot"),
        (".timeout=3", "section name is empty"),
        ("relay.=3", "empty component"),
        ("relay.timeout.=3", "empty component"),
        ("=", "at least one dot"),
    ],
)
def test_parse_override_rejects_malformed_input(raw: str, reason: str) -> None:
    with pytest.raises(ValueError, match=reason):
        parse_override(raw)


# ======================== coerce_value ========================


@pytest.mark.os_agnostic
@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("true", True),
        ("false", False),
        ("16", 16),
        ("-1", -1),
        ("2.5", 2.5),
        ("null", None),
        ('["a", "b"]', ["a", "b"]),
        ('{"k": 1}', {"k": 1}),
        ("WARNING", "WARNING"),
        ("/var/log/mailgun.log", "/var/log/mailgun.log"),
        ("", ""),
        ("two words", "two words"),
    ],
)
def test_coerce_value_reads_json_or_keeps_the_string(raw: str, expected: object) -> None:
    assert coerce_value(raw) == expected


# ======================== apply_overrides ========================


@pytest.mark.os_agnostic
def test_apply_overrides_empty_tuple_returns_same_instance() -> None:
    config = Config({"relay": {"timeout": 0}}, {})

    assert apply_overrides(config, ()) is config


@pytest.mark.os_agnostic
def test_apply_overrides_replaces_one_key_and_keeps_its_neighbours() -> None:
    config = Config({"relay": {"timeout": 0, "principal": "api"}}, {})

    result = apply_overrides(config, ("relay.timeout=30",))

    assert result.get("relay.timeout") == 30
    assert result.get("relay.principal") == "api"


@pytest.mark.os_agnostic
def test_apply_overrides_multiple_overrides_across_sections() -> None:
    config = Config({"relay": {"timeout": 0}, "lib_log_rich": {"console_level": "WARNING"}}, {})

    result = apply_overrides(config, ("relay.timeout=5", "lib_log_rich.console_level=DEBUG"))

    assert result.get("relay.timeout") == 5
    assert result.get("lib_log_rich.console_level") == "DEBUG"


@pytest.mark.os_agnostic
def test_apply_overrides_creates_missing_section() -> None:
    config = Config({"relay": {"timeout": 0}}, {})

    result = apply_overrides(config, ("extra.flag=true",))

    assert result.get("extra.flag") is True


@pytest.mark.os_agnostic
def test_apply_overrides_does_not_mutate_original() -> None:
    config = Config({"relay": {"timeout": 0}}, {})

    apply_overrides(config, ("relay.timeout=9",))

    assert config.get("relay.timeout") == 0


@pytest.mark.os_agnostic
def test_apply_overrides_refuses_nesting_under_an_overridden_scalar() -> None:
    config = Config({"relay": {}}, {})

    with pytest.raises(TypeError, match="Expected dict"):
        apply_overrides(config, ("relay.timeout=1", "relay.timeout.seconds=2"))


@pytest.mark.os_agnostic
def test_apply_overrides_rejects_malformed_input_before_merging() -> None:
    config = Config({"relay": {"timeout": 0}}, {})

    with pytest.raises(ValueError, match="Invalid override"):
        apply_overrides(config, ("relay.timeout=1", "broken"))
