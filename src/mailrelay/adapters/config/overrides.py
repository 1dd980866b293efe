"""``--set SECTION.KEY=VALUE`` overrides applied on top of the loaded layers.

Operators use these for one-off changes such as pointing a single run at a
sandbox endpoint (``--set relay.api_base_url=https://...``) or raising the
console log level while debugging a delivery.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import cast

import orjson
from lib_layered_config import Config

CoercedValue = str | int | float | bool | None | list[object] | dict[str, object]
"""Types :func:`coerce_value` can produce."""


@dataclass(frozen=True, slots=True)
class ConfigOverride:
    """One parsed override: top-level section, nested key path, value."""

    section: str
    key_path: tuple[str, ...]
    value: CoercedValue


def parse_override(raw: str) -> ConfigOverride:
    """Parse ``SECTION.KEY[.SUBKEY...]=VALUE``.

    The path ends at the first ``=``; everything after it is the value, so
    values may themselves contain ``=``.

    Raises:
        ValueError: Missing ``=``, missing dot, or an empty path component.

    Examples:
        >>> parse_override("relay.timeout=30")
        ConfigOverride(section='relay', key_path=('timeout',), value=30)
        >>> parse_override("relay.api_base_url=https://x.test/v3?a=b").value
        'https://x.test/v3?a=b'
    """
    path, sep, value = raw.partition("=")
    if not sep:
        raise ValueError(f"Invalid override {raw!r}: must contain '='")
    section, dot, rest = path.partition(".")
    if not dot:
        raise ValueError(f"Invalid override {raw!r}: key must contain at least one dot (SECTION.KEY)")
    if not section:
        raise ValueError(f"Invalid override {raw!r}: section name is empty")
    key_path = tuple(rest.split("."))
    if not all(key_path):
        raise ValueError(f"Invalid override {raw!r}: key path contains empty component")
    return ConfigOverride(section=section, key_path=key_path, value=coerce_value(value))


def coerce_value(raw: str) -> CoercedValue:
    """Interpret *raw* as JSON when possible, else keep the string.

    Examples:
        >>> coerce_value("16"), coerce_value("false"), coerce_value("WARNING")
        (16, False, 'WARNING')
        >>> coerce_value("")
        ''
    """
    if not raw:
        return ""
    try:
        return orjson.loads(raw)
    except orjson.JSONDecodeError:
        return raw


def _merge_into(tree: dict[str, object], override: ConfigOverride) -> None:
    node = cast("dict[str, object]", tree.setdefault(override.section, {}))
    for part in override.key_path[:-1]:
        child = node.setdefault(part, {})
        if not isinstance(child, dict):
            raise TypeError(f"Expected dict at key {part!r}, got {type(child).__name__}")
        node = cast("dict[str, object]", child)
    node[override.key_path[-1]] = override.value


def apply_overrides(config: Config, raw_overrides: Iterable[str]) -> Config:
    """Return *config* with every override deep-merged in.

    Raises:
        ValueError: If any override string is malformed.

    Examples:
        >>> cfg = Config({"relay": {"timeout": 0}}, {})
        >>> apply_overrides(cfg, ["relay.timeout=5"])["relay"]["timeout"]
        5
        >>> apply_overrides(cfg, ()) is cfg
        True
    """
    parsed = [parse_override(raw) for raw in raw_overrides]
    if not parsed:
        return config
    tree: dict[str, object] = {}
    for override in parsed:
        _merge_into(tree, override)
    return config.with_overrides(tree)


__all__ = [
    "CoercedValue",
    "ConfigOverride",
    "apply_overrides",
    "coerce_value",
    "parse_override",
]
