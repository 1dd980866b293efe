"""Layered settings loader for the relay commands.

Non-secret settings (endpoint prefix, credential locations, delivery log,
timeouts) come from ``lib_layered_config``: the bundled
``defaultconfig.toml`` first, then app, host and user files, ``.env`` and the
process environment. The API key is deliberately *not* part of these layers;
see :mod:`.credentials`.

Contents:
    * :func:`get_config` - cached ``read_config`` wrapper with profile checks.
    * :func:`get_default_config_path` - location of the bundled defaults.
    * :func:`validate_profile` - reject unsafe profile names early.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Protocol, cast

from lib_layered_config import (
    DEFAULT_MAX_PROFILE_LENGTH,
    Config,
    read_config,
    validate_profile_name,
)

from mailrelay import __init__conf__


class ConfigLoaderProtocol(Protocol):
    """Config loader callable that also exposes ``cache_clear``."""

    def __call__(self, *, profile: str | None = None, start_dir: str | None = None) -> Config: ...
    def cache_clear(self) -> None: ...


def validate_profile(profile: str, max_length: int | None = None) -> None:
    """Reject profile names that could escape the configuration directories.

    Raises:
        ValueError: For empty, over-long, reserved or path-like names.

    Examples:
        >>> validate_profile("staging")

        >>> validate_profile("../etc")  # doctest: +IGNORE_EXCEPTION_DETAIL
        Traceback (most recent call last):
        ...
        ValueError: profile contains invalid characters: ../etc
    """
    validate_profile_name(profile, max_length=max_length if max_length is not None else DEFAULT_MAX_PROFILE_LENGTH)


@lru_cache(maxsize=1)
def get_default_config_path() -> Path:
    """Return the bundled ``defaultconfig.toml`` shipped next to this module.

    Example:
        >>> get_default_config_path().name
        'defaultconfig.toml'
    """
    return Path(__file__).parent / "defaultconfig.toml"


# One read per (profile, start_dir) for the life of the process; sendmail
# invocations are short-lived.
@lru_cache(maxsize=4)
def _read_layers(*, profile: str | None = None, start_dir: str | None = None) -> Config:
    return read_config(
        vendor=__init__conf__.LAYEREDCONF_VENDOR,
        app=__init__conf__.LAYEREDCONF_APP,
        slug=__init__conf__.LAYEREDCONF_SLUG,
        profile=profile,
        default_file=get_default_config_path(),
        start_dir=start_dir,
    )


def _get_config(*, profile: str | None = None, start_dir: str | None = None) -> Config:
    """Load the merged settings layers.

    Precedence, lowest first: defaults, app, host, user, dotenv, env. A
    profile inserts ``profile/<name>/`` into every file location so that,
    for example, a staging relay domain can live beside production.

    Args:
        profile: Optional profile name, validated before any file access.
        start_dir: Directory that seeds ``.env`` discovery; the working
            directory when None.

    Returns:
        Immutable configuration with provenance for every key.

    Example:
        >>> config = get_config()
        >>> config.get("relay", default={})["principal"]
        'api'
    """
    if profile is not None:
        validate_profile(profile)
    return _read_layers(profile=profile, start_dir=start_dir)


def _cache_clear() -> None:
    """Drop cached layers so the next :func:`get_config` re-reads from disk."""
    _read_layers.cache_clear()


_get_config.cache_clear = _cache_clear  # type: ignore[attr-defined]
get_config: ConfigLoaderProtocol = cast(ConfigLoaderProtocol, _get_config)


__all__ = [
    "get_config",
    "get_default_config_path",
    "validate_profile",
]
