"""API-key discovery.

The relay key and its sending domain travel together as one line of text,
``<domain> api:key-<hex>``, found in (priority order) an environment
variable, a per-user file and a system-wide file. The first source that
*exists* decides the outcome: a malformed value there is fatal even when a
later source would have been valid, so a stale personal key never silently
falls back to the system key.

Contents:
    * :class:`Credentials` - parsed domain and key plus where they came from.
    * :func:`parse_key` - validate and split one credential string.
    * :func:`discover_credentials` - walk the sources in order.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from mailrelay.domain.errors import ConfigurationError

logger = logging.getLogger(__name__)

_KEY_PREFIX = "api:key-"


@dataclass(frozen=True, slots=True)
class Credentials:
    """Sending domain and API key resolved from one credential source.

    Example:
        >>> creds = Credentials(domain="mg.example.com", api_key="key-3ax6", source="$MAILGUNKEY")
        >>> "key-3ax6" in repr(creds)
        False
    """

    domain: str
    api_key: str = field(repr=False)
    source: str = ""


def parse_key(source: str, text: str) -> Credentials:
    """Split ``<domain> api:key-<hex>`` into a :class:`Credentials` value.

    Exactly two whitespace-separated fields are required; the domain must
    contain a dot and the key must carry the ``api:key-`` prefix. The stored
    key keeps the ``key-`` part and drops ``api:``.

    Raises:
        ConfigurationError: Naming *source* when the text is malformed.

    Examples:
        >>> parse_key("$MAILGUNKEY", "mg.example.com api:key-0123\\n").api_key
        'key-0123'
        >>> parse_key("/etc/mailgun.key", "localhost api:key-0123")  # doctest: +IGNORE_EXCEPTION_DETAIL
        Traceback (most recent call last):
        ...
        ConfigurationError: malformed mailgun API key in /etc/mailgun.key
    """
    fields = text.split()
    if len(fields) != 2 or "." not in fields[0] or not fields[1].startswith(_KEY_PREFIX):
        raise ConfigurationError(f"malformed mailgun API key in {source}")
    return Credentials(domain=fields[0], api_key=fields[1].removeprefix("api:"), source=source)


def discover_credentials(
    *,
    env_var: str,
    user_file: str | Path,
    system_file: str | Path,
    environ: Mapping[str, str] | None = None,
) -> Credentials:
    """Resolve credentials from the first source that is present.

    Args:
        env_var: Environment variable name; an empty value counts as absent.
        user_file: Per-user file; ``~`` is expanded.
        system_file: System-wide file.
        environ: Environment mapping; ``os.environ`` when None.

    Raises:
        ConfigurationError: The first present source is malformed, or no
            source is readable (the message carries the last read error).
    """
    env = os.environ if environ is None else environ
    value = env.get(env_var, "")
    if value:
        return parse_key(f"${env_var}", value)

    last_error: OSError | None = None
    for candidate in (Path(user_file).expanduser(), Path(system_file)):
        try:
            text = candidate.read_text(encoding="utf-8")
        except OSError as exc:
            logger.debug("Credential file unavailable", extra={"path": str(candidate), "error": str(exc)})
            last_error = exc
            continue
        return parse_key(str(candidate), text)
    raise ConfigurationError(f"cannot read mailgun API key: {last_error}")


__all__ = [
    "Credentials",
    "discover_credentials",
    "parse_key",
]
