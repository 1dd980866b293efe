"""Static package metadata surfaced to CLI commands and documentation.

Values mirror ``pyproject.toml`` so that the CLI can report metadata without
querying the installed distribution at runtime.
"""

from __future__ import annotations

#: Distribution name declared in pyproject.toml.
name = "mailrelay"
#: Human-readable summary shown in CLI help output.
title = "Relay sendmail- and mail-compatible submissions through the Mailgun HTTP API"
#: Current release version.
version = "1.0.0"
#: Author attribution.
author = "mailrelay developers"
#: Console-script name published by the package.
shell_command = "mailrelay"

#: Vendor, application, and slug identifiers for lib_layered_config path resolution.
LAYEREDCONF_VENDOR: str = "mailrelay"
LAYEREDCONF_APP: str = "mailrelay"
LAYEREDCONF_SLUG: str = "mailrelay"


def print_info() -> None:
    """Print the summarised metadata block used by the CLI ``info`` command.

    Example:
        >>> print_info()  # doctest: +ELLIPSIS
        Info for mailrelay:
        ...
    """
    fields = [
        ("name", name),
        ("title", title),
        ("version", version),
        ("author", author),
        ("shell_command", shell_command),
    ]
    pad = max(len(label) for label, _ in fields)
    lines = [f"Info for {name}:", ""]
    lines.extend(f"    {label.ljust(pad)} = {value}" for label, value in fields)
    print("\n".join(lines))
