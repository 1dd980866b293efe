"""Console script entry points with production wiring.

This module provides the entry points for console scripts (pip-installed commands).
It wires production services from the composition layer before invoking the CLI.

``mailrelay-sendmail`` and ``mailrelay-mail`` are drop-in names for the legacy
programs: they run the corresponding subcommand directly, so ``-t``, ``-i`` and
friends are parsed exactly as the legacy programs parse them.

System Role:
    Sits at package level (outside adapters) to properly wire composition into
    the adapters layer without violating clean architecture layer constraints.
"""

from __future__ import annotations

import sys

from .adapters.cli.main import main as cli_main
from .composition import build_production


def main() -> int:
    """Console script entry point with production services wired.

    Returns:
        Exit code from CLI execution.
    """
    return cli_main(services_factory=build_production)


def sendmail_main() -> int:
    """Entry point for ``mailrelay-sendmail``."""
    return cli_main(["sendmail", *sys.argv[1:]], services_factory=build_production)


def mail_main() -> int:
    """Entry point for ``mailrelay-mail``."""
    return cli_main(["mail", *sys.argv[1:]], services_factory=build_production)


__all__ = ["mail_main", "main", "sendmail_main"]
