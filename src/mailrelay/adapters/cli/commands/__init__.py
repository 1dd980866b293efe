"""CLI command implementations.

Collects all subcommand functions and re-exports them for registration
with the root CLI group.

Contents:
    * Info command from :mod:`.info`
    * Config command from :mod:`.config`
    * ``sendmail`` submission from :mod:`.sendmail_cmd`
    * ``mail`` composition from :mod:`.mail_cmd`
"""

from __future__ import annotations

from .config import cli_config
from .info import cli_info
from .mail_cmd import cli_mail
from .sendmail_cmd import cli_sendmail

__all__ = [
    "cli_config",
    "cli_info",
    "cli_mail",
    "cli_sendmail",
]
