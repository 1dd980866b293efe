"""Package metadata command."""

from __future__ import annotations

import logging

import rich_click as click

from mailrelay import __init__conf__

from ..constants import CLICK_CONTEXT_SETTINGS
from ._common import bound_job

logger = logging.getLogger(__name__)


@click.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_info() -> None:
    """Print resolved metadata so users can inspect installation details.

    Example:
        >>> from click.testing import CliRunner
        >>> result = CliRunner().invoke(cli_info)
        >>> result.exit_code == 0
        True
    """
    with bound_job("cli-info", command="info"):
        logger.info("Displaying package information")
        __init__conf__.print_info()


__all__ = ["cli_info"]
