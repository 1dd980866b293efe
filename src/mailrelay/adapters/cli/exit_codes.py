"""Exit codes for CLI error paths.

Every fatal condition of a relay invocation (bad arguments, missing key,
unreadable attachment, rejected request) exits with the same status, so
calling scripts only need to test for zero.

Signal codes (130, 141, 143) are informational constants only. The application
never raises ``SystemExit`` with these values; ``lib_cli_exit_tools`` handles
signal-to-exit-code translation automatically.

Contents:
    * :class:`ExitCode`: IntEnum of all exit codes used by this application.
"""

from __future__ import annotations

from enum import IntEnum


class ExitCode(IntEnum):
    """Exit codes used by this application.

    Example:
        >>> ExitCode.SUCCESS
        <ExitCode.SUCCESS: 0>
        >>> int(ExitCode.FAILURE)
        2
    """

    SUCCESS = 0
    FAILURE = 2
    SIGNAL_INT = 130
    BROKEN_PIPE = 141
    SIGNAL_TERM = 143


__all__ = ["ExitCode"]
