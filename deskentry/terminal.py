"""Choosing a terminal emulator and prepending it to a command vector."""

from __future__ import annotations

import logging
import shlex
import shutil
from collections.abc import Iterable

logger = logging.getLogger(__name__)

_FALLBACK_TERMINALS = ("nxterm", "color-xterm", "rxvt", "xterm", "dtterm")


def find_terminal() -> list[str]:
    """Return the command of a common terminal emulator found in PATH.

    mate-terminal is preferred and started with ``-x``; other terminals use
    ``-e``. Falls back to plain ``xterm`` when nothing is found.
    """
    found = shutil.which("mate-terminal")
    if found is not None:
        return [found, "-x"]
    for name in _FALLBACK_TERMINALS:
        found = shutil.which(name)
        if found is not None:
            return [found, "-e"]
    logger.warning("Cannot find a terminal, using xterm, even if it may not work")
    return ["xterm", "-e"]


def terminal_vector(
    exec_command: str | None = None, exec_arg: str | None = None
) -> list[str]:
    """Return the terminal command to run programs in.

    ``exec_command`` and ``exec_arg`` are the configured terminal and its
    execute flag; when the command is missing or cannot be parsed a terminal
    is searched for in PATH.
    """
    if exec_command:
        command_line = f"{exec_command} {exec_arg}" if exec_arg else exec_command
        try:
            argv = shlex.split(command_line)
        except ValueError:
            argv = []
        if argv:
            return argv
    return find_terminal()


def prepend_terminal(
    argv: Iterable[str] | None,
    exec_command: str | None = None,
    exec_arg: str | None = None,
) -> list[str]:
    """Return ``argv`` preceded by the terminal command."""
    return terminal_vector(exec_command, exec_arg) + list(argv or [])