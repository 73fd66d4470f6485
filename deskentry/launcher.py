"""Turning a desktop item and a set of URIs into the command lines it runs."""

from __future__ import annotations

import enum
import os
import shlex
from collections.abc import Iterable, Sequence

from deskentry.desktop_item import (
    EXEC,
    PATH,
    TERMINAL,
    TERMINAL_OPTIONS,
    URL,
    DesktopItem,
    DesktopItemError,
    ErrorKind,
    ItemType,
)
from deskentry.exec_expand import (
    AddedStatus,
    ConversionType,
    convert_uri,
    escape_single_quotes,
    expand_string,
)
from deskentry.terminal import terminal_vector

_ASCII_SPACE = " \t\n\v\f\r"


class LaunchFlags(enum.IntFlag):
    """Options that influence how an item is launched."""

    NONE = 0
    ONLY_ONE = 1
    USE_CURRENT_DIR = 2
    APPEND_URIS = 4
    APPEND_PATHS = 8
    DO_NOT_REAP_CHILD = 16


def strip_trailing_amp(exec_line: str) -> str:
    """Strip surrounding whitespace and one trailing ``&`` from an Exec line.

    Raises DesktopItemError when nothing launchable is left.
    """
    stripped = exec_line.strip(_ASCII_SPACE)
    if stripped.endswith("&"):
        stripped = stripped[:-1].rstrip(_ASCII_SPACE)
    if not stripped:
        raise DesktopItemError(
            ErrorKind.BAD_EXEC_STRING, "Bad command (Exec) to launch"
        )
    return stripped


def extract_uris(uri_list: str) -> list[str]:
    """Split a text/uri-list into its URIs, skipping comments and blank lines."""
    uris: list[str] = []
    for line in uri_list.split("\n"):
        if line.startswith("#"):
            continue
        entry = line.split("\r", 1)[0].strip(_ASCII_SPACE)
        # Entries of a single character are not taken as URIs.
        if len(entry) > 1:
            uris.append(entry)
    return uris


def working_directory(item: DesktopItem, use_current_dir: bool = False) -> str | None:
    """Return the directory an item's program should start in.

    An application's Path is used when it is an existing directory; otherwise
    the home directory, or None (the current directory) when
    ``use_current_dir`` is set.
    """
    directory = None
    if item.entry_type is ItemType.APPLICATION:
        path = item.get_string(PATH)
        if path and os.path.isdir(path):
            directory = path
    if directory is None and not use_current_dir:
        directory = os.path.expanduser("~")
    return directory


def _parse_argv(command_line: str) -> list[str]:
    try:
        argv = shlex.split(command_line)
    except ValueError as exc:
        raise DesktopItemError(
            ErrorKind.BAD_EXEC_STRING, f"Cannot parse command line: {exc}"
        ) from exc
    if not argv:
        raise DesktopItemError(
            ErrorKind.BAD_EXEC_STRING, "Text was empty (or contained only whitespace)"
        )
    return argv


def _stringify(uris: Sequence[str], conversion: ConversionType) -> str:
    parts = []
    for uri in uris:
        converted = convert_uri(uri, conversion)
        if converted is not None:
            parts.append(" " + escape_single_quotes(converted, False, False))
    return "".join(parts)


def _terminal_prefix(item: DesktopItem, terminal_argv: Sequence[str] | None) -> list[str]:
    if not item.get_boolean(TERMINAL):
        return []
    options: list[str] = []
    option_line = item.get_string(TERMINAL_OPTIONS)
    if option_line is not None:
        try:
            options = shlex.split(option_line)
        except ValueError:
            options = []
    terminal = list(terminal_argv) if terminal_argv is not None else terminal_vector()
    return terminal + options


def build_commands(
    item: DesktopItem,
    uris: Iterable[str] | None = None,
    flags: LaunchFlags = LaunchFlags.NONE,
    terminal_argv: Sequence[str] | None = None,
) -> list[list[str]]:
    """Return the argument vectors launching ``item`` with ``uris`` would run.

    Single-file field codes (%u, %f, %n, %d) give one command per URI unless
    ONLY_ONE is set. ``terminal_argv`` is the terminal command used for items
    with Terminal set; by default one is looked for.
    """
    uri_list = [uri for uri in (uris or []) if uri is not None]
    exec_line = item.get_string(EXEC)

    if item.entry_type is ItemType.LINK:
        url = item.get_string(URL) or exec_line
        if not url:
            raise DesktopItemError(ErrorKind.NO_URL, "No URL to launch")
        raise DesktopItemError(
            ErrorKind.NOT_LAUNCHABLE, f"Link item opens a URL, not a command: {url}"
        )
    if item.entry_type is not ItemType.APPLICATION:
        raise DesktopItemError(ErrorKind.NOT_LAUNCHABLE, "Not a launchable item")
    if not exec_line:
        raise DesktopItemError(
            ErrorKind.NO_EXEC_STRING, "No command (Exec) to launch"
        )

    exec_line = strip_trailing_amp(exec_line)
    prefix = _terminal_prefix(item, terminal_argv)

    commands: list[list[str]] = []
    pending: tuple[str, ...] = tuple(uri_list)
    while True:
        expanded, status, pending = expand_string(item, exec_line, uri_list, pending)

        if not commands and status is AddedStatus.NONE:
            if flags & LaunchFlags.APPEND_URIS:
                expanded += " " + _stringify(uri_list, ConversionType.STRING)
                status = AddedStatus.ALL
            elif flags & LaunchFlags.APPEND_PATHS:
                expanded += " " + _stringify(uri_list, ConversionType.LOCAL_PATH)
                status = AddedStatus.ALL

        if commands and status is AddedStatus.NONE:
            break

        commands.append(prefix + _parse_argv(expanded))

        if pending:
            pending = pending[1:]
        if not (
            status is AddedStatus.SINGLE
            and pending
            and not flags & LaunchFlags.ONLY_ONE
        ):
            break
    return commands


def drop_uri_list_commands(
    item: DesktopItem,
    uri_list: str,
    flags: LaunchFlags = LaunchFlags.NONE,
    terminal_argv: Sequence[str] | None = None,
) -> list[list[str]]:
    """Return the commands for URIs dropped onto an item as a text/uri-list."""
    return build_commands(item, extract_uris(uri_list), flags, terminal_argv)