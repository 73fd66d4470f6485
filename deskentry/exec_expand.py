"""Expansion of the % field codes in a desktop entry's Exec line."""

from __future__ import annotations

import enum
import posixpath
from collections.abc import Sequence
from urllib.parse import unquote, urlsplit

from deskentry.desktop_item import DEV, ICON, MINI_ICON, NAME, DesktopItem

_LOCAL_HOSTS = ("", "localhost")


class ConversionType(enum.Enum):
    """How a URI is turned into a command line argument."""

    STRING = enum.auto()
    LOCAL_PATH = enum.auto()
    LOCAL_DIRNAME = enum.auto()
    LOCAL_BASENAME = enum.auto()


class AddedStatus(enum.IntEnum):
    """How many of the given URIs an expansion consumed."""

    NONE = 0
    SINGLE = 1
    ALL = 2


def escape_single_quotes(
    s: str, in_single_quotes: bool, in_double_quotes: bool
) -> str:
    """Quote ``s`` for a shell, given the quoting context it is inserted into."""
    if not in_single_quotes and not in_double_quotes:
        pre, post = "'", "'"
    elif not in_single_quotes and in_double_quotes:
        pre, post = "\"'", "'\""
    else:
        pre, post = "", ""
    return pre + s.replace("'", "'\\''") + post


def _local_path(uri: str) -> str | None:
    parts = urlsplit(uri)
    if parts.scheme != "file" or parts.netloc not in _LOCAL_HOSTS:
        return None
    return unquote(parts.path)


def convert_uri(uri: str, conversion: ConversionType) -> str | None:
    """Convert a URI as a field code requires; None when it cannot be done."""
    if conversion is ConversionType.STRING:
        return uri
    if conversion is ConversionType.LOCAL_PATH:
        return _local_path(uri)
    if conversion is ConversionType.LOCAL_DIRNAME:
        path = _local_path(uri)
        return None if path is None else posixpath.dirname(path)
    path = unquote(urlsplit(uri).path)
    stripped = path.rstrip("/")
    if not stripped:
        return "/" if path else None
    return stripped.rsplit("/", 1)[-1]


_ALL_CODES = {
    "U": ConversionType.STRING,
    "F": ConversionType.LOCAL_PATH,
    "N": ConversionType.LOCAL_BASENAME,
    "D": ConversionType.LOCAL_DIRNAME,
}
_FIRST_CODES = {
    "u": ConversionType.STRING,
    "f": ConversionType.LOCAL_PATH,
    "n": ConversionType.LOCAL_BASENAME,
    "d": ConversionType.LOCAL_DIRNAME,
}


class _Expander:
    def __init__(
        self,
        item: DesktopItem,
        uris: Sequence[str],
        pending: Sequence[str],
    ) -> None:
        self.item = item
        self.uris = list(uris)
        self.pending = list(pending)
        self.status = AddedStatus.NONE
        self.out: list[str] = []

    def _append_quoted(self, value: str, single: bool, double: bool) -> None:
        self.out.append(escape_single_quotes(value, single, double))

    def _append_all(self, conversion: ConversionType, single: bool, double: bool) -> None:
        for uri in self.uris:
            converted = convert_uri(uri, conversion)
            if converted is None:
                continue
            self.out.append(" ")
            self._append_quoted(converted, single, double)
        self.status = AddedStatus.ALL

    def _append_first(
        self, conversion: ConversionType, single: bool, double: bool
    ) -> None:
        while self.pending:
            converted = convert_uri(self.pending[0], conversion)
            if converted is not None:
                self._append_quoted(converted, single, double)
                if self.status is not AddedStatus.ALL:
                    self.status = AddedStatus.SINGLE
                return
            self.pending.pop(0)

    def percent(self, code: str, single: bool, double: bool) -> bool:
        """Handle ``%`` followed by ``code``; return whether the code was consumed."""
        item = self.item
        if code == "%":
            self.out.append("%")
        elif code in _ALL_CODES:
            self._append_all(_ALL_CODES[code], single, double)
        elif code in _FIRST_CODES:
            self._append_first(_FIRST_CODES[code], single, double)
        elif code == "m":
            value = item.get_string(MINI_ICON)
            if value is not None:
                self.out.append("--miniicon=")
                self._append_quoted(value, single, double)
        elif code == "i":
            value = item.get_string(ICON)
            if value is not None:
                self.out.append("--icon=")
                self._append_quoted(value, single, double)
        elif code == "c":
            value = item.get_localestring(NAME)
            if value is not None:
                self._append_quoted(value, single, double)
        elif code == "k":
            if item.location is not None:
                self._append_quoted(item.location, single, double)
        elif code == "v":
            value = item.get_localestring(DEV)
            if value is not None:
                self._append_quoted(value, single, double)
        else:
            # Keep sequences such as "%20" intact.
            if code.isascii() and code.isdigit():
                self.out.append("%")
            return False
        return True

    def run(self, text: str) -> str:
        escape = single = double = False
        skip = False
        for position, ch in enumerate(text):
            if skip:
                skip = False
                continue
            if escape:
                escape = False
                self.out.append(ch)
            elif ch == "\\":
                if not single:
                    escape = True
                self.out.append(ch)
            elif ch == "'":
                self.out.append(ch)
                if not single and not double:
                    single = True
                elif single:
                    single = False
            elif ch == '"':
                self.out.append(ch)
                if not single and not double:
                    double = True
                elif double:
                    double = False
            elif ch == "%":
                code = text[position + 1:position + 2]
                if code and self.percent(code, single, double):
                    skip = True
            else:
                self.out.append(ch)
        return "".join(self.out)


def expand_string(
    item: DesktopItem,
    text: str,
    uris: Sequence[str],
    pending: Sequence[str] | None = None,
) -> tuple[str, AddedStatus, tuple[str, ...]]:
    """Expand the field codes of an Exec line.

    ``uris`` are all the URIs given to the launch and feed the %U, %F, %N and
    %D codes; ``pending`` (by default the same URIs) feeds the single-file
    codes %u, %f, %n and %d from its first convertible entry. Returns the
    expanded line, how many URIs were consumed, and ``pending`` with any
    leading entries that could not be converted dropped.
    """
    expander = _Expander(item, uris, uris if pending is None else pending)
    expanded = expander.run(text)
    return expanded, expander.status, tuple(expander.pending)