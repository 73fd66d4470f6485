"""In-memory representation of a desktop entry and its typed accessors."""

from __future__ import annotations

import enum
import os
import time
from pathlib import Path
from urllib.parse import unquote, urlsplit

from deskentry.entry_codec import escape_value, parse_boolean

ENCODING = "Encoding"
VERSION = "Version"
NAME = "Name"
GENERIC_NAME = "GenericName"
TYPE = "Type"
FILE_PATTERN = "FilePattern"
TRY_EXEC = "TryExec"
NO_DISPLAY = "NoDisplay"
COMMENT = "Comment"
EXEC = "Exec"
ACTIONS = "Actions"
ICON = "Icon"
MINI_ICON = "MiniIcon"
HIDDEN = "Hidden"
PATH = "Path"
TERMINAL = "Terminal"
TERMINAL_OPTIONS = "TerminalOptions"
SWALLOW_TITLE = "SwallowTitle"
SWALLOW_EXEC = "SwallowExec"
MIME_TYPE = "MimeType"
PATTERNS = "Patterns"
DEFAULT_APP = "DefaultApp"
DEV = "Dev"
FS_TYPE = "FSType"
MOUNT_POINT = "MountPoint"
READ_ONLY = "ReadOnly"
UNMOUNT_ICON = "UnmountIcon"
SORT_ORDER = "SortOrder"
URL = "URL"
DOC_PATH = "X-MATE-DocPath"
CATEGORIES = "Categories"
ONLY_SHOW_IN = "OnlyShowIn"

MAIN_SECTION = "Desktop Entry"
DEFAULT_NAME = "No name"

_MAX_LAUNCH_TIME = 2**32 - 1


class ItemType(enum.Enum):
    """Kind of a desktop entry, taken from its Type key."""

    NULL = 0
    OTHER = 1
    APPLICATION = 2
    LINK = 3
    FSDEVICE = 4
    MIME_TYPE = 5
    DIRECTORY = 6
    SERVICE = 7
    SERVICE_TYPE = 8


class FileStatus(enum.Enum):
    """State of the on-disk file compared with the loaded item."""

    UNCHANGED = 0
    CHANGED = 1
    DISAPPEARED = 2


class ErrorKind(enum.Enum):
    """Reasons a desktop item operation can fail."""

    NO_FILENAME = enum.auto()
    UNKNOWN_ENCODING = enum.auto()
    CANNOT_OPEN = enum.auto()
    NO_EXEC_STRING = enum.auto()
    BAD_EXEC_STRING = enum.auto()
    NO_URL = enum.auto()
    NOT_LAUNCHABLE = enum.auto()
    INVALID_TYPE = enum.auto()


class DesktopItemError(Exception):
    """Raised when loading, saving or launching a desktop item fails."""

    def __init__(self, kind: ErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind


_TYPE_NAMES = {
    ItemType.APPLICATION: "Application",
    ItemType.LINK: "Link",
    ItemType.FSDEVICE: "FSDevice",
    ItemType.MIME_TYPE: "MimeType",
    ItemType.DIRECTORY: "Directory",
    ItemType.SERVICE: "Service",
    ItemType.SERVICE_TYPE: "ServiceType",
}
_TYPES_BY_NAME = {name: kind for kind, name in _TYPE_NAMES.items()}


def item_type_from_string(value: str | None) -> ItemType:
    """Map the value of a Type key to an ItemType."""
    if value is None:
        return ItemType.NULL
    return _TYPES_BY_NAME.get(value, ItemType.OTHER)


def _locale_variants(locale: str):
    rest = locale
    modifier = codeset = territory = ""
    at = rest.find("@")
    if at >= 0:
        rest, modifier = rest[:at], rest[at:]
    dot = rest.find(".")
    if dot >= 0:
        rest, codeset = rest[:dot], rest[dot:]
    underscore = rest.find("_")
    if underscore >= 0:
        rest, territory = rest[:underscore], rest[underscore:]
    mask = (1 if codeset else 0) | (2 if territory else 0) | (4 if modifier else 0)
    for bits in range(mask, -1, -1):
        if bits & ~mask:
            continue
        yield (
            rest
            + (territory if bits & 2 else "")
            + (codeset if bits & 1 else "")
            + (modifier if bits & 4 else "")
        )


def language_names() -> list[str]:
    """Return the user's preferred language names, most specific first, ending in "C"."""
    value = None
    for variable in ("LANGUAGE", "LC_ALL", "LC_MESSAGES", "LANG"):
        setting = os.environ.get(variable)
        if setting:
            value = setting
            break
    if value is None:
        value = "C"
    names: list[str] = []
    for alias in value.split(":"):
        if not alias:
            continue
        for variant in _locale_variants(alias):
            if variant not in names:
                names.append(variant)
    if "C" not in names:
        names.append("C")
    return names


def _uri_to_path(uri: str) -> str | None:
    parts = urlsplit(uri)
    if parts.scheme != "file":
        return None
    return unquote(parts.path)


def _query_mtime(uri: str) -> int | None:
    path = _uri_to_path(uri)
    if path is None:
        return None
    try:
        return int(os.stat(path).st_mtime)
    except OSError:
        return None


class DesktopItem:
    """A desktop entry: keys of the main section plus any extra sections.

    ``values`` maps every key to its value; keys of extra sections are stored
    as ``"Section/Key"``. ``keys`` keeps the main section's key order and
    ``sections`` maps each extra section name to its ordered key names.
    """

    def __init__(self) -> None:
        self.languages: list[str] = []
        self._type = ItemType.NULL
        self.modified = False
        self.keys: list[str] = []
        self.sections: dict[str, list[str]] = {}
        self.values: dict[str, str] = {}
        self._location: str | None = None
        self.mtime = 0
        self.launch_time = 0

        self.set_string(NAME, DEFAULT_NAME)
        self.set_string(ENCODING, "UTF-8")
        self.set_string(VERSION, "1.0")

    def copy(self) -> DesktopItem:
        """Return an independent copy of this item."""
        other = DesktopItem()
        other._type = self._type
        other.modified = self.modified
        other._location = self._location
        other.mtime = self.mtime
        other.launch_time = self.launch_time
        other.languages = list(self.languages)
        other.keys = list(self.keys)
        other.sections = {name: list(keys) for name, keys in self.sections.items()}
        other.values = dict(self.values)
        return other

    # --- type -----------------------------------------------------------

    @property
    def entry_type(self) -> ItemType:
        """The item's type; assigning it leaves the Type key untouched."""
        return self._type

    @entry_type.setter
    def entry_type(self, item_type: ItemType) -> None:
        self._type = item_type

    def set_entry_type(self, item_type: ItemType) -> None:
        """Set the item's type and write the matching Type key."""
        self._type = item_type
        if item_type is ItemType.NULL:
            self._set(TYPE, None)
        elif item_type in _TYPE_NAMES:
            self._set(TYPE, _TYPE_NAMES[item_type])

    # --- location -------------------------------------------------------

    @property
    def location(self) -> str | None:
        """The URI the item was loaded from or will be saved to."""
        return self._location

    def set_location(self, location: str | None) -> None:
        """Set the item's URI and refresh its modification time."""
        if (
            self._location is not None
            and location is not None
            and self._location == location
        ):
            return
        self._location = location
        self.mtime = 0
        if location:
            mtime = _query_mtime(location)
            if mtime is not None:
                self.mtime = mtime
        self.modified = True

    def set_location_file(self, path: str | os.PathLike | None) -> None:
        """Set the item's location from a local file name."""
        if path is None:
            self.set_location(None)
            return
        self.set_location(Path(os.path.abspath(os.fspath(path))).as_uri())

    def file_status(self) -> FileStatus:
        """Compare the on-disk file's modification time with the item's."""
        if self._location is None:
            return FileStatus.DISAPPEARED
        mtime = _query_mtime(self._location)
        if mtime is None:
            return FileStatus.DISAPPEARED
        if self.mtime < mtime:
            return FileStatus.CHANGED
        return FileStatus.UNCHANGED

    # --- raw storage ----------------------------------------------------

    def _find_section(self, section: str | None) -> list[str] | None:
        if section is None or section == MAIN_SECTION:
            return None
        return self.sections.setdefault(section, [])

    def _set(self, key: str, value: str | None) -> None:
        slash = key.find("/")
        section_keys = self._find_section(key[:slash]) if slash >= 0 else None
        if section_keys is not None:
            list_key = key[key.rfind("/") + 1:]
            target = section_keys
        else:
            list_key = key
            target = self.keys

        if value is not None:
            if key not in self.values:
                target.append(list_key)
            self.values[key] = value
        else:
            if list_key in target:
                target.remove(list_key)
            self.values.pop(key, None)
        self.modified = True

    def _lookup_locale(self, key: str, locale: str | None) -> str | None:
        if locale is None or locale == "C":
            return self.values.get(key)
        return self.values.get(f"{key}[{locale}]")

    def _set_locale(self, key: str, locale: str | None, value: str | None) -> None:
        if locale is None or locale == "C":
            self._set(key, value)
            return
        self._set(f"{key}[{locale}]", value)
        if locale not in self.languages:
            self.languages.insert(0, locale)

    # --- string ---------------------------------------------------------

    def attr_exists(self, attr: str) -> bool:
        """Return whether the attribute has a value."""
        return attr in self.values

    def get_string(self, attr: str) -> str | None:
        """Return the raw value of an attribute."""
        return self.values.get(attr)

    def set_string(self, attr: str, value: str | None) -> None:
        """Set an attribute; None removes it. Setting Type updates the item type."""
        self._set(attr, value)
        if attr == TYPE:
            self._type = item_type_from_string(value)

    def clear_attr(self, attr: str) -> None:
        """Remove an attribute."""
        self.set_string(attr, None)

    # --- locale strings -------------------------------------------------

    def get_localestring(self, attr: str) -> str | None:
        """Return the best translation of an attribute for the user's languages."""
        for language in language_names():
            value = self._lookup_locale(attr, language)
            if value is not None:
                return value
        return None

    def get_localestring_lang(self, attr: str, language: str | None) -> str | None:
        """Return the translation of an attribute for one language."""
        return self._lookup_locale(attr, language)

    def get_attr_locale(self, attr: str) -> str | None:
        """Return the user language whose translation of ``attr`` would be used."""
        for language in language_names():
            if self._lookup_locale(attr, language) is not None:
                return language
        return None

    def get_languages(self, attr: str | None = None) -> list[str]:
        """Return the item's languages, limited to those translating ``attr``."""
        return [
            language
            for language in self.languages
            if attr is None or self._lookup_locale(attr, language) is not None
        ]

    def set_localestring(self, attr: str, value: str | None) -> None:
        """Set the translation for the user's first language without a codeset."""
        language = next((name for name in language_names() if "." not in name), None)
        self._set_locale(attr, language, value)

    def set_localestring_lang(
        self, attr: str, language: str | None, value: str | None
    ) -> None:
        """Set the translation of an attribute for one language."""
        self._set_locale(attr, language, value)

    def clear_localestring(self, attr: str) -> None:
        """Remove an attribute together with all its translations."""
        for language in list(self.languages):
            self._set_locale(attr, language, None)
        self._set(attr, None)

    # --- lists and booleans ---------------------------------------------

    def get_strings(self, attr: str) -> list[str] | None:
        """Return a semicolon separated value as a list."""
        value = self.values.get(attr)
        if value is None:
            return None
        if value == "":
            return []
        return value.split(";")

    def set_strings(self, attr: str, strings) -> None:
        """Store a list as a semicolon terminated value."""
        self._set(attr, ";".join(strings) + ";")

    def get_boolean(self, attr: str) -> bool:
        """Return an attribute as a boolean; missing means False."""
        value = self.values.get(attr)
        if value is None:
            return False
        return parse_boolean(value)

    def set_boolean(self, attr: str, value: bool) -> None:
        """Store a boolean attribute."""
        self._set(attr, "true" if value else "false")

    def set_launch_time(self, timestamp: int) -> None:
        """Record the time of the user action that caused a launch."""
        if not 0 <= timestamp <= _MAX_LAUNCH_TIME:
            raise ValueError("launch time must fit in 32 unsigned bits")
        self.launch_time = timestamp

    def clear_section(self, section: str | None) -> None:
        """Remove every key of a section; None means the main section."""
        section_keys = self._find_section(section)
        if section_keys is None:
            for key in self.keys:
                self.values.pop(key, None)
            self.keys = []
        else:
            for key in section_keys:
                self.values.pop(f"{section}/{key}", None)
            section_keys.clear()
        self.modified = True

    # --- output ---------------------------------------------------------

    def dumps(self) -> str:
        """Render the item in desktop entry file syntax."""
        lines = [f"[{MAIN_SECTION}]\n"]
        for key in self.keys:
            value = self.values.get(key)
            if value is not None:
                lines.append(f"{key}={escape_value(value)}\n")

        if self.sections:
            lines.append("\n")

        names = list(self.sections)
        for position, name in enumerate(names, 1):
            section_keys = self.sections[name]
            if not section_keys:
                continue
            lines.append(f"[{name}]\n")
            for key in section_keys:
                value = self.values.get(f"{name}/{key}")
                if value is not None:
                    lines.append(f"{key}={escape_value(value)}\n")
            if position < len(names):
                lines.append("\n")
        return "".join(lines)

    def save(self, under: str | None = None, force: bool = False) -> None:
        """Write the item to ``under`` or to its location.

        Nothing is written when saving to the item's own location while it is
        unmodified, unless ``force`` is set.
        """
        if under is None and not force and not self.modified:
            return
        uri = self._location if under is None else under
        if uri is None:
            raise DesktopItemError(ErrorKind.NO_FILENAME, "No filename to save to")
        path = _uri_to_path(uri)
        if path is None:
            raise DesktopItemError(ErrorKind.CANNOT_OPEN, f"Cannot write to '{uri}'")
        with open(path, "w", encoding="utf-8", newline="\n") as handle:
            handle.write(self.dumps())
        self.modified = False
        self.mtime = int(time.time())