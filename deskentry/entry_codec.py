"""Value encoding, escaping and type canonicalisation for desktop entry files."""

from __future__ import annotations

import codecs
import enum
import re
from collections.abc import Iterable
from functools import lru_cache

ENCODING_KEY = "Encoding"

_BOOLEAN_KEYS = frozenset({"NoDisplay", "Hidden", "Terminal", "ReadOnly"})
_STRINGS_KEYS = frozenset(
    {"FilePattern", "Actions", "MimeType", "Patterns", "SortOrder"}
)

_DECODE_ESCAPES = {"s": " ", "t": "\t", "n": "\n", "\\": "\\", "r": "\r"}
_ENCODE_ESCAPES = {"\t": "\\t", "\n": "\\n", "\r": "\\r", "\\": "\\\\"}

_ATOI = re.compile(r"\s*([+-]?\d+)")


class Encoding(enum.Enum):
    """Character encoding of a desktop entry file."""

    UNKNOWN = "unknown"
    UTF8 = "utf-8"
    LEGACY_MIXED = "legacy-mixed"


def decode_escapes(s: str) -> str:
    """Expand the \\s, \\t, \\n, \\r and \\\\ escapes; keep any other backslash."""
    out: list[str] = []
    chars = iter(s)
    for ch in chars:
        if ch != "\\":
            out.append(ch)
            continue
        nxt = next(chars, None)
        if nxt is None:
            out.append("\\")
        elif nxt in _DECODE_ESCAPES:
            out.append(_DECODE_ESCAPES[nxt])
        else:
            out.append("\\" + nxt)
    return "".join(out)


def escape_value(s: str | None) -> str:
    """Escape tabs, newlines, carriage returns and backslashes for writing."""
    if s is None:
        return ""
    return "".join(_ENCODE_ESCAPES.get(ch, ch) for ch in s)


def _codec_available(name: str) -> bool:
    try:
        codecs.lookup(name)
    except LookupError:
        return False
    return True


@lru_cache(maxsize=1)
def _locale_encodings() -> dict[str, str]:
    table: dict[str, str] = {}

    def insert(encoding: str, *locales: str) -> None:
        for loc in locales:
            table[loc] = encoding

    insert("ASCII", "C")
    insert("ARMSCII-8", "by")
    insert("BIG5", "zh_TW")
    insert("CP1251", "be", "bg")
    if _codec_available("EUC-CN"):
        insert("EUC-CN", "zh_CN")
    else:
        insert("GB2312", "zh_CN")
    insert("EUC-JP", "ja")
    insert("EUC-KR", "ko")
    insert("GEORGIAN-PS", "ka")
    insert(
        "ISO-8859-1",
        "br", "ca", "da", "de", "en", "es", "eu", "fi", "fr", "gl",
        "it", "nl", "wa", "no", "pt", "sv",
    )
    insert("ISO-8859-2", "cs", "hr", "hu", "pl", "ro", "sk", "sl", "sq", "sr")
    insert("ISO-8859-3", "eo")
    insert("ISO-8859-5", "mk", "sp")
    insert("ISO-8859-7", "el")
    insert("ISO-8859-9", "tr")
    insert("ISO-8859-13", "lt", "lv", "mi")
    insert("ISO-8859-14", "ga", "cy")
    insert("ISO-8859-15", "et")
    insert("KOI8-R", "ru")
    insert("KOI8-U", "uk")
    if _codec_available("TCVN-5712"):
        insert("TCVN-5712", "vi")
    else:
        insert("TCVN", "vi")
    insert("TIS-620", "th")
    return table


def encoding_for_locale(locale: str | None) -> str | None:
    """Return the legacy character encoding a locale implies, if known."""
    if locale is None:
        return None
    if "." in locale:
        return locale.split(".", 1)[1]
    table = _locale_encodings()
    if locale in table:
        return table[locale]
    return table.get(locale[:2])


def _is_utf8(data: bytes) -> bool:
    try:
        data.decode("utf-8")
    except UnicodeDecodeError:
        return False
    return True


def detect_encoding(lines: Iterable[bytes], uri: str | None) -> Encoding:
    """Work out a file's encoding from its lines (without line endings) and URI."""
    prefix = ENCODING_KEY.encode("ascii")
    old_kde = False
    all_valid_utf8 = True
    for line in lines:
        if line.startswith(prefix):
            rest = line[len(prefix):]
            if rest.startswith(b" "):
                rest = rest[1:]
            if not rest.startswith(b"="):
                continue
            rest = rest[1:]
            if rest.startswith(b" "):
                rest = rest[1:]
            if rest == b"UTF-8":
                return Encoding.UTF8
            if rest == b"Legacy-Mixed":
                return Encoding.LEGACY_MIXED
            return Encoding.UNKNOWN
        if line == b"[KDE Desktop Entry]":
            old_kde = True
        if all_valid_utf8 and not _is_utf8(line):
            all_valid_utf8 = False

    if old_kde:
        return Encoding.LEGACY_MIXED
    if uri is not None and "mate/apps/" in uri:
        return Encoding.LEGACY_MIXED
    return Encoding.UTF8 if all_valid_utf8 else Encoding.LEGACY_MIXED


def decode_value(
    value: bytes | str, encoding: Encoding, locale: str | None
) -> str | None:
    """Decode a raw value to text and expand escapes.

    Returns None when a localised value cannot be decoded and should be skipped.
    """
    raw = value.encode("utf-8") if isinstance(value, str) else value

    if locale is not None and encoding is Encoding.LEGACY_MIXED:
        char_encoding = encoding_for_locale(locale)
        if char_encoding is None:
            return None
        if char_encoding == "ASCII":
            return decode_escapes(raw.decode("utf-8", errors="replace"))
        try:
            text = raw.decode(char_encoding)
        except (LookupError, UnicodeDecodeError):
            return None
        return decode_escapes(text)

    if locale is not None and encoding is Encoding.UTF8:
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError:
            return None
        return decode_escapes(text)

    return decode_escapes(raw.decode("utf-8", errors="replace"))


def locale_from_key(key: str) -> str | None:
    """Return the locale between brackets in a key such as ``Name[de]``."""
    brace = key.find("[")
    if brace < 0:
        return None
    rest = key[brace + 1:]
    if not rest:
        return None
    end = rest.find("]")
    if end < 0:
        return None
    return rest[:end]


def _atoi(value: str) -> int:
    match = _ATOI.match(value)
    return int(match.group(1)) if match else 0


def parse_boolean(value: str) -> bool:
    """Interpret a desktop entry boolean the lenient way."""
    if value[:1] in ("T", "t", "Y", "y"):
        return True
    return _atoi(value) != 0


def canonicalize(key: str, value: str) -> str | None:
    """Return the canonical form of a standard key's value, or None if unchanged."""
    if key in _BOOLEAN_KEYS:
        return "true" if parse_boolean(value) else "false"
    if key in _STRINGS_KEYS and not value.endswith(";"):
        return value + ";"
    return None