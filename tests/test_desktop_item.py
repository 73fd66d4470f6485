import os

import pytest

from deskentry.desktop_item import (
    DesktopItem,
    DesktopItemError,
    ErrorKind,
    FileStatus,
    ItemType,
    item_type_from_string,
    language_names,
)


@pytest.fixture
def german_env(monkeypatch):
    monkeypatch.setenv("LANGUAGE", "")
    monkeypatch.delenv("LC_ALL", raising=False)
    monkeypatch.delenv("LC_MESSAGES", raising=False)
    monkeypatch.setenv("LANG", "de_DE.UTF-8")


@pytest.fixture
def c_env(monkeypatch):
    for name in ("LANGUAGE", "LC_ALL", "LC_MESSAGES", "LANG"):
        monkeypatch.delenv(name, raising=False)


def test_new_item_defaults():
    item = DesktopItem()
    assert item.get_string("Name") == "No name"
    assert item.get_string("Encoding") == "UTF-8"
    assert item.get_string("Version") == "1.0"
    assert item.entry_type is ItemType.NULL
    assert item.location is None


def test_default_dumps():
    item = DesktopItem()
    assert item.dumps() == (
        "[Desktop Entry]\nName=No name\nEncoding=UTF-8\nVersion=1.0\n"
    )


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Application", ItemType.APPLICATION),
        ("Link", ItemType.LINK),
        ("FSDevice", ItemType.FSDEVICE),
        ("MimeType", ItemType.MIME_TYPE),
        ("Directory", ItemType.DIRECTORY),
        ("Service", ItemType.SERVICE),
        ("ServiceType", ItemType.SERVICE_TYPE),
        ("Something", ItemType.OTHER),
        (None, ItemType.NULL),
    ],
)
def test_item_type_from_string(text, expected):
    assert item_type_from_string(text) is expected


def test_set_string_type_updates_entry_type():
    item = DesktopItem()
    item.set_string("Type", "Application")
    assert item.entry_type is ItemType.APPLICATION
    item.set_string("Type", "Weird")
    assert item.entry_type is ItemType.OTHER
    item.clear_attr("Type")
    assert item.entry_type is ItemType.NULL
    assert not item.attr_exists("Type")


def test_set_entry_type_writes_key():
    item = DesktopItem()
    item.set_entry_type(ItemType.LINK)
    assert item.get_string("Type") == "Link"
    item.set_entry_type(ItemType.NULL)
    assert item.get_string("Type") is None
    assert item.entry_type is ItemType.NULL


def test_booleans():
    item = DesktopItem()
    assert item.get_boolean("Terminal") is False
    item.set_boolean("Terminal", True)
    assert item.get_string("Terminal") == "true"
    assert item.get_boolean("Terminal") is True
    item.set_string("Terminal", "yes")
    assert item.get_boolean("Terminal") is True
    item.set_string("Terminal", "0")
    assert item.get_boolean("Terminal") is False


def test_strings_round_trip():
    item = DesktopItem()
    assert item.get_strings("MimeType") is None
    item.set_strings("MimeType", ["text/plain", "text/html"])
    parts = item.get_strings("MimeType")
    assert parts[:-1] == ["text/plain", "text/html"]
    assert parts[-1] == ""
    item.set_string("MimeType", "")
    assert item.get_strings("MimeType") == []


def test_localestring_for_language():
    item = DesktopItem()
    item.set_localestring_lang("Name", "de", "Hallo")
    assert item.get_localestring_lang("Name", "de") == "Hallo"
    assert item.get_string("Name[de]") == "Hallo"
    assert item.get_languages() == ["de"]
    item.set_localestring_lang("Name", "C", "Plain")
    assert item.get_string("Name") == "Plain"
    assert item.get_languages() == ["de"]


def test_language_names_variants(german_env):
    assert language_names() == ["de_DE.UTF-8", "de_DE", "de.UTF-8", "de", "C"]


def test_language_names_default(c_env):
    assert language_names() == ["C"]


def test_get_localestring_prefers_user_language(german_env):
    item = DesktopItem()
    item.set_localestring_lang("Comment", "de", "Deutsch")
    item.set_string("Comment", "English")
    assert item.get_localestring("Comment") == "Deutsch"
    assert item.get_attr_locale("Comment") == "de"


def test_get_localestring_falls_back_to_plain(c_env):
    item = DesktopItem()
    item.set_localestring_lang("Comment", "fr", "Bonjour")
    item.set_string("Comment", "Hello")
    assert item.get_localestring("Comment") == "Hello"
    assert item.get_attr_locale("Comment") == "C"


def test_set_localestring_uses_language_without_codeset(german_env):
    item = DesktopItem()
    item.set_localestring("Comment", "Guten Tag")
    assert item.get_string("Comment[de_DE]") == "Guten Tag"
    assert "de_DE" in item.get_languages("Comment")


def test_get_languages_filters_by_attr():
    item = DesktopItem()
    item.set_localestring_lang("Name", "de", "Hallo")
    item.set_localestring_lang("Comment", "fr", "Salut")
    assert item.get_languages("Name") == ["de"]
    assert item.get_languages("Comment") == ["fr"]
    assert set(item.get_languages()) == {"de", "fr"}


def test_clear_localestring_removes_all():
    item = DesktopItem()
    item.set_string("Comment", "Hello")
    item.set_localestring_lang("Comment", "de", "Hallo")
    item.set_localestring_lang("Comment", "fr", "Salut")
    item.clear_localestring("Comment")
    assert not item.attr_exists("Comment")
    assert item.get_localestring_lang("Comment", "de") is None
    assert item.get_localestring_lang("Comment", "fr") is None
    assert "Comment" not in item.keys


def test_section_keys_dumped():
    item = DesktopItem()
    item.set_string("Extra/Key", "value")
    text = item.dumps()
    assert text.endswith("\n[Extra]\nKey=value\n")
    assert item.sections == {"Extra": ["Key"]}
    assert "Extra/Key" not in item.keys


def test_empty_section_not_written():
    item = DesktopItem()
    item.set_string("Extra/Key", "value")
    item.clear_attr("Extra/Key")
    assert "[Extra]" not in item.dumps()
    assert item.sections == {"Extra": []}


def test_dumps_escapes_values():
    item = DesktopItem()
    item.set_string("Comment", "a\tb")
    assert "Comment=a\\tb\n" in item.dumps()


def test_clear_main_section():
    item = DesktopItem()
    item.set_string("Extra/Key", "value")
    item.clear_section(None)
    assert item.keys == []
    assert item.get_string("Name") is None
    assert item.get_string("Extra/Key") == "value"
    assert item.dumps().startswith("[Desktop Entry]\n\n")


def test_clear_named_section():
    item = DesktopItem()
    item.set_string("Extra/One", "1")
    item.set_string("Extra/Two", "2")
    item.clear_section("Extra")
    assert item.get_string("Extra/One") is None
    assert item.get_string("Extra/Two") is None
    assert item.sections["Extra"] == []
    assert item.get_string("Name") == "No name"


def test_modified_flag():
    item = DesktopItem()
    item.modified = False
    item.set_string("Comment", "x")
    assert item.modified is True


def test_copy_is_independent():
    item = DesktopItem()
    item.set_string("Extra/Key", "value")
    item.set_localestring_lang("Name", "de", "Hallo")
    clone = item.copy()
    assert clone.dumps() == item.dumps()
    assert clone.get_languages() == item.get_languages()
    clone.set_string("Extra/Key", "changed")
    clone.set_string("Comment", "new")
    assert item.get_string("Extra/Key") == "value"
    assert not item.attr_exists("Comment")


def test_save_and_read_back(tmp_path):
    item = DesktopItem()
    item.set_string("Exec", "run")
    target = tmp_path / "app.desktop"
    item.save(target.as_uri())
    assert target.read_text(encoding="utf-8") == item.dumps()
    assert item.modified is False


def test_save_without_filename_raises():
    item = DesktopItem()
    with pytest.raises(DesktopItemError) as info:
        item.save(force=True)
    assert info.value.kind is ErrorKind.NO_FILENAME


def test_save_skips_unmodified(tmp_path):
    target = tmp_path / "app.desktop"
    item = DesktopItem()
    item.set_location_file(target)
    item.save()
    assert target.exists()
    target.unlink()
    item.save()
    assert not target.exists()


def test_location_and_file_status(tmp_path):
    target = tmp_path / "entry.desktop"
    item = DesktopItem()
    assert item.file_status() is FileStatus.DISAPPEARED
    item.set_location_file(target)
    assert item.location == target.as_uri()
    assert item.file_status() is FileStatus.DISAPPEARED

    target.write_text("[Desktop Entry]\n", encoding="utf-8")
    os.utime(target, (1000, 1000))
    item.set_location(None)
    item.set_location(target.as_uri())
    assert item.mtime == 1000
    assert item.file_status() is FileStatus.UNCHANGED
    item.mtime = 0
    assert item.file_status() is FileStatus.CHANGED


def test_launch_time():
    item = DesktopItem()
    item.set_launch_time(42)
    assert item.launch_time == 42
    with pytest.raises(ValueError):
        item.set_launch_time(-1)