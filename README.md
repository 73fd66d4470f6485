# deskentry

A library for desktop entries (`.desktop`, `.directory`). It can:

- hold an entry in memory as a `DesktopItem`, with typed accessors for
  strings, locale strings, string lists and booleans, and extra sections;
- write an entry out in desktop entry syntax, to a string or to a `file://`
  location;
- expand an `Exec` line's field codes (`%f`, `%F`, `%u`, `%U`, `%d`, `%D`,
  `%n`, `%N`, `%m`, `%i`, `%c`, `%k`, `%v`, `%%`) into argument vectors,
  with a terminal prepended when the entry sets `Terminal=true`.

It never starts programs. It returns the command lines to run.

## Installation

```
pip install deskentry
```

## Building and editing an entry

```python
from deskentry.desktop_item import DesktopItem, ItemType

item = DesktopItem()                  # starts with Name, Encoding and Version
item.set_string("Type", "Application")
item.entry_type                       # ItemType.APPLICATION
item.set_string("Name", "Editor")
item.set_localestring_lang("Name", "de", "Bearbeiter")
item.set_string("Exec", "editor %f")
item.set_strings("MimeType", ["text/plain"])
item.set_boolean("Terminal", False)

item.get_localestring_lang("Name", "de")   # "Bearbeiter"
item.get_languages("Name")                 # ["de"]
item.get_strings("MimeType")               # ["text/plain", ""]
item.get_boolean("Terminal")               # False

print(item.dumps())
```

Keys of extra sections are written as `"Section/Key"`, for example
`item.set_string("Desktop Action New/Exec", "editor --new")`.
`clear_section(None)` empties the main section and `clear_section(name)` empties
another one.

`get_localestring` and `get_attr_locale` choose a translation by the user's
languages. `deskentry.desktop_item.language_names()` reads these from
`LANGUAGE`, `LC_ALL`, `LC_MESSAGES` or `LANG`, and always ends with `"C"`.

### Saving

```python
item.set_location_file("/tmp/editor.desktop")
item.save()                        # writes to the item's location
item.save("file:///tmp/copy.desktop")
item.file_status()                 # FileStatus.UNCHANGED / CHANGED / DISAPPEARED
```

`save()` does nothing if the item is unmodified, unless `force=True` is
passed. Only `file://` locations can be written. Failures raise
`DesktopItemError`, whose `kind` is an `ErrorKind`: `NO_FILENAME` when there
is nowhere to save, and `CANNOT_OPEN` for a location that is not a local file.

## Building launch commands

```python
from deskentry.launcher import build_commands, LaunchFlags

build_commands(item, ["file:///tmp/a.txt", "file:///tmp/b.txt"])
# [["editor", "/tmp/a.txt"], ["editor", "/tmp/b.txt"]]

build_commands(item, ["file:///tmp/a.txt", "file:///tmp/b.txt"], LaunchFlags.ONLY_ONE)
# [["editor", "/tmp/a.txt"]]
```

- Single-file codes (`%f`, `%u`, `%d`, `%n`) give one command per URI.
  List codes (`%F`, `%U`, `%D`, `%N`) put every URI into one command.
- `APPEND_URIS` and `APPEND_PATHS` add the URIs, or their local paths, when the
  `Exec` line has no field code.
- For items with `Terminal=true`, the `terminal_argv` argument gives the
  terminal command. If it is omitted, `deskentry.terminal.terminal_vector()`
  looks one up in `PATH`: `mate-terminal -x`, else `nxterm`, `color-xterm`,
  `rxvt`, `xterm` or `dtterm` with `-e`. `TerminalOptions` are added after it.
- `drop_uri_list_commands(item, text)` does the same for a `text/uri-list`.
  `extract_uris(text)` is the function that splits such a list.
- `working_directory(item, use_current_dir)` gives the directory to start in:
  the application's `Path` if it is an existing directory, otherwise the home
  directory, or `None` when `use_current_dir` is set.

`build_commands` raises `DesktopItemError` in these cases:

- `NOT_LAUNCHABLE` for items that are not applications. Link items also get
  this error, since they open a URL. A link item that has no URL raises
  `NO_URL` instead.
- `NO_EXEC_STRING` when `Exec` is missing.
- `BAD_EXEC_STRING` when `Exec` is empty, or when the expanded line cannot be
  parsed.

The expansion step itself is in `deskentry.exec_expand`: `expand_string`,
`convert_uri` and `escape_single_quotes`.

## Value helpers

`deskentry.entry_codec` has the lower-level pieces for entry values:

- `decode_escapes` and `escape_value` handle the `\s \t \n \r \\` escapes.
- `parse_boolean` and `canonicalize` normalise booleans and list values.
- `locale_from_key` takes the locale out of a key such as `Name[de]`.
- `detect_encoding`, `decode_value` and `encoding_for_locale` deal with
  UTF-8 and legacy-mixed encodings.

## Colour helpers

`deskentry.colors` provides `rgb_to_hls`, `hls_to_rgb` and `shade`, plus
`light_color` and `dark_color`. These scale a colour's lightness and
saturation by 1.3 and 0.7. Colours are `(r, g, b)` or `(r, g, b, a)` tuples
of floats in `[0, 1]`, and alpha is passed through unchanged.

## What it does not do

The package has no parser for desktop entry files. It cannot read a `.desktop`
file, a `.directory` file or a `.order` sort file into a `DesktopItem`, and it
cannot look entries up in the XDG data directories. Items are built in code
and can only be written out.