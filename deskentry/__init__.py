"""Desktop entries: in-memory items, writing, Exec line expansion and launch commands."""

__version__ = "0.1.0"

__all__ = [
    "colors",
    "desktop_item",
    "entry_codec",
    "exec_expand",
    "launcher",
    "terminal",
]