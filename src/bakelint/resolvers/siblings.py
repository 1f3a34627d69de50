"""Sibling file resolver: test/implementation mapping and portal type inspection."""

from __future__ import annotations

import re
from pathlib import Path

from bakelint.syntax.delimiters import type_alias_shape

_TYPEOF_RE = re.compile(r"^typeof\s+([A-Za-z_$][\w$]*)$")


def relative_posix(directory: str | Path, file_path: str | Path) -> str | None:
    """Return *file_path* relative to *directory* as a POSIX string.

    ``None`` when the file lies outside the directory.
    """
    path = Path(file_path)
    if not path.is_absolute():
        path = Path(directory) / path
    try:
        return path.resolve().relative_to(Path(directory).resolve()).as_posix()
    except ValueError:
        return None


def is_test_file(path: str | Path, test_marker: str = ".test") -> bool:
    """Whether the base name carries *test_marker* right before the extension."""
    name = Path(path).name
    stem, dot, _ = name.rpartition(".")
    return bool(dot) and stem.endswith(test_marker)


def corresponding_implementation_file(test_path: str, test_marker: str = ".test") -> str:
    """Map ``x/fx.a.test.ts`` to ``x/fx.a.ts``.  Paths without the marker are returned as-is."""
    head, sep, name = test_path.replace("\\", "/").rpartition("/")
    stem, dot, ext = name.rpartition(".")
    if dot and stem.endswith(test_marker):
        name = f"{stem[: -len(test_marker)]}.{ext}"
    return f"{head}{sep}{name}"


def exists(path: str | Path) -> bool:
    return Path(path).is_file()


def read_text(path: str | Path) -> str | None:
    """Return the file's text, or ``None`` when it does not exist.

    Other ``OSError``s (permissions, directories) propagate.
    """
    try:
        return Path(path).read_text(encoding="utf-8")
    except FileNotFoundError:
        return None


def extract_portal_database_variable(
    text: str, portal_alias: str = "TPortal", database_property: str = "db"
) -> str | None:
    """Return ``X`` from ``export type TPortal = { db: typeof X }``, else ``None``."""
    shape = type_alias_shape(text, portal_alias)
    if shape is None:
        return None
    prop = shape.get(database_property)
    if prop is None:
        return None
    match = _TYPEOF_RE.match(prop.type_text.strip())
    return match.group(1) if match else None
