"""Shared test fixtures for Bakelint."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from bakelint.syntax.ts_analyzer import clear_cache

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

CONN_CARDS = 'import { createDb } from "@/src/lib/db";\n\nexport const magicCardsDb = createDb("cards");\n'


@pytest.fixture(autouse=True)
def _clear_lang_cache() -> None:
    """Clear grammar cache before each test to avoid cross-test pollution."""
    clear_cache()


@pytest.fixture()
def write_file(tmp_path: Path) -> Callable[[str, str], Path]:
    """Write *content* to ``tmp_path / rel_path`` (creating parents) and return the path."""

    def _write(rel_path: str, content: str) -> Path:
        path = tmp_path / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture()
def ts_project(tmp_path: Path, write_file: Callable[[str, str], Path]) -> Path:
    """Create a minimal TypeScript project with one database connection module."""
    write_file("src/database/cards/conn.cards.ts", CONN_CARDS)
    (tmp_path / "src" / "function").mkdir(parents=True)
    (tmp_path / "src" / "controller").mkdir(parents=True)
    return tmp_path
