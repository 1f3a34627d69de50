"""Tests for bakelint.rules.database — database-area naming and layout."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from bakelint.rules import RuleContext, check, dispatch

if TYPE_CHECKING:
    from pathlib import Path


def _rules(project: Path, rel_path: str) -> list[str]:
    context = RuleContext.create(project, project / rel_path, "")
    return [d.rule for d in dispatch(context)]


class TestDatabaseLayout:
    @pytest.mark.parametrize(
        "rel_path",
        [
            "src/database/books/conn.books.ts",
            "src/database/books/auth.books.ts",
            "src/database/books/schema.books.ts",
            "src/database/books/schema.custom.books.ts",
        ],
    )
    def test_valid_files(self, tmp_path: Path, rel_path: str) -> None:
        assert _rules(tmp_path, rel_path) == []

    def test_unknown_prefix(self, tmp_path: Path) -> None:
        assert _rules(tmp_path, "src/database/books/helpers.ts") == [
            "database-file-name",
            "database-file-name-matches-directory",
        ]

    def test_wrong_directory(self, tmp_path: Path) -> None:
        context = RuleContext.create(tmp_path, tmp_path / "src/database/books/conn.cards.ts", "")
        diagnostic = check("database-file-name-matches-directory", context)
        assert diagnostic is not None
        assert "conn.books.ts" in diagnostic.error
        assert "Found: conn.cards.ts in src/database/books/" in diagnostic.error

    def test_nested_directory(self, tmp_path: Path) -> None:
        assert _rules(tmp_path, "src/database/books/nested/conn.books.ts") == [
            "database-path-depth"
        ]

    def test_file_directly_in_area(self, tmp_path: Path) -> None:
        context = RuleContext.create(tmp_path, tmp_path / "src/database/conn.books.ts", "")
        diagnostic = check("database-path-depth", context)
        assert diagnostic is not None
        assert "src/database/<dbname>/<file>.ts" in diagnostic.error
        assert "Found: src/database/conn.books.ts" in diagnostic.error
        assert check("database-file-name-matches-directory", context) is None

    def test_file_name_message(self, tmp_path: Path) -> None:
        context = RuleContext.create(tmp_path, tmp_path / "src/database/books/util.ts", "")
        diagnostic = check("database-file-name", context)
        assert diagnostic is not None
        assert "'conn.', 'schema.', or 'auth.'" in diagnostic.error
