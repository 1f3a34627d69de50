"""Tests for bakelint.resolvers.siblings — test/implementation mapping and portal lookup."""

from __future__ import annotations

from typing import TYPE_CHECKING

from bakelint.resolvers.siblings import (
    corresponding_implementation_file,
    exists,
    extract_portal_database_variable,
    is_test_file,
    read_text,
    relative_posix,
)

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path


class TestCorrespondingImplementationFile:
    def test_relative(self) -> None:
        assert (
            corresponding_implementation_file("src/function/users/fx.create.test.ts")
            == "src/function/users/fx.create.ts"
        )

    def test_absolute(self) -> None:
        assert corresponding_implementation_file("/p/src/fn.a.test.tsx") == "/p/src/fn.a.tsx"

    def test_without_marker(self) -> None:
        assert corresponding_implementation_file("src/fn.a.ts") == "src/fn.a.ts"

    def test_custom_marker(self) -> None:
        assert corresponding_implementation_file("fn.a.spec.ts", ".spec") == "fn.a.ts"


class TestIsTestFile:
    def test_detects_marker(self) -> None:
        assert is_test_file("src/function/m/fx.a.test.ts")
        assert not is_test_file("src/function/m/fx.a.ts")
        assert not is_test_file("src/function/m/fx.test.helpers.ts")


class TestFilesystem:
    def test_missing_file(self, tmp_path: Path) -> None:
        assert exists(tmp_path / "nope.ts") is False
        assert read_text(tmp_path / "nope.ts") is None

    def test_existing_file(self, write_file: Callable[[str, str], Path]) -> None:
        path = write_file("src/a.ts", "export const a = 1;\n")
        assert exists(path) is True
        assert read_text(path) == "export const a = 1;\n"

    def test_relative_posix(self, tmp_path: Path) -> None:
        assert relative_posix(tmp_path, tmp_path / "src" / "a.ts") == "src/a.ts"
        assert relative_posix(tmp_path, "src/a.ts") == "src/a.ts"
        assert relative_posix(tmp_path / "src", tmp_path / "other" / "a.ts") is None


class TestExtractPortalDatabaseVariable:
    def test_nested_types_before_db(self) -> None:
        text = (
            "export type TPortal = {\n"
            "  logger: { info: (msg: string) => void };\n"
            "  db: typeof magicCardsDb;\n"
            "};\n"
        )
        assert extract_portal_database_variable(text) == "magicCardsDb"

    def test_db_not_typeof(self) -> None:
        assert extract_portal_database_variable("export type TPortal = { db: Database };") is None

    def test_no_db_property(self) -> None:
        assert extract_portal_database_variable("export type TPortal = { clock: Clock };") is None

    def test_no_alias(self) -> None:
        assert extract_portal_database_variable("export type TArgs = { db: typeof x };") is None

    def test_custom_names(self) -> None:
        text = "export type Deps = { store: typeof booksDb };"
        assert extract_portal_database_variable(text, "Deps", "store") == "booksDb"
