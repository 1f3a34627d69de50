"""Tests for bakelint.config — conventions defaults and bakelint.yml loading."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from bakelint.config import (
    API_AREA,
    CONTROLLER_AREA,
    DATABASE_AREA,
    FUNCTION_AREA,
    Conventions,
    load_conventions,
    load_project_conventions,
    parse_conventions,
)

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path


class TestDefaults:
    def test_naming_classes(self) -> None:
        conventions = Conventions()
        fx = conventions.naming_class_for("fx.create.ts")
        assert fx is not None
        assert fx.parameters == ("portal", "args")
        assert conventions.result_marker(fx) == "TErrTuple"
        tx = conventions.naming_class_for("tx.transfer.ts")
        assert tx is not None
        assert conventions.result_marker(tx) == "TErrTriple"
        fn = conventions.naming_class_for("fn.sum.ts")
        assert fn is not None
        assert fn.parameters == ("args",)
        assert conventions.naming_class_for("get-users.ts") is None

    def test_area_of(self) -> None:
        conventions = Conventions()
        assert conventions.area_of("src/function/users/fx.a.ts") == FUNCTION_AREA
        assert conventions.area_of("src/controller/ctrl.a.ts") == CONTROLLER_AREA
        assert conventions.area_of("src/database/books/conn.books.ts") == DATABASE_AREA
        assert conventions.area_of("src/api/users/api.users.ts") == API_AREA
        assert conventions.area_of("src/functional/fx.a.ts") is None
        assert conventions.area_of(None) is None

    def test_doc_pointer(self) -> None:
        pointer = Conventions().doc_pointer(FUNCTION_AREA)
        assert pointer == "You might want to read docs/conventions/functions.md"


class TestParseConventions:
    def test_empty_document(self) -> None:
        assert parse_conventions(None) == Conventions()

    def test_overrides(self) -> None:
        conventions = parse_conventions(
            {
                "version": 1,
                "function_area": "lib/fns",
                "portal_marker": "Deps",
                "prefixes": [
                    {"prefix": "pure.", "label": "Pure", "result": "tuple", "parameters": ["args"]},
                    {
                        "prefix": "eff.",
                        "label": "Effect",
                        "result": "triple",
                        "parameters": ["portal", "args"],
                    },
                ],
                "result_markers": {"triple": "Result3"},
                "strict_portal_database": True,
                "docs": {"function": "FUNCTIONS.md"},
            }
        )
        assert conventions.function_area == "lib/fns"
        assert conventions.portal_marker == "Deps"
        assert [nc.prefix for nc in conventions.prefixes] == ["pure.", "eff."]
        assert conventions.result_markers == {"tuple": "TErrTuple", "triple": "Result3"}
        assert conventions.strict_portal_database is True
        assert conventions.doc_pointer(FUNCTION_AREA) == "You might want to read FUNCTIONS.md"
        assert conventions.area_of("lib/fns/a/pure.x.ts") == FUNCTION_AREA

    def test_api_overrides(self) -> None:
        conventions = parse_conventions(
            {"api_area": "src/routes", "api_prefix": "route.", "api_route_prefix": "/v1/"}
        )
        assert conventions.area_of("src/routes/route.users.ts") == API_AREA
        assert conventions.area_of("src/api/api.users.ts") is None
        assert conventions.api_prefix == "route."
        assert conventions.api_route_prefix == "/v1/"

    def test_unsupported_version(self) -> None:
        with pytest.raises(ValueError, match="unsupported version 2"):
            parse_conventions({"version": 2})

    def test_not_a_mapping(self) -> None:
        with pytest.raises(ValueError, match="must be a YAML mapping"):
            parse_conventions(["a"])

    def test_invalid_result(self) -> None:
        with pytest.raises(ValueError, match="invalid result 'quad'"):
            parse_conventions({"prefixes": [{"prefix": "fn.", "result": "quad"}]})

    def test_invalid_role(self) -> None:
        with pytest.raises(ValueError, match="invalid parameter role 'ctx'"):
            parse_conventions({"prefixes": [{"prefix": "fn.", "parameters": ["ctx"]}]})

    def test_duplicate_prefix(self) -> None:
        with pytest.raises(ValueError, match="duplicate prefix 'fn.'"):
            parse_conventions({"prefixes": [{"prefix": "fn."}, {"prefix": "fn."}]})

    def test_missing_prefix(self) -> None:
        with pytest.raises(ValueError, match="missing required 'prefix'"):
            parse_conventions({"prefixes": [{"label": "x"}]})

    def test_empty_string_value(self) -> None:
        with pytest.raises(ValueError, match="'args_marker' must be a non-empty string"):
            parse_conventions({"args_marker": ""})


class TestLoadConventions:
    def test_load_file(self, write_file: Callable[[str, str], Path]) -> None:
        path = write_file("bakelint.yml", "version: 1\nargs_marker: Input\n")
        assert load_conventions(path).args_marker == "Input"

    def test_project_hidden_config(
        self, tmp_path: Path, write_file: Callable[[str, str], Path]
    ) -> None:
        write_file(".bakelint.yml", "version: 1\ndatabase_suffix: Store\n")
        assert load_project_conventions(tmp_path).database_suffix == "Store"

    def test_project_without_config(self, tmp_path: Path) -> None:
        assert load_project_conventions(tmp_path) == Conventions()

    def test_explicit_path_wins(
        self, tmp_path: Path, write_file: Callable[[str, str], Path]
    ) -> None:
        write_file("bakelint.yml", "version: 1\nportal_alias: Ignored\n")
        other = write_file("conf/custom.yml", "version: 1\nportal_alias: TDeps\n")
        assert load_project_conventions(tmp_path, other).portal_alias == "TDeps"
