"""Tests for bakelint.syntax.ts_analyzer — tree-sitter extraction of exports, imports, signatures."""

from __future__ import annotations

import pytest

from bakelint.syntax.ts_analyzer import (
    CLASS,
    EXPRESSION,
    IDENTIFIER_TO_NON_FUNCTION,
    LITERAL,
    OBJECT_LITERAL,
    FunctionLike,
    NonFunction,
    ParseFailure,
    get_default_export,
    get_default_export_construction,
    get_language,
    get_type_alias_shape,
    list_constructions,
    list_exported_bindings,
    list_imports,
    list_named_function_exports,
    parse_source,
)


def _default(text: str, file_path: str = "src/function/m/fx.a.ts") -> FunctionLike | NonFunction:
    descriptor = get_default_export(parse_source(text, file_path))
    assert descriptor is not None
    return descriptor


# --- parse_source ---


class TestParseSource:
    def test_valid_source(self) -> None:
        unit = parse_source("export const a = 1;\n", "a.ts")
        assert unit.file_path == "a.ts"
        assert unit.text == "export const a = 1;\n"
        assert unit.root.type == "program"

    def test_syntax_error(self) -> None:
        with pytest.raises(ParseFailure, match="Syntax errors"):
            parse_source("export default function (\n", "a.ts")

    def test_unsupported_extension(self) -> None:
        with pytest.raises(ParseFailure, match="No TypeScript grammar"):
            parse_source("const a = 1;", "a.py")

    def test_tsx(self) -> None:
        unit = parse_source("export default function App() { return <div />; }\n", "App.tsx")
        assert isinstance(get_default_export(unit), FunctionLike)

    def test_language_cache(self) -> None:
        assert get_language("a.ts") is get_language("b.ts")
        assert get_language("a.md") is None


# --- get_default_export: functions ---


class TestDefaultExportFunction:
    def test_function_declaration(self) -> None:
        result = _default(
            "export default async function fxCreate(portal: TPortal, args: TArgs)"
            ": Promise<TErrTuple<User>> {\n  return [null, null];\n}\n"
        )
        assert isinstance(result, FunctionLike)
        assert result.name == "fxCreate"
        assert result.is_async is True
        assert [(p.name, p.type_text) for p in result.parameters] == [
            ("portal", "TPortal"),
            ("args", "TArgs"),
        ]
        assert result.return_type_text == "Promise<TErrTuple<User>>"

    def test_anonymous_function(self) -> None:
        result = _default("export default function (args: TArgs): TErrTuple<number> {\n}\n")
        assert isinstance(result, FunctionLike)
        assert len(result.parameters) == 1
        assert result.return_type_text == "TErrTuple<number>"

    def test_arrow_function(self) -> None:
        result = _default("export default (args: TArgs) => [args, null];\n")
        assert isinstance(result, FunctionLike)
        assert result.parameters[0].type_text == "TArgs"
        assert result.return_type_text is None

    def test_identifier_to_const_arrow(self) -> None:
        result = _default(
            "const main = async (args: TArgs): Promise<TErrTuple<number>> => {\n"
            "  return [1, null];\n"
            "};\n"
            "export default main;\n"
        )
        assert isinstance(result, FunctionLike)
        assert result.name == "main"
        assert result.is_async is True
        assert result.return_type_text == "Promise<TErrTuple<number>>"

    def test_identifier_to_function_declaration(self) -> None:
        result = _default(
            "function fnSum(args: TArgs): TErrTuple<number> {\n  return [1, null];\n}\n"
            "export default fnSum;\n"
        )
        assert isinstance(result, FunctionLike)
        assert result.name == "fnSum"
        assert len(result.parameters) == 1

    def test_unannotated_and_optional_parameters(self) -> None:
        result = _default("export default function (a, b?: string) {}\n")
        assert isinstance(result, FunctionLike)
        assert [(p.name, p.type_text, p.optional) for p in result.parameters] == [
            ("a", "any", False),
            ("b", "string", True),
        ]

    def test_no_parameters(self) -> None:
        result = _default("export default function main(): void {}\n")
        assert isinstance(result, FunctionLike)
        assert result.parameters == ()
        assert result.return_type_text == "void"


# --- get_default_export: non-functions ---


class TestDefaultExportNonFunction:
    def test_object_literal(self) -> None:
        result = _default("export default { a: 1 };\n")
        assert isinstance(result, NonFunction)
        assert result.classification == OBJECT_LITERAL
        assert result.text == "{ a: 1 }"

    def test_class_declaration(self) -> None:
        result = _default("export default class Service {}\n")
        assert isinstance(result, NonFunction)
        assert result.classification == CLASS

    def test_literal(self) -> None:
        result = _default("export default 42;\n")
        assert isinstance(result, NonFunction)
        assert result.classification == LITERAL

    def test_string_literal(self) -> None:
        result = _default('export default "hello";\n')
        assert isinstance(result, NonFunction)
        assert result.classification == LITERAL

    def test_identifier_to_object(self) -> None:
        result = _default("const config = { a: 1 };\nexport default config;\n")
        assert isinstance(result, NonFunction)
        assert result.classification == OBJECT_LITERAL
        assert result.text == "config"

    def test_identifier_to_class(self) -> None:
        result = _default("class Service {}\nexport default Service;\n")
        assert isinstance(result, NonFunction)
        assert result.classification == CLASS

    def test_identifier_to_call_result(self) -> None:
        result = _default("const handler = makeHandler();\nexport default handler;\n")
        assert isinstance(result, NonFunction)
        assert result.classification == IDENTIFIER_TO_NON_FUNCTION

    def test_unresolved_identifier(self) -> None:
        result = _default('import thing from "./thing";\nexport default thing;\n')
        assert isinstance(result, NonFunction)
        assert result.classification == IDENTIFIER_TO_NON_FUNCTION

    def test_call_expression(self) -> None:
        result = _default("export default makeHandler();\n")
        assert isinstance(result, NonFunction)
        assert result.classification == EXPRESSION

    def test_no_default_export(self) -> None:
        unit = parse_source("export const a = 1;\n", "a.ts")
        assert get_default_export(unit) is None


# --- list_named_function_exports / list_exported_bindings ---


class TestNamedExports:
    def test_named_functions(self) -> None:
        unit = parse_source(
            "export function helper() {}\n"
            "export const other = () => 1;\n"
            "export const LIMIT = 10;\n"
            "export type TArgs = { a: string };\n"
            "export interface IThing { a: string }\n"
            "export default function main() {}\n",
            "fx.a.ts",
        )
        assert list_named_function_exports(unit) == ["helper", "other"]

    def test_default_identifier_excluded(self) -> None:
        unit = parse_source(
            "export const main = (args: TArgs) => [args, null];\nexport default main;\n",
            "fn.a.ts",
        )
        assert list_named_function_exports(unit) == []

    def test_non_exported_helpers_ignored(self) -> None:
        unit = parse_source(
            "function helper() {}\nexport default function main() { helper(); }\n",
            "fn.a.ts",
        )
        assert list_named_function_exports(unit) == []

    def test_exported_bindings(self) -> None:
        unit = parse_source(
            "export const booksDb = drizzle(client);\n"
            "export let other = 1, third = 2;\n"
            "const hidden = 3;\n"
            "export function notABinding() {}\n",
            "conn.books.ts",
        )
        assert list_exported_bindings(unit) == ["booksDb", "other", "third"]


# --- list_imports ---


class TestListImports:
    def test_import_forms(self) -> None:
        unit = parse_source(
            'import type { booksDb } from "../../database/books/conn.books";\n'
            "import { type helper, Other } from './x';\n"
            "import Default, * as ns from 'mod';\n",
            "fx.a.ts",
        )
        first, second, third = list_imports(unit)

        assert first.module == "../../database/books/conn.books"
        assert first.is_type_only is True
        assert [n.name for n in first.names] == ["booksDb"]

        assert second.module == "./x"
        assert second.is_type_only is False
        assert [(n.name, n.is_type_only) for n in second.names] == [
            ("helper", True),
            ("Other", False),
        ]

        assert third.default_name == "Default"
        assert third.namespace == "ns"
        assert third.bound_names == ["Default", "ns"]

    def test_aliased_specifier(self) -> None:
        unit = parse_source(
            "import { fxGetUsers as getUsers, other } from '@/src/function/user/fx.get-users';\n",
            "ctrl.users.ts",
        )
        (declaration,) = list_imports(unit)
        assert [(n.name, n.alias, n.local_name) for n in declaration.names] == [
            ("fxGetUsers", "getUsers", "getUsers"),
            ("other", None, "other"),
        ]
        assert declaration.bound_names == ["getUsers", "other"]

    def test_text_is_verbatim(self) -> None:
        text = 'import { booksDb } from "@/src/database/books/conn.books";'
        unit = parse_source(text + "\n", "fx.a.ts")
        assert list_imports(unit)[0].text == text

    def test_no_imports(self) -> None:
        assert list_imports(parse_source("export const a = 1;\n", "a.ts")) == []


class TestTypeAliasShape:
    def test_from_unit(self) -> None:
        unit = parse_source(
            "export type TPortal = {\n  db: typeof booksDb;\n  clock: () => Date;\n};\n",
            "fx.a.ts",
        )
        shape = get_type_alias_shape(unit, "TPortal")
        assert shape is not None
        assert shape.names == ["db", "clock"]
        assert get_type_alias_shape(unit, "TArgs") is None

    def test_local_alias_needs_opt_in(self) -> None:
        unit = parse_source("type TPortal = { db: Database };\n", "ctrl.a.ts")
        assert get_type_alias_shape(unit, "TPortal") is None
        shape = get_type_alias_shape(unit, "TPortal", require_export=False)
        assert shape is not None
        assert shape.names == ["db"]


# --- constructions ---


class TestConstructions:
    def test_options_of_first_argument(self) -> None:
        unit = parse_source(
            "const a = new Elysia({ prefix: '/api/a', name: `n`, 'quoted': 'x', ...rest });\n"
            "const b = new Map();\n",
            "api.a.ts",
        )
        first, second = list_constructions(unit)
        assert first.constructor == "Elysia"
        assert first.options == {"prefix": "/api/a", "name": None}
        assert second.constructor == "Map"
        assert second.options is None

    def test_filter_by_constructor(self) -> None:
        unit = parse_source(
            "export default function f() { return new Elysia({ prefix: \"/api/x\" }); }\n"
            "const m = new Map();\n",
            "api.a.ts",
        )
        (found,) = list_constructions(unit, "Elysia")
        assert found.options == {"prefix": "/api/x"}

    def test_default_export_chain(self) -> None:
        unit = parse_source(
            "export default new Elysia({ prefix: '/api/u' }).get('/', () => 1).post('/', () => 2);\n",
            "api.u.ts",
        )
        construction = get_default_export_construction(unit)
        assert construction is not None
        assert construction.constructor == "Elysia"
        assert construction.options == {"prefix": "/api/u"}

    @pytest.mark.parametrize(
        "text",
        [
            "const app = new Elysia();\nexport default app;\n",
            "export default makeApp().get('/');\n",
            "export const x = new Elysia();\n",
        ],
    )
    def test_default_export_not_a_construction(self, text: str) -> None:
        assert get_default_export_construction(parse_source(text, "api.u.ts")) is None
