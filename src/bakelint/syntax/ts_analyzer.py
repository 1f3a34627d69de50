"""TypeScript syntax extractor: tree-sitter parsing and export/import/signature queries."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from tree_sitter import Language, Parser

from bakelint.syntax.delimiters import TypeAliasDescriptor, type_alias_shape

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from tree_sitter import Node as TSNode
    from tree_sitter import Tree

# Default-export classifications for values that are not functions.
OBJECT_LITERAL = "object-literal"
CLASS = "class"
LITERAL = "literal"
IDENTIFIER_TO_NON_FUNCTION = "identifier-to-non-function"
EXPRESSION = "expression"

_FUNCTION_DECLARATIONS = frozenset({"function_declaration", "generator_function_declaration"})
_FUNCTION_VALUES = frozenset(
    {"function_expression", "function", "arrow_function", "generator_function"}
)
_CLASS_NODES = frozenset({"class_declaration", "abstract_class_declaration", "class"})
_LITERAL_NODES = frozenset(
    {"number", "string", "template_string", "true", "false", "null", "undefined", "regex"}
)
_VARIABLE_STATEMENTS = frozenset({"lexical_declaration", "variable_declaration"})
_TRANSPARENT_WRAPPERS = frozenset(
    {"parenthesized_expression", "as_expression", "satisfies_expression", "non_null_expression"}
)
_PARAMETER_NODES = frozenset({"required_parameter", "optional_parameter"})


class ParseFailure(Exception):
    """Raised when a file cannot be turned into a usable syntax tree."""


@dataclass(frozen=True)
class SourceUnit:
    """Immutable parse of one file's text."""

    text: str
    file_path: str
    tree: Tree

    @property
    def root(self) -> TSNode:
        return self.tree.root_node


@dataclass(frozen=True)
class Parameter:
    name: str
    type_text: str  # annotation as written, "any" when absent
    optional: bool = False


@dataclass(frozen=True)
class FunctionLike:
    """Default export that is a function, arrow function or function declaration."""

    parameters: tuple[Parameter, ...]
    return_type_text: str | None
    is_async: bool = False
    name: str | None = None


@dataclass(frozen=True)
class NonFunction:
    """Default export that is anything but a function."""

    classification: str
    text: str  # verbatim source of the exported expression


DefaultExportDescriptor = FunctionLike | NonFunction


@dataclass(frozen=True)
class ImportedName:
    name: str  # name exported by the source module
    is_type_only: bool = False
    alias: str | None = None

    @property
    def local_name(self) -> str:
        return self.alias or self.name


@dataclass(frozen=True)
class ImportDeclaration:
    """One ``import ... from '<module>'`` statement."""

    module: str
    text: str
    is_type_only: bool = False
    default_name: str | None = None
    namespace: str | None = None
    names: tuple[ImportedName, ...] = ()

    @property
    def bound_names(self) -> list[str]:
        """Every local binding this statement introduces."""
        bound = [item.local_name for item in self.names]
        if self.default_name:
            bound.insert(0, self.default_name)
        if self.namespace:
            bound.append(self.namespace)
        return bound


# ---- Language loaders ----


def _load_typescript() -> Language:
    import tree_sitter_typescript as tstypescript

    return Language(tstypescript.language_typescript())


def _load_tsx() -> Language:
    import tree_sitter_typescript as tstypescript

    return Language(tstypescript.language_tsx())


_EXTENSION_LOADERS: dict[str, Callable[[], Language]] = {
    ".ts": _load_typescript,
    ".mts": _load_typescript,
    ".cts": _load_typescript,
    ".tsx": _load_tsx,
}

_LANG_CACHE: dict[str, Language] = {}

SOURCE_EXTENSIONS: frozenset[str] = frozenset(_EXTENSION_LOADERS)


def _extension(file_path: str) -> str:
    name = file_path.replace("\\", "/").rsplit("/", 1)[-1]
    _, dot, ext = name.rpartition(".")
    return f".{ext}" if dot else ""


def get_language(file_path: str) -> Language | None:
    """Return the grammar for *file_path*'s extension, or ``None`` if unsupported."""
    ext = _extension(file_path)
    if ext in _LANG_CACHE:
        return _LANG_CACHE[ext]
    loader = _EXTENSION_LOADERS.get(ext)
    if loader is None:
        return None
    language = loader()
    _LANG_CACHE[ext] = language
    return language


def clear_cache() -> None:
    """Clear the grammar cache (useful for testing)."""
    _LANG_CACHE.clear()


def parse_source(text: str, file_path: str) -> SourceUnit:
    """Parse *text* into a :class:`SourceUnit`.

    Raises
    ------
    ParseFailure
        When no grammar handles the extension or the tree contains syntax errors.
    """
    language = get_language(file_path)
    if language is None:
        msg = f"No TypeScript grammar for {file_path}"
        raise ParseFailure(msg)

    parser = Parser(language)
    tree = parser.parse(text.encode("utf-8"))
    if tree.root_node.has_error:
        msg = f"Syntax errors in {file_path}"
        raise ParseFailure(msg)
    return SourceUnit(text=text, file_path=file_path, tree=tree)


# ---- Node helpers ----


def _text(node: TSNode | None) -> str:
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf-8")


def _has_token(node: TSNode, token: str) -> bool:
    return any(child.type == token for child in node.children)


def _unwrap(node: TSNode) -> TSNode:
    while node.type in _TRANSPARENT_WRAPPERS and node.named_child_count:
        node = node.named_children[0]
    return node


def _annotation_text(annotation: TSNode | None) -> str | None:
    """Return the type written after the colon of a ``type_annotation`` node."""
    if annotation is None:
        return None
    if annotation.named_child_count:
        return _text(annotation.named_children[0])
    return _text(annotation).lstrip(":").strip() or None


def _export_statements(unit: SourceUnit) -> Iterator[TSNode]:
    for child in unit.root.named_children:
        if child.type == "export_statement":
            yield child


def _is_default(export: TSNode) -> bool:
    return _has_token(export, "default")


def _declared_nodes(statement: TSNode) -> Iterator[tuple[str, TSNode]]:
    """Yield ``(name, node)`` for the bindings a top-level statement declares."""
    if statement.type == "export_statement":
        inner = statement.child_by_field_name("declaration")
        if inner is None:
            return
        statement = inner

    if statement.type in _FUNCTION_DECLARATIONS or statement.type in _CLASS_NODES:
        name = _text(statement.child_by_field_name("name"))
        if name:
            yield name, statement
    elif statement.type in _VARIABLE_STATEMENTS:
        for declarator in statement.named_children:
            if declarator.type != "variable_declarator":
                continue
            name_node = declarator.child_by_field_name("name")
            if name_node is not None and name_node.type == "identifier":
                yield _text(name_node), declarator


def _top_level_declarations(unit: SourceUnit) -> dict[str, TSNode]:
    declarations: dict[str, TSNode] = {}
    for statement in unit.root.named_children:
        for name, node in _declared_nodes(statement):
            declarations.setdefault(name, node)
    return declarations


def _parameters(function: TSNode) -> tuple[Parameter, ...]:
    single = function.child_by_field_name("parameter")
    if single is not None:
        # ``x => ...`` arrow functions carry one bare identifier.
        return (Parameter(name=_text(single), type_text="any"),)

    formal = function.child_by_field_name("parameters")
    if formal is None:
        return ()

    params: list[Parameter] = []
    for param in formal.named_children:
        if param.type in _PARAMETER_NODES:
            pattern = param.child_by_field_name("pattern")
            type_text = _annotation_text(param.child_by_field_name("type"))
            params.append(
                Parameter(
                    name=_text(pattern) if pattern is not None else "unknown",
                    type_text=type_text or "any",
                    optional=param.type == "optional_parameter",
                )
            )
        elif param.type == "identifier":
            params.append(Parameter(name=_text(param), type_text="any"))
    return tuple(params)


def _function_like(function: TSNode, name: str | None = None) -> FunctionLike:
    if name is None:
        name = _text(function.child_by_field_name("name")) or None
    return FunctionLike(
        parameters=_parameters(function),
        return_type_text=_annotation_text(function.child_by_field_name("return_type")),
        is_async=_has_token(function, "async"),
        name=name,
    )


def _classify_value(value: TSNode) -> str:
    if value.type == "object":
        return OBJECT_LITERAL
    if value.type in _CLASS_NODES:
        return CLASS
    if value.type in _LITERAL_NODES:
        return LITERAL
    if value.type == "identifier":
        return IDENTIFIER_TO_NON_FUNCTION
    return EXPRESSION


def _resolve_identifier(
    identifier: TSNode, declarations: dict[str, TSNode]
) -> DefaultExportDescriptor:
    name = _text(identifier)
    declared = declarations.get(name)
    if declared is None:
        return NonFunction(IDENTIFIER_TO_NON_FUNCTION, name)

    if declared.type in _FUNCTION_DECLARATIONS:
        return _function_like(declared, name)
    if declared.type in _CLASS_NODES:
        return NonFunction(CLASS, name)

    # variable_declarator
    value = declared.child_by_field_name("value")
    if value is None:
        return NonFunction(IDENTIFIER_TO_NON_FUNCTION, name)
    value = _unwrap(value)
    if value.type in _FUNCTION_VALUES:
        return _function_like(value, name)
    classification = _classify_value(value)
    if classification == EXPRESSION:
        classification = IDENTIFIER_TO_NON_FUNCTION
    return NonFunction(classification, name)


def _describe_value(value: TSNode, declarations: dict[str, TSNode]) -> DefaultExportDescriptor:
    value = _unwrap(value)
    if value.type in _FUNCTION_VALUES:
        return _function_like(value)
    if value.type == "identifier":
        return _resolve_identifier(value, declarations)
    return NonFunction(_classify_value(value), _text(value))


# ---- Queries ----


def _default_export_statement(unit: SourceUnit) -> TSNode | None:
    for export in _export_statements(unit):
        if _is_default(export):
            return export
    return None


def get_default_export(unit: SourceUnit) -> DefaultExportDescriptor | None:
    """Describe the file's default export, or ``None`` when there is none.

    ``export default <function|arrow>`` and ``export default function ...``
    are read directly.  ``export default <identifier>`` is resolved against
    top-level declarations of the same name; anything that does not resolve
    to a function is reported as :class:`NonFunction`.
    """
    export = _default_export_statement(unit)
    if export is None:
        return None

    declaration = export.child_by_field_name("declaration")
    if declaration is not None:
        if declaration.type in _FUNCTION_DECLARATIONS:
            return _function_like(declaration)
        if declaration.type in _CLASS_NODES:
            return NonFunction(CLASS, _text(declaration))
        return NonFunction(EXPRESSION, _text(declaration))

    value = export.child_by_field_name("value")
    if value is None:
        return NonFunction(EXPRESSION, _text(export))
    return _describe_value(value, _top_level_declarations(unit))


def _default_export_identifier(unit: SourceUnit) -> str | None:
    export = _default_export_statement(unit)
    if export is None:
        return None
    value = export.child_by_field_name("value")
    if value is not None:
        value = _unwrap(value)
        return _text(value) if value.type == "identifier" else None
    declaration = export.child_by_field_name("declaration")
    if declaration is not None:
        return _text(declaration.child_by_field_name("name")) or None
    return None


def list_named_function_exports(unit: SourceUnit) -> list[str]:
    """Names of top-level exported functions other than the default export.

    Counts ``export function x`` and ``export const x = <function|arrow>``.
    Type, interface and non-function constant exports are ignored.
    """
    default_name = _default_export_identifier(unit)
    names: list[str] = []
    for export in _export_statements(unit):
        if _is_default(export):
            continue
        declaration = export.child_by_field_name("declaration")
        if declaration is None:
            continue
        for name, node in _declared_nodes(export):
            if node.type in _FUNCTION_DECLARATIONS:
                is_function = True
            elif node.type == "variable_declarator":
                value = node.child_by_field_name("value")
                is_function = value is not None and _unwrap(value).type in _FUNCTION_VALUES
            else:
                is_function = False
            if is_function and name != default_name:
                names.append(name)
    return names


def list_exported_bindings(unit: SourceUnit) -> list[str]:
    """Names of top-level ``export const|let|var`` declarators, in source order."""
    names: list[str] = []
    for export in _export_statements(unit):
        if _is_default(export):
            continue
        declaration = export.child_by_field_name("declaration")
        if declaration is None or declaration.type not in _VARIABLE_STATEMENTS:
            continue
        names.extend(name for name, _ in _declared_nodes(export))
    return names


def _module_path(source: TSNode | None) -> str:
    return _text(source).strip("'\"`")


def _import_declaration(statement: TSNode) -> ImportDeclaration:
    default_name: str | None = None
    namespace: str | None = None
    names: list[ImportedName] = []

    for clause in statement.named_children:
        if clause.type != "import_clause":
            continue
        for part in clause.named_children:
            if part.type == "identifier":
                default_name = _text(part)
            elif part.type == "namespace_import":
                for ident in part.named_children:
                    if ident.type == "identifier":
                        namespace = _text(ident)
            elif part.type == "named_imports":
                for specifier in part.named_children:
                    if specifier.type != "import_specifier":
                        continue
                    alias = specifier.child_by_field_name("alias")
                    names.append(
                        ImportedName(
                            name=_text(specifier.child_by_field_name("name")),
                            is_type_only=_has_token(specifier, "type"),
                            alias=_text(alias) if alias is not None else None,
                        )
                    )

    return ImportDeclaration(
        module=_module_path(statement.child_by_field_name("source")),
        text=_text(statement),
        is_type_only=_has_token(statement, "type"),
        default_name=default_name,
        namespace=namespace,
        names=tuple(names),
    )


def list_imports(unit: SourceUnit) -> list[ImportDeclaration]:
    """All top-level import statements, in source order."""
    return [
        _import_declaration(child)
        for child in unit.root.named_children
        if child.type == "import_statement"
    ]


def get_type_alias_shape(
    unit: SourceUnit, alias: str, *, require_export: bool = True
) -> TypeAliasDescriptor | None:
    """Member shape of ``export type <alias> = { ... }`` using the brace-depth scan."""
    return type_alias_shape(unit.text, alias, require_export=require_export)


# ---- Constructions ----


@dataclass(frozen=True)
class Construction:
    """One ``new <Class>(...)`` expression."""

    constructor: str
    text: str
    # Identifier-keyed properties of an object-literal first argument;
    # the value is ``None`` unless it is a plain string literal.
    options: dict[str, str | None] | None = None


def _walk(node: TSNode) -> Iterator[TSNode]:
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.named_children))


def _string_value(node: TSNode) -> str | None:
    if node.type != "string":
        return None
    return "".join(_text(part) for part in node.named_children if part.type == "string_fragment")


def _construction(node: TSNode) -> Construction:
    options: dict[str, str | None] | None = None
    arguments = node.child_by_field_name("arguments")
    if arguments is not None and arguments.named_child_count:
        first = _unwrap(arguments.named_children[0])
        if first.type == "object":
            options = {}
            for pair in first.named_children:
                if pair.type != "pair":
                    continue
                key = pair.child_by_field_name("key")
                value = pair.child_by_field_name("value")
                if key is None or key.type != "property_identifier":
                    continue
                options[_text(key)] = _string_value(value) if value is not None else None
    return Construction(
        constructor=_text(node.child_by_field_name("constructor")),
        text=_text(node),
        options=options,
    )


def list_constructions(unit: SourceUnit, constructor: str | None = None) -> list[Construction]:
    """Every ``new X(...)`` in the file, in source order, optionally only of class *constructor*."""
    found = [
        _construction(node) for node in _walk(unit.root) if node.type == "new_expression"
    ]
    if constructor is None:
        return found
    return [item for item in found if item.constructor == constructor]


def get_default_export_construction(unit: SourceUnit) -> Construction | None:
    """The ``new X(...)`` at the root of ``export default new X(...).a().b()``.

    ``None`` when the default export is missing or is not such a chain.
    """
    export = _default_export_statement(unit)
    if export is None:
        return None
    value = export.child_by_field_name("value")
    if value is None:
        return None
    node = _unwrap(value)
    while node.type == "call_expression":
        callee = node.child_by_field_name("function")
        if callee is None or callee.type != "member_expression":
            break
        target = callee.child_by_field_name("object")
        if target is None:
            break
        node = _unwrap(target)
    if node.type != "new_expression":
        return None
    return _construction(node)
