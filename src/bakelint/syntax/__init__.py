"""Syntactic extraction over TypeScript sources."""

from bakelint.syntax.delimiters import (
    TypeAliasDescriptor,
    TypeProperty,
    extract_balanced,
    find_matching_close,
    type_alias_shape,
)
from bakelint.syntax.ts_analyzer import (
    Construction,
    FunctionLike,
    ImportDeclaration,
    ImportedName,
    NonFunction,
    Parameter,
    ParseFailure,
    SourceUnit,
    get_default_export,
    get_default_export_construction,
    get_type_alias_shape,
    list_constructions,
    list_exported_bindings,
    list_imports,
    list_named_function_exports,
    parse_source,
)

__all__ = [
    "Construction",
    "FunctionLike",
    "ImportDeclaration",
    "ImportedName",
    "NonFunction",
    "Parameter",
    "ParseFailure",
    "SourceUnit",
    "TypeAliasDescriptor",
    "TypeProperty",
    "extract_balanced",
    "find_matching_close",
    "get_default_export",
    "get_default_export_construction",
    "get_type_alias_shape",
    "list_constructions",
    "list_exported_bindings",
    "list_imports",
    "list_named_function_exports",
    "parse_source",
    "type_alias_shape",
]
