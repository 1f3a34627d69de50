"""Rules for the function area: naming classes, export shape and signatures."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from bakelint.config import FUNCTION_AREA
from bakelint.resolvers.db_names import derive_testing_factory_name
from bakelint.resolvers.siblings import (
    corresponding_implementation_file,
    extract_portal_database_variable,
    read_text,
)
from bakelint.rules.base import RuleOutcome
from bakelint.rules.registry import ALL_FILES, TEST_FILES, register
from bakelint.rules.signature import (
    check_default_export_is_function,
    check_parameter_count,
    check_return_type,
    check_role_parameter,
    one_line,
    quoted_list,
)
from bakelint.syntax.ts_analyzer import get_default_export, list_imports, list_named_function_exports

if TYPE_CHECKING:
    from bakelint.config import NamingClass
    from bakelint.rules.base import RuleContext

logger = logging.getLogger(__name__)

MAX_MODULE_DEPTH = 2  # <module>/<file>


def _naming_class(context: RuleContext) -> NamingClass | None:
    return context.conventions.naming_class_for(context.file_name)


def _unclassified() -> RuleOutcome:
    return RuleOutcome.not_applicable("file name has no naming-class prefix")


# ---------------------------------------------------------------------------
# Path rules
# ---------------------------------------------------------------------------


@register(
    "function-file-name",
    area=FUNCTION_AREA,
    description="Function file names start with a naming-class prefix",
    targets=ALL_FILES,
    needs_content=False,
)
def file_name(context: RuleContext) -> RuleOutcome:
    if _naming_class(context) is not None:
        return RuleOutcome.passed()
    prefixes = [naming_class.prefix for naming_class in context.conventions.prefixes]
    return RuleOutcome.failed(
        f"Function file names must start with {quoted_list(prefixes)}. "
        f"Found: {context.file_name}. "
        f"{context.doc_pointer()}"
    )


@register(
    "function-path-depth",
    area=FUNCTION_AREA,
    description="Function files sit at most one module directory below the area",
    targets=ALL_FILES,
    needs_content=False,
)
def path_depth(context: RuleContext) -> RuleOutcome:
    below = context.area_relative() or ""
    parts = below.split("/")
    if len(parts) <= MAX_MODULE_DEPTH:
        return RuleOutcome.passed()
    return RuleOutcome.failed(
        "Function path cannot have more than 1 level of module nesting. "
        f"Found {len(parts)} levels: {below}. "
        f"{context.doc_pointer()}"
    )


# ---------------------------------------------------------------------------
# Export shape
# ---------------------------------------------------------------------------


@register(
    "function-default-export",
    area=FUNCTION_AREA,
    description="Function files have a default export",
)
def default_export(context: RuleContext) -> RuleOutcome:
    if get_default_export(context.source) is not None:
        return RuleOutcome.passed()
    return RuleOutcome.failed(
        f"Function must have a default export. Found no 'export default' in {context.file_name}. "
        f"{context.doc_pointer()}"
    )


@register(
    "function-default-export-is-function",
    area=FUNCTION_AREA,
    description="The default export is a function",
)
def default_export_is_function(context: RuleContext) -> RuleOutcome:
    return check_default_export_is_function(context, "Function")


@register(
    "function-single-export",
    area=FUNCTION_AREA,
    description="No exported functions besides the default export",
)
def single_export(context: RuleContext) -> RuleOutcome:
    names = list_named_function_exports(context.source)
    if not names:
        return RuleOutcome.passed()
    prefixes = "/".join(nc.prefix.rstrip(".") for nc in context.conventions.prefixes)
    return RuleOutcome.failed(
        "Single file, single function principle violated. "
        f"Found additional exported function(s): {', '.join(names)}. "
        f"{prefixes} files should only export ONE function (the default export). "
        "Types, interfaces and constants may be exported, but not additional functions. "
        "Make helper functions non-exported (inline them) or move them to a separate file. "
        f"{context.doc_pointer()}"
    )


# ---------------------------------------------------------------------------
# Signature
# ---------------------------------------------------------------------------


@register(
    "function-parameter-count",
    area=FUNCTION_AREA,
    description="Parameter count matches the naming class",
)
def parameter_count(context: RuleContext) -> RuleOutcome:
    naming_class = _naming_class(context)
    if naming_class is None:
        return _unclassified()
    return check_parameter_count(context, naming_class.label, naming_class.parameters)


@register(
    "function-portal-parameter",
    area=FUNCTION_AREA,
    description="The portal parameter is typed with the portal marker",
)
def portal_parameter(context: RuleContext) -> RuleOutcome:
    naming_class = _naming_class(context)
    if naming_class is None:
        return _unclassified()
    return check_role_parameter(context, naming_class.label, naming_class.parameters, "portal")


@register(
    "function-args-parameter",
    area=FUNCTION_AREA,
    description="The arguments parameter is typed with the args marker",
)
def args_parameter(context: RuleContext) -> RuleOutcome:
    naming_class = _naming_class(context)
    if naming_class is None:
        return _unclassified()
    return check_role_parameter(context, naming_class.label, naming_class.parameters, "args")


@register(
    "function-return-type",
    area=FUNCTION_AREA,
    description="Return type carries the naming class's result marker",
)
def return_type(context: RuleContext) -> RuleOutcome:
    naming_class = _naming_class(context)
    if naming_class is None:
        return _unclassified()
    marker = context.conventions.result_marker(naming_class)
    return check_return_type(context, naming_class.label, marker)


# ---------------------------------------------------------------------------
# Database usage
# ---------------------------------------------------------------------------


@register(
    "function-portal-database",
    area=FUNCTION_AREA,
    description="The portal's database property names a known database variable",
)
def portal_database(context: RuleContext) -> RuleOutcome:
    conventions = context.conventions
    variable = extract_portal_database_variable(
        context.content, conventions.portal_alias, conventions.portal_database_property
    )
    if variable is None:
        return RuleOutcome.not_applicable(
            f"no {conventions.portal_alias}.{conventions.portal_database_property} typeof property"
        )

    catalog = context.catalog
    if variable in catalog:
        return RuleOutcome.passed()
    if not conventions.strict_portal_database:
        return RuleOutcome.not_applicable(f"'{variable}' is not a known database variable")

    known = ", ".join(catalog.names) or "(none found)"
    return RuleOutcome.failed(
        f"{conventions.portal_alias}.{conventions.portal_database_property} must be typeof "
        f"one of the database variables: {known}. "
        f"Found: typeof {variable}. "
        f"{context.doc_pointer()}"
    )


@register(
    "function-db-imports-type-only",
    area=FUNCTION_AREA,
    description="Imports from connection modules are type-only",
)
def db_imports_type_only(context: RuleContext) -> RuleOutcome:
    marker = context.conventions.connection_path_marker
    for declaration in list_imports(context.source):
        if marker not in declaration.module:
            continue
        # A single ``type`` specifier marks the statement as type-only.
        if declaration.is_type_only or any(item.is_type_only for item in declaration.names):
            continue
        names = declaration.bound_names
        return RuleOutcome.failed(
            "Database connection imports must be type-only. "
            f"Found non-type-only import: {one_line(declaration.text)}. "
            f"Use 'import type {{ {', '.join(names)} }} from \"{declaration.module}\"' "
            f"or 'import {{ type {', type '.join(names)} }} from \"{declaration.module}\"'. "
            "Database connections should only be used for typing, not runtime values. "
            f"{context.doc_pointer()}"
        )
    return RuleOutcome.passed()


@register(
    "function-test-imports-testing-db",
    area=FUNCTION_AREA,
    description="Tests of database functions import the testing database factory",
    targets=TEST_FILES,
)
def test_imports_testing_db(context: RuleContext) -> RuleOutcome:
    conventions = context.conventions
    implementation = corresponding_implementation_file(
        str(context.absolute_path), conventions.test_marker
    )
    text = read_text(implementation)
    if text is None:
        return RuleOutcome.not_applicable(f"implementation file {implementation} does not exist")

    variable = extract_portal_database_variable(
        text, conventions.portal_alias, conventions.portal_database_property
    )
    if variable is None:
        return RuleOutcome.not_applicable("implementation declares no database dependency")

    factory = derive_testing_factory_name(variable, conventions.database_suffix)
    logger.debug("%s requires testing factory %s", context.file_path, factory)

    marker = conventions.connection_path_marker
    for declaration in list_imports(context.source):
        if marker in declaration.module and any(
            item.name == factory for item in declaration.names
        ):
            return RuleOutcome.passed()

    return RuleOutcome.failed(
        "Test file must import testing database function when testing database operations. "
        f"Expected import: import {{ {factory} }} from "
        f"'@/{conventions.database_area}/.../{marker}...ts'. "
        f"Your function uses database variable '{variable}', so tests must use "
        f"'{factory}()' instead of mocking. "
        f"{context.doc_pointer()}"
    )
