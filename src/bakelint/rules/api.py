"""Rules for the API area: Elysia route modules that delegate to controllers."""

from __future__ import annotations

from typing import TYPE_CHECKING

from bakelint.config import API_AREA, CONTROLLER_AREA, DEFAULT_DOCS
from bakelint.rules.base import RuleOutcome
from bakelint.rules.registry import register
from bakelint.syntax.ts_analyzer import (
    get_default_export_construction,
    list_constructions,
    list_imports,
)

if TYPE_CHECKING:
    from bakelint.rules.base import RuleContext

FRAMEWORK_MODULE = "elysia"
FRAMEWORK_CLASS = "Elysia"
PREFIX_OPTION = "prefix"


@register(
    "api-file-name",
    area=API_AREA,
    description="API file names start with the API prefix",
    needs_content=False,
)
def file_name(context: RuleContext) -> RuleOutcome:
    prefix = context.conventions.api_prefix
    if context.file_name.startswith(prefix):
        return RuleOutcome.passed()
    return RuleOutcome.failed(
        f"API file names must start with '{prefix}'. "
        f"Found: {context.file_name}. "
        f"{context.doc_pointer()}"
    )


@register(
    "api-imports-elysia",
    area=API_AREA,
    description="API modules import Elysia",
)
def imports_elysia(context: RuleContext) -> RuleOutcome:
    for declaration in list_imports(context.source):
        if declaration.module != FRAMEWORK_MODULE:
            continue
        if any(item.name == FRAMEWORK_CLASS for item in declaration.names):
            return RuleOutcome.passed()
    return RuleOutcome.failed(
        f"API files must import {FRAMEWORK_CLASS} from '{FRAMEWORK_MODULE}'. "
        f"File {context.file_name} does not import {FRAMEWORK_CLASS}. "
        f"Add: import {{ {FRAMEWORK_CLASS} }} from '{FRAMEWORK_MODULE}'; "
        f"{context.doc_pointer()}"
    )


@register(
    "api-default-export-is-elysia",
    area=API_AREA,
    description="API modules default export a new Elysia instance",
)
def default_export_is_elysia(context: RuleContext) -> RuleOutcome:
    construction = get_default_export_construction(context.source)
    if construction is not None and construction.constructor == FRAMEWORK_CLASS:
        return RuleOutcome.passed()
    route_prefix = context.conventions.api_route_prefix
    return RuleOutcome.failed(
        f"API files must default export a new {FRAMEWORK_CLASS}() instance. "
        f"File {context.file_name} does not export an {FRAMEWORK_CLASS} instance. "
        f"Use: export default new {FRAMEWORK_CLASS}({{ prefix: '{route_prefix}...' }}).get(...); "
        f"{context.doc_pointer()}"
    )


@register(
    "api-elysia-has-prefix",
    area=API_AREA,
    description="The Elysia instance declares a route prefix under the API root",
)
def elysia_has_prefix(context: RuleContext) -> RuleOutcome:
    constructions = list_constructions(context.source, FRAMEWORK_CLASS)
    if not constructions:
        return RuleOutcome.not_applicable(f"no new {FRAMEWORK_CLASS}() in file")

    route_prefix = context.conventions.api_route_prefix
    for construction in constructions:
        if construction.options is None or PREFIX_OPTION not in construction.options:
            continue
        value = construction.options[PREFIX_OPTION]
        if value is None or value.startswith(route_prefix):
            # Computed prefixes cannot be checked textually.
            return RuleOutcome.passed()
        return RuleOutcome.failed(
            f"API {FRAMEWORK_CLASS} prefix must start with '{route_prefix}'. "
            f"Found prefix: '{value}' in {context.file_name}. "
            f"{context.doc_pointer()}"
        )

    return RuleOutcome.failed(
        f"API {FRAMEWORK_CLASS} instance must have a '{PREFIX_OPTION}' option. "
        f"File {context.file_name} is missing prefix. "
        f"Use: new {FRAMEWORK_CLASS}({{ prefix: '{route_prefix}module/endpoint' }}) "
        f"{context.doc_pointer()}"
    )


@register(
    "api-imports-controller",
    area=API_AREA,
    description="API modules import at least one controller",
)
def imports_controller(context: RuleContext) -> RuleOutcome:
    conventions = context.conventions
    prefix = conventions.controller_prefix
    for declaration in list_imports(context.source):
        if declaration.module.rsplit("/", 1)[-1].startswith(prefix):
            return RuleOutcome.passed()
    return RuleOutcome.failed(
        f"API files must import at least one controller file ({prefix}*). "
        f"File {context.file_name} does not import any controller. "
        "Controllers handle business logic and database operations. "
        "API handlers should delegate to controllers and pass all necessary parameters "
        "including database connections. "
        f"{context.doc_pointer()} and "
        f"{conventions.docs.get(CONTROLLER_AREA, DEFAULT_DOCS[CONTROLLER_AREA])}"
    )
