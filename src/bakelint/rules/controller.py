"""Rules for the controller area."""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import TYPE_CHECKING

from bakelint.config import CONTROLLER_AREA
from bakelint.rules.base import RuleOutcome
from bakelint.rules.registry import ALL_FILES, register
from bakelint.rules.signature import (
    check_default_export_is_function,
    check_parameter_count,
    check_return_type,
    check_role_parameter,
)
from bakelint.syntax.ts_analyzer import get_default_export, get_type_alias_shape, list_imports

if TYPE_CHECKING:
    from bakelint.rules.base import RuleContext

SUBJECT = "Controller function"


@register(
    "controller-file-name",
    area=CONTROLLER_AREA,
    description="Controller file names start with the controller prefix",
    targets=ALL_FILES,
    needs_content=False,
)
def file_name(context: RuleContext) -> RuleOutcome:
    prefix = context.conventions.controller_prefix
    if context.file_name.startswith(prefix):
        return RuleOutcome.passed()
    return RuleOutcome.failed(
        f"Controller file names must start with '{prefix}'. "
        f"Found: {context.file_name}. "
        f"{context.doc_pointer()}"
    )


@register(
    "controller-default-export-is-function",
    area=CONTROLLER_AREA,
    description="Controllers default export a function",
)
def default_export_is_function(context: RuleContext) -> RuleOutcome:
    if get_default_export(context.source) is None:
        return RuleOutcome.failed(
            "Controller must have a default export function. "
            f"Found no 'export default' in {context.file_name}. "
            f"{context.doc_pointer()}"
        )
    return check_default_export_is_function(context, "Controller")


@register(
    "controller-parameter-count",
    area=CONTROLLER_AREA,
    description="Controllers take the portal and the arguments",
)
def parameter_count(context: RuleContext) -> RuleOutcome:
    return check_parameter_count(context, SUBJECT, context.conventions.controller_parameters)


@register(
    "controller-portal-parameter",
    area=CONTROLLER_AREA,
    description="The controller portal parameter mentions the portal marker",
)
def portal_parameter(context: RuleContext) -> RuleOutcome:
    return check_role_parameter(
        context, SUBJECT, context.conventions.controller_parameters, "portal", ignore_case=True
    )


@register(
    "controller-args-parameter",
    area=CONTROLLER_AREA,
    description="The controller arguments parameter mentions the args marker",
)
def args_parameter(context: RuleContext) -> RuleOutcome:
    return check_role_parameter(
        context, SUBJECT, context.conventions.controller_parameters, "args", ignore_case=True
    )


@register(
    "controller-return-type",
    area=CONTROLLER_AREA,
    description="Controllers return the two-element result tuple",
)
def return_type(context: RuleContext) -> RuleOutcome:
    return check_return_type(context, SUBJECT, context.conventions.result_markers["tuple"])


@register(
    "controller-portal-excludes-functions",
    area=CONTROLLER_AREA,
    description="The controller portal does not carry functions from the function area",
)
def portal_excludes_functions(context: RuleContext) -> RuleOutcome:
    conventions = context.conventions
    segment = f"/{PurePosixPath(conventions.function_area).name}/"
    imported: set[str] = set()
    for declaration in list_imports(context.source):
        if segment in declaration.module:
            imported.update(declaration.bound_names)
    if not imported:
        return RuleOutcome.not_applicable("no imports from the function area")

    shape = get_type_alias_shape(context.source, conventions.portal_alias, require_export=False)
    if shape is None:
        return RuleOutcome.not_applicable(f"no {conventions.portal_alias} type alias")

    offending = [name for name in shape.names if name in imported]
    if not offending:
        return RuleOutcome.passed()
    alias = conventions.portal_alias
    return RuleOutcome.failed(
        f"{alias} must not contain function imports. Found: {', '.join(offending)}. "
        f"Controllers should import and call functions directly, not pass them through {alias}. "
        f"{alias} should only contain variables (like db connections) that need to be mocked "
        "for testing. "
        f"{context.doc_pointer()}"
    )
