"""Signature checks shared by the function and controller rule families."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from bakelint.rules.base import RuleOutcome
from bakelint.syntax.ts_analyzer import FunctionLike, get_default_export

if TYPE_CHECKING:
    from collections.abc import Sequence

    from bakelint.config import Conventions
    from bakelint.rules.base import RuleContext

_WHITESPACE_RE = re.compile(r"\s+")
_ORDINALS = ("first", "second", "third")


def one_line(text: str, limit: int = 160) -> str:
    """Collapse *text* to a single line, truncated to *limit* characters."""
    collapsed = _WHITESPACE_RE.sub(" ", text).strip()
    if len(collapsed) > limit:
        return collapsed[: limit - 3] + "..."
    return collapsed


def quoted_list(items: Sequence[str]) -> str:
    """``'a.', 'b.', or 'c.'``"""
    quoted = [f"'{item}'" for item in items]
    if len(quoted) <= 2:
        return " or ".join(quoted)
    return ", ".join(quoted[:-1]) + f", or {quoted[-1]}"


def role_types(roles: Sequence[str], conventions: Conventions) -> str:
    """Conventional type names for parameter roles, e.g. ``TPortal, TArgs``."""
    return ", ".join(f"T{conventions.role_marker(role)}" for role in roles)


def signature_text(function: FunctionLike) -> str:
    params = ", ".join(f"{p.name}: {p.type_text}" for p in function.parameters)
    returns = f": {function.return_type_text}" if function.return_type_text else ""
    return f"({params}){returns}"


def default_function(context: RuleContext) -> FunctionLike | None:
    descriptor = get_default_export(context.source)
    return descriptor if isinstance(descriptor, FunctionLike) else None


# ---------------------------------------------------------------------------
# Checks
# ---------------------------------------------------------------------------


def check_default_export_is_function(context: RuleContext, subject: str) -> RuleOutcome:
    descriptor = get_default_export(context.source)
    if descriptor is None:
        return RuleOutcome.not_applicable("no default export")
    if isinstance(descriptor, FunctionLike):
        return RuleOutcome.passed()
    return RuleOutcome.failed(
        f"{subject} default export must be a function. "
        f"Found: {descriptor.classification} ({one_line(descriptor.text)}). "
        f"{context.doc_pointer()}"
    )


def check_parameter_count(
    context: RuleContext, subject: str, roles: Sequence[str]
) -> RuleOutcome:
    function = default_function(context)
    if function is None:
        return RuleOutcome.not_applicable("default export is not a function")
    expected = len(roles)
    found = len(function.parameters)
    if found == expected:
        return RuleOutcome.passed()
    noun = "parameter" if expected == 1 else "parameters"
    return RuleOutcome.failed(
        f"{subject} must have exactly {expected} {noun} "
        f"({role_types(roles, context.conventions)}), found {found}. "
        f"Found: {one_line(signature_text(function))}. "
        f"{context.doc_pointer()}"
    )


def check_role_parameter(
    context: RuleContext,
    subject: str,
    roles: Sequence[str],
    role: str,
    *,
    ignore_case: bool = False,
) -> RuleOutcome:
    """The parameter at *role*'s position must mention that role's marker."""
    if role not in roles:
        return RuleOutcome.not_applicable(f"no {role} parameter in this naming class")
    position = roles.index(role)
    function = default_function(context)
    if function is None:
        return RuleOutcome.not_applicable("default export is not a function")
    if len(function.parameters) <= position:
        return RuleOutcome.not_applicable(f"no parameter at position {position + 1}")

    marker = context.conventions.role_marker(role)
    type_text = function.parameters[position].type_text
    haystack, needle = (type_text.lower(), marker.lower()) if ignore_case else (type_text, marker)
    if needle in haystack:
        return RuleOutcome.passed()

    ordinal = _ORDINALS[position] if position < len(_ORDINALS) else f"#{position + 1}"
    return RuleOutcome.failed(
        f"{subject} {ordinal} parameter must use the {marker} type (contains '{marker}'). "
        f"Found: {one_line(type_text)}. "
        f"{context.doc_pointer()}"
    )


def check_return_type(context: RuleContext, subject: str, marker: str) -> RuleOutcome:
    """Return-type text must contain *marker*; a missing annotation is a failure."""
    function = default_function(context)
    if function is None:
        return RuleOutcome.not_applicable("default export is not a function")
    if not function.return_type_text:
        return RuleOutcome.failed(
            f"{subject} must have an explicit return type. "
            f"Expected: {marker}<Data>. "
            f"{context.doc_pointer()}"
        )
    # Substring check: Promise<TErrTuple<...>> and friends are accepted.
    if marker in function.return_type_text:
        return RuleOutcome.passed()
    return RuleOutcome.failed(
        f"{subject} must return {marker}<Data>. "
        f"Found: {one_line(function.return_type_text)}. "
        f"{context.doc_pointer()}"
    )
