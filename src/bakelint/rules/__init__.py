"""Convention rules: shared types, registry and dispatcher."""

from bakelint.rules.base import (
    Diagnostic,
    ProjectResources,
    RuleContext,
    RuleOutcome,
    Status,
)
from bakelint.rules.registry import (
    DispatchResult,
    RuleSpec,
    all_rules,
    check,
    dispatch,
    get_rule,
    invoke,
    register,
    run_rules,
    select_rules,
)

__all__ = [
    "Diagnostic",
    "DispatchResult",
    "ProjectResources",
    "RuleContext",
    "RuleOutcome",
    "RuleSpec",
    "Status",
    "all_rules",
    "check",
    "dispatch",
    "get_rule",
    "invoke",
    "register",
    "run_rules",
    "select_rules",
]
