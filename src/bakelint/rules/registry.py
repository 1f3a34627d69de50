"""Rule registry and dispatcher.

Rules register themselves with :func:`register`; the dispatcher selects the
subset that applies to a file (area, test status, path-only phase), runs them
and collects diagnostics in rule-name order.
"""

from __future__ import annotations

import importlib
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from bakelint.config import GENERAL_AREA
from bakelint.rules.base import Diagnostic, RuleContext, RuleOutcome
from bakelint.syntax.ts_analyzer import ParseFailure

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from pathlib import Path

    from bakelint.config import Conventions

    RuleFunc = Callable[[RuleContext], RuleOutcome]

logger = logging.getLogger(__name__)

SOURCE_FILES = "source"
TEST_FILES = "test"
ALL_FILES = "all"
VALID_TARGETS: frozenset[str] = frozenset({SOURCE_FILES, TEST_FILES, ALL_FILES})

_RULE_MODULES: tuple[str, ...] = (
    "bakelint.rules.function",
    "bakelint.rules.controller",
    "bakelint.rules.database",
    "bakelint.rules.api",
    "bakelint.rules.general",
)


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RuleSpec:
    """A registered rule and the files it governs."""

    name: str
    area: str
    description: str
    func: RuleFunc
    targets: str = SOURCE_FILES
    needs_content: bool = True

    def governs(self, context: RuleContext) -> bool:
        if self.area == GENERAL_AREA:
            if context.relative_path is None or context.is_ignored:
                return False
        elif context.area != self.area:
            return False
        if self.targets == SOURCE_FILES:
            return not context.is_test_file
        if self.targets == TEST_FILES:
            return context.is_test_file
        return True


@dataclass
class DispatchResult:
    """Diagnostics of one file plus the rules that raised instead of answering."""

    diagnostics: list[Diagnostic] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

_REGISTRY: dict[str, RuleSpec] = {}
_loaded = False


def register(
    name: str,
    *,
    area: str,
    description: str,
    targets: str = SOURCE_FILES,
    needs_content: bool = True,
) -> Callable[[RuleFunc], RuleFunc]:
    """Decorator adding a rule function to the registry under *name*."""
    if targets not in VALID_TARGETS:
        msg = f"Rule '{name}': invalid targets '{targets}', must be one of {sorted(VALID_TARGETS)}"
        raise ValueError(msg)

    def decorator(func: RuleFunc) -> RuleFunc:
        if name in _REGISTRY:
            msg = f"Duplicate rule name '{name}'"
            raise ValueError(msg)
        _REGISTRY[name] = RuleSpec(
            name=name,
            area=area,
            description=description,
            func=func,
            targets=targets,
            needs_content=needs_content,
        )
        return func

    return decorator


def _ensure_loaded() -> None:
    # Rule modules import this one for ``register``; load them lazily.
    global _loaded
    if _loaded:
        return
    for module in _RULE_MODULES:
        importlib.import_module(module)
    _loaded = True


def all_rules() -> list[RuleSpec]:
    """Every registered rule, sorted by name."""
    _ensure_loaded()
    return [_REGISTRY[name] for name in sorted(_REGISTRY)]


def get_rule(name: str) -> RuleSpec:
    _ensure_loaded()
    try:
        return _REGISTRY[name]
    except KeyError:
        msg = f"Unknown rule '{name}'"
        raise ValueError(msg) from None


def select_rules(
    context: RuleContext,
    *,
    names: Iterable[str] | None = None,
    path_only: bool = False,
) -> list[RuleSpec]:
    """Rules that govern *context*'s file, optionally restricted by name or phase."""
    wanted = set(names) if names is not None else None
    return [
        spec
        for spec in all_rules()
        if spec.governs(context)
        and (wanted is None or spec.name in wanted)
        and not (path_only and spec.needs_content)
    ]


# ---------------------------------------------------------------------------
# Evaluation
# ---------------------------------------------------------------------------


def evaluate(spec: RuleSpec, context: RuleContext) -> RuleOutcome:
    """Run one rule; files it does not govern and unparsable content are inapplicable."""
    if not spec.governs(context):
        outcome = RuleOutcome.not_applicable(f"not governed by {spec.name}")
    else:
        try:
            outcome = spec.func(context)
        except ParseFailure as exc:
            outcome = RuleOutcome.not_applicable(str(exc))

    if outcome.reason is not None:
        logger.debug("%s inapplicable to %s: %s", spec.name, context.file_path, outcome.reason)
    return outcome


def _diagnostic(spec: RuleSpec, context: RuleContext, outcome: RuleOutcome) -> Diagnostic | None:
    if not outcome.is_failure or outcome.message is None:
        return None
    return Diagnostic(
        rule=spec.name,
        error=outcome.message,
        file_path=context.relative_path or context.file_path,
    )


def run_rules(context: RuleContext, specs: Iterable[RuleSpec]) -> DispatchResult:
    """Evaluate *specs* on one file.

    Rules raising ``OSError`` or ``ValueError`` (permission problems, database
    name collisions) are logged and skipped; the rest still run.
    """
    result = DispatchResult()
    for spec in specs:
        try:
            outcome = evaluate(spec, context)
        except (OSError, ValueError) as exc:
            logger.warning("Rule %s failed on %s: %s", spec.name, context.file_path, exc)
            result.errors.append(f"{spec.name}: {context.file_path}: {exc}")
            continue
        diagnostic = _diagnostic(spec, context, outcome)
        if diagnostic is not None:
            result.diagnostics.append(diagnostic)
    result.diagnostics.sort(key=lambda d: d.rule)
    return result


def dispatch(
    context: RuleContext,
    *,
    names: Iterable[str] | None = None,
    path_only: bool = False,
) -> list[Diagnostic]:
    """Run every applicable rule on one file and return its diagnostics."""
    specs = select_rules(context, names=names, path_only=path_only)
    return run_rules(context, specs).diagnostics


def check(name: str, context: RuleContext) -> Diagnostic | None:
    """Run the rule *name* on one file; ``None`` means pass or inapplicable."""
    spec = get_rule(name)
    return _diagnostic(spec, context, evaluate(spec, context))


def invoke(
    name: str,
    *,
    directory: str | Path,
    file_path: str | Path,
    content: str,
    conventions: Conventions | None = None,
) -> dict[str, str] | None:
    """Bare rule contract: ``{directory, file_path, content}`` in, ``{"error": ...}`` or ``None`` out.

    Every call builds fresh project resources.
    """
    context = RuleContext.create(directory, file_path, content, conventions=conventions)
    diagnostic = check(name, context)
    return diagnostic.as_dict() if diagnostic is not None else None
