"""Linter orchestrator: load conventions, walk the project, dispatch rules, format results."""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from bakelint.config import IGNORED_DIRECTORIES, load_project_conventions
from bakelint.rules.base import ProjectResources, RuleContext
from bakelint.rules.registry import all_rules, run_rules, select_rules
from bakelint.syntax.ts_analyzer import SOURCE_EXTENSIONS

if TYPE_CHECKING:
    from collections.abc import Iterable

    from bakelint.rules.base import Diagnostic

logger = logging.getLogger(__name__)

# Script files: TypeScript sources plus the JavaScript files the general rules reject.
LINTED_EXTENSIONS: frozenset[str] = SOURCE_EXTENSIONS | {".js", ".jsx", ".mjs", ".cjs"}


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class LintError(Exception):
    """Raised when lint encounters a configuration error."""


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass
class LintResult:
    """Result of a lint run."""

    diagnostics: list[Diagnostic] = field(default_factory=list)
    rules_evaluated: int = 0
    files_scanned: int = 0
    errors: list[str] = field(default_factory=list)
    elapsed_ms: float = 0.0


# ---------------------------------------------------------------------------
# File discovery
# ---------------------------------------------------------------------------


def _iter_project_files(project_root: Path) -> list[Path]:
    files: list[Path] = []
    for path in project_root.rglob("*"):
        if not path.is_file() or path.suffix.lower() not in LINTED_EXTENSIONS:
            continue
        if IGNORED_DIRECTORIES.intersection(path.relative_to(project_root).parts):
            continue
        files.append(path)
    return sorted(files)


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def lint(
    project_root: Path,
    *,
    config_path: Path | None = None,
    paths: Iterable[Path] | None = None,
    path_only: bool = False,
) -> LintResult:
    """Run every applicable rule over the project's script files.

    Parameters
    ----------
    project_root:
        Root of the TypeScript project.
    config_path:
        Optional explicit path to ``bakelint.yml``.  When *None* the project
        root is searched for ``bakelint.yml`` / ``.bakelint.yml``; without one
        the built-in conventions apply.
    paths:
        Restrict the run to these files instead of walking the project.
    path_only:
        Only run rules that look at the path, not the content.

    Returns
    -------
    LintResult
        Diagnostics, counts, rule errors and timing.

    Raises
    ------
    LintError
        When the configuration file is present but invalid.
    """
    start = time.monotonic()
    project_root = project_root.resolve()

    try:
        conventions = load_project_conventions(project_root, config_path)
    except (OSError, ValueError) as exc:
        msg = f"Invalid configuration: {exc}"
        raise LintError(msg) from exc

    resources = ProjectResources(project_root, conventions)
    files = (
        [Path(p).resolve() for p in paths]
        if paths is not None
        else _iter_project_files(project_root)
    )

    result = LintResult(rules_evaluated=len(all_rules()))
    for path in files:
        try:
            content = "" if path_only else path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Skipping unreadable file %s: %s", path, exc)
            result.errors.append(f"{path}: {exc}")
            continue

        context = RuleContext.create(
            project_root, path, content, conventions=conventions, resources=resources
        )
        specs = select_rules(context, path_only=path_only)
        if not specs:
            continue
        dispatched = run_rules(context, specs)
        result.files_scanned += 1
        result.diagnostics.extend(dispatched.diagnostics)
        result.errors.extend(dispatched.errors)

    result.diagnostics.sort(key=lambda d: (d.file_path, d.rule))
    result.elapsed_ms = (time.monotonic() - start) * 1000
    logger.debug(
        "Linted %d file(s): %d diagnostic(s), %d error(s)",
        result.files_scanned,
        len(result.diagnostics),
        len(result.errors),
    )
    return result


# ---------------------------------------------------------------------------
# Formatters
# ---------------------------------------------------------------------------


def format_rich(result: LintResult) -> str:
    """Format a LintResult as human-readable text.

    Example output with violations::

        Rules: 24 loaded
        Files: 6 scanned

        ✗ function-file-name
          src/function/users/get-users.ts
          Function file names must start with 'fn.', 'fx.', or 'tx.'. ...

        1 violations found (24 rules evaluated, 0.1s)
    """
    lines: list[str] = [
        f"Rules: {result.rules_evaluated} loaded",
        f"Files: {result.files_scanned} scanned",
        "",
    ]

    elapsed_str = f"{result.elapsed_ms / 1000:.1f}s"

    for d in result.diagnostics:
        lines.append(f"✗ {d.rule}")
        lines.append(f"  {d.file_path}")
        lines.append(f"  {d.error}")
        lines.append("")

    for error in result.errors:
        lines.append(f"! {error}")
    if result.errors:
        lines.append("")

    if result.diagnostics:
        count = len(result.diagnostics)
        lines.append(
            f"{count} violations found ({result.rules_evaluated} rules evaluated, {elapsed_str})"
        )
    else:
        lines.append(
            f"✓ No violations found ({result.rules_evaluated} rules evaluated, {elapsed_str})"
        )

    return "\n".join(lines)


def format_json(result: LintResult) -> str:
    """Format a LintResult as structured JSON with ``diagnostics`` and ``summary``."""
    output: dict[str, object] = {
        "diagnostics": [
            {"rule": d.rule, "file_path": d.file_path, "error": d.error}
            for d in result.diagnostics
        ],
        "errors": list(result.errors),
        "summary": {
            "rules_evaluated": result.rules_evaluated,
            "violations_count": len(result.diagnostics),
            "files_scanned": result.files_scanned,
            "elapsed_ms": result.elapsed_ms,
        },
    }
    return json.dumps(output, indent=2)


def format_porcelain(result: LintResult) -> str:
    """One line per violation: ``rule:file_path:error``.

    Returns an empty string when there are no violations.
    """
    return "\n".join(f"{d.rule}:{d.file_path}:{d.error}" for d in result.diagnostics)
