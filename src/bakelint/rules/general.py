"""Project-wide rules: file kinds and placement, test file layout."""

from __future__ import annotations

import logging
import re
from pathlib import PurePosixPath
from typing import TYPE_CHECKING

from bakelint.config import GENERAL_AREA
from bakelint.rules.base import RuleOutcome
from bakelint.rules.registry import TEST_FILES, register

if TYPE_CHECKING:
    from bakelint.rules.base import RuleContext

logger = logging.getLogger(__name__)

JAVASCRIPT_SUFFIXES: frozenset[str] = frozenset({".js", ".jsx", ".mjs", ".cjs"})
TYPESCRIPT_SUFFIXES: frozenset[str] = frozenset({".ts", ".tsx"})
SCRIPTS_DIRECTORY = "one-off-scripts"

_NOISE_RE = re.compile(
    r"//[^\n]*"
    r"|/\*.*?\*/"
    r"|`(?:[^`\\]|\\.)*`"
    r"|\"(?:[^\"\\\n]|\\.)*\""
    r"|'(?:[^'\\\n]|\\.)*'",
    re.DOTALL,
)
_TEST_CALL_RE = re.compile(r"^\s*(?:test|it)\s*\(")
_DESCRIBE_CALL_RE = re.compile(r"^\s*describe\s*\(")

_DESCRIBE_EXAMPLE = (
    "Example:\n"
    'describe("ModuleName", () => {\n'
    '  test("should do something", () => { ... });\n'
    "});"
)


@register(
    "general-no-js-files",
    area=GENERAL_AREA,
    description="The project contains no JavaScript files",
    needs_content=False,
)
def no_js_files(context: RuleContext) -> RuleOutcome:
    if PurePosixPath(context.file_name.lower()).suffix not in JAVASCRIPT_SUFFIXES:
        return RuleOutcome.passed()
    logger.debug("JavaScript file detected: %s", context.relative_path)
    return RuleOutcome.failed(
        f"JavaScript files are not allowed in this project. Found: {context.relative_path}. "
        "Please use TypeScript (.ts) files instead."
    )


@register(
    "general-no-ts-file-in-root",
    area=GENERAL_AREA,
    description="No TypeScript files in the project root",
    needs_content=False,
)
def no_ts_file_in_root(context: RuleContext) -> RuleOutcome:
    relative = context.relative_path or ""
    if "/" in relative or PurePosixPath(relative).suffix not in TYPESCRIPT_SUFFIXES:
        return RuleOutcome.passed()
    return RuleOutcome.failed(
        ".ts and .tsx files are not allowed in the project root. "
        f"Found: {relative}. "
        f"Please place TypeScript files in the appropriate {context.conventions.source_root}/ "
        "subdirectory. "
        f"If you need to create one off scripts place them in {SCRIPTS_DIRECTORY}/ directory."
    )


def _replace_noise(match: re.Match[str]) -> str:
    text = match.group(0)
    if text.startswith("/"):
        # Keep line structure so later lines stay separate.
        return "\n" * text.count("\n")
    return '""'


def _scrub(content: str) -> str:
    """Drop comments and blank out string literals so braces inside them do not count."""
    return _NOISE_RE.sub(_replace_noise, content)


def top_level_calls(content: str) -> tuple[list[str], list[str]]:
    """Return the ``test``/``it`` lines and the ``describe`` lines found at brace depth 0."""
    tests: list[str] = []
    describes: list[str] = []
    depth = 0
    for line in _scrub(content).splitlines():
        if depth == 0:
            if _TEST_CALL_RE.match(line):
                tests.append(line.strip())
            elif _DESCRIBE_CALL_RE.match(line):
                describes.append(line.strip())
        depth = max(depth + line.count("{") - line.count("}"), 0)
    return tests, describes


@register(
    "general-test-describe-wrapper",
    area=GENERAL_AREA,
    description="Test files wrap their tests in exactly one top-level describe()",
    targets=TEST_FILES,
)
def test_describe_wrapper(context: RuleContext) -> RuleOutcome:
    conventions = context.conventions
    relative = context.relative_path or ""
    if not relative.startswith(conventions.source_root.rstrip("/") + "/"):
        return RuleOutcome.not_applicable(f"outside {conventions.source_root}/")
    if PurePosixPath(relative).suffix not in TYPESCRIPT_SUFFIXES:
        return RuleOutcome.not_applicable("not a TypeScript test file")

    tests, describes = top_level_calls(context.content)
    if tests:
        logger.debug("Top-level test() calls in %s: %s", relative, tests)
        return RuleOutcome.failed(
            "Top-level test() calls are not allowed in test files. "
            f"Found {len(tests)} top-level test() call(s). "
            "All test() calls must be wrapped inside a single top-level describe() block. "
            f"{_DESCRIBE_EXAMPLE}"
        )
    if not describes:
        return RuleOutcome.failed(
            "Test files must have a single top-level describe() block. "
            f"No describe() block found. {_DESCRIBE_EXAMPLE}"
        )
    if len(describes) > 1:
        return RuleOutcome.failed(
            "Test files must have exactly ONE top-level describe() block. "
            f"Found {len(describes)} top-level describe() calls. "
            "Please consolidate all tests into a single describe() block. "
            "You can use nested describe() blocks inside the single top-level describe()."
        )
    return RuleOutcome.passed()
