"""Rules for the database area: file naming and layout."""

from __future__ import annotations

from typing import TYPE_CHECKING

from bakelint.config import DATABASE_AREA
from bakelint.rules.base import RuleOutcome
from bakelint.rules.registry import register
from bakelint.rules.signature import quoted_list

if TYPE_CHECKING:
    from bakelint.rules.base import RuleContext


def _stem(file_name: str) -> str:
    stem, dot, _ = file_name.rpartition(".")
    return stem if dot else file_name


@register(
    "database-file-name",
    area=DATABASE_AREA,
    description="Database file names start with a database file prefix",
    needs_content=False,
)
def file_name(context: RuleContext) -> RuleOutcome:
    prefixes = context.conventions.database_file_prefixes
    if context.file_name.startswith(prefixes):
        return RuleOutcome.passed()
    return RuleOutcome.failed(
        f"Database file names must start with {quoted_list(prefixes)}. "
        f"Found: {context.file_name}. "
        f"{context.doc_pointer()}"
    )


@register(
    "database-file-name-matches-directory",
    area=DATABASE_AREA,
    description="Database file names end with their directory's database name",
    needs_content=False,
)
def file_name_matches_directory(context: RuleContext) -> RuleOutcome:
    parts = (context.area_relative() or "").split("/")
    if len(parts) < 2:
        return RuleOutcome.not_applicable("file is not inside a database directory")

    db_name = parts[0]
    stem = _stem(context.file_name)
    prefixes = context.conventions.database_file_prefixes
    for prefix in prefixes:
        # <prefix><db> or <prefix><kind>.<db>
        if stem == f"{prefix}{db_name}" or (
            stem.startswith(prefix) and stem.endswith(f".{db_name}")
        ):
            return RuleOutcome.passed()

    expected = [f"{prefix}{db_name}.ts" for prefix in prefixes]
    area_root = context.conventions.database_area.rstrip("/")
    return RuleOutcome.failed(
        "Database file name must match the directory name. "
        f"Expected patterns: {', '.join(expected)}, or <prefix><type>.{db_name}.ts. "
        f"Found: {context.file_name} in {area_root}/{db_name}/. "
        f"{context.doc_pointer()}"
    )


@register(
    "database-path-depth",
    area=DATABASE_AREA,
    description="Database files sit exactly one directory below the area",
    needs_content=False,
)
def path_depth(context: RuleContext) -> RuleOutcome:
    if len((context.area_relative() or "").split("/")) == 2:
        return RuleOutcome.passed()
    area_root = context.conventions.database_area.rstrip("/")
    return RuleOutcome.failed(
        f"Database files must be at {area_root}/<dbname>/<file>.ts. "
        "No subdirectories or additional nesting allowed. "
        f"Found: {context.relative_path}. "
        f"{context.doc_pointer()}"
    )
