"""Shared rule types: outcomes, diagnostics, per-file context and per-run resources."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from functools import cached_property
from pathlib import Path
from typing import TYPE_CHECKING

from bakelint.config import IGNORED_DIRECTORIES, Conventions
from bakelint.resolvers.db_names import find_database_variables
from bakelint.resolvers.siblings import is_test_file, relative_posix
from bakelint.syntax.ts_analyzer import parse_source

if TYPE_CHECKING:
    from bakelint.resolvers.db_names import DatabaseCatalog
    from bakelint.syntax.ts_analyzer import SourceUnit

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Outcomes
# ---------------------------------------------------------------------------


class Status(enum.Enum):
    PASS = "pass"
    FAIL = "fail"
    NOT_APPLICABLE = "not-applicable"


@dataclass(frozen=True)
class RuleOutcome:
    """Three-valued result of one rule on one file."""

    status: Status
    message: str | None = None  # set when FAIL
    reason: str | None = None  # set when NOT_APPLICABLE

    @classmethod
    def passed(cls) -> RuleOutcome:
        return cls(Status.PASS)

    @classmethod
    def failed(cls, message: str) -> RuleOutcome:
        return cls(Status.FAIL, message=message)

    @classmethod
    def not_applicable(cls, reason: str) -> RuleOutcome:
        return cls(Status.NOT_APPLICABLE, reason=reason)

    @property
    def is_failure(self) -> bool:
        return self.status is Status.FAIL


@dataclass(frozen=True)
class Diagnostic:
    """A single rule violation on one file."""

    rule: str
    error: str
    file_path: str

    def as_dict(self) -> dict[str, str]:
        return {"error": self.error}


# ---------------------------------------------------------------------------
# Context
# ---------------------------------------------------------------------------


class ProjectResources:
    """Lazily computed project-wide facts shared by the rules of one analysis run.

    Never updated in place: a new run gets a new instance.
    """

    def __init__(self, project_root: Path, conventions: Conventions) -> None:
        self.project_root = project_root
        self.conventions = conventions

    @cached_property
    def database_catalog(self) -> DatabaseCatalog:
        return find_database_variables(self.project_root, self.conventions)


@dataclass(frozen=True)
class RuleContext:
    """Inputs of a rule: project root, file path and file text."""

    directory: Path
    file_path: str
    content: str
    resources: ProjectResources
    conventions: Conventions = field(default_factory=Conventions)

    @classmethod
    def create(
        cls,
        directory: str | Path,
        file_path: str | Path,
        content: str,
        *,
        conventions: Conventions | None = None,
        resources: ProjectResources | None = None,
    ) -> RuleContext:
        directory = Path(directory)
        conventions = conventions or Conventions()
        if resources is None:
            resources = ProjectResources(directory, conventions)
        return cls(
            directory=directory,
            file_path=str(file_path),
            content=content,
            conventions=conventions,
            resources=resources,
        )

    @cached_property
    def absolute_path(self) -> Path:
        path = Path(self.file_path)
        return path if path.is_absolute() else self.directory / path

    @cached_property
    def relative_path(self) -> str | None:
        return relative_posix(self.directory, self.file_path)

    @cached_property
    def file_name(self) -> str:
        return self.absolute_path.name

    @cached_property
    def area(self) -> str | None:
        return self.conventions.area_of(self.relative_path)

    @cached_property
    def is_test_file(self) -> bool:
        return is_test_file(self.file_path, self.conventions.test_marker)

    @cached_property
    def is_ignored(self) -> bool:
        """Inside a vendored or generated directory such as ``node_modules``."""
        if self.relative_path is None:
            return False
        return not IGNORED_DIRECTORIES.isdisjoint(self.relative_path.split("/"))

    @cached_property
    def source(self) -> SourceUnit:
        """Parsed content; raises ``ParseFailure`` on every access when unparsable."""
        return parse_source(self.content, self.file_path)

    @property
    def catalog(self) -> DatabaseCatalog:
        return self.resources.database_catalog

    def area_relative(self) -> str | None:
        """Path below this file's area root, e.g. ``users/fx.create.ts``."""
        if self.area is None or self.relative_path is None:
            return None
        root = self.conventions.area_root(self.area).rstrip("/") + "/"
        return self.relative_path[len(root) :]

    def doc_pointer(self) -> str:
        return self.conventions.doc_pointer(self.area) if self.area else ""
