"""Database identifier resolver: discover connection variables and their testing factories."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from bakelint.syntax.ts_analyzer import (
    SOURCE_EXTENSIONS,
    ParseFailure,
    list_exported_bindings,
    parse_source,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator
    from pathlib import Path

    from bakelint.config import Conventions

logger = logging.getLogger(__name__)

TESTING_FACTORY_PREFIX = "createTesting"


class DatabaseNameCollision(ValueError):
    """Two distinct database variables derive the same testing factory name."""


def derive_testing_factory_name(name: str, suffix: str = "Db") -> str:
    """Return the testing factory name for database variable *name*.

    ``magicCardsDb`` -> ``createTestingMagicCardsDb``.  The trailing *suffix*
    is removed once (when present), the first remaining character is
    upper-cased and *suffix* is appended again.
    """
    stem = name[: -len(suffix)] if suffix and name.endswith(suffix) else name
    return f"{TESTING_FACTORY_PREFIX}{stem[:1].upper()}{stem[1:]}{suffix}"


@dataclass(frozen=True)
class DatabaseVariable:
    name: str  # e.g. "magicCardsDb"
    module_path: str  # project-relative POSIX path of the declaring module
    testing_factory: str  # e.g. "createTestingMagicCardsDb"


class DatabaseCatalog:
    """Read-only set of known database variables, keyed by variable name."""

    def __init__(self, variables: Iterable[DatabaseVariable] = ()) -> None:
        self._by_name: dict[str, DatabaseVariable] = {}
        factories: dict[str, str] = {}
        for variable in variables:
            if variable.name in self._by_name:
                logger.warning(
                    "Database variable %s declared in both %s and %s; keeping the first",
                    variable.name,
                    self._by_name[variable.name].module_path,
                    variable.module_path,
                )
                continue
            owner = factories.get(variable.testing_factory)
            if owner is not None:
                msg = (
                    f"Database variables '{owner}' and '{variable.name}' both derive "
                    f"the testing factory '{variable.testing_factory}'"
                )
                raise DatabaseNameCollision(msg)
            factories[variable.testing_factory] = variable.name
            self._by_name[variable.name] = variable

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __iter__(self) -> Iterator[DatabaseVariable]:
        return iter(sorted(self._by_name.values(), key=lambda v: v.name))

    def __len__(self) -> int:
        return len(self._by_name)

    def get(self, name: str) -> DatabaseVariable | None:
        return self._by_name.get(name)

    @property
    def names(self) -> list[str]:
        return sorted(self._by_name)


def _connection_modules(database_root: Path, marker: str) -> list[Path]:
    return sorted(
        path
        for path in database_root.rglob(f"{marker}*")
        if path.is_file()
        and path.suffix in SOURCE_EXTENSIONS
        and "node_modules" not in path.parts
    )


def find_database_variables(project_root: Path, conventions: Conventions) -> DatabaseCatalog:
    """Scan the database area for connection modules and collect their variables.

    Unreadable or unparsable modules are logged and skipped; a missing
    database directory yields an empty catalog.

    Raises
    ------
    DatabaseNameCollision
        When two discovered variables derive the same testing factory name.
    """
    database_root = project_root / conventions.database_area
    if not database_root.is_dir():
        logger.debug("No database directory at %s", database_root)
        return DatabaseCatalog()

    variables: list[DatabaseVariable] = []
    for module in _connection_modules(database_root, conventions.connection_path_marker):
        rel_path = module.relative_to(project_root).as_posix()
        try:
            text = module.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Skipping unreadable connection module %s: %s", rel_path, exc)
            continue
        try:
            unit = parse_source(text, rel_path)
        except ParseFailure as exc:
            logger.warning("Skipping connection module %s: %s", rel_path, exc)
            continue

        for name in list_exported_bindings(unit):
            if not name.endswith(conventions.database_suffix):
                continue
            variables.append(
                DatabaseVariable(
                    name=name,
                    module_path=rel_path,
                    testing_factory=derive_testing_factory_name(
                        name, conventions.database_suffix
                    ),
                )
            )

    catalog = DatabaseCatalog(variables)
    logger.debug("Discovered %d database variable(s): %s", len(catalog), catalog.names)
    return catalog
