"""Convention configuration: defaults plus optional ``bakelint.yml`` overrides."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

import yaml

if TYPE_CHECKING:
    from pathlib import Path

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

SUPPORTED_SCHEMA_VERSIONS: frozenset[int] = frozenset({1})
CONFIG_FILE_NAMES: tuple[str, ...] = ("bakelint.yml", ".bakelint.yml")
VALID_PARAMETER_ROLES: frozenset[str] = frozenset({"portal", "args"})

FUNCTION_AREA = "function"
CONTROLLER_AREA = "controller"
DATABASE_AREA = "database"
API_AREA = "api"
# Rules of this area govern every project file outside the ignored directories.
GENERAL_AREA = "general"

IGNORED_DIRECTORIES: frozenset[str] = frozenset({"node_modules", ".git", "dist", "build"})

DEFAULT_RESULT_MARKERS: dict[str, str] = {"tuple": "TErrTuple", "triple": "TErrTriple"}
DEFAULT_DOCS: dict[str, str] = {
    FUNCTION_AREA: "docs/conventions/functions.md",
    CONTROLLER_AREA: "docs/conventions/controllers.md",
    DATABASE_AREA: "docs/conventions/database.md",
    API_AREA: "docs/conventions/api.md",
    GENERAL_AREA: "docs/conventions/general.md",
}

_STRING_KEYS: tuple[str, ...] = (
    "function_area",
    "controller_area",
    "database_area",
    "api_area",
    "source_root",
    "portal_marker",
    "args_marker",
    "connection_path_marker",
    "database_suffix",
    "portal_alias",
    "portal_database_property",
    "test_marker",
    "controller_prefix",
    "api_prefix",
    "api_route_prefix",
)

# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class NamingClass:
    """A file-name prefix and the signature it commits the file to."""

    prefix: str  # e.g. "fx."
    label: str  # e.g. "Effectful function"
    result: str  # key into Conventions.result_markers
    parameters: tuple[str, ...]  # ordered parameter roles: "portal" | "args"


DEFAULT_PREFIXES: tuple[NamingClass, ...] = (
    NamingClass(prefix="fn.", label="Pure function", result="tuple", parameters=("args",)),
    NamingClass(
        prefix="fx.", label="Effectful function", result="tuple", parameters=("portal", "args")
    ),
    NamingClass(
        prefix="tx.",
        label="Transactional function",
        result="triple",
        parameters=("portal", "args"),
    ),
)


@dataclass(frozen=True)
class Conventions:
    """Naming vocabulary and layout the rules check against."""

    function_area: str = "src/function"
    controller_area: str = "src/controller"
    database_area: str = "src/database"
    api_area: str = "src/api"
    source_root: str = "src"
    prefixes: tuple[NamingClass, ...] = DEFAULT_PREFIXES
    result_markers: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_RESULT_MARKERS))
    portal_marker: str = "Portal"
    args_marker: str = "Args"
    connection_path_marker: str = "conn."
    database_suffix: str = "Db"
    portal_alias: str = "TPortal"
    portal_database_property: str = "db"
    test_marker: str = ".test"
    controller_prefix: str = "ctrl."
    controller_parameters: tuple[str, ...] = ("portal", "args")
    database_file_prefixes: tuple[str, ...] = ("conn.", "schema.", "auth.")
    api_prefix: str = "api."
    api_route_prefix: str = "/api/"
    strict_portal_database: bool = False
    docs: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_DOCS))

    def naming_class_for(self, file_name: str) -> NamingClass | None:
        """Return the naming class whose prefix starts *file_name* (a base name)."""
        for naming_class in self.prefixes:
            if file_name.startswith(naming_class.prefix):
                return naming_class
        return None

    def result_marker(self, naming_class: NamingClass) -> str:
        return self.result_markers[naming_class.result]

    def role_marker(self, role: str) -> str:
        return self.portal_marker if role == "portal" else self.args_marker

    def area_root(self, area: str) -> str:
        return {
            FUNCTION_AREA: self.function_area,
            CONTROLLER_AREA: self.controller_area,
            DATABASE_AREA: self.database_area,
            API_AREA: self.api_area,
        }[area]

    def area_of(self, relative_path: str | None) -> str | None:
        """Classify a project-relative POSIX path into one of the layered areas."""
        if relative_path is None:
            return None
        for area in (FUNCTION_AREA, CONTROLLER_AREA, DATABASE_AREA, API_AREA):
            if relative_path.startswith(self.area_root(area).rstrip("/") + "/"):
                return area
        return None

    def doc_pointer(self, area: str) -> str:
        return f"You might want to read {self.docs.get(area, DEFAULT_DOCS[area])}"


# ---------------------------------------------------------------------------
# YAML parsing
# ---------------------------------------------------------------------------


def _parse_roles(value: object, context: str) -> tuple[str, ...]:
    if not isinstance(value, list) or not value:
        msg = f"{context}: 'parameters' must be a non-empty list"
        raise ValueError(msg)
    roles = tuple(str(item) for item in value)
    for role in roles:
        if role not in VALID_PARAMETER_ROLES:
            msg = (
                f"{context}: invalid parameter role '{role}', "
                f"must be one of {sorted(VALID_PARAMETER_ROLES)}"
            )
            raise ValueError(msg)
    return roles


def _parse_prefixes(
    prefixes_raw: object, result_markers: dict[str, str]
) -> tuple[NamingClass, ...]:
    if not isinstance(prefixes_raw, list) or not prefixes_raw:
        msg = "bakelint.yml: 'prefixes' must be a non-empty list"
        raise ValueError(msg)

    seen: set[str] = set()
    naming_classes: list[NamingClass] = []
    for idx, item in enumerate(prefixes_raw):
        if not isinstance(item, dict):
            msg = f"bakelint.yml: prefix at index {idx} must be a mapping"
            raise ValueError(msg)

        prefix = item.get("prefix")
        if prefix is None or not isinstance(prefix, str) or not prefix.strip():
            msg = f"bakelint.yml: prefix at index {idx} missing required 'prefix' field"
            raise ValueError(msg)
        if prefix in seen:
            msg = f"bakelint.yml: duplicate prefix '{prefix}'"
            raise ValueError(msg)
        seen.add(prefix)

        result = str(item.get("result", "tuple"))
        if result not in result_markers:
            msg = (
                f"bakelint.yml: prefix '{prefix}' has invalid result '{result}', "
                f"must be one of {sorted(result_markers)}"
            )
            raise ValueError(msg)

        naming_classes.append(
            NamingClass(
                prefix=prefix,
                label=str(item.get("label", f"'{prefix}' function")),
                result=result,
                parameters=_parse_roles(
                    item.get("parameters", ["args"]), f"bakelint.yml: prefix '{prefix}'"
                ),
            )
        )
    return tuple(naming_classes)


def _parse_string_map(value: object, key: str) -> dict[str, str]:
    if not isinstance(value, dict):
        msg = f"bakelint.yml: '{key}' must be a mapping"
        raise ValueError(msg)
    parsed: dict[str, str] = {}
    for name, text in value.items():
        if not isinstance(text, str) or not text.strip():
            msg = f"bakelint.yml: '{key}.{name}' must be a non-empty string"
            raise ValueError(msg)
        parsed[str(name)] = text
    return parsed


def parse_conventions(data: object) -> Conventions:
    """Build :class:`Conventions` from already-loaded YAML data.

    Raises ``ValueError`` on schema errors (unsupported version, wrong types,
    unknown result shapes or parameter roles).
    """
    if data is None:
        return Conventions()
    if not isinstance(data, dict):
        msg = "bakelint.yml must be a YAML mapping"
        raise ValueError(msg)

    version = data.get("version", 1)
    if version not in SUPPORTED_SCHEMA_VERSIONS:
        expected = sorted(SUPPORTED_SCHEMA_VERSIONS)
        msg = f"bakelint.yml: unsupported version {version}, expected one of {expected}"
        raise ValueError(msg)

    conventions = Conventions()
    overrides: dict[str, object] = {}

    for key in _STRING_KEYS:
        if key not in data:
            continue
        value = data[key]
        if not isinstance(value, str) or not value.strip():
            msg = f"bakelint.yml: '{key}' must be a non-empty string"
            raise ValueError(msg)
        overrides[key] = value

    result_markers = dict(conventions.result_markers)
    if "result_markers" in data:
        result_markers.update(_parse_string_map(data["result_markers"], "result_markers"))
        overrides["result_markers"] = result_markers

    if "prefixes" in data:
        overrides["prefixes"] = _parse_prefixes(data["prefixes"], result_markers)

    if "controller_parameters" in data:
        overrides["controller_parameters"] = _parse_roles(
            data["controller_parameters"], "bakelint.yml: controller_parameters"
        )

    if "database_file_prefixes" in data:
        raw = data["database_file_prefixes"]
        if not isinstance(raw, list) or not raw:
            msg = "bakelint.yml: 'database_file_prefixes' must be a non-empty list"
            raise ValueError(msg)
        overrides["database_file_prefixes"] = tuple(str(item) for item in raw)

    if "strict_portal_database" in data:
        overrides["strict_portal_database"] = bool(data["strict_portal_database"])

    if "docs" in data:
        docs = dict(conventions.docs)
        docs.update(_parse_string_map(data["docs"], "docs"))
        overrides["docs"] = docs

    return replace(conventions, **overrides)  # type: ignore[arg-type]


def load_conventions(config_path: Path) -> Conventions:
    """Parse a ``bakelint.yml`` file.  Raises ``ValueError`` on schema errors."""
    with config_path.open("r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    return parse_conventions(data)


def find_config(project_root: Path) -> Path | None:
    """Return the first existing config file under *project_root*."""
    for name in CONFIG_FILE_NAMES:
        candidate = project_root / name
        if candidate.is_file():
            return candidate
    return None


def load_project_conventions(project_root: Path, config_path: Path | None = None) -> Conventions:
    """Load conventions for a project; defaults when no config file exists."""
    if config_path is None:
        config_path = find_config(project_root)
    if config_path is None:
        return Conventions()
    return load_conventions(config_path)
