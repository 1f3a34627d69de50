"""Cross-file resolvers: database catalog and sibling files."""

from bakelint.resolvers.db_names import (
    DatabaseCatalog,
    DatabaseNameCollision,
    DatabaseVariable,
    derive_testing_factory_name,
    find_database_variables,
)
from bakelint.resolvers.siblings import (
    corresponding_implementation_file,
    exists,
    extract_portal_database_variable,
    is_test_file,
    read_text,
    relative_posix,
)

__all__ = [
    "DatabaseCatalog",
    "DatabaseNameCollision",
    "DatabaseVariable",
    "corresponding_implementation_file",
    "derive_testing_factory_name",
    "exists",
    "extract_portal_database_variable",
    "find_database_variables",
    "is_test_file",
    "read_text",
    "relative_posix",
]
