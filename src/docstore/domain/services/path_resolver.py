"""Path resolution for databases and tables.

Every on-disk location used by the engine is computed here, so this is
the single place that enforces naming rules and keeps resolved paths
inside the caller's root directory.

Naming rules:
    - Names must be non-empty and not whitespace-only
    - Names must not contain path separators or NUL
    - ``.`` and ``..`` are rejected
    - Names starting with ``.`` are reserved for temporary files
"""

from __future__ import annotations

from pathlib import Path

from docstore.domain.errors import InvalidNameError
from docstore.domain.value_objects import DatabaseName, TableLocation, TableName


_FORBIDDEN_CHARS = ("/", "\\", "\x00")


def validate_name(name: str, kind: str = "name") -> str:
    """Check that a database or table name is safe to use as a path segment.

    Args:
        name: The candidate name.
        kind: What the name is for ("database", "table"); used in messages.

    Returns:
        The name, unchanged.

    Raises:
        InvalidNameError: If the name is empty, unsafe or reserved.
    """
    if not isinstance(name, str):
        raise InvalidNameError(f"{kind} name must be a string, got {type(name).__name__}")

    if not name.strip():
        raise InvalidNameError(f"{kind} name must not be empty")

    for char in _FORBIDDEN_CHARS:
        if char in name:
            raise InvalidNameError(f"{kind} name {name!r} contains forbidden character {char!r}")

    if name in (".", ".."):
        raise InvalidNameError(f"{kind} name {name!r} is not allowed")

    if name.startswith("."):
        raise InvalidNameError(f"{kind} name {name!r} must not start with '.'")

    return name


def resolve_root(root: str | Path) -> Path:
    """Normalize a root directory path (user expansion, absolute, resolved)."""
    if root is None or str(root) == "":
        raise InvalidNameError("root path must not be empty")
    return Path(root).expanduser().resolve()


def _ensure_inside(root: Path, path: Path) -> Path:
    resolved = path.resolve()
    if not resolved.is_relative_to(root):
        raise InvalidNameError(f"Path {path} escapes root {root}")
    return path


def resolve_database_path(root: str | Path, database: str) -> Path:
    """Return the directory path of a database under ``root``.

    Raises:
        InvalidNameError: If the name is invalid or the path leaves the root.
    """
    base = resolve_root(root)
    validate_name(database, "database")
    return _ensure_inside(base, base / database)


def resolve_table_location(root: str | Path, database: str, table: str) -> TableLocation:
    """Validate names and build the location of a table.

    Raises:
        InvalidNameError: If a name is invalid or the path leaves the root.
    """
    base = resolve_root(root)
    validate_name(database, "database")
    validate_name(table, "table")
    location = TableLocation(base, DatabaseName(database), TableName(table))
    _ensure_inside(base, location.table_path)
    return location


def resolve_table_path(root: str | Path, database: str, table: str) -> Path:
    """Return the file path of a table under ``root``."""
    return resolve_table_location(root, database, table).table_path
