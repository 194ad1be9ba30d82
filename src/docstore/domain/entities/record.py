"""Record helpers: id matching and merge semantics.

A record is a plain ``dict`` decoded from JSON. Records are matched by
their ``id`` field using JSON-style strict equality: ``True`` never
matches ``1`` even though Python considers them equal, while ``1`` and
``1.0`` (the same JSON number) do match. Records without an ``id`` never
match any lookup.

When several records share an id, the first one in table order wins.
"""

from __future__ import annotations

from typing import Any, Mapping

from docstore.domain.value_objects import ID_FIELD, RecordId


Record = dict[str, Any]

_MISSING = object()


def ids_equal(left: Any, right: Any) -> bool:
    """Compare two record ids with JSON (not Python) equality rules."""
    if isinstance(left, bool) or isinstance(right, bool):
        return type(left) is type(right) and left == right
    if isinstance(left, (dict, list)) or isinstance(right, (dict, list)):
        return type(left) is type(right) and left == right
    return left == right


def get_record_id(record: Mapping[str, Any]) -> Any:
    """Return the id of a record, or None when it has none."""
    return record.get(ID_FIELD)


def find_index(records: list[Record], record_id: RecordId) -> int:
    """Return the index of the first record whose id equals ``record_id``.

    Returns:
        The index, or -1 when no record matches.
    """
    for index, record in enumerate(records):
        candidate = record.get(ID_FIELD, _MISSING)
        if candidate is _MISSING:
            continue
        if ids_equal(candidate, record_id):
            return index
    return -1


def merge(record: Mapping[str, Any], patch: Mapping[str, Any]) -> Record:
    """Shallow-merge ``patch`` over ``record``; patch fields win.

    Field order of the original record is kept, new fields are appended.
    """
    merged = dict(record)
    merged.update(patch)
    return merged
