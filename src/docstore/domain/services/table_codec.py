"""Table codec: table file bytes <-> ordered list of records.

File Format:
    UTF-8 text that is either empty/whitespace-only (an empty table) or a
    single JSON array whose elements are all JSON objects. The encoder
    always writes a pretty-printed array, ``[]`` for an empty table.

Rejected on decode (``CorruptTableError``):
    - Malformed JSON or invalid UTF-8
    - A top-level value that is not an array
    - Array elements that are not objects
    - Non-standard constants (``NaN``, ``Infinity``)
"""

from __future__ import annotations

import json
from typing import Any, Iterable, Mapping

from docstore.domain.errors import CorruptTableError, InvalidRecordError


DEFAULT_INDENT = 2
DEFAULT_ENCODING = "utf-8"


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Non-standard JSON constant {name}")


class TableCodec:
    """Encodes and decodes the content of one table file.

    The codec is stateless apart from its formatting options and is safe
    to share between threads.
    """

    def __init__(self, indent: int = DEFAULT_INDENT, encoding: str = DEFAULT_ENCODING) -> None:
        """Initialize the codec.

        Args:
            indent: Spaces per indentation level in encoded output.
            encoding: Text encoding of table files.
        """
        self._indent = indent
        self._encoding = encoding

    @property
    def encoding(self) -> str:
        return self._encoding

    def decode(self, data: bytes) -> list[dict[str, Any]]:
        """Decode table file content into a list of records.

        Args:
            data: Raw file content.

        Returns:
            The records in file order; ``[]`` for empty content.

        Raises:
            CorruptTableError: If the content is not a JSON array of objects.
        """
        try:
            text = data.decode(self._encoding)
        except UnicodeDecodeError as e:
            raise CorruptTableError(f"Table content is not valid {self._encoding}: {e}") from e

        if not text.strip():
            return []

        try:
            parsed = json.loads(text, parse_constant=_reject_constant)
        except ValueError as e:
            raise CorruptTableError(f"Table content is not valid JSON: {e}") from e

        if not isinstance(parsed, list):
            raise CorruptTableError(
                f"Table content must be a JSON array, got {type(parsed).__name__}"
            )

        for index, item in enumerate(parsed):
            if not isinstance(item, dict):
                raise CorruptTableError(
                    f"Table element {index} must be a JSON object, got {type(item).__name__}"
                )

        return parsed

    def encode(self, records: Iterable[Mapping[str, Any]]) -> bytes:
        """Encode records as a pretty-printed JSON array.

        Args:
            records: Records in the order they should be stored.

        Returns:
            UTF-8 (or configured encoding) bytes of the array.

        Raises:
            InvalidRecordError: If a record is not a mapping or not serializable.
        """
        items: list[Mapping[str, Any]] = []
        for index, record in enumerate(records):
            if not isinstance(record, Mapping):
                raise InvalidRecordError(
                    f"Record {index} must be a mapping, got {type(record).__name__}"
                )
            items.append(record)

        try:
            text = json.dumps(
                items,
                indent=self._indent,
                ensure_ascii=False,
                allow_nan=False,
                default=_reject_unserializable,
            )
        except (TypeError, ValueError) as e:
            raise InvalidRecordError(f"Record is not JSON serializable: {e}") from e

        return text.encode(self._encoding)


def _reject_unserializable(value: Any) -> Any:
    if isinstance(value, Mapping):
        return dict(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")
