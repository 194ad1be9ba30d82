"""File Storage port for filesystem primitives.

This outbound port defines the contract for the raw directory and file
operations the engine is built on. It knows nothing about records or
JSON; it moves bytes and entries around.

Error Contract:
    - ``AlreadyExistsError``: target that must be absent exists
    - ``NotFoundError``: entry or its parent directory is missing
    - ``IOFailureError``: any other OS failure (permissions, disk full,
      wrong entry kind), with the ``OSError`` chained as ``__cause__``

Durability:
    Mutating calls must be durable before they return.
"""

from __future__ import annotations

from abc import abstractmethod
from pathlib import Path
from typing import Protocol


class FileStorage(Protocol):
    """Protocol for filesystem primitives.

    Thread Safety:
        Implementations must be safe to call from several threads.
        Read-modify-write cycles on one file are serialized by the caller.
    """

    @abstractmethod
    def exists(self, path: Path) -> bool:
        """Return True if any entry exists at ``path``."""
        ...

    @abstractmethod
    def is_dir(self, path: Path) -> bool:
        """Return True if ``path`` is an existing directory."""
        ...

    @abstractmethod
    def is_file(self, path: Path) -> bool:
        """Return True if ``path`` is an existing regular file."""
        ...

    @abstractmethod
    def create_dir(self, path: Path) -> None:
        """Create a directory.

        Raises:
            AlreadyExistsError: If an entry already exists at ``path``.
            NotFoundError: If the parent directory is missing.
            IOFailureError: If the OS call fails otherwise.
        """
        ...

    @abstractmethod
    def create_file(self, path: Path) -> None:
        """Create an empty file, failing if it exists.

        Raises:
            AlreadyExistsError: If an entry already exists at ``path``.
            NotFoundError: If the parent directory is missing.
            IOFailureError: If the OS call fails otherwise.
        """
        ...

    @abstractmethod
    def read_file(self, path: Path) -> bytes:
        """Read the whole content of a file.

        Raises:
            NotFoundError: If the file or its parent is missing.
            IOFailureError: If the OS call fails otherwise.
        """
        ...

    @abstractmethod
    def write_file(self, path: Path, data: bytes) -> None:
        """Replace the content of a file atomically.

        Readers observe either the old or the new content, never a mix.

        Raises:
            NotFoundError: If the parent directory is missing.
            IOFailureError: If the OS call fails otherwise.
        """
        ...

    @abstractmethod
    def rename_entry(self, old: Path, new: Path) -> None:
        """Rename a file or directory without overwriting.

        Raises:
            NotFoundError: If ``old`` is missing.
            AlreadyExistsError: If ``new`` exists.
            IOFailureError: If the OS call fails otherwise.
        """
        ...

    @abstractmethod
    def delete_file(self, path: Path) -> None:
        """Delete a file.

        Raises:
            NotFoundError: If the file is missing.
            IOFailureError: If the OS call fails otherwise.
        """
        ...

    @abstractmethod
    def delete_dir_recursive(self, path: Path) -> None:
        """Delete a directory and everything below it.

        Raises:
            NotFoundError: If the directory is missing.
            IOFailureError: If the OS call fails otherwise.
        """
        ...

    @abstractmethod
    def list_entries(self, path: Path) -> list[str]:
        """List entry names in a directory, excluding temporary files.

        Raises:
            NotFoundError: If the directory is missing.
            IOFailureError: If the OS call fails otherwise.
        """
        ...
