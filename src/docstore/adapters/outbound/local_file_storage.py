"""Local filesystem implementation of the FileStorage port.

Writes go through a temporary file in the target's directory that is
flushed, fsynced and then moved over the target with ``os.replace``, so
a reader sees either the previous content or the new one. The parent
directory is fsynced after every entry creation, rename or removal.

Temporary File Naming:
    ``.<target name>.<random>.tmp`` in the same directory. Names starting
    with ``.`` are rejected by the path resolver, so they can never clash
    with a table, and ``list_entries`` skips them.

Error Translation:
    FileExistsError   -> AlreadyExistsError
    FileNotFoundError -> NotFoundError
    other OSError     -> IOFailureError
"""

from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path

from docstore.domain.errors import AlreadyExistsError, IOFailureError, NotFoundError
from docstore.infrastructure.config import get_config
from docstore.infrastructure.logging import get_logger


TEMP_PREFIX = "."
TEMP_SUFFIX = ".tmp"

logger = get_logger(__name__)


def _is_temp_name(name: str) -> bool:
    return name.startswith(TEMP_PREFIX) and name.endswith(TEMP_SUFFIX)


class LocalFileStorage:
    """FileStorage backed by the local filesystem.

    Attributes:
        fsync: Whether files and directories are fsynced after writes.
    """

    def __init__(self, fsync: bool | None = None) -> None:
        """Initialize the storage adapter.

        Args:
            fsync: Force durability syncs on or off (default from config).
        """
        self.fsync = get_config().storage.fsync if fsync is None else fsync

    # -- Helpers --

    def _sync_dir(self, path: Path) -> None:
        """fsync a directory so entry changes inside it are durable."""
        if not self.fsync or os.name == "nt":
            return
        fd = os.open(path, os.O_RDONLY)
        try:
            os.fsync(fd)
        finally:
            os.close(fd)

    @staticmethod
    def _require_parent(path: Path) -> None:
        if not path.parent.is_dir():
            raise NotFoundError(f"Parent directory does not exist: {path.parent}", path=path)

    @staticmethod
    def _translate(error: OSError, action: str, path: Path) -> Exception:
        if isinstance(error, FileExistsError):
            return AlreadyExistsError(f"Cannot {action} {path}: already exists", path=path)
        if isinstance(error, FileNotFoundError):
            return NotFoundError(f"Cannot {action} {path}: not found", path=path)
        return IOFailureError(f"Cannot {action} {path}: {error.strerror or error}", path=path)

    # -- Queries --

    def exists(self, path: Path) -> bool:
        """Return True if any entry exists at ``path``."""
        return os.path.lexists(path)

    def is_dir(self, path: Path) -> bool:
        """Return True if ``path`` is an existing directory."""
        return Path(path).is_dir()

    def is_file(self, path: Path) -> bool:
        """Return True if ``path`` is an existing regular file."""
        return Path(path).is_file()

    def list_entries(self, path: Path) -> list[str]:
        """List entry names in a directory, excluding temporary files."""
        path = Path(path)
        try:
            names = os.listdir(path)
        except OSError as e:
            raise self._translate(e, "list", path) from e
        return [name for name in names if not _is_temp_name(name)]

    # -- Creation --

    def create_dir(self, path: Path) -> None:
        """Create a directory; fails if anything exists at ``path``."""
        path = Path(path)
        self._require_parent(path)
        try:
            os.mkdir(path)
            self._sync_dir(path.parent)
        except OSError as e:
            raise self._translate(e, "create directory", path) from e
        logger.debug("directory_created", path=str(path))

    def create_file(self, path: Path) -> None:
        """Create an empty file; fails if anything exists at ``path``."""
        path = Path(path)
        self._require_parent(path)
        try:
            with open(path, "xb") as fh:
                if self.fsync:
                    os.fsync(fh.fileno())
            self._sync_dir(path.parent)
        except OSError as e:
            raise self._translate(e, "create file", path) from e
        logger.debug("file_created", path=str(path))

    # -- Content --

    def read_file(self, path: Path) -> bytes:
        """Read the whole content of a file."""
        path = Path(path)
        try:
            with open(path, "rb") as fh:
                return fh.read()
        except OSError as e:
            raise self._translate(e, "read", path) from e

    def write_file(self, path: Path, data: bytes) -> None:
        """Atomically replace the content of ``path`` with ``data``."""
        path = Path(path)
        self._require_parent(path)

        tmp_name: str | None = None
        try:
            fd, tmp_name = tempfile.mkstemp(
                dir=path.parent,
                prefix=f"{TEMP_PREFIX}{path.name}.",
                suffix=TEMP_SUFFIX,
            )
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
                fh.flush()
                if self.fsync:
                    os.fsync(fh.fileno())
            os.replace(tmp_name, path)
            tmp_name = None
            self._sync_dir(path.parent)
        except OSError as e:
            raise self._translate(e, "write", path) from e
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except FileNotFoundError:
                    pass

        logger.debug("file_written", path=str(path), size=len(data))

    # -- Rename / delete --

    def rename_entry(self, old: Path, new: Path) -> None:
        """Rename ``old`` to ``new`` without overwriting ``new``."""
        old, new = Path(old), Path(new)
        if not self.exists(old):
            raise NotFoundError(f"Cannot rename {old}: not found", path=old)
        if self.exists(new):
            raise AlreadyExistsError(f"Cannot rename to {new}: already exists", path=new)
        self._require_parent(new)
        try:
            os.rename(old, new)
            self._sync_dir(new.parent)
            if old.parent != new.parent:
                self._sync_dir(old.parent)
        except OSError as e:
            raise self._translate(e, "rename", old) from e
        logger.debug("entry_renamed", old=str(old), new=str(new))

    def delete_file(self, path: Path) -> None:
        """Delete a file."""
        path = Path(path)
        try:
            os.unlink(path)
            self._sync_dir(path.parent)
        except OSError as e:
            raise self._translate(e, "delete", path) from e
        logger.debug("file_deleted", path=str(path))

    def delete_dir_recursive(self, path: Path) -> None:
        """Delete a directory tree."""
        path = Path(path)
        if not self.exists(path):
            raise NotFoundError(f"Cannot delete {path}: not found", path=path)
        if not self.is_dir(path):
            raise IOFailureError(f"Cannot delete {path}: not a directory", path=path)
        try:
            shutil.rmtree(path)
            self._sync_dir(path.parent)
        except OSError as e:
            raise self._translate(e, "delete", path) from e
        logger.debug("directory_deleted", path=str(path))
