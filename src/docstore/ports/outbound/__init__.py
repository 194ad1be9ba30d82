"""Outbound ports - interfaces for external dependencies.

Outbound ports define contracts for the systems the document store
depends on, which is only the filesystem.
"""

from docstore.ports.outbound.file_storage import FileStorage

__all__ = [
    "FileStorage",
]
