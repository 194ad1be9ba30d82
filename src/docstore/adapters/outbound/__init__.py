"""Outbound adapters - implementations of outbound ports.

These adapters implement external dependencies; for the document
store that is the local filesystem.
"""

from docstore.adapters.outbound.local_file_storage import LocalFileStorage

__all__ = [
    "LocalFileStorage",
]
