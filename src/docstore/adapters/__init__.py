"""Adapters layer - concrete implementations of port interfaces.

Adapters provide the actual implementations:
- Outbound adapters: Implement external dependencies (filesystem)
"""

from docstore.adapters.outbound import LocalFileStorage

__all__ = [
    # Outbound adapters
    "LocalFileStorage",
]
