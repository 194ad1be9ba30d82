"""Ports layer - interface definitions following Hexagonal Architecture.

Ports are abstract interfaces (protocols) that define contracts:
- Outbound ports: Dependencies on external systems (e.g., FileStorage)

Adapters implement these ports with concrete functionality.
"""

from docstore.ports.outbound import FileStorage

__all__ = [
    "FileStorage",
]
