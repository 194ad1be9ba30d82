"""
docstore - Embedded JSON Document Store

A minimal, single-process document store: databases are directories,
tables are files holding a JSON array of records, and records are
identified by their ``id`` field.
"""

__version__ = "0.1.0"
__author__ = "Systems Engineering Portfolio"
