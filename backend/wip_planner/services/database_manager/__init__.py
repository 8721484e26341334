"""Database manager module for the WIP planner

The model modules import ``Base`` from here, so this package only exposes the
connection layer. Query helpers live in ``.operations``.
"""

from .connection import Base, close_engine, create_all_tables, get_engine, get_session_factory

__all__ = [
    "Base",
    "get_engine",
    "get_session_factory",
    "close_engine",
    "create_all_tables",
]
