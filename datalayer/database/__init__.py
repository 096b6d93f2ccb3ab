"""Database module.

Engine and session helpers plus table creation for a populated registry.
"""

from datalayer.database.engine import create_database_engine, create_session_factory
from datalayer.database.init_db import init_database

__all__ = [
    "create_database_engine",
    "create_session_factory",
    "init_database",
]
