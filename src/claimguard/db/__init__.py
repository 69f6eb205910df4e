"""
Database module for the claim engine.

Exports database connection utilities.
"""

from claimguard.db.connection import (
    check_db_connection,
    close_db_connection,
    create_engine_from_url,
    create_session_maker,
    create_tables,
    get_engine,
    get_session_maker,
)

__all__ = [
    "check_db_connection",
    "close_db_connection",
    "create_engine_from_url",
    "create_session_maker",
    "create_tables",
    "get_engine",
    "get_session_maker",
]
