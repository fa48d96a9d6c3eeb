"""
Database module for the Claim Lifecycle Engine.

Exports database connection utilities.
"""

from claimflow.db.connection import (
    check_db_connection,
    close_db_connection,
    get_engine,
    get_session,
    get_session_maker,
)

__all__ = [
    "get_engine",
    "get_session_maker",
    "get_session",
    "close_db_connection",
    "check_db_connection",
]
