"""
CLI session management utilities for dependency injection.
"""

from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy.orm import Session

from .database import DatabaseManager


class CLISessionManager:
    """Manages database sessions for CLI commands with dependency injection."""

    def __init__(self, database_url: Optional[str] = None):
        self.db_manager = DatabaseManager(database_url)
        self.db_manager.initialize_database()

    @contextmanager
    def get_session(self) -> Generator[Session, None, None]:
        """Get a database session with automatic cleanup."""
        session = self.db_manager.get_session()
        try:
            yield session
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()


_cli_session_manager = None


def get_cli_session_manager(database_url: Optional[str] = None) -> CLISessionManager:
    """Get the CLI session manager, creating it on first use."""
    global _cli_session_manager
    if _cli_session_manager is None:
        _cli_session_manager = CLISessionManager(database_url)
    return _cli_session_manager
