"""Persistence layer for lifecycle records using SQLAlchemy.

This module provides the public API for storing interactions and
applications:
- Database initialization and session management
- Repository classes working inside a caller's session
- Store classes implementing the lifecycle store protocols
- Custom exceptions for error handling

Public API:
    # Database initialization and session management
    - init_database(database_url: str) -> None
    - get_session() -> ContextManager[Session]
    - close_database() -> None
    - get_engine() -> Engine

    # Repositories (caller's session, no commit)
    - InteractionRepository
    - ApplicationRepository

    # Stores (one committed session per call)
    - SqlInteractionStore
    - SqlApplicationStore

Example usage:
    >>> from tradematch.persistence import init_database, SqlApplicationStore
    >>>
    >>> init_database("sqlite:///./data/tradematch.db")
    >>> store = SqlApplicationStore()
    >>> application = store.get_by_pair("cand-001", "job-042")
"""

# Database initialization and session management
from .database import close_database, get_engine, get_session, init_database

# Repository classes
from .repositories import ApplicationRepository, InteractionRepository

# Protocol implementations
from .stores import SqlApplicationStore, SqlInteractionStore

# Exceptions
from .exceptions import (
    DatabaseConnectionError,
    DataIntegrityError,
    PersistenceError,
    RecordNotFoundError,
)

__all__ = [
    # Database functions
    "init_database",
    "get_session",
    "close_database",
    "get_engine",
    # Repositories
    "InteractionRepository",
    "ApplicationRepository",
    # Stores
    "SqlInteractionStore",
    "SqlApplicationStore",
    # Exceptions
    "PersistenceError",
    "DatabaseConnectionError",
    "RecordNotFoundError",
    "DataIntegrityError",
]
