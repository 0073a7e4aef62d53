"""Persistence layer for stored job postings.

Public API:
    # Database initialization and session management
    - init_database(database_url: str) -> None
    - get_session() -> ContextManager[Session]
    - close_database() -> None
    - get_engine() -> Engine

    # Repository
    - JobPostingRepository: ingestion boundary and search execution
    - InsertResult: counts returned by insert_if_absent

    # Exceptions
    - PersistenceError: Base exception for all persistence errors
    - DatabaseConnectionError: Database connection/initialization failures
    - StoreUnavailableError: Timeouts and lost connections (retryable)
    - RecordNotFoundError: Required record not found
    - DataIntegrityError: Constraint violations

Example usage:
    >>> from jobsearch.persistence import init_database, get_session, JobPostingRepository
    >>>
    >>> init_database("sqlite:///./data/job_search.db")
    >>>
    >>> with get_session() as session:
    ...     repo = JobPostingRepository(session)
    ...     posting = repo.get_by_posting_id("JP-000123")
"""

# Database initialization and session management
from .database import close_database, get_engine, get_session, init_database

# Repository
from .repositories import InsertResult, JobPostingRepository

# Exceptions
from .exceptions import (
    DatabaseConnectionError,
    DataIntegrityError,
    PersistenceError,
    RecordNotFoundError,
    StoreUnavailableError,
)

__all__ = [
    # Database functions
    "init_database",
    "get_session",
    "close_database",
    "get_engine",
    # Repository
    "JobPostingRepository",
    "InsertResult",
    # Exceptions
    "PersistenceError",
    "DatabaseConnectionError",
    "StoreUnavailableError",
    "RecordNotFoundError",
    "DataIntegrityError",
]
