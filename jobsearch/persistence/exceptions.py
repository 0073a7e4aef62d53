"""Persistence layer exceptions.

All persistence exceptions inherit from PersistenceError so callers can catch
every store failure with a single except clause.
"""


class PersistenceError(Exception):
    """Base exception for all persistence layer errors."""

    retryable = False


class DatabaseConnectionError(PersistenceError):
    """Raised when database connection or initialization fails.

    Examples:
    - Invalid database URL format
    - Database file not accessible
    - Database not initialized before use
    """

    pass


class StoreUnavailableError(PersistenceError):
    """Raised when the store cannot answer right now.

    Covers statement timeouts, lock timeouts, pool exhaustion and dropped
    connections. The caller may retry the same request; the search engine
    itself never does.
    """

    retryable = True


class RecordNotFoundError(PersistenceError):
    """Raised when a required record is not found.

    Optional lookups return None instead.
    """

    pass


class DataIntegrityError(PersistenceError):
    """Raised on constraint violations (e.g. duplicate posting_id)."""

    pass
