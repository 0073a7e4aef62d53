"""Request-scoped fields for structured logging.

A search runs inside ``search_scope()``, which assigns it a ``search_id``.
ContextualFilter copies every field of the active scope onto each record, so
the engine, repository and database log lines of one request can be joined
on that id. Scopes live in a ContextVar: threads and asyncio tasks each see
their own.
"""

from contextlib import contextmanager
from contextvars import ContextVar, Token
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Optional
from uuid import uuid4

_EMPTY: Mapping[str, Any] = MappingProxyType({})

_fields: ContextVar[Mapping[str, Any]] = ContextVar("log_fields", default=_EMPTY)


def get_log_context() -> Dict[str, Any]:
    """Return the active fields as a new dict."""
    return dict(_fields.get())


def push_log_context(**fields: Any) -> Token:
    """Layer fields over the active scope; later keys replace earlier ones.

    Returns:
        Token to hand back to pop_log_context()
    """
    return _fields.set(MappingProxyType({**_fields.get(), **fields}))


def pop_log_context(token: Token) -> None:
    _fields.reset(token)


def clear_log_context() -> None:
    _fields.set(_EMPTY)


@contextmanager
def log_context(**fields: Any) -> Iterator[None]:
    """Apply fields to every record logged inside the block.

    Example:
        >>> with log_context(posting_id="JP-000123"):
        ...     logger.info("Contact updated")
    """
    token = push_log_context(**fields)
    try:
        yield
    finally:
        pop_log_context(token)


@contextmanager
def search_scope(search_id: Optional[str] = None) -> Iterator[str]:
    """Open the logging scope of one search and yield its id.

    A fresh hex id is generated unless the caller supplies one (for example
    a request id from an upstream service).
    """
    search_id = search_id or uuid4().hex
    with log_context(search_id=search_id):
        yield search_id
