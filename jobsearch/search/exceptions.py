"""Search engine exceptions.

Store failures are not wrapped here: they surface as the persistence layer's
exceptions (``StoreUnavailableError`` for timeouts and lost connections).
"""

from typing import List, Optional


class SearchError(Exception):
    """Base exception for search request errors."""

    pass


class InvalidSearchError(SearchError):
    """Raised when a search request is rejected before reaching the store.

    Examples:
    - none of text, location or email filter provided
    - limit or offset not interpretable as an integer
    - unknown email filter value
    """

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        self.message = message
        self.errors = list(errors or [])
        detail = f"{message}: {'; '.join(self.errors)}" if self.errors else message
        super().__init__(detail)
