"""Public entry point for job searches."""

from typing import Any, Optional

from pydantic import ValidationError

from jobsearch.config.models import SearchSettings
from jobsearch.logging import get_logger

from .engine import JobSearchEngine
from .exceptions import InvalidSearchError
from .models import SearchQuery, SearchResult

logger = get_logger(__name__, component="search")


class JobSearchService:
    """Validates raw search parameters and delegates to the engine.

    Unlike the engine, the service rejects a request that selects nothing:
    callers at this boundary must give text, a location or an email filter.
    """

    def __init__(self, engine: JobSearchEngine, settings: Optional[SearchSettings] = None):
        self.engine = engine
        self.settings = settings or engine.settings

    def search(
        self,
        text: Optional[str] = None,
        location: Optional[str] = None,
        email_filter: Any = None,
        limit: Any = None,
        offset: Any = None,
    ) -> SearchResult:
        """Search stored postings.

        Args:
            text: Free-text query matched against titles and ranked across fields
            location: Substring the posting location must contain
            email_filter: "present"/"absent" (or True/False); None for no filter
            limit: Page size, clamped to [1, max_limit]; configured default if None
            offset: Ranked results to skip, clamped to >= 0

        Returns:
            SearchResult with total_count and one page of items

        Raises:
            InvalidSearchError: If no selector is given or a parameter is malformed
            StoreUnavailableError: On store timeout or lost connection
            PersistenceError: On any other store failure
        """
        query = self.build_query(
            text=text,
            location=location,
            email_filter=email_filter,
            limit=limit,
            offset=offset,
        )

        if not query.has_selector:
            logger.warning(
                "Rejected search without text, location or email filter",
                extra={"event": "search.rejected", "reason": "no_selector"},
            )
            raise InvalidSearchError(
                "At least one of text, location or email_filter is required"
            )

        return self.engine.search(query)

    def build_query(self, **params: Any) -> SearchQuery:
        """Normalize raw parameters into a SearchQuery.

        Raises:
            InvalidSearchError: If a parameter cannot be interpreted
        """
        if params.get("limit") is None:
            params["limit"] = self.settings.default_limit

        try:
            return SearchQuery(**params)
        except ValidationError as e:
            errors = []
            for error in e.errors():
                location = " -> ".join(str(part) for part in error["loc"])
                errors.append(f"{location}: {error['msg']}")
            logger.warning(
                "Rejected malformed search request",
                extra={"event": "search.rejected", "reason": "invalid_parameters"},
            )
            raise InvalidSearchError("Invalid search parameters", errors=errors) from e
