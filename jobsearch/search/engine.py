"""Search engine: plans a request, runs it against the store, shapes the page.

One call to ``JobSearchEngine.search`` is one unit of work:

1. Expand the query text into tokens and related canonical titles
2. Build the filter and score expressions
3. Execute count and page in a single store statement
4. Assemble the external result

Store failures propagate unchanged; the engine never retries. Nothing is
cached between calls, and the only shared state is the immutable vocabulary.
"""

import time
from typing import Callable, ContextManager, Optional

from sqlalchemy.orm import Session

from jobsearch.config.models import SearchSettings
from jobsearch.logging import get_logger
from jobsearch.logging.context import search_scope
from jobsearch.persistence.database import get_session
from jobsearch.persistence.repositories import JobPostingRepository

from .assembler import assemble
from .models import SearchQuery, SearchResult
from .planner import QueryPlan, plan_search
from .tokens import expand
from .vocabulary import Vocabulary

logger = get_logger(__name__, component="search")

SessionFactory = Callable[[], ContextManager[Session]]


class JobSearchEngine:
    """Runs ranked, paginated searches over stored job postings.

    Safe to share between threads: each search opens its own session and the
    vocabulary is read-only.
    """

    def __init__(
        self,
        vocabulary: Optional[Vocabulary] = None,
        settings: Optional[SearchSettings] = None,
        session_factory: SessionFactory = get_session,
    ):
        """Initialize the engine.

        Args:
            vocabulary: Synonym table and title catalogue (built-ins by default)
            settings: Paging and timeout limits (defaults by default)
            session_factory: Callable returning a session context manager
        """
        self.vocabulary = vocabulary or Vocabulary()
        self.settings = settings or SearchSettings()
        self.session_factory = session_factory

    def plan(self, query: SearchQuery) -> QueryPlan:
        """Build the query plan for a request without touching the store."""
        tokens = expand(query.text, self.vocabulary.synonyms)
        related_titles = self.vocabulary.titles.related_titles(query.text)
        return plan_search(query, tokens, related_titles)

    def search(self, query: SearchQuery) -> SearchResult:
        """Return one ranked page of matching postings and the total count.

        A query with no text, no location and no email filter returns an
        empty result without reaching the store.

        Args:
            query: Normalized search request

        Returns:
            SearchResult with total_count and the requested page

        Raises:
            StoreUnavailableError: On store timeout or lost connection
            PersistenceError: On any other store failure
        """
        if not query.has_selector:
            logger.debug(
                "Search without selectors short-circuited",
                extra={"event": "search.short_circuited"},
            )
            return SearchResult.empty()

        limit = min(query.limit, self.settings.max_limit)
        offset = query.offset

        with search_scope():
            start_time = time.time()
            logger.info(
                "Search started",
                extra={
                    "event": "search.started",
                    "has_text": bool(query.text),
                    "has_location": bool(query.location),
                    "email_filter": query.email_filter.value if query.email_filter else None,
                    "limit": limit,
                    "offset": offset,
                },
            )

            plan = self.plan(query)
            logger.debug(
                f"Planned search with {len(plan.tokens)} tokens and "
                f"{len(plan.related_titles)} related titles",
                extra={
                    "event": "search.planned",
                    "tokens": list(plan.tokens),
                    "related_titles": list(plan.related_titles),
                    "filter_terms": len(plan.filter.operands),
                    "score_terms": len(plan.score.terms),
                    "max_score": plan.score.max_score,
                },
            )

            try:
                with self.session_factory() as session:
                    repo = JobPostingRepository(session)
                    total_count, page = repo.search(
                        plan.filter,
                        plan.score,
                        limit=limit,
                        offset=offset,
                        timeout_ms=self.settings.statement_timeout_ms,
                    )
            except Exception as e:
                logger.error(
                    f"Search failed: {e}",
                    extra={
                        "event": "search.failed",
                        "error_type": type(e).__name__,
                        "duration_seconds": round(time.time() - start_time, 4),
                    },
                )
                raise

            result = assemble(total_count, page)
            logger.info(
                f"Search completed: {len(result.items)} of {result.total_count} results",
                extra={
                    "event": "search.completed",
                    "total_count": result.total_count,
                    "returned": len(result.items),
                    "duration_seconds": round(time.time() - start_time, 4),
                },
            )
            return result
