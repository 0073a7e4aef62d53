"""Shape store rows into the external search result."""

from typing import Iterable

from jobsearch.domain.models import ScoredPosting

from .models import SearchResult, SearchResultItem


def assemble(total_count: int, page: Iterable[ScoredPosting]) -> SearchResult:
    """Map a ranked page of store rows to a SearchResult.

    Pure and total: rows keep their order, nothing is filtered, and unset
    values fall back to score 0, no contact flag and no address.

    Args:
        total_count: Exact match count from the store
        page: Ranked rows for the requested window

    Returns:
        SearchResult carrying total_count unchanged
    """
    return SearchResult(
        total_count=total_count,
        items=[to_item(row) for row in page],
    )


def to_item(row: ScoredPosting) -> SearchResultItem:
    return SearchResultItem(
        id=row.id,
        posting_id=row.posting_id,
        score=int(row.score or 0),
        has_contact_email=bool(row.has_contact_email),
        contact_email=row.contact_email,
        created_at=row.created_at,
        fields=dict(row.fields or {}),
    )
