"""Query planner: turns a search request into a filter and a score expression.

Admission and ranking are built separately:

- ``build_filter`` decides which postings appear at all. When query text is
  given, the title gate is mandatory: the title must contain the raw text, a
  related canonical title, or an expanded token. A token that only appears in
  the summary or function never admits a posting on its own.
- ``build_score`` ranks admitted postings. It never removes anything, so a
  posting that only passes the filter still appears with score 0.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from jobsearch.domain.models import (
    FUNCTION_FIELD,
    LOCATION_FIELD,
    SUMMARY_FIELD,
    TITLE_FIELD,
)

from .expressions import (
    CONTACT_EMAIL_COLUMN,
    CONTACT_FLAG_COLUMN,
    And,
    ColumnIs,
    ColumnIsBlank,
    ColumnIsNull,
    FieldContains,
    Not,
    Or,
    Predicate,
    ScoreExpr,
    WeightedTerm,
    all_of,
    any_of,
)
from .models import EmailFilter, SearchQuery

# Score weights
TITLE_PHRASE_WEIGHT = 5
TOKEN_TITLE_WEIGHT = 3
TOKEN_LOCATION_WEIGHT = 4
TOKEN_FUNCTION_WEIGHT = 2
TOKEN_SUMMARY_WEIGHT = 1
LOCATION_PHRASE_WEIGHT = 6

# Per-token terms in emission order
TOKEN_WEIGHTS: Tuple[Tuple[str, int], ...] = (
    (TITLE_FIELD, TOKEN_TITLE_WEIGHT),
    (FUNCTION_FIELD, TOKEN_FUNCTION_WEIGHT),
    (SUMMARY_FIELD, TOKEN_SUMMARY_WEIGHT),
    (LOCATION_FIELD, TOKEN_LOCATION_WEIGHT),
)


@dataclass(frozen=True)
class QueryPlan:
    """Everything the store needs to run one search."""

    filter: And
    score: ScoreExpr
    tokens: Tuple[str, ...]
    related_titles: Tuple[str, ...]


def plan_search(
    query: SearchQuery,
    tokens: Sequence[str],
    related_titles: Sequence[str],
) -> QueryPlan:
    """Build the filter and score for a search request.

    Args:
        query: Normalized search request with at least one selector set
        tokens: Expanded query tokens in stable order
        related_titles: Canonical titles related to the query text

    Returns:
        QueryPlan with filter predicate and score expression
    """
    return QueryPlan(
        filter=build_filter(query, tokens, related_titles),
        score=build_score(query, tokens),
        tokens=tuple(tokens),
        related_titles=tuple(related_titles),
    )


def build_filter(
    query: SearchQuery,
    tokens: Sequence[str],
    related_titles: Sequence[str],
) -> And:
    """Build the admission predicate.

    The result is a conjunction of up to three independent parts: the title
    gate (when text is set), the location match (when location is set) and the
    contact email condition (when an email filter is set).
    """
    title_gate = None
    if query.text:
        title_gate = any_of(
            *(
                FieldContains(TITLE_FIELD, needle)
                for needle in _title_needles(query.text, related_titles, tokens)
            )
        )

    location_match = None
    if query.location:
        location_match = FieldContains(LOCATION_FIELD, query.location)

    return all_of(title_gate, location_match, email_condition(query.email_filter))


def email_condition(email_filter: Optional[EmailFilter]) -> Optional[Predicate]:
    """Predicate for the contact email filter, or None when unset.

    require-present: flag is true and the address is non-blank.
    require-absent: flag is false or unset, or the address is blank.
    """
    if email_filter is EmailFilter.REQUIRE_PRESENT:
        return And(
            (
                ColumnIs(CONTACT_FLAG_COLUMN, True),
                Not(ColumnIsBlank(CONTACT_EMAIL_COLUMN)),
            )
        )
    if email_filter is EmailFilter.REQUIRE_ABSENT:
        return Or(
            (
                ColumnIs(CONTACT_FLAG_COLUMN, False),
                ColumnIsNull(CONTACT_FLAG_COLUMN),
                ColumnIsBlank(CONTACT_EMAIL_COLUMN),
            )
        )
    return None


def build_score(query: SearchQuery, tokens: Sequence[str]) -> ScoreExpr:
    """Build the ranking expression.

    Weights: raw text in title 5; per token title 3, function 2, summary 1,
    location 4; raw location in location 6. Every term is evaluated
    independently and summed.
    """
    terms: List[WeightedTerm] = []

    if query.text:
        terms.append(WeightedTerm(FieldContains(TITLE_FIELD, query.text), TITLE_PHRASE_WEIGHT))

    for token in tokens:
        for field_name, weight in TOKEN_WEIGHTS:
            terms.append(WeightedTerm(FieldContains(field_name, token), weight))

    if query.location:
        terms.append(
            WeightedTerm(FieldContains(LOCATION_FIELD, query.location), LOCATION_PHRASE_WEIGHT)
        )

    return ScoreExpr(tuple(terms))


def _title_needles(
    text: str,
    related_titles: Iterable[str],
    tokens: Iterable[str],
) -> Tuple[str, ...]:
    """Substrings any of which admits a title, deduplicated case-insensitively."""
    needles = {}
    for needle in (text, *related_titles, *tokens):
        needles.setdefault(needle.lower(), needle)
    return tuple(needles.values())
