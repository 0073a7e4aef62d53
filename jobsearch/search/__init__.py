"""Ranked job posting search.

This package provides:
- Query tokenization, synonym expansion and related-title lookup
- The planner that turns a request into filter and score expressions
- Request and result models, and the assembler between store rows and results

The store-backed ``JobSearchEngine`` and ``JobSearchService`` live in
``jobsearch.search.engine`` and ``jobsearch.search.service``.
"""

from .exceptions import InvalidSearchError, SearchError
from .models import EmailFilter, SearchQuery, SearchResult, SearchResultItem
from .planner import QueryPlan, plan_search
from .titles import DEFAULT_TITLE_CATALOGUE, TitleCatalogue
from .tokens import DEFAULT_SYNONYM_TABLE, SynonymTable, expand, tokenize
from .vocabulary import Vocabulary, build_vocabulary

__all__ = [
    "EmailFilter",
    "SearchQuery",
    "SearchResult",
    "SearchResultItem",
    "QueryPlan",
    "plan_search",
    "SynonymTable",
    "TitleCatalogue",
    "DEFAULT_SYNONYM_TABLE",
    "DEFAULT_TITLE_CATALOGUE",
    "expand",
    "tokenize",
    "Vocabulary",
    "build_vocabulary",
    "SearchError",
    "InvalidSearchError",
]
