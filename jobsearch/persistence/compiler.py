"""Compile search expression trees into SQLAlchemy clauses.

Document fields are read with JSON path access on ``job_postings.data``
(``->>`` on PostgreSQL, ``JSON_EXTRACT`` on SQLite) and matched with a
case-insensitive, wildcard-escaped substring test. Missing fields read as the
empty string, so they match nothing and contribute 0 to the score.

Long operand lists (one per expanded token) are combined in parenthesised
chunks. SQL parsers build ``a + b + c ...`` and ``a OR b OR c ...`` as
left-deep trees, and SQLite rejects expressions deeper than 1000 levels.
"""

import operator
from functools import reduce
from typing import Callable, List, Sequence

from sqlalchemy import Integer, and_, case, false, func, literal, not_, or_, true
from sqlalchemy.sql.elements import ColumnElement

from jobsearch.search.expressions import (
    And,
    ColumnIs,
    ColumnIsBlank,
    ColumnIsNull,
    FieldContains,
    Not,
    Or,
    Predicate,
    ScoreExpr,
)

from .schema import JobPostingModel

# Operands combined at one nesting level
CHUNK_SIZE = 64

_COLUMNS = {
    "has_contact_email": JobPostingModel.has_contact_email,
    "contact_email": JobPostingModel.contact_email,
}


def document_field(name: str) -> ColumnElement:
    """Text value of a key in the posting document ('' when absent)."""
    return func.coalesce(JobPostingModel.data[name].as_string(), "")


def compile_predicate(predicate: Predicate) -> ColumnElement:
    """Translate a predicate tree into a boolean SQL expression.

    Raises:
        TypeError: If the tree contains an unknown node type
    """
    if isinstance(predicate, FieldContains):
        return document_field(predicate.field).icontains(predicate.needle, autoescape=True)
    if isinstance(predicate, ColumnIs):
        return _column(predicate.column).is_(true() if predicate.value else false())
    if isinstance(predicate, ColumnIsNull):
        return _column(predicate.column).is_(None)
    if isinstance(predicate, ColumnIsBlank):
        column = _column(predicate.column)
        return or_(column.is_(None), column == "")
    if isinstance(predicate, Not):
        return not_(compile_predicate(predicate.operand))
    if isinstance(predicate, And):
        if not predicate.operands:
            return true()
        operands = [compile_predicate(operand) for operand in predicate.operands]
        return nested(lambda parts: and_(*parts), operands)
    if isinstance(predicate, Or):
        if not predicate.operands:
            return false()
        operands = [compile_predicate(operand) for operand in predicate.operands]
        return nested(lambda parts: or_(*parts), operands)
    raise TypeError(f"Unsupported predicate node: {type(predicate).__name__}")


def compile_score(score: ScoreExpr) -> ColumnElement:
    """Translate a score expression into one integer SQL expression.

    Each weighted term becomes ``CASE WHEN <predicate> THEN <weight> ELSE 0
    END`` and the terms are added together, so the store computes the score
    in the same pass as the filter.
    """
    if not score.terms:
        return literal(0, Integer)

    parts = [
        case((compile_predicate(term.predicate), literal(term.weight, Integer)), else_=0)
        for term in score.terms
    ]
    return nested(lambda chunk: reduce(operator.add, chunk), parts)


def nested(
    combine: Callable[[Sequence[ColumnElement]], ColumnElement],
    parts: List[ColumnElement],
    chunk_size: int = CHUNK_SIZE,
) -> ColumnElement:
    """Combine parts so that no level holds more than chunk_size operands.

    ``combine`` must be associative (AND, OR, +). Each chunk is wrapped in
    parentheses, which SQLAlchemy would otherwise drop for associative
    operators, so the parsed depth grows with log(len(parts)).
    """
    while len(parts) > chunk_size:
        parts = [
            combine(parts[start:start + chunk_size]).self_group()
            for start in range(0, len(parts), chunk_size)
        ]
    return combine(parts)


def _column(name: str):
    try:
        return _COLUMNS[name]
    except KeyError:
        raise TypeError(f"Unknown column in expression: {name}") from None
