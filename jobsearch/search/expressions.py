"""Backend-neutral expression tree for search filters and scores.

The planner describes *what* a search admits and how it ranks with these
nodes; a store backend compiles them into its own query language (see
``jobsearch.persistence.compiler``). ``matches`` and ``evaluate_score`` give
the reference semantics in plain Python, which the SQL compilation must agree
with.

Two kinds of leaves exist:
- document field leaves (``FieldContains``) address keys inside the posting's
  ``fields`` payload
- column leaves (``ColumnIs``, ``ColumnIsNull``, ``ColumnIsBlank``) address
  the stored contact metadata columns
"""

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple, Union

CONTACT_FLAG_COLUMN = "has_contact_email"
CONTACT_EMAIL_COLUMN = "contact_email"
COLUMNS = (CONTACT_FLAG_COLUMN, CONTACT_EMAIL_COLUMN)


@dataclass(frozen=True)
class FieldContains:
    """Case-insensitive substring test on a document field."""

    field: str
    needle: str


@dataclass(frozen=True)
class ColumnIs:
    """``column IS <value>`` for a boolean column; NULL never matches."""

    column: str
    value: bool


@dataclass(frozen=True)
class ColumnIsNull:
    column: str


@dataclass(frozen=True)
class ColumnIsBlank:
    """Column is NULL or the empty string."""

    column: str


@dataclass(frozen=True)
class Not:
    operand: "Predicate"


@dataclass(frozen=True)
class And:
    """Conjunction; an empty conjunction is true."""

    operands: Tuple["Predicate", ...]


@dataclass(frozen=True)
class Or:
    """Disjunction; an empty disjunction is false."""

    operands: Tuple["Predicate", ...]


Predicate = Union[FieldContains, ColumnIs, ColumnIsNull, ColumnIsBlank, Not, And, Or]


@dataclass(frozen=True)
class WeightedTerm:
    """Adds ``weight`` to the score when ``predicate`` holds."""

    predicate: Predicate
    weight: int


@dataclass(frozen=True)
class ScoreExpr:
    """Sum of weighted terms; with no terms every document scores 0."""

    terms: Tuple[WeightedTerm, ...] = ()

    @property
    def max_score(self) -> int:
        return sum(term.weight for term in self.terms)


def all_of(*predicates: Optional[Predicate]) -> And:
    """Build a conjunction, dropping None operands and flattening nested Ands."""
    operands = []
    for predicate in predicates:
        if predicate is None:
            continue
        if isinstance(predicate, And):
            operands.extend(predicate.operands)
        else:
            operands.append(predicate)
    return And(tuple(operands))


def any_of(*predicates: Predicate) -> Or:
    """Build a disjunction, flattening nested Ors."""
    operands = []
    for predicate in predicates:
        if isinstance(predicate, Or):
            operands.extend(predicate.operands)
        else:
            operands.append(predicate)
    return Or(tuple(operands))


def matches(predicate: Predicate, fields: Mapping[str, Any], columns: Mapping[str, Any]) -> bool:
    """Evaluate a predicate against one document in memory.

    A missing or null document field never contains anything. Non-string field
    values are compared through their string form, as the store does.

    Args:
        predicate: Predicate tree to evaluate
        fields: The document's ``fields`` payload
        columns: Stored column values keyed by column name

    Returns:
        True if the document satisfies the predicate
    """
    if isinstance(predicate, FieldContains):
        value = fields.get(predicate.field)
        if value is None:
            return False
        return predicate.needle.lower() in _as_text(value).lower()
    if isinstance(predicate, ColumnIs):
        value = columns.get(predicate.column)
        return value is not None and bool(value) is predicate.value
    if isinstance(predicate, ColumnIsNull):
        return columns.get(predicate.column) is None
    if isinstance(predicate, ColumnIsBlank):
        value = columns.get(predicate.column)
        return value is None or value == ""
    if isinstance(predicate, Not):
        return not matches(predicate.operand, fields, columns)
    if isinstance(predicate, And):
        return all(matches(operand, fields, columns) for operand in predicate.operands)
    if isinstance(predicate, Or):
        return any(matches(operand, fields, columns) for operand in predicate.operands)
    raise TypeError(f"Unsupported predicate node: {type(predicate).__name__}")


def evaluate_score(score: ScoreExpr, fields: Mapping[str, Any], columns: Mapping[str, Any]) -> int:
    """Evaluate a score expression against one document in memory."""
    return sum(
        term.weight for term in score.terms if matches(term.predicate, fields, columns)
    )


def _as_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
