"""Request and result models for the search engine."""

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from jobsearch.domain.models import SUITABILITY_FIELD

DEFAULT_LIMIT = 25
MIN_LIMIT = 1
MAX_LIMIT = 100

# Keys of a flattened result record that document fields cannot override
RESERVED_RECORD_KEYS = (
    "id",
    "posting_id",
    "score",
    "has_contact_email",
    "contact_email",
    "created_at",
)


class EmailFilter(str, Enum):
    """Contact email selector; absence of a filter is expressed as None."""

    REQUIRE_PRESENT = "present"
    REQUIRE_ABSENT = "absent"


class SearchQuery(BaseModel):
    """A single search request after normalization.

    Text and location are stripped (None becomes ""). ``limit`` is clamped to
    [1, 100] and ``offset`` to >= 0 without raising; values that are not
    integers at all are rejected by validation.
    """

    text: str = Field("", description="Free-text query")
    location: str = Field("", description="Location substring filter")
    email_filter: Optional[EmailFilter] = Field(None, description="Contact email selector")
    limit: int = Field(DEFAULT_LIMIT, description="Page size")
    offset: int = Field(0, description="Number of ranked results to skip")

    @field_validator("text", "location", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> str:
        if v is None:
            return ""
        if not isinstance(v, str):
            raise ValueError("must be a string")
        return v.strip()

    @field_validator("email_filter", mode="before")
    @classmethod
    def coerce_email_filter(cls, v: Any) -> Any:
        """Accept booleans and their common string spellings."""
        if isinstance(v, bool):
            return EmailFilter.REQUIRE_PRESENT if v else EmailFilter.REQUIRE_ABSENT
        if isinstance(v, str):
            lowered = v.strip().lower()
            if lowered in ("true", "1", "yes"):
                return EmailFilter.REQUIRE_PRESENT
            if lowered in ("false", "0", "no"):
                return EmailFilter.REQUIRE_ABSENT
            if not lowered:
                return None
            return lowered
        return v

    @field_validator("limit", mode="before")
    @classmethod
    def default_limit(cls, v: Any) -> Any:
        return DEFAULT_LIMIT if v is None else v

    @field_validator("offset", mode="before")
    @classmethod
    def default_offset(cls, v: Any) -> Any:
        return 0 if v is None else v

    @field_validator("limit")
    @classmethod
    def clamp_limit(cls, v: int) -> int:
        return min(max(v, MIN_LIMIT), MAX_LIMIT)

    @field_validator("offset")
    @classmethod
    def clamp_offset(cls, v: int) -> int:
        return max(v, 0)

    @property
    def has_selector(self) -> bool:
        """True when text, location or an email filter is set."""
        return bool(self.text or self.location or self.email_filter is not None)


@dataclass
class SearchResultItem:
    """One ranked posting in a result page."""

    id: str
    posting_id: str
    score: int = 0
    has_contact_email: bool = False
    contact_email: Optional[str] = None
    created_at: Optional[datetime] = None
    fields: Dict[str, Any] = field(default_factory=dict)

    @property
    def suitability_score(self) -> Optional[float]:
        """Numeric suitability score, or None when missing or malformed."""
        return _coerce_number(self.fields.get(SUITABILITY_FIELD))

    def to_record(self) -> Dict[str, Any]:
        """Flatten into a single mapping.

        Reserved keys come first; document fields are merged after them and a
        field whose key collides with a reserved key is dropped.
        """
        record: Dict[str, Any] = {
            "id": self.id,
            "posting_id": self.posting_id,
            "score": self.score,
            "has_contact_email": self.has_contact_email,
            "contact_email": self.contact_email,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
        for key, value in self.fields.items():
            if key not in RESERVED_RECORD_KEYS:
                record[key] = value
        return record


@dataclass
class SearchResult:
    """A ranked page of postings and the total number of matches."""

    total_count: int = 0
    items: List[SearchResultItem] = field(default_factory=list)

    @classmethod
    def empty(cls) -> "SearchResult":
        return cls(total_count=0, items=[])

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_count": self.total_count,
            "items": [item.to_record() for item in self.items],
        }


def _coerce_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None
