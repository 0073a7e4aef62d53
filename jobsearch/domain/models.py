"""Core domain models for job postings.

This module defines the data structures shared by persistence and search:
- JobPosting: a stored job posting document with its contact metadata
- ScoredPosting: a raw store row paired with the score computed for a query
"""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from jobsearch.utils.timestamps import ensure_utc, utc_now

# Keys every ingested posting is expected to carry inside ``fields``
TITLE_FIELD = "job_title"
FUNCTION_FIELD = "job_function"
SUMMARY_FIELD = "job_summary"
LOCATION_FIELD = "job_location"
SUITABILITY_FIELD = "suitability_score"


class JobPosting(BaseModel):
    """A job posting document as held by the document store.

    ``fields`` is the opaque payload produced by ingestion (typically one CSV
    row). Search reads ``job_title``, ``job_function``, ``job_summary`` and
    ``job_location`` from it but tolerates any of them being absent.

    ``has_contact_email`` is derived from ``contact_email``: it can only be
    true when an address is present. The opposite direction is not enforced,
    an address may be kept while the flag is off.
    """

    id: Optional[str] = Field(None, description="Store-assigned surrogate identifier")
    posting_id: str = Field(..., description="External identifier, unique per posting")
    fields: Dict[str, Any] = Field(default_factory=dict, description="Posting payload")
    has_contact_email: bool = Field(False, description="Whether a contact address is usable")
    contact_email: Optional[str] = Field(None, description="Contact address for outreach")
    created_at: Optional[datetime] = Field(
        default_factory=utc_now, description="When first stored (UTC); None if unreadable"
    )
    updated_at: Optional[datetime] = Field(None, description="When last modified (UTC)")

    @field_validator("posting_id")
    @classmethod
    def strip_posting_id(cls, v: str) -> str:
        """Strip whitespace from the external identifier."""
        if not v or not v.strip():
            raise ValueError("posting_id cannot be empty or whitespace-only")
        return v.strip()

    @field_validator("contact_email")
    @classmethod
    def strip_contact_email(cls, v: Optional[str]) -> Optional[str]:
        """Blank addresses are stored as None."""
        if v is None:
            return None
        stripped = v.strip()
        return stripped or None

    @field_validator("created_at", "updated_at")
    @classmethod
    def ensure_timestamps_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        """Ensure datetime is timezone-aware and in UTC."""
        return ensure_utc(v)

    @model_validator(mode="after")
    def check_contact_flag(self):
        """A posting flagged as having a contact email must carry one."""
        if self.has_contact_email and not self.contact_email:
            raise ValueError("has_contact_email is true but contact_email is empty")
        return self

    model_config = {"json_schema_extra": {"example": {
        "posting_id": "JP-000123",
        "fields": {
            "job_title": "Senior Software Engineer",
            "job_function": "Engineering",
            "job_summary": "Build and operate backend services...",
            "job_location": "Seattle, WA",
            "suitability_score": 0.82,
        },
        "has_contact_email": True,
        "contact_email": "jobs@example.com",
        "created_at": "2025-11-01T12:00:00Z",
    }}}


class ScoredPosting(BaseModel):
    """One row of a search page: stored columns exactly as read plus the score.

    Unlike JobPosting this model applies no invariants, so rows written by
    older ingestion runs (for example a true flag with an empty address) are
    reported as stored.
    """

    id: str
    posting_id: str
    fields: Dict[str, Any] = Field(default_factory=dict)
    has_contact_email: Optional[bool] = None
    contact_email: Optional[str] = None
    created_at: Optional[datetime] = None
    score: Optional[int] = None
