"""Database schema definition and ORM models.

This module defines the SQLAlchemy ORM model for stored job postings and the
conversions between ORM rows and domain models.
"""

import logging
from typing import Optional
from uuid import uuid4

from sqlalchemy import JSON, Boolean, Column, Index, String, inspect
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base

from jobsearch.domain.models import JobPosting, ScoredPosting
from jobsearch.utils.timestamps import format_timestamp, parse_timestamp, utc_now

logger = logging.getLogger(__name__)

Base = declarative_base()

# JSONB on PostgreSQL, JSON text elsewhere
DocumentType = JSON().with_variant(JSONB(), "postgresql")


def _new_id() -> str:
    return str(uuid4())


class JobPostingModel(Base):
    """ORM model for the job_postings table.

    ``data`` holds the posting payload as a JSON document; search addresses
    its keys with JSON path access. Timestamps are fixed-width ISO 8601
    strings so ordering on them is chronological.
    """

    __tablename__ = "job_postings"

    id = Column(String(36), primary_key=True, default=_new_id)
    posting_id = Column(String(255), nullable=False, unique=True)
    data = Column(DocumentType, nullable=False, default=dict)

    # Contact metadata (nullable: legacy rows may not carry the flag)
    has_contact_email = Column(Boolean, nullable=True)
    contact_email = Column(String(320), nullable=True)

    created_at = Column(String(50), nullable=False)
    updated_at = Column(String(50), nullable=False)

    __table_args__ = (
        Index("idx_job_postings_created_at", "created_at"),
        Index("idx_job_postings_contact", "has_contact_email"),
    )

    def to_domain(self) -> JobPosting:
        """Convert ORM model to domain model.

        A stored flag without an address is reported as no contact email,
        since the domain model does not allow that combination.
        """
        return JobPosting(
            id=self.id,
            posting_id=self.posting_id,
            fields=dict(self.data or {}),
            has_contact_email=bool(self.has_contact_email) and bool(
                self.contact_email and self.contact_email.strip()
            ),
            contact_email=self.contact_email,
            created_at=parse_timestamp(self.created_at),
            updated_at=parse_timestamp(self.updated_at),
        )

    def to_scored(self, score: Optional[int]) -> ScoredPosting:
        """Convert to a search row, keeping stored values as they are."""
        return ScoredPosting(
            id=self.id,
            posting_id=self.posting_id,
            fields=self.data if isinstance(self.data, dict) else {},
            has_contact_email=self.has_contact_email,
            contact_email=self.contact_email,
            created_at=parse_timestamp(self.created_at),
            score=score,
        )

    @classmethod
    def from_domain(cls, posting: JobPosting) -> "JobPostingModel":
        """Create ORM model from domain model."""
        created_at = posting.created_at or utc_now()
        return cls(
            id=posting.id or _new_id(),
            posting_id=posting.posting_id,
            data=dict(posting.fields),
            has_contact_email=posting.has_contact_email,
            contact_email=posting.contact_email,
            created_at=format_timestamp(created_at),
            updated_at=format_timestamp(posting.updated_at or created_at),
        )


def create_schema(engine: Engine) -> None:
    """Create all tables and indexes if they don't exist (idempotent).

    Args:
        engine: SQLAlchemy engine instance
    """
    logger.info("Creating database schema if not exists")

    try:
        Base.metadata.create_all(engine, checkfirst=True)
        tables = inspect(engine).get_table_names()
        logger.info(f"Database schema ready. Tables: {', '.join(tables)}")
    except Exception as e:
        logger.error(f"Failed to create database schema: {e}", exc_info=True)
        raise
