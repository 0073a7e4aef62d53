"""Unit tests for domain models."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from jobsearch.domain.models import JobPosting, ScoredPosting


class TestJobPosting:
    """Tests for JobPosting model."""

    def test_valid_posting(self):
        """Test creating a valid JobPosting."""
        posting = JobPosting(
            posting_id="JP-000123",
            fields={"job_title": "Senior Software Engineer", "job_location": "Seattle, WA"},
            has_contact_email=True,
            contact_email="jobs@acme.example",
            created_at=datetime(2025, 11, 1, 12, 0, 0, tzinfo=timezone.utc),
        )

        assert posting.posting_id == "JP-000123"
        assert posting.fields["job_title"] == "Senior Software Engineer"
        assert posting.has_contact_email is True
        assert posting.contact_email == "jobs@acme.example"

    def test_posting_id_is_stripped(self):
        """Test that whitespace around the external id is removed."""
        posting = JobPosting(posting_id="  JP-1  ")

        assert posting.posting_id == "JP-1"

    def test_empty_posting_id_rejected(self):
        """Test that a whitespace-only posting_id is rejected."""
        with pytest.raises(ValidationError, match="posting_id cannot be empty"):
            JobPosting(posting_id="   ")

    def test_flag_without_address_rejected(self):
        """Test that the contact flag requires a non-blank address."""
        with pytest.raises(ValidationError, match="has_contact_email is true"):
            JobPosting(posting_id="JP-1", has_contact_email=True, contact_email="  ")

    def test_address_without_flag_allowed(self):
        """Test that an address may be kept while the flag is off."""
        posting = JobPosting(posting_id="JP-1", has_contact_email=False, contact_email="a@b.example")

        assert posting.has_contact_email is False
        assert posting.contact_email == "a@b.example"

    def test_blank_address_becomes_none(self):
        posting = JobPosting(posting_id="JP-1", contact_email="   ")

        assert posting.contact_email is None

    def test_naive_created_at_treated_as_utc(self):
        """Test that naive datetimes are converted to UTC."""
        posting = JobPosting(posting_id="JP-1", created_at=datetime(2025, 11, 1, 12, 0, 0))

        assert posting.created_at.tzinfo == timezone.utc

    def test_created_at_defaults_to_now(self):
        posting = JobPosting(posting_id="JP-1")

        assert posting.created_at.tzinfo == timezone.utc
        assert posting.updated_at is None


class TestScoredPosting:
    """Tests for ScoredPosting model."""

    def test_keeps_inconsistent_contact_values(self):
        """Test that stored values are reported without validation."""
        row = ScoredPosting(
            id="row-1",
            posting_id="JP-1",
            has_contact_email=True,
            contact_email="",
            score=3,
        )

        assert row.has_contact_email is True
        assert row.contact_email == ""

    def test_defaults(self):
        row = ScoredPosting(id="row-1", posting_id="JP-1")

        assert row.fields == {}
        assert row.has_contact_email is None
        assert row.score is None
