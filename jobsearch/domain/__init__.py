"""Domain models for the job search service."""

from .models import JobPosting, ScoredPosting

__all__ = ["JobPosting", "ScoredPosting"]
