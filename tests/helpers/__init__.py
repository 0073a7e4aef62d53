"""Test helper utilities for job search tests."""

from .postings import (
    BASE_TIME,
    create_test_posting,
    load_fixture_postings,
    seed_postings,
    seed_raw_row,
)

__all__ = [
    "BASE_TIME",
    "create_test_posting",
    "load_fixture_postings",
    "seed_postings",
    "seed_raw_row",
]
