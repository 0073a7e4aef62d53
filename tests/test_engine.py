"""Tests for the search engine against an in-memory store."""

from contextlib import contextmanager
from unittest.mock import MagicMock, patch

import pytest

from jobsearch.config.models import SearchSettings
from jobsearch.persistence import StoreUnavailableError, close_database, init_database
from jobsearch.search.engine import JobSearchEngine
from jobsearch.search.expressions import matches
from jobsearch.search.models import SearchQuery
from jobsearch.search.tokens import SynonymTable
from jobsearch.search.vocabulary import Vocabulary
from tests.helpers import (
    BASE_TIME,
    create_test_posting,
    load_fixture_postings,
    seed_postings,
    seed_raw_row,
)


def search(engine, **params):
    return engine.search(SearchQuery(**params))


class TestSearchExamples:
    """End-to-end searches over the fixture corpus."""

    @pytest.fixture(autouse=True)
    def setup_database(self):
        """Seed the fixture corpus into a fresh database."""
        init_database("sqlite:///:memory:")
        seed_postings(load_fixture_postings())
        yield
        close_database()

    @pytest.fixture
    def engine(self):
        return JobSearchEngine()

    def test_software_engineer_query(self, engine):
        """Test that related titles rank and unrelated titles are excluded."""
        result = search(engine, text="software engineer")
        titles = [item.fields["job_title"] for item in result.items]

        assert titles[0] == "Senior Software Engineer"
        assert "Registered Nurse" not in titles
        assert result.items[0].score == 15
        assert all(item.score > 0 for item in result.items)

    def test_summary_mention_does_not_admit(self, engine):
        """Test that the analyst posting mentioning 'software' only in its summary is excluded."""
        result = search(engine, text="software engineer")

        assert "JP-003" not in [item.posting_id for item in result.items]
        assert result.total_count == 2

    def test_location_query(self, engine):
        """Test that a location-only search returns the matching posting with the phrase weight."""
        result = search(engine, location="Seattle")

        assert result.total_count == 1
        assert result.items[0].posting_id == "JP-001"
        assert result.items[0].score == 6

    def test_location_is_case_insensitive(self, engine):
        result = search(engine, location="SEATTLE")

        assert [item.posting_id for item in result.items] == ["JP-001"]

    def test_require_present_excludes_flag_with_blank_address(self, engine):
        """Test that a legacy row flagged true with an empty address is not 'present'."""
        seed_raw_row("JP-LEGACY", {"job_title": "Barista"}, True, "")

        result = search(engine, email_filter="present")
        ids = [item.posting_id for item in result.items]

        assert "JP-LEGACY" not in ids
        assert sorted(ids) == ["JP-001", "JP-004"]

    def test_require_absent_includes_flag_with_blank_address(self, engine):
        seed_raw_row("JP-LEGACY", {"job_title": "Barista"}, True, "")

        result = search(engine, email_filter="absent")
        ids = [item.posting_id for item in result.items]

        assert "JP-LEGACY" in ids
        assert "JP-001" not in ids
        assert result.total_count == 4

    def test_email_filters_partition_corpus(self, engine):
        seed_raw_row("JP-NULL", {"job_title": "Barista"}, None, None)
        everything = search(engine, email_filter="present").total_count + search(
            engine, email_filter="absent"
        ).total_count

        assert everything == 6

    def test_email_only_query_orders_by_recency(self, engine):
        """Test that with no text every score is 0 and newer postings come first."""
        result = search(engine, email_filter="present")

        assert [item.posting_id for item in result.items] == ["JP-004", "JP-001"]
        assert all(item.score == 0 for item in result.items)

    def test_combined_selectors(self, engine):
        result = search(engine, text="engineer", location="Austin", email_filter="present")

        assert [item.posting_id for item in result.items] == ["JP-004"]

    def test_no_match_is_empty_not_error(self, engine):
        result = search(engine, text="astronaut")

        assert result.total_count == 0
        assert result.items == []

    def test_result_carries_contact_metadata(self, engine):
        result = search(engine, location="Seattle")
        record = result.items[0].to_record()

        assert record["has_contact_email"] is True
        assert record["contact_email"] == "jobs@acme.example"
        assert record["company_name"] == "Acme"
        assert result.items[0].suitability_score == 0.82

    def test_malformed_suitability_score_does_not_abort(self, engine):
        result = search(engine, text="cook")

        assert result.items[0].posting_id == "JP-005"
        assert result.items[0].suitability_score is None


class TestPagination:
    """Tests for limit, offset and total_count behaviour."""

    @pytest.fixture(autouse=True)
    def setup_database(self):
        init_database("sqlite:///:memory:")
        yield
        close_database()

    @pytest.fixture
    def engine(self):
        return JobSearchEngine()

    def test_tied_scores_ordered_by_posting_id(self, engine):
        """Test that limit=1, offset=1 over three tied postings returns the second id."""
        seed_postings(
            [
                create_test_posting(posting_id=pid, title="Barista", summary="Coffee bar")
                for pid in ("T-003", "T-001", "T-002")
            ]
        )

        result = search(engine, text="barista", limit=1, offset=1)

        assert result.total_count == 3
        assert [item.posting_id for item in result.items] == ["T-002"]

    def test_pages_cover_all_results_without_duplicates(self, engine):
        seed_postings(
            [
                create_test_posting(
                    posting_id=f"B-{i:02d}",
                    title="Barista" if i % 2 else "Head Barista",
                    summary="Espresso and coffee" if i % 3 == 0 else "Front of house",
                )
                for i in range(11)
            ]
        )

        seen = []
        offset = 0
        while True:
            result = search(engine, text="barista", limit=4, offset=offset)
            if not result.items:
                break
            seen.extend(item.posting_id for item in result.items)
            offset += 4

        assert len(seen) == 11
        assert len(set(seen)) == 11

    def test_pages_are_in_descending_score_order(self, engine):
        seed_postings(
            [
                create_test_posting(posting_id="B-1", title="Barista", summary="Front of house"),
                create_test_posting(posting_id="B-2", title="Barista", summary="Coffee bar"),
            ]
        )

        result = search(engine, text="barista")

        assert [item.posting_id for item in result.items] == ["B-2", "B-1"]
        assert result.items[0].score > result.items[1].score

    @pytest.mark.parametrize("limit,offset", [(1, 0), (2, 1), (100, 0), (5, 10)])
    def test_total_count_independent_of_window(self, engine, limit, offset):
        seed_postings([create_test_posting(posting_id=f"B-{i}", title="Barista") for i in range(5)])

        result = search(engine, text="barista", limit=limit, offset=offset)

        assert result.total_count == 5

    def test_repeated_search_is_idempotent(self, engine):
        seed_postings(load_fixture_postings())

        first = search(engine, text="software engineer")
        second = search(engine, text="software engineer")

        assert first == second

    def test_settings_max_limit_caps_page(self):
        seed_postings([create_test_posting(posting_id=f"B-{i}", title="Barista") for i in range(5)])
        engine = JobSearchEngine(settings=SearchSettings(default_limit=2, max_limit=3))

        result = search(engine, text="barista", limit=50)

        assert len(result.items) == 3
        assert result.total_count == 5


class TestTitleGate:
    """Property checks for the mandatory title gate."""

    @pytest.fixture(autouse=True)
    def setup_database(self):
        init_database("sqlite:///:memory:")
        seed_postings(load_fixture_postings())
        yield
        close_database()

    @pytest.mark.parametrize(
        "text", ["software engineer", "nurse", "data", "cook", "developer", "python"]
    )
    def test_every_result_title_matches_a_needle(self, text):
        engine = JobSearchEngine()
        plan = engine.plan(SearchQuery(text=text))
        needles = [node.needle.lower() for node in plan.filter.operands[0].operands]

        result = search(engine, text=text)

        for item in result.items:
            title = item.fields["job_title"].lower()
            assert any(needle in title for needle in needles)

    def test_custom_vocabulary_used(self):
        """Test that configured synonyms feed the title gate."""
        vocabulary = Vocabulary(synonyms=SynonymTable({"kitchen": ["cook"]}))
        engine = JobSearchEngine(vocabulary=vocabulary)

        result = search(engine, text="kitchen")

        assert [item.posting_id for item in result.items] == ["JP-005"]


class TestShortCircuitAndFailures:
    """Tests for requests that never reach, or fail in, the store."""

    def test_empty_query_does_not_touch_store(self):
        session_factory = MagicMock()
        engine = JobSearchEngine(session_factory=session_factory)

        result = search(engine, text="  ", location="")

        assert result.total_count == 0
        assert result.items == []
        session_factory.assert_not_called()

    def test_store_unavailable_propagates(self):
        @contextmanager
        def session_factory():
            yield MagicMock()

        engine = JobSearchEngine(session_factory=session_factory)

        with patch(
            "jobsearch.search.engine.JobPostingRepository.search",
            side_effect=StoreUnavailableError("statement timeout"),
        ) as mocked:
            with pytest.raises(StoreUnavailableError):
                search(engine, text="nurse")

        assert mocked.call_count == 1

    def test_timeout_setting_passed_to_store(self):
        @contextmanager
        def session_factory():
            yield MagicMock()

        engine = JobSearchEngine(
            settings=SearchSettings(statement_timeout_ms=1500), session_factory=session_factory
        )

        with patch(
            "jobsearch.search.engine.JobPostingRepository.search", return_value=(0, [])
        ) as mocked:
            search(engine, location="Seattle")

        assert mocked.call_args.kwargs["timeout_ms"] == 1500


class TestStoredDataTolerance:
    """Tests for rows written by other tools and for unusual queries."""

    @pytest.fixture(autouse=True)
    def setup_database(self):
        init_database("sqlite:///:memory:")
        seed_postings(load_fixture_postings())
        yield
        close_database()

    def test_offset_timestamp_is_read(self):
        """Test that a created_at with a +00:00 offset does not break the page."""
        seed_raw_row(
            "JP-EXT",
            {"job_title": "Software Tester"},
            False,
            None,
            created_at="2025-11-01T09:00:00+00:00",
        )

        result = search(JobSearchEngine(), text="software")
        by_id = {item.posting_id: item for item in result.items}

        assert "JP-EXT" in by_id
        assert by_id["JP-EXT"].created_at == BASE_TIME

    def test_unreadable_timestamp_does_not_abort_search(self):
        seed_raw_row("JP-BAD", {"job_title": "Software Tester"}, False, None, created_at="last tuesday")

        result = search(JobSearchEngine(), text="software")
        by_id = {item.posting_id: item for item in result.items}

        assert by_id["JP-BAD"].created_at is None
        assert "JP-001" in by_id

    def test_non_ascii_location_is_case_insensitive(self):
        """Test that case folding covers non-ASCII letters in the store."""
        seed_postings([create_test_posting(posting_id="JP-ZRH", location="ZÜRICH")])
        engine = JobSearchEngine()
        query = SearchQuery(location="zürich")

        result = engine.search(query)

        assert [item.posting_id for item in result.items] == ["JP-ZRH"]
        assert matches(engine.plan(query).filter, {"job_location": "ZÜRICH"}, {})

    def test_very_long_query(self):
        """Test that hundreds of query words still compile into one statement."""
        text = "software " + " ".join(f"w{i}" for i in range(300))

        result = search(JobSearchEngine(), text=text)

        assert sorted(item.posting_id for item in result.items) == ["JP-001", "JP-004"]
        assert result.total_count == 2
