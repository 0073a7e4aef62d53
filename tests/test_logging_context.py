"""Tests for logging context propagation."""

import threading

import pytest

from jobsearch.logging.context import (
    clear_log_context,
    get_log_context,
    log_context,
    pop_log_context,
    push_log_context,
    search_scope,
)


@pytest.fixture(autouse=True)
def clean_context():
    """Clear logging context before and after each test."""
    clear_log_context()
    yield
    clear_log_context()


def test_context_starts_empty():
    assert get_log_context() == {}


def test_push_and_pop_restore_previous_context():
    """Test that each pop restores exactly the context before its push."""
    outer = push_log_context(search_id="s-1")
    inner = push_log_context(posting_id="JP-1", search_id="s-2")

    assert get_log_context() == {"search_id": "s-2", "posting_id": "JP-1"}

    pop_log_context(inner)
    assert get_log_context() == {"search_id": "s-1"}

    pop_log_context(outer)
    assert get_log_context() == {}


def test_context_manager_nested():
    with log_context(search_id="s-1"):
        with log_context(page=2):
            assert get_log_context() == {"search_id": "s-1", "page": 2}

        assert get_log_context() == {"search_id": "s-1"}

    assert get_log_context() == {}


def test_context_manager_restores_on_exception():
    """Test that context is restored when the scoped block raises."""
    with pytest.raises(RuntimeError):
        with log_context(search_id="s-1"):
            raise RuntimeError("store down")

    assert get_log_context() == {}


def test_get_log_context_returns_copy():
    token = push_log_context(search_id="s-1")

    context = get_log_context()
    context["posting_id"] = "modified"

    assert get_log_context() == {"search_id": "s-1"}
    pop_log_context(token)


def test_clear_context():
    push_log_context(search_id="s-1", page=1)

    clear_log_context()

    assert get_log_context() == {}


def test_threads_do_not_share_context():
    """Test that concurrent searches on different threads keep separate fields."""
    seen = {}
    barrier = threading.Barrier(2)

    def worker(name):
        with log_context(search_id=name):
            barrier.wait()
            seen[name] = get_log_context()["search_id"]

    threads = [threading.Thread(target=worker, args=(name,)) for name in ("a", "b")]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert seen == {"a": "a", "b": "b"}
    assert get_log_context() == {}


def test_search_scope_generates_id():
    with search_scope() as search_id:
        assert get_log_context() == {"search_id": search_id}
        assert len(search_id) == 32

    assert get_log_context() == {}


def test_search_scope_keeps_supplied_id():
    with log_context(environment="test"):
        with search_scope("req-42") as search_id:
            assert search_id == "req-42"
            assert get_log_context() == {"environment": "test", "search_id": "req-42"}
