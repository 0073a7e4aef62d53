"""Data access layer for job postings.

JobPostingRepository serves two callers:
- the ingestion boundary (insert-if-absent, contact updates, lookups)
- the search engine (count and ranked page for a compiled plan)

Repositories return domain models rather than ORM models.
"""

import logging
import time
from contextlib import contextmanager
from typing import Iterable, List, NamedTuple, Optional, Tuple

from sqlalchemy import func, select, text
from sqlalchemy.exc import (
    DBAPIError,
    DisconnectionError,
    IntegrityError,
    SQLAlchemyError,
)
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session

from jobsearch.domain.models import JobPosting, ScoredPosting
from jobsearch.search.expressions import Predicate, ScoreExpr
from jobsearch.utils.timestamps import format_timestamp, utc_now

from .compiler import compile_predicate, compile_score
from .exceptions import (
    DataIntegrityError,
    PersistenceError,
    RecordNotFoundError,
    StoreUnavailableError,
)
from .schema import JobPostingModel

logger = logging.getLogger(__name__)

# VM instructions between SQLite deadline checks
SQLITE_PROGRESS_STEPS = 10_000

# query_canceled, lock_not_available, serialization_failure, deadlock_detected,
# admin_shutdown, crash_shutdown, cannot_connect_now
TRANSIENT_SQLSTATES = {"57014", "55P03", "40001", "40P01", "57P01", "57P02", "57P03"}

# SQLite and driver messages carry no SQLSTATE
TRANSIENT_MESSAGES = (
    "database is locked",
    "database table is locked",
    "interrupted",
    "timeout",
    "timed out",
    "could not connect",
    "connection refused",
    "server closed the connection",
)


class InsertResult(NamedTuple):
    """Outcome of an insert-if-absent batch."""

    inserted: int
    skipped: int


class JobPostingRepository:
    """Repository for job posting storage and search execution."""

    def __init__(self, session: Session):
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy session for database operations
        """
        self.session = session

    def get_by_posting_id(self, posting_id: str) -> Optional[JobPosting]:
        """Retrieve a posting by its external identifier.

        Returns:
            JobPosting if found, None otherwise

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            stmt = select(JobPostingModel).where(JobPostingModel.posting_id == posting_id)
            model = self.session.execute(stmt).scalar_one_or_none()
            return model.to_domain() if model is not None else None
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving posting {posting_id}: {e}", exc_info=True)
            raise _translate(e, "Failed to retrieve posting") from e

    def get_by_posting_ids(self, posting_ids: Iterable[str]) -> List[JobPosting]:
        """Retrieve every posting whose external identifier is listed.

        Unknown identifiers are ignored.

        Returns:
            Matching postings ordered by posting_id

        Raises:
            PersistenceError: If database error occurs
        """
        ids = sorted(set(posting_ids))
        if not ids:
            return []

        try:
            stmt = (
                select(JobPostingModel)
                .where(JobPostingModel.posting_id.in_(ids))
                .order_by(JobPostingModel.posting_id.asc())
            )
            return [model.to_domain() for model in self.session.execute(stmt).scalars()]
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving {len(ids)} postings: {e}", exc_info=True)
            raise _translate(e, "Failed to retrieve postings") from e

    def insert_if_absent(self, postings: Iterable[JobPosting]) -> InsertResult:
        """Insert postings whose posting_id is not stored yet.

        Existing postings are left untouched. Within one batch the first
        occurrence of a posting_id wins and later ones count as skipped.

        Args:
            postings: Postings to store

        Returns:
            InsertResult with inserted and skipped counts

        Raises:
            DataIntegrityError: If a concurrent writer inserted the same posting_id
            PersistenceError: If database error occurs
        """
        batch: List[JobPosting] = []
        seen = set()
        duplicates = 0
        for posting in postings:
            if posting.posting_id in seen:
                duplicates += 1
                continue
            seen.add(posting.posting_id)
            batch.append(posting)

        if not batch:
            return InsertResult(inserted=0, skipped=duplicates)

        try:
            existing = set(
                self.session.execute(
                    select(JobPostingModel.posting_id).where(
                        JobPostingModel.posting_id.in_(seen)
                    )
                ).scalars()
            )
            new_models = [
                JobPostingModel.from_domain(posting)
                for posting in batch
                if posting.posting_id not in existing
            ]
            self.session.add_all(new_models)
            self.session.flush()

            result = InsertResult(
                inserted=len(new_models),
                skipped=duplicates + len(batch) - len(new_models),
            )
            logger.info(
                f"Inserted {result.inserted} postings, skipped {result.skipped}",
                extra={
                    "event": "postings.inserted",
                    "inserted": result.inserted,
                    "skipped": result.skipped,
                },
            )
            return result

        except IntegrityError as e:
            logger.error(f"Integrity error inserting postings: {e}", exc_info=True)
            raise DataIntegrityError(
                f"Failed to insert postings due to constraint violation: {e}"
            ) from e
        except SQLAlchemyError as e:
            logger.error(f"Error inserting postings: {e}", exc_info=True)
            raise _translate(e, "Failed to insert postings") from e

    def update_contact(self, posting_id: str, contact_email: Optional[str]) -> JobPosting:
        """Set or clear the contact address of a posting.

        The flag follows the address: a non-blank address sets it, a blank or
        None address clears both.

        Raises:
            RecordNotFoundError: If posting_id doesn't exist
            PersistenceError: If database error occurs
        """
        address = contact_email.strip() if contact_email else None

        try:
            model = self.session.execute(
                select(JobPostingModel).where(JobPostingModel.posting_id == posting_id)
            ).scalar_one_or_none()

            if model is None:
                raise RecordNotFoundError(f"Posting with id {posting_id} not found")

            model.contact_email = address or None
            model.has_contact_email = bool(address)
            model.updated_at = format_timestamp(utc_now())
            self.session.flush()
            return model.to_domain()

        except RecordNotFoundError:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Error updating contact for posting {posting_id}: {e}", exc_info=True)
            raise _translate(e, "Failed to update contact") from e

    def count_matching(self, predicate: Predicate) -> int:
        """Count postings satisfying a filter, ignoring any paging.

        Raises:
            StoreUnavailableError: On timeout or connection loss
            PersistenceError: If another database error occurs
        """
        try:
            stmt = (
                select(func.count())
                .select_from(JobPostingModel)
                .where(compile_predicate(predicate))
            )
            return int(self.session.execute(stmt).scalar_one())
        except SQLAlchemyError as e:
            logger.error(f"Error counting postings: {e}", exc_info=True)
            raise _translate(e, "Failed to count postings") from e

    def search(
        self,
        predicate: Predicate,
        score: ScoreExpr,
        limit: int,
        offset: int,
        timeout_ms: Optional[int] = None,
    ) -> Tuple[int, List[ScoredPosting]]:
        """Run a planned search and return the total count and one ranked page.

        The page query carries ``COUNT(*) OVER ()`` evaluated over the filtered
        set before paging, so the count and the page come from the same
        statement and cannot disagree under concurrent writes. Only when the
        window is empty past the first page is a separate count issued.

        Ordering: score descending, created_at descending, posting_id ascending.

        Args:
            predicate: Admission filter
            score: Ranking expression
            limit: Page size (already clamped by the caller)
            offset: Rows to skip (already clamped by the caller)
            timeout_ms: Statement timeout for this request, if supported

        Returns:
            Tuple of (total_count, ranked rows)

        Raises:
            StoreUnavailableError: On timeout or connection loss
            PersistenceError: If another database error occurs
        """
        try:
            with self._statement_timeout(timeout_ms):
                rows = self._ranked_page(predicate, score, limit, offset)
                if rows:
                    total_count = int(rows[0].total_count)
                elif offset > 0:
                    total_count = self.count_matching(predicate)
                else:
                    total_count = 0
        except SQLAlchemyError as e:
            logger.error(f"Error executing search: {e}", exc_info=True)
            raise _translate(e, "Failed to execute search") from e

        page = [row.JobPostingModel.to_scored(row.score) for row in rows]
        return total_count, page

    def _ranked_page(self, predicate: Predicate, score: ScoreExpr, limit: int, offset: int):
        score_column = compile_score(score).label("score")
        total_column = func.count().over().label("total_count")
        stmt = (
            select(JobPostingModel, score_column, total_column)
            .where(compile_predicate(predicate))
            .order_by(
                score_column.desc(),
                JobPostingModel.created_at.desc(),
                JobPostingModel.posting_id.asc(),
            )
            .limit(limit)
            .offset(offset)
        )
        return self.session.execute(stmt).all()

    @contextmanager
    def _statement_timeout(self, timeout_ms: Optional[int]):
        """Bound every statement run inside the block to timeout_ms.

        PostgreSQL gets ``SET LOCAL statement_timeout``, which lasts until the
        transaction ends. SQLite has no such setting, so a progress handler
        on the raw connection aborts the running statement once the deadline
        passes; it is removed again when the block exits.
        """
        dialect = self.session.get_bind().dialect.name if timeout_ms else None

        if dialect == "postgresql":
            self.session.execute(text(f"SET LOCAL statement_timeout = {int(timeout_ms)}"))
            yield
        elif dialect == "sqlite":
            dbapi_connection = self.session.connection().connection.dbapi_connection
            with sqlite_deadline(dbapi_connection, timeout_ms):
                yield
        else:
            yield


@contextmanager
def sqlite_deadline(dbapi_connection, timeout_ms: int):
    """Interrupt SQLite statements on this connection after timeout_ms.

    An interrupted statement fails with ``sqlite3.OperationalError:
    interrupted``, which _translate reports as StoreUnavailableError.
    """
    deadline = time.monotonic() + timeout_ms / 1000.0

    def past_deadline() -> int:
        return 1 if time.monotonic() > deadline else 0

    dbapi_connection.set_progress_handler(past_deadline, SQLITE_PROGRESS_STEPS)
    try:
        yield
    finally:
        dbapi_connection.set_progress_handler(None, 0)


def _is_transient(error: SQLAlchemyError) -> bool:
    """True when the same statement may succeed if tried again later."""
    if isinstance(error, (PoolTimeoutError, DisconnectionError)):
        return True
    if not isinstance(error, DBAPIError):
        return False
    if error.connection_invalidated:
        return True

    sqlstate = getattr(error.orig, "sqlstate", None) or getattr(error.orig, "pgcode", None)
    if sqlstate:
        return sqlstate in TRANSIENT_SQLSTATES or sqlstate.startswith("08")

    message = str(error.orig).lower()
    return any(marker in message for marker in TRANSIENT_MESSAGES)


def _translate(error: SQLAlchemyError, message: str) -> PersistenceError:
    """Map a SQLAlchemy error onto the persistence exception hierarchy.

    Only timeouts, lock waits and lost connections are retryable. A statement
    the store refuses outright (syntax, limits such as expression depth) fails
    the same way every time and is a plain PersistenceError.
    """
    if _is_transient(error):
        return StoreUnavailableError(f"{message}: store unavailable: {error}")
    return PersistenceError(f"{message}: {error}")
