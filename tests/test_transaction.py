"""Tests for the retryable unit of work and optimistic version checks."""

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm.exc import StaleDataError

from arena.core.errors import InvalidRequestError, TransientConflictError
from server.database.models import CandidateRating
from server.database.transaction import is_transient, run_in_transaction


class FakeDriverError(Exception):
    def __init__(self, message, sqlstate=None):
        super().__init__(message)
        self.sqlstate = sqlstate


def operational(message, sqlstate=None):
    return OperationalError("UPDATE ...", {}, FakeDriverError(message, sqlstate))


class TestIsTransient:
    """Tests for conflict classification."""

    def test_stale_data(self):
        assert is_transient(StaleDataError("version mismatch"))

    def test_sqlite_unique_violation(self):
        error = FakeDriverError("UNIQUE constraint failed: votes.matchup_id")
        assert is_transient(IntegrityError("INSERT ...", {}, error))

    def test_postgres_unique_violation(self):
        error = FakeDriverError("duplicate key value", sqlstate="23505")
        assert is_transient(IntegrityError("INSERT ...", {}, error))

    def test_other_constraint_violations(self):
        """Foreign key and not-null failures are not conflicts."""
        assert not is_transient(
            IntegrityError("INSERT ...", {}, FakeDriverError("FOREIGN KEY constraint failed"))
        )
        assert not is_transient(
            IntegrityError("INSERT ...", {}, FakeDriverError("null value", sqlstate="23502"))
        )

    def test_sqlite_locked(self):
        assert is_transient(operational("database is locked"))

    def test_serialization_failure(self):
        assert is_transient(operational("could not serialize access", sqlstate="40001"))

    def test_other_operational_errors(self):
        assert not is_transient(operational("no such table: candidates"))

    def test_domain_errors(self):
        assert not is_transient(InvalidRequestError("bad"))


class TestRunInTransaction:
    """Tests for run_in_transaction."""

    def test_returns_result(self, session_factory):
        assert run_in_transaction(session_factory, lambda session: 42) == 42

    def test_retries_transient_conflicts(self, session_factory):
        attempts = []

        def work(session):
            attempts.append(len(attempts) + 1)
            if len(attempts) < 3:
                raise StaleDataError("version mismatch")
            return "done"

        assert run_in_transaction(session_factory, work, backoff_seconds=0) == "done"
        assert attempts == [1, 2, 3]

    def test_gives_up_after_max_attempts(self, session_factory):
        attempts = []

        def work(session):
            attempts.append(1)
            raise StaleDataError("version mismatch")

        with pytest.raises(TransientConflictError) as exc_info:
            run_in_transaction(session_factory, work, max_attempts=4, backoff_seconds=0)

        assert len(attempts) == 4
        assert exc_info.value.attempts == 4

    def test_domain_errors_not_retried(self, session_factory):
        attempts = []

        def work(session):
            attempts.append(1)
            raise InvalidRequestError("bad input")

        with pytest.raises(InvalidRequestError):
            run_in_transaction(session_factory, work, backoff_seconds=0)
        assert len(attempts) == 1

    def test_non_transient_storage_errors_propagate(self, session_factory):
        def work(session):
            raise operational("no such table: candidates")

        with pytest.raises(OperationalError):
            run_in_transaction(session_factory, work, backoff_seconds=0)

    def test_constraint_violations_propagate(self, session_factory):
        """A non-unique constraint failure is raised at once, not retried into a conflict."""
        attempts = []

        def work(session):
            attempts.append(1)
            raise IntegrityError(
                "INSERT ...", {}, FakeDriverError("NOT NULL constraint failed: candidates.name")
            )

        with pytest.raises(IntegrityError):
            run_in_transaction(session_factory, work, backoff_seconds=0)
        assert len(attempts) == 1

    def test_failed_attempt_is_rolled_back(self, session_factory, seeder):
        """Writes staged by an attempt that raised are never committed."""
        seeder(session_factory, count=2)

        def work(session):
            row = session.query(CandidateRating).filter_by(
                candidate_id="cand_000", category="overall"
            ).one()
            row.battles = 99
            session.flush()
            raise InvalidRequestError("abort")

        with pytest.raises(InvalidRequestError):
            run_in_transaction(session_factory, work)

        with session_factory() as session:
            row = session.query(CandidateRating).filter_by(
                candidate_id="cand_000", category="overall"
            ).one()
            assert row.battles == 0


class TestVersionConflicts:
    """Optimistic concurrency against a real concurrent writer."""

    def test_concurrent_update_is_replayed(self, file_session_factory, seeder):
        """A write racing between our read and our commit forces a replay on fresh data."""
        seeder(file_session_factory, count=2)
        seen = []

        def work(session):
            row = (
                session.query(CandidateRating)
                .filter_by(candidate_id="cand_000", category="overall")
                .one()
            )
            if not seen:
                with file_session_factory() as other:
                    other_row = (
                        other.query(CandidateRating)
                        .filter_by(candidate_id="cand_000", category="overall")
                        .one()
                    )
                    other_row.battles += 1
                    other.commit()
            seen.append(row.battles)
            row.battles += 1

        run_in_transaction(file_session_factory, work, backoff_seconds=0)

        assert seen == [0, 1]
        with file_session_factory() as session:
            row = (
                session.query(CandidateRating)
                .filter_by(candidate_id="cand_000", category="overall")
                .one()
            )
            assert row.battles == 2
