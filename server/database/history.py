"""Voter sessions: anti-repeat history and activity counters."""

import logging
from datetime import datetime, timedelta

from sqlalchemy.orm import Session, sessionmaker

from arena.storage.protocols import push_recent
from server.database.models import VoterSession, as_utc, utc_now
from server.database.transaction import run_in_transaction

logger = logging.getLogger(__name__)

HOUR = timedelta(hours=1)
DAY = timedelta(days=1)


def get_or_create_session(session: Session, voter_id: str, now: datetime) -> VoterSession:
    """Load a voter's session row, staging a new one if absent."""
    voter = session.get(VoterSession, voter_id)
    if voter is None:
        voter = VoterSession(
            voter_id=voter_id,
            created_at=now,
            last_seen_at=now,
            recent_pair_keys=[],
            votes_last_hour=0,
            votes_last_day=0,
        )
        session.add(voter)
    return voter


def count_vote(voter: VoterSession, now: datetime) -> None:
    """Bump the hour/day vote counters, restarting a window once it has elapsed."""
    hour_start = as_utc(voter.hour_window_start)
    if hour_start is None or now - hour_start >= HOUR:
        voter.hour_window_start = now
        voter.votes_last_hour = 0

    day_start = as_utc(voter.day_window_start)
    if day_start is None or now - day_start >= DAY:
        voter.day_window_start = now
        voter.votes_last_day = 0

    voter.votes_last_hour += 1
    voter.votes_last_day += 1
    voter.last_seen_at = now


class SQLHistoryStore:
    """
    HistoryStore on the voter_sessions table.

    `record_pair` is a read-modify-write in its own transaction. The row's
    version column makes a concurrent writer (another matchup request, or a
    vote bumping the counters) fail with StaleDataError, and the unit of
    work is replayed against the fresh row.
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        max_recent_pairs: int = 30,
        max_attempts: int = 5,
    ) -> None:
        self.session_factory = session_factory
        self.max_recent_pairs = max_recent_pairs
        self.max_attempts = max_attempts

    def recent_pairs(self, voter_id: str) -> list[str]:
        """Get recent pair keys for a voter, most recent first."""
        with self.session_factory() as session:
            voter = session.get(VoterSession, voter_id)
            return list(voter.recent_pair_keys or []) if voter else []

    def record_pair(self, voter_id: str, pair_key: str) -> None:
        """Prepend a pair key to a voter's history, creating it if absent."""

        def work(session: Session) -> None:
            now = utc_now()
            voter = get_or_create_session(session, voter_id, now)
            voter.recent_pair_keys = push_recent(
                list(voter.recent_pair_keys or []), pair_key, self.max_recent_pairs
            )
            voter.last_seen_at = now

        run_in_transaction(self.session_factory, work, max_attempts=self.max_attempts)

    def activity(self, voter_id: str) -> dict | None:
        """Activity counters for a voter, or None if unknown."""
        with self.session_factory() as session:
            voter = session.get(VoterSession, voter_id)
            if voter is None:
                return None
            return {
                "voter_id": voter.voter_id,
                "created_at": as_utc(voter.created_at),
                "last_seen_at": as_utc(voter.last_seen_at),
                "votes_last_hour": voter.votes_last_hour,
                "votes_last_day": voter.votes_last_day,
                "recent_pairs": len(voter.recent_pair_keys or []),
            }
