"""Database models for the matchup arena."""

from datetime import UTC, datetime

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base

from arena.core.configs import DEFAULT_RATING


def utc_now() -> datetime:
    """Return current UTC time (timezone-aware)."""
    return datetime.now(UTC)


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes read back from SQLite."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


Base = declarative_base()


class Candidate(Base):
    """A rankable item. Category membership lives in candidate_ratings."""

    __tablename__ = "candidates"

    id = Column(String(64), primary_key=True)
    name = Column(String(255), nullable=False)
    brand = Column(String(255), nullable=True)
    slug = Column(String(255), nullable=False, unique=True)
    image_url = Column(String, nullable=True)
    year = Column(Integer, nullable=True)
    description = Column(Text, nullable=True)
    random_key = Column(Float, nullable=False, index=True)  # Uniform [0, 1), never changes
    created_at = Column(DateTime, default=utc_now)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)


class CandidateRating(Base):
    """Per-category rating and battle stats. One row per category membership."""

    __tablename__ = "candidate_ratings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    candidate_id = Column(String(64), ForeignKey("candidates.id"), nullable=False)
    category = Column(String(32), nullable=False)
    rating = Column(Integer, nullable=False, default=DEFAULT_RATING)
    battles = Column(Integer, nullable=False, default=0)
    wins = Column(Integer, nullable=False, default=0)
    random_key = Column(Float, nullable=False)  # Copy of candidates.random_key
    version = Column(Integer, nullable=False)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)

    __table_args__ = (
        UniqueConstraint("candidate_id", "category", name="uq_candidate_category"),
        # Sampling: "next N candidates in category X from random key K"
        Index("idx_candidate_ratings_sampling", "category", "random_key"),
        # Leaderboard: "top N candidates in category X"
        Index("idx_candidate_ratings_leaderboard", "category", "rating"),
    )
    __mapper_args__ = {"version_id_col": version}


class Matchup(Base):
    """One shown pair. Undecided while winner_id is NULL; immutable once decided."""

    __tablename__ = "matchups"

    id = Column(String(36), primary_key=True)
    category = Column(String(32), nullable=False)
    candidate_a_id = Column(String(64), ForeignKey("candidates.id"), nullable=False)
    candidate_b_id = Column(String(64), ForeignKey("candidates.id"), nullable=False)
    a_rating_before = Column(Integer, nullable=False)  # Snapshot at creation
    b_rating_before = Column(Integer, nullable=False)
    a_rating_after = Column(Integer, nullable=True)
    b_rating_after = Column(Integer, nullable=True)
    winner_id = Column(String(64), nullable=True)
    created_at = Column(DateTime, default=utc_now)
    decided_at = Column(DateTime, nullable=True)
    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    @property
    def is_decided(self) -> bool:
        return self.winner_id is not None

    def participants(self) -> tuple[str, str]:
        return self.candidate_a_id, self.candidate_b_id


class VoteRecord(Base):
    """Append-only audit record of a decided matchup."""

    __tablename__ = "votes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    matchup_id = Column(String(36), ForeignKey("matchups.id"), nullable=False, unique=True)
    category = Column(String(32), nullable=False)
    winner_id = Column(String(64), nullable=False)
    loser_id = Column(String(64), nullable=False)
    voter_id = Column(String, nullable=False, index=True)  # Opaque, unbounded
    created_at = Column(DateTime, default=utc_now)

    __table_args__ = (
        Index("idx_votes_category_created", "category", "created_at"),
    )


class VoterSession(Base):
    """Per-voter anti-repeat history and coarse activity counters."""

    __tablename__ = "voter_sessions"

    voter_id = Column(String, primary_key=True)
    created_at = Column(DateTime, default=utc_now)
    last_seen_at = Column(DateTime, default=utc_now)
    recent_pair_keys = Column(JSON, nullable=False, default=list)  # Most recent first
    votes_last_hour = Column(Integer, nullable=False, default=0)
    votes_last_day = Column(Integer, nullable=False, default=0)
    hour_window_start = Column(DateTime, nullable=True)
    day_window_start = Column(DateTime, nullable=True)
    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}
