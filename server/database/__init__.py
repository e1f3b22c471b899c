"""Database package."""

from .connection import (
    SessionLocal,
    get_db,
    get_db_context,
    get_session_factory,
    init_db,
    make_engine,
    make_session_factory,
)
from .models import Base, Candidate, CandidateRating, Matchup, VoteRecord, VoterSession
from .transaction import run_in_transaction

__all__ = [
    "get_db",
    "get_db_context",
    "get_session_factory",
    "init_db",
    "make_engine",
    "make_session_factory",
    "run_in_transaction",
    "SessionLocal",
    "Base",
    "Candidate",
    "CandidateRating",
    "Matchup",
    "VoteRecord",
    "VoterSession",
]
