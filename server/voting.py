"""
Vote transaction.

Applies one vote as a single all-or-nothing state transition:

1. load the matchup (not found -> MatchupNotFoundError)
2. refuse decided matchups (MatchupAlreadyDecidedError)
3. check the winner is one of the two participants (InvalidWinnerError)
4. load both candidates' current ratings in the category and the voter's session
5. compute new ratings
6. stage every write: matchup decided, both rating rows, the vote record,
   voter counters
7. return the outcome

The whole sequence is the unit of work handed to `run_in_transaction`. Two
votes racing on the same matchup both read it undecided, but only the first
commit matches the row version; the second is replayed from step 1, sees the
decision and fails with MatchupAlreadyDecidedError. Votes on different
matchups that share a candidate serialize the same way on the rating row.
"""

import logging

from sqlalchemy.orm import Session, sessionmaker

from arena.core.errors import (
    CandidateNotFoundError,
    InvalidRequestError,
    InvalidWinnerError,
    MatchupAlreadyDecidedError,
    MatchupNotFoundError,
)
from arena.core.types import VoteResult
from arena.rating.elo import EloRatingSystem, is_upset
from server.config import VOTE_MAX_ATTEMPTS
from server.database.history import count_vote, get_or_create_session
from server.database.models import CandidateRating, Matchup, VoteRecord, utc_now
from server.database.transaction import run_in_transaction

logger = logging.getLogger(__name__)


def _rating_row(session: Session, candidate_id: str, category: str) -> CandidateRating:
    row = (
        session.query(CandidateRating)
        .filter(CandidateRating.candidate_id == candidate_id)
        .filter(CandidateRating.category == category)
        .first()
    )
    if row is None:
        raise CandidateNotFoundError(candidate_id, category)
    return row


def apply_vote(
    session: Session,
    matchup_id: str,
    winner_id: str,
    voter_id: str,
    elo: EloRatingSystem,
) -> VoteResult:
    """Stage a vote in `session`. The caller commits (see cast_vote)."""
    matchup = session.get(Matchup, matchup_id)
    if matchup is None:
        raise MatchupNotFoundError(matchup_id)

    if matchup.is_decided:
        raise MatchupAlreadyDecidedError(matchup_id)

    if winner_id not in matchup.participants():
        raise InvalidWinnerError(matchup_id, winner_id)

    winner_is_a = winner_id == matchup.candidate_a_id
    loser_id = matchup.candidate_b_id if winner_is_a else matchup.candidate_a_id
    category = matchup.category

    # Authoritative ratings, not the snapshot taken when the matchup was shown
    winner_row = _rating_row(session, winner_id, category)
    loser_row = _rating_row(session, loser_id, category)
    now = utc_now()
    voter = get_or_create_session(session, voter_id, now)

    winner_before, loser_before = winner_row.rating, loser_row.rating
    winner_new, loser_new = elo.apply_outcome(winner_before, loser_before, a_won=True)

    matchup.winner_id = winner_id
    matchup.a_rating_after = winner_new if winner_is_a else loser_new
    matchup.b_rating_after = loser_new if winner_is_a else winner_new
    matchup.decided_at = now

    winner_row.rating = winner_new
    winner_row.battles += 1
    winner_row.wins += 1

    loser_row.rating = loser_new
    loser_row.battles += 1

    session.add(
        VoteRecord(
            matchup_id=matchup_id,
            category=category,
            winner_id=winner_id,
            loser_id=loser_id,
            voter_id=voter_id,
            created_at=now,
        )
    )
    count_vote(voter, now)

    return VoteResult(
        matchup_id=matchup_id,
        category=category,
        winner_id=winner_id,
        loser_id=loser_id,
        winner_rating_before=winner_before,
        loser_rating_before=loser_before,
        winner_new_rating=winner_new,
        loser_new_rating=loser_new,
        is_upset=is_upset(winner_before, loser_before),
    )


def cast_vote(
    session_factory: sessionmaker,
    matchup_id: str,
    winner_id: str,
    voter_id: str,
    elo: EloRatingSystem | None = None,
    max_attempts: int = VOTE_MAX_ATTEMPTS,
) -> VoteResult:
    """
    Apply a vote atomically, retrying the whole transaction on write conflicts.

    Raises:
        InvalidRequestError: Missing matchup, winner or voter id
        MatchupNotFoundError: Unknown matchup
        MatchupAlreadyDecidedError: The matchup already has a winner
        InvalidWinnerError: Winner is not one of the matchup's candidates
        CandidateNotFoundError: A participant has no rating in the category
        TransientConflictError: Conflicts persisted through every attempt
    """
    missing = [
        name for name, value in
        (("matchup_id", matchup_id), ("winner_id", winner_id), ("voter_id", voter_id))
        if not value or not value.strip()
    ]
    if missing:
        raise InvalidRequestError(f"Missing required fields: {', '.join(missing)}")

    elo = elo or EloRatingSystem()
    result = run_in_transaction(
        session_factory,
        lambda session: apply_vote(session, matchup_id, winner_id, voter_id, elo),
        max_attempts=max_attempts,
    )

    logger.info(
        f"Vote on {matchup_id} ({result.category}): {result.winner_id} "
        f"{result.winner_rating_before}->{result.winner_new_rating} beat {result.loser_id} "
        f"{result.loser_rating_before}->{result.loser_new_rating}"
        + (" [upset]" if result.is_upset else "")
    )
    return result
