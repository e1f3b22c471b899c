"""Tests for the vote transaction."""

import threading
import uuid

import pytest

from arena.core.errors import (
    CandidateNotFoundError,
    InvalidRequestError,
    InvalidWinnerError,
    MatchupAlreadyDecidedError,
    MatchupNotFoundError,
    TransientConflictError,
)
from server.database.history import SQLHistoryStore
from server.database.models import CandidateRating, Matchup, VoteRecord, VoterSession
from server.database.transaction import run_in_transaction
from server.voting import cast_vote


def make_matchup(session_factory, a="cand_000", b="cand_001", category="overall"):
    """Persist an undecided matchup with 1500/1500 snapshots."""

    def work(session):
        matchup = Matchup(
            id=str(uuid.uuid4()),
            category=category,
            candidate_a_id=a,
            candidate_b_id=b,
            a_rating_before=1500,
            b_rating_before=1500,
        )
        session.add(matchup)
        return matchup.id

    return run_in_transaction(session_factory, work)


def rating_row(session_factory, candidate_id, category="overall"):
    with session_factory() as session:
        return (
            session.query(CandidateRating)
            .filter_by(candidate_id=candidate_id, category=category)
            .one()
        )


def set_rating(session_factory, candidate_id, rating, category="overall"):
    def work(session):
        row = (
            session.query(CandidateRating)
            .filter_by(candidate_id=candidate_id, category=category)
            .one()
        )
        row.rating = rating

    run_in_transaction(session_factory, work)


def vote_count(session_factory):
    with session_factory() as session:
        return session.query(VoteRecord).count()


class TestCastVote:
    """Tests for cast_vote."""

    def test_equal_ratings(self, session_factory, seeded):
        """Equal ratings move to 1512/1488 and both battle counts increase."""
        matchup_id = make_matchup(session_factory)

        result = cast_vote(session_factory, matchup_id, "cand_000", "voter-1")

        assert result.winner_new_rating == 1512
        assert result.loser_new_rating == 1488
        assert result.winner_delta == 12
        assert result.loser_delta == -12
        assert result.is_upset is False

        winner = rating_row(session_factory, "cand_000")
        loser = rating_row(session_factory, "cand_001")
        assert (winner.rating, winner.battles, winner.wins) == (1512, 1, 1)
        assert (loser.rating, loser.battles, loser.wins) == (1488, 1, 0)

    def test_matchup_decided(self, session_factory, seeded):
        matchup_id = make_matchup(session_factory)

        cast_vote(session_factory, matchup_id, "cand_001", "voter-1")

        with session_factory() as session:
            matchup = session.get(Matchup, matchup_id)
            assert matchup.winner_id == "cand_001"
            assert matchup.decided_at is not None
            assert (matchup.a_rating_before, matchup.b_rating_before) == (1500, 1500)
            assert (matchup.a_rating_after, matchup.b_rating_after) == (1488, 1512)

            vote = session.query(VoteRecord).filter_by(matchup_id=matchup_id).one()
            assert (vote.winner_id, vote.loser_id, vote.voter_id) == ("cand_001", "cand_000", "voter-1")

    def test_uses_current_rating_not_snapshot(self, session_factory, seeded):
        """Ratings changed after the matchup was shown are the ones updated."""
        matchup_id = make_matchup(session_factory)
        set_rating(session_factory, "cand_000", 1400)
        set_rating(session_factory, "cand_001", 1600)

        result = cast_vote(session_factory, matchup_id, "cand_000", "voter-1")

        assert result.is_upset is True
        assert (result.winner_rating_before, result.loser_rating_before) == (1400, 1600)
        assert (result.winner_new_rating, result.loser_new_rating) == (1418, 1582)
        assert result.winner_delta > 12

    def test_double_vote_rejected(self, session_factory, seeded):
        """A second vote on a decided matchup fails and changes nothing."""
        matchup_id = make_matchup(session_factory)
        cast_vote(session_factory, matchup_id, "cand_000", "voter-1")

        with pytest.raises(MatchupAlreadyDecidedError):
            cast_vote(session_factory, matchup_id, "cand_001", "voter-2")

        assert rating_row(session_factory, "cand_000").rating == 1512
        assert rating_row(session_factory, "cand_001").battles == 1
        assert vote_count(session_factory) == 1

    def test_invalid_winner(self, session_factory, seeded):
        """A winner outside the matchup is rejected before any write."""
        matchup_id = make_matchup(session_factory)

        with pytest.raises(InvalidWinnerError):
            cast_vote(session_factory, matchup_id, "cand_005", "voter-1")

        assert rating_row(session_factory, "cand_000").rating == 1500
        assert rating_row(session_factory, "cand_001").battles == 0
        assert vote_count(session_factory) == 0
        with session_factory() as session:
            assert session.get(Matchup, matchup_id).winner_id is None
            assert session.get(VoterSession, "voter-1") is None

    def test_matchup_not_found(self, session_factory, seeded):
        with pytest.raises(MatchupNotFoundError):
            cast_vote(session_factory, "no-such-matchup", "cand_000", "voter-1")

    def test_missing_rating_row(self, session_factory, seeded):
        """A participant without a rating in the category is not found."""
        matchup_id = make_matchup(session_factory, "cand_000", "cand_004", category="masculine")

        with pytest.raises(CandidateNotFoundError):
            cast_vote(session_factory, matchup_id, "cand_000", "voter-1")

        assert rating_row(session_factory, "cand_000", "masculine").battles == 0

    @pytest.mark.parametrize(
        "matchup_id,winner_id,voter_id",
        [("", "cand_000", "voter-1"), ("m", "", "voter-1"), ("m", "cand_000", "  ")],
    )
    def test_missing_fields(self, session_factory, matchup_id, winner_id, voter_id):
        with pytest.raises(InvalidRequestError, match="Missing required fields"):
            cast_vote(session_factory, matchup_id, winner_id, voter_id)

    def test_categories_independent(self, session_factory, seeded):
        """A vote in one category leaves the candidates' other ratings alone."""
        matchup_id = make_matchup(session_factory, "cand_000", "cand_001", category="masculine")

        cast_vote(session_factory, matchup_id, "cand_000", "voter-1")

        assert rating_row(session_factory, "cand_000", "masculine").rating == 1512
        assert rating_row(session_factory, "cand_000", "overall").rating == 1500
        assert rating_row(session_factory, "cand_000", "overall").battles == 0

    def test_voter_counters(self, session_factory, seeded):
        """Each vote is counted against the voter's session."""
        for _ in range(2):
            cast_vote(session_factory, make_matchup(session_factory), "cand_000", "voter-1")

        activity = SQLHistoryStore(session_factory).activity("voter-1")
        assert activity["votes_last_hour"] == 2
        assert activity["votes_last_day"] == 2

    def test_long_voter_id(self, session_factory, seeded):
        """Voter ids are stored whole, however long."""
        voter_id = "v" * 300
        cast_vote(session_factory, make_matchup(session_factory), "cand_000", voter_id)

        with session_factory() as session:
            assert session.query(VoteRecord).one().voter_id == voter_id
            assert session.get(VoterSession, voter_id).votes_last_day == 1

    def test_voter_columns_unbounded(self):
        assert VoteRecord.__table__.c.voter_id.type.length is None
        assert VoterSession.__table__.c.voter_id.type.length is None


class TestConcurrentVotes:
    """Votes racing on separate connections."""

    def test_racing_votes_apply_once(self, file_session_factory, seeder):
        """Of several simultaneous votes on one matchup exactly one is applied."""
        seeder(file_session_factory, count=2)
        matchup_id = make_matchup(file_session_factory)
        barrier = threading.Barrier(4)
        outcomes = []
        lock = threading.Lock()

        def voter(n):
            barrier.wait()
            try:
                cast_vote(file_session_factory, matchup_id, "cand_000", f"voter-{n}")
                outcome = "applied"
            except (MatchupAlreadyDecidedError, TransientConflictError) as e:
                outcome = type(e).__name__
            with lock:
                outcomes.append(outcome)

        threads = [threading.Thread(target=voter, args=(n,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert outcomes.count("applied") == 1
        assert len(outcomes) == 4

        winner = rating_row(file_session_factory, "cand_000")
        assert (winner.rating, winner.battles) == (1512, 1)
        assert vote_count(file_session_factory) == 1
