"""Next-matchup requests: select a pair and persist it as an undecided matchup."""

import logging
import random
import uuid
from dataclasses import dataclass

from sqlalchemy.orm import Session, sessionmaker

from arena.core.configs import MatchmakingConfig
from arena.matchmaking import Matchmaker, PairSelector, PoolSampler, WorkingSetCache
from server.config import CATEGORY_IDS, MAX_RECENT_PAIRS, POOL_SIZE, WORKING_SET_SIZE
from server.database.history import SQLHistoryStore
from server.database.models import CandidateRating, Matchup
from server.database.repository import SQLCandidateSource
from server.database.transaction import run_in_transaction

logger = logging.getLogger(__name__)


@dataclass
class MatchupOffer:
    """A persisted matchup and the public views of its two candidates."""

    matchup_id: str
    category: str
    candidate_a: dict
    candidate_b: dict
    strategy: str


def matchmaking_config() -> MatchmakingConfig:
    """Matchmaking settings from server configuration."""
    return MatchmakingConfig(
        pool_size=POOL_SIZE,
        working_set_size=WORKING_SET_SIZE,
        max_recent_pairs=MAX_RECENT_PAIRS,
    )


def build_matchmaker(
    session_factory: sessionmaker,
    cache: WorkingSetCache,
    rng: random.Random | None = None,
) -> Matchmaker:
    """Wire the sampler, selector and SQL history store for one request."""
    config = matchmaking_config()
    rng = rng or random.Random()
    return Matchmaker(
        sampler=PoolSampler(SQLCandidateSource(session_factory), cache, config, rng),
        selector=PairSelector(config, rng),
        history=SQLHistoryStore(session_factory, max_recent_pairs=config.max_recent_pairs),
        categories=CATEGORY_IDS,
    )


def next_matchup(
    matchmaker: Matchmaker,
    session_factory: sessionmaker,
    category: str,
    voter_id: str,
) -> MatchupOffer:
    """
    Select the next pair for a voter and store it as an undecided matchup.

    The matchup is committed before the pair enters the voter's history, and
    its rating snapshots are read from the rating rows rather than the cached
    working set.

    Raises:
        InvalidRequestError: Unknown category or missing voter id
        InsufficientCandidatesError: Fewer than 2 eligible candidates
        TransientConflictError: The matchup could not be stored
    """
    selection = matchmaker.select_pair(category, voter_id)
    first, second = selection.first, selection.second

    def work(session: Session) -> str:
        current = dict(
            session.query(CandidateRating.candidate_id, CandidateRating.rating)
            .filter(
                CandidateRating.category == category,
                CandidateRating.candidate_id.in_([first.id, second.id]),
            )
            .all()
        )
        matchup = Matchup(
            id=str(uuid.uuid4()),
            category=category,
            candidate_a_id=first.id,
            candidate_b_id=second.id,
            a_rating_before=current.get(first.id, int(first.rating)),
            b_rating_before=current.get(second.id, int(second.rating)),
        )
        session.add(matchup)
        return matchup.id

    matchup_id = run_in_transaction(session_factory, work)
    matchmaker.history.record_pair(voter_id, selection.key)
    logger.info(
        f"Matchup {matchup_id} in {category}: {first.id} vs {second.id} "
        f"({selection.strategy.value})"
    )

    return MatchupOffer(
        matchup_id=matchup_id,
        category=category,
        candidate_a={"id": first.id, **first.payload},
        candidate_b={"id": second.id, **second.payload},
        strategy=selection.strategy.value,
    )
