"""
matchup-arena API server.

Serves head-to-head matchups to anonymous voters and applies their votes to
per-category Elo ratings.
"""

import logging
import random
from contextlib import asynccontextmanager

import uvicorn
from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
from sqlalchemy.orm import Session, sessionmaker

from arena.analysis import coverage_analysis, rating_distribution
from arena.core.errors import (
    ArenaError,
    ConflictError,
    InsufficientCandidatesError,
    InvalidRequestError,
    InvalidWinnerError,
    NotFoundError,
    TransientConflictError,
)
from arena.matchmaking import Matchmaker, WorkingSetCache
from server.config import (
    CATEGORIES,
    CATEGORY_IDS,
    CORS_ORIGINS,
    DEFAULT_CATEGORY,
    HOST,
    PORT,
    POOL_CACHE_TTL_SECONDS,
)
from server.database import get_db, get_session_factory, init_db, run_in_transaction
from server.database.repository import (
    category_snapshot,
    create_candidate,
    get_candidate_detail,
    leaderboard,
    public_view,
)
from server.matchmaking import build_matchmaker, next_matchup
from server.voting import cast_vote

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


# Working sets are shared by every request in the process
pool_cache = WorkingSetCache(ttl_seconds=POOL_CACHE_TTL_SECONDS)


def get_pool_cache() -> WorkingSetCache:
    """FastAPI dependency for the process-wide working-set cache."""
    return pool_cache


def get_rng() -> random.Random | None:
    """FastAPI dependency for the matchmaking random source (None: fresh per request)."""
    return None


def get_matchmaker(
    session_factory: sessionmaker = Depends(get_session_factory),
    cache: WorkingSetCache = Depends(get_pool_cache),
    rng: random.Random | None = Depends(get_rng),
) -> Matchmaker:
    return build_matchmaker(session_factory, cache, rng)


def http_error(exc: ArenaError) -> HTTPException:
    """Map engine errors onto HTTP status codes."""
    if isinstance(exc, (InvalidRequestError, InvalidWinnerError)):
        status = 400
    elif isinstance(exc, NotFoundError):
        status = 404
    elif isinstance(exc, ConflictError):
        status = 409
    elif isinstance(exc, (InsufficientCandidatesError, TransientConflictError)):
        status = 503
    else:
        status = 500
    return HTTPException(status_code=status, detail=str(exc))


def validate_category(category: str | None) -> str:
    if category not in CATEGORY_IDS:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid category. Must be one of: {', '.join(CATEGORY_IDS)}",
        )
    return category


# Pydantic models
class CategoryInfo(BaseModel):
    id: str
    label: str


class CandidatePublic(BaseModel):
    id: str
    name: str
    brand: str | None = None
    slug: str
    image_url: str | None = None
    year: int | None = None


class MatchupResponse(BaseModel):
    matchup_id: str
    category: str
    candidate_a: CandidatePublic
    candidate_b: CandidatePublic


class VoteRequest(BaseModel):
    matchup_id: str
    winner_id: str
    voter_id: str


class VoteResponse(BaseModel):
    success: bool = True
    is_upset: bool
    winner_id: str
    loser_id: str
    winner_new_rating: int
    loser_new_rating: int
    winner_delta: int
    loser_delta: int


class RankedCandidate(CandidatePublic):
    rank: int
    rating: int
    battles: int
    wins: int
    win_rate: float


class CategoryStats(BaseModel):
    category: str
    rating: int
    battles: int
    wins: int
    win_rate: float


class CandidateDetail(CandidatePublic):
    description: str | None = None
    stats: list[CategoryStats]


class CandidateCreate(BaseModel):
    name: str
    brand: str | None = None
    image_url: str | None = None
    year: int | None = None
    description: str | None = None
    categories: list[str] = []


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown."""
    logger.info("Starting matchup-arena server...")
    init_db()
    logger.info("Server ready!")
    yield
    logger.info("Shutting down...")


app = FastAPI(
    title="matchup-arena API",
    description="Head-to-head voting with per-category Elo ratings",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "ok", "service": "matchup-arena"}


@app.get("/api/categories", response_model=list[CategoryInfo])
def list_categories():
    """List the ranking categories."""
    return [CategoryInfo(**c) for c in CATEGORIES]


@app.get("/api/battle/next", response_model=MatchupResponse)
def get_next_battle(
    category: str | None = Query(None, description="Ranking category (e.g., 'overall')"),
    voter_id: str | None = Query(None, description="Opaque voter/session identifier"),
    matchmaker: Matchmaker = Depends(get_matchmaker),
    session_factory: sessionmaker = Depends(get_session_factory),
):
    """Get the next matchup for a voter."""
    try:
        offer = next_matchup(matchmaker, session_factory, category, voter_id)
    except ArenaError as e:
        raise http_error(e) from e

    return MatchupResponse(
        matchup_id=offer.matchup_id,
        category=offer.category,
        candidate_a=CandidatePublic(**offer.candidate_a),
        candidate_b=CandidatePublic(**offer.candidate_b),
    )


@app.post("/api/vote", response_model=VoteResponse)
def post_vote(
    request: VoteRequest,
    session_factory: sessionmaker = Depends(get_session_factory),
):
    """Cast a vote on a matchup."""
    try:
        result = cast_vote(session_factory, request.matchup_id, request.winner_id, request.voter_id)
    except ArenaError as e:
        logger.info(f"Vote rejected for {request.matchup_id}: {e}")
        raise http_error(e) from e

    return VoteResponse(
        is_upset=result.is_upset,
        winner_id=result.winner_id,
        loser_id=result.loser_id,
        winner_new_rating=result.winner_new_rating,
        loser_new_rating=result.loser_new_rating,
        winner_delta=result.winner_delta,
        loser_delta=result.loser_delta,
    )


@app.get("/api/rankings", response_model=list[RankedCandidate])
def get_rankings(
    category: str = Query(DEFAULT_CATEGORY),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    """Leaderboard for a category."""
    validate_category(category)
    return [RankedCandidate(**row) for row in leaderboard(db, category, limit, offset)]


@app.get("/api/candidates/{candidate_id}", response_model=CandidateDetail)
def get_candidate(candidate_id: str, db: Session = Depends(get_db)):
    """Get a candidate with its per-category stats."""
    detail = get_candidate_detail(db, candidate_id)
    if detail is None:
        raise HTTPException(status_code=404, detail="Candidate not found")
    return CandidateDetail(**detail)


@app.post("/api/candidates", response_model=CandidatePublic, status_code=201)
def add_candidate(
    request: CandidateCreate,
    session_factory: sessionmaker = Depends(get_session_factory),
    cache: WorkingSetCache = Depends(get_pool_cache),
):
    """Add a candidate to the overall category plus any requested ones."""
    try:
        view = run_in_transaction(
            session_factory,
            lambda session: public_view(create_candidate(session, **request.model_dump())),
        )
    except ArenaError as e:
        raise http_error(e) from e

    for category in {DEFAULT_CATEGORY, *request.categories}:
        cache.invalidate(category)
    return CandidatePublic(**view)


@app.get("/api/stats")
def get_stats(category: str = Query(DEFAULT_CATEGORY), db: Session = Depends(get_db)):
    """Rating distribution and vote coverage for a category."""
    validate_category(category)
    ratings, battles, total_votes = category_snapshot(db, category)
    return {
        "category": category,
        "total_votes": total_votes,
        "rating_distribution": rating_distribution(ratings),
        "coverage": coverage_analysis(battles),
    }


def run():
    """Run the server."""
    uvicorn.run(app, host=HOST, port=PORT)


if __name__ == "__main__":
    run()
