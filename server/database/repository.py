"""Candidate queries and writes backed by SQLAlchemy."""

import logging
import random
import re
import unicodedata
import uuid

from sqlalchemy import func
from sqlalchemy.orm import Session, sessionmaker

from arena.analysis import win_rate
from arena.core.configs import DEFAULT_CATEGORY, DEFAULT_RATING
from arena.core.errors import DuplicateCandidateError, InvalidRequestError
from arena.core.types import PoolEntry
from server.config import CATEGORY_IDS
from server.database.models import Candidate, CandidateRating, VoteRecord

logger = logging.getLogger(__name__)

PUBLIC_FIELDS = ("id", "name", "brand", "slug", "image_url", "year")


def slugify(*parts: str) -> str:
    """Lowercase ASCII slug of the joined parts, e.g. ("Dior", "Sauvage") -> "dior-sauvage"."""
    text = "-".join(p for p in parts if p)
    text = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode()
    return re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")


def public_view(candidate: Candidate) -> dict:
    """Public attributes of a candidate, as returned by the API."""
    return {field: getattr(candidate, field) for field in PUBLIC_FIELDS}


class SQLCandidateSource:
    """CandidateSource reading (category, random_key) ranges from candidate_ratings."""

    def __init__(self, session_factory: sessionmaker) -> None:
        self.session_factory = session_factory

    def fetch_slice(self, category: str, start: float, limit: int) -> list[PoolEntry]:
        """Get up to `limit` candidates of a category with random key >= start."""
        with self.session_factory() as session:
            rows = (
                session.query(CandidateRating, Candidate)
                .join(Candidate, Candidate.id == CandidateRating.candidate_id)
                .filter(CandidateRating.category == category)
                .filter(CandidateRating.random_key >= start)
                .order_by(CandidateRating.random_key)
                .limit(limit)
                .all()
            )
            return [
                PoolEntry(
                    id=candidate.id,
                    rating=rating.rating,
                    battles=rating.battles,
                    random_key=rating.random_key,
                    payload=public_view(candidate),
                )
                for rating, candidate in rows
            ]


def create_candidate(
    session: Session,
    name: str,
    brand: str | None = None,
    image_url: str | None = None,
    year: int | None = None,
    description: str | None = None,
    categories: list[str] | None = None,
    candidate_id: str | None = None,
    rng: random.Random | None = None,
) -> Candidate:
    """
    Add a candidate with a rating row for every category it belongs to.

    The overall category is always included. The random sampling key is drawn
    here, once, and copied to each rating row.

    Raises:
        InvalidRequestError: Blank name or unknown category
        DuplicateCandidateError: A candidate with the same slug or id exists
    """
    if not name or not name.strip():
        raise InvalidRequestError("Candidate name is required")

    requested = set(categories or [])
    unknown = requested - set(CATEGORY_IDS)
    if unknown:
        raise InvalidRequestError(
            f"Invalid categories {sorted(unknown)}. Must be among: {', '.join(CATEGORY_IDS)}"
        )
    requested.add(DEFAULT_CATEGORY)

    slug = slugify(brand or "", name)
    if session.query(Candidate.id).filter(Candidate.slug == slug).first():
        raise DuplicateCandidateError(slug)
    if candidate_id and session.get(Candidate, candidate_id) is not None:
        raise DuplicateCandidateError(candidate_id)

    random_key = (rng or random).random()
    candidate = Candidate(
        id=candidate_id or uuid.uuid4().hex,
        name=name.strip(),
        brand=brand,
        slug=slug,
        image_url=image_url,
        year=year,
        description=description,
        random_key=random_key,
    )
    session.add(candidate)

    for category in (c for c in CATEGORY_IDS if c in requested):
        session.add(
            CandidateRating(
                candidate_id=candidate.id,
                category=category,
                rating=DEFAULT_RATING,
                battles=0,
                wins=0,
                random_key=random_key,
            )
        )

    session.flush()
    logger.info(f"Added candidate: {candidate.name} ({candidate.id}) in {sorted(requested)}")
    return candidate


def get_candidate_detail(session: Session, candidate_id: str) -> dict | None:
    """Public view plus per-category stats, or None if unknown."""
    candidate = session.query(Candidate).filter(Candidate.id == candidate_id).first()
    if candidate is None:
        return None

    ratings = (
        session.query(CandidateRating)
        .filter(CandidateRating.candidate_id == candidate_id)
        .all()
    )
    order = {c: i for i, c in enumerate(CATEGORY_IDS)}
    stats = [
        {
            "category": r.category,
            "rating": r.rating,
            "battles": r.battles,
            "wins": r.wins,
            "win_rate": win_rate(r.wins, r.battles),
        }
        for r in sorted(ratings, key=lambda r: order.get(r.category, len(order)))
    ]
    return {**public_view(candidate), "description": candidate.description, "stats": stats}


def leaderboard(session: Session, category: str, limit: int = 50, offset: int = 0) -> list[dict]:
    """Candidates of a category ranked by rating (ties: more battles first, then id)."""
    rows = (
        session.query(CandidateRating, Candidate)
        .join(Candidate, Candidate.id == CandidateRating.candidate_id)
        .filter(CandidateRating.category == category)
        .order_by(
            CandidateRating.rating.desc(),
            CandidateRating.battles.desc(),
            Candidate.id,
        )
        .offset(offset)
        .limit(limit)
        .all()
    )
    return [
        {
            "rank": offset + i + 1,
            **public_view(candidate),
            "rating": rating.rating,
            "battles": rating.battles,
            "wins": rating.wins,
            "win_rate": win_rate(rating.wins, rating.battles),
        }
        for i, (rating, candidate) in enumerate(rows)
    ]


def category_snapshot(session: Session, category: str) -> tuple[list[int], list[int], int]:
    """
    Ratings of battled candidates, battle counts of all candidates, and the
    number of votes cast in a category.
    """
    rows = (
        session.query(CandidateRating.rating, CandidateRating.battles)
        .filter(CandidateRating.category == category)
        .all()
    )
    ratings = [rating for rating, battles in rows if battles > 0]
    battles = [battles for _, battles in rows]
    total_votes = (
        session.query(func.count(VoteRecord.id))
        .filter(VoteRecord.category == category)
        .scalar()
    )
    return ratings, battles, total_votes or 0
