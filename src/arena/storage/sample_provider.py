"""
Sample Data Provider

Provides built-in sample data and in-memory storage for testing and
demonstration. The catalog is a handful of well-known fragrances spread over
the four ranking categories.
"""

from __future__ import annotations

import bisect
import logging
import random
import threading
from collections.abc import Iterable

from arena.core.configs import DEFAULT_CATEGORY, DEFAULT_RATING
from arena.core.types import PoolEntry
from arena.storage.protocols import push_recent

logger = logging.getLogger(__name__)

# Sample catalog: ratings are per-category starting points, not real results
SAMPLE_CANDIDATES = [
    {
        "id": "sample_001",
        "name": "Sauvage",
        "brand": "Dior",
        "year": 2015,
        "image_url": "https://example.com/images/dior-sauvage.jpg",
        "ratings": {"overall": 1580, "masculine": 1610},
    },
    {
        "id": "sample_002",
        "name": "Aventus",
        "brand": "Creed",
        "year": 2010,
        "image_url": "https://example.com/images/creed-aventus.jpg",
        "ratings": {"overall": 1640, "masculine": 1655},
    },
    {
        "id": "sample_003",
        "name": "No. 5",
        "brand": "Chanel",
        "year": 1921,
        "image_url": "https://example.com/images/chanel-no5.jpg",
        "ratings": {"overall": 1560, "feminine": 1590},
    },
    {
        "id": "sample_004",
        "name": "Black Opium",
        "brand": "Yves Saint Laurent",
        "year": 2014,
        "image_url": "https://example.com/images/ysl-black-opium.jpg",
        "ratings": {"overall": 1490, "feminine": 1505},
    },
    {
        "id": "sample_005",
        "name": "Baccarat Rouge 540",
        "brand": "Maison Francis Kurkdjian",
        "year": 2015,
        "image_url": "https://example.com/images/mfk-br540.jpg",
        "ratings": {"overall": 1620, "unisex": 1630, "masculine": 1540, "feminine": 1600},
    },
    {
        "id": "sample_006",
        "name": "Santal 33",
        "brand": "Le Labo",
        "year": 2011,
        "image_url": "https://example.com/images/lelabo-santal33.jpg",
        "ratings": {"overall": 1530, "unisex": 1545, "masculine": 1500, "feminine": 1510},
    },
    {
        "id": "sample_007",
        "name": "Acqua di Gio",
        "brand": "Giorgio Armani",
        "year": 1996,
        "image_url": "https://example.com/images/armani-adg.jpg",
        "ratings": {"overall": 1470, "masculine": 1480},
    },
    {
        "id": "sample_008",
        "name": "La Vie Est Belle",
        "brand": "Lancome",
        "year": 2012,
        "image_url": "https://example.com/images/lancome-lveb.jpg",
        "ratings": {"overall": 1450, "feminine": 1470},
    },
    {
        "id": "sample_009",
        "name": "Wood Sage & Sea Salt",
        "brand": "Jo Malone",
        "year": 2014,
        "image_url": "https://example.com/images/jomalone-wsss.jpg",
        "ratings": {"overall": 1410, "unisex": 1430, "feminine": 1440},
    },
    {
        "id": "sample_010",
        "name": "Tobacco Vanille",
        "brand": "Tom Ford",
        "year": 2007,
        "image_url": "https://example.com/images/tomford-tv.jpg",
        "ratings": {"overall": 1550, "unisex": 1560, "masculine": 1520},
    },
]


class SampleCandidateSource:
    """
    In-memory CandidateSource.

    Keeps one list per category, sorted by random key, and serves
    `fetch_slice` with a binary search, the same access pattern an index on
    (category, random_key) gives a database.

    Attributes:
        fetch_calls: Number of `fetch_slice` calls served (for cache tests)

    Example:
        >>> source = SampleCandidateSource.from_samples(seed=7)
        >>> len(source.fetch_slice("overall", 0.0, limit=5))
        5
    """

    def __init__(self) -> None:
        """Initialize an empty source."""
        self._by_category: dict[str, list[PoolEntry]] = {}
        self._keys: dict[str, list[float]] = {}
        self.fetch_calls = 0

    @classmethod
    def from_samples(cls, seed: int = 42) -> "SampleCandidateSource":
        """Build a source from the built-in sample catalog."""
        rng = random.Random(seed)
        source = cls()
        for data in SAMPLE_CANDIDATES:
            random_key = rng.random()
            payload = {k: data[k] for k in ("name", "brand", "year", "image_url")}
            for category, rating in data["ratings"].items():
                source.add(
                    category,
                    PoolEntry(
                        id=data["id"],
                        rating=rating,
                        random_key=random_key,
                        payload=payload,
                    ),
                )
        logger.info(f"Initialized SampleCandidateSource with {len(SAMPLE_CANDIDATES)} candidates")
        return source

    @classmethod
    def from_entries(
        cls,
        entries: Iterable[PoolEntry],
        category: str = DEFAULT_CATEGORY,
    ) -> "SampleCandidateSource":
        """Build a single-category source from prepared entries."""
        source = cls()
        for entry in entries:
            source.add(category, entry)
        return source

    def add(self, category: str, entry: PoolEntry) -> None:
        """Add a candidate to a category, keeping random-key order."""
        keys = self._keys.setdefault(category, [])
        entries = self._by_category.setdefault(category, [])
        idx = bisect.bisect_right(keys, entry.random_key)
        keys.insert(idx, entry.random_key)
        entries.insert(idx, entry)

    def fetch_slice(self, category: str, start: float, limit: int) -> list[PoolEntry]:
        """Get up to `limit` entries with random key >= start."""
        self.fetch_calls += 1
        keys = self._keys.get(category, [])
        idx = bisect.bisect_left(keys, start)
        return list(self._by_category.get(category, [])[idx : idx + limit])

    def get_count(self, category: str) -> int:
        """Count candidates in a category."""
        return len(self._by_category.get(category, []))


class InMemoryHistoryStore:
    """
    In-memory HistoryStore.

    A lock stands in for the database transaction: each `record_pair` is one
    atomic read-modify-write.
    """

    def __init__(self, max_recent_pairs: int = 30) -> None:
        """
        Initialize an empty store.

        Args:
            max_recent_pairs: History cap per voter
        """
        self.max_recent_pairs = max_recent_pairs
        self._histories: dict[str, list[str]] = {}
        self._lock = threading.Lock()

    def recent_pairs(self, voter_id: str) -> list[str]:
        """Get recent pair keys for a voter, most recent first."""
        with self._lock:
            return list(self._histories.get(voter_id, []))

    def record_pair(self, voter_id: str, pair_key: str) -> None:
        """Prepend a pair key to a voter's history."""
        with self._lock:
            recent = self._histories.get(voter_id, [])
            self._histories[voter_id] = push_recent(recent, pair_key, self.max_recent_pairs)


def make_entries(
    ratings: Iterable[float],
    battles: Iterable[int] | None = None,
    prefix: str = "cand",
) -> list[PoolEntry]:
    """
    Build pool entries with sequential ids and evenly spread random keys.

    Args:
        ratings: One rating per entry
        battles: Optional battle count per entry (defaults to 0)
        prefix: Id prefix, ids are "<prefix>_000", "<prefix>_001", ...

    Returns:
        Entries with random keys i / n
    """
    ratings = list(ratings)
    battles = list(battles) if battles is not None else [0] * len(ratings)
    n = len(ratings)
    return [
        PoolEntry(
            id=f"{prefix}_{i:03d}",
            rating=rating if rating is not None else DEFAULT_RATING,
            battles=count,
            random_key=i / n,
        )
        for i, (rating, count) in enumerate(zip(ratings, battles))
    ]
