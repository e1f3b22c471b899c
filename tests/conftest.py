"""Test fixtures for the matchup arena."""

import random

import pytest

from arena.matchmaking import WorkingSetCache
from arena.storage.sample_provider import InMemoryHistoryStore, SampleCandidateSource, make_entries
from server.database import init_db, make_engine, make_session_factory
from server.database.repository import create_candidate
from server.database.transaction import run_in_transaction


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def rng():
    """Seeded random source so matchmaking is reproducible."""
    return random.Random(1234)


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def cache(fake_clock):
    """Working-set cache driven by the fake clock."""
    return WorkingSetCache(ttl_seconds=300.0, clock=fake_clock)


@pytest.fixture
def sample_source():
    """Provide the built-in sample catalog."""
    return SampleCandidateSource.from_samples()


@pytest.fixture
def history():
    return InMemoryHistoryStore(max_recent_pairs=30)


@pytest.fixture
def spread_entries():
    """Ten entries rated 1400..1850 in steps of 50, with varied battle counts."""
    return make_entries(
        ratings=[1400 + 50 * i for i in range(10)],
        battles=[0, 0, 1, 2, 5, 8, 13, 21, 34, 55],
    )


@pytest.fixture
def engine():
    """Fresh in-memory SQLite database per test."""
    engine = make_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def file_session_factory(tmp_path):
    """SQLite file database, for tests that need truly separate connections."""
    engine = make_engine(f"sqlite:///{tmp_path / 'arena.db'}")
    init_db(engine)
    yield make_session_factory(engine)
    engine.dispose()


def seed(session_factory, count: int = 6, categories=("masculine",)) -> list[str]:
    """Add `count` candidates, the first half also in `categories`. Returns their ids."""
    ids = []
    for i in range(count):
        def work(session, i=i):
            candidate = create_candidate(
                session,
                name=f"Fragrance {i}",
                brand="House",
                year=2000 + i,
                categories=list(categories) if i < count // 2 else [],
                candidate_id=f"cand_{i:03d}",
                rng=random.Random(i),
            )
            return candidate.id

        ids.append(run_in_transaction(session_factory, work))
    return ids


@pytest.fixture
def seeder():
    """The `seed` helper, for tests that pick their own database."""
    return seed


@pytest.fixture
def seeded(session_factory):
    """Six candidates in overall, three of them also in masculine."""
    return seed(session_factory)


@pytest.fixture
def client(session_factory, cache):
    """API test client wired to the in-memory database."""
    from fastapi.testclient import TestClient

    from server.database import get_db, get_session_factory
    from server.main import app, get_pool_cache, get_rng

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    shared_rng = random.Random(99)
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_pool_cache] = lambda: cache
    app.dependency_overrides[get_rng] = lambda: shared_rng

    yield TestClient(app)

    app.dependency_overrides.clear()
