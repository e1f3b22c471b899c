"""Tests for the candidate seeding script."""

import importlib.util
from pathlib import Path

import pytest
from sqlalchemy.exc import IntegrityError

from server.database.models import Candidate

SCRIPT = Path(__file__).parent.parent / "scripts" / "seed_candidates.py"


@pytest.fixture(scope="module")
def seed_script():
    module_spec = importlib.util.spec_from_file_location("seed_candidates", SCRIPT)
    module = importlib.util.module_from_spec(module_spec)
    module_spec.loader.exec_module(module)
    return module


class TestAddCandidates:
    """Tests for add_candidates."""

    def test_parse_categories(self, seed_script):
        assert seed_script.parse_categories("unisex; feminine") == ["unisex", "feminine"]
        assert seed_script.parse_categories(["masculine", " "]) == ["masculine"]
        assert seed_script.parse_categories(None) == []

    def test_skips_taken_ids(self, seed_script, session_factory):
        """A record reusing an existing id is skipped and the import carries on."""
        records = [
            {"id": "cand_a", "name": "Sauvage", "brand": "Dior"},
            {"id": "cand_a", "name": "Aventus", "brand": "Creed"},
            {"name": "Santal 33", "brand": "Le Labo", "categories": "unisex"},
        ]

        with session_factory() as db:
            added = seed_script.add_candidates(db, records)

        assert len(added) == 2
        assert added[0] == "cand_a"
        with session_factory() as session:
            assert session.get(Candidate, "cand_a").name == "Sauvage"
            assert session.query(Candidate).count() == 2

    def test_constraint_failures_are_skipped(self, seed_script, session_factory, monkeypatch):
        """A row rejected by the database is rolled back and later rows still land."""
        create = seed_script.create_candidate

        def create_or_fail(db, name, **kwargs):
            if name == "Sauvage":
                raise IntegrityError("INSERT ...", {}, Exception("UNIQUE constraint failed"))
            return create(db, name, **kwargs)

        monkeypatch.setattr(seed_script, "create_candidate", create_or_fail)
        records = [{"name": "Sauvage", "brand": "Dior"}, {"name": "Aventus", "brand": "Creed"}]

        with session_factory() as db:
            added = seed_script.add_candidates(db, records)

        assert len(added) == 1
        with session_factory() as session:
            assert session.query(Candidate).one().name == "Aventus"

    def test_invalid_records_are_skipped(self, seed_script, session_factory):
        records = [{"name": "  "}, {"name": "Aventus", "year": "n/a"}, {"name": "Aventus"}]

        with session_factory() as db:
            added = seed_script.add_candidates(db, records)

        assert len(added) == 1
