#!/usr/bin/env python3
"""
Seed Candidates Script

Adds candidates to the database. Every candidate joins the overall category
and starts at the default rating in each category it belongs to.

Usage:
    # Built-in sample catalog
    python scripts/seed_candidates.py --samples

    # From a CSV file
    python scripts/seed_candidates.py --csv fragrances.csv

    # From a JSON file (a list of objects with the CSV columns as keys)
    python scripts/seed_candidates.py --json fragrances.json

CSV format (optional columns: id, brand, year, image_url, description, categories):
    name,brand,year,image_url,categories
    Sauvage,Dior,2015,https://example.com/sauvage.jpg,masculine
    Santal 33,Le Labo,2011,https://example.com/santal.jpg,unisex;feminine
"""

import argparse
import csv
import json
import logging
import sys
from pathlib import Path

# Add parent to path for local imports
sys.path.insert(0, str(Path(__file__).parent.parent))
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from sqlalchemy.exc import IntegrityError

from arena.core.errors import DuplicateCandidateError, InvalidRequestError
from arena.storage.sample_provider import SAMPLE_CANDIDATES
from server.database import get_db_context, init_db
from server.database.repository import create_candidate

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def parse_categories(value) -> list[str]:
    """Accept a list or a ';'/','-separated string."""
    if not value:
        return []
    if isinstance(value, list):
        return [c.strip() for c in value if c and c.strip()]
    return [c.strip() for c in value.replace(",", ";").split(";") if c.strip()]


def add_candidate_record(db, record: dict) -> str | None:
    """Add one candidate, skipping duplicates. Returns the id, or None if skipped."""
    year = record.get("year")
    try:
        candidate = create_candidate(
            db,
            name=record.get("name", ""),
            brand=record.get("brand") or None,
            image_url=record.get("image_url") or None,
            year=int(year) if year else None,
            description=record.get("description") or None,
            categories=parse_categories(record.get("categories")),
            candidate_id=record.get("id") or None,
        )
        db.commit()
        return candidate.id
    except DuplicateCandidateError as e:
        db.rollback()
        logger.info(f"{e}, skipping")
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Could not add {record.get('name')!r}: {e.orig}, skipping")
    except (InvalidRequestError, ValueError) as e:
        db.rollback()
        logger.error(f"Failed to add {record.get('name')!r}: {e}")
    return None


def add_candidates(db, records) -> list[str]:
    """Add candidates from an iterable of records."""
    added = []
    for record in records:
        candidate_id = add_candidate_record(db, record)
        if candidate_id:
            added.append(candidate_id)
    return added


def load_csv(csv_path: Path) -> list[dict]:
    with open(csv_path, newline="", encoding="utf-8") as f:
        return list(csv.DictReader(f))


def load_json(json_path: Path) -> list[dict]:
    with open(json_path, encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError(f"{json_path} must contain a list of candidates")
    return data


def sample_records() -> list[dict]:
    """Built-in catalog, with category membership taken from its ratings."""
    return [
        {**{k: v for k, v in data.items() if k != "ratings"}, "categories": list(data["ratings"])}
        for data in SAMPLE_CANDIDATES
    ]


def main():
    parser = argparse.ArgumentParser(
        description="Seed the matchup-arena database with candidates",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--samples", action="store_true", help="Use the built-in sample catalog")
    source.add_argument("--csv", type=Path, help="CSV file with candidate metadata")
    source.add_argument("--json", type=Path, help="JSON file with a list of candidates")

    args = parser.parse_args()

    if args.csv:
        if not args.csv.exists():
            logger.error(f"CSV file not found: {args.csv}")
            sys.exit(1)
        records = load_csv(args.csv)
    elif args.json:
        if not args.json.exists():
            logger.error(f"JSON file not found: {args.json}")
            sys.exit(1)
        records = load_json(args.json)
    else:
        records = sample_records()

    init_db()
    with get_db_context() as db:
        added = add_candidates(db, records)

    logger.info(f"Added {len(added)} of {len(records)} candidates")


if __name__ == "__main__":
    main()
