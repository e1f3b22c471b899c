"""Server configuration."""

import os
from pathlib import Path

from dotenv import load_dotenv

from arena.core.configs import CATEGORIES as ARENA_CATEGORIES, DEFAULT_CATEGORY

# Load .env file from project root
load_dotenv(Path(__file__).parent.parent / ".env")

# Database - use PostgreSQL if DATABASE_URL is set, otherwise SQLite
_env_database_url = os.getenv("DATABASE_URL")
if _env_database_url and _env_database_url.startswith("postgresql"):
    DATABASE_URL = _env_database_url
else:
    DATABASE_URL = "sqlite:///./data/arena.db"

# Server
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8002"))

# CORS
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*").split(",")

# Matchmaking
POOL_SIZE = int(os.getenv("POOL_SIZE", "30"))
WORKING_SET_SIZE = int(os.getenv("WORKING_SET_SIZE", "200"))
POOL_CACHE_TTL_SECONDS = float(os.getenv("POOL_CACHE_TTL_SECONDS", "300"))
MAX_RECENT_PAIRS = int(os.getenv("MAX_RECENT_PAIRS", "30"))

# Vote transactions are retried this many times on write conflicts
VOTE_MAX_ATTEMPTS = int(os.getenv("VOTE_MAX_ATTEMPTS", "5"))

# Ranking categories with labels, the default category first
CATEGORIES = [{"id": category, "label": category.title()} for category in ARENA_CATEGORIES]
CATEGORY_IDS = [c["id"] for c in CATEGORIES]
