"""
Configuration
=============
Environment-driven settings for the MovieHub client core.

Values are read once at import time from the process environment (and a
local ``.env`` file when present).
"""
from dotenv import load_dotenv
import os
import logging

load_dotenv()

# Remote service - Android emulator reaches the host machine through 10.0.2.2
API_BASE_URL = os.getenv("MOVIEHUB_API_URL", "http://10.0.2.2:8080")
API_TIMEOUT = float(os.getenv("MOVIEHUB_API_TIMEOUT", "10"))

# Durable key-value store for the session record
STORE_URL = os.getenv("MOVIEHUB_STORE_URL", "sqlite:///moviehub_store.db")
STORE_ECHO = os.getenv("MOVIEHUB_STORE_ECHO", "false").lower() == "true"

# Catalog snapshot lifetime in seconds
CATALOG_CACHE_TTL = int(os.getenv("CATALOG_CACHE_TTL", "300"))

# Derived view sizes
POPULAR_LIMIT = int(os.getenv("POPULAR_LIMIT", "10"))
LATEST_LIMIT = int(os.getenv("LATEST_LIMIT", "10"))
SIMILAR_LIMIT = int(os.getenv("SIMILAR_LIMIT", "6"))

PLACEHOLDER_POSTER = "https://via.placeholder.com/150x225?text=No+Image"

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


def configure_logging(level: str = None) -> None:
    """Configure root logging with the package's standard format."""
    logging.basicConfig(
        level=getattr(logging, (level or LOG_LEVEL).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
