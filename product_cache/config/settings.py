# product_cache/config/settings.py

"""Central configuration for the product_cache engine."""

import os
from pathlib import Path

from curl_cffi.requests import BrowserTypeLiteral
from dotenv import load_dotenv

load_dotenv()


def _parse_logger_levels(raw: str) -> dict[str, str]:
    """Parse ``"remote=DEBUG,store=INFO"`` into a name-to-level map."""
    levels: dict[str, str] = {}
    for pair in raw.split(","):
        name, sep, level = pair.partition("=")
        if sep and name.strip() and level.strip():
            levels[name.strip()] = level.strip()
    return levels


class Settings:
    """Central configuration for the product_cache engine."""

    # --- Remote API ---
    API_BASE_URL: str = os.getenv(
        "PRODUCT_CACHE_API_BASE_URL", "https://dummyjson.com"
    )
    PRODUCTS_PATH: str = "/products"
    PAGE_SIZE: int = int(os.getenv("PRODUCT_CACHE_PAGE_SIZE", "30"))

    # --- Requests ---
    REQUEST_DELAY: float = 1.0          # Base backoff between retries
    REQUEST_TIMEOUT: int = int(         # Seconds before a request times out
        os.getenv("PRODUCT_CACHE_REQUEST_TIMEOUT", "15")
    )
    MAX_RETRIES: int = 3                # Retry count on transient failures

    # --- Resilience ---
    CIRCUIT_BREAKER_THRESHOLD: int = 3  # Consecutive failures to trip
    CIRCUIT_BREAKER_COOLDOWN: float = 60.0
    MAX_DELAY_MULTIPLIER: int = 8       # Cap for adaptive backoff

    # --- Connectivity ---
    PROBE_URL: str = os.getenv(
        "PRODUCT_CACHE_PROBE_URL", "https://dummyjson.com/test"
    )
    PROBE_TIMEOUT: int = 5              # Seconds per connectivity probe

    # --- Browser Impersonation ---
    IMPERSONATE_BROWSER: BrowserTypeLiteral = "chrome131"
    DEFAULT_HEADERS: dict[str, str] = {
        "Accept": "application/json",
        "Accept-Language": "en-US,en;q=0.9",
    }

    # --- Logging ---
    LOG_LEVEL: str = os.getenv("PRODUCT_CACHE_LOG_LEVEL", "WARNING")
    # "<logger suffix>=<level>" pairs, comma separated
    LOGGER_LEVELS: dict[str, str] = _parse_logger_levels(
        os.getenv("PRODUCT_CACHE_LOGGER_LEVELS", "connectivity=INFO")
    )

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    CACHE_DB_PATH: Path = Path(
        os.getenv(
            "PRODUCT_CACHE_DB_PATH",
            str(BASE_DIR / "data" / "product_cache.db"),
        )
    )
    LOGS_DIR: Path = BASE_DIR / "logs"
