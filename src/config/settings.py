# src/config/settings.py

"""Central configuration for the catalog_sync engine."""

import os
from pathlib import Path

from curl_cffi.requests import BrowserTypeLiteral
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Central configuration for the catalog_sync engine."""

    # --- Remote store ---
    STORE_URL: str = os.getenv("CATALOG_STORE_URL", "")
    COLLECTION_NAME: str = os.getenv("CATALOG_COLLECTION", "products")
    POLL_INTERVAL: float = float(
        os.getenv("CATALOG_POLL_INTERVAL", "5.0")
    )                                   # Seconds between change polls
    REQUEST_DELAY: float = 1.0          # Base backoff between retries
    REQUEST_TIMEOUT: int = 15           # Seconds before a request times out
    MAX_RETRIES: int = 3                # Retry count on transient failures

    # --- Sync ---
    READY_TIMEOUT: float = 30.0         # Max wait for the first snapshot
    HEALTH_SLOW_MS: float = 2000.0      # Latency above this is "slow"

    # --- Catalog schema ---
    UNNAMED_PRODUCT: str = "Unnamed Product"
    DEFAULT_PRICE_RANGE: tuple[float, float] = (0.0, 9999.0)

    # --- Query engine ---
    QUERY_CACHE_SIZE: int = 16          # Memoized result sets kept

    # --- Browser Impersonation ---
    IMPERSONATE_BROWSER: BrowserTypeLiteral = "chrome131"
    DEFAULT_HEADERS: dict[str, str] = {
        "Accept": "application/json",
        "Accept-Language": "en-US,en;q=0.9",
        "Content-Type": "application/json",
    }

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    RESULTS_DIR: Path = BASE_DIR / "results"
    LOGS_DIR: Path = BASE_DIR / "logs"
