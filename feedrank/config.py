"""
config.py - Environment-based configuration for the feed engine.

- Reads tunables from environment variables (with defaults)
- Provides helper for parsing booleans from env
- FeedSettings snapshots the knobs so tests can override them per engine
"""

import os
from dataclasses import dataclass, field, replace
from typing import Tuple

def bool_from_env(name: str, default: bool = False) -> bool:
    # Parse boolean env var into True/False with default fallback.
    v = os.getenv(name)
    if v is None:
        return default
    return v.strip().lower() in {"1", "true", "yes", "y", "on"}

# Catalog collaborator
CATALOG_BASE_URL = os.getenv("CATALOG_BASE_URL", "http://localhost:3000")
CATALOG_TIMEOUT_SEC = float(os.getenv("CATALOG_TIMEOUT_SEC", "10"))
CATALOG_RETRIES = int(os.getenv("CATALOG_RETRIES", "3"))
CATALOG_WORKERS = int(os.getenv("CATALOG_WORKERS", "8")) # concurrent strategy calls

# Paging
FEED_PAGE_SIZE = max(1, min(150, int(os.getenv("FEED_PAGE_SIZE", "100"))))
FEED_CEILING = int(os.getenv("FEED_CEILING", "800")) # max main-feed items per session

# Profile windows (bounded prefixes; older entries decay to zero)
HISTORY_WINDOW = int(os.getenv("HISTORY_WINDOW", "50"))
SEARCH_WINDOW = int(os.getenv("SEARCH_WINDOW", "30"))
SHORTS_WINDOW = int(os.getenv("SHORTS_WINDOW", "30"))

# Candidate strategies
TOP_K_KEYWORDS = int(os.getenv("TOP_K_KEYWORDS", "12"))
QUERY_CHUNK = int(os.getenv("QUERY_CHUNK", "4"))
RELATED_MAX = int(os.getenv("RELATED_MAX", "20"))
SUBS_SAMPLE = int(os.getenv("SUBS_SAMPLE", "3"))
SUBS_PER_CHANNEL = int(os.getenv("SUBS_PER_CHANNEL", "8"))
DIVERSITY_TOPICS = int(os.getenv("DIVERSITY_TOPICS", "3"))
DIVERSITY_PER_TOPIC = int(os.getenv("DIVERSITY_PER_TOPIC", "5"))
TREND_ON_LATER_PAGES = bool_from_env("TREND_ON_LATER_PAGES", False)

# Filtering / scoring
NEGATIVE_THRESHOLD = float(os.getenv("NEGATIVE_THRESHOLD", "2.0"))
HISTORY_PENALTY = float(os.getenv("HISTORY_PENALTY", "0.1"))
FRESH_WINDOW_DAYS = float(os.getenv("FRESH_WINDOW_DAYS", "3"))
FRESH_BONUS = float(os.getenv("FRESH_BONUS", "5.0"))
JITTER = float(os.getenv("JITTER", "0.20")) # +/- fraction of the score

# Diversity / mixing
CHANNEL_CAP = int(os.getenv("CHANNEL_CAP", "4")) # max per channel in ranked output
DISCOVERY_RATIO = float(os.getenv("DISCOVERY_RATIO", "0.65"))

SHORTS_MAX_SEC = int(os.getenv("SHORTS_MAX_SEC", "60"))
API_MAX_SESSIONS = int(os.getenv("API_MAX_SESSIONS", "1000")) # engines kept by the HTTP service
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

COLD_START_QUERIES: Tuple[str, ...] = ("Trending Japan", "Popular Music", "Gaming", "Cooking", "Vlog")


@dataclass(frozen=True)
class FeedSettings:
    # Per-engine snapshot of the knobs above.
    page_size: int = FEED_PAGE_SIZE
    ceiling: int = FEED_CEILING
    history_window: int = HISTORY_WINDOW
    search_window: int = SEARCH_WINDOW
    shorts_window: int = SHORTS_WINDOW
    top_k_keywords: int = TOP_K_KEYWORDS
    query_chunk: int = QUERY_CHUNK
    related_max: int = RELATED_MAX
    subs_sample: int = SUBS_SAMPLE
    subs_per_channel: int = SUBS_PER_CHANNEL
    diversity_topics: int = DIVERSITY_TOPICS
    diversity_per_topic: int = DIVERSITY_PER_TOPIC
    trend_on_later_pages: bool = TREND_ON_LATER_PAGES
    negative_threshold: float = NEGATIVE_THRESHOLD
    history_penalty: float = HISTORY_PENALTY
    fresh_window_days: float = FRESH_WINDOW_DAYS
    fresh_bonus: float = FRESH_BONUS
    jitter: float = JITTER
    channel_cap: int = CHANNEL_CAP
    discovery_ratio: float = DISCOVERY_RATIO
    shorts_max_sec: int = SHORTS_MAX_SEC
    workers: int = CATALOG_WORKERS
    cold_start_queries: Tuple[str, ...] = field(default=COLD_START_QUERIES)

    def with_overrides(self, **kw) -> "FeedSettings":
        return replace(self, **kw)
