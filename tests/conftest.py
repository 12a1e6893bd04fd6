"""
Pytest configuration and shared fixtures for the feed engine tests.
"""
import random
import threading
from typing import Callable, Dict, List, Optional

import pytest

from feedrank.catalog import CatalogError
from feedrank.config import FeedSettings
from feedrank.models import BlockList, ContentItem, ProfileInputs, SourceChannel


# ============================================================================
# Fixtures: Test Data Factories
# ============================================================================

def item_id(n) -> str:
    """11-character catalog id for a small integer or short tag."""
    return f"vid{str(n):0>8}"[:11]


def build_item(n, title="Untitled clip", channel="chA", channel_name=None, views="1,000 views",
               published="5 days ago", duration="10:00", **kw) -> ContentItem:
    return ContentItem(
        id=item_id(n),
        title=title,
        channel_id=channel,
        channel_name=channel_name if channel_name is not None else f"{channel} name",
        view_count_text=views,
        published_at_text=published,
        duration_text=duration,
        **kw,
    )


@pytest.fixture
def make_item() -> Callable[..., ContentItem]:
    """Factory for ContentItems with valid ids (10:00 long, 1,000 views)."""
    return build_item


@pytest.fixture
def make_inputs() -> Callable[..., ProfileInputs]:
    def _make(watch=(), search=(), subs=(), ng_keywords=(), ng_channels=(), hidden=(),
              negative=None, buckets=(), shorts=(), genres=(), preferred_channels=()):
        return ProfileInputs(
            watch_history=tuple(watch),
            search_history=tuple(search),
            subscriptions=tuple(SourceChannel(id=c, name=f"{c} name") if isinstance(c, str) else c
                                for c in subs),
            block_list=BlockList.build(ng_keywords, ng_channels, hidden, negative),
            duration_buckets=frozenset(buckets),
            shorts_history=tuple(shorts),
            preferred_genres=tuple(genres),
            preferred_channels=tuple(preferred_channels),
        )
    return _make


@pytest.fixture
def settings() -> FeedSettings:
    """Deterministic settings: no jitter, small pages, one worker per call."""
    return FeedSettings(page_size=10, ceiling=40, jitter=0.0, channel_cap=4, discovery_ratio=0.65,
                        subs_sample=3, diversity_topics=2, diversity_per_topic=3)


@pytest.fixture
def rng() -> random.Random:
    return random.Random(7)


# ============================================================================
# Fixtures: Fake catalog
# ============================================================================

class FakeCatalog:
    """
    Scripted stand-in for CatalogClient.

    `search` may be a list (returned for every query) or a callable
    (query, page) -> list. Methods named in `fail` raise CatalogError.
    """

    def __init__(self, search=None, related=None, channels: Optional[Dict[str, List]] = None,
                 trending=None, fail=()):
        self._search = search
        self._related = related or []
        self._channels = channels or {}
        self._trending = trending or []
        self.fail = set(fail)
        self.calls = []
        self._lock = threading.Lock()

    def _record(self, name, arg):
        with self._lock:
            self.calls.append((name, arg))
        if name in self.fail:
            raise CatalogError(f"{name} unavailable")

    def calls_to(self, name):
        return [arg for n, arg in self.calls if n == name]

    def search(self, query, page=1):
        self._record("search", query)
        if callable(self._search):
            return list(self._search(query, page))
        return list(self._search or [])

    def related_to(self, item_id):
        self._record("related_to", item_id)
        return list(self._related)

    def latest_from_channel(self, channel_id):
        self._record("latest_from_channel", channel_id)
        return list(self._channels.get(channel_id, []))

    def trending(self):
        self._record("trending", None)
        return list(self._trending)


@pytest.fixture
def fake_catalog() -> Callable[..., FakeCatalog]:
    return FakeCatalog
