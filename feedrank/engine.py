"""
engine.py
Feed engine: the one entry point callers use.

Pipeline per page:
  SessionState (page, seen ids) -> build_profile -> CandidateAggregator
  -> apply_filters -> score_items -> cap_per_channel (per lane)
  -> mix_feeds -> unseen/shorts split -> SessionState.commit

A session lives as long as the ProfileInputs fingerprint is unchanged; any
change (new history, NG edit, preference edit) starts a fresh session and
bumps the generation so in-flight results for the old inputs are discarded.
"""

import logging, random
from typing import List, Optional

from .candidates import DISCOVERY, CandidateAggregator
from .config import FeedSettings
from .diversity import cap_per_channel, mix_feeds, ratio_pattern
from .errors import FeedInputError
from .filters import apply_filters, validate_buckets
from .models import ContentItem, FeedPage, ProfileInputs, UserProfile
from .profile import build_profile
from .ranker import score_items
from .session import SessionState

log = logging.getLogger(__name__)

__all__ = ["FeedEngine", "FeedInputError"]


class FeedEngine:
    """
    Personalized feed for a single logical owner.

    Not thread-safe for concurrent page loads: callers serialize `load_page`
    per engine. `reset()` may be called from another thread while a page is
    in flight; that page is then dropped instead of committed.
    """

    def __init__(self, catalog, settings: FeedSettings = None, rng: random.Random = None):
        self.settings = settings or FeedSettings()
        if self.settings.channel_cap < 1:
            raise FeedInputError(f"channel cap must be >= 1, got {self.settings.channel_cap}")
        ratio_pattern(self.settings.discovery_ratio)
        self.rng = rng or random.Random()
        self.catalog = catalog
        self.aggregator = CandidateAggregator(catalog, self.settings, rng=self.rng)
        self.session: Optional[SessionState] = None
        self.last_contrib = {}
        self._generation = 0
        self._profile = UserProfile()

    # session lifecycle

    def reset(self, inputs: Optional[ProfileInputs] = None) -> SessionState:
        # Start a new session; anything still in flight for the old one is discarded.
        self._generation += 1
        self.session = SessionState(
            fingerprint=inputs.fingerprint() if inputs is not None else "",
            generation=self._generation,
            ceiling=self.settings.ceiling,
        )
        log.debug("[session] reset generation=%d", self._generation)
        return self.session

    def _session_for(self, inputs: ProfileInputs) -> SessionState:
        fp = inputs.fingerprint()
        if self.session is None or self.session.fingerprint != fp:
            return self.reset(inputs)
        return self.session

    def current_profile(self) -> UserProfile:
        return self._profile

    # public API

    def get_feed(self, inputs: ProfileInputs, page: Optional[int] = None) -> List[ContentItem]:
        return self.load_page(inputs, page).items

    def load_page(self, inputs: ProfileInputs, page: Optional[int] = None) -> FeedPage:
        if not isinstance(inputs, ProfileInputs):
            raise FeedInputError("profile inputs are required")
        if page is not None and (isinstance(page, bool) or not isinstance(page, int) or page < 1):
            raise FeedInputError(f"page must be a positive integer, got {page!r}")
        validate_buckets(inputs.duration_buckets)

        session = self._session_for(inputs)
        if page == 1 and session.page != 1:
            session = self.reset(inputs)
        page = page or session.page

        if session.ceiling_reached:
            session.has_more = False
            return FeedPage(page=page, has_more=False)

        generation = session.generation
        items, shorts, profile, contrib = self._run_pipeline(inputs, page, frozenset(session.seen_ids))

        if generation != self._generation or self.session is not session:
            log.info("[feed] discarded stale page=%d generation=%d (current=%d)",
                     page, generation, self._generation)
            return FeedPage(page=page, has_more=True)

        self._profile = profile
        self.last_contrib = contrib
        items, shorts = session.commit(page, session.unseen(items), session.unseen(shorts))
        if not items and not shorts:
            log.info("[feed] nothing to show page=%d cold_start=%s", page, inputs.is_cold_start)
        return FeedPage(page=page, items=items, shorts=shorts, has_more=session.has_more)

    # pipeline

    def _run_pipeline(self, inputs: ProfileInputs, page: int, seen_ids):
        s = self.settings
        profile = build_profile(inputs, s)

        pool = self.aggregator.aggregate(profile, inputs, page, seen_ids=seen_ids)
        if pool.all_failed:
            log.warning("[feed] every candidate strategy failed page=%d", page)
        survivors = apply_filters(pool.items, inputs.block_list, inputs.duration_buckets,
                                  s.negative_threshold)

        recent_ids = {v.id for v in inputs.watch_history[:s.history_window]}
        recent_ids |= {v.id for v in inputs.shorts_history[:s.shorts_window]}
        ranked, contrib = score_items(survivors, profile, recent_ids, s, rng=self.rng,
                                      return_contribs=True)

        discovery = cap_per_channel([p for p in ranked if pool.lanes.get(p[0].id) == DISCOVERY], s.channel_cap)
        general = cap_per_channel([p for p in ranked if pool.lanes.get(p[0].id) != DISCOVERY], s.channel_cap)
        mixed = mix_feeds([it for it, _ in discovery], [it for it, _ in general], s.discovery_ratio)
        mixed = cap_per_channel(mixed, s.channel_cap)

        mixed = [it for it in mixed if it.id not in seen_ids]
        shorts = [it for it in mixed if it.is_short(s.shorts_max_sec)]
        items = [it for it in mixed if not it.is_short(s.shorts_max_sec)]
        log.info("[feed] page=%d candidates=%d kept=%d items=%d shorts=%d",
                 page, len(pool.items), len(survivors), min(len(items), s.page_size), len(shorts))
        return items[:s.page_size], shorts[:s.page_size], profile, contrib
