"""
candidates.py - Multi-strategy candidate aggregation against the catalog.

Strategies (each one independent unit of work, run concurrently):
- interest : top-K profile keywords batched into OR-combined searches
             (cold-start seed queries when the profile is empty)
- related  : related items of the most recent watch
- subs     : latest uploads of a random subset of subscriptions (+ preferred channels)
- trend    : general/trending feed; page 1 always, later pages only on under-production
- diverse  : one small search per rotated fixed topic category

A failing strategy contributes an empty list and is logged. The merged pool
keeps first occurrence per id and drops malformed, hidden and
already-emitted ids.
"""

import logging, random
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence

from . import categories
from .config import FeedSettings
from .feats import is_valid_item_id
from .models import ContentItem, ProfileInputs, UserProfile

log = logging.getLogger(__name__)

DISCOVERY = "discovery"
GENERAL = "general"


@dataclass
class StrategyCall:
    name: str
    lane: str
    fetch: Callable[[], List[ContentItem]]
    limit: Optional[int] = None


@dataclass
class CandidatePool:
    items: List[ContentItem] = field(default_factory=list)
    lanes: Dict[str, str] = field(default_factory=dict)   # item id -> lane
    failed: List[str] = field(default_factory=list)       # strategy names that errored
    attempted: int = 0

    @property
    def all_failed(self) -> bool:
        return self.attempted > 0 and len(self.failed) == self.attempted


def chunk_queries(keywords: Sequence[str], size: int) -> List[str]:
    # ["a","b","c","d","e"], 4 -> ["a OR b OR c OR d", "e"]
    size = max(1, size)
    return [" OR ".join(keywords[i:i + size]) for i in range(0, len(keywords), size)]

def merge_unique(batches, hidden_ids=frozenset(), seen_ids=frozenset()):
    # Concatenate (lane, items) batches; first occurrence wins; drop malformed, hidden and seen ids.
    out, lanes = [], {}
    for lane, items in batches:
        for it in items:
            if not is_valid_item_id(it.id):
                continue
            if it.id in lanes or it.id in hidden_ids or it.id in seen_ids:
                continue
            lanes[it.id] = lane
            out.append(it)
    return out, lanes


class CandidateAggregator:
    def __init__(self, catalog, settings: FeedSettings = None, rng: random.Random = None):
        self.catalog = catalog
        self.settings = settings or FeedSettings()
        self.rng = rng or random.Random()

    # planning

    def _interest_calls(self, profile: UserProfile, page: int) -> List[StrategyCall]:
        s = self.settings
        if profile.is_empty:
            queries = list(s.cold_start_queries)
            name = "cold_start"
        else:
            queries = chunk_queries(profile.top_keywords(s.top_k_keywords), s.query_chunk)
            name = "interest"
        return [
            StrategyCall(f"{name}:{q}", DISCOVERY, lambda q=q: self.catalog.search(q, page))
            for q in queries
        ]

    def _related_calls(self, inputs: ProfileInputs) -> List[StrategyCall]:
        if not inputs.watch_history:
            return []
        last_id = inputs.watch_history[0].id
        return [StrategyCall(f"related:{last_id}", DISCOVERY,
                             lambda: self.catalog.related_to(last_id), self.settings.related_max)]

    def _subscription_calls(self, inputs: ProfileInputs) -> List[StrategyCall]:
        s = self.settings
        subs = list(inputs.subscriptions)
        picked = [c.id for c in self.rng.sample(subs, min(s.subs_sample, len(subs)))]
        extra = [cid for cid in inputs.preferred_channels if cid and cid not in picked][:s.subs_sample]
        return [
            StrategyCall(f"subs:{cid}", GENERAL, lambda cid=cid: self.catalog.latest_from_channel(cid),
                         s.subs_per_channel)
            for cid in picked + extra
        ]

    def _trend_call(self) -> StrategyCall:
        return StrategyCall("trend", GENERAL, self.catalog.trending)

    def _diversity_calls(self, page: int) -> List[StrategyCall]:
        s = self.settings
        return [
            StrategyCall(f"diverse:{t}", DISCOVERY, lambda t=t: self.catalog.search(t, page),
                         s.diversity_per_topic)
            for t in categories.rotate(page, s.diversity_topics)
        ]

    def plan(self, profile: UserProfile, inputs: ProfileInputs, page: int) -> List[StrategyCall]:
        calls = self._interest_calls(profile, page)
        calls += self._related_calls(inputs)
        calls += self._subscription_calls(inputs)
        if page == 1 or self.settings.trend_on_later_pages:
            calls.append(self._trend_call())
        calls += self._diversity_calls(page)
        return calls

    # execution

    def _run_one(self, call: StrategyCall) -> List[ContentItem]:
        items = list(call.fetch() or [])
        return items[:call.limit] if call.limit is not None else items

    def run(self, calls: List[StrategyCall]):
        # Best-effort join: wait for every call, tolerate individual failures.
        results: List[List[ContentItem]] = [[] for _ in calls]
        failed = []
        if not calls:
            return results, failed
        workers = max(1, min(self.settings.workers, len(calls)))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {executor.submit(self._run_one, c): i for i, c in enumerate(calls)}
            for future in as_completed(futures):
                i = futures[future]
                try:
                    results[i] = future.result()
                except Exception as e:
                    failed.append(calls[i].name)
                    log.warning("[aggregate] strategy=%s failed: %s", calls[i].name, e)
        return results, failed

    def aggregate(self, profile: UserProfile, inputs: ProfileInputs, page: int,
                  seen_ids=frozenset()) -> CandidatePool:
        calls = self.plan(profile, inputs, page)
        results, failed = self.run(calls)
        hidden = inputs.block_list.hidden_ids
        items, lanes = merge_unique(
            ((c.lane, r) for c, r in zip(calls, results)), hidden, seen_ids
        )

        has_trend = any(c.name == "trend" for c in calls)
        if not has_trend and len(items) < self.settings.page_size:
            # later pages: top up from the general feed when the rest under-produce
            trend = self._trend_call()
            extra, extra_failed = self.run([trend])
            calls.append(trend)
            failed += extra_failed
            more, more_lanes = merge_unique([(GENERAL, extra[0])], hidden, set(seen_ids) | set(lanes))
            items += more
            lanes.update(more_lanes)

        log.info("[aggregate] page=%d strategies=%d failed=%d candidates=%d",
                 page, len(calls), len(failed), len(items))
        return CandidatePool(items=items, lanes=lanes, failed=failed, attempted=len(calls))
