"""
models.py - Canonical value types shared by every pipeline stage.

- ContentItem / SourceChannel: the strict shape the catalog adapter produces
- BlockList: explicit blocks plus implicit "not interested" keyword weights
- UserProfile: weighted keyword map built fresh per request
- ProfileInputs: read-only snapshot from the preference store
- FeedPage: one page of output
"""

import hashlib, json
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Mapping, Tuple

from .feats import parse_duration, parse_view_count


@dataclass(frozen=True)
class ContentItem:
    # Identity is `id`; immutable once fetched within a session.
    id: str
    title: str = ""
    channel_id: str = ""
    channel_name: str = ""
    view_count_text: str = ""
    published_at_text: str = ""
    duration_text: str = ""
    iso_duration: str = ""
    description_snippet: str = ""
    thumbnail_ref: str = ""

    @property
    def duration_seconds(self) -> int:
        return parse_duration(self.iso_duration, self.duration_text)

    @property
    def view_count(self) -> int:
        return parse_view_count(self.view_count_text)

    def is_short(self, max_sec: int = 60) -> bool:
        # Shorts: known duration up to max_sec, or tagged #shorts in the title.
        sec = self.duration_seconds
        return (0 < sec <= max_sec) or "#shorts" in (self.title or "").lower()


@dataclass(frozen=True)
class SourceChannel:
    id: str
    name: str = ""
    avatar_ref: str = ""


@dataclass(frozen=True)
class BlockList:
    keywords: FrozenSet[str] = frozenset()        # blocked substrings (NG words)
    channel_ids: FrozenSet[str] = frozenset()     # blocked channels (NG channels)
    hidden_ids: FrozenSet[str] = frozenset()      # explicitly hidden items
    negative_keywords: Mapping[str, float] = field(default_factory=dict)  # "not interested" counts

    @classmethod
    def build(cls, keywords=(), channel_ids=(), hidden_ids=(), negative_keywords=None):
        # Normalize blocked keywords to case-folded, non-empty strings.
        kws = frozenset(k.strip().casefold() for k in keywords if k and k.strip())
        return cls(
            keywords=kws,
            channel_ids=frozenset(c for c in channel_ids if c),
            hidden_ids=frozenset(i for i in hidden_ids if i),
            negative_keywords=dict(negative_keywords or {}),
        )


@dataclass
class UserProfile:
    keywords: Dict[str, float] = field(default_factory=dict)
    magnitude: float = 0.0

    @property
    def is_empty(self) -> bool:
        return not self.keywords

    def weight(self, keyword: str) -> float:
        return self.keywords.get(keyword, 0.0)

    def top_keywords(self, k: int) -> List[str]:
        # Heaviest first; ties broken alphabetically so the order is stable.
        ordered = sorted(self.keywords.items(), key=lambda kv: (-kv[1], kv[0]))
        return [kw for kw, _ in ordered[:k]]


@dataclass(frozen=True)
class ProfileInputs:
    watch_history: Tuple[ContentItem, ...] = ()     # most-recent-first
    search_history: Tuple[str, ...] = ()            # most-recent-first
    subscriptions: Tuple[SourceChannel, ...] = ()
    block_list: BlockList = field(default_factory=BlockList)
    duration_buckets: FrozenSet[str] = frozenset()  # subset of {"short","medium","long"}
    shorts_history: Tuple[ContentItem, ...] = ()
    preferred_genres: Tuple[str, ...] = ()
    preferred_channels: Tuple[str, ...] = ()        # channel ids

    @property
    def is_cold_start(self) -> bool:
        return not (self.watch_history or self.search_history or self.subscriptions)

    def fingerprint(self) -> str:
        # Stable digest over every field; a new value means the session must reset.
        bl = self.block_list
        payload = {
            "watch": [v.id for v in self.watch_history],
            "shorts": [v.id for v in self.shorts_history],
            "search": list(self.search_history),
            "subs": [c.id for c in self.subscriptions],
            "ng_kw": sorted(bl.keywords),
            "ng_ch": sorted(bl.channel_ids),
            "hidden": sorted(bl.hidden_ids),
            "neg": sorted((k, float(v)) for k, v in bl.negative_keywords.items()),
            "dur": sorted(self.duration_buckets),
            "genres": list(self.preferred_genres),
            "pref_ch": list(self.preferred_channels),
        }
        raw = json.dumps(payload, ensure_ascii=False, sort_keys=True)
        return hashlib.sha1(raw.encode("utf-8")).hexdigest()


@dataclass
class FeedPage:
    page: int
    items: List[ContentItem] = field(default_factory=list)
    shorts: List[ContentItem] = field(default_factory=list)
    has_more: bool = True
