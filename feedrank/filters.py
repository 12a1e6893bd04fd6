"""
filters.py - Hard/soft exclusion rules applied before scoring.

Rules, evaluated in order (first match drops the item):
1. ng_keyword : a blocked substring occurs in title + channel + description (case-folded)
2. ng_channel : the item's channel id is blocked
3. duration   : buckets selected and the known duration fits none of them
4. negative   : summed "not interested" weight over the item's keywords exceeds the threshold
"""

import logging
from typing import Iterable, List, Optional

from .config import NEGATIVE_THRESHOLD
from .errors import FeedInputError
from .feats import DURATION_BUCKETS, duration_bucket, item_keywords
from .models import BlockList, ContentItem

log = logging.getLogger(__name__)

def validate_buckets(buckets: Iterable[str]) -> frozenset:
    # Unknown bucket names are a caller error.
    out = frozenset(b.strip().lower() for b in (buckets or ()) if b and b.strip())
    bad = out - set(DURATION_BUCKETS)
    if bad:
        raise FeedInputError(f"unknown duration bucket(s): {sorted(bad)}")
    return out

def normalized_text(item: ContentItem) -> str:
    return f"{item.title} {item.channel_name} {item.description_snippet}".casefold()

def matches_ng_keyword(item: ContentItem, keywords) -> bool:
    if not keywords:
        return False
    text = normalized_text(item)
    return any(k.casefold() in text for k in keywords if k)

def duration_mismatch(item: ContentItem, buckets) -> bool:
    # Unknown (0) durations are never penalized.
    if not buckets:
        return False
    sec = item.duration_seconds
    return sec > 0 and duration_bucket(sec) not in buckets

def negative_score(item: ContentItem, negative_keywords) -> float:
    if not negative_keywords:
        return 0.0
    return float(sum(negative_keywords.get(k, 0) for k in item_keywords(item)))

def drop_reason(item: ContentItem, block_list: BlockList, buckets=frozenset(),
                threshold: float = NEGATIVE_THRESHOLD) -> Optional[str]:
    # Name of the first rule that drops the item, or None if it survives.
    if matches_ng_keyword(item, block_list.keywords):
        return "ng_keyword"
    if item.channel_id and item.channel_id in block_list.channel_ids:
        return "ng_channel"
    if duration_mismatch(item, buckets):
        return "duration"
    if negative_score(item, block_list.negative_keywords) > threshold:
        return "negative"
    return None

def apply_filters(items: List[ContentItem], block_list: BlockList, buckets=frozenset(),
                  threshold: float = NEGATIVE_THRESHOLD) -> List[ContentItem]:
    buckets = validate_buckets(buckets)
    out, dropped = [], {}
    for it in items:
        reason = drop_reason(it, block_list, buckets, threshold)
        if reason:
            dropped[reason] = dropped.get(reason, 0) + 1
            continue
        out.append(it)
    if dropped:
        log.debug("[filter] kept=%d dropped=%s", len(out), dropped)
    return out
