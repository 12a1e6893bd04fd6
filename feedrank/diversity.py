"""
diversity.py - Per-channel capping and ratio-based interleaving.

- cap_per_channel(): one pass over a ranked list, at most N items per channel
- ratio_pattern(): ratio -> small repeating (discovery, general) pattern
- mix_feeds(): walk two ranked lists following the pattern; append the
  leftover of whichever list outlives the other
"""

from collections import defaultdict
from fractions import Fraction
from typing import List, Sequence, Tuple, TypeVar

from .errors import FeedInputError

T = TypeVar("T")

MAX_PATTERN = 6 # longest repeating cycle considered

def _channel_key(item) -> str:
    # Channel id, falling back to a normalized channel name.
    return (getattr(item, "channel_id", "") or "").strip() or (getattr(item, "channel_name", "") or "").strip().lower()

def cap_per_channel(ranked: Sequence, cap: int) -> list:
    """
    Keep at most `cap` entries per channel, preserving order.

    Accepts either items or (item, score) pairs.
    """
    if cap < 1:
        raise FeedInputError(f"channel cap must be >= 1, got {cap}")
    out, taken = [], defaultdict(int)
    for entry in ranked:
        item = entry[0] if isinstance(entry, tuple) else entry
        ch = _channel_key(item)
        if taken[ch] >= cap:
            continue
        taken[ch] += 1
        out.append(entry)
    return out

def ratio_pattern(ratio: float) -> Tuple[int, int]:
    # 0.65 -> (2, 1): closest fraction with a cycle of at most MAX_PATTERN items.
    if not 0.0 <= ratio <= 1.0:
        raise FeedInputError(f"discovery ratio must be within [0, 1], got {ratio}")
    f = Fraction(ratio).limit_denominator(MAX_PATTERN)
    return f.numerator, f.denominator - f.numerator

def mix_feeds(discovery: List[T], general: List[T], ratio: float) -> List[T]:
    # Interleave by the ratio pattern; once one side runs out, append the rest of the other.
    n_disc, n_gen = ratio_pattern(ratio)
    if n_gen == 0:
        return list(discovery) + list(general)
    if n_disc == 0:
        return list(general) + list(discovery)
    out = []
    i = j = 0
    while i < len(discovery) and j < len(general):
        take = discovery[i:i + n_disc]
        out.extend(take); i += len(take)
        if i >= len(discovery):
            break
        take = general[j:j + n_gen]
        out.extend(take); j += len(take)
    out.extend(discovery[i:])
    out.extend(general[j:])
    return out
