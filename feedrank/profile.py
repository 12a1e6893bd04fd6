"""
profile.py - Recency-weighted keyword profile from history and subscriptions.

- Search terms: highest base weight (explicit intent), decayed by position
- Watch history: title keywords at a medium weight, channel-name keywords
  boosted by a channel-affinity factor
- Shorts history: like watch history at a lower base weight
- Subscriptions and preferred genres: flat weight, not decayed
- Only a bounded prefix of each history is consulted; older entries add nothing
"""

import math
from collections import defaultdict
from typing import Iterable, List

import numpy as np

from .config import FeedSettings
from .feats import extract_keywords
from .models import ProfileInputs, UserProfile

# (base weight, half-life constant)
SEARCH_WEIGHT = (8.0, 10.0)
WATCH_WEIGHT = (5.0, 15.0)
SHORTS_WEIGHT = (3.5, 15.0)
CHANNEL_AFFINITY = 1.5
SUBSCRIPTION_WEIGHT = 3.0
GENRE_WEIGHT = 4.0

def decay(base: float, index: int, half_life: float) -> float:
    # base * exp(-i / halfLife); index 0 is the most recent entry.
    return base * math.exp(-index / half_life)

def calculate_magnitude(weights: Iterable[float]) -> float:
    # Euclidean norm over keyword weights.
    arr = np.fromiter(weights, dtype=float)
    return float(np.linalg.norm(arr)) if arr.size else 0.0

def build_profile(inputs: ProfileInputs, settings: FeedSettings = None) -> UserProfile:
    # Accumulate keyword weights additively across all signal classes.
    settings = settings or FeedSettings()
    kw = defaultdict(float)

    def add(text, weight):
        for k in extract_keywords(text or ""):
            kw[k] += weight

    base, half = SEARCH_WEIGHT
    for i, term in enumerate(inputs.search_history[:settings.search_window]):
        add(term, decay(base, i, half))

    base, half = WATCH_WEIGHT
    for i, item in enumerate(inputs.watch_history[:settings.history_window]):
        w = decay(base, i, half)
        add(item.title, w)
        add(item.channel_name, w * CHANNEL_AFFINITY)

    base, half = SHORTS_WEIGHT
    for i, item in enumerate(inputs.shorts_history[:settings.shorts_window]):
        w = decay(base, i, half)
        add(item.title, w)
        add(item.channel_name, w * CHANNEL_AFFINITY)

    for ch in inputs.subscriptions:
        add(ch.name, SUBSCRIPTION_WEIGHT)

    for genre in inputs.preferred_genres:
        add(genre, GENRE_WEIGHT)

    keywords = dict(kw)
    return UserProfile(keywords=keywords, magnitude=calculate_magnitude(keywords.values()))

def top_interests(profile: UserProfile, limit: int = 6) -> List[str]:
    return profile.top_keywords(limit)
