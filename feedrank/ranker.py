"""
ranker.py - Composite scoring for filtered candidates.

- relevance  : sum of profile weights over the item's keywords
- popularity : log10(views + 1) after locale suffix normalization
- freshness  : flat bonus inside a short window, log decay beyond, floored at 0
- history    : multiplicative penalty for recently seen ids
- jitter     : bounded symmetric random factor from an injectable RNG

score = (relevance*2.5 + popularity*0.5 + freshness*1.0) * history_penalty * (1 + U(-j, j))
"""

import math, random
from typing import Dict, List, Optional, Tuple

import numpy as np

from .config import FeedSettings
from .feats import item_keywords, parse_age_days
from .models import ContentItem, UserProfile

WEIGHTS = {"relevance": 2.5, "popularity": 0.5, "freshness": 1.0}

def relevance(item: ContentItem, profile: UserProfile) -> float:
    return float(sum(profile.weight(k) for k in item_keywords(item)))

def popularity(item: ContentItem) -> float:
    return math.log10(item.view_count + 1)

def freshness(item: ContentItem, window_days=3.0, bonus=5.0, now=None) -> float:
    # Full bonus within the window; bonus - ln(1 + days past window) after; unknown age -> 0.
    age = parse_age_days(item.published_at_text, now=now)
    if age is None:
        return 0.0
    if age <= window_days:
        return float(bonus)
    return max(0.0, bonus - math.log1p(age - window_days))

def feature_row(item: ContentItem, profile: UserProfile, recent_ids, settings: FeedSettings, now=None) -> Dict[str, float]:
    # Per-item components; `penalty` is a multiplier, the rest are additive terms.
    return {
        "relevance": relevance(item, profile),
        "popularity": popularity(item),
        "freshness": freshness(item, settings.fresh_window_days, settings.fresh_bonus, now=now),
        "penalty": settings.history_penalty if item.id in recent_ids else 1.0,
    }

def _base_score(fv: Dict[str, float]) -> float:
    return sum(WEIGHTS[k] * fv[k] for k in WEIGHTS) * fv["penalty"]

def score_items(items: List[ContentItem], profile: UserProfile, recent_ids=frozenset(),
                settings: FeedSettings = None, rng: random.Random = None, now=None,
                return_contribs=False):
    """
    Score and sort candidates, highest first; ties keep input order.

    With a seeded `rng` the output order is reproducible. Returns
    [(item, score)], plus {item_id: components} when return_contribs is set.
    """
    settings = settings or FeedSettings()
    rng = rng or random.Random()
    if not items:
        return ([], {}) if return_contribs else []

    rows = [feature_row(it, profile, recent_ids, settings, now=now) for it in items]
    base = np.array([_base_score(fv) for fv in rows], dtype=float)
    j = max(0.0, settings.jitter)
    if j > 0:
        factors = np.array([1.0 + rng.uniform(-j, j) for _ in items], dtype=float)
    else:
        factors = np.ones(len(items), dtype=float)
    scores = base * factors

    order = np.argsort(-scores, kind="stable")
    ranked = [(items[i], float(scores[i])) for i in order]
    if not return_contribs:
        return ranked
    contribs = {}
    for it, fv, b, s in zip(items, rows, base, scores):
        comp = {k: float(WEIGHTS[k] * fv[k]) for k in WEIGHTS}
        comp["penalty"] = float(fv["penalty"])
        comp["_base"] = float(b)
        comp["_total"] = float(s)
        contribs[it.id] = comp
    return ranked, contribs

def explain_reasons(comp: Dict[str, float], subs_set=None, channel_id: Optional[str] = None,
                    max_reasons=3) -> List[str]:
    # Short user-facing reason strings from a component row.
    r = []
    if comp.get("relevance", 0) > 0: r.append("topic match")
    if comp.get("freshness", 0) >= WEIGHTS["freshness"] * 2.5: r.append("fresh")
    if comp.get("popularity", 0) >= WEIGHTS["popularity"] * 6: r.append("popular")
    if subs_set and channel_id in subs_set: r.append("from a subscription")
    if comp.get("penalty", 1.0) < 1.0: r.append("seen recently (deprioritized)")
    return r[:max_reasons]
