"""
Unit tests for the recency-weighted keyword profile.
"""
import math

import pytest

from feedrank.config import FeedSettings
from feedrank.models import UserProfile
from feedrank.profile import (
    build_profile, calculate_magnitude, decay, top_interests,
)


def test_decay_is_base_at_index_zero():
    assert decay(8.0, 0, 10.0) == 8.0
    assert decay(8.0, 10, 10.0) == pytest.approx(8.0 / math.e)


def test_magnitude_is_euclidean_norm():
    assert calculate_magnitude([3.0, 4.0]) == pytest.approx(5.0)
    assert calculate_magnitude([]) == 0.0


def test_empty_inputs_give_empty_profile(make_inputs):
    prof = build_profile(make_inputs())
    assert prof.is_empty
    assert prof.magnitude == 0.0


def test_search_terms_weighted_by_recency(make_inputs):
    prof = build_profile(make_inputs(search=["minecraft", "cooking"]))
    assert prof.weight("minecraft") == pytest.approx(8.0)
    assert prof.weight("cooking") == pytest.approx(8.0 * math.exp(-1 / 10))


def test_watch_channel_name_gets_affinity_boost(make_inputs, make_item):
    watched = make_item(1, title="speedrun", channel_name="retro")
    prof = build_profile(make_inputs(watch=[watched]))
    assert prof.weight("speedrun") == pytest.approx(5.0)
    assert prof.weight("retro") == pytest.approx(7.5)


def test_signals_accumulate_additively(make_inputs, make_item):
    prof = build_profile(make_inputs(
        search=["minecraft"],
        watch=[make_item(1, title="minecraft castle", channel_name="builder")],
        subs=["chMine"],
        genres=["minecraft"],
    ))
    # search 8.0 + watch title 5.0 + genre 4.0
    assert prof.weight("minecraft") == pytest.approx(17.0)
    assert prof.weight("chmine") == pytest.approx(3.0)


def test_shorts_history_uses_lower_base(make_inputs, make_item):
    prof = build_profile(make_inputs(shorts=[make_item(1, title="dance", channel_name="x")]))
    assert prof.weight("dance") == pytest.approx(3.5)


def test_only_bounded_prefix_contributes(make_inputs, make_item):
    s = FeedSettings(history_window=2)
    watch = [make_item(i, title=f"topic{i}", channel_name="c") for i in range(5)]
    prof = build_profile(make_inputs(watch=watch), s)
    assert prof.weight("topic0") > 0
    assert prof.weight("topic1") > 0
    assert prof.weight("topic2") == 0.0


def test_top_interests_heaviest_first_ties_alphabetical():
    prof = UserProfile(keywords={"b": 2.0, "a": 2.0, "c": 5.0, "d": 0.5})
    assert top_interests(prof, limit=3) == ["c", "a", "b"]

