"""
Unit tests for NG / duration / "not interested" filtering.
"""
import pytest

from feedrank.errors import FeedInputError
from feedrank.filters import apply_filters, drop_reason, negative_score, normalized_text, validate_buckets
from feedrank.models import BlockList


def test_blocked_channel_never_survives(make_item):
    # a blocked channel is dropped regardless of how well it would score
    v3 = make_item(3, title="minecraft minecraft minecraft", channel="ChX", views="9B views")
    keep = make_item(4, channel="ChY")
    out = apply_filters([v3, keep], BlockList.build(channel_ids=["ChX"]))
    assert out == [keep]


def test_ng_keyword_case_insensitive_substring(make_item):
    bl = BlockList.build(keywords=["Spoiler"])
    hit = make_item(1, title="Ending SPOILERS inside")
    in_desc = make_item(2, title="clean", description_snippet="no spoiler here")
    ok = make_item(3, title="clean")
    out = apply_filters([hit, in_desc, ok], bl)
    assert out == [ok]
    for it in out:
        assert not any(k in normalized_text(it) for k in bl.keywords)


def test_short_only_drops_known_long_items(make_item):
    short = make_item(1, duration="3:59")
    medium = make_item(2, duration="4:00")
    unknown = make_item(3, duration="")
    out = apply_filters([short, medium, unknown], BlockList(), buckets={"short"})
    assert out == [short, unknown]
    assert all(it.duration_seconds < 240 for it in out if it.duration_seconds > 0)


def test_multiple_buckets(make_item):
    long_item = make_item(1, duration="1:00:00")
    medium = make_item(2, duration="10:00")
    out = apply_filters([long_item, medium], BlockList(), buckets={"short", "long"})
    assert out == [long_item]


def test_unknown_bucket_rejected():
    with pytest.raises(FeedInputError):
        validate_buckets({"tiny"})
    assert validate_buckets([" Short ", "LONG"]) == {"short", "long"}


def test_negative_feedback_is_soft_threshold(make_item):
    it = make_item(1, title="prank compilation", channel_name="zzz")
    assert negative_score(it, {"prank": 2.0}) == 2.0
    assert drop_reason(it, BlockList.build(negative_keywords={"prank": 2.0})) is None
    assert drop_reason(it, BlockList.build(negative_keywords={"prank": 2.0, "compilation": 1.0})) == "negative"


def test_rule_order(make_item):
    it = make_item(1, title="spoiler", channel="ChX", duration="2:00:00")
    bl = BlockList.build(keywords=["spoiler"], channel_ids=["ChX"])
    assert drop_reason(it, bl, frozenset({"short"})) == "ng_keyword"
    assert drop_reason(it, BlockList.build(channel_ids=["ChX"]), frozenset({"short"})) == "ng_channel"
    assert drop_reason(it, BlockList(), frozenset({"short"})) == "duration"


def test_empty_block_list_keeps_everything(make_item):
    items = [make_item(i) for i in range(5)]
    assert apply_filters(items, BlockList()) == items
