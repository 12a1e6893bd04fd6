"""
Unit tests for preference snapshot loading.
"""
import json

from feedrank.store import inputs_from_dict, load_inputs


def _snapshot():
    # camelCase export of the client's stored preferences
    return {
        "history": [
            {"id": "dQw4w9WgXcQ", "title": "Never gonna", "author": {"id": "UC1", "name": "Rick"}},
            {"id": "bad", "title": "dropped"},
        ],
        "searchHistory": ["lofi", "", 3],
        "subscribedChannels": [{"id": "UC2", "name": "Lofi Girl"}, {"name": "no id"}],
        "ngKeywords": ["  Spoiler "],
        "ngChannels": ["UC9"],
        "hiddenVideoIds": ["abcdefghijk"],
        "negativeKeywords": [["prank", 3], ["bad", "x"]],
        "preferredDurations": ["Short"],
        "preferredGenres": ["Gaming"],
        "somethingElse": True,
    }


def test_camel_case_snapshot():
    inputs = inputs_from_dict(_snapshot())
    assert [v.id for v in inputs.watch_history] == ["dQw4w9WgXcQ"]
    assert inputs.watch_history[0].channel_name == "Rick"
    assert inputs.search_history == ("lofi",)
    assert [c.id for c in inputs.subscriptions] == ["UC2"]
    assert inputs.block_list.keywords == {"spoiler"}
    assert inputs.block_list.channel_ids == {"UC9"}
    assert inputs.block_list.hidden_ids == {"abcdefghijk"}
    assert inputs.block_list.negative_keywords == {"prank": 3.0}
    assert inputs.duration_buckets == {"short"}
    assert inputs.preferred_genres == ("Gaming",)


def test_snake_case_and_dict_negatives():
    inputs = inputs_from_dict({"search_history": ["a"], "negative_keywords": {"Prank": 1}})
    assert inputs.search_history == ("a",)
    assert inputs.block_list.negative_keywords == {"prank": 1.0}


def test_missing_keys_default_empty():
    inputs = inputs_from_dict({})
    assert inputs.is_cold_start
    assert inputs.duration_buckets == frozenset()


def test_fingerprint_tracks_meaningful_changes():
    a = inputs_from_dict(_snapshot())
    b = inputs_from_dict(_snapshot())
    assert a.fingerprint() == b.fingerprint()
    changed = _snapshot()
    changed["ngKeywords"].append("clickbait")
    assert inputs_from_dict(changed).fingerprint() != a.fingerprint()


def test_load_inputs_from_file(tmp_path):
    path = tmp_path / "snapshot.json"
    path.write_text(json.dumps(_snapshot()), encoding="utf-8")
    inputs = load_inputs(path)
    assert len(inputs.watch_history) == 1
