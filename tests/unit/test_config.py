"""
Unit tests for environment configuration helpers.
"""
import dataclasses

import pytest

from feedrank.config import COLD_START_QUERIES, FeedSettings, bool_from_env


@pytest.mark.parametrize("value,expected", [("1", True), ("yes", True), (" On ", True), ("0", False), ("nope", False)])
def test_bool_from_env(monkeypatch, value, expected):
    monkeypatch.setenv("FEEDRANK_TEST_FLAG", value)
    assert bool_from_env("FEEDRANK_TEST_FLAG") is expected


def test_bool_from_env_default(monkeypatch):
    monkeypatch.delenv("FEEDRANK_TEST_FLAG", raising=False)
    assert bool_from_env("FEEDRANK_TEST_FLAG", True) is True


def test_settings_defaults_and_overrides():
    s = FeedSettings()
    assert 1 <= s.page_size <= 150
    assert s.cold_start_queries == COLD_START_QUERIES
    t = s.with_overrides(channel_cap=2)
    assert t.channel_cap == 2
    assert s is not t
    with pytest.raises(dataclasses.FrozenInstanceError):
        s.channel_cap = 9
