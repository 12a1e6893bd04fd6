"""
API tests through FastAPI's TestClient with a scripted catalog.
"""
import random

import pytest
from fastapi.testclient import TestClient

from api import service
from api.main import app


@pytest.fixture
def client(fake_catalog, make_item, settings):
    def search(query, page):
        start = page * 5
        return [make_item(start + i, title=f"{query} clip", channel=f"c{(start + i) % 9}") for i in range(15)]

    catalog = fake_catalog(search=search, trending=[make_item(900, channel="trend")])
    service.configure(catalog=catalog, settings=settings, rng_factory=lambda: random.Random(1))
    yield TestClient(app)
    service.configure()


def _feed(client, session_id="s1", page=None, **inputs):
    body = {"session_id": session_id, "inputs": inputs}
    if page is not None:
        body["page"] = page
    return client.post("/feed", json=body)


def test_healthz(client):
    r = client.get("/healthz")
    assert r.status_code == 200
    assert r.json() == {"ok": True}


def test_feed_pages_continue_without_duplicates(client):
    r1 = _feed(client)
    assert r1.status_code == 200
    p1 = r1.json()
    assert p1["page"] == 1
    assert p1["has_more"] is True
    assert [it["rank"] for it in p1["items"]] == list(range(1, len(p1["items"]) + 1))

    p2 = _feed(client).json()
    assert p2["page"] == 2
    assert p2["items"][0]["rank"] == len(p1["items"]) + 1
    ids1 = {it["video_id"] for it in p1["items"]}
    ids2 = {it["video_id"] for it in p2["items"]}
    assert not ids1 & ids2


def test_feed_item_shape(client):
    item = _feed(client, search_history=["gaming"]).json()["items"][0]
    assert set(item) == {"video_id", "title", "channel", "channel_id", "duration_sec", "view_count",
                         "published", "thumbnail", "why", "rank"}
    assert item["duration_sec"] == 600
    assert "topic match" in item["why"]


def test_invalid_history_ids_are_skipped(client):
    r = _feed(client, watch_history=[{"id": "nope", "title": "x"}, {"id": "dQw4w9WgXcQ", "title": "ok"}])
    assert r.status_code == 200


@pytest.mark.parametrize("page", [0, -3])
def test_bad_page_is_400(client, page):
    assert _feed(client, page=page).status_code == 400


def test_unknown_bucket_is_400(client):
    r = _feed(client, duration_buckets=["tiny"])
    assert r.status_code == 400
    assert "tiny" in r.json()["detail"]


def test_busy_session_is_409(client):
    service.engine_for("busy")
    service._BUSY.add("busy")
    try:
        assert _feed(client, session_id="busy").status_code == 409
    finally:
        service._BUSY.discard("busy")


def test_profile_roundtrip(client):
    assert client.get("/profile", params={"session_id": "s1"}).status_code == 404
    _feed(client, search_history=["minecraft", "cooking"])
    r = client.get("/profile", params={"session_id": "s1"})
    assert r.status_code == 200
    body = r.json()
    assert body["top_interests"][0] == "minecraft"
    assert body["keywords"]["minecraft"] == pytest.approx(8.0)
    assert body["magnitude"] > 0


def test_reset_forgets_session(client):
    _feed(client)
    r = client.post("/feed/reset", json={"session_id": "s1"})
    assert r.json() == {"ok": True, "existed": True}
    assert client.get("/profile", params={"session_id": "s1"}).status_code == 404
    assert _feed(client).json()["page"] == 1


def test_least_recently_used_session_is_evicted(fake_catalog, make_item, settings):
    service.configure(catalog=fake_catalog(search=[make_item(1)]), settings=settings, max_sessions=2)
    try:
        client = TestClient(app)
        _feed(client, session_id="a")
        _feed(client, session_id="b")
        assert client.get("/profile", params={"session_id": "a"}).status_code == 200
        _feed(client, session_id="c")
        assert client.get("/profile", params={"session_id": "b"}).status_code == 404
        assert client.get("/profile", params={"session_id": "a"}).status_code == 200
        assert client.get("/profile", params={"session_id": "c"}).status_code == 200
    finally:
        service.configure()
