"""
catalog.py
Catalog/search collaborator client:
- search, related, channel latest uploads, trending/home feed
- GET helper with retries/backoff for rate limits and 5xx
- parse_items(): the single adapter from the provider's loose item shape
  to ContentItem; items with an invalid id are dropped here
"""

import logging, random, time
from typing import List, Optional

import requests

from . import config
from .feats import is_valid_item_id
from .models import ContentItem, SourceChannel

log = logging.getLogger(__name__)

RETRY_STATUSES = (429, 500, 502, 503, 504)


class CatalogError(RuntimeError):
    # Any failure talking to the catalog (transport, status, payload).
    pass


# Parsing helpers

def _text(v) -> str:
    # Provider text fields arrive as str, {"text": ...}, {"simpleText": ...} or {"runs": [...]}.
    if v is None:
        return ""
    if isinstance(v, str):
        return v
    if isinstance(v, (int, float)):
        return str(v)
    if isinstance(v, dict):
        for key in ("text", "simpleText", "label"):
            if isinstance(v.get(key), str):
                return v[key]
        runs = v.get("runs")
        if isinstance(runs, list):
            return "".join(_text(r) for r in runs)
    return ""

def _thumb(v) -> str:
    # First thumbnail url from a list or {"thumbnails": [...]}.
    if isinstance(v, dict):
        v = v.get("thumbnails") or v.get("url")
    if isinstance(v, str):
        return v
    if isinstance(v, list):
        for t in v:
            url = t.get("url") if isinstance(t, dict) else t
            if isinstance(url, str) and url:
                return url
    return ""

def _item_id(raw) -> Optional[str]:
    vid = raw.get("id") or raw.get("video_id") or raw.get("videoId")
    if isinstance(vid, dict):
        vid = vid.get("videoId")
    return vid

def parse_item(raw) -> Optional[ContentItem]:
    # Normalize one raw item; None when the id is missing or malformed.
    if not isinstance(raw, dict):
        return None
    vid = _item_id(raw)
    if not is_valid_item_id(vid):
        return None

    author = raw.get("author") or raw.get("channel") or {}
    if not isinstance(author, dict):
        author = {"name": _text(author)}
    channel_id = author.get("id") or author.get("channel_id") or raw.get("channelId") or raw.get("channel_id") or ""
    channel_name = _text(author.get("name")) or _text(raw.get("channelName")) or _text(raw.get("channel_title"))

    dur = raw.get("duration")
    iso = raw.get("isoDuration") or raw.get("iso_duration") or ""
    if isinstance(dur, dict):
        dur_text = _text(dur)
        if not dur_text and isinstance(dur.get("seconds"), (int, float)):
            dur_text = str(int(dur["seconds"]))
    else:
        dur_text = _text(dur)
        if isinstance(dur, str) and dur.upper().startswith("P") and not iso:
            iso, dur_text = dur, ""

    views = raw.get("view_count") or raw.get("short_view_count") or raw.get("views") or raw.get("viewCount")

    return ContentItem(
        id=vid,
        title=_text(raw.get("title")),
        channel_id=channel_id if isinstance(channel_id, str) else "",
        channel_name=channel_name,
        view_count_text=_text(views),
        published_at_text=_text(raw.get("published") or raw.get("publishedAt") or raw.get("published_at") or raw.get("uploadedAt")),
        duration_text=dur_text,
        iso_duration=iso if isinstance(iso, str) else "",
        description_snippet=_text(raw.get("description_snippet") or raw.get("descriptionSnippet") or raw.get("description")),
        thumbnail_ref=_thumb(raw.get("thumbnails") or raw.get("thumbnail") or raw.get("thumbnailUrl")),
    )

def parse_items(raw_items) -> List[ContentItem]:
    # Normalize a raw list, dropping items whose id is not a valid catalog id.
    out = []
    dropped = 0
    for raw in raw_items or []:
        it = parse_item(raw)
        if it is None:
            dropped += 1
            continue
        out.append(it)
    if dropped:
        log.debug("[catalog] dropped %d malformed items", dropped)
    return out

def channel_from_raw(raw) -> Optional[SourceChannel]:
    # Adapt a channel dict ({"id","name"|"title","thumbnails"}) to SourceChannel.
    if not isinstance(raw, dict):
        return None
    cid = raw.get("id") or raw.get("channel_id") or raw.get("channelId")
    if not cid or not isinstance(cid, str):
        return None
    name = _text(raw.get("name")) or _text(raw.get("title")) or _text(raw.get("channel_title"))
    return SourceChannel(id=cid, name=name, avatar_ref=_thumb(raw.get("thumbnails") or raw.get("avatarUrl")))


# HTTP client

class CatalogClient:
    """
    Thin client for the catalog proxy (search / video / channel / home feed).

    Every method returns parsed ContentItems or raises CatalogError; the
    aggregator turns errors into empty contributions.
    """

    def __init__(self, base_url=None, timeout=None, retries=None, session=None):
        self.base_url = (base_url or config.CATALOG_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else config.CATALOG_TIMEOUT_SEC
        self.retries = max(1, retries if retries is not None else config.CATALOG_RETRIES)
        self.session = session or requests.Session()

    def _get(self, path, params=None):
        # GET request with retries/backoff; raises CatalogError if exhausted.
        url = f"{self.base_url}/{path.lstrip('/')}"
        backoff = 0.5
        last = None
        for attempt in range(self.retries):
            try:
                r = self.session.get(url, params=params or {}, timeout=self.timeout)
            except requests.RequestException as e:
                raise CatalogError(f"{path}: {e}") from e
            if r.status_code < 400:
                try:
                    return r.json()
                except ValueError as e:
                    raise CatalogError(f"{path}: invalid JSON body") from e
            last = r.status_code
            if r.status_code in RETRY_STATUSES and attempt + 1 < self.retries:
                time.sleep(backoff + random.uniform(0, 0.25))
                backoff = min(backoff * 2, 4.0)
                continue
            break
        raise CatalogError(f"{path}: HTTP {last} with params {params}")

    @staticmethod
    def _list(data, *keys):
        if not isinstance(data, dict):
            raise CatalogError("unexpected response shape")
        for k in keys:
            if isinstance(data.get(k), list):
                return data[k]
        return []

    def search(self, query, page=1) -> List[ContentItem]:
        data = self._get("api/search", {"q": query, "page": str(page)})
        return parse_items(self._list(data, "videos", "items"))

    def related_to(self, item_id) -> List[ContentItem]:
        data = self._get("api/video", {"id": item_id})
        return parse_items(self._list(data, "watch_next_feed", "related_videos", "related"))

    def latest_from_channel(self, channel_id) -> List[ContentItem]:
        data = self._get("api/channel", {"id": channel_id, "page": "1"})
        return parse_items(self._list(data, "videos", "items"))

    def trending(self) -> List[ContentItem]:
        data = self._get("api/fvideo")
        return parse_items(self._list(data, "videos", "items"))
