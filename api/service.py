"""
service.py
Business logic layer between FastAPI routes and the feed engine (feedrank/*).
Keeps one engine per session id, serializes page loads per session, and maps
engine output to the public item shape.
"""

import random, threading
from collections import OrderedDict
from typing import Callable, Dict, List, Optional

from feedrank import config
from feedrank.catalog import CatalogClient
from feedrank.config import FeedSettings
from feedrank.engine import FeedEngine
from feedrank.feats import is_valid_item_id
from feedrank.models import ContentItem, SourceChannel
from feedrank.profile import top_interests
from feedrank.ranker import explain_reasons
from feedrank.store import inputs_from_dict
from feedrank.utils import load_env, setup_logging


class SessionBusy(RuntimeError):
    # A page load for this session is already in flight.
    pass


_ENGINES: "OrderedDict[str, FeedEngine]" = OrderedDict()   # least recently used first
_BUSY = set()
_LOCK = threading.Lock()

_catalog = None
_settings: Optional[FeedSettings] = None
_rng_factory: Callable[[], random.Random] = random.Random
_max_sessions = config.API_MAX_SESSIONS
_api_bootstrapped = False

def _api_boot():
    global _api_bootstrapped
    if _api_bootstrapped:
        return
    load_env()
    setup_logging()
    _api_bootstrapped = True

def configure(catalog=None, settings: FeedSettings = None, rng_factory=None, max_sessions=None):
    # Swap collaborators (tests, alternate catalogs); drops existing sessions.
    global _catalog, _settings, _rng_factory, _max_sessions
    _catalog = catalog
    _settings = settings
    _rng_factory = rng_factory or random.Random
    _max_sessions = max(1, max_sessions or config.API_MAX_SESSIONS)
    clear_sessions()

def clear_sessions():
    with _LOCK:
        _ENGINES.clear()
        _BUSY.clear()

def _get_catalog():
    global _catalog
    if _catalog is None:
        _api_boot()
        _catalog = CatalogClient()
    return _catalog

def _evict_idle():
    # Drop least recently used sessions beyond the limit; in-flight ones stay. Caller holds _LOCK.
    for sid in list(_ENGINES):
        if len(_ENGINES) <= _max_sessions:
            break
        if sid not in _BUSY:
            del _ENGINES[sid]

def engine_for(session_id: str, create: bool = True) -> Optional[FeedEngine]:
    with _LOCK:
        eng = _ENGINES.get(session_id)
        if eng is not None:
            _ENGINES.move_to_end(session_id)
        elif create:
            eng = FeedEngine(_get_catalog(), _settings or FeedSettings(), rng=_rng_factory())
            _ENGINES[session_id] = eng
            _evict_idle()
        return eng

def to_inputs(payload: Dict):
    # API payload -> ProfileInputs; history entries with malformed ids are skipped.
    data = dict(payload or {})
    data["watch_history"] = [ContentItem(**it) for it in data.get("watch_history") or [] if is_valid_item_id(it.get("id"))]
    data["shorts_history"] = [ContentItem(**it) for it in data.get("shorts_history") or [] if is_valid_item_id(it.get("id"))]
    data["subscriptions"] = [SourceChannel(**c) for c in data.get("subscriptions") or [] if c.get("id")]
    return inputs_from_dict(data)

def _normalize_items(items: List[ContentItem], engine: FeedEngine, first_rank: int, subs_set) -> List[Dict]:
    # Map engine items to the public FeedItem shape with running ranks.
    out = []
    for i, it in enumerate(items):
        comp = engine.last_contrib.get(it.id, {})
        out.append({
            "video_id": it.id,
            "title": it.title,
            "channel": it.channel_name,
            "channel_id": it.channel_id,
            "duration_sec": it.duration_seconds,
            "view_count": it.view_count,
            "published": it.published_at_text,
            "thumbnail": it.thumbnail_ref,
            "why": explain_reasons(comp, subs_set=subs_set, channel_id=it.channel_id),
            "rank": first_rank + i,
        })
    return out

def load_feed(session_id: str, page: Optional[int], payload: Dict) -> Dict:
    # Build one page for a session; one in-flight load per session.
    inputs = to_inputs(payload)
    engine = engine_for(session_id)
    with _LOCK:
        if session_id in _BUSY:
            raise SessionBusy(session_id)
        _BUSY.add(session_id)
    try:
        result = engine.load_page(inputs, page)
    finally:
        with _LOCK:
            _BUSY.discard(session_id)

    subs_set = {c.id for c in inputs.subscriptions}
    emitted = engine.session.emitted if engine.session else len(result.items)
    first_rank = emitted - len(result.items) + 1
    return {
        "page": result.page,
        "has_more": result.has_more,
        "items": _normalize_items(result.items, engine, first_rank, subs_set),
        "shorts": _normalize_items(result.shorts, engine, 1, subs_set),
    }

def reset_session(session_id: str) -> Dict:
    # Forget the session entirely; the next request starts at page 1.
    with _LOCK:
        eng = _ENGINES.pop(session_id, None)
    if eng is not None:
        eng.reset()
    return {"ok": True, "existed": eng is not None}

def profile_for(session_id: str, limit: int = 50) -> Optional[Dict]:
    eng = engine_for(session_id, create=False)
    if eng is None:
        return None
    prof = eng.current_profile()
    top = prof.top_keywords(limit)
    return {
        "session_id": session_id,
        "keywords": {k: prof.keywords[k] for k in top},
        "magnitude": prof.magnitude,
        "top_interests": top_interests(prof),
    }
