"""
store.py
Read-only access to preference snapshots:
- JSON export of the client's stored preferences (camelCase keys) or the
  snake_case equivalent
- inputs_from_dict(): one conversion path shared by the CLI and the API
The feed core never writes these; the preference store owns mutation.
"""

import json, logging, pathlib
from typing import Any, Dict, Iterable, List

from .catalog import channel_from_raw, parse_item
from .models import BlockList, ContentItem, ProfileInputs, SourceChannel

log = logging.getLogger(__name__)

# snapshot key -> accepted aliases
_KEYS = {
    "watch_history": ("watch_history", "history", "watchHistory"),
    "shorts_history": ("shorts_history", "shortsHistory"),
    "search_history": ("search_history", "searchHistory"),
    "subscriptions": ("subscriptions", "subscribedChannels"),
    "ng_keywords": ("ng_keywords", "ngKeywords"),
    "ng_channels": ("ng_channels", "ngChannels"),
    "hidden_ids": ("hidden_ids", "hiddenVideoIds"),
    "negative_keywords": ("negative_keywords", "negativeKeywords"),
    "duration_buckets": ("duration_buckets", "preferredDurations"),
    "preferred_genres": ("preferred_genres", "preferredGenres"),
    "preferred_channels": ("preferred_channels", "preferredChannels"),
}

def _pick(data: Dict[str, Any], name: str, default=None):
    for key in _KEYS[name]:
        if key in data and data[key] is not None:
            return data[key]
    return default

def _items(raw: Iterable) -> List[ContentItem]:
    # History entries go through the same adapter as catalog items.
    out = []
    for r in raw or []:
        if isinstance(r, ContentItem):
            out.append(r)
            continue
        it = parse_item(r)
        if it is not None:
            out.append(it)
    return out

def _channels(raw: Iterable) -> List[SourceChannel]:
    out = []
    for r in raw or []:
        ch = r if isinstance(r, SourceChannel) else channel_from_raw(r)
        if ch is not None:
            out.append(ch)
    return out

def _strings(raw) -> List[str]:
    return [s for s in (raw or []) if isinstance(s, str) and s.strip()]

def _negative_map(raw) -> Dict[str, float]:
    # Accepts {"kw": n} or [["kw", n], ...] (a serialized Map).
    if isinstance(raw, dict):
        pairs = raw.items()
    elif isinstance(raw, list):
        pairs = [p for p in raw if isinstance(p, (list, tuple)) and len(p) == 2]
    else:
        return {}
    out = {}
    for k, v in pairs:
        try:
            out[str(k).lower()] = float(v)
        except (TypeError, ValueError):
            continue
    return out

def inputs_from_dict(data: Dict[str, Any]) -> ProfileInputs:
    # Build ProfileInputs from a snapshot dict; unknown keys ignored, missing keys empty.
    data = data or {}
    block = BlockList.build(
        keywords=_strings(_pick(data, "ng_keywords")),
        channel_ids=_strings(_pick(data, "ng_channels")),
        hidden_ids=_strings(_pick(data, "hidden_ids")),
        negative_keywords=_negative_map(_pick(data, "negative_keywords")),
    )
    return ProfileInputs(
        watch_history=tuple(_items(_pick(data, "watch_history"))),
        shorts_history=tuple(_items(_pick(data, "shorts_history"))),
        search_history=tuple(_strings(_pick(data, "search_history"))),
        subscriptions=tuple(_channels(_pick(data, "subscriptions"))),
        block_list=block,
        duration_buckets=frozenset(s.lower() for s in _strings(_pick(data, "duration_buckets"))),
        preferred_genres=tuple(_strings(_pick(data, "preferred_genres"))),
        preferred_channels=tuple(_strings(_pick(data, "preferred_channels"))),
    )

def load_inputs(path) -> ProfileInputs:
    # Read a JSON snapshot file into ProfileInputs.
    p = pathlib.Path(path)
    with open(p, "r", encoding="utf-8") as f:
        data = json.load(f)
    inputs = inputs_from_dict(data)
    log.info("[store] loaded %s: watch=%d search=%d subs=%d",
             p.name, len(inputs.watch_history), len(inputs.search_history), len(inputs.subscriptions))
    return inputs
