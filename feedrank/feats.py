"""
feats.py - Text and metadata utilities for content items.

Purpose:
- Extract normalized keyword sets from free text (titles, channel names, search terms).
- Parse durations (ISO-8601 codes or clock strings) and bucket them.
- Parse view-count strings with locale magnitude suffixes.
- Parse relative/absolute publish dates into an age in days.
- Validate catalog item ids.

Every parser here is total: unparseable input yields 0 / None, never an exception.
"""

import re, logging, datetime, unicodedata
from functools import lru_cache
from typing import FrozenSet, Optional

import jieba

jieba.setLogLevel(logging.WARNING)

ITEM_ID_RE = re.compile(r"^[A-Za-z0-9_-]{11}$")

# Functional particles and generic media words that carry no topic signal.
STOP_WORDS = frozenset({
    "の", "に", "は", "を", "が", "で", "です", "ます", "こと", "もの", "これ", "それ", "あれ",
    "いる", "する", "ある", "ない", "から", "まで", "と", "も", "や", "など", "さん", "ちゃん",
    "about", "and", "the", "to", "a", "of", "in", "for", "on", "with", "as", "at", "is", "my",
    "movie", "video", "videos", "official", "channel", "music", "mv", "pv", "tv", "shorts",
    "part", "vol", "no", "ep", "full", "new", "live",
})

# Hiragana, katakana, CJK ideographs, full-width forms, CJK punctuation.
_CJK = re.compile(r"[\u3000-\u303f\u3040-\u309f\u30a0-\u30ff\uff00-\uff9f\u4e00-\u9faf\u3400-\u4dbf\uac00-\ud7af]")
_SINGLE_ALNUM = re.compile(r"^[a-z0-9]$")
_NUMERIC = re.compile(r"^[0-9]+$")
_KANJI = r"\u3400-\u4dbf\u4e00-\u9fff\u3005"
_HIRA = r"\u3040-\u309f"
_KATA = r"\u30a0-\u30ff"
_KANA = re.compile(f"[{_HIRA}{_KATA}]")
_KANJI_ONLY = re.compile(f"^[{_KANJI}]+$")
# Okurigana: a short hiragana tail that does not start with a case particle.
_OKURI = f"(?![のにはをがでともへや])[{_HIRA}]{{1,4}}"
_JA_TOKEN = re.compile(
    f"[{_KANJI}]{{2,}}"                                                 # kanji compound: 実況
    f"|[{_KANJI}](?:{_OKURI}[{_KANJI}](?![{_KANJI}]))*(?:{_OKURI})?"     # 切り抜き, 歌ってみた
    f"|[{_KATA}]+"
    f"|[{_HIRA}]+"
    f"|[^{_KANJI}{_HIRA}{_KATA}]+"
)

def has_cjk(text: str) -> bool:
    # True if text contains any CJK script character.
    return bool(_CJK.search(text or ""))

def _split_on_classes(text: str):
    # Replace symbol/punctuation/separator/control characters by spaces, then split.
    cleaned = "".join(" " if unicodedata.category(ch)[0] in "SPZC" else ch for ch in text)
    return cleaned.split()

def _rejoin_singles(pieces):
    # Consecutive one-character CJK pieces become one token ("実", "況" -> "実況").
    out, run = [], ""
    for p in pieces:
        if len(p) == 1 and has_cjk(p):
            run += p
            continue
        if run:
            out.append(run)
            run = ""
        out.append(p)
    if run:
        out.append(run)
    return out

def _jieba_words(text: str):
    words = []
    for tok in _rejoin_singles(jieba.lcut(text)):
        words.extend(_split_on_classes(tok))
    return words

def _segment(text: str):
    # Word segmentation by script: Japanese (any kana) by script runs, other CJK
    # text by jieba, everything else by Unicode class splitting.
    if not has_cjk(text):
        return _split_on_classes(text)
    if not _KANA.search(text):
        return _jieba_words(text)
    words = []
    for tok in _JA_TOKEN.findall(text):
        if len(tok) > 4 and _KANJI_ONLY.match(tok):
            words.extend(_jieba_words(tok))
        else:
            words.extend(_split_on_classes(tok))
    return words

def _keep(word: str) -> bool:
    if len(word) <= 1 and not _SINGLE_ALNUM.match(word):
        return False
    if word in STOP_WORDS:
        return False
    if _NUMERIC.match(word):
        return False
    return True

@lru_cache(maxsize=8192)
def extract_keywords(text: str) -> FrozenSet[str]:
    # Lower-case, segment, drop stop words / numbers / lone symbols; distinct tokens.
    if not text:
        return frozenset()
    return frozenset(w for w in _segment(text.lower()) if _keep(w))

def item_keywords(item) -> FrozenSet[str]:
    # Keywords of an item's title and channel name.
    return extract_keywords(item.title) | extract_keywords(item.channel_name)

def is_valid_item_id(item_id) -> bool:
    return isinstance(item_id, str) and bool(ITEM_ID_RE.match(item_id))

# Durations

def iso8601_duration_to_seconds(s):
    # Convert ISO-8601 duration (e.g. PT5M30S, P1DT2H) -> seconds; 0 if unparseable.
    if not s or not isinstance(s, str):
        return 0
    s = s.strip().upper()
    if not s.startswith("P"):
        return 0
    d = h = m = sec = 0
    num = ""
    in_time = False
    for ch in s[1:]:
        if ch.isdigit():
            num += ch
        elif ch == "T":
            in_time = True; num = ""
        elif ch == "D":
            d = int(num or 0); num = ""
        elif ch == "H":
            h = int(num or 0); num = ""
        elif ch == "M" and in_time:
            m = int(num or 0); num = ""
        elif ch == "S":
            sec = int(num or 0); num = ""
        else:
            return 0
    return d*86400 + h*3600 + m*60 + sec

def clock_to_seconds(text):
    # Convert "H:MM:SS", "M:SS" or "SS" -> seconds; 0 if unparseable.
    if not text or not isinstance(text, str):
        return 0
    parts = text.strip().split(":")
    if not all(p.strip().isdigit() for p in parts) or len(parts) > 3:
        return 0
    total = 0
    for p in parts:
        total = total * 60 + int(p)
    return total

def parse_duration(iso_duration, duration_text) -> int:
    # Structured code wins; clock text is the fallback.
    return iso8601_duration_to_seconds(iso_duration) or clock_to_seconds(duration_text)

DURATION_BUCKETS = ("short", "medium", "long")

def duration_bucket(sec):
    # Categorize duration (sec) into 'short' (<240), 'medium' (240-1200), 'long' (>1200).
    s = int(sec or 0)
    if s <= 0: return "unknown"
    if s < 240: return "short"
    if s <= 1200: return "medium"
    return "long"

# View counts

_MAGNITUDES = {
    "thousand": 1e3, "million": 1e6, "billion": 1e9,
    "k": 1e3, "m": 1e6, "b": 1e9,
    "千": 1e3, "万": 1e4, "萬": 1e4, "만": 1e4,
    "億": 1e8, "亿": 1e8, "억": 1e8,
}
_VIEW_RE = re.compile(
    r"(\d+(?:\.\d+)?)\s*(thousand|million|billion|[千万萬億亿만억]|[kmb](?![a-z]))?",
    re.IGNORECASE,
)

def parse_view_count(text) -> int:
    # "1,234 views" / "1.2万 回視聴" / "3.4M views" -> raw count; 0 if unparseable.
    if isinstance(text, (int, float)):
        return max(0, int(text))
    if not text or not isinstance(text, str):
        return 0
    m = _VIEW_RE.search(text.replace(",", "").replace("，", ""))
    if not m:
        return 0
    n = float(m.group(1))
    suffix = (m.group(2) or "").lower()
    return int(round(n * _MAGNITUDES.get(suffix, 1)))

# Publish dates

_UNIT_DAYS = {
    "second": 1/86400, "minute": 1/1440, "hour": 1/24, "day": 1.0,
    "week": 7.0, "month": 30.0, "year": 365.0,
    "秒": 1/86400, "分": 1/1440, "時間": 1/24, "日": 1.0, "週間": 7.0,
    "か月": 30.0, "ヶ月": 30.0, "カ月": 30.0, "ヵ月": 30.0, "年": 365.0,
}
_AGO_EN = re.compile(r"(\d+)\s*(second|minute|hour|day|week|month|year)s?\s+ago", re.IGNORECASE)
_AGO_JA = re.compile(r"(\d+)\s*(秒|時間|分|日|週間|か月|ヶ月|カ月|ヵ月|年)\s*前")

def parse_age_days(text, now=None) -> Optional[float]:
    # "3 days ago" / "2 週間前" / ISO date -> age in days; None if unparseable.
    if not text or not isinstance(text, str):
        return None
    for rx in (_AGO_EN, _AGO_JA):
        m = rx.search(text)
        if m:
            return int(m.group(1)) * _UNIT_DAYS[m.group(2).lower()]
    try:
        dt = datetime.datetime.fromisoformat(text.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=datetime.timezone.utc)
    now = now or datetime.datetime.now(datetime.timezone.utc)
    return max(0.0, (now - dt).total_seconds() / 86400.0)
