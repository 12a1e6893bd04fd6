"""
schemas.py
Pydantic request/response models for the feed API.
Defines typed schemas for profile inputs, feed pages and profile diagnostics.
"""

from pydantic import BaseModel
from typing import Dict, List, Optional

class ItemIn(BaseModel):
    # A history entry as stored by the client.
    id: str
    title: str = ""
    channel_id: str = ""
    channel_name: str = ""
    view_count_text: str = ""
    published_at_text: str = ""
    duration_text: str = ""
    iso_duration: str = ""
    description_snippet: str = ""
    thumbnail_ref: str = ""

class ChannelIn(BaseModel):
    # A followed source.
    id: str
    name: str = ""
    avatar_ref: str = ""

class ProfileInputsIn(BaseModel):
    # Read-only snapshot of the user's stored preferences and history.
    watch_history: List[ItemIn] = []
    shorts_history: List[ItemIn] = []
    search_history: List[str] = []
    subscriptions: List[ChannelIn] = []
    ng_keywords: List[str] = []
    ng_channels: List[str] = []
    hidden_ids: List[str] = []
    negative_keywords: Dict[str, float] = {}
    duration_buckets: List[str] = []
    preferred_genres: List[str] = []
    preferred_channels: List[str] = []

class FeedRequest(BaseModel):
    # One page request; page omitted means "next page of this session".
    session_id: str
    page: Optional[int] = None
    inputs: ProfileInputsIn = ProfileInputsIn()

class FeedItem(BaseModel):
    # Minimal fields needed by the UI to render a card.
    video_id: str
    title: str
    channel: str
    channel_id: str
    duration_sec: int
    view_count: int
    published: str
    thumbnail: str
    why: List[str]
    rank: int

class FeedResponse(BaseModel):
    page: int
    has_more: bool
    items: List[FeedItem]
    shorts: List[FeedItem]

class ResetRequest(BaseModel):
    session_id: str

class ProfileResponse(BaseModel):
    # Diagnostics: heaviest keywords of the last profile built for the session.
    session_id: str
    keywords: Dict[str, float]
    magnitude: float
    top_interests: List[str]
