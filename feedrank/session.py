"""
session.py - Per-session paging state.

One SessionState per feed owner: page counter, ids emitted so far, running
count against the ceiling, hasMore flag and the generation token that
guards against committing results computed for stale inputs. A profile-
affecting input change replaces the state instead of mutating it.
"""

from dataclasses import dataclass, field
from typing import List, Set, Tuple

from .config import FEED_CEILING
from .models import ContentItem


@dataclass
class SessionState:
    fingerprint: str = ""
    generation: int = 0
    page: int = 1                 # next page to fetch
    ceiling: int = FEED_CEILING
    seen_ids: Set[str] = field(default_factory=set)
    emitted: int = 0
    has_more: bool = True

    @property
    def ceiling_reached(self) -> bool:
        return self.emitted >= self.ceiling

    def unseen(self, items: List[ContentItem]) -> List[ContentItem]:
        # Drop ids already emitted this session (and repeats inside the batch).
        out, batch = [], set()
        for it in items:
            if it.id in self.seen_ids or it.id in batch:
                continue
            batch.add(it.id)
            out.append(it)
        return out

    def commit(self, page: int, items: List[ContentItem], shorts: List[ContentItem]) -> Tuple[List[ContentItem], List[ContentItem]]:
        """
        Mark one page of already-unseen results as emitted and advance the counters.

        Main-feed items beyond the ceiling are cut (and stay unseen); returns
        the slices that were committed.
        """
        room = max(0, self.ceiling - self.emitted)
        items = items[:room]
        for it in items:
            self.seen_ids.add(it.id)
        for it in shorts:
            self.seen_ids.add(it.id)
        self.emitted += len(items)
        self.page = page + 1
        if (page > 1 and not items and not shorts) or self.ceiling_reached:
            self.has_more = False
        return items, shorts
