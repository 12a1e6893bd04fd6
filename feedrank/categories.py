"""
categories.py - Fixed topic categories for forced-diversity injection.

- TOPICS lists broad, profile-independent topics
- rotate() picks a page-dependent window so successive pages cycle through them
"""

from typing import List

TOPICS = (
    "Music", "Gaming", "Cooking", "Travel", "Science", "Technology", "Sports", "Comedy",
    "News", "Animals", "Education", "ASMR", "Vtuber", "DIY", "Fitness", "Anime",
)

def rotate(page: int, n: int, topics=TOPICS) -> List[str]:
    # Window of n topics starting at (page-1)*n, wrapping around.
    if n <= 0 or not topics:
        return []
    n = min(n, len(topics))
    start = ((max(1, page) - 1) * n) % len(topics)
    return [topics[(start + i) % len(topics)] for i in range(n)]
