"""Demo posts served when Product Hunt / Algolia credentials are absent."""

import copy

from timeframe.clock import utc_now
from timeframe.parser import format_instant

DEMO_POSTS = [
    {
        "id": "ph-mock-1",
        "name": "LaunchPad Pro",
        "tagline": "Your Product Hunt launch checklist, automated",
        "description": "Plan, schedule, and track your PH launch like a pro.",
        "url": "https://www.producthunt.com/posts/launchpad-pro",
        "website": "https://example.com",
        "votesCount": 1267,
        "commentsCount": 143,
        "thumbnail": "https://ph-files.imgix.net/59b9cdf1-6c20-4ce9-9d10-94d8d8c7a001.png",
    },
    {
        "id": "ph-mock-2",
        "name": "HuntHelper AI",
        "tagline": "AI copilot for your Product Hunt launch",
        "description": "Write taglines, build hunter list, and draft maker comments.",
        "url": "https://www.producthunt.com/posts/hunthelper-ai",
        "website": "https://example.com",
        "votesCount": 932,
        "commentsCount": 97,
        "thumbnail": "https://ph-files.imgix.net/6aa8c1a7-2db8-44f8-a73a-4f5f0693c002.png",
    },
    {
        "id": "ph-mock-3",
        "name": "Mocktail",
        "tagline": "Generate realistic screenshots & mocks instantly",
        "description": "Drop in your URL to get PH-ready visuals in seconds.",
        "url": "https://www.producthunt.com/posts/mocktail",
        "website": "https://example.com",
        "votesCount": 811,
        "commentsCount": 65,
        "thumbnail": "https://ph-files.imgix.net/8de37a9b-0c2b-4431-8c22-ffb9f2a3d003.png",
    },
]


def demo_posts(limit: int | None = None) -> list[dict]:
    """Fresh copies of the demo posts, stamped with the current time."""
    posted_at = format_instant(utc_now().replace(microsecond=0))
    posts = []
    for post in DEMO_POSTS[:limit]:
        item = copy.deepcopy(post)
        item["postedAt"] = posted_at
        posts.append(item)
    return posts


def demo_search(query: str, limit: int | None = None) -> list[dict]:
    """Case-insensitive substring search over the demo posts."""
    needle = query.lower()
    hits = []
    for post in demo_posts():
        haystack = " ".join(
            [post["name"], post.get("tagline") or "", post.get("description") or ""]
        ).lower()
        if needle in haystack:
            hits.append({"objectID": post["id"], **post})
    return hits[:limit]
