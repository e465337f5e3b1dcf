"""Read-only fixture dataset of social posts, served as an event source.

Stands in for live scrapers in tests and offline runs. The dataset is injected
at construction and never mutated afterwards.
"""

import logging
import re
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field

from eventrank.core.schemas import RawCandidate, ScrapingResult
from eventrank.pipeline.orchestrator import group_by_platform
from eventrank.pipeline.text import query_tokens
from eventrank.platforms.base import EventSource

logger = logging.getLogger(__name__)

_SENTENCE_END = re.compile(r"[.!?]")


class SocialPost(BaseModel):
    """A scraped social-media post as stored in a fixture file."""

    model_config = ConfigDict(frozen=True)

    id: str
    platform: str
    content: str
    location: str | None = None
    city: str | None = None
    country: str | None = None
    hashtags: tuple[str, ...] = ()
    activity_type: str | None = None
    author_username: str | None = None
    post_url: str | None = None
    engagement_score: float | None = None
    created_at: str | None = None


def title_from_content(content: str) -> str:
    """First sentence when it is a sensible length, else the first 50 chars."""
    first_sentence = _SENTENCE_END.split(content, maxsplit=1)[0]
    if 10 < len(first_sentence) < 100:
        return first_sentence.strip()
    return f"{content[:50]}..." if len(content) > 50 else content


def post_to_candidate(post: SocialPost) -> RawCandidate:
    return RawCandidate(
        id=post.id,
        title=title_from_content(post.content),
        description=post.content,
        location=post.location or post.city or "Unknown",
        date_time=post.created_at,
        platform=post.platform,
        source_url=post.post_url or "",
        organizer=post.author_username,
        tags=post.hashtags,
        raw_data=post.model_dump(),
    )


def match_score(post: SocialPost, query: str, location: str | None = None) -> float:
    """Loose pre-filter score of a post against a query.

    Token overlap (x3), 2 per hashtag containing a query token, 2 per query
    location word found in the post's location/city/country, 2 for an
    activity-type hit, plus an engagement bonus capped at 3.
    """
    score = 0.0
    content = post.content.lower()
    words = query_tokens(query)

    if words:
        matching = [w for w in words if w in content]
        score += (len(matching) / len(words)) * 3

    hashtag_hits = [t for t in post.hashtags if any(w in t.lower() for w in words)]
    score += len(hashtag_hits) * 2

    if location:
        places = [p.lower() for p in (post.location, post.city, post.country) if p]
        location_hits = [w for w in location.lower().split() if any(w in p for p in places)]
        score += len(location_hits) * 2

    if post.activity_type:
        activity = post.activity_type.lower()
        if any(w in activity for w in words):
            score += 2

    if post.engagement_score:
        score += min(post.engagement_score / 100, 3)

    return score


class FixtureSource(EventSource):
    """Serve a fixed set of posts, filtered and grouped per platform."""

    def __init__(self, posts: Iterable[SocialPost], min_match_score: float = 1.0) -> None:
        self._posts: tuple[SocialPost, ...] = tuple(posts)
        self._min_match_score = min_match_score

    @property
    def platform_id(self) -> str:
        return "fixtures"

    @property
    def posts(self) -> tuple[SocialPost, ...]:
        return self._posts

    @classmethod
    def from_yaml(cls, path: str | Path) -> "FixtureSource":
        """Load posts from a YAML (or JSON) file: a list, or a mapping with ``posts``."""
        path = Path(path)
        if not path.exists():
            msg = f"Fixture file not found: {path}"
            raise FileNotFoundError(msg)
        raw: Any = yaml.safe_load(path.read_text()) or []
        if isinstance(raw, dict):
            raw = raw.get("posts", [])
        posts = [SocialPost.model_validate(item) for item in raw]
        logger.debug("Loaded %d fixture posts from %s", len(posts), path)
        return cls(posts)

    def search(self, query: str, location: str | None = None) -> list[SocialPost]:
        """Posts scoring above the match threshold, best first."""
        scored = [(match_score(p, query, location), p) for p in self._posts]
        kept = [(s, p) for s, p in scored if s > self._min_match_score]
        kept.sort(key=lambda sp: sp[0], reverse=True)
        return [p for _, p in kept]

    async def fetch(self, query: str, location: str) -> list[ScrapingResult]:
        posts = self.search(query, location or None)
        logger.info("Fixture search '%s' in '%s': %d posts", query, location, len(posts))
        location = location or "unknown"
        candidates = [post_to_candidate(p) for p in posts]
        if not candidates:
            # still report the source, as a successful empty search
            return [
                ScrapingResult(
                    success=True, platform=self.platform_id, query=query, location=location,
                )
            ]
        return group_by_platform(candidates, query=query, location=location)
