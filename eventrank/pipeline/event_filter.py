"""Relevance filter for scraped candidates: LLM judgement with a keyword fallback.

The LLM rates each candidate on a 0-10 scale; ratings are converted to the
0.0-1.0 scale before gating. When no filter is configured, or the provider
fails, a deterministic keyword rule decides instead.
"""

import json
import logging
import re
from collections.abc import Sequence

from eventrank.classify.llm import get_provider
from eventrank.classify.llm.base import LLMProvider, parse_json_object
from eventrank.core.config import ClassifierConfig
from eventrank.core.schemas import Category, FilteredEvent, RawCandidate
from eventrank.pipeline.scorer import to_unit_scale
from eventrank.pipeline.text import event_text, query_tokens

logger = logging.getLogger(__name__)

RELEVANCE_GATE = 0.6
CONFIDENCE_GATE = 0.5

# Scores given to everything the keyword rule keeps.
FALLBACK_SCORE = 0.7
FALLBACK_CONFIDENCE = 0.6
FALLBACK_LIMIT = 10

_EVENT_WORDS = re.compile(r"\b(event|party|meetup|bar|club|activity)\b")

FILTER_SYSTEM_PROMPT = (
    "You review social media posts found for an international student looking "
    "for things to do.\n\n"
    "For every post, decide whether it describes a real event or activity that "
    "matches the request. Return ONLY a JSON object (no markdown, no "
    'explanation) of the form {"events": [...]}, one entry per relevant post:\n'
    "- id (string): the post id exactly as given\n"
    "- title (string): a short, clean event title\n"
    "- description (string): one or two sentences describing the event\n"
    "- relevance_score (number 0-10): how well it matches the request\n"
    "- student_friendliness_score (number 0-10): how suitable it is for students\n"
    '- event_type (string): one of "social", "academic", "cultural", "sports", '
    '"nightlife", "food", "entertainment", "outdoor", "workshop", "networking", '
    '"general"\n'
    "- confidence (number 0-10): how sure you are of this judgement\n\n"
    "Leave out posts that are not events."
)


def keyword_filter(
    events: Sequence[RawCandidate],
    query: str,
    location: str = "",
) -> list[FilteredEvent]:
    """Keep candidates that mention an event word and match the query or place.

    A candidate matches when its text contains a query word longer than three
    characters, or the (non-empty) query location. At most FALLBACK_LIMIT
    events are returned, in input order.
    """
    words = query_tokens(query, min_length=4)
    place = location.lower()

    kept: list[FilteredEvent] = []
    for event in events:
        text = event_text(event)
        if not _EVENT_WORDS.search(text):
            continue
        if not (any(w in text for w in words) or (place and place in text)):
            continue
        filled = event.model_copy(update={
            "title": event.title or "Event",
            "description": event.description or "Event description",
            "location": event.location or location or None,
        })
        kept.append(FilteredEvent.from_candidate(
            filled,
            relevance_score=FALLBACK_SCORE,
            student_friendliness_score=FALLBACK_SCORE,
            event_type=Category.GENERAL,
            confidence=FALLBACK_CONFIDENCE,
        ))
        if len(kept) == FALLBACK_LIMIT:
            break
    return kept


class LLMEventFilter:
    """Ask an LLM provider which candidates are relevant events."""

    def __init__(self, provider: LLMProvider, model: str | None = None) -> None:
        self._provider = provider
        self._model = model

    @property
    def filter_id(self) -> str:
        return self._provider.provider_id

    def filter(
        self,
        events: Sequence[RawCandidate],
        query: str,
        location: str = "",
    ) -> list[FilteredEvent]:
        """Return the candidates the LLM rates relevant and confident enough.

        Raises:
            ValueError: If the response is not JSON or has no ``events`` list.
        """
        by_id = {e.namespaced_id: e for e in events}
        raw = self._provider.complete(
            _build_prompt(events, query, location), model=self._model, system=FILTER_SYSTEM_PROMPT
        )
        items = parse_json_object(raw).get("events")
        if not isinstance(items, list):
            msg = "LLM response missing 'events' list"
            raise ValueError(msg)

        kept: list[FilteredEvent] = []
        for item in items:
            if not isinstance(item, dict):
                continue
            candidate = by_id.get(str(item.get("id", "")))
            if candidate is None:
                logger.debug("Event filter returned unknown id %r - ignoring", item.get("id"))
                continue
            event = _to_filtered(candidate, item)
            if event is not None:
                kept.append(event)
        return kept


def _build_prompt(events: Sequence[RawCandidate], query: str, location: str) -> str:
    posts = [
        {
            "id": e.namespaced_id,
            "title": e.title,
            "description": e.description or "",
            "location": e.location or "",
        }
        for e in events
    ]
    return (
        f'User request: "{query}"\n'
        f'Location: "{location or "any"}"\n\n'
        f"Posts:\n{json.dumps(posts, indent=2)}"
    )


def _to_filtered(candidate: RawCandidate, item: dict) -> FilteredEvent | None:
    relevance_score = to_unit_scale(float(item.get("relevance_score", 0)))
    confidence = to_unit_scale(float(item.get("confidence", 0)))
    title = str(item.get("title") or "").strip()
    description = str(item.get("description") or "").strip()
    if relevance_score < RELEVANCE_GATE or confidence < CONFIDENCE_GATE:
        return None
    if not title or not description:
        return None

    event_type = str(item.get("event_type", "")).lower()
    known = {c.value for c in Category}
    return FilteredEvent.from_candidate(
        candidate.model_copy(update={"title": title, "description": description}),
        relevance_score=relevance_score,
        student_friendliness_score=to_unit_scale(float(item.get("student_friendliness_score", 0))),
        event_type=Category(event_type) if event_type in known else Category.GENERAL,
        confidence=confidence,
    )


def filter_events(
    events: Sequence[RawCandidate],
    query: str,
    location: str = "",
    event_filter: LLMEventFilter | None = None,
) -> list[FilteredEvent]:
    """Filter with ``event_filter``, falling back to keyword rules.

    The fallback is used when no filter is given or when it raises. Never
    raises.
    """
    if not events:
        return []
    if event_filter is None:
        return keyword_filter(events, query, location)

    try:
        kept = event_filter.filter(events, query, location)
    except Exception:
        logger.warning(
            "Event filter '%s' failed for '%s' - using keyword rules",
            event_filter.filter_id,
            query,
            exc_info=True,
        )
        return keyword_filter(events, query, location)

    logger.info("Event filter '%s' kept %d of %d", event_filter.filter_id, len(kept), len(events))
    return kept


def build_event_filter(config: ClassifierConfig) -> LLMEventFilter | None:
    """LLMEventFilter for the configured provider, or None when disabled."""
    if not config.enabled:
        return None
    return LLMEventFilter(get_provider(config.provider), model=config.model)
