"""Query classification: optional LLM classifier with a keyword-rule fallback.

The keyword classifier is deterministic and always available. An LLM result is
used only when it parses and clears the confidence threshold.
"""

import logging
import re
from abc import ABC, abstractmethod

from eventrank.classify.llm import get_provider
from eventrank.classify.llm.base import SYSTEM_PROMPT, LLMProvider, parse_json_object
from eventrank.core.config import ClassifierConfig
from eventrank.core.schemas import Category, QueryAnalysis
from eventrank.pipeline.categorizer import categorize_text
from eventrank.pipeline.keywords import extract_text_keywords
from eventrank.pipeline.text import query_tokens

logger = logging.getLogger(__name__)

EVENT_TRIGGERS = (
    "event", "party", "meetup", "activity", "thing to do", "go to", "bar", "club",
    "restaurant", "concert", "show", "workshop", "tour", "visit", "see",
    "experience", "enjoy", "fun",
)

KNOWN_CITIES = (
    "London", "Paris", "Tokyo", "New York", "Berlin", "Amsterdam", "Rome",
    "Barcelona", "Madrid", "Prague", "Vienna", "Budapest", "Copenhagen",
    "Stockholm", "Oslo", "Helsinki", "Dublin", "Edinburgh", "Glasgow",
    "Manchester", "Liverpool", "Birmingham", "Leeds", "Sheffield", "Newcastle",
    "Cardiff", "Belfast", "Bristol", "Oxford", "Cambridge", "Brighton", "Bath",
    "York", "Canterbury", "Stratford",
)

_PREPOSITION_PLACE = re.compile(r"\b(?:in|at|near|around)\s+([A-Z][a-z]+(?:\s+[A-Z][a-z]+)*)")
_KNOWN_CITY = re.compile(r"\b(" + "|".join(KNOWN_CITIES) + r")\b", re.IGNORECASE)

DEFAULT_PLATFORMS = ("instagram", "twitter", "tiktok")

PLATFORM_SUGGESTIONS: dict[Category, tuple[str, ...]] = {
    Category.SOCIAL: ("instagram", "tiktok", "twitter"),
    Category.ACADEMIC: ("twitter", "linkedin", "facebook"),
    Category.CULTURAL: ("instagram", "facebook", "twitter"),
    Category.SPORTS: ("instagram", "tiktok", "twitter"),
    Category.NIGHTLIFE: ("instagram", "tiktok", "twitter"),
    Category.FOOD: ("instagram", "tiktok", "facebook"),
    Category.ENTERTAINMENT: ("instagram", "tiktok", "twitter"),
    Category.OUTDOOR: ("instagram", "tiktok", "facebook"),
    Category.WORKSHOP: ("twitter", "linkedin", "facebook"),
    Category.NETWORKING: ("twitter", "linkedin", "facebook"),
}


class Classifier(ABC):
    """Turns a free-text query into a confidence-scored QueryAnalysis."""

    @property
    @abstractmethod
    def classifier_id(self) -> str:
        """Recorded as QueryAnalysis.source."""

    @abstractmethod
    def classify(self, query: str) -> QueryAnalysis:
        """Analyze ``query``. May raise; callers fall back to keyword rules."""


def extract_location(query: str) -> str | None:
    """Place after in/at/near/around, else a known city name, else None."""
    match = _PREPOSITION_PLACE.search(query) or _KNOWN_CITY.search(query)
    return match.group(1) if match else None


def suggest_platforms(event_type: Category | None) -> tuple[str, ...]:
    """Social platforms most likely to carry posts about ``event_type``."""
    if event_type is None:
        return DEFAULT_PLATFORMS
    return PLATFORM_SUGGESTIONS.get(event_type, DEFAULT_PLATFORMS)


class KeywordClassifier(Classifier):
    """Deterministic rules: trigger words, location patterns, category rules."""

    @property
    def classifier_id(self) -> str:
        return "keyword"

    def classify(self, query: str) -> QueryAnalysis:
        lower = query.lower()
        is_event = any(trigger in lower for trigger in EVENT_TRIGGERS)
        location = extract_location(query)

        category = categorize_text(lower)
        event_types = [] if category is Category.GENERAL else [category]

        keywords = list(dict.fromkeys(
            query_tokens(query) + sorted(extract_text_keywords(lower, include_audience=False))
        ))

        confidence = 0.0
        if is_event:
            confidence += 0.4
        if location:
            confidence += 0.3
        if event_types:
            confidence += 0.2
        if keywords:
            confidence += 0.1

        return QueryAnalysis(
            is_event_search=is_event,
            location=location,
            event_types=event_types,
            search_keywords=keywords,
            confidence=round(confidence, 2),
            source=self.classifier_id,
        )


class LLMClassifier(Classifier):
    """Classify queries with an LLM provider returning the JSON in SYSTEM_PROMPT."""

    def __init__(self, provider: LLMProvider, model: str | None = None) -> None:
        self._provider = provider
        self._model = model

    @property
    def classifier_id(self) -> str:
        return self._provider.provider_id

    def classify(self, query: str) -> QueryAnalysis:
        raw = self._provider.complete(
            f'User request: "{query}"', model=self._model, system=SYSTEM_PROMPT
        )
        data = parse_json_object(raw)
        if "is_event_search" not in data:
            msg = "LLM response missing 'is_event_search' field"
            raise ValueError(msg)
        data["confidence"] = max(0.0, min(1.0, float(data.get("confidence", 0.0))))
        data["source"] = self.classifier_id
        return QueryAnalysis.model_validate(data)


def classify_query(
    query: str,
    classifier: Classifier | None = None,
    min_confidence: float = 0.6,
) -> QueryAnalysis:
    """Classify with ``classifier``, falling back to keyword rules.

    The fallback is used when no classifier is given, when it raises, or when
    its confidence is below ``min_confidence``. Never raises.
    """
    fallback = KeywordClassifier()
    if classifier is None:
        return fallback.classify(query)

    try:
        analysis = classifier.classify(query)
    except Exception:
        logger.warning(
            "Classifier '%s' failed for '%s' - using keyword rules",
            classifier.classifier_id,
            query,
            exc_info=True,
        )
        return fallback.classify(query)

    if analysis.confidence < min_confidence:
        logger.info(
            "Classifier '%s' confidence %.2f < %.2f - using keyword rules",
            classifier.classifier_id, analysis.confidence, min_confidence,
        )
        return fallback.classify(query)
    return analysis


def build_classifier(config: ClassifierConfig) -> Classifier | None:
    """LLMClassifier for the configured provider, or None when disabled."""
    if not config.enabled:
        return None
    return LLMClassifier(get_provider(config.provider), model=config.model)
