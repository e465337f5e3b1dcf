"""Bounded keyword extraction from event text."""

from eventrank.core.schemas import RawCandidate
from eventrank.pipeline.text import event_text

# term found in text -> canonical tag
EVENT_TYPE_TERMS = {
    "party": "party",
    "concert": "concert",
    "workshop": "workshop",
    "meetup": "meetup",
    "bar": "bar",
    "club": "club",
    "restaurant": "restaurant",
}

ACTIVITY_TERMS = {
    "dance": "dancing",
    "drink": "drinking",
    "eat": "food",
    "sightsee": "sightseeing",
    "tour": "tour",
}

TEMPORAL_TERMS = {
    "tonight": "tonight",
    "weekend": "weekend",
    "this week": "this week",
}

AUDIENCE_TERMS = {
    "student": "student",
    "study abroad": "study abroad",
    "international": "international",
}


def extract_text_keywords(text: str, include_audience: bool = True) -> frozenset[str]:
    """Canonical tags for every vocabulary term present in ``text``.

    ``include_audience=False`` skips the audience words; query parsing uses
    that form since nearly every query mentions students.
    """
    text = text.lower()
    vocabularies = [EVENT_TYPE_TERMS, ACTIVITY_TERMS, TEMPORAL_TERMS]
    if include_audience:
        vocabularies.append(AUDIENCE_TERMS)
    return frozenset(
        tag for vocab in vocabularies for term, tag in vocab.items() if term in text
    )


def extract_keywords(event: RawCandidate) -> frozenset[str]:
    return extract_text_keywords(event_text(event))
