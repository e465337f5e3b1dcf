"""Ordered keyword rules mapping event text to a Category.

First match wins. The order is a tie-break policy and must not change: an
event mentioning only "outdoor" is SPORTS (rule 4), never OUTDOOR (rule 8).
"""

from eventrank.core.schemas import Category, RawCandidate
from eventrank.pipeline.text import event_text

CATEGORY_RULES: tuple[tuple[Category, tuple[str, ...]], ...] = (
    (Category.SOCIAL, ("party", "meetup", "social")),
    (Category.ACADEMIC, ("workshop", "seminar", "lecture")),
    (Category.CULTURAL, ("museum", "art", "culture")),
    (Category.SPORTS, ("sport", "fitness", "outdoor")),
    (Category.NIGHTLIFE, ("bar", "club", "nightlife")),
    (Category.FOOD, ("food", "restaurant", "dining")),
    (Category.ENTERTAINMENT, ("concert", "show", "performance")),
    (Category.OUTDOOR, ("hiking", "park", "nature")),
    (Category.WORKSHOP, ("skill", "diy", "hands-on")),
    (Category.NETWORKING, ("networking", "professional", "business")),
)


def categorize_text(text: str) -> Category:
    """Return the category of the first rule with a substring hit in ``text``."""
    text = text.lower()
    for category, keywords in CATEGORY_RULES:
        if any(kw in text for kw in keywords):
            return category
    return Category.GENERAL


def categorize(event: RawCandidate) -> Category:
    """Categorize an event from its normalized title and description."""
    return categorize_text(event_text(event))
