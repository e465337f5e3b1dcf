"""Text normalization shared by every keyword-matching stage."""

from eventrank.core.schemas import RawCandidate


def normalize(title: str | None, description: str | None) -> str:
    """Join title and description with one space and lower-case the result.

    Missing fields count as empty strings, so the output always contains the
    separator: ``normalize(None, None) == " "``.
    """
    return f"{title or ''} {description or ''}".lower()


def event_text(event: RawCandidate) -> str:
    """Normalized title+description text of an event."""
    return normalize(event.title, event.description)


def query_tokens(query: str, min_length: int = 3) -> list[str]:
    """Lower-cased whitespace tokens of ``query`` at least ``min_length`` long."""
    return [word for word in query.lower().split() if len(word) >= min_length]
