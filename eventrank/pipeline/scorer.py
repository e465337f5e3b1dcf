"""Rule-based scoring for event candidates.

Three independent scores:
  - relevance: query/location/type match plus content-quality bonuses, 0.0-1.0
  - student friendliness: additive keyword presence, 0.0-1.0
  - quality: unclamped integer point sum, for relative ordering only

Weights are not normalized to sum to 1.0. The clamp is a ceiling, not a
probability.
"""

from eventrank.core.config import ScoringConfig
from eventrank.core.schemas import RawCandidate
from eventrank.pipeline.text import event_text, query_tokens

# (any-of phrases, bonus). Each group fires independently.
STUDENT_SIGNALS: tuple[tuple[tuple[str, ...], float], ...] = (
    # audience
    (("student",), 0.3),
    (("study abroad",), 0.3),
    (("international",), 0.2),
    (("university", "college"), 0.2),
    (("campus",), 0.2),
    # age
    (("18+", "21+"), 0.1),
    (("all ages", "family"), 0.1),
    # budget
    (("free", "no cost"), 0.2),
    (("cheap", "affordable"), 0.1),
    (("budget",), 0.1),
    # social
    (("meet", "social"), 0.1),
    (("networking",), 0.1),
    (("party", "celebration"), 0.1),
)

# Field presence points for quality_score.
_QUALITY_FIELDS: tuple[tuple[str, int], ...] = (
    ("title", 10),
    ("description", 5),
    ("location", 8),
    ("date_time", 7),
    ("image_url", 3),
    ("organizer", 2),
    ("price", 1),
    ("tags", 2),
)

_QUALITY_DESCRIPTION_BONUSES: tuple[tuple[str, int], ...] = (
    ("student", 5),
    ("study abroad", 5),
    ("international", 3),
)

_DEFAULT_SCORING = ScoringConfig()


def relevance(
    event: RawCandidate,
    query: str,
    location: str | None = None,
    event_type_hint: str | None = None,
    config: ScoringConfig | None = None,
) -> float:
    """Score how well ``event`` matches the query, location and type hint.

    Args:
        event: Candidate to score. Scored events contribute their existing
            ``event_type`` to the hint match.
        query: Free-text user query.
        location: Optional query location; matched as a substring of the
            event location.
        event_type_hint: Optional category the caller is looking for.
        config: Weights; defaults to ScoringConfig().

    Returns:
        Score in [0.0, 1.0].
    """
    config = config or _DEFAULT_SCORING
    score = 0.0
    text = event_text(event)

    # Token overlap. No qualifying tokens means no contribution.
    words = query_tokens(query)
    if words:
        matching = [w for w in words if w in text]
        score += (len(matching) / len(words)) * config.token_overlap_weight

    if location and event.location and location.lower() in event.location.lower():
        score += config.location_match_bonus

    existing_type = getattr(event, "event_type", None)
    if event_type_hint and existing_type and _type_name(existing_type) == _type_name(event_type_hint):
        score += config.event_type_match_bonus

    if event.description and len(event.description) > config.min_description_length:
        score += config.description_bonus
    if event.image_url:
        score += config.image_bonus
    if event.date_time:
        score += config.date_bonus

    return min(score, 1.0)


def student_friendliness(event: RawCandidate) -> float:
    """Score suitability for students from keyword presence, in [0.0, 1.0]."""
    text = event_text(event)
    score = sum(bonus for phrases, bonus in STUDENT_SIGNALS if any(p in text for p in phrases))
    return min(score, 1.0)


def quality_score(event: RawCandidate) -> int:
    """Completeness heuristic for sources with no query context.

    Unclamped; only the ordering it induces matters.
    """
    score = 0
    for field, points in _QUALITY_FIELDS:
        if getattr(event, field):
            score += points

    description = (event.description or "").lower()
    for phrase, points in _QUALITY_DESCRIPTION_BONUSES:
        if phrase in description:
            score += points
    return score


def composite_score(relevance_score: float, student_score: float) -> float:
    """Blend biased toward relevance: 0.7 * relevance + 0.3 * student."""
    return 0.7 * relevance_score + 0.3 * student_score


def to_unit_scale(value: float, scale_max: float = 10.0) -> float:
    """Convert a legacy 0-``scale_max`` score to the canonical 0.0-1.0 scale."""
    return max(0.0, min(1.0, value / scale_max))


def _type_name(value: object) -> str:
    return str(getattr(value, "value", value)).lower()
