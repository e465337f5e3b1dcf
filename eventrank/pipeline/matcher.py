"""Deduplication and score filters for event candidates.

Filter order inside the ranking pipeline:
  1. FingerprintDedupFilter - raw candidates, one instance per ranking call
  2. ScoreThresholdFilter   - scored events, strict ``>`` on one score field
  3. ScoreThresholdFilter   - optional student view, applied after sorting
"""

import logging
import re
from collections.abc import Sequence

from eventrank.core.schemas import RawCandidate, ScoredEvent

logger = logging.getLogger(__name__)

_NON_LETTERS = re.compile(r"[^a-z]")

_SCORE_FIELDS = {
    "relevance": "relevance_score",
    "student_friendliness": "student_friendliness_score",
}


def _squash(value: str | None) -> str:
    return _NON_LETTERS.sub("", (value or "").lower())


def fingerprint(event: RawCandidate) -> str:
    """Duplicate key: letters-only title and location joined by ``_``.

    Ignores id and platform. Events with empty title and location all share
    the key ``"_"`` and collapse to one.
    """
    return f"{_squash(event.title)}_{_squash(event.location)}"


class FingerprintDedupFilter:
    """Drop candidates whose fingerprint was already seen. First occurrence wins.

    Stateful: remembers fingerprints across calls on the same instance. The
    ranking pipeline feeds it one envelope at a time, so a repost on a later
    platform is dropped in favour of the earlier one.
    """

    def __init__(self) -> None:
        self._seen: set[str] = set()

    def __call__(self, candidates: list[RawCandidate]) -> list[RawCandidate]:
        result: list[RawCandidate] = []
        for c in candidates:
            key = fingerprint(c)
            if key not in self._seen:
                self._seen.add(key)
                result.append(c)
        deduped = len(candidates) - len(result)
        if deduped:
            logger.debug("FingerprintDedupFilter: removed %d duplicates", deduped)
        return result


def dedupe(events: Sequence[RawCandidate]) -> list[RawCandidate]:
    """Order-preserving, idempotent dedupe of a single batch."""
    return FingerprintDedupFilter()(list(events))


class ScoreThresholdFilter:
    """Keep scored events whose chosen score is strictly above ``min_score``."""

    def __init__(self, field: str = "relevance", min_score: float = 0.3) -> None:
        if field not in _SCORE_FIELDS:
            msg = f"Unknown score field '{field}'. Available: {', '.join(sorted(_SCORE_FIELDS))}"
            raise ValueError(msg)
        self._attr = _SCORE_FIELDS[field]
        self._min_score = min_score

    def __call__(self, events: list[ScoredEvent]) -> list[ScoredEvent]:
        result = [e for e in events if getattr(e, self._attr) > self._min_score]
        excluded = len(events) - len(result)
        if excluded:
            logger.debug(
                "ScoreThresholdFilter(%s > %.2f): removed %d events",
                self._attr, self._min_score, excluded,
            )
        return result
