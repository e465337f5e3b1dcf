"""Ranking pipeline: wires flatten, dedup, scoring, filters, sort and limit.

Data flow:
  1. Validate input shape (rejects anything that is not a list of envelopes;
     malformed events inside an envelope are skipped)
  2. Keep successful ScrapingResults only
  3. FingerprintDedupFilter, shared across envelopes
  4. Score each candidate -> ScoredEvent (per-candidate errors are skipped)
  5. Threshold filter (relevance > 0.3 by default)
  6. Sort by a named strategy
  7. Optional student view, falling back to the unfiltered list if it empties
  8. Truncate to max_results
"""

import json
import logging
from collections.abc import Callable, Sequence
from typing import Any

from pydantic import ValidationError

from eventrank.classify.query import KeywordClassifier
from eventrank.core.config import RankingConfig, ScoringConfig
from eventrank.core.schemas import (
    Category,
    PlatformReport,
    QueryAnalysis,
    RankingResult,
    RawCandidate,
    ScoredEvent,
    ScrapingResult,
)
from eventrank.pipeline.categorizer import categorize
from eventrank.pipeline.keywords import extract_keywords
from eventrank.pipeline.matcher import FingerprintDedupFilter, ScoreThresholdFilter
from eventrank.pipeline.scorer import composite_score, quality_score, relevance, student_friendliness

logger = logging.getLogger(__name__)


class InvalidInputError(ValueError):
    """The pipeline was called with input of the wrong shape."""


SortKey = Callable[[ScoredEvent], float]

SORT_KEYS: dict[str, SortKey] = {
    "relevance": lambda e: e.relevance_score,
    "composite": lambda e: composite_score(e.relevance_score, e.student_friendliness_score),
    "quality": lambda e: float(quality_score(e)),
}


def rank(
    results: Sequence[ScrapingResult | dict[str, Any]],
    query: str,
    location: str = "",
    event_type_hint: Category | str | None = None,
    config: RankingConfig | None = None,
    scoring: ScoringConfig | None = None,
) -> RankingResult:
    """Run the full ranking pipeline over per-platform envelopes.

    Args:
        results: ScrapingResult envelopes (dicts are validated into them).
        query: Free-text user query.
        location: Query location; empty disables the location bonus.
        event_type_hint: When given, overrides categorization and feeds the
            relevance type-match bonus.
        config: Thresholds, strategy and limit; defaults to RankingConfig().
        scoring: Relevance weights; defaults to ScoringConfig().

    Returns:
        RankingResult with the ordered events and the aggregate counters.

    Raises:
        InvalidInputError: If ``results`` is not a list/tuple of envelopes, or
            an envelope header (success, platform, ...) is invalid.
    """
    config = config or RankingConfig()
    envelopes, skipped = _validate_results(results)

    # Step 2: Successful envelopes only
    successful = [r for r in envelopes if r.success]
    failed = [r.platform for r in envelopes if not r.success]
    if failed:
        logger.info("Ignoring %d failed platform(s): %s", len(failed), ", ".join(failed))

    # Step 3: Dedup, one filter shared across envelopes so cross-platform repeats drop
    dedup_filter = FingerprintDedupFilter()
    raw_count = 0
    unique: list[RawCandidate] = []
    for envelope in successful:
        raw_count += len(envelope.events)
        unique.extend(dedup_filter(list(envelope.events)))

    # Step 4: Score
    scored: list[ScoredEvent] = []
    for candidate in unique:
        try:
            scored.append(_score_event(candidate, query, location, event_type_hint, scoring))
        except Exception:
            skipped += 1
            logger.warning(
                "Scoring failed for '%s' (%s) - skipping candidate",
                candidate.title,
                candidate.namespaced_id,
                exc_info=True,
            )

    # Step 5: Threshold filter
    passing = ScoreThresholdFilter(config.threshold_field, config.min_score)(scored)

    # Step 6: Sort (stable, so ties keep first-seen order)
    ordered = sorted(passing, key=SORT_KEYS[config.strategy], reverse=True)

    # Step 7: Student view
    student_friendly = ScoreThresholdFilter("student_friendliness", config.student_min_score)(ordered)
    used_fallback = False
    if config.student_view:
        if student_friendly:
            ordered = student_friendly
        elif ordered:
            used_fallback = True
            logger.info("Student view matched nothing - returning unfiltered ranking")

    # Step 8: Limit
    final = ordered[: config.max_results]

    logger.info(
        "Ranked '%s' in '%s': %d raw, %d unique, %d passing, %d returned",
        query, location, raw_count, len(unique), len(passing), len(final),
    )

    return RankingResult(
        events=tuple(final),
        query=query,
        location=location,
        total_found=len(unique),
        filtered_count=len(passing),
        student_friendly_count=len(student_friendly),
        used_student_fallback=used_fallback,
        skipped=skipped,
        platforms=tuple(platform_reports(envelopes)),
    )


def rank_query(
    results: Sequence[ScrapingResult | dict[str, Any]],
    query: str,
    location: str | None = None,
    analysis: QueryAnalysis | None = None,
    config: RankingConfig | None = None,
    scoring: ScoringConfig | None = None,
) -> RankingResult:
    """Rank using a classifier hint, deriving one from the query when absent.

    An explicit ``location`` wins over the hint's location.
    """
    if analysis is None:
        analysis = KeywordClassifier().classify(query)
    target_location = location or analysis.location or ""
    return rank(
        results,
        query,
        target_location,
        event_type_hint=analysis.primary_event_type,
        config=config,
        scoring=scoring,
    )


def group_by_platform(
    events: Sequence[RawCandidate],
    query: str = "",
    location: str = "",
) -> list[ScrapingResult]:
    """Partition a flat event list into one successful envelope per platform.

    Groups appear in order of each platform's first event.
    """
    groups: dict[str, list[RawCandidate]] = {}
    for event in events:
        groups.setdefault(event.platform, []).append(event)
    return [
        ScrapingResult(
            success=True,
            events=tuple(group),
            platform=platform,
            query=query,
            location=location,
        )
        for platform, group in groups.items()
    ]


def platform_reports(results: Sequence[ScrapingResult]) -> list[PlatformReport]:
    """Per-platform success/failure/eventCount breakdown."""
    return [
        PlatformReport(
            platform=r.platform,
            success=r.success,
            event_count=len(r.events),
            error=r.error,
        )
        for r in results
    ]


def export_results_json(result: RankingResult) -> str:
    """Export a ranking result as the JSON payload the response layer serves."""
    events = []
    for e in result.events:
        data = e.model_dump(mode="json", by_alias=True, exclude={"raw_data"})
        data["keywords"] = sorted(e.keywords)
        events.append(data)
    payload = {
        "events": events,
        "totalEventsFound": result.total_found,
        "filteredCount": result.filtered_count,
        "studentFriendlyCount": result.student_friendly_count,
        "query": result.query,
        "location": result.location,
        "scrapingResults": [
            p.model_dump(mode="json", by_alias=True) for p in result.platforms
        ],
    }
    return json.dumps(payload, indent=2)


def _score_event(
    candidate: RawCandidate,
    query: str,
    location: str,
    event_type_hint: Category | str | None,
    scoring: ScoringConfig | None,
) -> ScoredEvent:
    return ScoredEvent.from_candidate(
        candidate,
        relevance_score=relevance(candidate, query, location or None, event_type_hint, scoring),
        student_friendliness_score=student_friendliness(candidate),
        event_type=event_type_hint or categorize(candidate),
        keywords=extract_keywords(candidate),
    )


def _validate_results(results: object) -> tuple[list[ScrapingResult], int]:
    """Reject non-list input up front instead of failing deep inside scoring.

    Envelope headers must be valid. Malformed events inside an envelope are
    dropped one by one; the second element counts those dropped from
    successful envelopes.
    """
    if not isinstance(results, (list, tuple)):
        msg = f"results must be a list of ScrapingResult, got {type(results).__name__}"
        raise InvalidInputError(msg)

    envelopes: list[ScrapingResult] = []
    dropped = 0
    for i, item in enumerate(results):
        if isinstance(item, ScrapingResult):
            envelopes.append(item)
        elif isinstance(item, dict):
            envelope, bad = _validate_envelope(i, item)
            envelopes.append(envelope)
            if envelope.success:
                dropped += bad
        else:
            msg = f"results[{i}] must be a ScrapingResult, got {type(item).__name__}"
            raise InvalidInputError(msg)
    return envelopes, dropped


def _validate_envelope(index: int, item: dict[str, Any]) -> tuple[ScrapingResult, int]:
    raw_events = item.get("events") or []
    if not isinstance(raw_events, (list, tuple)):
        msg = f"results[{index}].events must be a list, got {type(raw_events).__name__}"
        raise InvalidInputError(msg)

    header = {k: v for k, v in item.items() if k != "events"}
    try:
        envelope = ScrapingResult.model_validate(header)
    except ValidationError as e:
        msg = f"results[{index}] is not a valid ScrapingResult: {e}"
        raise InvalidInputError(msg) from e

    events: list[RawCandidate] = []
    bad = 0
    for j, raw in enumerate(raw_events):
        try:
            events.append(RawCandidate.model_validate(raw))
        except ValidationError:
            bad += 1
            logger.warning(
                "Malformed event results[%d].events[%d] from '%s' - skipping",
                index, j, envelope.platform,
                exc_info=True,
            )
    return envelope.model_copy(update={"events": tuple(events)}), bad
