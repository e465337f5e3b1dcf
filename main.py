"""CLI entry point for the student event ranker."""

import argparse
import asyncio
import logging
import sys

from eventrank.classify.llm import get_provider
from eventrank.classify.query import build_classifier, classify_query, suggest_platforms
from eventrank.core.config import SORT_STRATEGIES, RankingConfig, Settings
from eventrank.core.schemas import FilteredEvent, RankingResult
from eventrank.pipeline.collector import collect_results
from eventrank.pipeline.event_filter import build_event_filter, filter_events
from eventrank.pipeline.matcher import dedupe
from eventrank.pipeline.orchestrator import export_results_json, rank_query
from eventrank.pipeline.summary import summarize
from eventrank.platforms.fixture import FixtureSource


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Student event ranker - score, dedupe and rank social posts as events",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--query", "-q", required=True, help="Free-text search query")
    common.add_argument(
        "--config",
        default=None,
        help="Path to settings YAML file (default: built-in defaults)",
    )
    common.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )

    source_args = argparse.ArgumentParser(add_help=False)
    source_args.add_argument("--location", "-l", default=None, help="Location override")
    source_args.add_argument(
        "--fixtures",
        default=None,
        help="YAML/JSON file of social posts (default: sources.fixtures_path)",
    )

    # --- rank subcommand ---
    rank_parser = subparsers.add_parser(
        "rank", parents=[common, source_args], help="Rank events for a query"
    )
    rank_parser.add_argument("--strategy", choices=SORT_STRATEGIES, help="Ordering strategy")
    rank_parser.add_argument("--max-results", type=int, help="Maximum events returned")
    rank_parser.add_argument(
        "--student-view",
        action="store_true",
        help="Prefer student-friendly events, falling back to all if none qualify",
    )
    rank_parser.add_argument("--export", choices=["json"], help="Export results to format (json)")

    # --- classify subcommand ---
    subparsers.add_parser("classify", parents=[common], help="Show how a query is understood")

    # --- filter subcommand ---
    subparsers.add_parser(
        "filter",
        parents=[common, source_args],
        help="Keep only candidates that look like relevant events",
    )

    return parser.parse_args(argv)


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def load_settings(path: str | None) -> Settings:
    return Settings.from_yaml(path) if path else Settings()


def cmd_classify(args: argparse.Namespace, settings: Settings) -> None:
    """Handle classify subcommand."""
    classifier = build_classifier(settings.classifier)
    analysis = classify_query(args.query, classifier, settings.classifier.min_confidence)
    print(f"Query: {args.query}")
    print(f"  Source: {analysis.source} (confidence {analysis.confidence:.2f})")
    print(f"  Event search: {'yes' if analysis.is_event_search else 'no'}")
    print(f"  Location: {analysis.location or 'not found'}")
    print(f"  Event types: {[t.value for t in analysis.event_types]}")
    print(f"  Keywords: {analysis.search_keywords}")
    print(f"  Suggested platforms: {list(suggest_platforms(analysis.primary_event_type))}")


def load_source(args: argparse.Namespace, settings: Settings) -> FixtureSource:
    fixtures = args.fixtures or settings.sources.fixtures_path
    if not fixtures:
        msg = "no event source: pass --fixtures or set sources.fixtures_path"
        raise ValueError(msg)
    return FixtureSource.from_yaml(fixtures)


def cmd_filter(args: argparse.Namespace, settings: Settings) -> list[FilteredEvent]:
    """Handle filter subcommand."""
    source = load_source(args, settings)

    classifier = build_classifier(settings.classifier)
    analysis = classify_query(args.query, classifier, settings.classifier.min_confidence)
    location = args.location or analysis.location or ""

    results = asyncio.run(
        collect_results([source], args.query, location, settings.sources.timeout_seconds)
    )
    candidates = dedupe([e for r in results if r.success for e in r.events])

    kept = filter_events(
        candidates, args.query, location, build_event_filter(settings.classifier)
    )
    for i, e in enumerate(kept, 1):
        print(f"  {i:2d}. [{e.relevance_score:.2f}/{e.confidence:.2f}] "
              f"{e.title} ({e.platform}, {e.event_type})")
    print(f"\n{len(kept)} of {len(candidates)} candidates kept.")
    return kept


def cmd_rank(args: argparse.Namespace, settings: Settings) -> RankingResult:
    """Handle rank subcommand."""
    source = load_source(args, settings)

    classifier = build_classifier(settings.classifier)
    analysis = classify_query(args.query, classifier, settings.classifier.min_confidence)
    location = args.location or analysis.location or ""

    results = asyncio.run(
        collect_results([source], args.query, location, settings.sources.timeout_seconds)
    )

    overrides: dict[str, object] = {}
    if args.strategy:
        overrides["strategy"] = args.strategy
    if args.max_results:
        overrides["max_results"] = args.max_results
    if args.student_view:
        overrides["student_view"] = True
    ranking = RankingConfig.model_validate({**settings.ranking.model_dump(), **overrides})

    result = rank_query(
        results, args.query, location, analysis, config=ranking, scoring=settings.scoring,
    )

    provider = get_provider(settings.classifier.provider) if settings.classifier.enabled else None
    print(summarize(result, provider, settings.classifier.model))
    print(f"\n{result.total_found} unique, {result.filtered_count} passing, "
          f"{len(result.events)} shown.")
    for i, e in enumerate(result.events, 1):
        print(f"  {i:2d}. [{e.relevance_score:.2f}/{e.student_friendliness_score:.2f}] "
              f"{e.title} ({e.platform}, {e.event_type})")
    for p in result.platforms:
        status = "ok" if p.success else f"FAILED: {p.error}"
        print(f"  {p.platform}: {p.event_count} events, {status}")

    if args.export == "json":
        print(f"\n{export_results_json(result)}")
    return result


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    setup_logging(args.verbose)

    try:
        settings = load_settings(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        if args.command == "classify":
            cmd_classify(args, settings)
        elif args.command == "filter":
            cmd_filter(args, settings)
        else:
            cmd_rank(args, settings)
    except (FileNotFoundError, ImportError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
