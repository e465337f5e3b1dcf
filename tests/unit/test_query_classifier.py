"""Tests for keyword and LLM query classification with fallback."""

from unittest.mock import MagicMock

import pytest

from eventrank.classify.query import (
    DEFAULT_PLATFORMS,
    KeywordClassifier,
    LLMClassifier,
    build_classifier,
    classify_query,
    extract_location,
    suggest_platforms,
)
from eventrank.core.config import ClassifierConfig
from eventrank.core.schemas import Category


def _mock_provider(response: str = "", provider_id: str = "anthropic") -> MagicMock:
    provider = MagicMock()
    provider.provider_id = provider_id
    provider.complete.return_value = response
    return provider


# ---------------------------------------------------------------------------
# Keyword rules
# ---------------------------------------------------------------------------
class TestKeywordClassifier:
    def test_full_event_query(self) -> None:
        analysis = KeywordClassifier().classify("best bars for students in Barcelona")
        assert analysis.is_event_search is True
        assert analysis.location == "Barcelona"
        assert analysis.event_types == [Category.NIGHTLIFE]
        assert analysis.search_keywords == ["best", "bars", "for", "students", "barcelona", "bar"]
        assert analysis.confidence == 1.0
        assert analysis.source == "keyword"

    def test_non_event_query(self) -> None:
        analysis = KeywordClassifier().classify("hello there")
        assert analysis.is_event_search is False
        assert analysis.location is None
        assert analysis.event_types == []
        assert analysis.confidence == 0.1

    def test_deterministic(self) -> None:
        classifier = KeywordClassifier()
        assert classifier.classify("party in Rome") == classifier.classify("party in Rome")


class TestExtractLocation:
    def test_preposition_with_capitalized_place(self) -> None:
        assert extract_location("techno clubs near New Cross") == "New Cross"

    def test_known_city_any_case(self) -> None:
        assert extract_location("bars in barcelona") == "barcelona"

    def test_no_location(self) -> None:
        assert extract_location("cheap food tonight") is None


class TestSuggestPlatforms:
    def test_category_mapping(self) -> None:
        assert suggest_platforms(Category.FOOD) == ("instagram", "tiktok", "facebook")
        assert suggest_platforms(Category.NETWORKING) == ("twitter", "linkedin", "facebook")

    def test_default(self) -> None:
        assert suggest_platforms(None) == DEFAULT_PLATFORMS
        assert suggest_platforms(Category.GENERAL) == DEFAULT_PLATFORMS


# ---------------------------------------------------------------------------
# LLM classifier
# ---------------------------------------------------------------------------
class TestLLMClassifier:
    def test_parses_fenced_json(self) -> None:
        provider = _mock_provider(
            "```json\n"
            '{"is_event_search": true, "location": "Lisbon", '
            '"event_types": ["food", "karaoke"], "search_keywords": ["tapas"], '
            '"confidence": 1.7}\n'
            "```"
        )
        analysis = LLMClassifier(provider, model="small-model").classify("tapas in Lisbon")

        assert analysis.is_event_search is True
        assert analysis.location == "Lisbon"
        assert analysis.event_types == [Category.FOOD]
        assert analysis.search_keywords == ["tapas"]
        assert analysis.confidence == 1.0
        assert analysis.source == "anthropic"
        assert provider.complete.call_args.kwargs["model"] == "small-model"

    def test_missing_required_field(self) -> None:
        provider = _mock_provider('{"location": "Lisbon"}')
        with pytest.raises(ValueError, match="is_event_search"):
            LLMClassifier(provider).classify("tapas")

    def test_malformed_json(self) -> None:
        provider = _mock_provider("sure! here you go")
        with pytest.raises(ValueError, match="Failed to parse"):
            LLMClassifier(provider).classify("tapas")


class TestClassifyQuery:
    def test_no_classifier_uses_keywords(self) -> None:
        assert classify_query("party in Rome").source == "keyword"

    def test_error_falls_back(self) -> None:
        provider = _mock_provider()
        provider.complete.side_effect = RuntimeError("rate limited")
        analysis = classify_query("party in Rome", LLMClassifier(provider))
        assert analysis.source == "keyword"
        assert analysis.location == "Rome"

    def test_low_confidence_falls_back(self) -> None:
        provider = _mock_provider('{"is_event_search": true, "confidence": 0.2}')
        analysis = classify_query("party in Rome", LLMClassifier(provider), min_confidence=0.6)
        assert analysis.source == "keyword"

    def test_confident_result_used(self) -> None:
        provider = _mock_provider(
            '{"is_event_search": true, "location": "Rome", "event_types": ["social"], '
            '"confidence": 0.9}',
            provider_id="openai",
        )
        analysis = classify_query("party in Rome", LLMClassifier(provider))
        assert analysis.source == "openai"
        assert analysis.confidence == 0.9


class TestBuildClassifier:
    def test_disabled(self) -> None:
        assert build_classifier(ClassifierConfig()) is None

    def test_enabled(self) -> None:
        classifier = build_classifier(ClassifierConfig(enabled=True, provider="openai"))
        assert isinstance(classifier, LLMClassifier)
        assert classifier.classifier_id == "openai"

    def test_unknown_provider(self) -> None:
        with pytest.raises(ValueError, match="Unknown LLM provider"):
            build_classifier(ClassifierConfig(enabled=True, provider="nope"))
