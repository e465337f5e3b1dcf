"""Tests for concurrent source collection with timeouts and failure envelopes."""

import asyncio

from eventrank.core.schemas import RawCandidate, ScrapingResult
from eventrank.pipeline.collector import collect_results
from eventrank.platforms.base import EventSource


class _StaticSource(EventSource):
    def __init__(self, platform: str, delay: float = 0.0) -> None:
        self._platform = platform
        self._delay = delay

    @property
    def platform_id(self) -> str:
        return self._platform

    async def fetch(self, query: str, location: str) -> list[ScrapingResult]:
        await asyncio.sleep(self._delay)
        event = RawCandidate(id="1", platform=self._platform, title=f"{query} event")
        return [
            ScrapingResult(
                success=True, events=(event,), platform=self._platform,
                query=query, location=location,
            )
        ]


class _BrokenSource(EventSource):
    def __init__(self, exc: Exception) -> None:
        self._exc = exc

    @property
    def platform_id(self) -> str:
        return "broken"

    async def fetch(self, query: str, location: str) -> list[ScrapingResult]:
        raise self._exc


class TestCollectResults:
    async def test_envelopes_in_source_order(self) -> None:
        sources = [_StaticSource("instagram", delay=0.02), _StaticSource("tiktok")]
        results = await collect_results(sources, "salsa", "Madrid")
        assert [r.platform for r in results] == ["instagram", "tiktok"]
        assert all(r.success for r in results)

    async def test_exception_becomes_failed_envelope(self) -> None:
        sources = [_BrokenSource(RuntimeError("blocked by captcha")), _StaticSource("tiktok")]
        results = await collect_results(sources, "salsa", "Madrid")

        failed = results[0]
        assert failed.success is False
        assert failed.platform == "broken"
        assert failed.error == "blocked by captcha"
        assert failed.query == "salsa"
        assert failed.location == "Madrid"
        assert results[1].success is True

    async def test_exception_without_message_uses_type_name(self) -> None:
        results = await collect_results([_BrokenSource(ConnectionError())], "salsa", "Madrid")
        assert results[0].error == "ConnectionError"

    async def test_timeout_becomes_failed_envelope(self) -> None:
        sources = [_StaticSource("slow", delay=1.0), _StaticSource("fast")]
        results = await collect_results(sources, "salsa", "Madrid", timeout_seconds=0.05)

        assert results[0].success is False
        assert results[0].error == "timed out after 0.05s"
        assert results[1].success is True

    async def test_no_sources(self) -> None:
        assert await collect_results([], "salsa", "Madrid") == []
