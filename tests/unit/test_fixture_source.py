"""Tests for the fixture-backed event source."""

from pathlib import Path
from textwrap import dedent

import pytest

from eventrank.platforms.fixture import (
    FixtureSource,
    SocialPost,
    match_score,
    post_to_candidate,
    title_from_content,
)


def _post(
    *,
    id: str = "ig_1",
    platform: str = "instagram",
    content: str = "Student bar crawl in Barcelona tonight. Meet at the fountain.",
    location: str | None = None,
    city: str | None = "Barcelona",
    country: str | None = None,
    hashtags: tuple[str, ...] = (),
    activity_type: str | None = None,
    engagement_score: float | None = None,
) -> SocialPost:
    return SocialPost(
        id=id,
        platform=platform,
        content=content,
        location=location,
        city=city,
        country=country,
        hashtags=hashtags,
        activity_type=activity_type,
        engagement_score=engagement_score,
    )


class TestTitleFromContent:
    def test_first_sentence(self) -> None:
        content = "Free pizza night at the student union! Bring friends."
        assert title_from_content(content) == "Free pizza night at the student union"

    def test_short_first_sentence_truncates_content(self) -> None:
        content = "Hi. " + "This is a very long announcement about a secret gig downtown"
        assert title_from_content(content) == content[:50] + "..."

    def test_short_content_kept(self) -> None:
        assert title_from_content("Hi there") == "Hi there"


class TestPostToCandidate:
    def test_field_mapping(self) -> None:
        post = SocialPost(
            id="tw_9",
            platform="twitter",
            content="Open mic at Cafe Sol tonight!",
            location="Cafe Sol, Gracia",
            hashtags=("openmic",),
            author_username="cafesol",
            post_url="https://x.com/cafesol/9",
            created_at="2024-05-01T18:00:00",
        )
        event = post_to_candidate(post)
        assert event.id == "tw_9"
        assert event.platform == "twitter"
        assert event.title == "Open mic at Cafe Sol tonight"
        assert event.description == post.content
        assert event.location == "Cafe Sol, Gracia"
        assert event.date_time == "2024-05-01T18:00:00"
        assert event.source_url == "https://x.com/cafesol/9"
        assert event.organizer == "cafesol"
        assert event.tags == ("openmic",)
        assert event.raw_data["author_username"] == "cafesol"

    def test_location_falls_back_to_city_then_unknown(self) -> None:
        assert post_to_candidate(_post(city="Porto")).location == "Porto"
        assert post_to_candidate(_post(city=None)).location == "Unknown"


class TestMatchScore:
    def test_all_signals(self) -> None:
        post = _post(hashtags=("barcrawl", "food"), engagement_score=150)
        # tokens 3 + one hashtag 2 + city 2 + engagement 1.5
        assert match_score(post, "bar crawl", "Barcelona") == pytest.approx(8.5)

    def test_engagement_bonus_capped(self) -> None:
        post = _post(engagement_score=10_000)
        assert match_score(post, "zzz") == pytest.approx(3.0)

    def test_activity_type(self) -> None:
        post = _post(activity_type="nightlife")
        assert match_score(post, "nightlife") == pytest.approx(2.0)


class TestFixtureSource:
    def test_search_filters_and_sorts(self) -> None:
        strong = _post(id="1", hashtags=("barcrawl",))
        weak = _post(id="2", content="Book club meets on Sunday", city="Madrid")
        source = FixtureSource([weak, strong])
        assert [p.id for p in source.search("bar crawl", "Barcelona")] == ["1"]

    def test_posts_are_read_only_tuple(self) -> None:
        posts = [_post()]
        source = FixtureSource(posts)
        posts.append(_post(id="2"))
        assert len(source.posts) == 1

    async def test_fetch_groups_per_platform(self) -> None:
        source = FixtureSource([
            _post(id="1", platform="instagram"),
            _post(id="2", platform="tiktok", content="Bar crawl for students this weekend"),
            _post(id="3", platform="instagram", content="Another bar crawl, bigger this time"),
        ])
        results = await source.fetch("bar crawl", "")

        assert [r.platform for r in results] == ["instagram", "tiktok"]
        assert all(r.success for r in results)
        assert all(r.location == "unknown" for r in results)
        assert {e.id for e in results[0].events} == {"1", "3"}

    async def test_fetch_nothing_matches_reports_empty_success(self) -> None:
        results = await FixtureSource([_post()]).fetch("opera", "Vienna")

        assert len(results) == 1
        assert results[0].success is True
        assert results[0].platform == "fixtures"
        assert results[0].events == ()
        assert results[0].location == "Vienna"

    async def test_fetch_empty_dataset(self) -> None:
        results = await FixtureSource([]).fetch("party", "Rome")
        assert [(r.platform, r.success, len(r.events)) for r in results] == [("fixtures", True, 0)]

    def test_from_yaml_list(self, tmp_path: Path) -> None:
        path = tmp_path / "posts.yaml"
        path.write_text(dedent("""\
            - id: ig_1
              platform: instagram
              content: Salsa night for students
              city: Madrid
        """))
        source = FixtureSource.from_yaml(path)
        assert source.posts[0].city == "Madrid"

    def test_from_yaml_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "posts.yaml"
        path.write_text(dedent("""\
            posts:
              - id: ig_1
                platform: instagram
                content: Salsa night for students
                hashtags: [salsa, madrid]
        """))
        source = FixtureSource.from_yaml(path)
        assert source.posts[0].hashtags == ("salsa", "madrid")

    def test_from_yaml_missing(self) -> None:
        with pytest.raises(FileNotFoundError):
            FixtureSource.from_yaml("/nonexistent/posts.yaml")
