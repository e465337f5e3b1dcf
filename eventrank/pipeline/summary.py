"""Natural-language summary of a ranking result.

A fixed template is always available. With an LLM provider, the provider
writes the summary and the template is the fallback on any error.
"""

import logging

from eventrank.classify.llm.base import LLMProvider
from eventrank.core.schemas import RankingResult

logger = logging.getLogger(__name__)

_SUMMARY_SYSTEM_PROMPT = (
    "You are a helpful assistant for international students studying abroad.\n\n"
    "Write a natural, conversational summary of the events found:\n"
    "  - be enthusiastic and helpful\n"
    "  - mention the variety of options found\n"
    "  - highlight student-friendly aspects\n"
    "  - keep it under 150 words\n"
    "  - sound like a friend giving recommendations\n"
    "Return plain text only."
)

_HIGHLIGHT_COUNT = 3
_PROMPT_EVENT_LIMIT = 10


def template_summary(result: RankingResult) -> str:
    """Deterministic summary used without a provider or when it fails."""
    location = result.location or "your area"
    if not result.events:
        return (
            f'I couldn\'t find any specific events matching "{result.query}" in {location}, '
            "but I can suggest some general activities and places that students "
            "typically enjoy in that area."
        )
    highlights = ", ".join(e.title for e in result.events[:_HIGHLIGHT_COUNT])
    return (
        f'I found {len(result.events)} events that match your query "{result.query}" '
        f"in {location}! Here are some highlights: {highlights}."
    )


def _build_user_prompt(result: RankingResult) -> str:
    lines = [
        f"- {e.title} ({e.platform}): {e.description or 'no description'}"
        for e in result.events[:_PROMPT_EVENT_LIMIT]
    ]
    return (
        f'User asked: "{result.query}" in {result.location or "an unspecified location"}\n\n'
        "Found these events:\n" + "\n".join(lines)
    )


def summarize(
    result: RankingResult,
    provider: LLMProvider | None = None,
    model: str | None = None,
) -> str:
    """Summarize ``result``; an empty result never calls the provider."""
    if provider is None or not result.events:
        return template_summary(result)

    try:
        text = provider.complete(
            _build_user_prompt(result), model=model, system=_SUMMARY_SYSTEM_PROMPT
        ).strip()
    except Exception:
        logger.warning(
            "Summary generation with '%s' failed - using template",
            provider.provider_id,
            exc_info=True,
        )
        return template_summary(result)

    return text or template_summary(result)
