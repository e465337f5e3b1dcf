"""Abstract base class for LLM providers and shared response parsing."""

import json
import os
import re
from abc import ABC, abstractmethod
from typing import Any

# Low temperature: classification and summaries should be repeatable.
DEFAULT_TEMPERATURE = 0.1
DEFAULT_MAX_TOKENS = 1024

SYSTEM_PROMPT = (
    "You analyze requests from international students looking for things to do "
    "while studying abroad.\n\n"
    "Return ONLY a JSON object (no markdown, no explanation) with these fields:\n"
    "- is_event_search (bool): true if the user asks about places to go, things "
    "to do, events or activities. Be generous.\n"
    "- location (string or null): any city, country, neighborhood or area mentioned\n"
    '- event_types (list[str]): zero or more of "social", "academic", "cultural", '
    '"sports", "nightlife", "food", "entertainment", "outdoor", "workshop", '
    '"networking"\n'
    "- search_keywords (list[str]): terms useful for searching social media posts\n"
    "- confidence (number 0-1): how sure you are of this analysis\n\n"
    'Example: "where do undergrads go for bars in kenya" -> '
    '{"is_event_search": true, "location": "kenya", "event_types": ["nightlife"], '
    '"search_keywords": ["bars", "undergrads", "kenya"], "confidence": 0.9}'
)

_FENCE_OPEN = re.compile(r"^```(?:json)?\s*\n?")
_FENCE_CLOSE = re.compile(r"\n?```\s*$")


def parse_json_object(raw_text: str) -> dict[str, Any]:
    """Parse an LLM response into a JSON object.

    Handles markdown-wrapped JSON (```json ... ```) and plain JSON.
    Raises ValueError on malformed or non-object responses.
    """
    cleaned = _FENCE_OPEN.sub("", raw_text.strip())
    cleaned = _FENCE_CLOSE.sub("", cleaned)

    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        msg = f"Failed to parse LLM response as JSON: {e}"
        raise ValueError(msg) from e

    if not isinstance(data, dict):
        msg = f"LLM response must be a JSON object, got {type(data).__name__}"
        raise ValueError(msg)
    return data


def require_api_key(env_var: str) -> str:
    """Return the API key from ``env_var`` or raise ValueError naming it."""
    api_key = os.environ.get(env_var)
    if not api_key:
        msg = f"{env_var} environment variable is required"
        raise ValueError(msg)
    return api_key


def missing_sdk(package: str, extra: str) -> ImportError:
    msg = (
        f"{package} is required for LLM classification. "
        f"Install with: pip install 'student-event-ranker[{extra}]'"
    )
    return ImportError(msg)


class LLMProvider(ABC):
    """Base class that every LLM provider must implement."""

    @property
    @abstractmethod
    def provider_id(self) -> str:
        """Unique identifier for this provider (e.g. 'anthropic')."""

    @abstractmethod
    def complete(
        self,
        prompt: str,
        model: str | None = None,
        *,
        system: str | None = None,
    ) -> str:
        """Send a prompt to the LLM and return the raw response text.

        Args:
            prompt: User message.
            model: Override the provider's default model. None uses default.
            system: Override the system prompt. None falls back to SYSTEM_PROMPT.
        """

    @property
    @abstractmethod
    def default_model(self) -> str:
        """The default model ID used when no override is specified."""

    @property
    @abstractmethod
    def env_var(self) -> str | None:
        """Environment variable name for the API key, or None if not needed."""
