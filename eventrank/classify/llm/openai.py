"""OpenAI LLM provider, also the client for OpenAI-compatible local servers."""

import logging

from eventrank.classify.llm.base import (
    DEFAULT_TEMPERATURE,
    SYSTEM_PROMPT,
    LLMProvider,
    missing_sdk,
    require_api_key,
)

logger = logging.getLogger(__name__)


def chat_completion(
    prompt: str,
    model: str,
    system: str | None,
    *,
    api_key: str,
    base_url: str | None = None,
) -> str:
    """Run one chat completion against an OpenAI-compatible endpoint."""
    try:
        import openai
    except ImportError:
        raise missing_sdk("openai", "openai") from None

    client = openai.OpenAI(api_key=api_key, base_url=base_url)
    response = client.chat.completions.create(
        model=model,
        temperature=DEFAULT_TEMPERATURE,
        messages=[
            {"role": "system", "content": system if system is not None else SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ],
    )
    return response.choices[0].message.content or ""


class OpenAIProvider(LLMProvider):
    """LLM provider using the OpenAI API."""

    @property
    def provider_id(self) -> str:
        return "openai"

    @property
    def default_model(self) -> str:
        return "gpt-4o-mini"

    @property
    def env_var(self) -> str:
        return "OPENAI_API_KEY"

    def complete(
        self,
        prompt: str,
        model: str | None = None,
        *,
        system: str | None = None,
    ) -> str:
        api_key = require_api_key(self.env_var)
        use_model = model or self.default_model
        logger.debug("OpenAI completion (%s), %d prompt chars", use_model, len(prompt))
        return chat_completion(prompt, use_model, system, api_key=api_key)
