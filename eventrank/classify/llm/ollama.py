"""Ollama local LLM provider (OpenAI-compatible API)."""

import logging
import os

from eventrank.classify.llm.base import LLMProvider
from eventrank.classify.llm.openai import chat_completion

logger = logging.getLogger(__name__)

_OLLAMA_BASE_URL = "http://localhost:11434/v1"


class OllamaProvider(LLMProvider):
    """LLM provider using a local Ollama server via its OpenAI-compatible API."""

    @property
    def provider_id(self) -> str:
        return "ollama"

    @property
    def default_model(self) -> str:
        return "llama3"

    @property
    def env_var(self) -> None:
        return None

    def complete(
        self,
        prompt: str,
        model: str | None = None,
        *,
        system: str | None = None,
    ) -> str:
        base_url = os.environ.get("OLLAMA_BASE_URL", _OLLAMA_BASE_URL)
        use_model = model or self.default_model
        logger.debug("Ollama completion (%s) at %s", use_model, base_url)
        return chat_completion(prompt, use_model, system, api_key="ollama", base_url=base_url)
