"""Google Gemini LLM provider (google-genai SDK)."""

import logging

from eventrank.classify.llm.base import (
    DEFAULT_TEMPERATURE,
    SYSTEM_PROMPT,
    LLMProvider,
    missing_sdk,
    require_api_key,
)

logger = logging.getLogger(__name__)


class GeminiProvider(LLMProvider):
    """LLM provider using the Google Gemini API (google-genai SDK)."""

    @property
    def provider_id(self) -> str:
        return "gemini"

    @property
    def default_model(self) -> str:
        return "gemini-2.5-flash"

    @property
    def env_var(self) -> str:
        return "GOOGLE_API_KEY"

    def complete(
        self,
        prompt: str,
        model: str | None = None,
        *,
        system: str | None = None,
    ) -> str:
        api_key = require_api_key(self.env_var)

        try:
            from google import genai
            from google.genai import types as genai_types
        except ImportError:
            raise missing_sdk("google-genai", "gemini") from None

        use_model = model or self.default_model
        logger.debug("Gemini completion (%s), %d prompt chars", use_model, len(prompt))
        client = genai.Client(api_key=api_key)
        response = client.models.generate_content(
            model=use_model,
            contents=prompt,
            config=genai_types.GenerateContentConfig(
                system_instruction=system if system is not None else SYSTEM_PROMPT,
                temperature=DEFAULT_TEMPERATURE,
            ),
        )

        return response.text or ""
