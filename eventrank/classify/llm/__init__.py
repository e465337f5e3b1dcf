"""LLM provider registry with lazy loading.

Usage:
    from eventrank.classify.llm import get_provider

    provider = get_provider("anthropic")
    raw = provider.complete("bars for students in lisbon")
"""

import importlib

from eventrank.classify.llm.base import LLMProvider, parse_json_object

__all__ = ["LLMProvider", "available_providers", "get_provider", "parse_json_object"]

# provider name -> (module_path, class_name)
_REGISTRY: dict[str, tuple[str, str]] = {
    "anthropic": ("eventrank.classify.llm.anthropic", "AnthropicProvider"),
    "openai": ("eventrank.classify.llm.openai", "OpenAIProvider"),
    "gemini": ("eventrank.classify.llm.gemini", "GeminiProvider"),
    "ollama": ("eventrank.classify.llm.ollama", "OllamaProvider"),
}


def get_provider(name: str) -> LLMProvider:
    """Instantiate and return an LLM provider by name.

    Raises:
        ValueError: If the provider name is unknown.
    """
    if name not in _REGISTRY:
        valid = ", ".join(sorted(_REGISTRY))
        msg = f"Unknown LLM provider '{name}'. Available: {valid}"
        raise ValueError(msg)

    module_path, class_name = _REGISTRY[name]
    module = importlib.import_module(module_path)
    cls = getattr(module, class_name)
    return cls()  # type: ignore[no-any-return]


def available_providers() -> list[str]:
    return sorted(_REGISTRY)
