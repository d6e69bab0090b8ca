from __future__ import annotations

import re
from typing import Any

PROVIDERS: dict[str, tuple[str, ...]] = {
    "openai": ("gpt-4o", "gpt-4o-mini", "gpt-4-turbo", "gpt-4", "gpt-3.5-turbo", "o1-preview", "o1-mini"),
    "anthropic": (
        "claude-3-5-sonnet-20241022",
        "claude-3-5-haiku-20241022",
        "claude-3-opus-20240229",
        "claude-3-sonnet-20240229",
        "claude-3-haiku-20240307",
    ),
    "google": ("gemini-1.5-pro", "gemini-1.5-flash", "gemini-pro"),
    "groq": ("llama-3.1-70b-versatile", "llama-3.1-8b-instant", "mixtral-8x7b-32768", "gemma-7b-it"),
    "deepseek": ("deepseek-chat", "deepseek-coder"),
    "xai": ("grok-beta",),
    "cohere": ("command-r-plus", "command-r", "command-light"),
}

REASONING_MODELS = frozenset({"o1-preview", "o1-mini"})
VISION_MODELS = frozenset(
    {
        "gpt-4o",
        "gpt-4o-mini",
        "gpt-4-turbo",
        "claude-3-5-sonnet-20241022",
        "claude-3-opus-20240229",
        "gemini-1.5-pro",
        "gemini-1.5-flash",
    }
)

RECOMMENDED_MODELS = {
    "best_overall": "claude-3-5-sonnet-20241022",
    "fastest": "claude-3-5-haiku-20241022",
    "cheapest": "gpt-4o-mini",
    "reasoning": "o1-preview",
    "coding": "deepseek-chat",
    "vision": "gpt-4o",
}

# First matching pattern wins, so more specific names come first.
_CONTEXT_WINDOWS: tuple[tuple[str, int], ...] = (
    (r"gpt-4o", 128_000),
    (r"gpt-4-turbo", 128_000),
    (r"gpt-4", 8_192),
    (r"gpt-3\.5-turbo", 4_096),
    (r"o1", 200_000),
    (r"claude-3", 200_000),
    (r"gemini-1\.5", 1_000_000),
    (r"gemini-pro", 32_768),
    (r"llama-3\.1", 128_000),
    (r"mixtral", 32_768),
    (r"deepseek", 64_000),
    (r"grok", 128_000),
    (r"command-r", 128_000),
    (r"command-light", 100_000),
)
DEFAULT_CONTEXT_WINDOW = 4_096


def list_providers() -> list[str]:
    return list(PROVIDERS)


def list_models(provider: str | None = None) -> list[str]:
    if provider is not None:
        return list(PROVIDERS.get(provider, ()))
    return [model for models in PROVIDERS.values() for model in models]


def supported_model(name: str) -> bool:
    return provider_for_model(name) is not None


def provider_for_model(name: str) -> str | None:
    for provider, models in PROVIDERS.items():
        if name in models:
            return provider
    return None


def is_reasoning_model(name: str) -> bool:
    return name in REASONING_MODELS


def has_vision(name: str) -> bool:
    return name in VISION_MODELS


def recommended_models() -> dict[str, str]:
    return dict(RECOMMENDED_MODELS)


def context_window(name: str) -> int:
    for pattern, size in _CONTEXT_WINDOWS:
        if re.search(pattern, name):
            return size
    return DEFAULT_CONTEXT_WINDOW


def model_info(name: str) -> dict[str, Any] | None:
    provider = provider_for_model(name)
    if provider is None:
        return None
    return {
        "name": name,
        "provider": provider,
        "reasoning": is_reasoning_model(name),
        "vision": has_vision(name),
        "context_window": context_window(name),
    }
