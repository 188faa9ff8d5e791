"""LLM connection settings, model catalog and provider presets."""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_MODEL = "gemini/gemini-2.5-flash"


@dataclass(frozen=True)
class ModelInfo:
    """A model offered for generation, as shown in ``stationv models``."""

    model: str
    name: str
    cost: str
    description: str


MODELS: dict[str, ModelInfo] = {
    info.model: info
    for info in (
        ModelInfo("gemini/gemini-2.5-flash", "Gemini 2.5 Flash", "Low", "Fastest, low cost"),
        ModelInfo("gemini/gemini-flash-latest", "Gemini Flash", "Low", "Balanced speed & quality"),
        ModelInfo("gemini/gemini-2.5-pro", "Gemini 2.5 Pro", "High", "Highest quality"),
    )
}


@dataclass(frozen=True)
class ProviderInfo:
    """Metadata for an LLM provider."""

    name: str
    api_base: str | None  # None = use litellm default
    env_key: str
    default_model: str


PROVIDERS: dict[str, ProviderInfo] = {
    p.name: p
    for p in (
        ProviderInfo("google", None, "GEMINI_API_KEY", DEFAULT_MODEL),
        ProviderInfo("openai", None, "OPENAI_API_KEY", "openai/gpt-4o-mini"),
        ProviderInfo("anthropic", None, "ANTHROPIC_API_KEY", "anthropic/claude-sonnet-4-5-20250929"),
        ProviderInfo("deepseek", "https://api.deepseek.com/v1", "DEEPSEEK_API_KEY", "openai/deepseek-chat"),
        ProviderInfo("openrouter", "https://openrouter.ai/api/v1", "OPENROUTER_API_KEY", "openrouter/google/gemini-2.5-flash"),
    )
}


def get_provider(name: str) -> ProviderInfo | None:
    return PROVIDERS.get(name.lower())


def list_providers() -> list[str]:
    return sorted(PROVIDERS)


@dataclass(frozen=True)
class LLMConfig:
    """LLM connection settings."""

    model: str = DEFAULT_MODEL
    api_base: str | None = None
    api_key: str | None = None
    provider: str | None = None

    @classmethod
    def from_env(cls) -> LLMConfig:
        """Build config from STATIONV_* environment variables."""
        provider_name = os.getenv("STATIONV_PROVIDER")
        provider = get_provider(provider_name) if provider_name else None

        model = os.getenv("STATIONV_MODEL")
        api_base = os.getenv("STATIONV_API_BASE")
        api_key = os.getenv("STATIONV_API_KEY")

        if provider:
            model = model or provider.default_model
            api_base = api_base or provider.api_base
            api_key = api_key or os.getenv(provider.env_key)

        return cls(
            model=model or DEFAULT_MODEL,
            api_base=api_base,
            api_key=api_key,
            provider=provider_name,
        )

    def to_litellm_kwargs(self) -> dict[str, str]:
        """Return kwargs suitable for litellm.acompletion()."""
        kwargs: dict[str, str] = {"model": self.model}
        if self.api_base:
            kwargs["api_base"] = self.api_base
        if self.api_key:
            kwargs["api_key"] = self.api_key
        return kwargs
