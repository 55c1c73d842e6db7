"""Factory for LangChain chat models.

Uses LangChain's init_chat_model for unified provider instantiation, after
resolving the provider's API key from the environment.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, Any

from painflow.observability.logging import get_logger
from painflow.providers.base import ProviderError

if TYPE_CHECKING:
    from langchain_core.language_models import BaseChatModel

log = get_logger(__name__)

PROVIDER_DEFAULTS: dict[str, str] = {
    "openai": "gpt-4o-mini",
    "anthropic": "claude-sonnet-4-20250514",
}

# Provider -> environment variable holding its API key
_API_KEY_ENV: dict[str, str] = {
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
}

_PACKAGES: dict[str, str] = {
    "openai": "langchain-openai",
    "anthropic": "langchain-anthropic",
}

DEFAULT_TEMPERATURE = 0.3


def get_default_model(provider_name: str) -> str | None:
    """Default model for a provider, or None if unknown."""
    return PROVIDER_DEFAULTS.get(provider_name.lower())


def parse_provider_string(provider_string: str) -> tuple[str, str]:
    """Split "provider/model" into its parts, filling in the default model.

    Raises:
        ProviderError: If no model is given and the provider has no default.
    """
    if "/" in provider_string:
        provider, model = provider_string.split("/", 1)
        return provider.lower(), model

    provider = provider_string.lower()
    model = get_default_model(provider)
    if model is None:
        raise ProviderError(
            provider,
            f"Provider '{provider}' requires explicit model. Use {provider}/<model-name>",
        )
    return provider, model


def create_chat_model(
    provider_name: str,
    model: str,
    **kwargs: Any,
) -> BaseChatModel:
    """Create a LangChain chat model.

    Args:
        provider_name: Provider identifier (openai, anthropic).
        model: Model name.
        **kwargs: Additional provider-specific options.

    Returns:
        Configured BaseChatModel.

    Raises:
        ProviderError: If the provider is unknown, its API key is missing,
            or its LangChain integration is not installed.
    """
    provider = provider_name.lower()
    if provider not in _API_KEY_ENV:
        log.error("provider_unknown", provider=provider)
        raise ProviderError(provider, f"Unknown provider: {provider}")

    kwargs = dict(kwargs)
    env_var = _API_KEY_ENV[provider]
    api_key = kwargs.get("api_key") or os.getenv(env_var)
    if not api_key:
        log.error("provider_config_error", provider=provider, missing=env_var)
        raise ProviderError(provider, f"API key required. Set {env_var} environment variable.")
    kwargs["api_key"] = api_key
    kwargs.setdefault("temperature", DEFAULT_TEMPERATURE)

    try:
        from langchain.chat_models import init_chat_model

        chat_model: BaseChatModel = init_chat_model(model=model, model_provider=provider, **kwargs)
    except ImportError as e:
        package = _PACKAGES[provider]
        log.error("provider_import_error", provider=provider, package=package)
        raise ProviderError(provider, f"{package} not installed. Run: pip install {package}") from e

    log.info("chat_model_created", provider=provider, model=model)
    return chat_model
