"""LLM provider integrations."""

from painflow.providers.base import ProviderError
from painflow.providers.factory import (
    create_chat_model,
    get_default_model,
    parse_provider_string,
)

__all__ = [
    "ProviderError",
    "create_chat_model",
    "get_default_model",
    "parse_provider_string",
]
