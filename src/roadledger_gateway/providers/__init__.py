"""Extraction provider adapters and registry."""

from roadledger_gateway.providers.anthropic import AnthropicAdapter
from roadledger_gateway.providers.base import ProviderAdapter, ProviderError, extract_json_object
from roadledger_gateway.providers.openai import OpenAIAdapter
from roadledger_gateway.providers.registry import (
    ProviderConfig,
    ProviderRegistry,
    RegisteredProvider,
)

__all__ = [
    "AnthropicAdapter",
    "OpenAIAdapter",
    "ProviderAdapter",
    "ProviderConfig",
    "ProviderError",
    "ProviderRegistry",
    "RegisteredProvider",
    "extract_json_object",
]
