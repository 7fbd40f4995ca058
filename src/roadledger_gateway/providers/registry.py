"""Provider configuration and adapter registry."""

from dataclasses import dataclass
from typing import Any

import httpx

from roadledger_gateway.config import Settings
from roadledger_gateway.core.circuit_breaker import HealthTracker
from roadledger_gateway.models import PRIMARY_PROVIDER, PROVIDER_PREFERENCE, ProviderId
from roadledger_gateway.providers.anthropic import AnthropicAdapter
from roadledger_gateway.providers.base import ProviderAdapter
from roadledger_gateway.providers.openai import OpenAIAdapter
from roadledger_gateway.utils import get_logger

logger = get_logger(__name__)


@dataclass
class ProviderConfig:
    """Provider configuration."""

    id: ProviderId
    name: str
    base_url: str
    model: str
    api_key: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary (excluding sensitive data)."""
        return {
            "id": self.id.value,
            "name": self.name,
            "base_url": self.base_url,
            "model": self.model,
            "has_api_key": bool(self.api_key),
        }


@dataclass
class RegisteredProvider:
    """A configured provider together with its adapter."""

    config: ProviderConfig
    adapter: ProviderAdapter

    @property
    def id(self) -> ProviderId:
        return self.config.id


PROVIDER_NAMES: dict[ProviderId, str] = {
    ProviderId.OPENAI: "OpenAI",
    ProviderId.ANTHROPIC: "Anthropic",
}


class ProviderRegistry:
    """Configured providers, always iterated in preference order."""

    def __init__(self) -> None:
        """Initialize registry with empty providers."""
        self._providers: dict[ProviderId, RegisteredProvider] = {}

    def add_provider(self, config: ProviderConfig, adapter: ProviderAdapter) -> None:
        """Add or replace a provider.

        Providers without an API key are ignored.

        Args:
            config: Provider configuration
            adapter: Adapter that talks to the provider
        """
        if not config.api_key:
            logger.info("provider.skipped", provider_id=config.id.value, reason="no_api_key")
            return
        self._providers[config.id] = RegisteredProvider(config=config, adapter=adapter)
        logger.info("provider.added", provider_id=config.id.value, model=config.model)

    def get(self, provider_id: ProviderId) -> RegisteredProvider | None:
        """Get a configured provider by id."""
        return self._providers.get(provider_id)

    def is_configured(self, provider_id: ProviderId) -> bool:
        return provider_id in self._providers

    @property
    def primary(self) -> RegisteredProvider | None:
        """The primary provider, if it is configured."""
        return self._providers.get(PRIMARY_PROVIDER)

    def configured(self) -> list[RegisteredProvider]:
        """Configured providers in preference order."""
        return [self._providers[pid] for pid in PROVIDER_PREFERENCE if pid in self._providers]

    def list_providers(self) -> list[dict[str, Any]]:
        """List configured providers (excluding sensitive data)."""
        return [provider.config.to_dict() for provider in self.configured()]

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        tracker: HealthTracker,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "ProviderRegistry":
        """Build the registry from environment configuration.

        Args:
            settings: Application settings
            tracker: Health tracker shared by all adapters
            transport: Optional httpx transport (tests)

        Returns:
            Registry holding every provider that has an API key
        """
        registry = cls()
        common = {
            "tracker": tracker,
            "timeout": settings.request_timeout,
            "max_tokens": settings.max_output_tokens,
            "trip_on_auth_failure": settings.trip_circuit_on_auth_failure,
            "transport": transport,
        }

        registry.add_provider(
            ProviderConfig(
                id=ProviderId.OPENAI,
                name=PROVIDER_NAMES[ProviderId.OPENAI],
                base_url=settings.openai_base_url,
                model=settings.openai_model,
                api_key=settings.openai_api_key,
            ),
            OpenAIAdapter(settings.openai_base_url, settings.openai_model, **common),
        )
        registry.add_provider(
            ProviderConfig(
                id=ProviderId.ANTHROPIC,
                name=PROVIDER_NAMES[ProviderId.ANTHROPIC],
                base_url=settings.anthropic_base_url,
                model=settings.anthropic_model,
                api_key=settings.anthropic_api_key,
            ),
            AnthropicAdapter(
                settings.anthropic_base_url,
                settings.anthropic_model,
                api_version=settings.anthropic_version,
                **common,
            ),
        )
        return registry
