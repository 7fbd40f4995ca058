"""Fallback orchestration across extraction providers."""

import base64
import time

from roadledger_gateway.core.circuit_breaker import HealthTracker
from roadledger_gateway.models import (
    PRIMARY_PROVIDER,
    ExtractionOutcome,
    ExtractionRequest,
)
from roadledger_gateway.providers.registry import ProviderRegistry, RegisteredProvider
from roadledger_gateway.utils import get_logger

logger = get_logger(__name__)

NO_PROVIDERS_MESSAGE = "No extraction providers configured"
ALL_UNAVAILABLE_MESSAGE = "All configured providers are unavailable"
EXHAUSTED_MESSAGE = "All extraction providers failed"


class ExtractionGateway:
    """Tries providers one at a time in preference order.

    Providers with an open circuit are skipped. When every configured
    circuit is open the primary is still tried once as a probe, so the
    service is never locked out until the reset window lapses.
    """

    def __init__(self, registry: ProviderRegistry, tracker: HealthTracker) -> None:
        """Initialize gateway.

        Args:
            registry: Configured providers and their adapters
            tracker: Health tracker shared with the adapters
        """
        self.registry = registry
        self.tracker = tracker

    def candidates(self) -> list[RegisteredProvider]:
        """Build the ordered candidate list for one request."""
        configured = self.registry.configured()
        eligible = [p for p in configured if not self.tracker.is_open(p.id)]

        if not eligible and self.registry.primary is not None:
            logger.info("gateway.forced_probe", provider=PRIMARY_PROVIDER.value)
            eligible = [self.registry.primary]

        return eligible

    async def extract(self, request: ExtractionRequest) -> ExtractionOutcome:
        """Run the request against providers until one succeeds.

        Args:
            request: Sanitized extraction request

        Returns:
            The first successful outcome, or a failed outcome. Never raises.
        """
        if not self.registry.configured():
            logger.error("gateway.not_configured")
            return ExtractionOutcome(
                success=False,
                provider_used=PRIMARY_PROVIDER,
                elapsed_ms=0,
                error_message=NO_PROVIDERS_MESSAGE,
            )

        candidates = self.candidates()
        if not candidates:
            logger.warning("gateway.all_circuits_open")
            return ExtractionOutcome(
                success=False,
                provider_used=self.registry.configured()[-1].id,
                elapsed_ms=0,
                error_message=ALL_UNAVAILABLE_MESSAGE,
            )

        started = time.perf_counter()
        image_base64 = base64.b64encode(request.image_bytes).decode("ascii")

        for provider in candidates:
            outcome = await provider.adapter.call(
                provider.config.api_key,
                request.prompt_text,
                image_base64,
                request.image_content_type,
            )
            if outcome.success:
                return outcome

            logger.warning(
                "gateway.provider_failed",
                provider=provider.id.value,
                error=outcome.error_message,
                elapsed_ms=outcome.elapsed_ms,
            )

        elapsed_ms = int((time.perf_counter() - started) * 1000)
        logger.warning(
            "gateway.exhausted",
            attempted=[p.id.value for p in candidates],
            elapsed_ms=elapsed_ms,
        )
        return ExtractionOutcome(
            success=False,
            provider_used=candidates[-1].id,
            elapsed_ms=elapsed_ms,
            error_message=EXHAUSTED_MESSAGE,
        )
