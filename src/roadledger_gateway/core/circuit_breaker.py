"""Circuit breaker pattern for provider fault tolerance."""

import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Iterable

from roadledger_gateway.metrics import MetricsExporter
from roadledger_gateway.models import PROVIDER_PREFERENCE, ProviderId
from roadledger_gateway.utils import get_logger

logger = get_logger(__name__)


@dataclass
class CircuitBreakerConfig:
    """Circuit breaker configuration."""

    failure_threshold: int = 3
    reset_window: float = 300.0


@dataclass
class ProviderHealth:
    """Failure state of one provider."""

    failure_count: int = 0
    last_failure_at: float | None = None
    circuit_open: bool = False
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)


class HealthTracker:
    """Per-provider circuit breaker state.

    Two logical states: closed and open. There is no stored half-open
    state; an open circuit whose last failure is older than the reset
    window is reset on the next read. A single success closes a circuit.
    """

    def __init__(
        self,
        config: CircuitBreakerConfig | None = None,
        providers: Iterable[ProviderId] = PROVIDER_PREFERENCE,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize tracker.

        Args:
            config: Threshold and reset window
            providers: Providers to track
            clock: Monotonic time source in seconds
        """
        self.config = config or CircuitBreakerConfig()
        self._clock = clock
        self._health: dict[ProviderId, ProviderHealth] = {
            provider: ProviderHealth() for provider in providers
        }

    def _get(self, provider: ProviderId) -> ProviderHealth:
        return self._health[provider]

    def _expire(self, health: ProviderHealth) -> bool:
        """Zero stale counters. Caller holds the lock."""
        if health.last_failure_at is None:
            return False
        if self._clock() - health.last_failure_at <= self.config.reset_window:
            return False
        health.failure_count = 0
        health.last_failure_at = None
        was_open = health.circuit_open
        health.circuit_open = False
        return was_open

    def is_open(self, provider: ProviderId) -> bool:
        """Check whether the provider's circuit is open.

        Performs the lazy reset as a side effect.
        """
        health = self._get(provider)
        with health.lock:
            if self._expire(health):
                logger.info("circuit.reset", provider=provider.value, reason="window_elapsed")
            return health.circuit_open

    def record_failure(self, provider: ProviderId) -> None:
        """Record a provider-health failure."""
        health = self._get(provider)
        with health.lock:
            self._expire(health)
            health.failure_count += 1
            health.last_failure_at = self._clock()
            failures = health.failure_count
            opened = not health.circuit_open and failures >= self.config.failure_threshold
            if opened:
                health.circuit_open = True

        if opened:
            MetricsExporter.record_circuit_opened(provider.value)
            logger.warning(
                "circuit.opened",
                provider=provider.value,
                threshold=self.config.failure_threshold,
                failures=failures,
            )
        else:
            logger.debug("circuit.failure_recorded", provider=provider.value, failures=failures)

    def record_success(self, provider: ProviderId) -> None:
        """Record a success. Always fully heals the provider."""
        health = self._get(provider)
        with health.lock:
            recovered = health.circuit_open or health.failure_count > 0
            health.failure_count = 0
            health.circuit_open = False

        if recovered:
            logger.info("circuit.recovered", provider=provider.value)

    def trip(self, provider: ProviderId) -> None:
        """Open the provider's circuit immediately."""
        health = self._get(provider)
        with health.lock:
            health.failure_count = max(health.failure_count, self.config.failure_threshold)
            health.last_failure_at = self._clock()
            already_open = health.circuit_open
            health.circuit_open = True

        if not already_open:
            MetricsExporter.record_circuit_opened(provider.value)
            logger.warning("circuit.tripped", provider=provider.value)

    def reset(self, provider: ProviderId | None = None) -> None:
        """Reset one provider, or all providers, to closed."""
        targets = [provider] if provider is not None else list(self._health)
        for target in targets:
            health = self._get(target)
            with health.lock:
                health.failure_count = 0
                health.last_failure_at = None
                health.circuit_open = False
            logger.info("circuit.reset", provider=target.value, reason="manual")

    def snapshot(self, provider: ProviderId) -> dict:
        """Get provider health as dictionary.

        Returns:
            Statistics dictionary
        """
        health = self._get(provider)
        with health.lock:
            self._expire(health)
            seconds_since_failure = (
                None
                if health.last_failure_at is None
                else round(self._clock() - health.last_failure_at, 3)
            )
            return {
                "provider": provider.value,
                "failure_count": health.failure_count,
                "circuit_open": health.circuit_open,
                "seconds_since_failure": seconds_since_failure,
            }

    def snapshot_all(self) -> list[dict]:
        """Get health of every tracked provider."""
        return [self.snapshot(provider) for provider in self._health]
