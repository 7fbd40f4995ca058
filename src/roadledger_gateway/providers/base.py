"""Common contract for provider adapters."""

import json
import time
from typing import Any

import httpx

from roadledger_gateway.core.circuit_breaker import HealthTracker
from roadledger_gateway.metrics import MetricsExporter
from roadledger_gateway.models import ExtractionOutcome, ProviderId
from roadledger_gateway.utils import get_logger, sanitize_for_log

logger = get_logger(__name__)

AUTH_FAILURE_STATUSES = frozenset({401, 403})


class ProviderError(Exception):
    """Provider answered, but not with something usable."""


def extract_json_object(text: str) -> dict[str, Any]:
    """Locate and parse the first well-formed JSON object in ``text``.

    The text may surround the object with prose or code fences.

    Raises:
        ProviderError: If no JSON object can be parsed
    """
    decoder = json.JSONDecoder()
    start = text.find("{")
    while start != -1:
        try:
            parsed, _ = decoder.raw_decode(text, start)
        except json.JSONDecodeError:
            start = text.find("{", start + 1)
            continue
        if isinstance(parsed, dict):
            return parsed
        start = text.find("{", start + 1)
    raise ProviderError("No JSON object found in response")


class ProviderAdapter:
    """Base adapter: one outbound call per invocation, no retries.

    Subclasses describe the wire format; this class owns timing,
    failure classification and health reporting.
    """

    provider_id: ProviderId

    def __init__(
        self,
        base_url: str,
        model: str,
        tracker: HealthTracker,
        timeout: float = 60.0,
        max_tokens: int = 1500,
        trip_on_auth_failure: bool = True,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize adapter.

        Args:
            base_url: Provider API base URL
            model: Model name sent with each request
            tracker: Health tracker notified of provider-health events
            timeout: Request timeout in seconds
            max_tokens: Output token cap
            trip_on_auth_failure: Open the circuit on 401/403
            transport: Optional httpx transport (tests)
        """
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.tracker = tracker
        self.timeout = timeout
        self.max_tokens = max_tokens
        self.trip_on_auth_failure = trip_on_auth_failure
        self._transport = transport

    def build_request(
        self, api_key: str, prompt_text: str, image_base64: str, content_type: str
    ) -> tuple[str, dict[str, str], dict[str, Any]]:
        """Build (url, headers, body) for the provider."""
        raise NotImplementedError

    def extract_content(self, body: Any) -> str:
        """Pull the model's text answer out of the response body."""
        raise NotImplementedError

    def parse_payload(self, content: str) -> dict[str, Any]:
        """Parse the model's text answer into a mapping."""
        return extract_json_object(content)

    def _outcome(self, success: bool, started: float, **kwargs: Any) -> ExtractionOutcome:
        return ExtractionOutcome(
            success=success,
            provider_used=self.provider_id,
            elapsed_ms=int((time.perf_counter() - started) * 1000),
            **kwargs,
        )

    def _client_error(self, status_code: int, started: float) -> ExtractionOutcome:
        outcome = self._outcome(
            False, started, error_message=f"{self.provider_id.value} returned {status_code}"
        )
        if status_code in AUTH_FAILURE_STATUSES and self.trip_on_auth_failure:
            self.tracker.trip(self.provider_id)
            result = "auth_error"
        else:
            result = "client_error"

        MetricsExporter.record_provider_call(self.provider_id.value, result, outcome.elapsed_ms)
        logger.warning(
            "provider.client_error",
            provider=self.provider_id.value,
            status=status_code,
            elapsed_ms=outcome.elapsed_ms,
        )
        return outcome

    async def call(
        self,
        api_key: str,
        prompt_text: str,
        image_base64: str,
        content_type: str,
    ) -> ExtractionOutcome:
        """Run one extraction call against the provider.

        Client errors (4xx) come back as failed outcomes without touching
        the circuit. Every other failure is recorded against the circuit
        and also returned as a failed outcome. Never raises.

        Args:
            api_key: Provider API key
            prompt_text: Sanitized prompt
            image_base64: Base64 encoded document
            content_type: Document MIME type

        Returns:
            Extraction outcome
        """
        started = time.perf_counter()
        url, headers, body = self.build_request(api_key, prompt_text, image_base64, content_type)

        logger.debug(
            "provider.request",
            provider=self.provider_id.value,
            model=self.model,
            prompt_length=len(prompt_text),
            image_length=len(image_base64),
        )

        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
                response = await client.post(url, headers=headers, json=body)

            if 400 <= response.status_code < 500:
                return self._client_error(response.status_code, started)
            if not response.is_success:
                raise ProviderError(
                    f"{self.provider_id.value} API error: {response.status_code}"
                )

            try:
                content = self.extract_content(response.json())
            except (ValueError, KeyError, IndexError, TypeError) as e:
                raise ProviderError(f"Malformed {self.provider_id.value} response body") from e
            if not content:
                raise ProviderError(f"No content in {self.provider_id.value} response")

            data = self.parse_payload(content)
        except Exception as e:
            self.tracker.record_failure(self.provider_id)
            outcome = self._outcome(
                False, started, error_message=str(e) or type(e).__name__
            )
            MetricsExporter.record_provider_call(
                self.provider_id.value, "provider_error", outcome.elapsed_ms
            )
            logger.warning(
                "provider.failed",
                provider=self.provider_id.value,
                error_type=type(e).__name__,
                error=sanitize_for_log(str(e)),
                elapsed_ms=outcome.elapsed_ms,
            )
            return outcome

        self.tracker.record_success(self.provider_id)
        outcome = self._outcome(True, started, data=data)
        MetricsExporter.record_provider_call(self.provider_id.value, "success", outcome.elapsed_ms)
        logger.info(
            "provider.success",
            provider=self.provider_id.value,
            fields=len(data),
            elapsed_ms=outcome.elapsed_ms,
        )
        return outcome
