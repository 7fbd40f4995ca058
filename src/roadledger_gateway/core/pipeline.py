"""Extraction pipeline - sanitize, extract with fallback, validate."""

import uuid
from dataclasses import dataclass

import httpx

from roadledger_gateway.config import Settings
from roadledger_gateway.core.circuit_breaker import CircuitBreakerConfig, HealthTracker
from roadledger_gateway.core.gateway import NO_PROVIDERS_MESSAGE, ExtractionGateway
from roadledger_gateway.core.prompts import build_prompt
from roadledger_gateway.core.sanitizer import (
    contains_injection_attempt,
    sanitize_ocr_text,
    sanitize_pdf_text,
)
from roadledger_gateway.core.validator import to_typed_extraction, validate_extraction_output
from roadledger_gateway.metrics import MetricsExporter
from roadledger_gateway.models import (
    ALLOWED_FIELDS,
    ExtractionKind,
    ExtractionRequest,
    ProviderId,
    ReceiptExtraction,
    SettlementExtraction,
)
from roadledger_gateway.providers.registry import ProviderRegistry
from roadledger_gateway.utils import get_logger, safe_log_fields

logger = get_logger(__name__)

AUTO_ACCEPT_CONFIDENCE = 0.8
PDF_CONTENT_TYPE = "application/pdf"


@dataclass(frozen=True)
class ExtractionResult:
    """Outcome of one pipeline run, safe to hand to the application."""

    success: bool
    kind: ExtractionKind
    provider: ProviderId
    elapsed_ms: int
    injection_flagged: bool = False
    auto_accept: bool = False
    extraction: ReceiptExtraction | SettlementExtraction | None = None
    error: str | None = None

    @property
    def not_configured(self) -> bool:
        return self.error == NO_PROVIDERS_MESSAGE


class ExtractionPipeline:
    """Main processing pipeline for document extraction.

    Coordinates:
    1. Injection flagging and sanitization of document text
    2. Prompt assembly
    3. Provider fallback through the gateway
    4. Allow-list validation and typed conversion
    5. Metrics collection
    """

    def __init__(self, gateway: ExtractionGateway) -> None:
        """Initialize pipeline.

        Args:
            gateway: Fallback orchestrator
        """
        self.gateway = gateway

    @property
    def tracker(self) -> HealthTracker:
        return self.gateway.tracker

    @property
    def registry(self) -> ProviderRegistry:
        return self.gateway.registry

    async def run(
        self,
        kind: ExtractionKind,
        image_bytes: bytes,
        content_type: str,
        document_text: str | None = None,
    ) -> ExtractionResult:
        """Extract structured data from one document.

        Args:
            kind: Document kind, selects prompt and allow-list
            image_bytes: Raw document bytes
            content_type: Document MIME type
            document_text: Optional OCR/PDF text read from the document

        Returns:
            Extraction result
        """
        request_id = str(uuid.uuid4())[:8]
        log = logger.bind(request_id=request_id, kind=kind.value)

        injection_flagged = contains_injection_attempt(document_text)
        if injection_flagged:
            log.warning("pipeline.injection_flagged", **safe_log_fields(document_text=document_text))

        if content_type.lower() == PDF_CONTENT_TYPE:
            text = sanitize_pdf_text(document_text)
        else:
            text = sanitize_ocr_text(document_text)

        request = ExtractionRequest(
            prompt_text=build_prompt(kind, text),
            image_bytes=image_bytes,
            image_content_type=content_type,
        )
        log.info(
            "pipeline.start",
            content_type=content_type,
            image_bytes=len(image_bytes),
            **safe_log_fields(prompt=request.prompt_text),
        )

        outcome = await self.gateway.extract(request)

        if not outcome.success or outcome.data is None:
            result = ExtractionResult(
                success=False,
                kind=kind,
                provider=outcome.provider_used,
                elapsed_ms=outcome.elapsed_ms,
                injection_flagged=injection_flagged,
                error=outcome.error_message,
            )
            MetricsExporter.record_extraction(
                kind.value,
                "not_configured" if result.not_configured else "failed",
                injection_flagged,
            )
            log.warning(
                "pipeline.failed",
                provider=outcome.provider_used.value,
                error=outcome.error_message,
                elapsed_ms=outcome.elapsed_ms,
            )
            return result

        cleaned = validate_extraction_output(outcome.data, ALLOWED_FIELDS[kind])
        extraction = to_typed_extraction(kind, cleaned)
        auto_accept = (
            extraction.headline_amount is not None
            and extraction.headline_confidence >= AUTO_ACCEPT_CONFIDENCE
        )

        MetricsExporter.record_extraction(kind.value, "success", injection_flagged)
        log.info(
            "pipeline.complete",
            provider=outcome.provider_used.value,
            elapsed_ms=outcome.elapsed_ms,
            fields=len(cleaned),
            auto_accept=auto_accept,
        )
        return ExtractionResult(
            success=True,
            kind=kind,
            provider=outcome.provider_used,
            elapsed_ms=outcome.elapsed_ms,
            injection_flagged=injection_flagged,
            auto_accept=auto_accept,
            extraction=extraction,
        )


def create_pipeline(
    settings: Settings,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ExtractionPipeline:
    """Factory for extraction pipeline.

    The health tracker is created here and shared by the gateway and
    every adapter.

    Args:
        settings: Application settings
        transport: Optional httpx transport (tests)

    Returns:
        Configured pipeline
    """
    tracker = HealthTracker(
        CircuitBreakerConfig(
            failure_threshold=settings.circuit_failure_threshold,
            reset_window=settings.circuit_reset_seconds,
        )
    )
    registry = ProviderRegistry.from_settings(settings, tracker, transport=transport)
    return ExtractionPipeline(ExtractionGateway(registry, tracker))
