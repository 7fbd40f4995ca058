"""Main FastAPI application entry point."""

import base64
import binascii
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse

from roadledger_gateway import __version__
from roadledger_gateway.config import get_settings
from roadledger_gateway.core.pipeline import create_pipeline
from roadledger_gateway.metrics import MetricsExporter
from roadledger_gateway.models import ExtractRequest, ExtractResponse
from roadledger_gateway.status_api import router as providers_router
from roadledger_gateway.utils import configure_logging, get_logger, sanitize_for_log

logger = get_logger(__name__)

ALLOWED_IMAGE_TYPES = (
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/webp",
    "image/heic",
    "image/heif",
)
ALLOWED_DOCUMENT_TYPES = (*ALLOWED_IMAGE_TYPES, "application/pdf")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    settings = get_settings()
    configure_logging(settings.log_level)

    logger.info(
        "startup",
        version=__version__,
        host=settings.host,
        port=settings.port,
    )

    pipeline = create_pipeline(settings)
    if not pipeline.registry.configured():
        logger.warning("startup.no_providers")

    app.state.pipeline = pipeline
    app.state.settings = settings

    yield

    logger.info("shutdown")


app = FastAPI(
    title="RoadLedger Extraction Gateway",
    description="Receipt and settlement extraction with provider fallback",
    version=__version__,
    lifespan=lifespan,
)

app.include_router(providers_router)


def error_response(message: str, status_code: int) -> JSONResponse:
    """JSON error body that never carries internal details."""
    return JSONResponse(status_code=status_code, content={"error": message})


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy", "version": __version__}


@app.get("/ready")
async def readiness_check(request: Request) -> dict[str, str | int]:
    """Readiness check endpoint."""
    pipeline = getattr(request.app.state, "pipeline", None)
    providers = len(pipeline.registry.configured()) if pipeline else 0
    return {"status": "ready", "providers": providers}


@app.get("/metrics")
async def metrics(request: Request) -> PlainTextResponse:
    """Prometheus metrics endpoint."""
    content_type, metrics_body = MetricsExporter.get_prometheus_format()
    return PlainTextResponse(
        content=metrics_body.decode("utf-8"),
        media_type=content_type
    )


@app.post("/v1/extract", response_model=None)
async def extract(body: ExtractRequest, request: Request) -> JSONResponse:
    """Extract structured data from a receipt or settlement document."""
    pipeline = request.app.state.pipeline
    settings = request.app.state.settings

    content_type = body.content_type.lower()
    if content_type not in ALLOWED_DOCUMENT_TYPES:
        logger.warning("request.rejected", reason="content_type", content_type=sanitize_for_log(content_type, 40))
        return error_response("Unsupported content type", status.HTTP_400_BAD_REQUEST)

    # Cheap bound before decoding: base64 is 4 chars per 3 bytes
    if len(body.image_base64) > (settings.max_upload_bytes // 3 + 1) * 4:
        return error_response("Document too large", status.HTTP_413_REQUEST_ENTITY_TOO_LARGE)

    try:
        image_bytes = base64.b64decode(body.image_base64, validate=True)
    except (binascii.Error, ValueError):
        return error_response("Invalid base64 document", status.HTTP_400_BAD_REQUEST)

    if not image_bytes:
        return error_response("Empty document", status.HTTP_400_BAD_REQUEST)
    if len(image_bytes) > settings.max_upload_bytes:
        return error_response("Document too large", status.HTTP_413_REQUEST_ENTITY_TOO_LARGE)

    logger.info(
        "request.received",
        kind=body.kind.value,
        content_type=content_type,
        image_bytes=len(image_bytes),
        has_document_text=body.document_text is not None,
    )

    result = await pipeline.run(body.kind, image_bytes, content_type, body.document_text)

    response = ExtractResponse(
        success=result.success,
        kind=result.kind,
        provider=result.provider,
        elapsed_ms=result.elapsed_ms,
        injection_flagged=result.injection_flagged,
        auto_accept=result.auto_accept,
        extraction=result.extraction,
        error=result.error,
    )

    if result.success:
        status_code = status.HTTP_200_OK
    elif result.not_configured:
        status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    else:
        status_code = status.HTTP_502_BAD_GATEWAY

    return JSONResponse(status_code=status_code, content=response.model_dump(mode="json"))


def main():
    """CLI entry point."""
    import uvicorn
    settings = get_settings()

    uvicorn.run(
        "roadledger_gateway.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level,
    )


if __name__ == "__main__":
    main()
