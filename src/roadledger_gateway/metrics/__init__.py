"""Prometheus metrics exposition."""

from prometheus_client import Counter, Histogram, Info, generate_latest, CONTENT_TYPE_LATEST

from roadledger_gateway import __version__

# Application info
APP_INFO = Info("roadledger_gateway", "Application information")
APP_INFO.info({"version": __version__})

# Provider calls by classified result
PROVIDER_CALLS_TOTAL = Counter(
    "roadledger_provider_calls_total",
    "Provider calls by result",
    ["provider", "result"]
)

PROVIDER_LATENCY = Histogram(
    "roadledger_provider_latency_seconds",
    "Provider round-trip time in seconds",
    ["provider"],
    buckets=[0.5, 1.0, 2.0, 5.0, 10.0, 20.0, 30.0, 60.0]
)

CIRCUIT_OPENED_TOTAL = Counter(
    "roadledger_circuit_opened_total",
    "Times a provider circuit opened",
    ["provider"]
)

# Gateway-level outcomes
EXTRACTIONS_TOTAL = Counter(
    "roadledger_extractions_total",
    "Extraction requests by kind and outcome",
    ["kind", "outcome"]
)

INJECTION_FLAGGED_TOTAL = Counter(
    "roadledger_injection_flagged_total",
    "Documents whose text matched a prompt injection pattern",
    ["kind"]
)


class MetricsExporter:
    """Exports metrics in Prometheus format."""

    @staticmethod
    def get_prometheus_format() -> tuple[str, bytes]:
        """Get metrics in Prometheus exposition format.

        Returns:
            Tuple of (content_type, metrics_body)
        """
        return CONTENT_TYPE_LATEST, generate_latest()

    @staticmethod
    def record_provider_call(provider: str, result: str, elapsed_ms: int) -> None:
        """Record one provider call.

        Args:
            provider: Provider id
            result: success, client_error, auth_error or provider_error
            elapsed_ms: Round-trip time in milliseconds
        """
        PROVIDER_CALLS_TOTAL.labels(provider=provider, result=result).inc()
        PROVIDER_LATENCY.labels(provider=provider).observe(elapsed_ms / 1000)

    @staticmethod
    def record_circuit_opened(provider: str) -> None:
        """Record a circuit transition to open."""
        CIRCUIT_OPENED_TOTAL.labels(provider=provider).inc()

    @staticmethod
    def record_extraction(kind: str, outcome: str, injection_flagged: bool) -> None:
        """Record a finished extraction request.

        Args:
            kind: Extraction kind
            outcome: success, failed or not_configured
            injection_flagged: Whether the document text was flagged
        """
        EXTRACTIONS_TOTAL.labels(kind=kind, outcome=outcome).inc()
        if injection_flagged:
            INJECTION_FLAGGED_TOTAL.labels(kind=kind).inc()
