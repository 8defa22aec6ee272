from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter, SimpleSpanProcessor
from opentelemetry.sdk.trace.sampling import ParentBased, TraceIdRatioBased

from medaieval import __version__

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
TRACER_NAME = "medaieval"

_httpx_instrumented = False


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
    # httpx logs every provider request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def init_otel(
    *,
    app: FastAPI,
    enabled: bool,
    service_name: str,
    otlp_endpoint: Optional[str],
    console_exporter: bool,
    sample_rate: float,
    environment: str = "dev",
) -> bool:
    """Install tracing for the app. Returns False when observability is disabled."""
    global _httpx_instrumented
    if not enabled:
        return False

    resource = Resource.create(
        {
            "service.name": service_name,
            "service.version": __version__,
            "deployment.environment": environment,
        }
    )
    provider = TracerProvider(resource=resource, sampler=ParentBased(TraceIdRatioBased(sample_rate)))
    if console_exporter:
        provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))
    if otlp_endpoint:
        provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint)))
    trace.set_tracer_provider(provider)

    FastAPIInstrumentor.instrument_app(app)
    # Provider calls go through httpx; instrument the library once per process
    if not _httpx_instrumented:
        HTTPXClientInstrumentor().instrument()
        _httpx_instrumented = True

    logger.info(f"OpenTelemetry enabled for {service_name} (sample_rate={sample_rate}, otlp={otlp_endpoint or 'off'})")
    return True


def get_tracer() -> trace.Tracer:
    return trace.get_tracer(TRACER_NAME)
