from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
import logging

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.sdk.resources import DEPLOYMENT_ENVIRONMENT, SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.sdk.trace.sampling import TraceIdRatioBased

from flex_reviews.core.config import Settings

PLAIN_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
TRACED_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s trace_id=%(trace_id)s span_id=%(span_id)s %(message)s"

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)
_HTTPX_INSTRUMENTOR = HTTPXClientInstrumentor()


class TraceContextFilter(logging.Filter):
    """Stamps records with the active span's ids so log lines join up with traces."""

    def filter(self, record: logging.LogRecord) -> bool:
        context = trace.get_current_span().get_span_context()
        record.trace_id = format(context.trace_id, "032x") if context.is_valid else "-"
        record.span_id = format(context.span_id, "016x") if context.is_valid else "-"
        return True


@dataclass(slots=True)
class TelemetryRuntime:
    provider: TracerProvider | None = None

    @property
    def enabled(self) -> bool:
        return self.provider is not None

    def shutdown(self) -> None:
        if self.provider is None:
            return
        _HTTPX_INSTRUMENTOR.uninstrument()
        self.provider.force_flush()
        self.provider.shutdown()
        self.provider = None


def configure_logging(settings: Settings) -> None:
    root = logging.getLogger()
    if not root.handlers:
        log_format = TRACED_LOG_FORMAT if settings.otel_log_correlation else PLAIN_LOG_FORMAT
        logging.basicConfig(level=settings.log_level.upper(), format=log_format)
    if not settings.otel_log_correlation:
        return
    for handler in root.handlers:
        if not any(isinstance(existing, TraceContextFilter) for existing in handler.filters):
            handler.addFilter(TraceContextFilter())


def setup_telemetry(settings: Settings) -> TelemetryRuntime:
    if not settings.otel_enabled:
        return TelemetryRuntime()

    provider = TracerProvider(
        resource=Resource.create(
            {
                SERVICE_NAME: settings.otel_service_name,
                DEPLOYMENT_ENVIRONMENT: settings.environment,
            }
        ),
        sampler=TraceIdRatioBased(settings.otel_trace_sample_ratio),
    )
    if settings.otel_exporter_otlp_endpoint:
        exporter = OTLPSpanExporter(
            endpoint=settings.otel_exporter_otlp_endpoint,
            headers=settings.otel_exporter_otlp_headers or None,
        )
        provider.add_span_processor(BatchSpanProcessor(exporter))
    else:
        logger.info("FR_OTEL_EXPORTER_OTLP_ENDPOINT not set; spans stay in-process")
    trace.set_tracer_provider(provider)
    _HTTPX_INSTRUMENTOR.instrument()
    return TelemetryRuntime(provider=provider)


@contextmanager
def request_span(method: str, path: str) -> Iterator[trace.Span]:
    """Server span around one inbound request; connector spans nest under it."""
    with tracer.start_as_current_span(f"{method} {path}", kind=trace.SpanKind.SERVER) as span:
        span.set_attribute("http.request.method", method)
        span.set_attribute("url.path", path)
        yield span


def record_absorbed_error(exc: BaseException, **attributes: str | int) -> None:
    """Attach an absorbed upstream failure to the active span without failing the request."""
    span = trace.get_current_span()
    if not span.is_recording():
        return
    span.record_exception(exc)
    for key, value in attributes.items():
        span.set_attribute(key, value)
