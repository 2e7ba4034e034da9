from __future__ import annotations

import logging

from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from flex_reviews.core.config import Settings
from flex_reviews.core.telemetry import TraceContextFilter, record_absorbed_error, setup_telemetry


def _record() -> logging.LogRecord:
    return logging.LogRecord("flex_reviews", logging.INFO, __file__, 1, "hello", None, None)


def test_trace_context_filter_stamps_active_span_ids() -> None:
    tracer = TracerProvider().get_tracer(__name__)
    record = _record()

    with tracer.start_as_current_span("work") as span:
        assert TraceContextFilter().filter(record)
        context = span.get_span_context()

    assert record.trace_id == format(context.trace_id, "032x")
    assert record.span_id == format(context.span_id, "016x")


def test_trace_context_filter_outside_span_uses_placeholder() -> None:
    record = _record()
    assert TraceContextFilter().filter(record)
    assert (record.trace_id, record.span_id) == ("-", "-")


def test_absorbed_error_is_recorded_on_active_span() -> None:
    exporter = InMemorySpanExporter()
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(exporter))

    with provider.get_tracer(__name__).start_as_current_span("fetch reviews"):
        record_absorbed_error(RuntimeError("upstream down"), upstream="hostaway", status=503)

    (span,) = exporter.get_finished_spans()
    assert [event.name for event in span.events] == ["exception"]
    assert span.attributes["upstream"] == "hostaway"
    assert span.attributes["status"] == 503


def test_absorbed_error_without_span_is_ignored() -> None:
    record_absorbed_error(RuntimeError("upstream down"), upstream="hostaway")


def test_disabled_telemetry_installs_nothing() -> None:
    runtime = setup_telemetry(Settings(otel_enabled=False))
    assert runtime.enabled is False
    runtime.shutdown()
