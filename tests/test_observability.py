from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider

from shared.observability.setup import add_otel_ids


class TestTraceIdProcessor:

    def test_leaves_event_alone_outside_a_span(self):
        event = add_otel_ids(None, "info", {"event": "order_created"})

        assert event == {"event": "order_created"}

    def test_stamps_ids_of_the_active_span(self):
        tracer = TracerProvider().get_tracer(__name__)

        with tracer.start_as_current_span("create_order") as span:
            event = add_otel_ids(None, "info", {"event": "order_created"})
            ctx = span.get_span_context()

        assert event["trace_id"] == trace.format_trace_id(ctx.trace_id)
        assert event["span_id"] == trace.format_span_id(ctx.span_id)
