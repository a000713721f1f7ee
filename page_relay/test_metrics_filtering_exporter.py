import pytest
from unittest.mock import Mock

export = pytest.importorskip("opentelemetry.sdk.trace.export")

from page_relay import server  # noqa: E402
from page_relay.server import MetricsFilteringSpanExporter  # noqa: E402

pytestmark = pytest.mark.skipif(
    not server._OTEL_AVAILABLE, reason="OpenTelemetry SDK extras not installed"
)


def _span(route):
    span = Mock()
    span.attributes = {"http.route": route} if route else None
    return span


@pytest.fixture
def inner():
    exporter = Mock()
    exporter.export.return_value = export.SpanExportResult.SUCCESS
    return exporter


def test_metrics_and_health_spans_dropped(inner):
    proxy_span = _span("/api/proxy")
    spans = [_span("/metrics"), proxy_span, _span("/health")]

    result = MetricsFilteringSpanExporter(inner).export(spans)

    assert result is export.SpanExportResult.SUCCESS
    inner.export.assert_called_once_with([proxy_span])


def test_spans_without_attributes_kept(inner):
    bare = _span(None)

    MetricsFilteringSpanExporter(inner).export([bare])

    inner.export.assert_called_once_with([bare])


def test_nothing_left_to_export(inner):
    result = MetricsFilteringSpanExporter(inner).export(
        [_span("/metrics"), _span("/health")]
    )

    assert result is export.SpanExportResult.SUCCESS
    inner.export.assert_not_called()


def test_failure_from_wrapped_exporter_returned(inner):
    inner.export.return_value = export.SpanExportResult.FAILURE

    result = MetricsFilteringSpanExporter(inner).export([_span("/api/proxy")])

    assert result is export.SpanExportResult.FAILURE


def test_shutdown_and_flush_delegate(inner):
    exporter = MetricsFilteringSpanExporter(inner)

    exporter.shutdown()
    exporter.force_flush(500)

    inner.shutdown.assert_called_once_with()
    inner.force_flush.assert_called_once_with(500)
