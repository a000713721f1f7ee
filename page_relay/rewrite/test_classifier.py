import pytest

from page_relay.rewrite.classifier import ContentClass, classify


@pytest.mark.parametrize(
    "content_type",
    ["text/html", "text/html; charset=utf-8", "TEXT/HTML; charset=ISO-8859-1"],
)
def test_html_content_types(content_type):
    assert classify(content_type) is ContentClass.HTML


@pytest.mark.parametrize(
    "content_type",
    ["image/png", "application/json", "text/css", "application/xhtml+xml", "text/plain", "", None],
)
def test_everything_else_passes_through(content_type):
    assert classify(content_type) is ContentClass.OTHER
