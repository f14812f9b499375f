"""Tests for tracing instrumentation."""

from urllib.parse import parse_qs, urlparse

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from taxiboy.core.dependencies import get_booking_store, get_mail_sender
from taxiboy.core.observability import instrument_fastapi
from taxiboy.routers import booking
from taxiboy.services.identifiers import generate_cancellation_token


@pytest.fixture
def span_exporter():
    """In-memory span exporter."""
    return InMemorySpanExporter()


@pytest.fixture
def traced_app(booking_store, mail_sender, span_exporter):
    """Booking routes instrumented with a private tracer provider."""
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(span_exporter))

    app = FastAPI()
    app.include_router(booking.router)
    app.dependency_overrides[get_booking_store] = lambda: booking_store
    app.dependency_overrides[get_mail_sender] = lambda: mail_sender
    instrument_fastapi(app, tracer_provider=provider)
    return app


@pytest.mark.asyncio
async def test_spans_never_carry_cancellation_token(traced_app, span_exporter, mail_sender, sample_booking_data):
    """Test that server spans keep the path but not the query string."""
    transport = ASGITransport(app=traced_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        await client.post("/api/book-ride", json=sample_booking_data)
        html = mail_sender.sent_to("customer")[-1].html
        start = html.index('href="') + len('href="')
        link = html[start:html.index('"', start)]
        token = parse_qs(urlparse(link).query)["token"][0]
        unknown = generate_cancellation_token()

        cancelled = await client.get("/api/cancel-ride", params={"token": token})
        missing = await client.get("/api/cancel-ride", params={"token": unknown})

    assert cancelled.status_code == 200
    assert missing.status_code == 404

    spans = span_exporter.get_finished_spans()
    assert any("/api/cancel-ride" in span.name for span in spans)
    for span in spans:
        for value in (span.attributes or {}).values():
            assert token not in str(value)
            assert unknown not in str(value)
