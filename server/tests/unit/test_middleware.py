"""Tests for request correlation and access logging."""

import asyncio
import logging
import socket

import httpx
import pytest
import uvicorn

from taxiboy.core.middleware import AccessLogQueryFilter
from taxiboy.main import create_app, server_options
from taxiboy.services.identifiers import generate_cancellation_token


@pytest.mark.asyncio
async def test_request_id_is_echoed(test_client):
    """Test that a well-formed caller ID is reused."""
    response = await test_client.get("/health", headers={"X-Request-ID": "frontend-42"})

    assert response.headers["X-Request-ID"] == "frontend-42"


@pytest.mark.asyncio
async def test_malformed_request_id_is_replaced(test_client):
    """Test that header values unfit for logs get a fresh ID."""
    response = await test_client.get("/health", headers={"X-Request-ID": "a b <script>"})

    request_id = response.headers["X-Request-ID"]
    assert request_id != "a b <script>"
    assert len(request_id) == 36


@pytest.mark.asyncio
async def test_access_log_omits_cancellation_token(test_client, caplog):
    """Test that the secret token never reaches the logs."""
    token = generate_cancellation_token()

    with caplog.at_level(logging.DEBUG):
        response = await test_client.get("/api/cancel-ride", params={"token": token})

    assert response.status_code == 404
    # The test client itself logs full URLs under "httpx"
    service_records = [r for r in caplog.records if r.name.startswith("taxiboy")]
    for record in service_records:
        assert token not in str(record.__dict__)

    access = [r for r in service_records if r.name == "taxiboy.core.middleware"]
    assert access and access[-1].path == "/api/cancel-ride"
    assert access[-1].levelno == logging.WARNING


def test_access_log_filter_strips_query():
    """Test that uvicorn access records keep the path only."""
    token = generate_cancellation_token()
    record = logging.LogRecord(
        "uvicorn.access", logging.INFO, __file__, 0,
        '%s - "%s %s HTTP/%s" %d',
        ("127.0.0.1:50000", "GET", f"/api/cancel-ride?token={token}", "1.1", 404),
        None,
    )

    assert AccessLogQueryFilter().filter(record)
    assert record.getMessage() == '127.0.0.1:50000 - "GET /api/cancel-ride HTTP/1.1" 404'


class _ListHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.lines: list[str] = []

    def emit(self, record):
        self.lines.append(record.getMessage())


@pytest.mark.asyncio
@pytest.mark.parametrize("access_log", [None, True])
async def test_served_requests_never_log_token(booking_store, mail_sender, access_log):
    """Test the running server with the console entry point's options."""
    options = {**server_options(), "host": "127.0.0.1", "port": 0}
    if access_log is not None:
        options["access_log"] = access_log

    app = create_app(booking_store=booking_store, mail_sender=mail_sender)
    server = uvicorn.Server(uvicorn.Config(app, **options))

    # uvicorn configures its loggers when the config is built
    handler = _ListHandler()
    access_logger = logging.getLogger("uvicorn.access")
    access_logger.addHandler(handler)

    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    task = asyncio.create_task(server.serve(sockets=[sock]))
    token = generate_cancellation_token()
    try:
        while not server.started and not task.done():
            await asyncio.sleep(0.01)
        async with httpx.AsyncClient() as client:
            response = await client.get(
                f"http://127.0.0.1:{port}/api/cancel-ride", params={"token": token}
            )
    finally:
        server.should_exit = True
        await task
        access_logger.removeHandler(handler)
        sock.close()

    assert response.status_code == 404
    assert not any(token in line for line in handler.lines)
    if access_log:
        assert any("/api/cancel-ride" in line for line in handler.lines)
    else:
        assert handler.lines == []
