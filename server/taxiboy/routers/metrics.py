"""Metrics endpoint for Prometheus scraping."""

from fastapi import APIRouter, Response

from ..core.dependencies import BookingStoreDependency
from ..core.observability import get_prometheus_metrics, metrics_collector
from ..services.booking_store import BookingStore

router = APIRouter()


@router.get(
    "/metrics",
    summary="Prometheus Metrics",
    description="Endpoint for Prometheus to scrape metrics",
    response_class=Response,
    tags=["Observability"]
)
async def metrics(store: BookingStore = BookingStoreDependency):
    """
    Return Prometheus metrics.

    Returns:
        Response: Prometheus metrics in text format
    """
    metrics_collector.set_active_bookings(len(store))
    return Response(
        content=get_prometheus_metrics(),
        media_type="text/plain; version=0.0.4; charset=utf-8"
    )
