"""
Prometheus metrics endpoint for Pulse API
"""

from fastapi import APIRouter, Response

from .. import metrics

router = APIRouter(tags=["Metrics"])

@router.get("/metrics", summary="Prometheus metrics")
async def get_prometheus_metrics() -> Response:
    """
    Get metrics in Prometheus exposition format.

    Returns metrics in plain text format suitable for Prometheus scraping.
    """
    return Response(content=metrics.get_metrics(), media_type=metrics.get_content_type())
