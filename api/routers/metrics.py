"""
Prometheus metrics endpoint.

Serves the RtF registry in the text exposition format to clients listed
in METRICS_IP_ALLOWLIST. Behind a proxy, the first X-Forwarded-For hop is
treated as the client address.

The route is async so the collector reads cache state on the event loop
thread, never concurrently with request coroutines.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from api.deps import get_metrics_collector, get_settings
from backend.core.metrics_collector import METRICS_CONTENT_TYPE, MetricsCollector
from backend.settings import Settings

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["Metrics"],
)


def client_ip(request: Request) -> Optional[str]:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    return request.client.host if request.client else None


@router.get("/metrics")
async def metrics(
    request: Request,
    settings: Settings = Depends(get_settings),
    collector: MetricsCollector = Depends(get_metrics_collector),
):
    ip = client_ip(request)
    if ip not in settings.metrics_ip_allowlist_set:
        logger.warning("Rejected /metrics scrape from %s", ip)
        raise HTTPException(status_code=403, detail="Forbidden")
    return Response(content=collector.render(), media_type=METRICS_CONTENT_TYPE)
