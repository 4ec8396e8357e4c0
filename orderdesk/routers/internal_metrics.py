from __future__ import annotations

from fastapi import APIRouter

from orderdesk.core.metrics import request_metrics, status_change_metrics

router = APIRouter(prefix="/internal/metrics", tags=["internal-metrics"])


@router.get("")
def endpoint_metrics():
    return {
        "endpoints": request_metrics.snapshot(),
        "status_changes": status_change_metrics.snapshot(),
    }
