from __future__ import annotations

from fastapi import APIRouter

from coffee_ops.core.metrics import request_metrics

router = APIRouter(prefix="/api/internal/metrics", tags=["internal-metrics"])


@router.get("")
def endpoint_metrics():
    return {"endpoints": request_metrics.snapshot()}
