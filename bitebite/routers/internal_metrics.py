from __future__ import annotations

from fastapi import APIRouter, Depends

from bitebite.core.metrics import request_metrics
from bitebite.deps import require_admin_token

router = APIRouter(prefix="/internal/metrics", tags=["internal-metrics"])


@router.get("", dependencies=[Depends(require_admin_token)])
def endpoint_metrics():
    return {"endpoints": request_metrics.snapshot()}
