from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

router = APIRouter(tags=["meta"])


@router.get("/healthz", response_class=PlainTextResponse)
# Liveness probe for load balancers
def healthz() -> str:
    return "ok"
