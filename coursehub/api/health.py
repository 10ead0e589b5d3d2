"""Health and readiness endpoints.

  /health  liveness plus dependency status. Always 200 while the process
           can answer; ``status`` says whether a dependency is impaired.
  /ready   readiness. 503 while the database is unreachable so the load
           balancer stops routing here without restarting the process.
"""

from __future__ import annotations

from fastapi import APIRouter, Response

from coursehub.db import engine as db

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict:
    checks: dict[str, str] = {}
    overall = "ok"

    if db.engine is None:
        checks["database"] = "not_configured"
    elif await db.ping_database():
        checks["database"] = "ok"
    else:
        checks["database"] = "degraded"
        overall = "degraded"

    return {"status": overall, "checks": checks}


@router.get("/ready")
async def ready() -> Response:
    if await db.ping_database():
        return Response(status_code=200)
    return Response(status_code=503)
