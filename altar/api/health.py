"""
Health check API endpoint.

Aggregates health status from the Cloister gates. Unauthenticated, so it
reports counts and flags only, never paths or secrets.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Response

from cloister.pipeline import RequestPipeline
from cloister.shared.gate import build_health_status


def _collect_health_data(pipeline: RequestPipeline) -> Dict[str, Dict[str, Any]]:
    return {
        "TokenGate": build_health_status(
            gate_name="TokenGate",
            initialized=True,
            dependencies=["PyJWT"],
            checks={"secret_configured": True},
        ),
        "FileSystemGate": pipeline.dispatcher.get_health_status(),
    }


def create_router(pipeline: RequestPipeline) -> APIRouter:
    router = APIRouter()

    @router.get("/api/health")
    async def api_health(response: Response) -> Dict[str, Any]:
        """
        Get aggregated health status.

        Returns 200 when healthy, 503 when unhealthy.
        """
        gates = _collect_health_data(pipeline)
        all_healthy = all(g.get("healthy", False) for g in gates.values())

        if not all_healthy:
            response.status_code = 503

        return {
            "healthy": all_healthy,
            "gates": gates,
        }

    return router


__all__ = ["create_router"]
