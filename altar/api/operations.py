"""
Operation endpoint.

Every method is routed to the pipeline so a wrong method still gets the
standard error envelope instead of the framework's default reply.
"""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.concurrency import run_in_threadpool
from fastapi.requests import Request
from fastapi.responses import JSONResponse

from cloister.pipeline import RequestPipeline

OPERATION_PATHS = ("/api/operation", "/api/operations")
ROUTED_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def create_router(pipeline: RequestPipeline) -> APIRouter:
    router = APIRouter()

    async def api_operation(request: Request):
        """Authenticate, authorize and run one filesystem operation."""
        body = await request.body()
        # Filesystem calls block; keep them off the event loop
        result = await run_in_threadpool(
            pipeline.handle, request.method, dict(request.headers), body
        )
        return JSONResponse(
            status_code=result.status_code,
            content=result.response.to_dict(),
        )

    for path in OPERATION_PATHS:
        router.add_api_route(path, api_operation, methods=ROUTED_METHODS)

    return router


__all__ = ["create_router", "OPERATION_PATHS"]
