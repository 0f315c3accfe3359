"""
Cloister server entry point.

    python -m altar.run

or, under an external process manager:

    uvicorn altar.run:create_app --factory
"""

from __future__ import annotations

from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.requests import Request
from fastapi.responses import JSONResponse

from cloister.Config import GateConfig, ServerConfig, load_config
from cloister.FileSystemGate.models import OperationResponse
from cloister.pipeline import RequestPipeline
from cloister.shared.gate import GateLogger

from altar.api import health as health_api
from altar.api import operations as operations_api

load_dotenv()

_log = GateLogger.get("Altar")


def create_app(config: Optional[GateConfig] = None) -> FastAPI:
    """
    Build the application around one immutable config.

    Args:
        config: Gate policy; loaded from the environment when omitted

    Returns:
        Configured FastAPI app
    """
    if config is None:
        config, _ = load_config()

    pipeline = RequestPipeline(config)

    app = FastAPI(title="Cloister", docs_url=None, redoc_url=None, openapi_url=None)
    app.state.config = config
    app.state.pipeline = pipeline

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception):
        _log.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=500,
            content=OperationResponse.error("Internal error").to_dict(),
        )

    app.include_router(operations_api.create_router(pipeline))
    app.include_router(health_api.create_router(pipeline))

    _log.info("Cloister API ready")
    return app


def serve(server_config: Optional[ServerConfig] = None) -> None:
    """Run the API under uvicorn, with TLS when a certificate is configured."""
    import uvicorn

    gate_config, loaded_server_config = load_config()
    server_config = server_config or loaded_server_config

    if not server_config.ssl_certfile:
        _log.warning("No TLS certificate configured; serving plain HTTP")

    uvicorn.run(
        create_app(gate_config),
        host=server_config.host,
        port=server_config.port,
        ssl_certfile=server_config.ssl_certfile,
        ssl_keyfile=server_config.ssl_keyfile,
    )


if __name__ == "__main__":
    serve()
