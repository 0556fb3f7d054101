"""
Minimal OTLP/HTTP collector stub.

Accepts telemetry batches on /v1/traces, /v1/logs and /v1/metrics, drains and
discards the body, and acknowledges with `{}`. Every response carries
permissive CORS headers so browser-side exporters can post to it.
"""

import logging

from fastapi import FastAPI, Request, Response
from fastapi.responses import PlainTextResponse

from .. import __version__
from ..config import DEFAULT_COLLECTOR_HOST, DEFAULT_COLLECTOR_PORT

logger = logging.getLogger(__name__)

SIGNAL_ROUTES = ("/v1/traces", "/v1/logs", "/v1/metrics")

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "*",
    "Access-Control-Max-Age": "86400",
}

# Registered so non-POST requests reach the handler and get the CORS headers on their 405.
_ROUTE_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


async def drain_body(request: Request) -> int:
    """Consume the request body without keeping it; return the byte count."""
    size = 0
    async for chunk in request.stream():
        size += len(chunk)
    return size


def _remote(request: Request) -> str:
    if request.client is None:
        return "-"
    return f"{request.client.host}:{request.client.port}"


async def accept_telemetry(request: Request) -> Response:
    if request.method == "OPTIONS":
        return Response(status_code=204, headers=CORS_HEADERS)

    if request.method != "POST":
        return PlainTextResponse(
            "method not allowed\n",
            status_code=405,
            headers={**CORS_HEADERS, "Allow": "POST"},
        )

    size = await drain_body(request)
    logger.info(
        "request: method=%s path=%s size_bytes=%d remote=%s",
        request.method,
        request.url.path,
        size,
        _remote(request),
    )
    return Response(
        content=b"{}",
        status_code=200,
        media_type="application/json",
        headers=CORS_HEADERS,
    )


def create_app() -> FastAPI:
    app = FastAPI(
        title="Load Test Collector Stub",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    for path in SIGNAL_ROUTES:
        app.add_api_route(
            path,
            accept_telemetry,
            methods=_ROUTE_METHODS,
            include_in_schema=False,
        )
    return app


def serve(host: str = DEFAULT_COLLECTOR_HOST, port: int = DEFAULT_COLLECTOR_PORT) -> None:
    """Run the stub with uvicorn; a bind failure ends the process."""
    import uvicorn

    logger.info("listening on %s:%d", host, port)
    uvicorn.run(create_app(), host=host, port=port, log_level="warning")
