"""
audioscribe.server - FastAPI app with the audio proxy endpoint.

Re-fetches remote audio server-side so browser clients are not blocked by
cross-origin restrictions. Every response carries COOP/COEP headers so
pages served alongside it can use shared-memory WASM.
"""

from __future__ import annotations

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from audioscribe import __version__
from audioscribe.logging import get_logger

log = get_logger("server")

FETCH_FAILED = "Failed to fetch audio"
ISOLATION_HEADERS = {
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Embedder-Policy": "require-corp",
}


def create_app(
    transport: httpx.AsyncBaseTransport | None = None,
    timeout: float = 60.0,
) -> FastAPI:
    """Build the proxy app.

    Args:
        transport: Optional httpx transport for upstream requests (tests pass
            an httpx.MockTransport)
        timeout: Upstream request timeout in seconds
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.http = httpx.AsyncClient(
            transport=transport,
            timeout=timeout,
            follow_redirects=True,
        )
        try:
            yield
        finally:
            await app.state.http.aclose()

    app = FastAPI(title="audioscribe proxy", version=__version__, lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def cross_origin_isolation(request: Request, call_next):
        response = await call_next(request)
        response.headers.update(ISOLATION_HEADERS)
        return response

    @app.get("/api/health")
    async def health() -> dict[str, bool]:
        return {"ok": True}

    @app.get("/api/proxy-audio")
    async def proxy_audio(request: Request, url: str | None = Query(default=None)) -> Response:
        if not url:
            return JSONResponse({"error": "URL is required"}, status_code=400)

        try:
            upstream = await request.app.state.http.get(url)
            if not upstream.is_success:
                log.warning("Upstream %s returned %d", url, upstream.status_code)
                return JSONResponse({"error": FETCH_FAILED}, status_code=upstream.status_code)

            headers = {}
            content_type = upstream.headers.get("content-type")
            if content_type:
                headers["Content-Type"] = content_type
            return Response(content=upstream.content, headers=headers)
        except Exception as e:
            log.error("Proxy error for %s: %s", url, e)
            return JSONResponse({"error": FETCH_FAILED}, status_code=500)

    return app


app = create_app()
