from __future__ import annotations

import logging
import time as _t
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from config import Settings, settings
from routers import events as events_router
from utils.http_client import AsyncHttpClient

_log = logging.getLogger("uvicorn.error")


def create_app(cfg: Settings = settings) -> FastAPI:
    origins = cfg.cors_origins

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if origins:
            _log.info("Using CORS whitelist of %s", origins)
        # one upstream client shared by every request
        async with AsyncHttpClient(timeout=cfg.http_timeout_seconds) as http:
            app.state.http = http
            yield

    app = FastAPI(title="events-by-location", version="1.0.0", lifespan=lifespan)

    # CORS: whitelist from FEBL_CORS_WHITELIST, otherwise every origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins or ["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = _t.perf_counter()
        response = None
        try:
            response = await call_next(request)
            return response
        finally:
            dur_ms = int((_t.perf_counter() - start) * 1000)
            _log.info(
                "path=%s status=%s dur_ms=%s ua=%s",
                request.url.path,
                getattr(response, "status_code", "-"),
                dur_ms,
                request.headers.get("user-agent", "-"),
            )

    # Routers
    app.include_router(events_router.router)

    @app.get("/health", response_class=PlainTextResponse)
    def health():
        return "OK"

    return app


app = create_app()


def run() -> None:
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
