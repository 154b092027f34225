# src/customer_profiler/server.py
from __future__ import annotations

import time
import uuid
import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.middleware.cors import CORSMiddleware

from .card import agent_card
from .config import Settings, get_settings
from .dispatcher import Dispatcher
from .extractor import IdeaExtractor, NoiseFilter
from .logging_config import configure_logging
from .profiler import ProfileGenerator, build_generator
from .providers import build_provider

log = logging.getLogger("profiler.server")


def _log(level: str, event: str, **fields: Any) -> None:
    """Structured logging helper: fields land as top-level JSON keys."""
    fn = getattr(log, level, log.info)
    fn(event, extra=fields)


def _request_id(req: Request) -> str:
    """Return incoming X-Request-ID or generate a new one."""
    rid = req.headers.get("x-request-id")
    return rid if rid else str(uuid.uuid4())


def _rid(req: Request) -> str:
    """Request id assigned by the logging middleware."""
    return getattr(req.state, "request_id", None) or _request_id(req)


def _with_diag_headers(rid: str) -> Dict[str, str]:
    """Standard headers we attach to all responses."""
    return {
        "X-Request-ID": rid,
        "Cache-Control": "no-store",
    }


def build_dispatcher(settings: Settings, generator: Optional[ProfileGenerator] = None) -> Dispatcher:
    """Wire the dispatcher from settings; the generator is built once per process."""
    return Dispatcher(
        generator or build_generator(build_provider(settings)),
        extractor=IdeaExtractor(NoiseFilter.from_lists(settings.noise_substrings, settings.noise_exact)),
        methods=settings.accepted_methods,
        timeout=settings.generation_timeout,
    )


def create_app(dispatcher: Optional[Dispatcher] = None, settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    dispatcher = dispatcher or build_dispatcher(settings)

    app = FastAPI(
        title=settings.agent_name,
        version=settings.agent_version,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins or ["*"],
        allow_methods=settings.cors_allow_methods or ["*"],
        allow_headers=settings.cors_allow_headers or ["*"],
    )

    @app.middleware("http")
    async def _log_requests(req: Request, call_next: Any) -> Response:
        rid = _request_id(req)
        req.state.request_id = rid
        started = time.perf_counter()
        response = await call_next(req)
        response.headers.setdefault("X-Request-ID", rid)
        _log("info", "http.request",
             request_id=rid,
             http_method=req.method,
             path=req.url.path,
             status=response.status_code,
             duration_ms=round((time.perf_counter() - started) * 1000, 1))
        return response

    # =========================================================================
    # Meta & Health
    # =========================================================================

    @app.get("/health", response_class=PlainTextResponse)
    async def health() -> str:
        return "OK"

    @app.get("/healthz")
    async def healthz(req: Request) -> JSONResponse:
        return JSONResponse({"status": "ok"}, headers=_with_diag_headers(_rid(req)))

    @app.get("/readyz")
    async def readyz(req: Request) -> JSONResponse:
        gen = dispatcher.generator
        ok = bool(getattr(gen, "ready", False))
        payload = {
            "status": "ready" if ok else "not-ready",
            "generator": {"ready": ok, "reason": getattr(gen, "reason", "")},
        }
        return JSONResponse(payload, status_code=200 if ok else 503, headers=_with_diag_headers(_rid(req)))

    @app.get("/.well-known/agent.json")
    @app.get("/.well-known/agent-card.json")
    async def card(req: Request) -> JSONResponse:
        return JSONResponse(agent_card(settings), headers=_with_diag_headers(_rid(req)))

    # =========================================================================
    # A2A JSON-RPC
    # =========================================================================

    async def _rpc(req: Request) -> Response:
        rid = _rid(req)
        body = await req.body()
        if settings.log_bodies:
            _log("debug", "rpc.body", request_id=rid, body=body.decode("utf-8", "replace"))

        payload = await dispatcher.dispatch_bytes(body)
        # JSON-RPC carries errors in-band; transport status is always 200.
        return Response(
            content=payload,
            status_code=200,
            media_type="application/json",
            headers=_with_diag_headers(rid),
        )

    app.add_api_route(settings.rpc_path, _rpc, methods=["POST"])
    if settings.rpc_path != "/rpc":
        app.add_api_route("/rpc", _rpc, methods=["POST"], include_in_schema=False)

    # =========================================================================
    # Global Exception Handlers
    # =========================================================================

    @app.exception_handler(Exception)
    async def _unhandled_error_handler(req: Request, exc: Exception) -> JSONResponse:
        rid = _rid(req)
        _log("error", "unhandled.exception", request_id=rid, error=str(exc))
        # Avoid leaking internals; log has details.
        return JSONResponse({"error": "internal_error"}, status_code=500, headers=_with_diag_headers(rid))

    @app.on_event("startup")
    async def _on_startup() -> None:
        _log("info", "startup",
             rpc_path=settings.rpc_path,
             methods=sorted(dispatcher.routes),
             generator_ready=bool(getattr(dispatcher.generator, "ready", False)))

    return app


_APP: Optional[FastAPI] = None


def get_app() -> FastAPI:
    """Process-wide app for uvicorn (``customer_profiler.server:app``)."""
    global _APP
    if _APP is None:
        settings = get_settings()
        configure_logging(settings.log_level)
        _APP = create_app(settings=settings)
    return _APP


def __getattr__(name: str) -> Any:
    # Build lazily so importing this module (e.g. in tests) has no side effects.
    if name == "app":
        return get_app()
    raise AttributeError(name)
