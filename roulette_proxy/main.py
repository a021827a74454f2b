import logging
from contextlib import asynccontextmanager

import httpx
import uvicorn
from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse

from .config import Settings, load_settings
from .logging_setup import configure_logging
from .middleware import CorsMiddleware
from .models import now_ms
from .proxy import debug_probe, relay

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown logic."""
    #---- Startup ----
    settings: Settings = app.state.settings
    configure_logging(settings.service_name, settings.log_level)

    if not hasattr(app.state, 'http_client'):
        app.state.http_client = httpx.AsyncClient(timeout=settings.upstream_timeout)

    logger.info(
        "proxy started",
        extra={
            "template_configured": bool(settings.upstream_template),
            "base_configured": bool(settings.upstream_base),
            "credentials_configured": settings.has_credentials,
            "allowed_origins": settings.allowed_origins,
        },
    )

    try:
        yield
    finally:
        #---- Shutdown ----
        if hasattr(app.state, 'http_client'):
            await app.state.http_client.aclose()


def envelope_response(status_code: int, body: dict) -> JSONResponse:
    return JSONResponse(
        content=body,
        status_code=status_code,
        headers={"Cache-Control": "no-store"},
    )


router = APIRouter()


@router.get("/health")
async def health():
    return envelope_response(200, {"ok": True, "ts": now_ms()})


@router.get("/debug")
async def debug(request: Request, slug: str | None = None):
    state = request.app.state
    status_code, report = await debug_probe(state.http_client, state.settings, slug)
    return envelope_response(status_code, report.to_json())


@router.get("/")
async def results(request: Request, slug: str | None = None):
    state = request.app.state
    status_code, envelope = await relay(state.http_client, state.settings, slug)
    return envelope_response(status_code, envelope.to_json())


# Registered last so /health and /debug are not taken as slugs
@router.get("/{slug}")
async def results_for_slug(slug: str, request: Request):
    return await results(request, slug=slug)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or load_settings()

    app = FastAPI(title=settings.service_name, lifespan=lifespan)
    app.state.settings = settings
    app.add_middleware(CorsMiddleware, allowed_origins=settings.allowed_origins)
    app.include_router(router)

    return app


application = create_app()


def run() -> None:
    settings = application.state.settings
    configure_logging(settings.service_name, settings.log_level)
    uvicorn.run(application, host=settings.host, port=settings.port)
