# Centralized pytest configuration file (fixtures, hooks, plugins, etc.)
import pytest
from asgi_lifespan import LifespanManager
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse, RedirectResponse
from httpx import AsyncClient, ASGITransport

from roulette_proxy.config import Settings
from roulette_proxy.main import create_app

PROXY_ENV_VARS = (
    'UPSTREAM', 'UPSTREAM_TEMPLATE', 'UPSTREAM_BASE', 'UPSTREAM_BASE_URL',
    'UPSTREAM_TIMEOUT', 'BASIC_USER', 'BASIC_PASS', 'ALLOW_ORIGIN',
    'ALLOWED_ORIGINS', 'DEFAULT_SLUG', 'PORT', 'HOST', 'LOG_LEVEL', 'SERVICE_NAME',
)

# Feeds served by the mock upstream, keyed by slug
FEEDS = {
    'immersive-roulette': [12, "7", -1, 37, "abc", 36],
    'object-form': {"items": [5, 10, 40], "table": "object-form"},
    'no-items': {"foo": "bar"},
}


#----Keep the host environment out of Settings()----
@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in PROXY_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def upstream_app() -> FastAPI:
    app = FastAPI()     # mock upstream app for tests
    app.state.received = []

    @app.get("/moved/result.json")
    async def moved():  # tests redirect following
        return RedirectResponse("/immersive-roulette/result.json", status_code=302)

    @app.get("/{slug}/result.json")
    async def feed(slug: str, request: Request):
        app.state.received.append(dict(request.headers))

        if slug == 'down':
            return JSONResponse({"error": "maintenance"}, status_code=503)
        if slug == 'plain-text':
            return PlainTextResponse("results temporarily unavailable")
        if slug not in FEEDS:
            return JSONResponse({"error": "unknown table"}, status_code=404)
        return FEEDS[slug]

    return app


@pytest.fixture
def gateway_settings() -> Settings:
    return Settings(
        upstream_base='http://upstream/',
        basic_user='alice',
        basic_pass='s3cret',
        allow_origin='https://tables.example,https://admin.example',
    )


@pytest.fixture
def gateway_app(gateway_settings: Settings) -> FastAPI:
    return create_app(gateway_settings)


@pytest.fixture
async def gateway_client(gateway_app: FastAPI, upstream_app: FastAPI):
    """Gateway test client with upstream mocked via ASGITransport"""
    # Transport to fake upstream
    upstream_transport = ASGITransport(app=upstream_app)
    upstream_client = AsyncClient(
        transport=upstream_transport,
        base_url="http://upstream"
    )
    # Installed before startup so the lifespan keeps it instead of creating one
    gateway_app.state.http_client = upstream_client

    async with LifespanManager(gateway_app) as manager:
        # client with transport to gateway app
        gateway_transport = ASGITransport(app=manager.app)
        async with AsyncClient(
                transport=gateway_transport,
                base_url="http://gateway") as client:
            yield client

    await upstream_client.aclose()
