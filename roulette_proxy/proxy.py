import logging

import httpx

from .config import Settings
from .models import CredentialInfo, DebugAttempt, DebugReport, ResponseEnvelope
from .normalize import describe_empty, normalize_items
from .routing import effective_slug, resolve_upstream_url
from .upstream import fetch_upstream

logger = logging.getLogger(__name__)

NOT_CONFIGURED_HINT = "upstream not configured: set UPSTREAM_TEMPLATE or UPSTREAM_BASE"
INTERNAL_ERROR_HINT = "internal proxy error"


def upstream_url_for(settings: Settings, slug: str) -> str:
    return resolve_upstream_url(slug, settings.upstream_template, settings.upstream_base)


def not_configured(slug: str) -> tuple[int, ResponseEnvelope]:
    return 500, ResponseEnvelope(ok=False, status=500, hint=NOT_CONFIGURED_HINT, slug=slug)


def internal_error(exc: Exception, slug: str | None = None) -> tuple[int, ResponseEnvelope]:
    return 500, ResponseEnvelope(
        ok=False,
        status=500,
        hint=INTERNAL_ERROR_HINT,
        slug=slug,
        error=str(exc),
    )


async def relay(client: httpx.AsyncClient,
                settings: Settings,
                raw_slug: str | None) -> tuple[int, ResponseEnvelope]:
    """
    Resolve, fetch and normalize one slug.

    Any exception (network failure included) becomes a 500 envelope.
    :return: (http_status, envelope)
    """
    slug = effective_slug(raw_slug, settings.default_slug)
    try:
        return await _relay(client, settings, slug)
    except Exception as exc:
        logger.exception("relay failed", extra={"slug": slug})
        return internal_error(exc, slug)


async def _relay(client: httpx.AsyncClient,
                 settings: Settings,
                 slug: str) -> tuple[int, ResponseEnvelope]:
    url = upstream_url_for(settings, slug)
    if not url:
        logger.warning("no upstream configured", extra={"slug": slug})
        return not_configured(slug)

    # ---- Proxy Request ----
    upstream = await fetch_upstream(client, url, settings)

    if not upstream.ok:
        return 502, ResponseEnvelope(
            ok=False,
            status=upstream.status,
            hint=f"upstream responded with HTTP {upstream.status}",
            source="upstream",
            upstream=url,
            slug=slug,
            sample=upstream.sample(),
        )

    items = normalize_items(upstream.payload)
    return 200, ResponseEnvelope(
        ok=True,
        items=items,
        hint=None if items else describe_empty(upstream),
        source="upstream",
        upstream=url,
        slug=slug,
    )


async def _attempt(client: httpx.AsyncClient,
                   url: str,
                   settings: Settings,
                   with_auth: bool) -> DebugAttempt:
    try:
        upstream = await fetch_upstream(client, url, settings, with_auth=with_auth)
    except Exception as exc:
        logger.warning("debug fetch failed", extra={"upstream": url, "auth": with_auth})
        return DebugAttempt(ok=False, error=str(exc))

    return DebugAttempt(
        ok=upstream.ok,
        status=upstream.status,
        items=len(normalize_items(upstream.payload)),
        sample=upstream.sample(),
    )


async def debug_probe(client: httpx.AsyncClient,
                      settings: Settings,
                      raw_slug: str | None) -> tuple[int, ResponseEnvelope | DebugReport]:
    """Fetch the resolved URL with and without credentials and report both."""
    slug = effective_slug(raw_slug, settings.default_slug)
    url = upstream_url_for(settings, slug)
    if not url:
        return not_configured(slug)

    return 200, DebugReport(
        slug=slug,
        upstream=url,
        credentials=CredentialInfo.from_values(settings.basic_user, settings.basic_pass),
        with_auth=await _attempt(client, url, settings, with_auth=True),
        without_auth=await _attempt(client, url, settings, with_auth=False),
    )
