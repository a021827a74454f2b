import re
from urllib.parse import quote

from .config import DEFAULT_SLUG

# Matches both "{slug}" and "${slug}"
SLUG_PLACEHOLDER = re.compile(r"\$?\{slug\}")


def effective_slug(raw: str | None, default: str = DEFAULT_SLUG) -> str:
    slug = (raw or "").strip()
    return slug or default


def resolve_upstream_url(slug: str,
                         template: str | None = None,
                         base: str | None = None) -> str:
    """
    Build the upstream URL for a slug.

    The template (first placeholder only) takes priority over the base URL.
    Returns an empty string when neither is configured.
    """
    encoded = quote(slug, safe="")

    if template:
        return SLUG_PLACEHOLDER.sub(lambda _m: encoded, template, count=1)
    if base:
        return base.rstrip("/") + f"/{encoded}/result.json"
    return ""
