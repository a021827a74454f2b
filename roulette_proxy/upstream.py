import base64
import json
import logging
import time
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict

from .config import Settings

logger = logging.getLogger(__name__)

USER_AGENT = "roleta-immersive-proxy/1.0"
SAMPLE_LENGTH = 180

BASE_HEADERS = {
    "Accept": "application/json,text/plain,*/*",
    "User-Agent": USER_AGENT,
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
}


class UpstreamResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str
    status: int
    text: str = ""
    parsed: bool = False    # False when the body was not valid JSON
    payload: Any = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def sample(self, length: int = SAMPLE_LENGTH) -> str:
        return self.text[:length]


def basic_auth_header(user: str, password: str) -> str | None:
    if not (user and password):
        return None
    token = base64.b64encode(f"{user}:{password}".encode("utf-8")).decode("ascii")
    return f"Basic {token}"


def build_headers(settings: Settings, with_auth: bool = True) -> dict[str, str]:
    headers = dict(BASE_HEADERS)
    if with_auth:
        auth = basic_auth_header(settings.basic_user, settings.basic_pass)
        if auth:
            headers["Authorization"] = auth
    return headers


def parse_json(text: str) -> tuple[bool, Any]:
    """
    Parse an upstream body leniently.
    :return: (parsed, value); (False, None) when the body is not JSON
    """
    cleaned = (text or "").lstrip("\ufeff").strip()
    if not cleaned:
        return False, None
    try:
        return True, json.loads(cleaned, parse_constant=_reject_constant)
    except (ValueError, RecursionError):
        return False, None


def _reject_constant(name: str):
    # NaN / Infinity / -Infinity are not JSON
    raise ValueError(f"invalid JSON constant {name}")


async def fetch_upstream(client: httpx.AsyncClient,
                         url: str,
                         settings: Settings,
                         *,
                         with_auth: bool = True) -> UpstreamResponse:
    """
    GET the upstream URL and read the full body regardless of status.

    Transport errors are not caught here; the request handler owns that.
    """
    headers = build_headers(settings, with_auth=with_auth)

    started = time.perf_counter()
    resp = await client.get(url, headers=headers, follow_redirects=True)
    text = resp.text
    elapsed_ms = round((time.perf_counter() - started) * 1000, 1)

    logger.info(
        "upstream fetch",
        extra={
            "upstream": url,
            "status": resp.status_code,
            "elapsed_ms": elapsed_ms,
            "auth": "Authorization" in headers,
        },
    )

    parsed, payload = parse_json(text)
    return UpstreamResponse(
        url=url,
        status=resp.status_code,
        text=text,
        parsed=parsed,
        payload=payload,
    )
