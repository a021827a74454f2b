from fastapi import Request, Response
from starlette.datastructures import MutableHeaders

ALLOW_METHODS = "GET,OPTIONS"
ALLOW_HEADERS = "Content-Type, Authorization"
PREFLIGHT_MAX_AGE = "86400"


def pick_origin(allowed: list[str], request_origin: str | None) -> str:
    """
    Value for Access-Control-Allow-Origin.

    "*" when unrestricted, the caller's origin when it is on the list,
    otherwise the first configured entry.
    """
    if not allowed or "*" in allowed:
        return "*"
    if request_origin and request_origin in allowed:
        return request_origin
    return allowed[0]


class CorsMiddleware:
    """
    Answers every OPTIONS request as a CORS preflight and stamps the
    CORS headers on all other HTTP responses.
    """
    def __init__(self, app, allowed_origins: list[str]):
        self.app = app
        self.allowed_origins = allowed_origins

    def cors_headers(self, request_origin: str | None) -> dict[str, str]:
        headers = {
            "Access-Control-Allow-Origin": pick_origin(self.allowed_origins, request_origin),
            "Access-Control-Allow-Methods": ALLOW_METHODS,
            "Access-Control-Allow-Headers": ALLOW_HEADERS,
        }
        if len(self.allowed_origins) > 1:
            headers["Vary"] = "Origin"
        return headers

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope, receive=receive)
        cors = self.cors_headers(request.headers.get("origin"))

        # ---- Preflight ----
        if request.method == "OPTIONS":
            response = Response(
                status_code=204,
                headers={**cors, "Access-Control-Max-Age": PREFLIGHT_MAX_AGE},
            )
            await response(scope, receive, send)
            return

        async def send_with_cors(message):
            if message["type"] == "http.response.start":
                headers = MutableHeaders(scope=message)
                for k, v in cors.items():
                    headers[k] = v
            await send(message)

        await self.app(scope, receive, send_with_cors)
