import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from link_server.config import SESSION_COOKIE_NAME, SESSION_EXPIRE_MINUTES
from link_server.security import decode_session_token

logger = logging.getLogger("link")

SKIP_LOG_PATHS = {"/health", "/docs", "/openapi.json", "/redoc"}


def read_session_token(request: Request) -> str | None:
    """Session token from the Authorization header, falling back to the cookie."""
    auth = request.headers.get("Authorization", "")
    if auth.startswith("Bearer "):
        return auth.split(" ", 1)[1].strip() or None
    return request.cookies.get(SESSION_COOKIE_NAME)


def _is_local(request: Request) -> bool:
    return request.url.hostname in ("localhost", "127.0.0.1", "testserver")


def set_session_cookie(response: Response, request: Request, token: str) -> None:
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=token,
        max_age=SESSION_EXPIRE_MINUTES * 60,
        httponly=True,
        samesite="lax",
        secure=not _is_local(request),
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(key=SESSION_COOKIE_NAME, path="/")


class SessionMiddleware(BaseHTTPMiddleware):
    """Resolves the session token of every request into ``request.state.identity``."""

    async def dispatch(self, request: Request, call_next) -> Response:
        request.state.identity = None
        if request.method != "OPTIONS":
            token = read_session_token(request)
            if token:
                request.state.identity = decode_session_token(token)
        return await call_next(request)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs method, path, status code, duration, and user id for each request."""

    async def dispatch(self, request: Request, call_next) -> Response:
        start = time.time()
        response = await call_next(request)
        duration_ms = round((time.time() - start) * 1000)

        path = request.url.path
        if path in SKIP_LOG_PATHS:
            return response

        identity = getattr(request.state, "identity", None)
        logger.info(
            f"{request.method} {path} {response.status_code}",
            extra={"extra_data": {
                "method": request.method,
                "path": path,
                "status": response.status_code,
                "duration_ms": duration_ms,
                "user_id": identity.user_id if identity else None,
            }},
        )
        return response
