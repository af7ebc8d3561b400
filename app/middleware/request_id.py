"""Request ID middleware.

Generates or forwards X-Request-ID, sets it on the response and exposes it to
log records for the duration of the request. Client-provided values are
sanitized (length + character set) to prevent log injection. Raw ASGI (no
BaseHTTPMiddleware) so streamed downloads are not buffered.
"""

import re
from typing import Any, Callable

from app.shared.context import reset_request_id, set_request_id
from app.shared.utils.generators import generate_request_id

REQUEST_ID_HEADER = "X-Request-ID"
REQUEST_ID_MAX_LENGTH = 64
REQUEST_ID_ALLOWED_PATTERN = re.compile(
    r"^[a-zA-Z0-9_-]{1," + str(REQUEST_ID_MAX_LENGTH) + r"}$"
)


def _header(scope: dict[str, Any], name: str) -> str | None:
    """First value of header name (case-insensitive)."""
    want = name.lower().encode()
    for key, value in scope.get("headers", []):
        if key.lower() == want:
            return value.decode("utf-8", errors="replace")
    return None


def sanitize_request_id(raw: str | None) -> str:
    """Return raw when it is a safe identifier, else a new UUID4."""
    if raw and REQUEST_ID_ALLOWED_PATTERN.match(raw.strip()):
        return raw.strip()
    return generate_request_id()


def RequestIDMiddleware(app: Callable, header_name: str = REQUEST_ID_HEADER) -> Callable:
    """ASGI middleware factory for use with app.add_middleware."""
    encoded_name = header_name.lower().encode()

    async def asgi_app(scope: dict[str, Any], receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        request_id = sanitize_request_id(_header(scope, header_name))
        scope.setdefault("state", {})["request_id"] = request_id

        async def send_with_header(message: dict[str, Any]) -> None:
            if message["type"] == "http.response.start":
                message["headers"] = [
                    *message.get("headers", []),
                    (encoded_name, request_id.encode()),
                ]
            await send(message)

        token = set_request_id(request_id)
        try:
            await app(scope, receive, send_with_header)
        finally:
            reset_request_id(token)

    return asgi_app
