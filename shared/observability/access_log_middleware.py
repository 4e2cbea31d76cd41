"""Access log middleware for structured JSON logging."""

import time
from starlette.types import ASGIApp, Message, Receive, Scope, Send
from .logger import get_logger

logger = get_logger("access")


class AccessLogMiddleware:
    """
    ASGI Middleware that writes one structured log line per HTTP request.

    Must be installed inside ContextMiddleware so the request context is
    already set. 5xx responses are logged at ERROR, 4xx at WARNING.
    """

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        started = time.perf_counter()
        status_code = 500  # Default to 500 if response never starts

        async def send_with_status(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, send_with_status)
        finally:
            client = scope.get("client")
            data = {
                "method": scope.get("method"),
                "path": scope.get("path"),
                "status_code": status_code,
                "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                "client_ip": client[0] if client else "unknown",
            }
            if status_code >= 500:
                logger.error("HTTP request completed", data=data)
            elif status_code >= 400:
                logger.warning("HTTP request completed", data=data)
            else:
                logger.info("HTTP request completed", data=data)
