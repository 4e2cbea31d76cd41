from typing import Mapping

from starlette.datastructures import Headers
from starlette.types import ASGIApp, Message, Receive, Scope, Send
from .context import (
    RequestContext,
    generate_trace_id,
    generate_request_id,
    generate_span_id,
    set_current_context,
    reset_current_context,
)


def build_request_context(
    headers: Mapping[str, str],
    service_name: str,
    method: str,
    path: str,
) -> RequestContext:
    """Build the RequestContext for one inbound request.

    trace_id and request_id are taken from X-Trace-Id / X-Request-Id when the
    caller sent them. A new span_id is always generated; an incoming
    X-Parent-Span-Id becomes parent_span_id, and span_source is chained onto
    the caller's X-Request-Source.
    """
    request_source = f"{service_name.upper()}:{method}{path}"
    parent_request_source = headers.get('x-request-source')

    return RequestContext(
        trace_id=headers.get('x-trace-id') or generate_trace_id(),
        trace_source=headers.get('x-trace-source') or request_source,
        request_id=headers.get('x-request-id') or generate_request_id(),
        request_source=request_source,
        span_id=generate_span_id(),
        span_source=(
            f"{parent_request_source}->{request_source}"
            if parent_request_source else request_source
        ),
        parent_span_id=headers.get('x-parent-span-id'),
    )


class ContextMiddleware:
    """
    ASGI Middleware that attaches a RequestContext to request.state.context.

    The context is also installed in a contextvar for the duration of the
    request so the structured logger picks it up, and the tracing ids are
    echoed back as x-trace-id, x-request-id and x-span-id response headers.
    """

    def __init__(self, app: ASGIApp, service_name: str):
        self.app = app
        self.service_name = service_name

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        ctx = build_request_context(
            Headers(scope=scope),
            self.service_name,
            scope.get("method", "GET"),
            scope.get("path", "/"),
        )
        scope.setdefault("state", {})["context"] = ctx
        token = set_current_context(ctx)

        async def send_with_headers(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = list(message.get("headers", []))
                headers.append((b"x-trace-id", ctx.trace_id.encode()))
                headers.append((b"x-request-id", ctx.request_id.encode()))
                headers.append((b"x-span-id", ctx.span_id.encode()))
                message["headers"] = headers
            await send(message)

        try:
            await self.app(scope, receive, send_with_headers)
        finally:
            reset_current_context(token)
