from contextvars import ContextVar, Token
from typing import Dict, Any, Optional
from dataclasses import dataclass
import time
import secrets
import re


TRACE_ID_PATTERN = re.compile(r'^t\d{10}[0-9a-f]{12}$')
REQUEST_ID_PATTERN = re.compile(r'^r\d{10}[0-9a-f]{12}$')
SPAN_ID_PATTERN = re.compile(r'^s[0-9a-f]{8}$')


def _timestamped_id(prefix: str) -> str:
    """prefix + Unix timestamp (seconds) + 12 hexadecimal characters."""
    return f"{prefix}{int(time.time())}{secrets.token_hex(6)}"


def generate_trace_id() -> str:
    """New trace_id, e.g. t1735228800a1b2c3d4e5f6."""
    return _timestamped_id("t")


def generate_request_id() -> str:
    """New request_id, e.g. r1735228800f6e5d4c3b2a1."""
    return _timestamped_id("r")


def generate_span_id() -> str:
    """New span_id: s + 8 hexadecimal characters."""
    return f"s{secrets.token_hex(4)}"


def is_valid_trace_id(value: str) -> bool:
    return TRACE_ID_PATTERN.fullmatch(value) is not None


def is_valid_request_id(value: str) -> bool:
    return REQUEST_ID_PATTERN.fullmatch(value) is not None


def is_valid_span_id(value: str) -> bool:
    return SPAN_ID_PATTERN.fullmatch(value) is not None


@dataclass(frozen=True)
class RequestContext:
    """
    Request context for one inbound HTTP request.

    Immutable dataclass containing tracing information for observability.

    Fields:
    - trace_id: Global trace identifier (e.g., "t1735228800a1b2c3d4e5f6")
    - trace_source: Where the trace originated (e.g., "WEB:GET/shops")
    - request_id: Request identifier (e.g., "r1735228800f6e5d4c3b2a1")
    - request_source: Current service and endpoint (e.g., "SPICE:GET/api/shops")
    - span_id: Span identifier for this operation (e.g., "sa1b2c3d4")
    - span_source: Service call path (e.g., "WEB:GET/shops->SPICE:GET/api/shops")
    - parent_span_id: span_id of the calling service, if any
    """
    trace_id: str
    trace_source: str
    request_id: str
    request_source: str
    span_id: str
    span_source: str
    parent_span_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {
            'trace_id': self.trace_id,
            'trace_source': self.trace_source,
            'request_id': self.request_id,
            'request_source': self.request_source,
            'span_id': self.span_id,
            'span_source': self.span_source
        }
        if self.parent_span_id is not None:
            result['parent_span_id'] = self.parent_span_id
        return result


# Context of the request being handled by the current task
_current_context: ContextVar[Optional[RequestContext]] = ContextVar(
    "request_context", default=None
)


def set_current_context(ctx: RequestContext) -> Token:
    return _current_context.set(ctx)


def reset_current_context(token: Token) -> None:
    _current_context.reset(token)


def get_current_context() -> Optional[RequestContext]:
    return _current_context.get()


def get_context() -> Dict[str, Any]:
    """Current request context as a dict, empty outside a request."""
    ctx = _current_context.get()
    return ctx.to_dict() if ctx else {}
