import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Optional, Dict
from .context import RequestContext, get_context


# Security: Keys that should never be logged
FORBIDDEN_KEYS = {
    'authorization', 'token', 'password', 'secret',
    'api_key', 'bearer', 'jwt', 'credential', 'auth', 'dsn'
}

# Keys allowed at the top level of a log line; everything else goes under "data"
TOP_LEVEL_KEYS = {
    'trace_id', 'trace_source', 'request_id', 'request_source',
    'span_id', 'span_source', 'parent_span_id',
    'shop_id', 'user_id',
}


class StructuredLogger:
    """
    Structured JSON logger that automatically injects request context.

    Context is included from, in increasing priority:
    - the current request context (contextvars, set by ContextMiddleware)
    - an explicit RequestContext passed as second argument
    - top-level keyword arguments (trace_id, shop_id, user_id, ...)

    Any other keyword arguments are merged into the "data" envelope.

    Usage:
        logger = get_logger("spice.repositories.shop")
        logger.info("Shop created", data={"shop_id": "..."})
    """

    def __init__(self, service_name: str):
        self.service_name = service_name
        self.logger = logging.getLogger(service_name)
        self.logger.setLevel(logging.DEBUG)

        if not self.logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(logging.Formatter('%(message)s'))
            self.logger.addHandler(handler)
        self.logger.propagate = False

    @staticmethod
    def _sanitize(values: Dict[str, Any]) -> Dict[str, Any]:
        """Remove forbidden keys for security."""
        return {
            k: v for k, v in values.items()
            if k.lower() not in FORBIDDEN_KEYS
        }

    def _log(
        self,
        level: str,
        message: str,
        ctx: Optional[RequestContext] = None,
        data: Any = None,
        **kwargs,
    ):
        log_entry: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            "level": level,
            "service": self.service_name,
            "message": message
        }

        log_entry.update(get_context())
        if ctx is not None:
            log_entry.update(ctx.to_dict())

        safe_kwargs = self._sanitize(kwargs)
        for key in [k for k in safe_kwargs if k in TOP_LEVEL_KEYS]:
            log_entry[key] = safe_kwargs.pop(key)

        if data is not None and not isinstance(data, dict):
            data = {"value": data}
        payload = self._sanitize(data or {})
        payload.update(safe_kwargs)
        if payload:
            log_entry["data"] = payload

        log_method = getattr(self.logger, level.lower())
        log_method(json.dumps(log_entry, default=str))

    def debug(self, message: str, ctx: Optional[RequestContext] = None, **kwargs):
        self._log("DEBUG", message, ctx, **kwargs)

    def info(self, message: str, ctx: Optional[RequestContext] = None, **kwargs):
        self._log("INFO", message, ctx, **kwargs)

    def warning(self, message: str, ctx: Optional[RequestContext] = None, **kwargs):
        self._log("WARNING", message, ctx, **kwargs)

    def error(self, message: str, ctx: Optional[RequestContext] = None, **kwargs):
        self._log("ERROR", message, ctx, **kwargs)

    def critical(self, message: str, ctx: Optional[RequestContext] = None, **kwargs):
        self._log("CRITICAL", message, ctx, **kwargs)


_loggers: Dict[str, StructuredLogger] = {}
_level = logging.DEBUG


def get_logger(service_name: str) -> StructuredLogger:
    """Get a structured logger for the given service."""
    logger = _loggers.get(service_name)
    if logger is None:
        logger = StructuredLogger(service_name)
        logger.logger.setLevel(_level)
        _loggers[service_name] = logger
    return logger


def set_log_level(level: str) -> None:
    """Apply the configured minimum level to every structured logger."""
    global _level
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        raise ValueError(f"Unknown log level: {level}")
    _level = numeric
    for logger in _loggers.values():
        logger.logger.setLevel(numeric)
