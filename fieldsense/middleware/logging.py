"""structlog setup and per-request logging with request ID propagation."""

from __future__ import annotations

import logging
import re
import time
import uuid
from typing import Any

import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from fieldsense.config import LogFormat, get_settings

_configured = False


def configure_structured_logging() -> None:
	"""Configure stdlib + structlog once per process."""
	global _configured
	if _configured:
		return

	settings = get_settings()
	log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

	processors: list[Any] = [
		structlog.contextvars.merge_contextvars,
		structlog.processors.add_log_level,
		structlog.processors.TimeStamper(fmt="iso", utc=True),
		structlog.processors.format_exc_info,
	]
	if settings.log_format == LogFormat.json:
		processors.append(structlog.processors.JSONRenderer())
		logging.basicConfig(level=log_level, format="%(message)s")
	else:
		processors.append(structlog.dev.ConsoleRenderer())
		logging.basicConfig(level=log_level)

	structlog.configure(
		processors=processors,
		wrapper_class=structlog.make_filtering_bound_logger(log_level),
		logger_factory=structlog.PrintLoggerFactory(),
		cache_logger_on_first_use=True,
	)
	_configured = True


# Routes addressed by a sensor node id, e.g. /api/v1/irrigation/12/decision.
_NODE_PATH = re.compile(r"/(?:fields|readings|gdd|irrigation|crops/recommendations)/(\d+)(?:/|$)")
_HEALTH_PATHS = frozenset({"/health", "/health/ready"})


def node_id_from_path(path: str) -> int | None:
	match = _NODE_PATH.search(path)
	return int(match.group(1)) if match else None


class RequestLoggingMiddleware(BaseHTTPMiddleware):
	"""Bind an x-request-id (and the node id, when the path has one) to the log context."""

	async def dispatch(self, request: Request, call_next):  # type: ignore[override]
		request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
		request.state.request_id = request_id
		node_id = node_id_from_path(request.url.path)

		structlog.contextvars.clear_contextvars()
		structlog.contextvars.bind_contextvars(request_id=request_id)
		if node_id is not None:
			structlog.contextvars.bind_contextvars(node_id=node_id)
		logger = structlog.get_logger("fieldsense.request")
		started = time.perf_counter()

		try:
			response = await call_next(request)
		except Exception as exc:
			logger.exception(
				"http_request_failed",
				method=request.method,
				path=request.url.path,
				node_id=node_id,
				duration_ms=round((time.perf_counter() - started) * 1000.0, 2),
				error=str(exc),
			)
			raise

		response.headers["x-request-id"] = request_id
		# Health checks log at debug.
		log = logger.debug if request.url.path in _HEALTH_PATHS else logger.info
		log(
			"http_request",
			method=request.method,
			path=request.url.path,
			node_id=node_id,
			status_code=response.status_code,
			duration_ms=round((time.perf_counter() - started) * 1000.0, 2),
		)
		return response
