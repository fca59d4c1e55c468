import time
import uuid
import random
from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp
import logging
from . import config
from .logging_config import mask_token, trace_id_var
from .metrics import observe_request

logger = logging.getLogger("pulse")

class TracingMiddleware(BaseHTTPMiddleware):
    """ASGI middleware for request tracing and structured logging"""

    def __init__(self, app: ASGIApp, exclude_paths=None, sample_rate: float = None):
        super().__init__(app)
        self.exclude_paths = set(exclude_paths if exclude_paths is not None else config.LOG_EXCLUDE_PATHS)
        self.sample_rate = config.LOG_SAMPLE_RATE if sample_rate is None else sample_rate

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # Generate or reuse trace ID
        trace_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        token_ctx = trace_id_var.set(trace_id)

        client_ip = request.client.host if request.client else "unknown"
        start_time = time.time()

        try:
            return await self._traced(request, call_next, trace_id, client_ip, start_time)
        finally:
            trace_id_var.reset(token_ctx)

    async def _traced(self, request: Request, call_next: Callable, trace_id: str,
                      client_ip: str, start_time: float) -> Response:
        try:
            response = await call_next(request)
        except Exception as e:
            latency_ms = round((time.time() - start_time) * 1000, 2)
            logger.error(f"Request failed: {e}", extra={
                "method": request.method,
                "path": request.url.path,
                "status": 500,
                "latency_ms": latency_ms,
                "client_ip": client_ip,
                "tenant": self._tenant(request),
            })
            observe_request(500, request.url.path, latency_ms / 1000)
            raise

        # Streams are timed to first byte, not to disconnect
        latency_ms = round((time.time() - start_time) * 1000, 2)
        observe_request(response.status_code, request.url.path, latency_ms / 1000)
        if config.HTTP_LOG_ENABLED:
            self._log_request(
                method=request.method,
                path=request.url.path,
                status=response.status_code,
                latency_ms=latency_ms,
                client_ip=client_ip,
                tenant=self._tenant(request),
                trace_id=trace_id,
            )

        response.headers["X-Request-ID"] = trace_id
        return response

    @staticmethod
    def _tenant(request: Request) -> str:
        # Set by the auth dependency once the token resolved to a shop
        return mask_token(getattr(request.state, "tenant", None))

    def _log_request(self, method: str, path: str, status: int, latency_ms: float,
                     client_ip: str, tenant: str, trace_id: str):
        """Log HTTP request with structured data and sampling"""

        if path in self.exclude_paths:
            return

        extra = {
            "method": method,
            "path": path,
            "status": status,
            "latency_ms": latency_ms,
            "client_ip": client_ip,
            "tenant": tenant,
            "request_id": trace_id,
        }

        # Always log errors
        if status >= 400:
            log_level = logging.ERROR if status >= 500 else logging.WARNING
            logger.log(log_level, "HTTP Request", extra=extra)
            return

        # Sample successful requests
        if random.random() > self.sample_rate:
            return

        logger.info("HTTP Request", extra=extra)
