"""
Observability Middleware.

Adds correlation IDs and structured logging context to requests. The
request's correlation ID is kept in a context variable so that log records
from the wallet services (transfers, registrations) carry the same ID as the
request log line.
"""

import time
import uuid
import logging
from contextvars import ContextVar
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from backend.app.core.config import settings

CORRELATION_HEADER = "X-Correlation-ID"

# "-" outside of a request (scripts, tests calling services directly)
correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="-")

# Configure structured logger
logger = logging.getLogger("wallet.requests")


def get_correlation_id() -> str:
    return correlation_id_var.get()


class CorrelationIdFilter(logging.Filter):
    """Stamp every record with the current request's correlation ID."""
    
    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "correlation_id"):
            record.correlation_id = get_correlation_id()
        return True


def configure_logging() -> None:
    """Set up root logging for the wallet namespace."""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s [%(correlation_id)s] %(message)s",
    )
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, CorrelationIdFilter) for f in handler.filters):
            handler.addFilter(CorrelationIdFilter())


class ObservabilityMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
        
        # Set before call_next: the endpoint task inherits this context
        token = correlation_id_var.set(correlation_id)
        start_time = time.perf_counter()
        try:
            response = await call_next(request)
        finally:
            correlation_id_var.reset(token)
        
        process_time = (time.perf_counter() - start_time) * 1000  # ms
        
        response.headers[CORRELATION_HEADER] = correlation_id
        response.headers["X-Process-Time"] = f"{process_time:.2f}"
        
        log_data = {
            "correlation_id": correlation_id,
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": round(process_time, 2),
            "ip": request.client.host if request.client else "unknown"
        }
        
        if response.status_code >= 500:
            logger.error("Request failed", extra=log_data)
        elif response.status_code >= 400:
            logger.warning("Request rejected", extra=log_data)
        else:
            logger.info("Request completed", extra=log_data)
            
        return response
