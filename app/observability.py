import logging
import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from app.logging import request_id_var
from app.metrics import REQUEST_COUNT, REQUEST_ERRORS, REQUEST_LATENCY

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def _route_path(request: Request) -> str:
    # Label by route template so path parameters don't explode cardinality.
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path


class ObservabilityMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id
        token = request_id_var.set(request_id)
        started = time.monotonic()
        status = "500"
        try:
            response = await call_next(request)
            status = str(response.status_code)
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            duration = time.monotonic() - started
            path = _route_path(request)
            REQUEST_COUNT.labels(method=request.method, path=path, status=status).inc()
            REQUEST_LATENCY.labels(method=request.method, path=path, status=status).observe(
                duration
            )
            if status.startswith("5"):
                REQUEST_ERRORS.labels(method=request.method, path=path, status=status).inc()
            logger.debug(
                "%s %s -> %s in %.3fs", request.method, request.url.path, status, duration
            )
            request_id_var.reset(token)
