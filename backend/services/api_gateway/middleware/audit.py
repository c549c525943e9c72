import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from shared_libraries.logging import get_logger

logger = get_logger(__name__)


class AuditMiddleware(BaseHTTPMiddleware):
    """
    Middleware to audit log operator actions (non-GET requests).

    Captures:
    - Action (HTTP Method)
    - Resource (URL Path)
    - IP Address
    - Status Code
    - Duration
    """

    audited_methods = ("POST", "PUT", "PATCH", "DELETE")

    async def dispatch(self, request: Request, call_next) -> Response:
        start_time = time.time()
        response = await call_next(request)

        if request.method not in self.audited_methods:
            return response

        logger.info(
            "operator_action",
            method=request.method,
            path=request.url.path,
            ip=request.client.host if request.client else None,
            status_code=response.status_code,
            duration_ms=int((time.time() - start_time) * 1000),
        )
        return response
