from typing_extensions import override
import time
import uuid
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp
from starlette.requests import Request
from starlette.responses import Response
from typing import Callable
from collections.abc import Awaitable

from bookkeep.core.errors import server_error_response
from bookkeep.core.logging import get_logger, request_id_var


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """
    Reads X-Request-ID (or generates one), exposes it as
    `request.state.correlation_id` and to every logger of the request,
    echoes it on the response and logs one line per request.

    Errors no exception handler turned into a response become the uniform
    500 body here, so they carry the header too.
    """

    def __init__(self, app: ASGIApp, header_name: str = "X-Request-ID"):
        super().__init__(app)
        self.header_name: str = header_name

    @override
    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        corr_id = request.headers.get(self.header_name) or str(uuid.uuid4())
        request.state.correlation_id = corr_id
        token = request_id_var.set(corr_id)
        logger = get_logger(__name__, request)

        started = time.perf_counter()
        try:
            try:
                response = await call_next(request)
            except Exception:
                logger.exception("Unhandled error in %s %s", request.method, request.url.path)
                response = server_error_response()
            elapsed_ms = (time.perf_counter() - started) * 1000

            response.headers[self.header_name] = corr_id
            logger.info(
                "%s %s -> %s (%.1f ms)",
                request.method,
                request.url.path,
                response.status_code,
                elapsed_ms,
            )
            return response
        finally:
            request_id_var.reset(token)
