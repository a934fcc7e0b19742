import logging
from typing import Iterable

from fastapi import status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger(__name__)


class OriginAllowListMiddleware(BaseHTTPMiddleware):
    """
    Refuses cross-origin requests whose Origin is not allow-listed before
    they reach a route. Requests without an Origin header pass through.
    Sits inside CORSMiddleware, so disallowed preflights are answered there.
    """

    def __init__(self, app, allowed_origins: Iterable[str]):
        super().__init__(app)
        self.allowed_origins = frozenset(allowed_origins)

    async def dispatch(self, request: Request, call_next):
        origin = request.headers.get("origin")
        if origin is not None and origin not in self.allowed_origins:
            logger.warning(
                f"Rejected {request.method} {request.url.path} from origin {origin}",
                extra={"origin": origin},
            )
            return JSONResponse(
                status_code=status.HTTP_403_FORBIDDEN,
                content={"error": "Not allowed by CORS"},
            )
        return await call_next(request)
