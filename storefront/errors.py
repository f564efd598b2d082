"""API error types and handlers.

Every error response has the same body: ``{"detail", "code", "timestamp"}``.
Routes raise ``ApiError`` (or a subclass); backend failures that escape a
service are mapped to a 500 ``backend_error`` here.
"""

from __future__ import annotations

from datetime import UTC, datetime

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse

from storefront.logger import get_logger
from storefront.services.supabase_client import SupabaseError

logger = get_logger(__name__)

BACKEND_ERROR = "backend_error"


def api_error_payload(*, detail: str, code: str, timestamp: str | None = None) -> dict[str, str]:
    return {
        "detail": detail,
        "code": code,
        "timestamp": timestamp or datetime.now(UTC).isoformat(),
    }


class ApiError(HTTPException):
    """HTTPException carrying a stable machine-readable ``code``."""

    def __init__(
        self,
        *,
        status_code: int,
        detail: str,
        code: str,
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.code = code
        self.timestamp = datetime.now(UTC).isoformat()

    def to_payload(self) -> dict[str, str]:
        return api_error_payload(detail=str(self.detail), code=self.code, timestamp=self.timestamp)


class NotFoundError(ApiError):
    def __init__(self, detail: str, *, code: str = "not_found") -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail, code=code)


class BadRequestError(ApiError):
    def __init__(self, detail: str, *, code: str = "bad_request") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail, code=code)


async def _api_error_handler(_request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload(), headers=exc.headers)


async def _backend_error_handler(request: Request, exc: SupabaseError) -> JSONResponse:
    logger.error(
        "backend_error",
        path=request.url.path,
        error=str(exc),
        backend_status=exc.status_code,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=api_error_payload(detail="Internal server error", code=BACKEND_ERROR),
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, _api_error_handler)
    app.add_exception_handler(SupabaseError, _backend_error_handler)
