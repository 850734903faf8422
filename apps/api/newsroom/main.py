"""FastAPI application entrypoint."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from newsroom.errors import FailureKind, ServiceError
from newsroom.repositories.memory import InMemoryStore, PersistenceError
from newsroom.routes import account_router, admin_router, users_router
from newsroom.schemas.error import ErrorDetail, ErrorResponse

logger = logging.getLogger(__name__)

_STATUS_BY_FAILURE: dict[FailureKind, int] = {
    FailureKind.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    FailureKind.INVALID_TRANSITION: status.HTTP_400_BAD_REQUEST,
    FailureKind.UNAUTHENTICATED: status.HTTP_401_UNAUTHORIZED,
    FailureKind.INVALID_TOKEN: status.HTTP_403_FORBIDDEN,
    FailureKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    FailureKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    FailureKind.CONFLICT: status.HTTP_409_CONFLICT,
    FailureKind.INTERNAL_FAILURE: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def status_code_for(kind: FailureKind) -> int:
    return _STATUS_BY_FAILURE[kind]


def _error_response(
    status_code: int,
    *,
    message: str,
    code: str,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    payload = ErrorResponse(message=message, error=ErrorDetail(code=code, details=details))
    return JSONResponse(status_code=status_code, content=payload.model_dump(mode="json", exclude_none=True))


def _validation_details(exc: RequestValidationError) -> dict[str, Any]:
    return {
        "errors": [
            {"loc": [str(part) for part in error.get("loc", ())], "msg": str(error.get("msg", ""))}
            for error in exc.errors()
        ]
    }


def create_app(store: InMemoryStore | None = None) -> FastAPI:
    app = FastAPI(title="Newsroom Moderation API", version="1.0.0")
    app.state.store = store if store is not None else InMemoryStore()

    @app.exception_handler(ServiceError)
    async def handle_service_error(_: Request, exc: ServiceError) -> JSONResponse:
        return _error_response(
            status_code_for(exc.kind),
            message=exc.message,
            code=exc.code,
            details=exc.details,
        )

    @app.exception_handler(PersistenceError)
    async def handle_persistence_error(request: Request, exc: PersistenceError) -> JSONResponse:
        logger.error(
            "store.failed method=%s path=%s reason=%s",
            request.method,
            request.url.path,
            type(exc).__name__,
        )
        return _error_response(
            status_code_for(FailureKind.INTERNAL_FAILURE),
            message="Internal server error",
            code=FailureKind.INTERNAL_FAILURE.value,
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(_: Request, exc: RequestValidationError) -> JSONResponse:
        return _error_response(
            status_code_for(FailureKind.VALIDATION_ERROR),
            message="Invalid request payload",
            code=FailureKind.VALIDATION_ERROR.value,
            details=_validation_details(exc),
        )

    api_prefix = "/api"
    app.include_router(admin_router, prefix=api_prefix)
    app.include_router(users_router, prefix=api_prefix)
    app.include_router(account_router, prefix=api_prefix)

    return app


app = create_app()
