"""Global exception handlers for the FastAPI application."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from crowdstrike_connector.core.exceptions import (
    ConnectorException,
    DatasourceFailed,
    DatasourceRejected,
    DatasourceTimeout,
    DatasourceUnreachable,
    InvalidConfiguration,
    InvalidCursor,
    MalformedResponse,
    UnsupportedEntity,
)
from crowdstrike_connector.core.schemas.problem_details import ProblemDetails

logger = logging.getLogger(__name__)

_DEFAULT_TITLES = {
    400: "Bad Request",
    500: "Internal Server Error",
    502: "Bad Gateway",
    503: "Service Unavailable",
    504: "Gateway Timeout",
}


def http_status_for(exc: ConnectorException) -> int:
    """Map a connector exception to the HTTP status of the response."""
    match exc:
        case InvalidConfiguration() | InvalidCursor() | UnsupportedEntity():
            return status.HTTP_400_BAD_REQUEST
        case DatasourceTimeout():
            return status.HTTP_504_GATEWAY_TIMEOUT
        case DatasourceUnreachable():
            return status.HTTP_503_SERVICE_UNAVAILABLE
        case DatasourceRejected() | DatasourceFailed() | MalformedResponse():
            return status.HTTP_502_BAD_GATEWAY
        case _:
            return status.HTTP_500_INTERNAL_SERVER_ERROR


def _get_request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def _create_problem_detail(
    status_code: int,
    detail: str,
    type_: str = "about:blank",
    title: str | None = None,
    instance: str | None = None,
    extra: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Create an RFC 7807 Problem Details body.

    Args:
        status_code: HTTP status code.
        detail: Human-readable error description.
        type_: Error type identifier.
        title: Short human-readable summary.
        instance: URI identifying this occurrence.
        extra: Additional context information.

    Returns:
        Dictionary representing the problem detail.
    """
    problem = ProblemDetails(
        type=type_,
        title=title or _DEFAULT_TITLES.get(status_code, "Error"),
        status=status_code,
        detail=detail,
        instance=instance,
    )

    response_data = problem.model_dump(exclude_none=True)
    if extra:
        response_data.update(extra)
    return response_data


async def connector_exception_handler(request: Request, exc: ConnectorException) -> JSONResponse:
    """Render a ConnectorException as problem details.

    The datasource's own status, when there is one, is carried as
    ``status_code`` next to the response ``status``.
    """
    request_id = _get_request_id(request)
    status_code = http_status_for(exc)

    logger.warning(
        "Connector exception occurred",
        extra={
            "request_id": request_id,
            "path": request.url.path,
            "method": request.method,
            "exception_type": exc.type,
            "status_code": exc.status_code,
            "detail": exc.detail,
        },
    )

    extra = dict(exc.extra)
    if exc.status_code is not None:
        extra["status_code"] = exc.status_code

    problem_data = _create_problem_detail(
        status_code=status_code,
        detail=exc.detail,
        type_=exc.type,
        title=exc.title,
        instance=str(request.url),
        extra=extra,
    )
    if request_id:
        problem_data["request_id"] = request_id

    headers = None
    if isinstance(exc, DatasourceRejected) and exc.retry_after:
        headers = {"Retry-After": exc.retry_after}

    return JSONResponse(status_code=status_code, content=problem_data, headers=headers)


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions with a generic 500."""
    request_id = _get_request_id(request)

    logger.error(
        "Unexpected exception occurred",
        extra={
            "request_id": request_id,
            "path": request.url.path,
            "method": request.method,
            "exception_type": type(exc).__name__,
            "exception_message": str(exc),
        },
        exc_info=True,
    )

    problem_data = _create_problem_detail(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="An unexpected error occurred while processing your request",
        type_="internal-error",
        title="Internal Server Error",
        instance=str(request.url),
    )
    if request_id:
        problem_data["request_id"] = request_id

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=problem_data,
    )


def configure_exception_handlers(app: FastAPI) -> None:
    """Register the exception handlers.

    Example:
            app = FastAPI()
        configure_exception_handlers(app)
    """
    app.add_exception_handler(ConnectorException, connector_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    logger.info("Exception handlers configured")
