"""Domain error taxonomy and its HTTP mapping.

Services raise these; routers never translate them by hand. One set of
exception handlers installed on the app turns them into JSON bodies of
the form ``{"error": ...}``:

  Unauthorized      401  no authenticated principal
  Forbidden         403  authenticated, wrong role or not the owner
  NotFound          404  absent, or hidden from this caller
  ValidationFailed  400  ``error`` is a message or a {field: [messages]} map
  Conflict          409  the existing entity rides along in the body

Anything else is logged with its stack trace and returned as a bare 500,
so no internal detail reaches the client.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.requests import Request

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    status_code = 500

    def __init__(
        self,
        message: str,
        *,
        extra: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.extra = extra or {}
        self.headers = headers

    def body(self) -> dict[str, Any]:
        return {"error": self.message, **self.extra}


class Unauthorized(ServiceError):
    status_code = 401

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})


class Forbidden(ServiceError):
    status_code = 403

    def __init__(self, message: str = "Forbidden") -> None:
        super().__init__(message)


class NotFound(ServiceError):
    status_code = 404


class ValidationFailed(ServiceError):
    status_code = 400

    def __init__(
        self, message: str, *, errors: dict[str, list[str]] | None = None
    ) -> None:
        super().__init__(message)
        self.errors = errors

    def body(self) -> dict[str, Any]:
        if self.errors:
            return {"error": self.errors}
        return {"error": self.message}


class Conflict(ServiceError):
    status_code = 409

    def __init__(self, message: str, *, existing: dict[str, Any] | None = None):
        super().__init__(message, extra=existing)


def field_errors(exc: RequestValidationError) -> dict[str, list[str]]:
    """Flatten pydantic errors into ``{field: [messages]}``.

    The location prefix (``body``/``query``/``path``) is dropped; nested
    locations are dotted, e.g. ``content.questions.0``.
    """
    errors: dict[str, list[str]] = {}
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        key = ".".join(loc) or "_"
        errors.setdefault(key, []).append(err.get("msg", "Invalid value"))
    return errors


async def _service_error_handler(_request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, ServiceError)
    if exc.status_code >= 500:
        logger.error("Service error: %s", exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder(exc.body()),
        headers=exc.headers,
    )


async def _request_validation_handler(
    _request: Request, exc: Exception
) -> JSONResponse:
    assert isinstance(exc, RequestValidationError)
    return JSONResponse(status_code=400, content={"error": field_errors(exc)})


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "Unhandled error on %s %s", request.method, request.url.path, exc_info=exc
    )
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def install_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ServiceError, _service_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
