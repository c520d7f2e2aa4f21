"""Uniform ``{code, message}`` error bodies for every failure the API reports."""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any, Sequence

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from lingoticket.tickets.service import (
    TicketConflictError,
    TicketNotFoundError,
    TicketServiceError,
    TicketValidationError,
    TranslationProviderError,
)

logger = logging.getLogger(__name__)

_SERVICE_ERRORS: tuple[tuple[type[TicketServiceError], int], ...] = (
    (TicketValidationError, 400),
    (TicketNotFoundError, 404),
    (TicketConflictError, 409),
    (TranslationProviderError, 502),
)

_LOCATION_ROOTS = {"body", "query", "path", "header", "cookie"}


class ErrorResponse(BaseModel):
    code: str
    message: str


def error_response(status_code: int, message: str) -> JSONResponse:
    body = ErrorResponse(code=HTTPStatus(status_code).name, message=message)
    return JSONResponse(status_code=status_code, content=body.model_dump())


def _describe_validation_error(errors: Sequence[dict[str, Any]]) -> str:
    if not errors:
        return "Invalid request"
    if any(error.get("type") == "json_invalid" for error in errors):
        return "Malformed JSON request body"

    first = errors[0]
    location = [str(part) for part in first.get("loc", ()) if part not in _LOCATION_ROOTS]
    field = ".".join(location)
    error_type = first.get("type")
    if error_type == "missing" and field:
        message = f"{field} is required"
    elif error_type == "value_error" and first.get("ctx", {}).get("error") is not None:
        message = str(first["ctx"]["error"])
    else:
        message = str(first.get("msg") or "Invalid request")
    return f"{field}: {message}" if field else message


async def handle_ticket_service_error(request: Request, exc: TicketServiceError) -> JSONResponse:
    for error_type, status_code in _SERVICE_ERRORS:
        if isinstance(exc, error_type):
            return error_response(status_code, str(exc))
    logger.error("Unmapped ticket service error on %s: %s", request.url.path, exc)
    return error_response(500, str(exc))


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return error_response(400, _describe_validation_error(exc.errors()))


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    response = error_response(exc.status_code, str(exc.detail))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(TicketServiceError, handle_ticket_service_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
