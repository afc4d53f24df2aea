"""Mapping of pipeline errors to JSON error responses.

Every error body has the shape::

    {"success": false, "error": "<message>", "category": "<category>"}

Conversion failures additionally carry the tool output under ``details``.
The status code tells invalid requests (4xx) apart from storage problems
(502), and invalid data (422) apart from both. Any other fault answers
500 with category ``internal``.
"""

from __future__ import annotations

from typing import Any

import fastapi
from fastapi import responses

from pmtiles_publisher.core import exceptions

STATUS_CODES: dict[type[exceptions.PublisherError], int] = {
    exceptions.UploadTooLargeError: 413,
    exceptions.ClientInputError: 400,
    exceptions.ConversionError: 422,
    exceptions.StoreError: 502,
}


def status_for(exc: exceptions.PublisherError) -> int:
    """Return the HTTP status of an error, most specific class first."""
    for error_type in type(exc).__mro__:
        if error_type in STATUS_CODES:
            return STATUS_CODES[error_type]

    return 500


def error_body(exc: exceptions.PublisherError) -> dict[str, Any]:
    body: dict[str, Any] = {
        "success": False,
        "error": str(exc),
        "category": exc.category,
    }
    if isinstance(exc, exceptions.ConversionError):
        body["details"] = exc.diagnostics

    return body


async def publisher_error_handler(
    request: fastapi.Request,
    exc: exceptions.PublisherError,
) -> responses.JSONResponse:
    """Render a PublisherError raised anywhere below a route."""
    return responses.JSONResponse(
        status_code=status_for(exc),
        content=error_body(exc),
    )


async def unexpected_error_handler(
    request: fastapi.Request,
    exc: Exception,
) -> responses.JSONResponse:
    """Render any other fault, such as a full staging disk, as a 500."""
    return responses.JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": str(exc) or type(exc).__name__,
            "category": "internal",
        },
    )


def register_exception_handlers(app: fastapi.FastAPI) -> None:
    app.add_exception_handler(
        exceptions.PublisherError,
        publisher_error_handler,  # type: ignore[arg-type]
    )
    app.add_exception_handler(Exception, unexpected_error_handler)
