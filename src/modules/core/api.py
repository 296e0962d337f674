"""HTTP translation of errors.

Every error body has the same shape::

    {"error": "<summary>", "details": ["<message>", ...]}

``details`` is omitted when there is nothing beyond the summary.

- ``error_response`` renders a domain exception raised by a service.
- ``api_exception_handler`` is the DRF ``EXCEPTION_HANDLER``: it renders
  DRF's own exceptions (401, 403, parse and serializer errors, throttling)
  and turns anything unexpected into a 500.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog
from django.conf import settings
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.exceptions import ValidationError as DRFValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

from modules.core.exceptions import (
    AccessDenied,
    Conflict,
    DomainError,
    NotFound,
    ValidationFailed,
)

logger = structlog.get_logger(__name__)

_STATUS_BY_ERROR = (
    (ValidationFailed, status.HTTP_400_BAD_REQUEST),
    (AccessDenied, status.HTTP_403_FORBIDDEN),
    (NotFound, status.HTTP_404_NOT_FOUND),
    (Conflict, status.HTTP_409_CONFLICT),
)


def error_body(message: str, details: Optional[List[str]] = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {"error": message}
    if details:
        body["details"] = details
    return body


def error_response(exc: DomainError) -> Response:
    """Translate a domain exception into its HTTP response."""
    for error_class, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_class):
            break
    else:
        status_code = status.HTTP_400_BAD_REQUEST
    return Response(error_body(exc.message, exc.details), status=status_code)


def pydantic_error_response(exc: PydanticValidationError) -> Response:
    """400 response listing every pydantic validation error."""
    details = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        message = str(error.get("msg", "Invalid value"))
        details.append(f"{location}: {message}" if location else message)
    return Response(
        error_body(ValidationFailed.default_message, details),
        status=status.HTTP_400_BAD_REQUEST,
    )


def flatten_errors(data: Any, prefix: str = "") -> List[str]:
    """Flatten DRF's nested error structure into ``path: message`` strings."""
    if isinstance(data, dict):
        messages: List[str] = []
        for key, value in data.items():
            if key == "non_field_errors":
                path = prefix
            elif isinstance(key, int) or str(key).isdigit():
                path = f"{prefix}[{key}]"
            else:
                path = f"{prefix}.{key}" if prefix else str(key)
            messages.extend(flatten_errors(value, path))
        return messages
    if isinstance(data, list):
        if all(not isinstance(item, (dict, list)) for item in data):
            return [f"{prefix}: {item}" if prefix else str(item) for item in data]
        messages = []
        for index, item in enumerate(data):
            messages.extend(flatten_errors(item, f"{prefix}[{index}]"))
        return messages
    return [f"{prefix}: {data}" if prefix else str(data)]


def api_exception_handler(exc: Exception, context: Dict[str, Any]) -> Response:
    response = exception_handler(exc, context)

    if response is None:
        view = context.get("view")
        logger.exception(
            "api.unexpected_error",
            view=view.__class__.__name__ if view else None,
            error=str(exc),
        )
        details = [str(exc)] if settings.DEBUG else None
        return Response(
            error_body("Internal server error", details),
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if isinstance(exc, DRFValidationError):
        response.data = error_body(
            ValidationFailed.default_message, flatten_errors(response.data)
        )
        return response

    detail = response.data.get("detail") if isinstance(response.data, dict) else None
    response.data = error_body(str(detail) if detail else "Request failed")
    return response
