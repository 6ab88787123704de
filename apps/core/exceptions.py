"""
Error taxonomy and the API error envelope for the Newsroom.

Taxonomy:
    ValidationError        user-fixable problem with one field (400)
    FormValidationError    every failing field of a form, in form order (400)
    NotFoundError          referenced document is missing (404)
    UpstreamError          document store or media store call failed (502)
    AuthError              admin operation attempted without a session (401)
    OrphanResourceWarning  best-effort cleanup failed; logged, never raised

Every error response has the same shape:

    {
        "error": {"code": "...", "message": "...", "field": "...", "details": {...}},
        "request_id": "...",
        "errors": [{"field": "...", "message": "..."}, ...]   # forms only
    }

so the admin can show inline field errors from `errors` and a generic
"failed to X, please try again" banner from `error.message`.
"""

import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from django.core.exceptions import ValidationError as DjangoValidationError
from django.http import Http404
from rest_framework import exceptions as drf_exceptions
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


class ErrorCode(str, Enum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    AUTHENTICATION_REQUIRED = "AUTHENTICATION_REQUIRED"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    RATE_LIMITED = "RATE_LIMITED"
    NOT_FOUND = "NOT_FOUND"
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"
    UPSTREAM_ERROR = "UPSTREAM_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Error Envelope
# =============================================================================

@dataclass
class ErrorDetail:
    code: ErrorCode
    message: str
    field: Optional[str] = None
    details: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {"code": ErrorCode(self.code).value, "message": self.message}
        if self.field:
            result["field"] = self.field
        if self.details:
            result["details"] = self.details
        return result


@dataclass
class ErrorResponse:
    error: ErrorDetail
    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    errors: Optional[List[Dict[str, str]]] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {"error": self.error.to_dict(), "request_id": self.request_id}
        if self.errors is not None:
            result["errors"] = self.errors
        return result

    def to_response(self, status_code: int = 400) -> Response:
        return Response(self.to_dict(), status=status_code)


# =============================================================================
# Newsroom Exceptions
# =============================================================================

class NewsroomException(APIException):
    """Base of every error the Newsroom raises on purpose."""

    status_code = status.HTTP_400_BAD_REQUEST
    error_code = ErrorCode.INTERNAL_ERROR
    default_detail = "An error occurred"

    def __init__(
        self,
        message: Optional[str] = None,
        code: Optional[ErrorCode] = None,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message or self.default_detail
        self.error_code = code or self.error_code
        self.field = field
        self.error_details = details or {}
        super().__init__(detail=self.message)

    def get_error_response(self, request_id: Optional[str] = None) -> ErrorResponse:
        return ErrorResponse(
            error=ErrorDetail(
                code=self.error_code,
                message=self.message,
                field=self.field,
                details=self.error_details or None,
            ),
            request_id=request_id or str(uuid.uuid4()),
        )


class ValidationError(NewsroomException):
    """Validation error for a single field."""
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = ErrorCode.VALIDATION_ERROR
    default_detail = "Validation failed"

    def to_dict(self) -> Dict[str, str]:
        return {"field": self.field or "", "message": self.message}

    def get_error_response(self, request_id: Optional[str] = None) -> ErrorResponse:
        response = super().get_error_response(request_id)
        response.errors = [self.to_dict()]
        return response


class FormValidationError(NewsroomException):
    """
    All field errors of one form.

    Errors are kept in form order so callers can surface the first failing
    field.
    """
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = ErrorCode.VALIDATION_ERROR
    default_detail = "Validation failed"

    def __init__(self, errors: List[ValidationError], message: Optional[str] = None):
        self.errors = list(errors)
        first = self.errors[0] if self.errors else None
        super().__init__(
            message=message or (first.message if first else None),
            field=first.field if first else None,
        )

    @property
    def fields(self) -> List[str]:
        return [error.field for error in self.errors]

    def get_error_response(self, request_id: Optional[str] = None) -> ErrorResponse:
        response = super().get_error_response(request_id)
        response.errors = [error.to_dict() for error in self.errors]
        return response


class NotFoundError(NewsroomException):
    """Referenced document does not exist."""
    status_code = status.HTTP_404_NOT_FOUND
    error_code = ErrorCode.NOT_FOUND
    default_detail = "Resource not found"

    def __init__(self, collection: str, doc_id: Any, message: Optional[str] = None):
        self.collection = collection
        self.doc_id = doc_id
        super().__init__(
            message=message or f"{collection} document {doc_id} not found",
            details={"collection": collection, "id": str(doc_id)},
        )


class UpstreamError(NewsroomException):
    """A document store or media store call failed."""
    status_code = status.HTTP_502_BAD_GATEWAY
    error_code = ErrorCode.UPSTREAM_ERROR
    default_detail = "Upstream storage call failed"

    def __init__(self, operation: str, message: Optional[str] = None):
        self.operation = operation
        super().__init__(
            message=message or f"Failed to {operation}, please try again",
            details={"operation": operation},
        )


class AuthError(NewsroomException):
    """Admin operation attempted without an authenticated session."""
    status_code = status.HTTP_401_UNAUTHORIZED
    error_code = ErrorCode.AUTHENTICATION_REQUIRED
    default_detail = "Authentication required"


class OrphanResourceWarning(Warning):
    """
    A best-effort cleanup step failed while the primary operation went ahead.

    Never raised to callers; collected by the saga runner and logged.
    """

    def __init__(self, step: str, resource: Optional[str] = None, cause: Optional[BaseException] = None):
        self.step = step
        self.resource = resource
        self.cause = cause
        super().__init__(f"{step} left {resource or 'a resource'} behind: {cause}")


# =============================================================================
# Exception Handler
# =============================================================================

DRF_ERROR_CODES = {
    status.HTTP_401_UNAUTHORIZED: ErrorCode.AUTHENTICATION_REQUIRED,
    status.HTTP_403_FORBIDDEN: ErrorCode.PERMISSION_DENIED,
    status.HTTP_404_NOT_FOUND: ErrorCode.NOT_FOUND,
    status.HTTP_405_METHOD_NOT_ALLOWED: ErrorCode.METHOD_NOT_ALLOWED,
    status.HTTP_429_TOO_MANY_REQUESTS: ErrorCode.RATE_LIMITED,
}

PASSTHROUGH_HEADERS = ('Retry-After', 'WWW-Authenticate')


def get_request_id(request) -> str:
    """Request id set by RequestIDMiddleware, or a fresh one."""
    return getattr(request, 'request_id', None) or str(uuid.uuid4())


def flatten_field_errors(detail, prefix: str = '') -> List[Dict[str, str]]:
    """
    Serializer error detail as [{field, message}] in declaration order.

    Nested list items are addressed like form fields: `subEvents[0].day`.
    """
    if isinstance(detail, dict):
        errors = []
        for name, value in detail.items():
            key = name if name != 'non_field_errors' else ''
            errors.extend(flatten_field_errors(value, f"{prefix}.{key}" if prefix and key else prefix or key))
        return errors
    if isinstance(detail, list):
        if detail and all(isinstance(item, (dict, list)) for item in detail):
            errors = []
            for index, item in enumerate(detail):
                errors.extend(flatten_field_errors(item, f"{prefix}[{index}]"))
            return errors
        return [{"field": prefix, "message": str(message)} for message in detail]
    return [{"field": prefix, "message": str(detail)}]


def newsroom_exception_handler(exc, context):
    """
    DRF exception handler producing the Newsroom error envelope.

    Serializer validation errors become the same `errors` list that
    FormValidationError produces. Anything unexpected is logged with its
    traceback and answered with a generic 500.
    """
    request = context.get('request')
    request_id = get_request_id(request)

    if isinstance(exc, NewsroomException):
        log = logger.error if exc.status_code >= 500 else logger.warning
        log(
            "API error %s: %s", exc.error_code.value, exc.message,
            extra={"error_code": exc.error_code.value, "field": exc.field, "status_code": exc.status_code},
        )
        return exc.get_error_response(request_id).to_response(exc.status_code)

    if isinstance(exc, DjangoValidationError):
        if hasattr(exc, 'message_dict'):
            errors = flatten_field_errors(exc.message_dict)
        else:
            errors = [{"field": "", "message": message} for message in exc.messages]
        first = errors[0] if errors else {"field": "", "message": "Validation failed"}
        return ErrorResponse(
            error=ErrorDetail(ErrorCode.VALIDATION_ERROR, first["message"], first["field"] or None),
            request_id=request_id,
            errors=errors,
        ).to_response(status.HTTP_400_BAD_REQUEST)

    if isinstance(exc, Http404):
        return ErrorResponse(
            error=ErrorDetail(ErrorCode.NOT_FOUND, str(exc) or "Resource not found"),
            request_id=request_id,
        ).to_response(status.HTTP_404_NOT_FOUND)

    response = drf_exception_handler(exc, context)
    if response is None:
        logger.exception(
            "Unhandled %s: %s", type(exc).__name__, exc,
            extra={"exception_type": type(exc).__name__},
        )
        return ErrorResponse(
            error=ErrorDetail(ErrorCode.INTERNAL_ERROR, "An unexpected error occurred"),
            request_id=request_id,
        ).to_response(status.HTTP_500_INTERNAL_SERVER_ERROR)

    if isinstance(exc, drf_exceptions.ValidationError):
        errors = flatten_field_errors(exc.detail)
        first = errors[0] if errors else {"field": "", "message": "Validation failed"}
        envelope = ErrorResponse(
            error=ErrorDetail(ErrorCode.VALIDATION_ERROR, first["message"], first["field"] or None),
            request_id=request_id,
            errors=errors,
        )
    else:
        code = DRF_ERROR_CODES.get(
            response.status_code,
            ErrorCode.INTERNAL_ERROR if response.status_code >= 500 else ErrorCode.VALIDATION_ERROR,
        )
        message = response.data.get('detail') if isinstance(response.data, dict) else None
        envelope = ErrorResponse(
            error=ErrorDetail(code, str(message or exc)),
            request_id=request_id,
        )

    wrapped = envelope.to_response(response.status_code)
    for header in PASSTHROUGH_HEADERS:
        if header in response:
            wrapped[header] = response[header]
    return wrapped


def created_response(data: Any = None) -> Response:
    """201 with `data` as the body."""
    return Response(data if data is not None else {}, status=status.HTTP_201_CREATED)
