"""
RFC 7807 Problem Details exception handling.

Every error raised by the contract services derives from
``ContractsAPIException`` and is rendered as ``application/problem+json``.
Details always name the operation and the identifier involved so clients
can display them verbatim.

See: https://datatracker.ietf.org/doc/html/rfc7807
"""

from typing import Optional, Dict, Any, List
from enum import Enum
from pydantic import BaseModel, Field
from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging
import uuid
from datetime import datetime, timezone

logger = logging.getLogger(__name__)


def _get_trace_id() -> str:
    """Get trace ID from the request context or generate a new one."""
    from contracts_api.middleware.correlation import get_request_id

    request_id = get_request_id()
    if request_id and request_id != "unknown":
        return request_id
    return uuid.uuid4().hex[:12]


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


class ErrorCode(str, Enum):
    """Standardized error codes for the contracts API."""

    # Validation
    VALIDATION_ERROR = "VAL_001"

    # Resource
    NOT_FOUND = "RES_001"
    CONFLICT = "RES_003"

    # Business Logic
    INVALID_AGREEMENT = "BIZ_004"
    IDENTIFIER_COLLISION = "BIZ_005"
    WORKFLOW_STATE = "BIZ_006"

    # External Services
    EXTERNAL_SERVICE_ERROR = "EXT_001"
    SCHEDULE_SYNC_FAILED = "EXT_002"

    # Server
    INTERNAL_ERROR = "SRV_001"
    SERVICE_UNAVAILABLE = "SRV_002"


class ProblemDetail(BaseModel):
    """
    RFC 7807 Problem Details response schema.

    Attributes:
        type: URI reference identifying the problem type
        title: Short, human-readable summary
        status: HTTP status code
        detail: Human-readable explanation specific to this occurrence
        instance: URI reference identifying this specific occurrence
        code: Machine-readable error code for client handling
        timestamp: ISO 8601 timestamp of when the error occurred
        trace_id: Request ID for log correlation
        operation: Name of the operation that failed
        resource_id: Identifier the failed operation addressed
        errors: List of field-level validation errors (for 422)
    """

    type: str = Field(default="about:blank")
    title: str
    status: int
    detail: str
    instance: Optional[str] = None
    code: str
    timestamp: str
    trace_id: str
    operation: Optional[str] = None
    resource_id: Optional[str] = None
    errors: Optional[List[Dict[str, Any]]] = None

    model_config = {
        "json_schema_extra": {
            "example": {
                "type": "/problems/res-001",
                "title": "Not Found",
                "status": 404,
                "detail": "update_contract: Contract with ID 1735689600000 was not found",
                "code": "RES_001",
                "timestamp": "2025-01-01T10:30:00Z",
                "trace_id": "abc123def456",
                "operation": "update_contract",
                "resource_id": "1735689600000",
            }
        }
    }


def _problem_type(code: ErrorCode) -> str:
    return f"/problems/{code.value.lower().replace('_', '-')}"


class ContractsAPIException(HTTPException):
    """
    Base exception for the contracts API with RFC 7807 support.

    Usage:
        raise ContractsAPIException(
            status_code=404,
            code=ErrorCode.NOT_FOUND,
            detail="Contract not found",
            operation="get_contract",
            resource_id="1735689600000",
        )
    """

    def __init__(
        self,
        status_code: int,
        code: ErrorCode,
        detail: str,
        title: Optional[str] = None,
        operation: Optional[str] = None,
        resource_id: Optional[str] = None,
        instance: Optional[str] = None,
        errors: Optional[List[Dict[str, Any]]] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.code = code
        self.title = title or self._default_title(status_code)
        self.operation = operation
        self.resource_id = resource_id
        self.instance = instance
        self.errors = errors
        self.trace_id = _get_trace_id()
        self.timestamp = _utc_timestamp()

        super().__init__(status_code=status_code, detail=detail, headers=headers)

    def __str__(self) -> str:
        return str(self.detail)

    @staticmethod
    def _default_title(status_code: int) -> str:
        """Get default title based on status code."""
        titles = {
            400: "Bad Request",
            404: "Not Found",
            409: "Conflict",
            422: "Validation Error",
            500: "Internal Server Error",
            502: "Bad Gateway",
            503: "Service Unavailable",
        }
        return titles.get(status_code, "Error")

    def to_problem_detail(self) -> ProblemDetail:
        """Convert to RFC 7807 ProblemDetail."""
        return ProblemDetail(
            type=_problem_type(self.code),
            title=self.title,
            status=self.status_code,
            detail=self.detail,
            instance=self.instance,
            code=self.code.value,
            timestamp=self.timestamp,
            trace_id=self.trace_id,
            operation=self.operation,
            resource_id=self.resource_id,
            errors=self.errors,
        )


# Convenience exception classes

class NotFoundError(ContractsAPIException):
    """Resource not found (404)."""

    def __init__(self, resource: str, resource_id: Any, operation: str):
        super().__init__(
            status_code=404,
            code=ErrorCode.NOT_FOUND,
            detail=f"{operation}: {resource} with ID {resource_id} was not found",
            operation=operation,
            resource_id=str(resource_id),
        )
        self.resource = resource


class ValidationError(ContractsAPIException):
    """Validation error (422)."""

    def __init__(
        self,
        detail: str,
        operation: Optional[str] = None,
        resource_id: Optional[str] = None,
        errors: Optional[List[Dict[str, Any]]] = None,
    ):
        super().__init__(
            status_code=422,
            code=ErrorCode.VALIDATION_ERROR,
            detail=detail,
            operation=operation,
            resource_id=resource_id,
            errors=errors,
        )


class ConflictError(ContractsAPIException):
    """Resource conflict (409)."""

    def __init__(self, detail: str, operation: Optional[str] = None, resource_id: Optional[str] = None):
        super().__init__(
            status_code=409,
            code=ErrorCode.CONFLICT,
            detail=detail,
            operation=operation,
            resource_id=resource_id,
        )


class InvalidAgreementError(ContractsAPIException):
    """Agreement submitted in a shape the workflow cannot accept (400)."""

    def __init__(self, detail: str, operation: str = "submit_agreement", resource_id: Optional[str] = None):
        if resource_id:
            detail = f"{detail} (workflow {resource_id})"
        super().__init__(
            status_code=400,
            code=ErrorCode.INVALID_AGREEMENT,
            detail=f"{operation}: {detail}",
            operation=operation,
            resource_id=resource_id,
        )


class WorkflowStateError(ContractsAPIException):
    """Workflow step invoked out of order (409)."""

    def __init__(self, operation: str, state: str, resource_id: Optional[str] = None):
        workflow = f"workflow {resource_id}" if resource_id else "workflow"
        super().__init__(
            status_code=409,
            code=ErrorCode.WORKFLOW_STATE,
            detail=f"{operation}: not allowed while {workflow} is in state '{state}'",
            operation=operation,
            resource_id=resource_id,
        )
        self.state = state


class IdentifierCollisionError(ContractsAPIException):
    """Contract number could not be allocated (409). Fatal, never retried."""

    def __init__(self, detail: str, operation: str = "create_contract", resource_id: Optional[str] = None):
        super().__init__(
            status_code=409,
            code=ErrorCode.IDENTIFIER_COLLISION,
            detail=f"{operation}: {detail}",
            operation=operation,
            resource_id=resource_id,
        )


class ScheduleSyncFailedError(ContractsAPIException):
    """Schedule store unreachable or rejected a write (502).

    Non-fatal for contract writes: callers that already committed a contract
    report it as a warning instead of unwinding.
    """

    def __init__(self, operation: str, estimate_no: str, reason: str, schedule_id: Optional[str] = None):
        target = f"estimate {estimate_no}"
        if schedule_id:
            target += f" (schedule {schedule_id})"
        super().__init__(
            status_code=502,
            code=ErrorCode.SCHEDULE_SYNC_FAILED,
            detail=f"{operation}: schedule sync failed for {target}: {reason}",
            operation=operation,
            resource_id=estimate_no,
        )
        self.estimate_no = estimate_no
        self.schedule_id = schedule_id
        self.reason = reason


# Exception handlers for FastAPI

def create_problem_response(
    status_code: int,
    code: ErrorCode,
    detail: str,
    request: Request,
    errors: Optional[List[Dict[str, Any]]] = None,
    trace_id: Optional[str] = None,
) -> JSONResponse:
    """Create a RFC 7807 compliant JSON response."""
    problem = ProblemDetail(
        type=_problem_type(code),
        title=ContractsAPIException._default_title(status_code),
        status=status_code,
        detail=detail,
        instance=str(request.url.path),
        code=code.value,
        timestamp=_utc_timestamp(),
        trace_id=trace_id or _get_trace_id(),
        errors=errors,
    )

    return JSONResponse(
        status_code=status_code,
        content=problem.model_dump(exclude_none=True),
        media_type="application/problem+json",
    )


def create_exception_handlers():
    """
    Create exception handlers.

    Usage in main.py:
        handlers = create_exception_handlers()
        app.add_exception_handler(ContractsAPIException, handlers["contracts"])
        app.add_exception_handler(RequestValidationError, handlers["validation"])
        app.add_exception_handler(Exception, handlers["generic"])
    """

    async def handle_contracts_exception(request: Request, exc: ContractsAPIException) -> JSONResponse:
        logger.warning(
            "%s - %s",
            exc.code.value,
            exc.detail,
            extra={"trace_id": exc.trace_id, "status_code": exc.status_code, "path": request.url.path},
        )
        problem = exc.to_problem_detail()
        problem.instance = problem.instance or str(request.url.path)
        return JSONResponse(
            status_code=exc.status_code,
            content=problem.model_dump(exclude_none=True),
            media_type="application/problem+json",
            headers=exc.headers,
        )

    async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        """Handle standard HTTPException with RFC 7807 response."""
        code_map = {
            400: ErrorCode.VALIDATION_ERROR,
            404: ErrorCode.NOT_FOUND,
            409: ErrorCode.CONFLICT,
            422: ErrorCode.VALIDATION_ERROR,
            500: ErrorCode.INTERNAL_ERROR,
            502: ErrorCode.EXTERNAL_SERVICE_ERROR,
            503: ErrorCode.SERVICE_UNAVAILABLE,
        }

        return create_problem_response(
            status_code=exc.status_code,
            code=code_map.get(exc.status_code, ErrorCode.INTERNAL_ERROR),
            detail=str(exc.detail),
            request=request,
        )

    async def handle_validation_exception(request: Request, exc: RequestValidationError) -> JSONResponse:
        """Handle Pydantic validation errors with field-level details."""
        errors = [
            {
                "field": ".".join(str(loc) for loc in error["loc"]),
                "message": error["msg"],
                "type": error["type"],
            }
            for error in exc.errors()
        ]

        return create_problem_response(
            status_code=422,
            code=ErrorCode.VALIDATION_ERROR,
            detail="Request validation failed",
            request=request,
            errors=errors,
        )

    async def handle_generic_exception(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected exceptions with RFC 7807 response."""
        trace_id = _get_trace_id()
        logger.exception(
            "Unhandled exception: %s",
            exc,
            extra={"trace_id": trace_id, "path": request.url.path},
        )

        from contracts_api.config import settings
        detail = str(exc) if settings.DEBUG else "An unexpected error occurred"

        return create_problem_response(
            status_code=500,
            code=ErrorCode.INTERNAL_ERROR,
            detail=detail,
            request=request,
            trace_id=trace_id,
        )

    return {
        "contracts": handle_contracts_exception,
        "http": handle_http_exception,
        "validation": handle_validation_exception,
        "generic": handle_generic_exception,
    }
