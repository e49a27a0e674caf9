"""
Storefront Edge API — Custom Exception Hierarchy
=================================================

What:  Defines application-specific exceptions for different error scenarios.
Why:   Custom exceptions enable targeted error handling with the exact HTTP
       status codes the frontend relies on.
How:   Each exception carries a user-facing message, an optional `details`
       string (returned to the client), a `context` dict (logged only) and
       optional response `headers`. Global handlers registered in main.py
       turn them into `{"error": ..., "details": ...}` JSON bodies.
Who:   Raised by the remote client, services and routes.

Exception Hierarchy:
    StorefrontError (base)
    ├── ValidationError               → 400 Bad Request (missing/invalid input)
    ├── NotFoundError                 → 404 Not Found
    └── RemoteError                   → 500 Internal Server Error
        └── SchemaCompatibilityError  → caught and retried, never surfaced

Edge reads never let RemoteError escape: they substitute fallback data.
"""

from typing import Any, Dict, Optional


class StorefrontError(Exception):
    """
    Base exception for all storefront application errors.

    Attributes:
        message:  User-facing error description, rendered as the `error` field
        details:  Optional diagnostic string, rendered as the `details` field
        context:  Additional debug info (logged but NOT returned to client)
        headers:  Extra response headers to attach to the error response
    """

    status_code = 500

    def __init__(
        self,
        message: str = "Internal server error",
        details: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.message = message
        self.details = details
        self.context = context or {}
        self.headers = headers
        super().__init__(self.message)

    def with_headers(self, headers: Dict[str, str]) -> "StorefrontError":
        """Attach response headers (e.g. CORS) and return self for re-raising."""
        self.headers = {**(self.headers or {}), **headers}
        return self


class ValidationError(StorefrontError):
    """
    Raised when client input is missing or malformed.

    When:    Required query parameter absent, upload without a file, id not an integer.
    HTTP:    400 Bad Request

    Schema-level problems in JSON bodies are still reported by FastAPI as 422;
    this exception covers the checks the routes perform by hand.
    """

    status_code = 400

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        details: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, details=details, context=ctx, headers=headers)
        self.field = field


class NotFoundError(StorefrontError):
    """
    Raised when a requested record does not exist.

    When:    query_one / update matched zero rows.
    HTTP:    404 Not Found

    The remote store answers "no rows" with an empty array rather than an
    error; the remote client converts that into this exception so routes
    can map it to 404 without inspecting payloads.
    """

    status_code = 404

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[Any] = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = str(resource_id)
        super().__init__(
            message=message or f"{resource.capitalize()} not found",
            context=ctx,
            headers=headers,
        )
        self.resource = resource
        self.resource_id = resource_id


class RemoteError(StorefrontError):
    """
    Raised when the remote store or blob service fails.

    What:    Transport error, timeout, or a non-2xx answer from PostgREST/Storage.
    HTTP:    500 Internal Server Error (write paths and reads without fallback)

    Recovery:
        Edge reads catch this and serve fallback data instead.
        Services re-raise it with an operation message such as
        "Failed to create product", keeping the remote message in `details`.
    """

    status_code = 500

    def __init__(
        self,
        message: str = "Remote store request failed",
        details: Optional[str] = None,
        status: Optional[int] = None,
        code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        ctx = context or {}
        if status is not None:
            ctx["status"] = status
        if code:
            ctx["code"] = code
        super().__init__(message=message, details=details, context=ctx, headers=headers)
        self.status = status
        self.code = code


class SchemaCompatibilityError(RemoteError):
    """
    Raised when a write or select names a column the remote schema lacks.

    What:    PostgREST answered PGRST204 ("Could not find the 'x' column") or
             Postgres answered 42703 ("column x does not exist").
    Who:     Caught by the hero image service, which retries once without the
             optional column. Never surfaced to API consumers.
    """

    def __init__(
        self,
        table: str,
        column: Optional[str],
        message: str = "Remote schema is missing a column",
        status: Optional[int] = None,
        code: Optional[str] = None,
    ):
        super().__init__(
            message=message,
            status=status,
            code=code,
            context={"table": table, "column": column},
        )
        self.table = table
        self.column = column
