"""Context-based restrictions exceptions.

Custom exceptions for CBR operations with detailed error context.
"""

from typing import Any


class CBRAPIError(Exception):
    """Base exception for CBR errors.

    Attributes:
        message: Error message
        code: HTTP status code (if available)
        errors: List of error details from the service response
        response: Raw response data (if available)
    """

    def __init__(
        self,
        message: str,
        code: int | None = None,
        errors: list[dict[str, Any]] | None = None,
        response: dict[str, Any] | None = None,
    ) -> None:
        """Initialize CBRAPIError.

        Args:
            message: Error message
            code: HTTP status code
            errors: List of error details
            response: Raw response data
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.errors = errors or []
        self.response = response

    def __str__(self) -> str:
        """Return string representation."""
        parts = [self.message]
        if self.code:
            parts.append(f"(code: {self.code})")
        if self.errors:
            error_msgs = [e.get("message", str(e)) for e in self.errors]
            # The service repeats its top-level message in the error list
            error_msgs = [m for m in error_msgs if m != self.message]
            if error_msgs:
                parts.append(f"Details: {'; '.join(error_msgs)}")
        return " ".join(parts)


class CBRConfigurationError(CBRAPIError):
    """Client construction error.

    Raised when an authenticated service client cannot be built, e.g.
    the API key is empty or the service URL is malformed.
    """


class CBRAuthError(CBRAPIError):
    """Authentication or authorization error.

    Raised when the API key is invalid, the IAM token exchange fails,
    or the caller lacks permission on the account.
    """


class CBRRateLimitError(CBRAPIError):
    """Rate limit exceeded error.

    Attributes:
        retry_after: Seconds to wait before retrying (if provided)
    """

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        retry_after: int | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.retry_after = retry_after


class CBRNotFoundError(CBRAPIError):
    """Resource not found error.

    Raised when a zone or rule ID does not exist.

    Attributes:
        resource_type: Type of resource not found
        resource_id: ID of the missing resource
    """

    def __init__(
        self,
        message: str,
        resource_type: str | None = None,
        resource_id: str | None = None,
        **kwargs: Any,
    ) -> None:
        """Initialize not found error.

        Args:
            message: Error message
            resource_type: Type of resource (e.g., "zone", "rule")
            resource_id: ID of the missing resource
            **kwargs: Additional arguments for base class
        """
        super().__init__(message, **kwargs)
        self.resource_type = resource_type
        self.resource_id = resource_id


class CBRValidationError(CBRAPIError):
    """Validation error for invalid request data.

    Raised when a zone or rule request fails the service's validation,
    e.g. a malformed address or an unknown service name.
    """


class CBRConflictError(CBRAPIError):
    """Conflict error.

    Raised when an operation conflicts with existing state, e.g.
    deleting a zone that is still referenced by a rule.
    """


class CBRBulkDeleteError(CBRAPIError):
    """Bulk delete error.

    Raised by BulkDeleteResult.raise_for_failures when one or more
    matched zones or rules could not be deleted.

    Attributes:
        failed: Outcomes of the deletions that failed
    """

    def __init__(
        self,
        message: str,
        failed: list[Any] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.failed = failed or []
