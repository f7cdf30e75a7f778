"""
Error Definitions

Defines the exceptions the gateway turns into HTTP responses.
Every outcome other than success maps to exactly one of these classes.
"""

from typing import Any, Optional


class AppError(Exception):
    """
    Application Base Exception

    Base class for all custom exceptions, containing error message, type, and code.
    """

    def __init__(
        self,
        message: str,
        error_type: str = "app_error",
        code: str = "internal_error",
        details: Optional[dict[str, Any]] = None,
        status_code: int = 500,
    ):
        """
        Initialize exception

        Args:
            message: Error message
            error_type: Error type
            code: Error code
            details: Extra error details
            status_code: HTTP status code
        """
        super().__init__(message)
        self.message = message
        self.error_type = error_type
        self.code = code
        self.details = details or {}
        self.status_code = status_code

    def to_dict(self, include_details: bool = True) -> dict[str, Any]:
        """
        Convert to dictionary format (for API response)

        Args:
            include_details: Whether to attach the details mapping

        Returns:
            dict: Error information dictionary
        """
        result = {
            "error": {
                "message": self.message,
                "type": self.error_type,
                "code": self.code,
            }
        }
        if include_details and self.details:
            result["error"]["details"] = self.details
        return result


class NotFoundError(AppError):
    """
    Key Not Found Error

    Raised when a key is absent, and by the structured endpoints when the
    stored payload does not fit the structured schema.
    """

    def __init__(
        self,
        message: str = "key not found",
        code: str = "key_not_found",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            error_type="not_found_error",
            code=code,
            details=details,
            status_code=404,
        )


class IntegrityFaultError(AppError):
    """
    Integrity Fault Error

    Raised when a value exists but its metadata record is missing or
    unreadable. The gateway's own write path never produces this state.
    """

    def __init__(
        self,
        message: str = "no metadata found",
        code: str = "metadata_missing",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            error_type="integrity_error",
            code=code,
            details=details,
            status_code=500,
        )


class ValidationError(AppError):
    """
    Parameter Validation Error

    Raised when a request body or query parameter is rejected before any
    store mutation.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        code: str = "validation_error",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            error_type="validation_error",
            code=code,
            details=details,
            status_code=400,
        )


class StoreError(AppError):
    """
    Store Error

    Raised when the key-value store fails for any reason not classified above.
    """

    def __init__(
        self,
        message: str = "internal server error",
        code: str = "store_error",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            error_type="store_error",
            code=code,
            details=details,
            status_code=500,
        )
