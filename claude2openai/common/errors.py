"""
Error Definitions

Defines the gateway exception classes used for unified error handling.
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

    def to_dict(self, include_details: bool = False) -> dict[str, Any]:
        """
        Convert to dictionary format (for API response)

        Args:
            include_details: Whether to expose the extra details

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


class BadRequestError(AppError):
    """
    Bad Request Error

    Raised for malformed client JSON, a missing or malformed Authorization
    header, or an empty message list. The message is returned verbatim.
    """

    def __init__(
        self,
        message: str = "Bad request",
        code: str = "invalid_request",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            error_type="invalid_request_error",
            code=code,
            details=details,
            status_code=400,
        )


class ConfigurationError(AppError):
    """
    Configuration Error

    Raised at startup when the gateway configuration is invalid.
    """

    def __init__(
        self,
        message: str = "Invalid configuration",
        code: str = "configuration_error",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            error_type="configuration_error",
            code=code,
            details=details,
            status_code=500,
        )


class UpstreamUnavailableError(AppError):
    """
    Upstream Unavailable Error

    Raised when the upstream service cannot be reached. The transport detail
    only goes to the logs.
    """

    def __init__(
        self,
        message: str = "Failed to call upstream API",
        code: str = "upstream_unavailable",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            error_type="upstream_error",
            code=code,
            details=details,
            status_code=500,
        )


class UpstreamDecodeError(AppError):
    """
    Upstream Decode Error

    Raised when the upstream body is not a JSON object.
    """

    def __init__(
        self,
        message: str = "Failed to parse response from upstream API",
        code: str = "upstream_decode_error",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            error_type="upstream_error",
            code=code,
            details=details,
            status_code=500,
        )


class UpstreamReportedError(AppError):
    """
    Upstream Reported Error

    Carries the error object returned by the upstream together with its HTTP
    status code, which is passed through unchanged.
    """

    def __init__(self, error_type: str, message: str, status_code: int):
        super().__init__(
            message=message,
            error_type=error_type,
            code=error_type,
            status_code=status_code,
        )

    def to_dict(self, include_details: bool = False) -> dict[str, Any]:
        return {"error": {"type": self.error_type, "message": self.message}}


class UpstreamStreamTruncatedError(AppError):
    """
    Upstream Stream Truncated Error

    Raised when the upstream event stream ends, or fails to read, before the
    message_stop event. Frames already flushed to the client stand.
    """

    def __init__(
        self,
        message: str = "Upstream stream ended before message_stop",
        code: str = "upstream_stream_truncated",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            error_type="upstream_error",
            code=code,
            details=details,
            status_code=502,
        )
