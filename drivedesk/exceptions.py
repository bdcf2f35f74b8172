"""
DriveDesk Relay — Custom Exception Hierarchy
=============================================

What:  Application-specific exceptions for the relay's error scenarios.
Why:   Services raise typed errors; global handlers (registered in main.py)
       turn them into the JSON bodies each endpoint promises.
How:   Each exception carries a user-facing message and an optional context
       dict. The context is logged, never returned.

Exception Hierarchy:
    RelayError (base)
    ├── ValidationError          → 400 Bad Request (missing/invalid input)
    ├── FileStorageError         → 500 (temporary upload could not be written)
    ├── LLMServiceError          → 500 (Gemini call or image encoding failed)
    └── MessagingProviderError   → 500 (WhatsApp API rejected or unreachable)
"""

from typing import Any, Dict, Optional


class RelayError(Exception):
    """
    Base exception for all DriveDesk Relay errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(RelayError):
    """
    Raised when client input fails validation.

    When:    No file uploaded, non-image MIME type, missing booking fields,
             request body that is not a JSON object.
    HTTP:    400 Bad Request
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class FileStorageError(RelayError):
    """
    Raised when the temporary upload cannot be written to the upload directory.

    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class LLMServiceError(RelayError):
    """
    Raised when extraction fails: the stored image could not be read or encoded,
    or the Gemini call raised. There is no retry; the first failure is final.

    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "Failed to process image",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class MessagingProviderError(RelayError):
    """
    Raised when the WhatsApp Cloud API call fails.

    Attributes:
        provider_error: The provider's error body when it sent one (usually a
            dict like {"error": {"message": ..., "code": ...}}), otherwise the
            transport error message. Returned to the client under "error".
        status_code:    Upstream HTTP status, None for transport failures.

    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        provider_error: Any = None,
        status_code: Optional[int] = None,
        message: str = "Failed to send message.",
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if status_code is not None:
            ctx["upstream_status"] = status_code
        super().__init__(message=message, context=ctx)
        self.provider_error = provider_error
        self.status_code = status_code
