"""
Exceptions raised by the marks services.
"""

from typing import Optional, Any, Dict


class MarksError(Exception):
    """Base exception for marks related errors."""

    def __init__(self, message: str, error_code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}


class ValidationError(MarksError):
    """Raised when component or mark data is invalid."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code="VALIDATION_ERROR", details=details)


class NotFoundError(MarksError):
    """Raised when a requested enrollment, student, course or component does not exist."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code="NOT_FOUND", details=details)
