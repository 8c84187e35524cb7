"""
Custom domain exceptions for consistent error handling on the server.

These exceptions are mapped to JSON error bodies by the exception handlers
in main.py and by the tip routes.
"""
from fastapi import HTTPException, status


class DomainError(HTTPException):
    """Base class for all domain-specific errors."""
    def __init__(self, message: str, status_code: int = status.HTTP_400_BAD_REQUEST, details: dict | None = None):
        super().__init__(status_code=status_code, detail=message)
        self.message = message
        self.details = details or {}


class ValidationError(DomainError):
    """Validation error (400). The message is sent to the client verbatim."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, status_code=status.HTTP_400_BAD_REQUEST, details=details)


class PaymentLinkError(DomainError):
    """Payment link could not be generated (500)."""
    def __init__(self, message: str = "Failed to generate payment link", details: dict | None = None):
        super().__init__(message, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, details=details)
