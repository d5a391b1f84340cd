"""
Custom Exceptions for ComplaintDesk
===================================

Every failure the API can report maps to one of these classes. The
exception handler in ``app.main`` turns them into a JSON body carrying a
machine-readable ``code`` and the matching HTTP status.

Usage:
    from app.core.exceptions import ComplaintNotFoundError, AuthorizationError

    if not complaint:
        raise ComplaintNotFoundError(complaint_id)
"""

from typing import Optional, Any, Dict


class ComplaintDeskError(Exception):
    """Base exception for all ComplaintDesk errors"""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details
        }


# ============================================
# Authentication & Authorization Errors
# ============================================

class AuthenticationError(ComplaintDeskError):
    """Caller could not be authenticated"""

    status_code = 401

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message, code="AUTH_FAILED")


class TokenExpiredError(AuthenticationError):
    """Session token has expired"""

    def __init__(self):
        super().__init__("Token has expired")
        self.code = "TOKEN_EXPIRED"


class InvalidTokenError(AuthenticationError):
    """Session token is missing, malformed or wrongly signed"""

    def __init__(self, message: str = "Invalid token"):
        super().__init__(message)
        self.code = "INVALID_TOKEN"


class AuthorizationError(ComplaintDeskError):
    """Caller is authenticated but not allowed to perform the action"""

    status_code = 403

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message, code="NOT_AUTHORIZED")


# ============================================
# Resource Errors (404-type)
# ============================================

class ResourceNotFoundError(ComplaintDeskError):
    """Base class for not found errors"""

    status_code = 404

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} not found",
            code=f"{resource_type.upper()}_NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": str(resource_id)}
        )


class ComplaintNotFoundError(ResourceNotFoundError):
    """Complaint not found"""

    def __init__(self, complaint_id: str):
        super().__init__("Complaint", complaint_id)


class AccountNotFoundError(ResourceNotFoundError):
    """Account not found"""

    def __init__(self, account_id: str):
        super().__init__("Account", account_id)


# ============================================
# Validation Errors (4xx)
# ============================================

class ValidationError(ComplaintDeskError):
    """Input validation failed"""

    status_code = 422

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="VALIDATION_ERROR", details=details)


class ConflictError(ComplaintDeskError):
    """Resource already exists"""

    status_code = 409

    def __init__(self, message: str = "Resource already exists"):
        super().__init__(message, code="CONFLICT")


# ============================================
# Identity Provider Errors
# ============================================

class IdentityProviderError(ComplaintDeskError):
    """Identity provider unreachable or returned an unexpected response"""

    status_code = 502

    def __init__(self, message: str, provider: Optional[str] = None):
        super().__init__(message, code="IDENTITY_PROVIDER_ERROR")
        if provider:
            self.details["provider"] = provider


# ============================================
# Request Errors
# ============================================

class RequestTooLargeError(ComplaintDeskError):
    """Request body over MAX_REQUEST_SIZE"""

    status_code = 413

    def __init__(self, max_size: int):
        super().__init__(
            f"Request body too large. Maximum size is {max_size} bytes",
            code="REQUEST_TOO_LARGE",
            details={"max_size": max_size},
        )


# ============================================
# Helper function for API responses
# ============================================

def error_response(error: ComplaintDeskError) -> Dict[str, Any]:
    """Convert exception to API error response format"""
    return {
        "success": False,
        "error": error.to_dict(),
        "detail": error.message,
    }
