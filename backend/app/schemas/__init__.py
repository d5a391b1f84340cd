# Pydantic schemas
from app.schemas.auth import (
    SignupRequest,
    LoginRequest,
    AccountResponse,
    AuthResponse,
    SignupResponse,
    LogoutResponse,
)
from app.schemas.complaint import (
    ComplaintCreate,
    ComplaintUpdate,
    ComplaintStatusUpdate,
    ComplaintResponse,
    MessageResponse,
)

__all__ = [
    "SignupRequest",
    "LoginRequest",
    "AccountResponse",
    "AuthResponse",
    "SignupResponse",
    "LogoutResponse",
    "ComplaintCreate",
    "ComplaintUpdate",
    "ComplaintStatusUpdate",
    "ComplaintResponse",
    "MessageResponse",
]
