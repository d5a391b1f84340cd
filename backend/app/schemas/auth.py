from pydantic import BaseModel, EmailStr, Field, ConfigDict, field_validator
from datetime import datetime

from app.models.account import AccountRole


class SignupRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()


class AccountResponse(BaseModel):
    id: str
    external_id: str
    email: str
    role: AccountRole
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AuthResponse(BaseModel):
    user: AccountResponse
    token: str


class SignupResponse(AuthResponse):
    message: str = "User registered successfully"


class LogoutResponse(BaseModel):
    message: str = "Logged out successfully"
    success: bool = True
