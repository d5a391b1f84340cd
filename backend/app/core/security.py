from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from jose import ExpiredSignatureError, JWTError, jwt
import bcrypt

from app.core.config import settings
from app.core.exceptions import InvalidTokenError, TokenExpiredError


@dataclass(frozen=True)
class SessionClaims:
    """Identity bound into a session token"""
    account_id: str
    email: str
    role: str
    provider_token: Optional[str] = None


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password"""
    # Bcrypt has a 72 byte limit - truncate password if necessary
    password_bytes = plain_password.encode('utf-8')[:72]
    return bcrypt.checkpw(password_bytes, hashed_password.encode('utf-8'))


def get_password_hash(password: str) -> str:
    """Hash password with configurable rounds (BCRYPT_ROUNDS in .env)"""
    password_bytes = password.encode('utf-8')[:72]
    hashed = bcrypt.hashpw(password_bytes, bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS))
    return hashed.decode('utf-8')


def create_access_token(
    account_id: str,
    email: str,
    role: str,
    provider_token: Optional[str] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Create a signed session token for an account.

    The token carries the account id (``sub``), email and role so that
    requests can be authorized without a database round trip. When the
    identity provider returned a session of its own, its token travels in
    ``pst`` so that logout can revoke it.
    """
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))

    to_encode: Dict[str, Any] = {
        "sub": str(account_id),
        "email": email,
        "role": role,
        "type": "access",
        "iat": int(now.timestamp()),
        "exp": int(expire.timestamp()),
    }
    if provider_token:
        to_encode["pst"] = provider_token

    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> SessionClaims:
    """Decode and validate a session token"""
    if not token:
        raise InvalidTokenError("Missing token")

    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except ExpiredSignatureError:
        raise TokenExpiredError()
    except JWTError:
        raise InvalidTokenError("Could not validate credentials")

    if payload.get("type") != "access":
        raise InvalidTokenError("Invalid token type")

    account_id = payload.get("sub")
    role = payload.get("role")
    if not account_id or not role:
        raise InvalidTokenError("Invalid token payload")

    return SessionClaims(
        account_id=account_id,
        email=payload.get("email", ""),
        role=role,
        provider_token=payload.get("pst"),
    )
