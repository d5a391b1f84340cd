from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import Optional

from app.core.database import get_db
from app.core.exceptions import AccountNotFoundError, InvalidTokenError
from app.core.logging_config import set_account_id
from app.core.security import SessionClaims, decode_token
from app.models.account import Account
from app.modules.auth.policy import Action, Caller, authorize

# auto_error=False so a missing header goes through our own 401 path
# (uniform body plus WWW-Authenticate) instead of FastAPI's 403
security = HTTPBearer(auto_error=False)


async def get_session_claims(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> SessionClaims:
    """Verify the bearer token and bind the caller to the request context"""
    if credentials is None or not credentials.credentials:
        raise InvalidTokenError("Not authenticated")

    claims = decode_token(credentials.credentials)

    set_account_id(claims.account_id)
    request.state.account_id = claims.account_id
    request.state.provider_token = claims.provider_token
    return claims


async def get_caller(
    claims: SessionClaims = Depends(get_session_claims),
) -> Caller:
    """Caller identity as seen by the authorization policy"""
    return Caller(account_id=claims.account_id, role=claims.role)


async def get_current_account(
    claims: SessionClaims = Depends(get_session_claims),
    db: AsyncSession = Depends(get_db),
) -> Account:
    """Load the caller's account row"""
    result = await db.execute(
        select(Account).where(Account.id == claims.account_id)
    )
    account = result.scalar_one_or_none()

    if not account:
        raise AccountNotFoundError(claims.account_id)

    return account


def require_action(action: Action):
    """
    Dependency factory for actions that are decided by role alone.

    Runs before the request body is validated, so a caller who may never
    perform the action is refused with 403 whatever they sent.
    """
    async def _check(caller: Caller = Depends(get_caller)) -> Caller:
        authorize(caller, action)
        return caller

    return _check
