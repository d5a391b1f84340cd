from fastapi import APIRouter, Depends, status, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.exceptions import AuthenticationError, ConflictError
from app.core.logging_config import logger, set_account_id
from app.core.security import SessionClaims, create_access_token
from app.core.rate_limiter import limiter
from app.models.account import Account
from app.modules.auth.dependencies import get_current_account, get_session_claims
from app.modules.identity import IdentityProvider, get_identity_provider
from app.schemas.auth import (
    SignupRequest,
    LoginRequest,
    AccountResponse,
    AuthResponse,
    SignupResponse,
    LogoutResponse,
)
from app.services.account_service import AccountService


router = APIRouter()


def _issue_token(account: Account, provider_token: str = None) -> str:
    return create_access_token(
        account_id=account.id,
        email=account.email,
        role=account.role.value,
        provider_token=provider_token,
    )


@router.post("/signup", response_model=SignupResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("3/minute")
async def signup(
    request: Request,
    credentials: SignupRequest,
    db: AsyncSession = Depends(get_db),
    provider: IdentityProvider = Depends(get_identity_provider),
):
    """Register a new account (rate limited: 3/min)"""
    client_ip = request.client.host if request.client else "unknown"
    accounts = AccountService(db)

    if await accounts.get_by_email(credentials.email):
        logger.log_auth_event(
            event="signup",
            success=False,
            user_email=credentials.email,
            reason="Email already registered",
            client_ip=client_ip,
        )
        raise ConflictError("An account with this email already exists")

    try:
        identity = await provider.sign_up(credentials.email, credentials.password)
    except ConflictError:
        logger.log_auth_event(
            event="signup",
            success=False,
            user_email=credentials.email,
            reason="Already registered with identity provider",
            client_ip=client_ip,
        )
        raise

    account, created = await accounts.get_or_create_account(identity)
    if not created:
        # A concurrent sign-up for this email won the insert
        logger.log_auth_event(
            event="signup",
            success=False,
            user_email=credentials.email,
            reason="Email registered concurrently",
            client_ip=client_ip,
        )
        raise ConflictError("An account with this email already exists")

    set_account_id(account.id)

    logger.log_auth_event(
        event="signup",
        success=True,
        user_email=account.email,
        client_ip=client_ip,
        account_id=account.id,
    )

    return SignupResponse(
        message="User registered successfully",
        user=AccountResponse.model_validate(account),
        token=_issue_token(account, identity.access_token),
    )


@router.post("/login", response_model=AuthResponse)
@limiter.limit("5/minute")
async def login(
    request: Request,
    credentials: LoginRequest,
    db: AsyncSession = Depends(get_db),
    provider: IdentityProvider = Depends(get_identity_provider),
):
    """Sign in with email and password (rate limited: 5/min)"""
    client_ip = request.client.host if request.client else "unknown"

    try:
        identity = await provider.sign_in(credentials.email, credentials.password)
    except AuthenticationError as e:
        logger.log_auth_event(
            event="login",
            success=False,
            user_email=credentials.email,
            reason=e.message,
            client_ip=client_ip,
        )
        raise

    account, created = await AccountService(db).get_or_create_account(identity)
    set_account_id(account.id)

    logger.log_auth_event(
        event="login",
        success=True,
        user_email=account.email,
        client_ip=client_ip,
        account_id=account.id,
        account_created=created,
    )

    return AuthResponse(
        user=AccountResponse.model_validate(account),
        token=_issue_token(account, identity.access_token),
    )


@router.post("/logout", response_model=LogoutResponse)
async def logout(
    claims: SessionClaims = Depends(get_session_claims),
    provider: IdentityProvider = Depends(get_identity_provider),
):
    """
    End the provider session bound to this token.

    Session tokens are stateless; the client discards its copy.
    """
    await provider.sign_out(claims.provider_token)

    logger.log_auth_event(
        event="logout",
        success=True,
        user_email=claims.email,
        account_id=claims.account_id,
    )
    return LogoutResponse(message="Logged out successfully", success=True)


@router.get("/profile", response_model=AccountResponse)
async def get_profile(account: Account = Depends(get_current_account)):
    """Get the caller's account"""
    return account
