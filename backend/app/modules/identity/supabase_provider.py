"""Supabase identity provider, backed by the supabase async client."""

import asyncio
from typing import Any, Awaitable, Callable, Optional

import httpx
from supabase import (
    AsyncClient,
    AsyncClientOptions,
    AuthApiError,
    AuthRetryableError,
    acreate_client,
)

from app.core.config import settings
from app.core.exceptions import (
    AuthenticationError,
    ConflictError,
    IdentityProviderError,
    ValidationError,
)
from app.core.logging_config import logger
from app.modules.identity.base import ExternalIdentity, IdentityProvider


# Older auth servers send no error code, only the message
DUPLICATE_CODES = {"user_already_exists", "email_exists"}
DUPLICATE_MESSAGES = ("already registered", "already exists")

# Statuses for a provider session that is already gone
ENDED_SESSION_STATUSES = {401, 403, 404}


def is_duplicate_signup(error: AuthApiError) -> bool:
    if getattr(error, "code", None) in DUPLICATE_CODES:
        return True
    message = (error.message or "").lower()
    return any(marker in message for marker in DUPLICATE_MESSAGES)


class SupabaseIdentityProvider(IdentityProvider):
    """Delegate credentials to a Supabase project's auth service."""

    name = "supabase"

    def __init__(
        self,
        url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[AsyncClient] = None,
    ):
        self.url = url or settings.SUPABASE_URL
        self.api_key = api_key or settings.SUPABASE_ANON_KEY
        self.timeout = timeout or settings.SUPABASE_TIMEOUT
        self._client = client

    async def _get_client(self) -> AsyncClient:
        if self._client is None:
            # Sessions live in our own tokens, never inside the client
            self._client = await acreate_client(
                self.url,
                self.api_key,
                options=AsyncClientOptions(auto_refresh_token=False, persist_session=False),
            )
        return self._client

    async def _call(self, operation: str, call: Callable[[Any], Awaitable[Any]]) -> Any:
        """Run ``call(client.auth)``; outages and 5xx become IdentityProviderError"""
        client = await self._get_client()
        try:
            return await asyncio.wait_for(call(client.auth), timeout=self.timeout)
        except AuthApiError as e:
            if (e.status or 0) >= 500:
                logger.error(f"[Supabase] {operation} failed with {e.status}: {e.message}")
                raise IdentityProviderError("Identity provider unavailable", provider=self.name)
            raise
        except (AuthRetryableError, httpx.HTTPError, asyncio.TimeoutError) as e:
            logger.error(f"[Supabase] {operation} unreachable: {type(e).__name__}: {e}")
            raise IdentityProviderError("Identity provider unavailable", provider=self.name)

    def _identity_from(self, user: Any, access_token: Optional[str] = None) -> ExternalIdentity:
        if user is None or not user.id or not user.email:
            raise IdentityProviderError("Malformed identity provider response", provider=self.name)
        return ExternalIdentity(
            external_id=str(user.id),
            email=user.email.lower(),
            access_token=access_token,
        )

    async def sign_up(self, email: str, password: str) -> ExternalIdentity:
        try:
            response = await self._call(
                "sign_up",
                lambda auth: auth.sign_up({"email": email, "password": password}),
            )
        except AuthApiError as e:
            if is_duplicate_signup(e):
                raise ConflictError("An account with this email already exists")
            if e.status in (400, 422):
                raise ValidationError(f"Sign-up rejected by identity provider: {e.message}")
            logger.warning(f"[Supabase] Unexpected sign-up error {e.status}: {e.message}")
            raise IdentityProviderError("Unexpected identity provider response", provider=self.name)

        # No session when the project requires email confirmation
        session = response.session
        return self._identity_from(response.user, session.access_token if session else None)

    async def sign_in(self, email: str, password: str) -> ExternalIdentity:
        try:
            response = await self._call(
                "sign_in",
                lambda auth: auth.sign_in_with_password({"email": email, "password": password}),
            )
        except AuthApiError as e:
            if e.status in (400, 401):
                raise AuthenticationError("Invalid email or password")
            logger.warning(f"[Supabase] Unexpected sign-in error {e.status}: {e.message}")
            raise IdentityProviderError("Unexpected identity provider response", provider=self.name)

        if response.session is None:
            raise IdentityProviderError("Identity provider returned no session", provider=self.name)
        return self._identity_from(response.user, response.session.access_token)

    async def sign_out(self, provider_token: Optional[str]) -> None:
        if not provider_token:
            return

        try:
            await self._call(
                "sign_out",
                lambda auth: auth.admin.sign_out(provider_token, "local"),
            )
        except AuthApiError as e:
            if e.status in ENDED_SESSION_STATUSES:
                logger.info(f"[Supabase] Provider session already ended ({e.status})")
                return
            raise IdentityProviderError("Sign-out failed at identity provider", provider=self.name)

    async def verify_session(self, provider_token: str) -> ExternalIdentity:
        try:
            response = await self._call("verify_session", lambda auth: auth.get_user(provider_token))
        except AuthApiError as e:
            if e.status in (401, 403):
                raise AuthenticationError("Provider session is not valid")
            raise IdentityProviderError("Unexpected identity provider response", provider=self.name)

        if response is None:
            raise AuthenticationError("Provider session is not valid")
        return self._identity_from(response.user, provider_token)
