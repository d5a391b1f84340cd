"""Built-in identity provider backed by the application database."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import AuthenticationError, ConflictError
from app.core.logging_config import logger
from app.core.security import get_password_hash, verify_password
from app.models.identity import LocalIdentity
from app.modules.identity.base import ExternalIdentity, IdentityProvider


class LocalIdentityProvider(IdentityProvider):
    """
    Stores bcrypt hashed credentials in the ``identities`` table.

    Intended for development and tests. It issues no provider sessions, so
    sign-out is a no-op and there is nothing to verify.
    """

    name = "local"

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _find(self, email: str) -> Optional[LocalIdentity]:
        result = await self.db.execute(
            select(LocalIdentity).where(LocalIdentity.email == email.lower())
        )
        return result.scalar_one_or_none()

    async def sign_up(self, email: str, password: str) -> ExternalIdentity:
        email = email.lower()
        if await self._find(email):
            raise ConflictError("An account with this email already exists")

        identity = LocalIdentity(email=email, hashed_password=get_password_hash(password))
        self.db.add(identity)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError("An account with this email already exists")

        logger.debug(f"[LocalIdentity] Registered {email}")
        return ExternalIdentity(external_id=identity.id, email=email)

    async def sign_in(self, email: str, password: str) -> ExternalIdentity:
        identity = await self._find(email)
        if not identity or not verify_password(password, identity.hashed_password):
            raise AuthenticationError("Invalid email or password")
        return ExternalIdentity(external_id=identity.id, email=identity.email)

    async def sign_out(self, provider_token: Optional[str]) -> None:
        return None

    async def verify_session(self, provider_token: str) -> ExternalIdentity:
        raise AuthenticationError("Local identity provider does not issue sessions")
