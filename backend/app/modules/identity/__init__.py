"""Identity provider adapters."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_db
from app.modules.identity.base import ExternalIdentity, IdentityProvider
from app.modules.identity.local_provider import LocalIdentityProvider
from app.modules.identity.supabase_provider import SupabaseIdentityProvider


def get_identity_provider(db: AsyncSession = Depends(get_db)) -> IdentityProvider:
    """Provider selected by the IDENTITY_PROVIDER setting"""
    if settings.uses_local_identity:
        return LocalIdentityProvider(db)
    return SupabaseIdentityProvider()


__all__ = [
    "ExternalIdentity",
    "IdentityProvider",
    "LocalIdentityProvider",
    "SupabaseIdentityProvider",
    "get_identity_provider",
]
