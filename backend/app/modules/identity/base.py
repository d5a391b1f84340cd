"""Identity provider interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ExternalIdentity:
    """An identity as reported by the provider"""
    external_id: str
    email: str
    access_token: Optional[str] = None


class IdentityProvider(ABC):
    """
    Delegated credential check.

    Implementations own credential storage and verification; the API only
    ever sees the resulting ExternalIdentity. Errors surface as
    ConflictError (duplicate sign-up), AuthenticationError (bad credentials
    or session) and IdentityProviderError (provider unavailable).
    """

    name: str = "base"

    @abstractmethod
    async def sign_up(self, email: str, password: str) -> ExternalIdentity:
        ...

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> ExternalIdentity:
        ...

    @abstractmethod
    async def sign_out(self, provider_token: Optional[str]) -> None:
        ...

    @abstractmethod
    async def verify_session(self, provider_token: str) -> ExternalIdentity:
        ...
