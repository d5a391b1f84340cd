"""
Account Service - local accounts bound to external identities.

``get_or_create_account`` is the only path that creates an Account. Two
first-time logins for the same identity can race; the unique constraints
on ``email`` and ``external_id`` decide the winner and the loser re-reads it.
"""

from typing import Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import AccountNotFoundError
from app.core.logging_config import logger
from app.models.account import Account, AccountRole
from app.modules.identity.base import ExternalIdentity


class AccountService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, account_id: str) -> Account:
        result = await self.db.execute(select(Account).where(Account.id == account_id))
        account = result.scalar_one_or_none()
        if not account:
            raise AccountNotFoundError(account_id)
        return account

    async def get_by_email(self, email: str) -> Optional[Account]:
        result = await self.db.execute(select(Account).where(Account.email == email.lower()))
        return result.scalar_one_or_none()

    async def get_or_create_account(self, identity: ExternalIdentity) -> Tuple[Account, bool]:
        """Return the account for ``identity`` and whether it was just created"""
        account = await self.get_by_email(identity.email)
        if account:
            return account, False

        account = Account(
            external_id=identity.external_id,
            email=identity.email.lower(),
            role=AccountRole.USER,
        )
        self.db.add(account)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            logger.info(f"[Accounts] Concurrent creation for {identity.email}, reading winner")
            winner = await self.get_by_email(identity.email)
            if winner is None:
                raise
            return winner, False

        logger.info(
            f"[Accounts] Created account {account.id} for {account.email}",
            extra={"event_type": "account_created", "account_id": account.id},
        )
        return account, True
