"""Grant or revoke the admin role for an existing account.

Run from the backend directory:
    python promote_admin.py user@example.com
    python promote_admin.py user@example.com --revoke
"""
import argparse
import asyncio
import sys

from sqlalchemy import select, update

from app.core.database import get_session_local, close_db
from app.models.account import Account, AccountRole


async def set_role(email: str, role: AccountRole) -> int:
    try:
        return await _set_role(email, role)
    finally:
        await close_db()


async def _set_role(email: str, role: AccountRole) -> int:
    session_local = get_session_local()
    async with session_local() as db:
        result = await db.execute(
            select(Account).where(Account.email == email.lower())
        )
        account = result.scalar_one_or_none()

        if not account:
            print(f"No account for {email}. The user must sign in once first.")
            return 1

        if account.role == role:
            print(f"{account.email} already has role '{role.value}'")
            return 0

        previous = account.role
        await db.execute(
            update(Account).where(Account.id == account.id).values(role=role)
        )
        await db.commit()
        print(f"{account.email}: {previous.value} -> {role.value}")
        print("Existing session tokens keep the old role until the user signs in again.")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Set an account's role")
    parser.add_argument("email", help="Account email")
    parser.add_argument("--revoke", action="store_true", help="Demote back to user")
    args = parser.parse_args()

    role = AccountRole.USER if args.revoke else AccountRole.ADMIN
    return asyncio.run(set_role(args.email, role))


if __name__ == "__main__":
    sys.exit(main())
