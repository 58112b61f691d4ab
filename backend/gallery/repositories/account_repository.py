# gallery/repositories/account_repository.py
from typing import List, Optional

from sqlalchemy import select, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from gallery.core.exceptions import DuplicateEmailError
from gallery.models.account import Account
from gallery.models.media import MediaItem

UNIQUE_VIOLATION = "23505"
EMAIL_INDEX = "ix_accounts_email"


class AccountRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_by_id(self, account_id: int) -> Optional[Account]:
        """Get an account by ID"""
        stmt = select(Account).where(Account.id == account_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_by_email(self, email: str) -> Optional[Account]:
        """Get an account by exact, case-sensitive email"""
        stmt = select(Account).where(Account.email == email)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_all(self) -> List[Account]:
        stmt = select(Account).order_by(Account.id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def insert(self, account: Account) -> Account:
        """Persist a new account; the unique index on email is the last line of defence"""
        self.session.add(account)
        await self._commit_or_raise(account.email)
        await self.session.refresh(account)
        return account

    async def update(self, account: Account) -> Account:
        """Flush changes made to a loaded account"""
        self.session.add(account)
        await self._commit_or_raise(account.email)
        await self.session.refresh(account)
        return account

    async def delete(self, account_id: int) -> bool:
        """Delete an account together with every media item it owns"""
        account = await self.find_by_id(account_id)
        if account is None:
            return False

        # Explicit first step so backends without FK enforcement never keep orphans
        await self.session.execute(delete(MediaItem).where(MediaItem.owner_id == account_id))
        await self.session.delete(account)
        await self.session.commit()
        return True

    async def _commit_or_raise(self, email: str) -> None:
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            if _is_duplicate_email(e):
                raise DuplicateEmailError(email) from e
            raise


def _is_duplicate_email(error: IntegrityError) -> bool:
    # email is the only unique column besides the primary key
    orig = error.orig
    if getattr(orig, "sqlstate", None) == UNIQUE_VIOLATION:
        return True
    return getattr(orig, "constraint_name", None) == EMAIL_INDEX or EMAIL_INDEX in str(orig)
