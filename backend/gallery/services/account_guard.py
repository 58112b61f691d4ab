# gallery/services/account_guard.py
import logging
import re
from datetime import datetime, timezone
from typing import List, Optional

from gallery.core.exceptions import DuplicateEmailError
from gallery.core.outcomes import GuardResult
from gallery.models.account import Account, AccountCategory
from gallery.services.protocols import AccountDirectory

logger = logging.getLogger(__name__)


class AccountValidator:
    """Field rules for accounts; each check raises ValueError with a caller-safe message"""
    NAME_MIN_LENGTH = 2
    NAME_MAX_LENGTH = 100
    EMAIL_MAX_LENGTH = 255
    SECRET_MIN_LENGTH = 6
    SECRET_MAX_LENGTH = 255
    EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

    @classmethod
    def validate_name(cls, name: Optional[str]) -> str:
        if name is None or not name.strip():
            raise ValueError("Name is required")
        name = name.strip()
        if len(name) > cls.NAME_MAX_LENGTH:
            raise ValueError(f"Name cannot exceed {cls.NAME_MAX_LENGTH} characters")
        if len(name) < cls.NAME_MIN_LENGTH:
            raise ValueError(f"Name must be at least {cls.NAME_MIN_LENGTH} characters long")
        return name

    @classmethod
    def validate_email(cls, email: Optional[str]) -> str:
        if email is None or not email.strip():
            raise ValueError("Email is required")
        if len(email) > cls.EMAIL_MAX_LENGTH:
            raise ValueError(f"Email cannot exceed {cls.EMAIL_MAX_LENGTH} characters")
        if not cls.EMAIL_PATTERN.match(email):
            raise ValueError("Invalid email format")
        return email

    @classmethod
    def validate_secret(cls, secret: Optional[str]) -> str:
        if secret is None or not secret.strip():
            raise ValueError("Password is required")
        if len(secret) < cls.SECRET_MIN_LENGTH:
            raise ValueError(f"Password must be at least {cls.SECRET_MIN_LENGTH} characters long")
        if len(secret) > cls.SECRET_MAX_LENGTH:
            raise ValueError(f"Password cannot exceed {cls.SECRET_MAX_LENGTH} characters")
        return secret

    @classmethod
    def validate_category(cls, category) -> AccountCategory:
        try:
            return AccountCategory(category)
        except ValueError:
            allowed = ", ".join(c.value for c in AccountCategory)
            raise ValueError(f"Account category must be one of: {allowed}") from None

    @classmethod
    def validate(cls, name, email, secret, category) -> tuple[str, str, str, AccountCategory]:
        """Fail fast in field order: name, email, secret, category"""
        return (
            cls.validate_name(name),
            cls.validate_email(email),
            cls.validate_secret(secret),
            cls.validate_category(category),
        )


def _duplicate_email_message(email: str) -> str:
    return f"User with email '{email}' already exists"


class AccountGuard:
    def __init__(self, directory: AccountDirectory):
        self.directory = directory

    async def get(self, account_id: int) -> Optional[Account]:
        return await self.directory.find_by_id(account_id)

    async def get_by_email(self, email: str) -> Optional[Account]:
        return await self.directory.find_by_email(email)

    async def list_all(self) -> List[Account]:
        return await self.directory.list_all()

    async def create(self, name, email, secret, category) -> GuardResult[Account]:
        """Validate and insert a new account; CONFLICT if the email is taken"""
        try:
            name, email, secret, category = AccountValidator.validate(name, email, secret, category)
        except ValueError as e:
            return GuardResult.invalid(str(e))

        if await self.directory.find_by_email(email) is not None:
            return GuardResult.conflict(_duplicate_email_message(email))

        now = datetime.now(timezone.utc)
        account = Account(
            name=name,
            email=email,
            secret=secret,
            category=category.value,
            created_at=now,
            updated_at=now,
        )
        try:
            account = await self.directory.insert(account)
        except DuplicateEmailError:
            # Lost a race with a concurrent create; the store's unique index won
            return GuardResult.conflict(_duplicate_email_message(email))

        logger.info("Created account %s (%s)", account.id, account.email)
        return GuardResult.success(account)

    async def update(self, account_id: int, name, email, secret, category) -> GuardResult[Account]:
        """Replace the mutable fields of an account; NOT_FOUND when it does not exist"""
        try:
            name, email, secret, category = AccountValidator.validate(name, email, secret, category)
        except ValueError as e:
            return GuardResult.invalid(str(e))

        existing = await self.directory.find_by_id(account_id)
        if existing is None:
            return GuardResult.not_found(f"User with ID {account_id} not found")

        # An unchanged email cannot collide, so the lookup is skipped
        if email != existing.email:
            if await self.directory.find_by_email(email) is not None:
                return GuardResult.conflict(_duplicate_email_message(email))

        existing.name = name
        existing.email = email
        existing.secret = secret
        existing.category = category.value
        existing.updated_at = datetime.now(timezone.utc)

        try:
            updated = await self.directory.update(existing)
        except DuplicateEmailError:
            return GuardResult.conflict(_duplicate_email_message(email))

        logger.info("Updated account %s", account_id)
        return GuardResult.success(updated)

    async def delete(self, account_id: int) -> bool:
        deleted = await self.directory.delete(account_id)
        if deleted:
            logger.info("Deleted account %s and its media", account_id)
        return deleted
