# gallery/services/access_controller.py
import logging
from dataclasses import dataclass
from typing import List, Optional

from gallery.core.outcomes import ControllerResult, GuardResult, GuardStatus, Outcome
from gallery.core.security import TokenCodec, secrets_match
from gallery.models.account import Account
from gallery.models.media import MediaItem
from gallery.services.account_guard import AccountGuard
from gallery.services.media_guard import MediaGuard

logger = logging.getLogger(__name__)

AUTH_FAILED_MESSAGE = "Could not validate credentials"


@dataclass(frozen=True)
class IssuedToken:
    access_token: str
    expires_in: int
    account: Account
    token_type: str = "bearer"


_GUARD_OUTCOMES = {
    GuardStatus.OK: Outcome.OK,
    GuardStatus.INVALID_INPUT: Outcome.BAD_REQUEST,
    GuardStatus.QUOTA_EXCEEDED: Outcome.BAD_REQUEST,
    GuardStatus.CONFLICT: Outcome.CONFLICT,
    GuardStatus.NOT_FOUND: Outcome.NOT_FOUND,
}


def _from_guard(result: GuardResult) -> ControllerResult:
    outcome = _GUARD_OUTCOMES[result.status]
    if outcome is Outcome.OK:
        return ControllerResult.success(result.value)
    # Guard messages are caller-safe and echoed verbatim
    return ControllerResult.failure(outcome, result.message)


def _internal(message: str, operation: str, **context) -> ControllerResult:
    details = ", ".join(f"{key}={value}" for key, value in context.items())
    logger.exception("Unexpected failure in %s (%s)", operation, details)
    return ControllerResult.failure(Outcome.INTERNAL, message)


def _auth_failed() -> ControllerResult:
    return ControllerResult.failure(Outcome.AUTH_FAILED, AUTH_FAILED_MESSAGE)


class AccessController:
    """Authenticates a request, runs the guarded operation and reports a single outcome.

    Holds no state between calls; every identity-bearing operation re-verifies the
    bearer token and re-loads the caller's account.
    """

    def __init__(self, codec: TokenCodec, accounts: AccountGuard, media: MediaGuard):
        self.codec = codec
        self.accounts = accounts
        self.media = media

    async def authenticate(self, token: Optional[str]) -> Optional[Account]:
        """Resolve the caller behind a token; None when the token or its owner is gone"""
        owner_id, valid = self.codec.verify(token)
        if not valid:
            return None
        account = await self.accounts.get(owner_id)
        if account is None:
            logger.warning("Token for deleted account %s presented", owner_id)
        return account

    # accounts

    async def login(self, email: str, secret: str) -> ControllerResult[IssuedToken]:
        try:
            account = await self.accounts.get_by_email(email)
        except Exception:
            return _internal("Error during login", "login", email=email)

        if account is None or not secrets_match(secret or "", account.secret):
            logger.warning("Failed login for email: %s", email)
            return ControllerResult.failure(Outcome.AUTH_FAILED, "Invalid email or password")

        token = self.codec.issue(account.id, account.email, account.category)
        logger.info("Issued token for user ID: %s", account.id)
        return ControllerResult.success(
            IssuedToken(
                access_token=token,
                expires_in=int(self.codec.lifetime.total_seconds()),
                account=account,
            )
        )

    async def current_account(self, token: Optional[str]) -> ControllerResult[Account]:
        try:
            caller = await self.authenticate(token)
        except Exception:
            return _internal("Error retrieving user", "current_account")
        if caller is None:
            return _auth_failed()
        return ControllerResult.success(caller)

    async def list_accounts(self) -> ControllerResult[List[Account]]:
        try:
            return ControllerResult.success(await self.accounts.list_all())
        except Exception:
            return _internal("Error retrieving users", "list_accounts")

    async def get_account(self, account_id: int) -> ControllerResult[Account]:
        try:
            account = await self.accounts.get(account_id)
        except Exception:
            return _internal("Error retrieving user", "get_account", account_id=account_id)
        if account is None:
            return ControllerResult.failure(Outcome.NOT_FOUND, f"User with ID {account_id} not found")
        return ControllerResult.success(account)

    async def create_account(self, name, email, secret, category) -> ControllerResult[Account]:
        try:
            result = await self.accounts.create(name, email, secret, category)
        except Exception:
            return _internal("Error creating user", "create_account", email=email)
        return _from_guard(result)

    async def update_account(
        self, token: Optional[str], account_id: int, name, email, secret, category
    ) -> ControllerResult[Account]:
        try:
            caller = await self.authenticate(token)
            if caller is None:
                return _auth_failed()
            if caller.id != account_id:
                return ControllerResult.failure(
                    Outcome.FORBIDDEN, "You don't have permission to modify this user"
                )
            result = await self.accounts.update(account_id, name, email, secret, category)
        except Exception:
            return _internal("Error updating user", "update_account", account_id=account_id)
        return _from_guard(result)

    async def delete_account(self, token: Optional[str], account_id: int) -> ControllerResult[None]:
        try:
            caller = await self.authenticate(token)
            if caller is None:
                return _auth_failed()
            if caller.id != account_id:
                return ControllerResult.failure(
                    Outcome.FORBIDDEN, "You don't have permission to delete this user"
                )
            deleted = await self.accounts.delete(account_id)
        except Exception:
            return _internal("Error deleting user", "delete_account", account_id=account_id)
        if not deleted:
            return ControllerResult.failure(Outcome.NOT_FOUND, f"User with ID {account_id} not found")
        return ControllerResult.success()

    # media

    async def list_media(self, owner_id: Optional[int] = None) -> ControllerResult[List[MediaItem]]:
        try:
            if owner_id is not None:
                items = await self.media.list_by_owner(owner_id)
            else:
                items = await self.media.list_all()
        except Exception:
            return _internal("Error retrieving images", "list_media", owner_id=owner_id)
        return ControllerResult.success(items)

    async def get_media(self, item_id: int) -> ControllerResult[MediaItem]:
        try:
            item = await self.media.get(item_id)
        except Exception:
            return _internal("Error retrieving image", "get_media", item_id=item_id)
        if item is None:
            return ControllerResult.failure(Outcome.NOT_FOUND, f"Image with ID {item_id} not found")
        return ControllerResult.success(item)

    async def upload_media(
        self, token: Optional[str], title: Optional[str], filename: Optional[str], payload: Optional[bytes]
    ) -> ControllerResult[MediaItem]:
        caller_id = None
        try:
            caller = await self.authenticate(token)
            if caller is None:
                return _auth_failed()
            caller_id = caller.id
            result = await self.media.upload(title, payload, filename, caller_id)
        except Exception:
            return _internal("Error uploading image", "upload_media", owner_id=caller_id)
        return _from_guard(result)

    async def delete_media(self, token: Optional[str], item_id: int) -> ControllerResult[None]:
        caller_id = None
        try:
            caller = await self.authenticate(token)
            if caller is None:
                return _auth_failed()
            caller_id = caller.id
            if await self.media.delete_owned(item_id, caller_id):
                return ControllerResult.success()

            # False means either missing or owned by someone else; look again to tell which
            item = await self.media.get(item_id)
        except Exception:
            return _internal("Error deleting image", "delete_media", item_id=item_id, caller_id=caller_id)

        if item is None or item.owner_id == caller_id:
            return ControllerResult.failure(Outcome.NOT_FOUND, f"Image with ID {item_id} not found")
        return ControllerResult.failure(
            Outcome.FORBIDDEN,
            "You don't have permission to delete this image. "
            f"Image belongs to user {item.owner_id}",
        )

    async def reset_media(self, token: Optional[str]) -> ControllerResult[int]:
        try:
            caller = await self.authenticate(token)
            if caller is None:
                return _auth_failed()
            deleted_count = await self.media.reset_all()
        except Exception:
            return _internal("Error resetting database", "reset_media")
        logger.warning("Media reset requested by user %s", caller.id)
        return ControllerResult.success(deleted_count)
