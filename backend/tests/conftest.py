import os
from datetime import datetime, timedelta, timezone

# Required settings for tests; nested models accept JSON from a single variable
os.environ.setdefault("DB", '{"DB_PASSWORD": "test-password"}')
os.environ.setdefault("SECURITY", '{"TOKEN_SECRET_KEY": "test-secret"}')

import pytest

from gallery.core.config import MediaConfig
from gallery.core.security import TokenCodec
from gallery.models.account import Account
from gallery.models.media import MediaItem
from gallery.services.access_controller import AccessController
from gallery.services.account_guard import AccountGuard
from gallery.services.media_guard import MediaGuard


# --- Test utilities: in-memory stores ---

class CallCounter:
    def __init__(self) -> None:
        self.calls: dict[str, int] = {}
        self.fail_on: set[str] = set()

    def _hit(self, name: str) -> None:
        self.calls[name] = self.calls.get(name, 0) + 1
        if name in self.fail_on:
            raise RuntimeError(f"DB failure in {name}")


class FakeMediaStore(CallCounter):
    def __init__(self) -> None:
        super().__init__()
        self.items: dict[int, MediaItem] = {}
        self._next_id = 1

    async def find_by_id(self, item_id):
        self._hit("find_by_id")
        return self.items.get(item_id)

    async def list_all(self):
        self._hit("list_all")
        return sorted(self.items.values(), key=lambda i: i.id, reverse=True)

    async def list_by_owner(self, owner_id):
        self._hit("list_by_owner")
        return sorted(
            (i for i in self.items.values() if i.owner_id == owner_id),
            key=lambda i: i.id,
            reverse=True,
        )

    async def insert(self, item):
        self._hit("insert")
        item.id = self._next_id
        self._next_id += 1
        self.items[item.id] = item
        return item

    async def delete(self, item_id):
        self._hit("delete")
        return self.items.pop(item_id, None) is not None

    async def count_by_owner(self, owner_id):
        self._hit("count_by_owner")
        return sum(1 for i in self.items.values() if i.owner_id == owner_id)

    async def delete_all(self):
        self._hit("delete_all")
        count = len(self.items)
        self.items.clear()
        return count


class FakeAccountDirectory(CallCounter):
    def __init__(self, media: FakeMediaStore | None = None) -> None:
        super().__init__()
        self.accounts: dict[int, Account] = {}
        self.media = media
        self._next_id = 1

    async def find_by_id(self, account_id):
        self._hit("find_by_id")
        return self.accounts.get(account_id)

    async def find_by_email(self, email):
        self._hit("find_by_email")
        for account in self.accounts.values():
            if account.email == email:
                return account
        return None

    async def list_all(self):
        self._hit("list_all")
        return sorted(self.accounts.values(), key=lambda a: a.id)

    async def insert(self, account):
        self._hit("insert")
        account.id = self._next_id
        self._next_id += 1
        self.accounts[account.id] = account
        return account

    async def update(self, account):
        self._hit("update")
        self.accounts[account.id] = account
        return account

    async def delete(self, account_id):
        self._hit("delete")
        if self.accounts.pop(account_id, None) is None:
            return False
        # Mirrors the ON DELETE CASCADE of the real schema
        if self.media is not None:
            for item_id in [i.id for i in self.media.items.values() if i.owner_id == account_id]:
                del self.media.items[item_id]
        return True


def make_account(directory: FakeAccountDirectory, name="Ann", email="ann@x.com",
                 secret="secret1", category="lead") -> Account:
    """Put an account straight into the fake directory, bypassing the guard"""
    now = datetime.now(timezone.utc)
    account = Account(
        id=directory._next_id, name=name, email=email, secret=secret,
        category=category, created_at=now, updated_at=now,
    )
    directory._next_id += 1
    directory.accounts[account.id] = account
    return account


def make_item(store: FakeMediaStore, owner_id: int, title="img") -> MediaItem:
    item = MediaItem(
        id=store._next_id, title=title, filename=f"{title}.png", payload="AQID",
        created_at=datetime.now(timezone.utc), owner_id=owner_id,
    )
    store._next_id += 1
    store.items[item.id] = item
    return item


PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


@pytest.fixture
def media_store():
    return FakeMediaStore()


@pytest.fixture
def directory(media_store):
    return FakeAccountDirectory(media_store)


@pytest.fixture
def account_guard(directory):
    return AccountGuard(directory)


@pytest.fixture
def media_guard(media_store):
    return MediaGuard(media_store, MediaConfig())


@pytest.fixture
def codec():
    return TokenCodec("test-secret", lifetime=timedelta(hours=24))


@pytest.fixture
def controller(codec, account_guard, media_guard):
    return AccessController(codec, account_guard, media_guard)


@pytest.fixture
def token_for(codec):
    def _issue(account: Account) -> str:
        return codec.issue(account.id, account.email, account.category)
    return _issue
