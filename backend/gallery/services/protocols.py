# gallery/services/protocols.py
"""
Storage contracts the guards depend on.

AccountRepository and MediaRepository satisfy these structurally; the test
suite swaps in in-memory implementations. Every method is a coroutine, absence
is reported as ``None``/``False``/``0`` and any raised exception is an I/O
failure that the guards let propagate unchanged.
"""
from typing import List, Optional, Protocol, runtime_checkable

from gallery.models.account import Account
from gallery.models.media import MediaItem


@runtime_checkable
class AccountDirectory(Protocol):
    async def find_by_id(self, account_id: int) -> Optional[Account]: ...

    async def find_by_email(self, email: str) -> Optional[Account]: ...

    async def list_all(self) -> List[Account]: ...

    async def insert(self, account: Account) -> Account: ...

    async def update(self, account: Account) -> Account: ...

    async def delete(self, account_id: int) -> bool: ...


@runtime_checkable
class MediaStore(Protocol):
    async def find_by_id(self, item_id: int) -> Optional[MediaItem]: ...

    async def list_all(self) -> List[MediaItem]: ...

    async def list_by_owner(self, owner_id: int) -> List[MediaItem]: ...

    async def insert(self, item: MediaItem) -> MediaItem: ...

    async def delete(self, item_id: int) -> bool: ...

    async def count_by_owner(self, owner_id: int) -> int: ...

    async def delete_all(self) -> int: ...
