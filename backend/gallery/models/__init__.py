# gallery/models/__init__.py
from .base import Base
from .account import Account, AccountCategory
from .media import MediaItem

__all__ = [
    "Base",
    "Account", "AccountCategory",
    "MediaItem",
]
