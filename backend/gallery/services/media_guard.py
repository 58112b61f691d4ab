# gallery/services/media_guard.py
import base64
import logging
import os
from datetime import datetime, timezone
from typing import List, Optional

from gallery.core.config import MediaConfig
from gallery.core.outcomes import GuardResult
from gallery.models.media import MediaItem
from gallery.services.protocols import MediaStore

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 200


class MediaGuard:
    """Upload/delete rules for media items: payload shape, per-owner quota and ownership"""

    def __init__(self, store: MediaStore, config: Optional[MediaConfig] = None):
        self.store = store
        self.config = config or MediaConfig()

    @property
    def max_items(self) -> int:
        return self.config.MAX_ITEMS_PER_OWNER

    async def get(self, item_id: int) -> Optional[MediaItem]:
        return await self.store.find_by_id(item_id)

    async def list_all(self) -> List[MediaItem]:
        return await self.store.list_all()

    async def list_by_owner(self, owner_id: int) -> List[MediaItem]:
        return await self.store.list_by_owner(owner_id)

    def _validate_input(self, title: Optional[str], payload: Optional[bytes]) -> None:
        if title is None or not title.strip():
            raise ValueError("Title is required")
        if not payload:
            raise ValueError("Image file is required")
        if len(title.strip()) > TITLE_MAX_LENGTH:
            raise ValueError(f"Title cannot exceed {TITLE_MAX_LENGTH} characters")

    def _validate_file_type(self, filename: Optional[str]) -> None:
        allowed = [ext.lower() for ext in self.config.ALLOWED_EXTENSIONS]
        extension = os.path.splitext(filename or "")[1].lower()
        if extension not in allowed:
            raise ValueError(f"File type not allowed. Accepted types: {', '.join(allowed)}")

    def _validate_file_size(self, payload: bytes) -> None:
        limit = self.config.MAX_FILE_SIZE_BYTES
        if len(payload) > limit:
            raise ValueError(f"File too large. Maximum allowed size: {limit // (1024 * 1024)}MB")

    async def upload(
        self,
        title: Optional[str],
        payload: Optional[bytes],
        filename: Optional[str],
        owner_id: int,
    ) -> GuardResult[MediaItem]:
        # Every shape check runs before the store is touched
        try:
            self._validate_input(title, payload)
            self._validate_file_type(filename)
            self._validate_file_size(payload)
        except ValueError as e:
            return GuardResult.invalid(str(e))

        current = await self.store.count_by_owner(owner_id)
        if current >= self.max_items:
            logger.warning("Owner %s hit the image quota (%s)", owner_id, current)
            return GuardResult.quota_exceeded(
                f"Maximum image limit reached. Cannot add more than {self.max_items} images."
            )

        item = MediaItem(
            title=title.strip(),
            filename=filename,
            payload=base64.b64encode(payload).decode("ascii"),
            created_at=datetime.now(timezone.utc),
            owner_id=owner_id,
        )
        item = await self.store.insert(item)
        logger.info("New image uploaded with ID %s, title %s for user %s", item.id, item.title, owner_id)
        return GuardResult.success(item)

    async def delete_owned(self, item_id: int, caller_id: int) -> bool:
        """Delete an item only when ``caller_id`` owns it; False covers both missing and not-owned"""
        item = await self.store.find_by_id(item_id)
        if item is None:
            logger.warning("Attempt to delete non-existent image with ID %s", item_id)
            return False

        if item.owner_id != caller_id:
            logger.warning("User %s attempted to delete image %s owned by %s", caller_id, item_id, item.owner_id)
            return False

        deleted = await self.store.delete(item_id)
        if deleted:
            logger.info("Image with ID %s was deleted by user %s", item_id, caller_id)
        return deleted

    async def reset_all(self) -> int:
        deleted_count = await self.store.delete_all()
        logger.info("Media reset: %s images were deleted", deleted_count)
        return deleted_count
