# gallery/repositories/media_repository.py
from typing import List, Optional

from sqlalchemy import select, delete, func
from sqlalchemy.ext.asyncio import AsyncSession

from gallery.models.media import MediaItem


class MediaRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_by_id(self, item_id: int) -> Optional[MediaItem]:
        stmt = select(MediaItem).where(MediaItem.id == item_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_all(self) -> List[MediaItem]:
        """Every item, newest first"""
        stmt = select(MediaItem).order_by(MediaItem.created_at.desc(), MediaItem.id.desc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_by_owner(self, owner_id: int) -> List[MediaItem]:
        """Items of one owner, newest first"""
        stmt = (
            select(MediaItem)
            .where(MediaItem.owner_id == owner_id)
            .order_by(MediaItem.created_at.desc(), MediaItem.id.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_by_owner(self, owner_id: int) -> int:
        stmt = select(func.count()).select_from(MediaItem).where(MediaItem.owner_id == owner_id)
        result = await self.session.execute(stmt)
        return result.scalar() or 0

    async def insert(self, item: MediaItem) -> MediaItem:
        self.session.add(item)
        await self.session.commit()
        await self.session.refresh(item)
        return item

    async def delete(self, item_id: int) -> bool:
        item = await self.find_by_id(item_id)
        if item is None:
            return False
        await self.session.delete(item)
        await self.session.commit()
        return True

    async def delete_all(self) -> int:
        """Remove every item and report how many were removed"""
        result = await self.session.execute(delete(MediaItem))
        await self.session.commit()
        return result.rowcount or 0
