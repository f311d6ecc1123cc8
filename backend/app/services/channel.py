"""Channel lookups."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFound
from app.models.channel import Channel


class ChannelService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_one(self, channel_id: int) -> Channel:
        result = await self.db.execute(select(Channel).where(Channel.id == channel_id))
        channel = result.scalar_one_or_none()
        if not channel:
            raise NotFound("Channel", channel_id)
        return channel
