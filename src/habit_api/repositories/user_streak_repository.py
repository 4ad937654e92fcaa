"""Репозиторий для работы с моделью UserStreak."""

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from src.habit_api.models import UserStreak
from src.habit_api.repositories import BaseRepository


class UserStreakRepository(BaseRepository[UserStreak, BaseModel, BaseModel]):
    """Репозиторий записей глобального стрика (одна запись на пользователя)."""

    async def get_by_user_id(self, db_session: AsyncSession, *, user_id: int) -> UserStreak | None:
        return await self.get_by_filter_first_or_none(db_session, self.model.user_id == user_id)
