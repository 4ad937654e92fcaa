"""Модель SQLAlchemy для UserStreak (Глобальный стрик пользователя)."""

from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import Date, ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base

if TYPE_CHECKING:  # pragma: no cover
    from .user import User


class UserStreak(Base):
    """
    Глобальный стрик пользователя: подряд идущие дни, в которые выполнены все запланированные привычки.

    Одна запись на пользователя, создается лениво с нулевыми счетчиками.

    Attributes:
        user_id: Внешний ключ на пользователя (уникальный).
        current_streak: Текущая серия полных дней.
        longest_streak: Максимальная серия полных дней.
        last_streak_date: Последний день, на который стрик был продвинут (якорь идемпотентности).
        total_habits_completed: Накопительный счетчик выполненных привычек в засчитанных днях.
    """

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), unique=True, index=True, nullable=False
    )
    current_streak: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    longest_streak: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    last_streak_date: Mapped[date | None] = mapped_column(Date)
    total_habits_completed: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Связи
    user: Mapped["User"] = relationship(back_populates="streak")
