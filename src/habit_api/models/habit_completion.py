"""Модель SQLAlchemy для HabitCompletion (Запись журнала выполнений)."""

from datetime import date, datetime
from typing import TYPE_CHECKING

from sqlalchemy import Date, DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base

if TYPE_CHECKING:  # pragma: no cover
    from .habit import Habit


class HabitCompletion(Base):
    """
    Запись журнала выполнений: привычка отмечена выполненной в конкретный календарный день.

    Журнал только дополняется и является источником истины для вопроса "была ли привычка X
    выполнена в день Y".

    Attributes:
        id: Первичный ключ (унаследован от Base).
        user_id: Внешний ключ на пользователя (для выборок без join с привычками).
        habit_id: Внешний ключ на привычку.
        completion_date: Календарный день выполнения в часовом поясе пользователя (ключ дедупликации).
        completed_at: Точный момент выполнения (для аналитики по времени суток).
        is_completed: Флаг выполнения.
        category: Копия категории привычки на момент выполнения (для агрегации без join).
        habit: Связь с привычкой.
    """

    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    habit_id: Mapped[int] = mapped_column(ForeignKey("habits.id", ondelete="CASCADE"), nullable=False, index=True)
    completion_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    completed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    is_completed: Mapped[bool] = mapped_column(default=True, nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False)

    # Связи
    habit: Mapped["Habit"] = relationship(back_populates="completions")

    # Не более одной записи на привычку в день. Последний рубеж защиты от гонки двух "выполнить"
    __table_args__ = (UniqueConstraint("habit_id", "completion_date", name="uq_habit_completion_per_day"),)
