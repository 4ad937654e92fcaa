"""Модель SQLAlchemy для Habit (Привычка)."""

from datetime import datetime
from enum import Enum as PyEnum  # Чтобы не конфликтовать с sqlalchemy.Enum
from typing import TYPE_CHECKING

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy import Enum as SqlEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base

if TYPE_CHECKING:  # pragma: no cover
    from .habit_completion import HabitCompletion
    from .user import User


class HabitFrequency(str, PyEnum):
    """Правило повторения привычки."""

    DAILY = "daily"  # Каждый день
    WEEKLY = "weekly"  # В выбранные дни недели (days_of_week)
    MONTHLY = "monthly"  # В выбранные числа месяца (days_of_month)


class Habit(Base):
    """
    Представляет привычку пользователя.

    Поля streak, longest_streak, last_completed_at и completion_history поддерживаются
    движком стриков и не принимаются от клиента напрямую.
    Флаги "нужно сегодня" / "выполнено сегодня" не хранятся: они вычисляются при каждом чтении.

    Attributes:
        id: Первичный ключ, идентификатор привычки (унаследован от Base).
        user_id: Внешний ключ, связывающий привычку с пользователем.
        title: Название привычки.
        description: Описание привычки (опционально).
        category: Категория привычки (копируется в каждую запись журнала выполнений).
        frequency: Правило повторения (daily, weekly, monthly).
        days_of_week: Названия дней недели для weekly-привычек (например, ["Monday", "Friday"]).
        days_of_month: Числа месяца для monthly-привычек (например, [1, 15, 30]).
        streak: Текущая серия последовательных календарных дней с выполнением.
        longest_streak: Максимальная достигнутая серия (всегда >= streak).
        last_completed_at: Момент последнего выполнения (UTC).
        completion_history: Упорядоченный список моментов выполнения (ISO-8601, UTC), только дополняется.
        user: Связь с пользователем, которому принадлежит привычка.
        completions: Записи журнала выполнений этой привычки.
    """

    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    category: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    frequency: Mapped[HabitFrequency] = mapped_column(
        SqlEnum(
            HabitFrequency,
            name="habit_frequency_enum",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
        ),
        default=HabitFrequency.DAILY,
        nullable=False,
    )
    days_of_week: Mapped[list[str] | None] = mapped_column(JSON)
    days_of_month: Mapped[list[int] | None] = mapped_column(JSON)

    # Производное состояние, которое ведет движок стриков
    streak: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    longest_streak: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    last_completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    completion_history: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)

    # Связи
    user: Mapped["User"] = relationship(back_populates="habits")
    completions: Mapped[list["HabitCompletion"]] = relationship(
        back_populates="habit",
        cascade="all, delete-orphan",
        passive_deletes=True,  # Записи журнала удаляет сама БД (ON DELETE CASCADE)
    )
