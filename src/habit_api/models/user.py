"""Модель SQLAlchemy для User (Пользователь)."""

from typing import TYPE_CHECKING

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base

if TYPE_CHECKING:  # pragma: no cover
    from .habit import Habit
    from .user_streak import UserStreak


class User(Base):
    """
    Представляет пользователя трекера привычек.

    Сам пользователь аутентифицируется внешним провайдером; здесь хранится только то,
    что нужно движку стриков (часовой пояс для локального календаря).

    Attributes:
        id: Первичный ключ, внутренний идентификатор пользователя (унаследован от Base).
        external_id: Уникальный идентификатор пользователя у внешнего провайдера аутентификации.
        username: Отображаемое имя пользователя (может быть None).
        timezone: Часовой пояс IANA, в котором считаются "сегодня", дни недели и числа месяца.
        is_active: Флаг, активен ли пользователь в системе.
        habits: Список привычек, созданных пользователем.
        streak: Запись глобального стрика пользователя (создается лениво).
    """

    external_id: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    username: Mapped[str | None] = mapped_column(String(100))
    timezone: Mapped[str] = mapped_column(String(50), default="UTC", server_default="UTC", nullable=False)
    is_active: Mapped[bool] = mapped_column(default=True, nullable=False)

    # Связи
    habits: Mapped[list["Habit"]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    streak: Mapped["UserStreak | None"] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
