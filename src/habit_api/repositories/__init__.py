"""Инициализация модуля репозиториев."""

from .base_repository import BaseRepository
from .completion_repository import HabitCompletionRepository
from .habit_repository import HabitRepository
from .user_repository import UserRepository
from .user_streak_repository import UserStreakRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "HabitRepository",
    "HabitCompletionRepository",
    "UserStreakRepository",
]
