"""Инициализация модуля сервисов."""

from .analytics_service import AnalyticsService
from .base_service import BaseService
from .completion_service import CompletionService
from .habit_service import HabitService
from .streak_service import StreakService
from .user_service import UserService

__all__ = [
    "BaseService",
    "UserService",
    "HabitService",
    "CompletionService",
    "StreakService",
    "AnalyticsService",
]
