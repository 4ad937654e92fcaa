"""Инициализация модуля схем Pydantic."""

# Экспортируем Enum
from src.habit_api.models import HabitFrequency

from .analytics_schema import AnalyticsSummarySchema, CategoryShareSchema, RhythmDaySchema
from .auth_schema import ServiceLoginRequest, Token, TokenPayload
from .base_schema import BaseSchema
from .completion_schema import HabitCompletionSchemaRead
from .habit_schema import (
    HabitSchemaBase,
    HabitSchemaCreate,
    HabitSchemaRead,
    HabitSchemaUpdate,
    MarkCompleteResult,
    TodayStats,
    normalize_recurrence,
)
from .streak_schema import StreakSchemaRead
from .user_schema import (
    UserSchemaBase,
    UserSchemaCreate,
    UserSchemaRead,
    UserSchemaUpdate,
)

__all__ = [
    "BaseSchema",
    "Token",
    "TokenPayload",
    "ServiceLoginRequest",
    "UserSchemaBase",
    "UserSchemaCreate",
    "UserSchemaRead",
    "UserSchemaUpdate",
    "HabitSchemaBase",
    "HabitSchemaCreate",
    "HabitSchemaRead",
    "HabitSchemaUpdate",
    "MarkCompleteResult",
    "TodayStats",
    "normalize_recurrence",
    "HabitCompletionSchemaRead",
    "StreakSchemaRead",
    "AnalyticsSummarySchema",
    "CategoryShareSchema",
    "RhythmDaySchema",
    "HabitFrequency",  # Экспорт Enum
]
