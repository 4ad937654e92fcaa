from .base import Base, metadata_obj
from .habit import Habit, HabitFrequency
from .habit_completion import HabitCompletion
from .user import User
from .user_streak import UserStreak

__all__ = [
    "metadata_obj",
    "Base",
    "User",
    "Habit",
    "HabitFrequency",
    "HabitCompletion",
    "UserStreak",
]
