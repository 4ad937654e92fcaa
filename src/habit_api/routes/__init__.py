"""Основной API роутер, объединяющий все остальные роутеры."""

from fastapi import APIRouter

from . import analytics, auth, completions, habits, streaks, users

# Основной роутер API, объединяющий все остальные
api_router = APIRouter(prefix="/v1")  # Префикс /v1 для всех API эндпоинтов

api_router.include_router(auth.router)
api_router.include_router(users.router)
api_router.include_router(habits.router)
api_router.include_router(completions.router)
api_router.include_router(streaks.router)
api_router.include_router(analytics.router)

__all__ = ["api_router"]
