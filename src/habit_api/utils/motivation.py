"""Уровни мотивации пользователя и мотивирующие сообщения для них."""

import random
from enum import Enum as PyEnum


class MotivationTier(str, PyEnum):
    """Грубая классификация стабильности пользователя."""

    CHAMPION = "champion"
    CONSISTENT = "consistent"
    BUILDING = "building"
    STARTER = "starter"


MOTIVATIONAL_MESSAGES: dict[MotivationTier, tuple[str, ...]] = {
    MotivationTier.CHAMPION: (
        "Вы настоящий чемпион! Три недели без пропусков.",
        "Привычки стали частью вас. Так держать!",
        "Ваша дисциплина вдохновляет. Продолжайте в том же духе!",
    ),
    MotivationTier.CONSISTENT: (
        "Неделя за неделей, стабильность налицо. Отличная работа!",
        "Вы уверенно держите ритм. Еще немного, и это станет нормой.",
        "Постоянство приносит плоды. Не сбавляйте темп!",
    ),
    MotivationTier.BUILDING: (
        "Хорошее начало! Каждый день приближает вас к цели.",
        "Вы набираете обороты. Не останавливайтесь!",
        "Маленькие шаги складываются в большой результат.",
    ),
    MotivationTier.STARTER: (
        "Каждое большое путешествие начинается с первого шага.",
        "Сегодня отличный день, чтобы начать серию!",
        "Выполните одну привычку прямо сейчас, и день уже удался.",
    ),
}


def get_motivational_message(tier: MotivationTier, rng: random.Random | None = None) -> str:
    """
    Выбирает случайное мотивирующее сообщение для уровня.

    Args:
        tier (MotivationTier): Уровень мотивации.
        rng (random.Random | None): Генератор случайных чисел (для воспроизводимости в тестах).

    Returns:
        str: Непустое сообщение.
    """
    return (rng or random).choice(MOTIVATIONAL_MESSAGES[tier])
