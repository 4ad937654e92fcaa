from datetime import date, datetime, timedelta, timezone
from types import SimpleNamespace
from zoneinfo import ZoneInfo

from src.habit_api.models import HabitFrequency
from src.habit_api.utils.streaks import apply_completion, evaluate_day, next_global_streak, next_habit_streak

UTC = ZoneInfo("UTC")
DAY_1 = datetime(2024, 5, 13, 9, 0, tzinfo=timezone.utc)


def make_habit(habit_id=1, frequency=HabitFrequency.DAILY, days_of_week=None, created_at=None):
    return SimpleNamespace(
        id=habit_id,
        frequency=frequency,
        days_of_week=days_of_week,
        days_of_month=None,
        streak=0,
        longest_streak=0,
        last_completed_at=None,
        completion_history=[],
        created_at=created_at,
    )


def make_record(current=0, longest=0, last=None, total=0):
    return SimpleNamespace(
        current_streak=current,
        longest_streak=longest,
        last_streak_date=last,
        total_habits_completed=total,
    )


def test_next_habit_streak():
    today = date(2024, 5, 15)

    assert next_habit_streak(0, None, today) == 1
    assert next_habit_streak(4, date(2024, 5, 14), today) == 5
    assert next_habit_streak(4, date(2024, 5, 12), today) == 1


def test_habit_streak_grows_holds_and_resets():
    habit = make_habit()

    apply_completion(habit, DAY_1, UTC)
    assert habit.streak == 1

    apply_completion(habit, DAY_1 + timedelta(days=1), UTC)
    assert habit.streak == 2

    # Повтор в тот же день ничего не меняет
    apply_completion(habit, DAY_1 + timedelta(days=1, hours=5), UTC)
    assert habit.streak == 2
    assert len(habit.completion_history) == 2

    # Пропуск дня: серия начинается заново, рекорд сохраняется
    apply_completion(habit, DAY_1 + timedelta(days=3), UTC)
    assert habit.streak == 1
    assert habit.longest_streak == 2
    assert habit.longest_streak >= habit.streak


def test_apply_completion_appends_utc_history_and_last_completed():
    habit = make_habit()
    moment = datetime(2024, 5, 13, 12, 0, tzinfo=ZoneInfo("Europe/Moscow"))

    apply_completion(habit, moment, UTC)

    assert habit.completion_history == ["2024-05-13T09:00:00+00:00"]
    assert habit.last_completed_at == moment.astimezone(timezone.utc)


def test_apply_completion_ignores_moment_before_last_history_entry():
    habit = make_habit()
    apply_completion(habit, DAY_1 + timedelta(days=2), UTC)

    apply_completion(habit, DAY_1, UTC)

    assert habit.streak == 1
    assert len(habit.completion_history) == 1


def test_evaluate_day_without_due_habits_is_not_complete():
    weekly = make_habit(frequency=HabitFrequency.WEEKLY, days_of_week=["Friday"])

    evaluation = evaluate_day([weekly], set(), date(2024, 5, 13))

    assert evaluation.due_count == 0
    assert evaluation.is_complete is False
    assert evaluate_day([], {1, 2}, date(2024, 5, 13)).is_complete is False


def test_evaluate_day_requires_every_due_habit():
    first, second = make_habit(1), make_habit(2)
    day = date(2024, 5, 13)

    partial = evaluate_day([first, second], {1}, day)
    assert partial.is_complete is False
    assert partial.completed_count == 1

    full = evaluate_day([first, second], {1, 2, 99}, day)
    assert full.is_complete is True
    assert full.completed_count == 2


def test_evaluate_day_skips_habits_not_due():
    daily = make_habit(1)
    weekly_friday = make_habit(2, frequency=HabitFrequency.WEEKLY, days_of_week=["Friday"])

    evaluation = evaluate_day([daily, weekly_friday], {1}, date(2024, 5, 13))

    assert evaluation.due_count == 1
    assert evaluation.is_complete is True


def test_evaluate_day_skips_habits_created_later():
    old = make_habit(1)
    new = make_habit(2, created_at=datetime(2024, 5, 15, 8, 0, tzinfo=timezone.utc))

    before_creation = evaluate_day([old, new], {1}, date(2024, 5, 14))
    assert before_creation.due_count == 1
    assert before_creation.is_complete is True

    # В день создания привычка уже запланирована
    creation_day = evaluate_day([old, new], {1}, date(2024, 5, 15))
    assert creation_day.due_count == 2
    assert creation_day.is_complete is False


def test_evaluate_day_reads_creation_day_in_user_timezone():
    # 20:00 UTC 14 мая - это уже 15 мая в Токио
    habit = make_habit(created_at=datetime(2024, 5, 14, 20, 0, tzinfo=timezone.utc))

    assert evaluate_day([habit], set(), date(2024, 5, 14), UTC).due_count == 1
    assert evaluate_day([habit], set(), date(2024, 5, 14), ZoneInfo("Asia/Tokyo")).due_count == 0


def test_next_global_streak_starts_and_continues():
    today = date(2024, 5, 15)

    first = next_global_streak(make_record(), today, 2)
    assert first == {
        "current_streak": 1,
        "longest_streak": 1,
        "last_streak_date": today,
        "total_habits_completed": 2,
    }

    following = next_global_streak(make_record(3, 5, date(2024, 5, 14), 10), today, 1)
    assert following["current_streak"] == 4
    assert following["longest_streak"] == 5
    assert following["total_habits_completed"] == 11


def test_next_global_streak_resets_after_gap_and_keeps_record():
    changes = next_global_streak(make_record(6, 6, date(2024, 5, 10), 12), date(2024, 5, 15), 3)

    assert changes["current_streak"] == 1
    assert changes["longest_streak"] == 6
    assert changes["last_streak_date"] == date(2024, 5, 15)


def test_next_global_streak_is_idempotent_within_a_day():
    today = date(2024, 5, 15)

    assert next_global_streak(make_record(1, 1, today, 2), today, 2) is None
    # Вызов "из прошлого" тоже ничего не меняет
    assert next_global_streak(make_record(1, 1, today, 2), date(2024, 5, 14), 2) is None
