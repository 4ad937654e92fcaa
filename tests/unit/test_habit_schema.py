import pytest
from pydantic import ValidationError

from src.habit_api.models import HabitFrequency
from src.habit_api.schemas import HabitSchemaCreate, HabitSchemaUpdate


def test_create_strips_title_and_category():
    habit = HabitSchemaCreate(title="  Бег  ", category=" Health ", description="")

    assert habit.title == "Бег"
    assert habit.category == "Health"
    assert habit.description is None
    assert habit.frequency == HabitFrequency.DAILY


@pytest.mark.parametrize(
    "fields",
    [
        {"title": "   ", "category": "Health"},
        {"title": "Run", "category": "\t\n "},
        {"title": "x" * 256, "category": "Health"},
    ],
)
def test_create_rejects_blank_or_long_strings(fields: dict):
    with pytest.raises(ValidationError):
        HabitSchemaCreate(**fields)


@pytest.mark.parametrize("fields", [{"title": "  "}, {"category": " "}, {"title": None}])
def test_update_rejects_blank_strings(fields: dict):
    with pytest.raises(ValidationError):
        HabitSchemaUpdate(**fields)


def test_update_keeps_only_sent_fields():
    update = HabitSchemaUpdate(title=" Read more ")

    assert update.title == "Read more"
    assert update.model_dump(exclude_unset=True) == {"title": "Read more"}
