"""
Тесты для partial-update структур (TaskPatch / CategoryPatch) и их
построения из тела запроса.
"""

import pytest
from pydantic import ValidationError

from todo_app.api.schemas import CategoryUpdate, TaskUpdate
from todo_app.services.patch import UNSET, CategoryPatch, TaskPatch, is_set


def test_unset_is_singleton_and_falsy():
    assert UNSET is type(UNSET)()
    assert not UNSET
    assert repr(UNSET) == "UNSET"
    assert is_set(None)
    assert not is_set(UNSET)


def test_empty_patch():
    patch = TaskPatch()

    assert patch.is_empty()
    assert patch.provided() == {}
    assert patch.column_changes() == {}


def test_none_is_a_value_not_unset():
    """description=None - "очистить", а не "не трогать"."""
    patch = TaskPatch(description=None)

    assert not patch.is_empty()
    assert patch.column_changes() == {"description": None}


def test_category_ids_are_not_column_changes():
    patch = TaskPatch(completed=True, category_ids=[])

    assert patch.provided() == {"completed": True, "category_ids": []}
    assert patch.column_changes() == {"completed": True}


def test_category_patch():
    patch = CategoryPatch(color="#00ff00")

    assert patch.column_changes() == {"color": "#00ff00"}


def test_patch_is_immutable():
    patch = TaskPatch(title="x")

    with pytest.raises(AttributeError):
        patch.title = "y"


# ============================================================================
# REQUEST BODY -> PATCH
# ============================================================================


def test_task_update_only_sent_fields_become_patch():
    patch = TaskUpdate.model_validate({"completed": True}).to_patch()

    assert patch.completed is True
    assert patch.title is UNSET
    assert patch.description is UNSET
    assert patch.category_ids is UNSET


def test_task_update_empty_category_ids_is_kept():
    """[] и "не передано" - разные вещи."""
    patch = TaskUpdate.model_validate({"categoryIds": []}).to_patch()

    assert patch.category_ids == []


def test_task_update_accepts_snake_case_too():
    patch = TaskUpdate.model_validate({"category_ids": [1, 2]}).to_patch()

    assert patch.category_ids == [1, 2]


def test_task_update_null_description_clears():
    patch = TaskUpdate.model_validate({"description": None}).to_patch()

    assert patch.column_changes() == {"description": None}


@pytest.mark.parametrize("field", ["title", "completed", "categoryIds"])
def test_task_update_rejects_null_for_required_columns(field):
    with pytest.raises(ValidationError):
        TaskUpdate.model_validate({field: None})


def test_task_update_rejects_empty_title():
    with pytest.raises(ValidationError):
        TaskUpdate.model_validate({"title": ""})


def test_category_update_to_patch():
    patch = CategoryUpdate.model_validate({"name": "Home"}).to_patch()

    assert patch.name == "Home"
    assert patch.color is UNSET


def test_category_update_rejects_bad_color():
    with pytest.raises(ValidationError):
        CategoryUpdate.model_validate({"color": "red"})
