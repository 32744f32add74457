"""Tests for category select options."""

from __future__ import annotations

from torznarr.core.indexers.capabilities import NewznabCategory
from torznarr.core.indexers.categories import DEFAULT_CATEGORIES, get_field_select_options


def test_none_uses_default_categories() -> None:
    """Test that the default TV taxonomy is offered when categories are unknown."""
    options = get_field_select_options(None)

    assert options[0] == {"value": 5000, "label": "TV", "hint": "(5000)", "parent_value": None}
    assert [option["value"] for option in options[1:]] == [
        5010, 5020, 5030, 5040, 5045, 5050, 5060, 5070, 5080,
    ]
    assert all(option["parent_value"] == 5000 for option in options[1:])
    assert options == get_field_select_options(DEFAULT_CATEGORIES)


def test_empty_list_yields_no_options() -> None:
    """Test that an explicit empty taxonomy is not replaced by the defaults."""
    assert get_field_select_options([]) == []


def test_ignored_categories_are_dropped() -> None:
    """Test that console, audio, PC, XXX and book categories are not offered."""
    ids = (0, 1000, 3000, 4000, 5000, 6000, 7000)
    categories = [NewznabCategory(id=cat_id, name=str(cat_id)) for cat_id in ids]

    options = get_field_select_options(categories)

    assert [option["value"] for option in options] == [5000]


def test_unimportant_categories_sorted_last() -> None:
    """Test that Movies sort after everything else, the rest by id."""
    categories = [
        NewznabCategory(id=2000, name="Movies"),
        NewznabCategory(id=8000, name="Other"),
        NewznabCategory(
            id=5000,
            name="TV",
            subcategories=[
                NewznabCategory(id=5070, name="Anime"),
                NewznabCategory(id=5040, name="HD"),
            ],
        ),
        NewznabCategory(id=100001, name="Custom"),
    ]

    options = get_field_select_options(categories)

    assert [(option["value"], option["parent_value"]) for option in options] == [
        (5000, None),
        (5040, 5000),
        (5070, 5000),
        (8000, None),
        (100001, None),
        (2000, None),
    ]
    assert options[1]["hint"] == "(5040)"
    assert options[1]["label"] == "HD"
