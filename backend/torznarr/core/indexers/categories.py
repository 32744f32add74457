"""Turn an indexer's category taxonomy into UI select options."""

from __future__ import annotations

from typing import Any

from torznarr.core.indexers.capabilities import NewznabCategory

# Used when the indexer's own categories could not be fetched
DEFAULT_CATEGORIES: list[NewznabCategory] = [
    NewznabCategory(
        id=5000,
        name="TV",
        subcategories=[
            NewznabCategory(id=5010, name="WEB-DL"),
            NewznabCategory(id=5020, name="Foreign"),
            NewznabCategory(id=5030, name="SD"),
            NewznabCategory(id=5040, name="HD"),
            NewznabCategory(id=5045, name="UHD"),
            NewznabCategory(id=5050, name="Other"),
            NewznabCategory(id=5060, name="Sport"),
            NewznabCategory(id=5070, name="Anime"),
            NewznabCategory(id=5080, name="Documentary"),
        ],
    ),
]

# Console, Audio, PC, XXX, Books: never relevant for episodic releases
IGNORED_CATEGORIES = frozenset({0, 1000, 3000, 4000, 6000, 7000})

# Still selectable, but listed after everything else
UNIMPORTANT_CATEGORIES = frozenset({0, 2000})


def _option(category: NewznabCategory, parent: int | None = None) -> dict[str, Any]:
    return {
        "value": category.id,
        "label": category.name,
        "hint": f"({category.id})",
        "parent_value": parent,
    }


def get_field_select_options(categories: list[NewznabCategory] | None) -> list[dict[str, Any]]:
    """Build select options from a category list.

    Args:
        categories: Categories reported by the indexer, or None to use
            DEFAULT_CATEGORIES

    Returns:
        Flat list of options; each top-level category is followed by its
        subcategories, which carry the parent's id in ``parent_value``.
    """
    if categories is None:
        categories = DEFAULT_CATEGORIES

    ordered = sorted(
        (category for category in categories if category.id not in IGNORED_CATEGORIES),
        key=lambda category: (category.id in UNIMPORTANT_CATEGORIES, category.id),
    )

    options: list[dict[str, Any]] = []
    for category in ordered:
        options.append(_option(category))
        for subcat in sorted(category.subcategories, key=lambda c: c.id):
            options.append(_option(subcat, parent=category.id))
    return options
