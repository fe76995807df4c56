"""Tests for the item pool and the category catalogue."""

from __future__ import annotations

import random

import pytest

from audioflash.core.catalog import (
    ALL_CATEGORIES,
    ALL_MASK,
    Category,
    Item,
    catalog,
    categories_from_mask,
    mask_from_categories,
    parse_categories,
)
from audioflash.core.pool import ItemPool

# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------


class TestCatalog:
    def test_every_category_has_six_items(self) -> None:
        for category in Category:
            assert len(category.items()) == 6

    def test_items_are_unique(self) -> None:
        items = catalog(Category)
        assert len(set(items)) == len(items) == 6 * len(Category)

    def test_clip_paths(self) -> None:
        apple = Category.FRUITS.items()[0]
        assert apple.label == "Pomme"
        assert apple.category_clip == "/assets/fruits/0-famille.mp3"
        assert apple.item_clip == "/assets/fruits/pomme.mp3"

    def test_items_of_a_category_share_the_category_clip(self) -> None:
        clips = {item.category_clip for item in Category.TRIMMINGS.items()}
        assert clips == {"/assets/taillages/0-famille.mp3"}

    def test_items_are_immutable(self) -> None:
        item = Category.HYGIENE.items()[0]
        with pytest.raises(AttributeError):
            item.label = "other"  # type: ignore[misc]

    def test_catalog_follows_category_order(self) -> None:
        items = catalog({Category.TRIMMINGS, Category.CHIEF_KIT})
        assert [i.category for i in items] == [Category.CHIEF_KIT] * 6 + [Category.TRIMMINGS] * 6


class TestSelectionMask:
    def test_mask_round_trip(self) -> None:
        selected = {Category.FRUITS, Category.RED_FRUITS}
        assert mask_from_categories(selected) == 0b0001_0010
        assert categories_from_mask(0b0001_0010) == selected

    @pytest.mark.parametrize("mask", [0, -4, 0b1000_0000, "3", None, True])
    def test_invalid_mask_selects_all(self, mask) -> None:
        assert categories_from_mask(mask) == set(ALL_CATEGORIES)

    def test_unknown_bits_are_dropped(self) -> None:
        assert categories_from_mask(0b1000_0100) == {Category.HYGIENE}

    def test_all_mask(self) -> None:
        assert ALL_MASK == 0b0111_1111


class TestParseCategories:
    def test_by_enum_name_or_folder(self) -> None:
        assert parse_categories(["red_fruits", "petit-materiel", "FRUITS"]) == {
            Category.RED_FRUITS,
            Category.SMALL_USTENSILS,
            Category.FRUITS,
        }

    def test_unknown_names_are_skipped(self) -> None:
        assert parse_categories(["fruits", "cheese"]) == {Category.FRUITS}

    def test_nothing_valid_selects_all(self) -> None:
        assert parse_categories([]) == set(ALL_CATEGORIES)
        assert parse_categories(["cheese"]) == set(ALL_CATEGORIES)


# ---------------------------------------------------------------------------
# ItemPool
# ---------------------------------------------------------------------------


def _drain(pool: ItemPool) -> list[Item]:
    items = []
    while (item := pool.draw_one()) is not None:
        items.append(item)
    return items


class TestItemPool:
    @pytest.mark.parametrize(
        "categories",
        [
            {Category.FRUITS},
            {Category.HYGIENE, Category.TRIMMINGS},
            set(Category),
        ],
    )
    def test_size_is_six_per_category(self, categories) -> None:
        pool = ItemPool.create(categories)
        assert len(pool) == 6 * len(categories)

    def test_each_item_drawn_exactly_once(self) -> None:
        categories = {Category.FRUITS, Category.HYGIENE}
        pool = ItemPool.create(categories)
        drawn = _drain(pool)
        assert sorted(drawn, key=lambda i: i.key) == sorted(catalog(categories), key=lambda i: i.key)
        assert pool.is_empty()
        assert pool.draw_one() is None

    def test_size_only_decreases(self) -> None:
        pool = ItemPool.create({Category.FRUITS})
        sizes = [len(pool)]
        while pool.draw_one() is not None:
            sizes.append(len(pool))
        assert sizes == [6, 5, 4, 3, 2, 1, 0]

    def test_empty_selection_yields_empty_pool(self) -> None:
        pool = ItemPool.create(set())
        assert pool.is_empty()
        assert pool.draw_one() is None

    def test_seeded_shuffle_is_repeatable(self) -> None:
        first = _drain(ItemPool.create(Category, random.Random(7)))
        second = _drain(ItemPool.create(Category, random.Random(7)))
        assert first == second

    def test_shuffle_changes_order(self) -> None:
        drawn = _drain(ItemPool.create(Category, random.Random(3)))
        assert drawn != list(reversed(catalog(Category)))

    def test_draws_from_the_end(self) -> None:
        items = Category.FRUITS.items()
        pool = ItemPool(items)
        assert pool.draw_one() == items[-1]

    def test_clear(self) -> None:
        pool = ItemPool.create({Category.FRUITS})
        pool.clear()
        assert pool.is_empty()
        assert len(pool) == 0
