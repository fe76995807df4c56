"""Item pool: the shuffled, depleting set of items for one session."""

from __future__ import annotations

import random
from typing import Iterable

from audioflash.core.catalog import Category, Item, catalog


class ItemPool:
    """Items of the selected categories in random order.

    Shuffled once on creation and never again; items are popped from the end
    so each one is handed out at most once.
    """

    def __init__(self, items: Iterable[Item]) -> None:
        self._items: list[Item] = list(items)

    @classmethod
    def create(
        cls, categories: Iterable[Category], rng: random.Random | None = None
    ) -> ItemPool:
        """Build a pool from *categories*, shuffled with *rng* (OS entropy by default)."""
        items = catalog(categories)
        (rng if rng is not None else random.SystemRandom()).shuffle(items)
        return cls(items)

    def draw_one(self) -> Item | None:
        """Remove and return the next item, or ``None`` once the pool is empty."""
        if not self._items:
            return None
        return self._items.pop()

    def is_empty(self) -> bool:
        return not self._items

    def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"ItemPool(remaining={len(self._items)})"
