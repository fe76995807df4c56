"""Catalogue of categories ("families") and their playable items."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

logger = logging.getLogger(__name__)

_ASSETS_ROOT = "/assets"
_CATEGORY_CLIP = "0-famille.mp3"


class Category(Enum):
    """A named group of six items.

    The value is a single bit so that a selection can travel as one integer.
    """

    CHIEF_KIT = 0b0000_0001
    FRUITS = 0b0000_0010
    HYGIENE = 0b0000_0100
    PROFESSIONAL_GESTURES = 0b0000_1000
    RED_FRUITS = 0b0001_0000
    SMALL_USTENSILS = 0b0010_0000
    TRIMMINGS = 0b0100_0000

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def folder(self) -> str:
        return _FOLDERS[self]

    @property
    def clip(self) -> str:
        """Asset path of the clip naming this category."""
        return f"{_ASSETS_ROOT}/{self.folder}/{_CATEGORY_CLIP}"

    def items(self) -> tuple[Item, ...]:
        return _ITEMS[self]

    def __str__(self) -> str:
        return self.label


@dataclass(frozen=True)
class Item:
    """One flashcard entry: a word of a category and its two clips."""

    category: Category
    key: str
    label: str
    file: str

    @property
    def category_clip(self) -> str:
        return self.category.clip

    @property
    def item_clip(self) -> str:
        return f"{_ASSETS_ROOT}/{self.category.folder}/{self.file}.mp3"


_LABELS = {
    Category.CHIEF_KIT: "Mallette",
    Category.FRUITS: "Fruits",
    Category.HYGIENE: "Hygiène",
    Category.PROFESSIONAL_GESTURES: "Gestes Professionnels",
    Category.RED_FRUITS: "Fruits Rouges",
    Category.SMALL_USTENSILS: "Petit Matériel",
    Category.TRIMMINGS: "Taillages",
}

_FOLDERS = {
    Category.CHIEF_KIT: "mallette",
    Category.FRUITS: "fruits",
    Category.HYGIENE: "hygiene",
    Category.PROFESSIONAL_GESTURES: "gestes-professionnels",
    Category.RED_FRUITS: "fruits-rouges",
    Category.SMALL_USTENSILS: "petit-materiel",
    Category.TRIMMINGS: "taillages",
}

# (key, label, file) per category, in catalogue order.
_ENTRIES: dict[Category, list[tuple[str, str, str]]] = {
    Category.CHIEF_KIT: [
        ("coring", "Canneleur", "canneleur"),
        ("fillet_knife", "Filet de sole", "filet-de-sole"),
        ("paring_knife", "Couteau d'office", "couteau-d-office"),
        ("peeler", "Économe", "econome"),
        ("slicer", "Éminceur", "eminceur"),
        ("zester", "Zesteur", "zesteur"),
    ],
    Category.FRUITS: [
        ("apple", "Pomme", "pomme"),
        ("apricot", "Abricot", "abricot"),
        ("grapes", "Raisin", "raisin"),
        ("orange", "Orange", "orange"),
        ("peach", "Pêche", "peche"),
        ("plum", "Prune", "prune"),
    ],
    Category.HYGIENE: [
        ("bacterium", "Bactérie", "bacterie"),
        ("cleaning", "Nettoyage", "nettoyage"),
        ("disinfectant", "Désinfectant", "desinfectant"),
        ("epi", "EPI", "epi"),
        ("microbe", "Microbe", "microbe"),
        ("mould", "Moisissure", "moisissure"),
    ],
    Category.PROFESSIONAL_GESTURES: [
        ("cutletting", "Escalopper", "escalopper"),
        ("lower", "Abaisser", "abaisser"),
        ("slice", "Émincer", "emincer"),
        ("sweat", "Suer", "suer"),
        ("turn", "Tourner", "tourner"),
        ("winnow", "Vanner", "vanner"),
    ],
    Category.RED_FRUITS: [
        ("blackberry", "Mûre", "mure"),
        ("blackcurrant", "Cassis", "cassis"),
        ("cherry", "Cerise", "cerise"),
        ("raspberry", "Framboise", "framboise"),
        ("redcurrant", "Groseille", "groseille"),
        ("strawberry", "Fraise", "fraise"),
    ],
    Category.SMALL_USTENSILS: [
        ("chests", "Bahut", "bahut"),
        ("chicken_butt", "Cul de poule", "cul-de-poule"),
        ("chinese_cheesecloth", "Chinois étamine", "chinois-etamine"),
        ("cleaning_plate", "Plaque à débarasser", "plaque-a-debarasser"),
        ("roundel", "Rondeau", "rondeau"),
        ("skimmer", "Écumoire", "ecumoire"),
    ],
    Category.TRIMMINGS: [
        ("brunoise", "Brunoise", "brunoise"),
        ("jardiniere", "Jardinière", "jardiniere"),
        ("julienne_strip", "Julienne", "julienne"),
        ("macedonia", "Macédoine", "macedoine"),
        ("mirepoix", "Mirepoix", "mirepoix"),
        ("paysanne_cut", "Paysanne", "paysanne"),
    ],
}

_ITEMS: dict[Category, tuple[Item, ...]] = {
    category: tuple(Item(category, key, label, file) for key, label, file in entries)
    for category, entries in _ENTRIES.items()
}

ALL_CATEGORIES: frozenset[Category] = frozenset(Category)
ALL_MASK = sum(c.value for c in Category)


def catalog(categories: Iterable[Category]) -> list[Item]:
    """Return the items of *categories*, concatenated in category order."""
    selected = set(categories)
    items: list[Item] = []
    for category in Category:
        if category in selected:
            items.extend(category.items())
    return items


def categories_from_mask(mask: object) -> set[Category]:
    """Decode a selection bitmask.

    A mask that selects no known category (0, negative, or not an integer at
    all) falls back to every category.
    """
    if not isinstance(mask, int) or isinstance(mask, bool) or mask & ALL_MASK == 0 or mask < 0:
        logger.info("Invalid category mask %r, selecting all categories", mask)
        return set(ALL_CATEGORIES)
    return {c for c in Category if c.value & mask}


def mask_from_categories(categories: Iterable[Category]) -> int:
    mask = 0
    for category in categories:
        mask |= category.value
    return mask


def _normalize(name: str) -> str:
    return name.strip().lower().replace("-", "_")


_BY_NAME: dict[str, Category] = {}
for _category in Category:
    _BY_NAME[_normalize(_category.name)] = _category
    _BY_NAME[_normalize(_category.folder)] = _category


def parse_categories(names: Iterable[str]) -> set[Category]:
    """Resolve category names, falling back to all categories when none match."""
    selected: set[Category] = set()
    for name in names:
        category = _BY_NAME.get(_normalize(name))
        if category is None:
            logger.warning("Unknown category %r ignored", name)
            continue
        selected.add(category)
    if not selected:
        return set(ALL_CATEGORIES)
    return selected
