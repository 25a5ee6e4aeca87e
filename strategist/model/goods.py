"""Goods categories consulted when answering crown and trade requests."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, Mapping


class GoodsCategory(str, Enum):
    FOOD = "food"
    BREEDABLE = "breedable"
    MILITARY = "military"
    TRADE = "trade"
    BUILDING = "building"
    STANDARD = "standard"

    @property
    def replaceable(self) -> bool:
        """Goods a faction can make for itself once it is established."""

        return self in (GoodsCategory.MILITARY, GoodsCategory.TRADE, GoodsCategory.BUILDING)


@dataclass(frozen=True)
class GoodsType:
    name: str
    category: GoodsCategory = GoodsCategory.STANDARD


class GoodsCatalog:
    """Lookup of goods types; unknown names are standard goods."""

    def __init__(self, types: Iterable[GoodsType]) -> None:
        self._types: dict[str, GoodsType] = {goods.name: goods for goods in types}

    def __contains__(self, name: object) -> bool:
        return name in self._types

    def __iter__(self) -> Iterator[GoodsType]:
        return iter(self._types.values())

    def get(self, name: str) -> GoodsType:
        return self._types.get(name) or GoodsType(name)

    def category(self, name: str) -> GoodsCategory:
        return self.get(name).category


_DEFAULT_CATEGORIES: Mapping[str, GoodsCategory] = {
    "food": GoodsCategory.FOOD,
    "fish": GoodsCategory.FOOD,
    "horses": GoodsCategory.BREEDABLE,
    "muskets": GoodsCategory.MILITARY,
    "trade_goods": GoodsCategory.TRADE,
    "tools": GoodsCategory.BUILDING,
    "lumber": GoodsCategory.BUILDING,
    "hammers": GoodsCategory.BUILDING,
    "furs": GoodsCategory.STANDARD,
    "coats": GoodsCategory.STANDARD,
    "sugar": GoodsCategory.STANDARD,
    "rum": GoodsCategory.STANDARD,
    "tobacco": GoodsCategory.STANDARD,
    "cigars": GoodsCategory.STANDARD,
    "cotton": GoodsCategory.STANDARD,
    "cloth": GoodsCategory.STANDARD,
    "ore": GoodsCategory.STANDARD,
    "silver": GoodsCategory.STANDARD,
}

DEFAULT_GOODS = GoodsCatalog(
    GoodsType(name, category) for name, category in _DEFAULT_CATEGORIES.items()
)


__all__ = ["DEFAULT_GOODS", "GoodsCatalog", "GoodsCategory", "GoodsType"]
