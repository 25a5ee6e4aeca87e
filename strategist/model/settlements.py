"""Settlements and the terrain improvements they propose."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, MutableMapping

from ..world.map import HexCoord

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .transport import AIGoods
    from .units import AIUnit
    from .wishes import Wish


@dataclass(eq=False)
class TileImprovementPlan:
    """A proposed improvement of one tile, owned by its settlement."""

    tile: HexCoord
    improvement: str
    value: int
    settlement_id: str
    pioneer: AIUnit | None = None
    completed: bool = False

    def is_valid(self) -> bool:
        return self.value > 0 and not self.completed

    def assign(self, pioneer: AIUnit | None) -> None:
        self.pioneer = pioneer


@dataclass
class Settlement:
    """Owned or foreign settlement as exposed by the game roster."""

    identifier: str
    name: str
    owner: str
    tile: HexCoord
    connected_port: bool = False
    workers: list[str] = field(default_factory=list)
    goods: MutableMapping[str, int] = field(default_factory=dict)
    stockade_level: int = 0
    warehouse_capacity: int = 100
    defence_ratio: float = 1.0
    badly_defended: bool = False
    wishes: list[Wish] = field(default_factory=list)
    plans: list[TileImprovementPlan] = field(default_factory=list)
    exports: list[AIGoods] = field(default_factory=list)
    owned_tiles: set[HexCoord] = field(default_factory=set)
    native: bool = False
    missionary_id: str | None = None

    @property
    def population(self) -> int:
        return len(self.workers)

    def adjust_goods(self, goods_type: str, amount: int) -> int:
        """Adjust a stored goods amount and return the new value."""

        total = max(0, self.goods.get(goods_type, 0) + amount)
        self.goods[goods_type] = total
        return total

    def remove_wish(self, wish: Wish) -> bool:
        for index, candidate in enumerate(self.wishes):
            if candidate is wish:
                del self.wishes[index]
                return True
        return False

    def remove_plan(self, plan: TileImprovementPlan) -> bool:
        for index, candidate in enumerate(self.plans):
            if candidate is plan:
                del self.plans[index]
                return True
        return False


__all__ = ["Settlement", "TileImprovementPlan"]
