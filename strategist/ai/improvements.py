"""Best pending terrain improvement per tile."""

from __future__ import annotations

import logging
from typing import Iterable

from ..model.settlements import Settlement, TileImprovementPlan
from ..world.map import HexCoord

logger = logging.getLogger(__name__)


class TileImprovementIndex:
    """Maps each tile to its most valuable unassigned improvement plan.

    Plans stay owned by their settlements; the index only references them.
    """

    def __init__(self) -> None:
        self._plans: dict[HexCoord, TileImprovementPlan] = {}

    def __len__(self) -> int:
        return len(self._plans)

    def __contains__(self, plan: object) -> bool:
        return any(candidate is plan for candidate in self._plans.values())

    def plans(self) -> list[TileImprovementPlan]:
        return list(self._plans.values())

    def clear(self) -> None:
        self._plans.clear()

    def rebuild(self, settlements: Iterable[Settlement]) -> None:
        self.clear()
        for settlement in settlements:
            for plan in list(settlement.plans):
                if not plan.is_valid():
                    settlement.remove_plan(plan)
                    continue
                if plan.pioneer is not None:
                    continue
                current = self._plans.get(plan.tile)
                if current is None or plan.value > current.value:
                    self._plans[plan.tile] = plan
        logger.debug("indexed %d improvement plans", len(self._plans))

    def best_plan_for_tile(self, tile: HexCoord) -> TileImprovementPlan | None:
        return self._plans.get(tile)

    def best_plan_for_settlement(self, settlement: Settlement) -> TileImprovementPlan | None:
        best: TileImprovementPlan | None = None
        for tile in sorted(
            {settlement.tile, *settlement.owned_tiles}, key=lambda c: (c.r, c.q)
        ):
            plan = self._plans.get(tile)
            if plan is not None and (best is None or plan.value > best.value):
                best = plan
        return best

    def remove_plan(self, plan: TileImprovementPlan) -> bool:
        if self._plans.get(plan.tile) is plan:
            del self._plans[plan.tile]
            return True
        return False

    def discard_settlement(self, settlement_id: str) -> int:
        doomed = [
            tile for tile, plan in self._plans.items() if plan.settlement_id == settlement_id
        ]
        for tile in doomed:
            del self._plans[tile]
        return len(doomed)


__all__ = ["TileImprovementIndex"]
