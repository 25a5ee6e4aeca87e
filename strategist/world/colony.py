"""Reference settlement logic: production, defence upkeep and new wishes."""

from __future__ import annotations

import logging
from typing import Mapping

from numpy.random import Generator

from ..model.settlements import Settlement, TileImprovementPlan
from ..model.transport import AIGoods
from ..model.wishes import WishKind, goods_wish, worker_wish
from .map import HOMELAND, Terrain
from .state import GameState

logger = logging.getLogger(__name__)

IMPROVEMENTS: Mapping[Terrain, tuple[str, int]] = {
    Terrain.PLAINS: ("plow", 60),
    Terrain.FOREST: ("clear_forest", 40),
    Terrain.HILLS: ("road", 30),
}

EXPORT_GOODS = "furs"
EXPORT_PARCEL = 100


def _clamp(value: float, minimum: float, maximum: float) -> float:
    return max(minimum, min(maximum, value))


class ColonyManager:
    """Keeps settlements producing and voicing what they lack.

    Each call to :meth:`rearrange_workers` runs one production step, refreshes
    the defence estimate and raises at most one wish of each kind.
    """

    def __init__(
        self,
        state: GameState,
        *,
        rng: Generator | None = None,
        wanted_population: int = 3,
        max_plans: int = 2,
    ) -> None:
        self.state = state
        self.rng = rng
        self.wanted_population = wanted_population
        self.max_plans = max_plans

    def rearrange_workers(self, settlement: Settlement) -> None:
        self._produce(settlement)
        self._assess_defence(settlement)
        self._raise_wishes(settlement)
        self._propose_plans(settlement)
        self._queue_exports(settlement)

    # ------------------------------------------------------------------
    def _produce(self, settlement: Settlement) -> None:
        workers = settlement.population
        bonus = 0 if self.rng is None else int(self.rng.integers(0, 3))
        settlement.adjust_goods("food", workers)
        settlement.adjust_goods(EXPORT_GOODS, workers * (5 + bonus))

    def _assess_defence(self, settlement: Settlement) -> None:
        defenders = [
            unit
            for unit in self.state.units_at(settlement.tile)
            if unit.owner == settlement.owner and unit.is_offensive
        ]
        ratio = len(defenders) / max(1, settlement.population)
        settlement.defence_ratio = _clamp(ratio, 0.0, 1.0)
        settlement.badly_defended = not defenders

    def _raise_wishes(self, settlement: Settlement) -> None:
        outstanding = {wish.kind for wish in settlement.wishes}
        if (
            WishKind.WORKER not in outstanding
            and settlement.population < self.wanted_population
        ):
            value = 100 - 20 * settlement.population
            settlement.wishes.append(
                worker_wish(
                    settlement.tile,
                    "free_colonist",
                    value,
                    settlement_id=settlement.identifier,
                )
            )
            logger.debug("%s wants another colonist (%d)", settlement.name, value)
        if WishKind.GOODS not in outstanding and settlement.goods.get("tools", 0) < 20:
            settlement.wishes.append(
                goods_wish(
                    settlement.tile,
                    "tools",
                    20,
                    50,
                    settlement_id=settlement.identifier,
                )
            )

    def _propose_plans(self, settlement: Settlement) -> None:
        game_map = self.state.map
        planned = {plan.tile for plan in settlement.plans}
        for tile in sorted(settlement.owned_tiles, key=lambda c: (c.r, c.q)):
            if len(settlement.plans) >= self.max_plans:
                break
            if tile in planned or tile not in game_map:
                continue
            improvement = IMPROVEMENTS.get(game_map.terrain(tile))
            if improvement is None:
                continue
            name, value = improvement
            settlement.plans.append(
                TileImprovementPlan(tile, name, value, settlement.identifier)
            )

    def _queue_exports(self, settlement: Settlement) -> None:
        if not settlement.connected_port:
            return
        pending = sum(parcel.amount for parcel in settlement.exports if not parcel.is_disposed())
        if settlement.goods.get(EXPORT_GOODS, 0) - pending < EXPORT_PARCEL:
            return
        parcel = AIGoods(
            self.state.next_id("g"),
            EXPORT_GOODS,
            EXPORT_PARCEL,
            settlement.tile,
            HOMELAND,
            settlement_id=settlement.identifier,
        )
        settlement.exports.append(parcel)
        logger.debug("%s queued %r", settlement.name, parcel)


__all__ = ["ColonyManager", "IMPROVEMENTS"]
