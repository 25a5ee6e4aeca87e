"""Reference mission executor advancing units one step per call."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

from numpy.random import Generator

from ..model.missions import Mission, MissionKind
from ..model.transport import AIGoods, Transportable
from ..model.units import AIUnit, Unit
from .map import HOMELAND, HexCoord
from .oracles import StepResult

if TYPE_CHECKING:  # pragma: no cover - typing only
    from ..model.wishes import Wish
    from .state import GameState

logger = logging.getLogger(__name__)

WishCallback = Callable[["Wish"], object]


class StepExecutor:
    """Moves units toward their mission targets and applies arrival effects."""

    def __init__(
        self,
        state: GameState,
        *,
        rng: Generator | None = None,
        on_wish_completed: WishCallback | None = None,
    ) -> None:
        self.state = state
        self.rng = rng
        self.on_wish_completed = on_wish_completed
        self._handlers: dict[MissionKind, Callable[[AIUnit, Mission], StepResult]] = {
            MissionKind.BUILD_COLONY: self._build_colony,
            MissionKind.PIONEER: self._pioneer,
            MissionKind.SCOUT: self._scout,
            MissionKind.TRANSPORT: self._transport,
            MissionKind.DEFEND_SETTLEMENT: self._travel_only,
            MissionKind.SEEK_AND_DESTROY: self._attack,
            MissionKind.PRIVATEER: self._attack,
            MissionKind.WANDER_HOSTILE: self._wander,
            MissionKind.MISSIONARY: self._missionary,
            MissionKind.WORK_INSIDE_COLONY: self._work_inside,
            MissionKind.CASH_IN_TREASURE_TRAIN: self._cash_in,
            MissionKind.IDLE_AT_SETTLEMENT: self._travel_only,
            MissionKind.WISH_REALIZATION: self._wish_realization,
        }

    def execute(self, ai_unit: AIUnit) -> StepResult:
        unit = ai_unit.unit
        if unit.disposed:
            return StepResult(disposed=True)
        mission = ai_unit.mission
        if mission is None or unit.moves_left <= 0:
            return StepResult()
        return self._handlers[mission.kind](ai_unit, mission)

    # ------------------------------------------------------------------
    def _result(self, unit: Unit, *, target_changed: bool = False) -> StepResult:
        return StepResult(
            moves_left=unit.moves_left > 0 and not unit.disposed,
            disposed=unit.disposed,
            target_changed=target_changed,
        )

    def _advance(self, unit: Unit, target: object) -> bool:
        """Spend the unit's movement toward ``target``; return True on arrival."""

        if target is None or unit.carrier_id is not None:
            return False
        if unit.tile == target or (target == HOMELAND and unit.in_homeland):
            return True
        if target == HOMELAND or unit.in_homeland:
            return self._cross_ocean(unit, target)
        if unit.tile is None or not isinstance(target, HexCoord):
            return False
        path = self.state.map.path(unit, unit.tile, target)
        if path is None:
            logger.debug("%s has no path to %s", unit, target)
            unit.moves_left = 0
            return False
        for step in path[1:]:
            cost = self.state.map.step_cost(step)
            if unit.moves_left <= 0:
                break
            unit.moves_left = max(0, unit.moves_left - cost)
            unit.tile = step
        return unit.tile == target

    def _cross_ocean(self, unit: Unit, target: object) -> bool:
        if not unit.naval:
            return False
        unit.moves_left = 0
        if target == HOMELAND:
            unit.in_homeland = True
            unit.tile = None
            return False
        unit.in_homeland = False
        unit.tile = target  # type: ignore[assignment]
        return True

    # ------------------------------------------------------------------
    def _travel_only(self, ai_unit: AIUnit, mission: Mission) -> StepResult:
        self._advance(ai_unit.unit, mission.target)
        unit = ai_unit.unit
        unit.moves_left = 0
        return self._result(unit)

    def _build_colony(self, ai_unit: AIUnit, mission: Mission) -> StepResult:
        unit = ai_unit.unit
        if not self._advance(unit, mission.target):
            return self._result(unit)
        target = mission.target
        if isinstance(target, HexCoord) and self.state.map.site_value(target) > 0:
            settlement = self.state.found_settlement(unit)
            logger.info("%s founded %s at %s", unit, settlement.name, target)
        unit.moves_left = 0
        ai_unit.change_mission(None)
        return self._result(unit, target_changed=True)

    def _pioneer(self, ai_unit: AIUnit, mission: Mission) -> StepResult:
        unit = ai_unit.unit
        if self._advance(unit, mission.target) and mission.plan is not None:
            mission.plan.completed = True
            unit.moves_left = 0
            return self._result(unit, target_changed=True)
        return self._result(unit)

    def _scout(self, ai_unit: AIUnit, mission: Mission) -> StepResult:
        unit = ai_unit.unit
        target = mission.target
        if self._advance(unit, target) and isinstance(target, HexCoord):
            self.state.map.set_rumour(target, False)
            return self._result(unit, target_changed=True)
        return self._result(unit)

    def _attack(self, ai_unit: AIUnit, mission: Mission) -> StepResult:
        unit = ai_unit.unit
        target = mission.target
        if not self._advance(unit, target) or not isinstance(target, HexCoord):
            return self._result(unit)
        for enemy in self.state.units_at(target):
            if enemy.owner == unit.owner:
                continue
            if unit.offence >= enemy.offence:
                self.state.dispose_unit(enemy.identifier)
            else:
                unit.damaged = True
            break
        unit.moves_left = 0
        return self._result(unit, target_changed=True)

    def _wander(self, ai_unit: AIUnit, mission: Mission) -> StepResult:
        unit = ai_unit.unit
        if unit.tile is None:
            return self._result(unit)
        game_map = self.state.map
        options = [
            tile
            for tile in game_map.graph.neighbors(unit.tile)
            if game_map.terrain(tile).is_water is unit.naval
        ]
        if options:
            index = 0 if self.rng is None else int(self.rng.integers(len(options)))
            unit.tile = options[index]
        unit.moves_left = 0
        return self._result(unit)

    def _missionary(self, ai_unit: AIUnit, mission: Mission) -> StepResult:
        unit = ai_unit.unit
        if not self._advance(unit, mission.target):
            return self._result(unit)
        settlement = self.state.settlement(mission.settlement_id or "")
        if settlement is not None and settlement.missionary_id is None:
            settlement.missionary_id = unit.identifier
            unit.in_mission_post = True
        unit.moves_left = 0
        return self._result(unit)

    def _work_inside(self, ai_unit: AIUnit, mission: Mission) -> StepResult:
        unit = ai_unit.unit
        settlement = self.state.settlement(mission.settlement_id or "")
        if settlement is None:
            return self._result(unit, target_changed=True)
        if unit.settlement_id == settlement.identifier:
            unit.moves_left = 0
            return self._result(unit)
        if self._advance(unit, settlement.tile):
            self.state.join_settlement(unit, settlement)
            unit.moves_left = 0
        return self._result(unit)

    def _cash_in(self, ai_unit: AIUnit, mission: Mission) -> StepResult:
        unit = ai_unit.unit
        if not self._advance(unit, mission.target):
            return self._result(unit)
        faction = self.state.faction(unit.owner)
        if faction is not None:
            faction.gold += unit.treasure
        logger.info("%s cashed in %d gold", unit, unit.treasure)
        unit.treasure = 0
        self.state.dispose_unit(unit.identifier)
        return StepResult(disposed=True)

    def _wish_realization(self, ai_unit: AIUnit, mission: Mission) -> StepResult:
        unit = ai_unit.unit
        if not self._advance(unit, mission.target):
            return self._result(unit)
        settlement = self.state.settlement(mission.settlement_id or "")
        if settlement is not None:
            self.state.join_settlement(unit, settlement)
        wish = mission.wish
        if wish is not None:
            if settlement is not None:
                settlement.remove_wish(wish)
            if self.on_wish_completed is not None:
                self.on_wish_completed(wish)
        unit.moves_left = 0
        ai_unit.change_mission(None)
        return self._result(unit, target_changed=True)

    # ------------------------------------------------------------------
    def _transport(self, ai_unit: AIUnit, mission: Mission) -> StepResult:
        carrier = ai_unit.unit
        manifest = mission.manifest
        if manifest is None or len(manifest) == 0:
            carrier.moves_left = 0
            return self._result(carrier)
        cargo = next(iter(manifest))
        if self._is_loaded(cargo, carrier):
            destination = cargo.transport_destination()
            if destination is None:
                manifest.remove(cargo)
                self._unload(cargo, carrier, carrier.tile)
                return self._result(carrier, target_changed=True)
            if self._advance(carrier, destination):
                manifest.remove(cargo)
                self._unload(cargo, carrier, destination)
                return self._result(carrier, target_changed=True)
            return self._result(carrier)
        source = cargo.transport_source()
        if source is None:
            manifest.remove(cargo)
            return self._result(carrier, target_changed=True)
        if self._advance(carrier, source):
            self._load(cargo, carrier)
        return self._result(carrier)

    def _is_loaded(self, cargo: Transportable, carrier: Unit) -> bool:
        if isinstance(cargo, AIUnit):
            return cargo.unit.carrier_id == carrier.identifier
        return cargo.is_aboard()

    def _load(self, cargo: Transportable, carrier: Unit) -> None:
        if isinstance(cargo, AIUnit):
            unit = cargo.unit
            if unit.settlement_id is not None:
                settlement = self.state.settlement(unit.settlement_id)
                if settlement is not None and unit.identifier in settlement.workers:
                    settlement.workers.remove(unit.identifier)
                unit.settlement_id = None
            unit.carrier_id = carrier.identifier
            unit.in_homeland = False
            unit.tile = None
        elif isinstance(cargo, AIGoods):
            cargo.aboard = True
            settlement = self.state.settlement(cargo.settlement_id or "")
            if settlement is not None:
                settlement.adjust_goods(cargo.goods_type, -cargo.amount)
                if cargo in settlement.exports:
                    settlement.exports.remove(cargo)
        logger.debug("%s loaded %r", carrier, cargo)

    def _unload(self, cargo: Transportable, carrier: Unit, where: object) -> None:
        if isinstance(cargo, AIUnit):
            unit = cargo.unit
            unit.carrier_id = None
            if where == HOMELAND:
                unit.in_homeland = True
                unit.tile = None
            else:
                unit.tile = where if isinstance(where, HexCoord) else carrier.tile
        elif isinstance(cargo, AIGoods):
            cargo.aboard = False
            cargo.disposed = True
            settlement = (
                self.state.settlement_at(where) if isinstance(where, HexCoord) else None
            )
            if settlement is not None:
                settlement.adjust_goods(cargo.goods_type, cargo.amount)
            elif where == HOMELAND:
                faction = self.state.faction(carrier.owner)
                if faction is not None:
                    faction.gold += self.state.sale_price(cargo.goods_type, cargo.amount)
            if cargo.wish is not None:
                if settlement is not None:
                    settlement.remove_wish(cargo.wish)
                if self.on_wish_completed is not None:
                    self.on_wish_completed(cargo.wish)
        logger.debug("%s unloaded %r at %s", carrier, cargo, where)


__all__ = ["StepExecutor"]
