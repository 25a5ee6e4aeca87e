"""Mission construction and validity checks.

Validity is recomputed from the world on every call through
:func:`invalid_reason`, which dispatches on :class:`MissionKind`.
"""

from __future__ import annotations

import logging
import math
from typing import Callable, Iterable, Mapping

from ..errors import InvalidMissionError
from ..model.missions import Mission, MissionKind, TransportManifest
from ..model.settlements import Settlement
from ..model.transport import Location
from ..model.units import AIUnit, Ability, UnitRole
from ..model.wishes import Wish
from ..world.map import HexCoord
from ..world.oracles import Roster
from .context import PlanningContext
from .improvements import TileImprovementIndex
from .scoring import adjust_mission_score
from .wishes import WishRegistry

logger = logging.getLogger(__name__)

Validator = Callable[[Mission, Roster], "str | None"]


# ----------------------------------------------------------------------
# Validity
def _owned_settlement(mission: Mission, roster: Roster) -> str | None:
    settlement = roster.settlement(mission.settlement_id or "")
    if settlement is None or settlement.owner != mission.unit.unit.owner:
        return "settlement-lost"
    return None


def _build_colony_reason(mission: Mission, roster: Roster) -> str | None:
    target = mission.target
    if not isinstance(target, HexCoord):
        return "no-target"
    if roster.settlement_at(target) is not None:
        return "target-settled"
    if roster.map.site_value(target) <= 0:
        return "target-unusable"
    faction = roster.faction(mission.unit.unit.owner)
    if faction is None or not faction.can_build_settlements:
        return "cannot-build"
    return None


def _pioneer_reason(mission: Mission, roster: Roster) -> str | None:
    plan = mission.plan
    if plan is None or plan.completed:
        return "plan-complete"
    if plan.pioneer is not mission.unit:
        return "plan-reassigned"
    settlement = roster.settlement(plan.settlement_id)
    if settlement is None or settlement.owner != mission.unit.unit.owner:
        return "settlement-lost"
    return None


def _scout_reason(mission: Mission, roster: Roster) -> str | None:
    target = mission.target
    if not isinstance(target, HexCoord):
        return "no-target"
    if not roster.map.has_rumour(target):
        return "rumour-explored"
    return None


def _transport_reason(mission: Mission, roster: Roster) -> str | None:
    if mission.manifest is None or not mission.unit.unit.is_carrier:
        return "not-a-carrier"
    return None


def _attack_reason(mission: Mission, roster: Roster) -> str | None:
    unit = mission.unit.unit
    if mission.target not in roster.hostile_targets(unit.owner, naval=unit.naval):
        return "target-gone"
    return None


def _missionary_reason(mission: Mission, roster: Roster) -> str | None:
    settlement = roster.settlement(mission.settlement_id or "")
    if settlement is None:
        return "settlement-lost"
    if settlement.missionary_id not in (None, mission.unit.identifier):
        return "mission-taken"
    return None


def _cash_in_reason(mission: Mission, roster: Roster) -> str | None:
    if mission.unit.unit.treasure <= 0:
        return "no-treasure"
    return _owned_settlement(mission, roster)


def _wish_reason(mission: Mission, roster: Roster) -> str | None:
    if mission.wish is None:
        return "no-wish"
    return _owned_settlement(mission, roster)


def _always_valid(mission: Mission, roster: Roster) -> str | None:
    return None


_VALIDATORS: Mapping[MissionKind, Validator] = {
    MissionKind.BUILD_COLONY: _build_colony_reason,
    MissionKind.PIONEER: _pioneer_reason,
    MissionKind.SCOUT: _scout_reason,
    MissionKind.TRANSPORT: _transport_reason,
    MissionKind.DEFEND_SETTLEMENT: _owned_settlement,
    MissionKind.SEEK_AND_DESTROY: _attack_reason,
    MissionKind.PRIVATEER: _attack_reason,
    MissionKind.WANDER_HOSTILE: _always_valid,
    MissionKind.MISSIONARY: _missionary_reason,
    MissionKind.WORK_INSIDE_COLONY: _owned_settlement,
    MissionKind.CASH_IN_TREASURE_TRAIN: _cash_in_reason,
    MissionKind.IDLE_AT_SETTLEMENT: _always_valid,
    MissionKind.WISH_REALIZATION: _wish_reason,
}


def invalid_reason(mission: Mission, world: Roster) -> str | None:
    """Return why ``mission`` can no longer be pursued, or ``None``."""

    if mission.unit.is_disposed():
        return "unit-disposed"
    return _VALIDATORS[mission.kind](mission, world)


# ----------------------------------------------------------------------
# Construction
class MissionFactory:
    """Builds missions for a unit, returning ``None`` when none applies."""

    def __init__(
        self,
        context: PlanningContext,
        wishes: WishRegistry,
        improvements: TileImprovementIndex,
    ) -> None:
        self.context = context
        self.wishes = wishes
        self.improvements = improvements

    @property
    def ranges(self):
        return self.context.config.ranges

    def _mission(self, kind: MissionKind, ai_unit: AIUnit, **payload: object) -> Mission:
        mission = Mission(kind, ai_unit, **payload)  # type: ignore[arg-type]
        logger.debug("built %r", mission)
        return mission

    def _reachable(self, ai_unit: AIUnit, target: Location) -> bool:
        if self.context.turns(ai_unit, target) is not None:
            return True
        return ai_unit.should_take_transport_to(target)

    def _nearest(
        self,
        ai_unit: AIUnit,
        targets: Iterable[Location],
        max_turns: int,
        *,
        relaxed: bool = False,
    ) -> tuple[Location, int] | None:
        best: tuple[Location, int] | None = None
        for target in targets:
            turns = self.context.turns(ai_unit, target, relaxed)
            if turns is None or turns > max_turns:
                continue
            if best is None or turns < best[1]:
                best = (target, turns)
        return best

    def _candidate_tiles(self, ai_unit: AIUnit, max_turns: int) -> Iterable[HexCoord]:
        game_map = self.context.roster.map
        unit = ai_unit.unit
        if unit.tile is not None and not ai_unit.is_aboard():
            radius = max_turns * max(1, unit.moves_per_turn)
            return [tile for tile in game_map.tiles() if unit.tile.distance_to(tile) <= radius]
        return list(game_map.tiles())

    def _targets_of(self, kind: MissionKind, exclude: AIUnit) -> set[Location]:
        return {
            other.mission.target
            for other in self.context.ai_units.values()
            if other is not exclude
            and other.mission is not None
            and other.mission.kind is kind
            and other.mission.target is not None
        }

    # ------------------------------------------------------------------
    def build_colony(
        self,
        ai_unit: AIUnit,
        target: HexCoord | None = None,
        *,
        max_turns: int | None = None,
    ) -> Mission | None:
        unit = ai_unit.unit
        faction = self.context.faction()
        if faction is None or not faction.can_build_settlements:
            return None
        if not unit.is_colonist or unit.in_mission_post:
            return None
        if target is not None:
            if not self._reachable(ai_unit, target):
                return None
            return self._mission(MissionKind.BUILD_COLONY, ai_unit, target=target)
        site = self._best_site(ai_unit, max_turns or self.ranges.building)
        if site is None:
            return None
        return self._mission(MissionKind.BUILD_COLONY, ai_unit, target=site)

    def _best_site(self, ai_unit: AIUnit, max_turns: int) -> HexCoord | None:
        game_map = self.context.roster.map
        claimed = self._targets_of(MissionKind.BUILD_COLONY, ai_unit)
        best: HexCoord | None = None
        best_value = 0.0
        for tile in self._candidate_tiles(ai_unit, max_turns):
            value = game_map.site_value(tile)
            if value <= 0:
                continue
            if any(
                isinstance(other, HexCoord) and other.distance_to(tile) <= 1
                for other in claimed
            ):
                continue
            if any(game_map.owner(n) is not None for n in game_map.graph.neighbors(tile)):
                continue
            turns = self.context.turns(ai_unit, tile)
            if turns is None or turns > max_turns:
                continue
            score = value / (turns + 1)
            if score > best_value:
                best, best_value = tile, score
        return best

    def cash_in(self, ai_unit: AIUnit) -> Mission | None:
        unit = ai_unit.unit
        if unit.treasure <= 0:
            return None
        ports = {s.tile: s for s in self.context.settlements() if s.connected_port}
        found = self._nearest(ai_unit, ports, self.ranges.cash_in)
        if found is None:
            return None
        settlement = ports[found[0]]  # type: ignore[index]
        return self._mission(
            MissionKind.CASH_IN_TREASURE_TRAIN,
            ai_unit,
            target=settlement.tile,
            settlement_id=settlement.identifier,
        )

    def defenders_of(self, settlement: Settlement, exclude: AIUnit | None = None) -> int:
        defenders: set[str] = set()
        for other in self.context.ai_units.values():
            if other is exclude or other.is_disposed():
                continue
            unit = other.unit
            mission = other.mission
            if mission is not None and mission.kind is MissionKind.DEFEND_SETTLEMENT:
                if mission.settlement_id == settlement.identifier:
                    defenders.add(other.identifier)
            elif unit.tile == settlement.tile and unit.is_offensive and unit.carrier_id is None:
                defenders.add(other.identifier)
        return len(defenders)

    def defence_value(self, ai_unit: AIUnit, settlement: Settlement) -> int:
        return adjust_mission_score(
            MissionKind.DEFEND_SETTLEMENT,
            self.context.config.defend_base_value,
            self.defenders_of(settlement, exclude=ai_unit),
            settlement.stockade_level,
        )

    def defend(self, ai_unit: AIUnit, *, relaxed: bool = False) -> Mission | None:
        """Defend the worst-defended settlement that still needs help."""

        unit = ai_unit.unit
        if unit.naval or not unit.is_offensive:
            return None
        best: Settlement | None = None
        best_score = math.inf
        for settlement in self.context.settlements():
            if not settlement.badly_defended:
                continue
            if self.defence_value(ai_unit, settlement) <= 0:
                continue
            if unit.tile == settlement.tile and not ai_unit.is_aboard():
                best = settlement
                break
            turns = self.context.turns(ai_unit, settlement.tile, relaxed)
            if turns is None:
                continue
            score = settlement.defence_ratio * 100 / max(1, turns)
            if score < best_score:
                best, best_score = settlement, score
        if best is None:
            return None
        return self._mission(
            MissionKind.DEFEND_SETTLEMENT,
            ai_unit,
            target=best.tile,
            settlement_id=best.identifier,
        )

    def missionary(self, ai_unit: AIUnit) -> Mission | None:
        unit = ai_unit.unit
        if not unit.is_colonist or unit.in_mission_post:
            return None
        if unit.role is not UnitRole.MISSIONARY and not unit.has_ability(
            Ability.EXPERT_MISSIONARY
        ):
            return None
        claimed = self._targets_of(MissionKind.MISSIONARY, ai_unit)
        natives = {
            s.tile: s
            for s in self.context.roster.settlements()
            if s.native and s.missionary_id is None and s.tile not in claimed
        }
        found = self._nearest(ai_unit, natives, self.ranges.missionary)
        if found is None:
            return None
        settlement = natives[found[0]]  # type: ignore[index]
        return self._mission(
            MissionKind.MISSIONARY,
            ai_unit,
            target=settlement.tile,
            settlement_id=settlement.identifier,
        )

    def pioneer(self, ai_unit: AIUnit) -> Mission | None:
        unit = ai_unit.unit
        if not unit.is_colonist or unit.in_mission_post:
            return None
        if unit.role is not UnitRole.PIONEER and not unit.has_default_role:
            return None
        best = None
        best_value = 0.0
        for plan in self.improvements.plans():
            turns = self.context.turns(ai_unit, plan.tile)
            if turns is None or turns > self.ranges.pioneering:
                continue
            value = plan.value / (turns + 1)
            if value > best_value:
                best, best_value = plan, value
        if best is None:
            return None
        best.assign(ai_unit)
        self.improvements.remove_plan(best)
        return self._mission(
            MissionKind.PIONEER,
            ai_unit,
            target=best.tile,
            plan=best,
            settlement_id=best.settlement_id,
        )

    def privateer(self, ai_unit: AIUnit) -> Mission | None:
        unit = ai_unit.unit
        if not unit.naval or not unit.has_ability(Ability.PRIVATEER):
            return None
        targets = self.context.roster.hostile_targets(unit.owner, naval=True)
        found = self._nearest(ai_unit, targets, self.ranges.privateer)
        if found is None:
            return None
        return self._mission(MissionKind.PRIVATEER, ai_unit, target=found[0])

    def scout(self, ai_unit: AIUnit) -> Mission | None:
        unit = ai_unit.unit
        if not unit.is_colonist or unit.in_mission_post:
            return None
        if unit.role is not UnitRole.SCOUT and not unit.has_default_role:
            return None
        game_map = self.context.roster.map
        claimed = self._targets_of(MissionKind.SCOUT, ai_unit)
        rumours = [
            tile
            for tile in self._candidate_tiles(ai_unit, self.ranges.scouting)
            if game_map.has_rumour(tile) and tile not in claimed
        ]
        found = self._nearest(ai_unit, rumours, self.ranges.scouting)
        if found is None:
            return None
        return self._mission(MissionKind.SCOUT, ai_unit, target=found[0])

    def seek_and_destroy(self, ai_unit: AIUnit, max_turns: int) -> Mission | None:
        unit = ai_unit.unit
        if max_turns <= 0:
            raise InvalidMissionError("seek range must be positive")
        if unit.naval:
            if unit.offence <= 0:
                return None
        elif not unit.is_offensive:
            return None
        targets = self.context.roster.hostile_targets(unit.owner, naval=unit.naval)
        found = self._nearest(ai_unit, targets, max_turns)
        if found is None:
            return None
        return self._mission(MissionKind.SEEK_AND_DESTROY, ai_unit, target=found[0])

    def transport(self, ai_unit: AIUnit) -> Mission | None:
        unit = ai_unit.unit
        if not unit.is_carrier or unit.disposed:
            return None
        manifest = TransportManifest(ai_unit, unit.capacity)
        for passenger in self.context.passengers_of(ai_unit):
            manifest.queue(passenger)
        return self._mission(MissionKind.TRANSPORT, ai_unit, manifest=manifest)

    def wander_hostile(self, ai_unit: AIUnit) -> Mission | None:
        unit = ai_unit.unit
        if not unit.naval and not unit.is_offensive:
            return None
        if unit.tile is None:
            return None
        return self._mission(MissionKind.WANDER_HOSTILE, ai_unit, target=unit.tile)

    def wish_realization(self, ai_unit: AIUnit, wish: Wish | None = None) -> Mission | None:
        unit = ai_unit.unit
        if not unit.is_colonist or unit.in_mission_post:
            return None
        if wish is None:
            wish = self.wishes.best_worker_wish(ai_unit, unit.unit_type)
        if wish is None or not self._reachable(ai_unit, wish.destination):
            return None
        self.wishes.consume(ai_unit, wish)
        return self._mission(
            MissionKind.WISH_REALIZATION,
            ai_unit,
            target=wish.destination,
            wish=wish,
            settlement_id=wish.settlement_id,
        )

    def work_inside(
        self, ai_unit: AIUnit, settlement: Settlement | None = None
    ) -> Mission | None:
        unit = ai_unit.unit
        if not unit.is_colonist or unit.in_mission_post:
            return None
        roster = self.context.roster
        if settlement is None and unit.settlement_id is not None:
            settlement = roster.settlement(unit.settlement_id)
        if settlement is None and unit.tile is not None:
            settlement = roster.settlement_at(unit.tile)
        if settlement is None or settlement.owner != unit.owner:
            return None
        if unit.settlement_id != settlement.identifier and not self._reachable(
            ai_unit, settlement.tile
        ):
            return None
        return self._mission(
            MissionKind.WORK_INSIDE_COLONY,
            ai_unit,
            target=settlement.tile,
            settlement_id=settlement.identifier,
        )

    def idle(self, ai_unit: AIUnit) -> Mission:
        return self._mission(
            MissionKind.IDLE_AT_SETTLEMENT,
            ai_unit,
            target=ai_unit.location(),
            settlement_id=ai_unit.unit.settlement_id,
        )


__all__ = ["MissionFactory", "invalid_reason"]
