"""Assigns a mission to every controllable unit once per turn."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import math
from typing import Callable, Iterable

from ..model.missions import Mission, MissionKind
from ..model.settlements import Settlement
from ..model.transport import Transportable
from ..model.units import AIUnit
from .context import PlanningContext
from .improvements import TileImprovementIndex
from .missions import MissionFactory, invalid_reason
from .scoring import (
    INELIGIBLE,
    Score,
    builder_score,
    pioneer_score,
    rank,
    scout_score,
)
from .transport import TransportCoordinator

logger = logging.getLogger(__name__)


@dataclass
class Quotas:
    """How many more units of each quota kind the faction wants."""

    builders: int = 0
    pioneers: int = 0
    scouts: int = 0

    def count_existing(self, kind: MissionKind) -> None:
        if kind is MissionKind.BUILD_COLONY:
            self.builders -= 1
        elif kind is MissionKind.PIONEER:
            self.pioneers -= 1
        elif kind is MissionKind.SCOUT:
            self.scouts -= 1


@dataclass
class PlanningResult:
    """What one planning pass decided, and why."""

    quotas: Quotas
    reasons: dict[str, str] = field(default_factory=dict)
    transport_candidates: list[Mission] = field(default_factory=list)
    free_land: list[AIUnit] = field(default_factory=list)
    free_naval: list[AIUnit] = field(default_factory=list)
    assignments: list[tuple[Transportable, AIUnit]] = field(default_factory=list)

    def assigned(self, kind: MissionKind, units: Iterable[AIUnit]) -> list[AIUnit]:
        return [u for u in units if u.mission is not None and u.mission.kind is kind]


class MissionPlanner:
    """Quota-driven, greedy mission assignment for one faction."""

    def __init__(
        self,
        context: PlanningContext,
        factory: MissionFactory,
        improvements: TileImprovementIndex,
        transport: TransportCoordinator,
    ) -> None:
        self.context = context
        self.factory = factory
        self.improvements = improvements
        self.transport = transport

    # ------------------------------------------------------------------
    def _worker_count(self, settlements: list[Settlement]) -> int:
        roster = self.context.roster
        tiles = {settlement.tile for settlement in settlements}
        workers = sum(settlement.population for settlement in settlements)
        for unit in roster.units_of(self.context.owner):
            if not unit.is_colonist or unit.settlement_id is not None:
                continue
            if unit.in_homeland or (unit.tile in tiles and unit.carrier_id is None):
                workers += 1
        return workers

    def builders_needed(self) -> int:
        faction = self.context.faction()
        if faction is None or not faction.can_build_settlements:
            return 0
        settlements = self.context.settlements()
        ports = sum(1 for settlement in settlements if settlement.connected_port)
        if not settlements or ports == 0:
            return 2
        workers = self._worker_count(settlements)
        if ports <= 1 and workers >= 3:
            return 1
        if workers / len(settlements) > math.e:
            return 1
        return 0

    def pioneers_needed(self) -> int:
        return (len(self.improvements) + 1) // 2

    def scouts_needed(self) -> int:
        return 3 if self.context.roster.age <= self.context.config.early_age else 1

    def quotas_needed(self) -> Quotas:
        return Quotas(
            builders=self.builders_needed(),
            pioneers=self.pioneers_needed(),
            scouts=self.scouts_needed(),
        )

    # ------------------------------------------------------------------
    def _assign(
        self, ai_unit: AIUnit, mission: Mission, result: PlanningResult, reason: str
    ) -> None:
        if ai_unit.mission is not mission:
            ai_unit.change_mission(mission)
        result.reasons[ai_unit.identifier] = reason
        if ai_unit.requests_transport():
            self.transport.add_supply(ai_unit)

    def _is_vital(self, ai_unit: AIUnit) -> bool:
        unit = ai_unit.unit
        if unit.settlement_id is None:
            return False
        settlement = self.context.roster.settlement(unit.settlement_id)
        return settlement is not None and settlement.population <= 1

    def _fill_quota(
        self,
        candidates: list[AIUnit],
        wanted: int,
        score: Score,
        make: Callable[[AIUnit], Mission | None],
        label: str,
        result: PlanningResult,
    ) -> int:
        assigned = 0
        if wanted <= 0:
            return assigned
        for ai_unit, value in rank(candidates, score):
            if assigned >= wanted or value <= INELIGIBLE:
                break
            mission = make(ai_unit)
            if mission is None:
                continue
            self._assign(ai_unit, mission, result, f"{label}{wanted - assigned}")
            candidates.remove(ai_unit)
            assigned += 1
        return assigned

    def simple_mission(self, ai_unit: AIUnit) -> Mission | None:
        """First applicable mission in the fixed fallback order."""

        unit = ai_unit.unit
        factory = self.factory
        ranges = self.context.config.ranges
        if unit.naval:
            steps: tuple[Callable[[], Mission | None], ...] = (
                lambda: factory.privateer(ai_unit),
                lambda: factory.transport(ai_unit),
                lambda: factory.seek_and_destroy(ai_unit, ranges.seek_short),
                lambda: factory.wander_hostile(ai_unit),
            )
        elif unit.is_carrier:
            steps = (lambda: factory.transport(ai_unit),)
        else:
            steps = (
                lambda: factory.cash_in(ai_unit),
                lambda: factory.work_inside(ai_unit) if unit.is_in_settlement else None,
                lambda: factory.defend(ai_unit),
                lambda: factory.wish_realization(ai_unit)
                if unit.is_colonist and unit.skill > 0
                else None,
                lambda: factory.seek_and_destroy(ai_unit, ranges.seek_short),
                lambda: factory.missionary(ai_unit),
                lambda: factory.wish_realization(ai_unit),
                lambda: factory.defend(ai_unit, relaxed=True),
                lambda: factory.seek_and_destroy(ai_unit, ranges.seek_long),
                lambda: factory.wander_hostile(ai_unit),
            )
        for step in steps:
            mission = step()
            if mission is not None:
                return mission
        return None

    # ------------------------------------------------------------------
    def plan_turn(self, units: Iterable[AIUnit]) -> PlanningResult:
        """Run one planning pass over ``units`` and allocate transport."""

        context = self.context
        roster = context.roster
        quotas = self.quotas_needed()
        result = PlanningResult(quotas=quotas)
        reasons = result.reasons
        need: list[AIUnit] = []
        naval: list[AIUnit] = []
        bootstrap: Mission | None = None

        for ai_unit in units:
            unit = ai_unit.unit
            if ai_unit.is_disposed():
                reasons[ai_unit.identifier] = "invalid"
                continue
            mission = ai_unit.mission
            if mission is not None:
                reason = invalid_reason(mission, roster)
                if reason is not None:
                    logger.debug("%r lost %r: %s", ai_unit, mission, reason)
                    ai_unit.change_mission(None)
                    mission = None
            if unit.damaged:
                if mission is None or mission.kind is not MissionKind.IDLE_AT_SETTLEMENT:
                    ai_unit.change_mission(self.factory.idle(ai_unit))
                reasons[ai_unit.identifier] = "damaged"
            elif self._is_vital(ai_unit):
                if mission is None or mission.kind is not MissionKind.WORK_INSIDE_COLONY:
                    replacement = self.factory.work_inside(ai_unit)
                    if replacement is not None:
                        ai_unit.change_mission(replacement)
                reasons[ai_unit.identifier] = "vital"
            elif unit.in_mission_post:
                reasons[ai_unit.identifier] = "mission-post"
            elif mission is not None and not mission.one_time:
                quotas.count_existing(mission.kind)
                if mission.kind is MissionKind.BUILD_COLONY:
                    bootstrap = mission
                elif (
                    mission.kind is MissionKind.TRANSPORT
                    and mission.manifest is not None
                    and mission.manifest.destination_capacity() > 0
                ):
                    result.transport_candidates.append(mission)
                reasons[ai_unit.identifier] = "valid"
            elif unit.naval:
                naval.append(ai_unit)
            elif unit.at_sea:
                reasons[ai_unit.identifier] = "at-sea"
            else:
                need.append(ai_unit)

        faction = context.faction()
        can_build = faction is not None and faction.can_build_settlements

        def _builder(ai_unit: AIUnit) -> int:
            return builder_score(ai_unit, can_build=can_build)

        if not context.settlements() and bootstrap is not None:
            target = bootstrap.target
            for ai_unit, _ in rank(list(need), _builder):
                mission = self.factory.build_colony(ai_unit, target=target)  # type: ignore[arg-type]
                if mission is None:
                    continue
                self._assign(ai_unit, mission, result, "bootstrap-builder")
                need.remove(ai_unit)

        quotas.builders -= self._fill_quota(
            need, quotas.builders, _builder, self.factory.build_colony, "builder", result
        )
        quotas.scouts -= self._fill_quota(
            need, quotas.scouts, scout_score, self.factory.scout, "scout", result
        )
        quotas.pioneers -= self._fill_quota(
            need, quotas.pioneers, pioneer_score, self.factory.pioneer, "pioneer", result
        )

        for ai_unit in list(need):
            mission = self.simple_mission(ai_unit)
            if mission is None:
                continue
            self._assign(ai_unit, mission, result, "new-land")
            need.remove(ai_unit)
            if mission.kind is MissionKind.TRANSPORT:
                result.transport_candidates.append(mission)

        for ai_unit in list(naval):
            mission = self.simple_mission(ai_unit)
            if mission is None:
                continue
            self._assign(ai_unit, mission, result, "new-naval")
            naval.remove(ai_unit)
            if mission.kind is MissionKind.TRANSPORT and mission.manifest is not None:
                if mission.manifest.destination_capacity() > 0:
                    result.transport_candidates.append(mission)
                for passenger in mission.manifest:
                    if isinstance(passenger, AIUnit) and passenger in need:
                        if passenger.mission is not None and invalid_reason(
                            passenger.mission, roster
                        ) is None and not passenger.mission.one_time:
                            need.remove(passenger)
                            reasons[passenger.identifier] = "new"

        self._fallback(need + naval, result)
        result.free_land = [u for u in need if not u.unit.naval]
        result.free_naval = [u for u in naval]
        result.assignments = self.transport.allocate(result.transport_candidates)
        logger.info(
            "%s planned %d units (builders=%d scouts=%d pioneers=%d, %d transport assignments)",
            context.owner,
            len(reasons),
            quotas.builders,
            quotas.scouts,
            quotas.pioneers,
            len(result.assignments),
        )
        return result

    def _fallback(self, leftovers: list[AIUnit], result: PlanningResult) -> None:
        roster = self.context.roster
        ports = [s for s in self.context.settlements() if s.connected_port]
        next_port = 0
        for ai_unit in leftovers:
            unit = ai_unit.unit
            mission = ai_unit.mission
            if mission is not None and not mission.one_time and invalid_reason(
                mission, roster
            ) is None:
                continue
            if unit.in_homeland and unit.person and ports and not unit.in_mission_post:
                port = ports[next_port % len(ports)]
                next_port += 1
                replacement = self.factory.work_inside(ai_unit, settlement=port)
                if replacement is not None:
                    self._assign(ai_unit, replacement, result, "to-work")
                    continue
            if mission is not None and mission.kind is MissionKind.IDLE_AT_SETTLEMENT:
                result.reasons[ai_unit.identifier] = "idle"
                continue
            self._assign(ai_unit, self.factory.idle(ai_unit), result, "idle")


__all__ = ["MissionPlanner", "PlanningResult", "Quotas"]
