"""Top-level per-turn driver for one computer-controlled faction."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
import logging
from typing import Iterable, Literal

from ..config import PlannerConfig
from ..errors import IntegrityError
from ..model.factions import FoundingFather
from ..model.missions import MissionKind
from ..model.settlements import Settlement, TileImprovementPlan
from ..model.trade import DiplomaticTrade, TradeStatus
from ..model.transport import AIGoods, Location, Transportable
from ..model.units import AIUnit, Unit
from ..model.wishes import Wish, WishKind
from ..rng import AIRandomness
from ..world.map import HexCoord
from ..world.oracles import (
    MarketOracle,
    MissionExecutor,
    Reachability,
    Roster,
    ServerConnection,
    SettlementManager,
    StanceAdvisor,
    StepResult,
    StrengthOracle,
)
from .bargaining import TradeSession
from .context import PlanningContext
from .diplomacy import DiplomaticEvaluator
from .improvements import TileImprovementIndex
from .intelligence import NationIntelligenceCache
from .missions import MissionFactory
from .planner import MissionPlanner
from .recruitment import Recruitment
from .report import ReportChannel, TurnReport
from .requests import RequestPolicy
from .stances import StanceManager, StrengthStanceAdvisor
from .transport import TransportCoordinator
from .wishes import WishRegistry

logger = logging.getLogger(__name__)

HookName = Literal["gifts", "tribute"]
TurnHook = Callable[["TurnOrchestrator", "TurnState"], None]


@dataclass
class TurnState:
    """Bookkeeping that lives for exactly one call of ``plan_and_act``."""

    turn: int
    report: TurnReport
    iteration: int = 0
    active: list[AIUnit] = field(default_factory=list)


class TurnOrchestrator:
    """Runs the planning components in order and owns their per-turn caches."""

    HOOK_ORDER: tuple[HookName, ...] = ("gifts", "tribute")

    def __init__(
        self,
        owner: str,
        roster: Roster,
        reachability: Reachability,
        strength: StrengthOracle,
        market: MarketOracle,
        executor: MissionExecutor,
        server: ServerConnection,
        *,
        config: PlannerConfig | None = None,
        advisor: StanceAdvisor | None = None,
        settlement_manager: SettlementManager | None = None,
        randomness: AIRandomness | None = None,
        reports: ReportChannel | None = None,
    ) -> None:
        self.owner = owner
        self.roster = roster
        self.market = market
        self.executor = executor
        self.config = config or PlannerConfig()
        self.randomness = randomness or self.config.randomness()
        self.settlement_manager = settlement_manager
        self.reports = reports or ReportChannel()
        self.ai_units: dict[str, AIUnit] = {}
        self._initialized = False
        self._hooks: dict[HookName, list[TurnHook]] = {name: [] for name in self.HOOK_ORDER}

        self.context = PlanningContext(owner, roster, reachability, self.config, self.ai_units)
        self.intelligence = NationIntelligenceCache(owner, roster, strength)
        self.wishes = WishRegistry(reachability)
        self.improvements = TileImprovementIndex()
        self.factory = MissionFactory(self.context, self.wishes, self.improvements)
        self.transport = TransportCoordinator(roster, reachability, self.wishes)
        self.planner = MissionPlanner(
            self.context, self.factory, self.improvements, self.transport
        )
        self.diplomacy = DiplomaticEvaluator(
            owner,
            roster,
            self.intelligence,
            market,
            self.randomness,
            self.config.diplomacy,
        )
        self.stances = StanceManager(
            owner,
            roster,
            server,
            advisor or StrengthStanceAdvisor(self.intelligence.strength_ratio),
            self.randomness,
            peace_probability=self.config.diplomacy.peace_probability,
        )
        self.recruitment = Recruitment(owner, roster, server, self.register_unit)
        self.requests = RequestPolicy(owner, roster, market)
        self.bargaining = TradeSession(owner, roster, market, self.randomness)

    # ------------------------------------------------------------------
    # Unit bookkeeping
    def register_hook(self, name: HookName, hook: TurnHook) -> None:
        """Register a callback run once per planning pass after missions are given."""

        if name not in self._hooks:
            raise ValueError(f"Unknown hook '{name}'")
        self._hooks[name].append(hook)

    def register_unit(self, unit: Unit) -> AIUnit:
        ai_unit = self.ai_units.get(unit.identifier)
        if ai_unit is None or ai_unit.unit is not unit:
            ai_unit = AIUnit(unit, self.roster)
            self.ai_units[unit.identifier] = ai_unit
        return ai_unit

    def sync_units(self) -> list[AIUnit]:
        """Wrap new roster units and forget disposed or departed ones."""

        live = {unit.identifier: unit for unit in self.roster.units_of(self.owner)}
        for identifier, ai_unit in list(self.ai_units.items()):
            if identifier not in live or ai_unit.is_disposed():
                ai_unit.change_mission(None)
                del self.ai_units[identifier]
        for unit in live.values():
            if not unit.disposed:
                self.register_unit(unit)
        return list(self.ai_units.values())

    # ------------------------------------------------------------------
    # Turn lifecycle
    def begin_turn(self) -> TurnState:
        state = TurnState(turn=self.roster.turn, report=TurnReport(self.owner, self.roster.turn))
        self.sync_units()
        logger.info(
            "%s turn %d: units=%d settlements=%d",
            self.owner,
            state.turn,
            len(self.ai_units),
            len(self.context.settlements()),
        )
        return state

    def end_turn(self, state: TurnState) -> None:
        self.intelligence.clear()
        self.wishes.clear()
        self.improvements.clear()
        self.transport.clear()
        self.bargaining.clear()
        self.reports.push(state.report)

    def plan_and_act(self) -> TurnReport:
        """Plan and execute one turn; per-turn caches are always cleared."""

        if self.roster.controller(self.owner) is not self:
            raise IntegrityError(f"{self.owner} is not controlled by this orchestrator")
        state = self.begin_turn()
        report = state.report
        try:
            self.intelligence.refresh()
            if not self._initialized and self.roster.turn <= 1:
                self.initialize_missions(report)
            self._initialized = True
            for other, stance in self.stances.determine_stances().items():
                report.stance_changes.append(f"{other}: {stance.value}")

            settlements = self.context.settlements()
            if settlements:
                badly = [s.name for s in settlements if s.badly_defended]
                if badly:
                    logger.debug("badly defended: %s", ", ".join(badly))
                self.improvements.rebuild(settlements)
                self.wishes.rebuild(settlements, self.roster.is_storable)
                if self.config.purchase_for_wishes:
                    self.purchase_for_wishes(report)
            self.transport.rebuild(self.ai_units.values(), settlements)

            active: list[AIUnit] | None = None
            for iteration in range(1, self.config.max_iterations + 1):
                state.iteration = iteration
                self.rearrange_settlements()
                units = self.sync_units()
                result = self.planner.plan_turn(units)
                report.record_planning(iteration, result, units)
                for name in self.HOOK_ORDER:
                    for hook in self._hooks[name]:
                        hook(self, state)
                if active is None:
                    active = units
                active = [u for u in active if u.identifier in self.ai_units]
                if not active:
                    break
                active = self.do_missions(active, report)
                state.active = active
        finally:
            self.end_turn(state)
        logger.info("%s", report.summary())
        return report

    # ------------------------------------------------------------------
    # Turn phases
    def initialize_missions(self, report: TurnReport) -> None:
        """Send the starting ships off with colonists bound for the best sites."""

        game_map = self.roster.map
        step = self.config.ranges.building
        widest = max(step, len(game_map))
        for carrier in list(self.ai_units.values()):
            unit = carrier.unit
            if carrier.mission is not None or not unit.naval:
                continue
            for passenger in self.context.passengers_of(carrier):
                mission = None
                for max_turns in range(step, widest + step, step):
                    mission = self.factory.build_colony(passenger, max_turns=max_turns)
                    if mission is not None:
                        break
                if mission is None:
                    logger.warning("%r found no initial colony site", passenger)
                    continue
                passenger.change_mission(mission)
                report.assignments.append(f"{passenger.identifier} -> initial {mission.target}")
            transport = self.factory.transport(carrier)
            if transport is not None:
                carrier.change_mission(transport)
        for ai_unit in self.ai_units.values():
            if ai_unit.mission is None:
                mission = self.planner.simple_mission(ai_unit)
                if mission is not None:
                    ai_unit.change_mission(mission)

    def rearrange_settlements(self) -> None:
        if self.settlement_manager is None:
            return
        for settlement in self.context.settlements():
            self.settlement_manager.rearrange_workers(settlement)

    def purchase_for_wishes(self, report: TurnReport) -> AIUnit | None:
        """Train a unit for the most valuable worker wish when gold allows."""

        faction = self.context.faction()
        if faction is None:
            return None
        best: Wish | None = None
        for settlement in self.context.settlements():
            for wish in settlement.wishes:
                if wish.kind is not WishKind.WORKER or wish.transportable is not None:
                    continue
                if wish.unit_type is None:
                    continue
                if best is None or wish.value > best.value:
                    best = wish
        if best is None or best.unit_type is None:
            return None
        price = self.market.unit_price(best.unit_type)
        if faction.gold < price:
            logger.debug("%s can not afford %s for %r", self.owner, best.unit_type, best)
            return None
        recruit = self.recruitment.train_unit(best.unit_type)
        if recruit is None:
            return None
        mission = self.factory.wish_realization(recruit, best)
        if mission is not None:
            recruit.change_mission(mission)
        report.purchases.append(f"trained {recruit.identifier} for {best!r}")
        return recruit

    def do_missions(self, units: Iterable[AIUnit], report: TurnReport) -> list[AIUnit]:
        """Advance each unit's mission once; return the units with moves left."""

        remaining: list[AIUnit] = []
        for ai_unit in units:
            if ai_unit.is_disposed():
                continue
            if ai_unit.mission is None:
                remaining.append(ai_unit)
                continue
            carrier = ai_unit.carrier
            manifest = None
            if carrier is not None and carrier.mission is not None:
                manifest = carrier.mission.manifest
            try:
                result = self.executor.execute(ai_unit)
            except Exception as exc:
                logger.warning("mission of %r failed", ai_unit, exc_info=True)
                report.errors.append(f"{ai_unit.identifier}: {exc}")
                result = StepResult(disposed=ai_unit.is_disposed())
            if result.disposed:
                if manifest is not None:
                    manifest.remove(ai_unit)
                logger.debug("%r died while acting", ai_unit)
                continue
            if result.target_changed and manifest is not None:
                mission = ai_unit.mission
                new_target = mission.target if mission is not None else None
                if ai_unit.is_aboard() or (
                    new_target is not None and ai_unit.should_take_transport_to(new_target)
                ):
                    manifest.requeue(ai_unit)
                else:
                    manifest.remove(ai_unit)
                    logger.debug("%r no longer needs %r", ai_unit, carrier)
            if result.moves_left and self._carrier_can_move(ai_unit.unit):
                remaining.append(ai_unit)
        return remaining

    def _carrier_can_move(self, unit: Unit) -> bool:
        if unit.carrier_id is None:
            return True
        carrier = self.roster.unit(unit.carrier_id)
        return carrier is not None and carrier.moves_left > 0

    def settlement_lost(self, settlement_id: str) -> None:
        """Forget everything tied to a settlement that is no longer ours."""

        plans = self.improvements.discard_settlement(settlement_id)
        wishes = self.wishes.discard_settlement(settlement_id)
        goods = self.transport.discard_settlement(settlement_id)
        for ai_unit in self.ai_units.values():
            mission = ai_unit.mission
            if mission is None:
                continue
            if (
                mission.kind in (MissionKind.PIONEER, MissionKind.WISH_REALIZATION)
                and mission.settlement_id == settlement_id
            ):
                ai_unit.change_mission(None)
            elif mission.manifest is not None:
                for item in mission.manifest:
                    if (
                        isinstance(item, AIGoods)
                        and item.settlement_id == settlement_id
                        and not item.is_aboard()
                    ):
                        mission.manifest.remove(item)
        logger.info(
            "%s lost settlement %s (%d plans, %d wishes, %d parcels dropped)",
            self.owner,
            settlement_id,
            plans,
            wishes,
            goods,
        )

    # ------------------------------------------------------------------
    # Callbacks for settlement logic and mission execution
    def wishes_at(self, location: Location, type_key: str | None = None) -> list[Wish]:
        return self.wishes.wishes_at(location, type_key)

    def best_plan_for_tile(self, tile: HexCoord) -> TileImprovementPlan | None:
        return self.improvements.best_plan_for_tile(tile)

    def best_plan_for_settlement(self, settlement: Settlement) -> TileImprovementPlan | None:
        return self.improvements.best_plan_for_settlement(settlement)

    def claim_transportable(self, transportable: Transportable) -> bool:
        return self.transport.claim(transportable)

    def complete_wish(self, wish: Wish) -> bool:
        return self.wishes.complete(wish)

    def consume_worker_wish(self, ai_unit: AIUnit, wish: Wish) -> bool:
        return self.wishes.consume(ai_unit, wish)

    def consume_goods_wish(self, goods: AIGoods, wish: Wish) -> bool:
        return self.wishes.consume(goods, wish)

    def evaluate_trade(self, agreement: DiplomaticTrade) -> TradeStatus:
        """Answer a proposal that arrived outside the turn loop."""

        if len(self.intelligence) == 0:
            self.intelligence.refresh()
        return self.diplomacy.evaluate(agreement)

    # ------------------------------------------------------------------
    # Requests from the crown, natives and visiting traders
    def accept_tax(self, tax: int) -> bool:
        return self.requests.accept_tax(tax)

    def accept_mercenaries(self) -> bool:
        return self.requests.accept_mercenaries()

    def accept_native_demand(
        self, settlement: Settlement, goods_type: str | None, gold: int
    ) -> bool:
        return self.requests.accept_native_demand(settlement, goods_type, gold)

    def select_founding_father(
        self, candidates: Iterable[FoundingFather | None]
    ) -> FoundingFather | None:
        return self.requests.select_founding_father(candidates)

    def register_sell_goods(self, goods: AIGoods) -> None:
        self.bargaining.register_sell_goods(goods)

    def buy_proposition(
        self, buyer: Unit, settlement: Settlement, goods_type: str, amount: int, gold: int
    ) -> int:
        return self.bargaining.buy_proposition(buyer, settlement, goods_type, amount, gold)

    def sell_proposition(
        self, seller: Unit, settlement: Settlement, goods_type: str, amount: int
    ) -> int:
        return self.bargaining.sell_proposition(seller, settlement, goods_type, amount)


__all__ = ["TurnOrchestrator", "TurnState"]
