"""Small self-contained demo world used by the CLI and the end-to-end tests."""

from __future__ import annotations

from dataclasses import dataclass
import logging

from ..ai.orchestrator import TurnOrchestrator
from ..ai.report import TurnReport
from ..config import PlannerConfig
from ..model.factions import Faction, Stance
from ..model.settlements import Settlement
from ..model.units import Ability, Unit, UnitRole
from .colony import ColonyManager
from .executor import StepExecutor
from .map import GameMap, HexCoord
from .server import LocalServer
from .state import GameState, MarketPrices

logger = logging.getLogger(__name__)

DEMO_ROWS: tuple[str, ...] = (
    "~~~~~~~~~~~~",
    "~~..f.~~~~~~",
    "~~.h..~~~.f~",
    "~~f...~~~..~",
    "~~....~~~.h~",
    "~~~~~~~~~~~~",
)

AI_FACTION = "dutch"
RIVAL_FACTION = "english"
NATIVE_FACTION = "arawak"

DEMO_PRICES = MarketPrices(
    bid={"furs": 5, "tools": 3, "muskets": 4},
    sale={"furs": 3, "tools": 2, "muskets": 3},
    units={
        "free_colonist": 600,
        "expert_scout": 900,
        "hardy_pioneer": 1200,
        "veteran_soldier": 2000,
        "caravel": 1000,
    },
)


@dataclass
class Demo:
    """Everything needed to drive the demo one turn at a time."""

    state: GameState
    server: LocalServer
    executor: StepExecutor
    colonies: ColonyManager
    orchestrator: TurnOrchestrator

    def run_turn(self) -> TurnReport:
        report = self.orchestrator.plan_and_act()
        self.state.new_turn()
        return report


def _demo_factions() -> list[Faction]:
    dutch = Faction(AI_FACTION, gold=1500)
    english = Faction(RIVAL_FACTION, gold=1000)
    natives = Faction(NATIVE_FACTION, can_build_settlements=False, perpetual_peace=True)
    for first, second in ((dutch, english), (dutch, natives), (english, natives)):
        first.set_stance(second.name, Stance.PEACE, turn=0)
        second.set_stance(first.name, Stance.PEACE, turn=0)
    return [dutch, english, natives]


def _populate(state: GameState) -> None:
    ship = state.add_unit(
        Unit(
            "u-ship",
            AI_FACTION,
            "caravel",
            tile=HexCoord(1, 2),
            naval=True,
            person=False,
            capacity=3,
            moves_per_turn=4,
            moves_left=4,
        )
    )
    aboard = (
        Unit("u-colonist", AI_FACTION, "free_colonist"),
        Unit(
            "u-scout",
            AI_FACTION,
            "expert_scout",
            skill=2,
            role=UnitRole.SCOUT,
            abilities=frozenset({Ability.EXPERT_SCOUT}),
            moves_per_turn=4,
            moves_left=4,
        ),
        Unit(
            "u-soldier",
            AI_FACTION,
            "veteran_soldier",
            skill=2,
            role=UnitRole.SOLDIER,
            offence=2.0,
        ),
    )
    for unit in aboard:
        unit.carrier_id = ship.identifier
        state.add_unit(unit)
    state.add_unit(
        Unit(
            "u-pioneer",
            AI_FACTION,
            "hardy_pioneer",
            in_homeland=True,
            skill=1,
            role=UnitRole.PIONEER,
            abilities=frozenset({Ability.EXPERT_PIONEER}),
        )
    )

    rival_colonist = state.add_unit(
        Unit("e-colonist", RIVAL_FACTION, "free_colonist", tile=HexCoord(9, 3))
    )
    state.add_unit(
        Unit(
            "e-soldier",
            RIVAL_FACTION,
            "veteran_soldier",
            tile=HexCoord(9, 4),
            role=UnitRole.SOLDIER,
            offence=2.0,
        )
    )
    jamestown = state.add_settlement(
        Settlement(
            "s-jamestown",
            "Jamestown",
            RIVAL_FACTION,
            HexCoord(9, 3),
            connected_port=True,
            owned_tiles={HexCoord(9, 2), HexCoord(10, 3)},
        )
    )
    state.join_settlement(rival_colonist, jamestown)
    state.add_settlement(
        Settlement(
            "s-village",
            "Village",
            NATIVE_FACTION,
            HexCoord(10, 4),
            native=True,
        )
    )

    for tile in (HexCoord(5, 4), HexCoord(4, 1)):
        state.map.set_rumour(tile)


def build_demo(seed: int = 0, config: PlannerConfig | None = None) -> Demo:
    """Build the two-landmass demo with one AI faction ready to plan."""

    config = config or PlannerConfig(seed=seed)
    game_map = GameMap.from_rows(DEMO_ROWS)
    state = GameState(game_map, factions=_demo_factions(), prices=DEMO_PRICES)
    _populate(state)
    randomness = config.randomness()
    server = LocalServer(state)
    executor = StepExecutor(state, rng=randomness.generator("executor"))
    colonies = ColonyManager(state, rng=randomness.generator("colonies"))
    orchestrator = TurnOrchestrator(
        AI_FACTION,
        state,
        game_map,
        state,
        state,
        executor,
        server,
        config=config,
        settlement_manager=colonies,
        randomness=randomness,
    )
    executor.on_wish_completed = orchestrator.complete_wish
    state.register_controller(AI_FACTION, orchestrator)
    logger.debug("demo world built with seed %d", config.seed)
    return Demo(state, server, executor, colonies, orchestrator)


__all__ = ["AI_FACTION", "DEMO_ROWS", "Demo", "build_demo"]
