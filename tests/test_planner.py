from strategist.ai.context import PlanningContext
from strategist.ai.improvements import TileImprovementIndex
from strategist.ai.missions import MissionFactory
from strategist.ai.planner import MissionPlanner
from strategist.ai.transport import TransportCoordinator
from strategist.ai.wishes import WishRegistry
from strategist.model.factions import Faction
from strategist.model.missions import Mission, MissionKind
from strategist.model.settlements import Settlement, TileImprovementPlan
from strategist.model.units import AIUnit, Unit, UnitRole
from strategist.world.map import GameMap, HexCoord
from strategist.world.state import GameState

ROWS = (
    "~~~~~~~",
    "~.....~",
    "~..h..~",
    "~.....~",
    "~~~~~~~",
)


def _state(*, can_build: bool = True) -> GameState:
    return GameState(
        GameMap.from_rows(ROWS), factions=[Faction("dutch", can_build_settlements=can_build)]
    )


def _planner(state: GameState) -> MissionPlanner:
    context = PlanningContext("dutch", state, state.map)
    wishes = WishRegistry(state.map)
    improvements = TileImprovementIndex()
    factory = MissionFactory(context, wishes, improvements)
    transport = TransportCoordinator(state, state.map, wishes)
    return MissionPlanner(context, factory, improvements, transport)


def _add(planner: MissionPlanner, state: GameState, unit: Unit) -> AIUnit:
    state.add_unit(unit)
    ai_unit = AIUnit(unit, state)
    planner.context.ai_units[unit.identifier] = ai_unit
    return ai_unit


def _colonist(identifier: str, **overrides: object) -> Unit:
    fields: dict[str, object] = {
        "identifier": identifier,
        "owner": "dutch",
        "unit_type": "free_colonist",
    }
    fields.update(overrides)
    return Unit(**fields)  # type: ignore[arg-type]


def test_quotas_without_settlements() -> None:
    planner = _planner(_state())

    quotas = planner.quotas_needed()

    assert (quotas.builders, quotas.pioneers, quotas.scouts) == (2, 0, 3)


def test_no_builders_when_faction_can_not_build() -> None:
    assert _planner(_state(can_build=False)).builders_needed() == 0


def test_builders_follow_worker_density() -> None:
    state = _state()
    planner = _planner(state)
    port = state.add_settlement(
        Settlement("s1", "Port", "dutch", HexCoord(1, 1), connected_port=True, workers=["a"])
    )
    assert planner.builders_needed() == 0

    port.workers.extend(["b", "c"])
    assert planner.builders_needed() == 1


def test_pioneer_and_scout_quotas() -> None:
    state = _state()
    planner = _planner(state)
    settlement = state.add_settlement(Settlement("s1", "Port", "dutch", HexCoord(1, 1)))
    settlement.plans.extend(
        TileImprovementPlan(HexCoord(q, 1), "plow", 50, "s1") for q in (2, 3, 4)
    )
    planner.improvements.rebuild([settlement])

    assert planner.pioneers_needed() == 2
    assert planner.scouts_needed() == 3
    state.age = 2
    assert planner.scouts_needed() == 1


def test_plan_turn_fills_builder_and_scout_quotas() -> None:
    state = _state()
    state.map.set_rumour(HexCoord(5, 1))
    planner = _planner(state)
    first = _add(planner, state, _colonist("c1", tile=HexCoord(1, 1)))
    second = _add(planner, state, _colonist("c2", tile=HexCoord(4, 3)))
    scout = _add(planner, state, _colonist("sc", tile=HexCoord(2, 1), role=UnitRole.SCOUT))

    result = planner.plan_turn([first, second, scout])

    assert first.mission is not None and first.mission.kind is MissionKind.BUILD_COLONY
    assert second.mission is not None and second.mission.kind is MissionKind.BUILD_COLONY
    assert first.mission.target != second.mission.target
    assert scout.mission is not None and scout.mission.kind is MissionKind.SCOUT
    assert scout.mission.target == HexCoord(5, 1)
    assert result.reasons == {"c1": "builder2", "c2": "builder1", "sc": "scout3"}
    assert result.quotas.builders == 0
    assert result.quotas.scouts == 2
    assert result.assignments == []


def test_bootstrap_sends_every_colonist_to_the_last_site_seen() -> None:
    state = _state()
    planner = _planner(state)
    first = _add(planner, state, _colonist("c1", tile=HexCoord(1, 1)))
    first.change_mission(Mission(MissionKind.BUILD_COLONY, first, target=HexCoord(3, 2)))
    second = _add(planner, state, _colonist("c2", tile=HexCoord(5, 1)))
    site = HexCoord(5, 2)
    second.change_mission(Mission(MissionKind.BUILD_COLONY, second, target=site))
    follower = _add(planner, state, _colonist("c3", tile=HexCoord(1, 3)))

    result = planner.plan_turn([first, second, follower])

    assert result.reasons["c1"] == "valid"
    assert result.reasons["c2"] == "valid"
    assert result.reasons["c3"] == "bootstrap-builder"
    assert follower.mission is not None
    assert follower.mission.kind is MissionKind.BUILD_COLONY
    assert follower.mission.target == site


def test_damaged_units_idle() -> None:
    state = _state()
    planner = _planner(state)
    hurt = _add(planner, state, _colonist("c1", tile=HexCoord(1, 1), damaged=True))

    result = planner.plan_turn([hurt])

    assert hurt.mission is not None and hurt.mission.kind is MissionKind.IDLE_AT_SETTLEMENT
    assert result.reasons["c1"] == "damaged"


def test_last_worker_stays_inside() -> None:
    state = _state()
    planner = _planner(state)
    founder = _add(planner, state, _colonist("c1", tile=HexCoord(1, 1)))
    settlement = state.found_settlement(founder.unit)

    result = planner.plan_turn([founder])

    assert result.reasons["c1"] == "vital"
    assert founder.mission is not None
    assert founder.mission.kind is MissionKind.WORK_INSIDE_COLONY
    assert founder.mission.settlement_id == settlement.identifier


def test_homeland_leftovers_are_sent_to_work_at_a_port() -> None:
    state = _state(can_build=False)
    planner = _planner(state)
    founder = _add(planner, state, _colonist("c1", tile=HexCoord(1, 1)))
    port = state.found_settlement(founder.unit)
    waiting = [
        _add(planner, state, _colonist(f"h{i}", in_homeland=True)) for i in range(2)
    ]

    result = planner.plan_turn([founder, *waiting])

    for ai_unit in waiting:
        assert ai_unit.mission is not None
        assert ai_unit.mission.kind is MissionKind.WORK_INSIDE_COLONY
        assert ai_unit.mission.settlement_id == port.identifier
        assert result.reasons[ai_unit.identifier] == "to-work"


def test_invalid_missions_are_replaced() -> None:
    state = _state(can_build=False)
    state.map.set_rumour(HexCoord(1, 3))
    planner = _planner(state)
    scout = _add(planner, state, _colonist("sc", tile=HexCoord(2, 1), role=UnitRole.SCOUT))
    stale = Mission(MissionKind.SCOUT, scout, target=HexCoord(5, 1))
    scout.change_mission(stale)

    planner.plan_turn([scout])

    assert scout.mission is not stale
    assert scout.mission is not None and scout.mission.target == HexCoord(1, 3)


def test_every_unit_ends_with_at_most_one_reason() -> None:
    state = _state()
    planner = _planner(state)
    units = [_add(planner, state, _colonist(f"c{i}", tile=HexCoord(1 + i, 1))) for i in range(4)]
    units[3].unit.disposed = True

    result = planner.plan_turn(units)

    assert set(result.reasons) == {"c0", "c1", "c2", "c3"}
    assert result.reasons["c3"] == "invalid"
    assert units[3].mission is None


class _ScriptedFactory:
    """Records every mission constructor tried and answers from ``answers``."""

    def __init__(self, answers: dict[str, Mission] | None = None) -> None:
        self.answers = answers or {}
        self.calls: list[str] = []

    def _try(self, name: str) -> Mission | None:
        self.calls.append(name)
        return self.answers.get(name)

    def privateer(self, ai_unit: AIUnit) -> Mission | None:
        return self._try("privateer")

    def transport(self, ai_unit: AIUnit) -> Mission | None:
        return self._try("transport")

    def cash_in(self, ai_unit: AIUnit) -> Mission | None:
        return self._try("cash_in")

    def work_inside(self, ai_unit: AIUnit) -> Mission | None:
        return self._try("work_inside")

    def defend(self, ai_unit: AIUnit, *, relaxed: bool = False) -> Mission | None:
        return self._try("defend_relaxed" if relaxed else "defend")

    def wish_realization(self, ai_unit: AIUnit) -> Mission | None:
        return self._try("wish_realization")

    def seek_and_destroy(self, ai_unit: AIUnit, max_range: int) -> Mission | None:
        return self._try(f"seek_and_destroy{max_range}")

    def missionary(self, ai_unit: AIUnit) -> Mission | None:
        return self._try("missionary")

    def wander_hostile(self, ai_unit: AIUnit) -> Mission | None:
        return self._try("wander_hostile")


def _scripted_planner(state: GameState, factory: _ScriptedFactory) -> MissionPlanner:
    context = PlanningContext("dutch", state, state.map)
    wishes = WishRegistry(state.map)
    improvements = TileImprovementIndex()
    transport = TransportCoordinator(state, state.map, wishes)
    return MissionPlanner(context, factory, improvements, transport)  # type: ignore[arg-type]


def test_land_fallback_order_tries_every_step() -> None:
    state = _state()
    factory = _ScriptedFactory()
    planner = _scripted_planner(state, factory)
    expert = AIUnit(
        _colonist("c1", tile=HexCoord(1, 1), settlement_id="s1", skill=2), state
    )

    assert planner.simple_mission(expert) is None
    assert factory.calls == [
        "cash_in",
        "work_inside",
        "defend",
        "wish_realization",
        "seek_and_destroy8",
        "missionary",
        "wish_realization",
        "defend_relaxed",
        "seek_and_destroy16",
        "wander_hostile",
    ]


def test_land_fallback_stops_at_first_mission() -> None:
    state = _state()
    colonist = AIUnit(_colonist("c1", tile=HexCoord(1, 1)), state)
    relaxed = Mission(MissionKind.DEFEND_SETTLEMENT, colonist)
    factory = _ScriptedFactory({"defend_relaxed": relaxed})
    planner = _scripted_planner(state, factory)

    assert planner.simple_mission(colonist) is relaxed
    # Outside a settlement and unskilled: no work_inside and no early wish.
    assert factory.calls == [
        "cash_in",
        "defend",
        "seek_and_destroy8",
        "missionary",
        "wish_realization",
        "defend_relaxed",
    ]


def test_naval_and_carrier_fallback_order() -> None:
    state = _state()
    ship = AIUnit(
        Unit("ship", "dutch", "caravel", tile=HexCoord(0, 1), naval=True, person=False, capacity=2),
        state,
    )
    factory = _ScriptedFactory()
    planner = _scripted_planner(state, factory)

    assert planner.simple_mission(ship) is None
    assert factory.calls == ["privateer", "transport", "seek_and_destroy8", "wander_hostile"]

    hunt = Mission(MissionKind.SEEK_AND_DESTROY, ship)
    factory = _ScriptedFactory({"seek_and_destroy8": hunt})
    planner = _scripted_planner(state, factory)
    assert planner.simple_mission(ship) is hunt
    assert factory.calls == ["privateer", "transport", "seek_and_destroy8"]

    wagon = AIUnit(
        Unit("w1", "dutch", "wagon_train", tile=HexCoord(1, 1), person=False, capacity=2),
        state,
    )
    factory = _ScriptedFactory()
    planner = _scripted_planner(state, factory)
    assert planner.simple_mission(wagon) is None
    assert factory.calls == ["transport"]


def test_ineligible_units_never_fill_the_builder_quota() -> None:
    state = _state()
    planner = _planner(state)
    colonist = _add(planner, state, _colonist("c1", tile=HexCoord(1, 1)))
    artillery = _add(
        planner,
        state,
        _colonist("a1", tile=HexCoord(2, 1), unit_type="artillery", person=False),
    )

    result = planner.plan_turn([colonist, artillery])

    assert colonist.mission is not None
    assert colonist.mission.kind is MissionKind.BUILD_COLONY
    assert result.reasons["c1"] == "builder2"
    assert artillery.mission is None or artillery.mission.kind is not MissionKind.BUILD_COLONY
    assert result.quotas.builders == 1


def test_new_naval_transport_is_offered_for_allocation() -> None:
    state = _state(can_build=False)
    planner = _planner(state)
    ship = _add(
        planner,
        state,
        Unit("ship", "dutch", "caravel", tile=HexCoord(0, 1), naval=True, person=False, capacity=2),
    )

    result = planner.plan_turn([ship])

    assert ship.mission is not None
    assert ship.mission.kind is MissionKind.TRANSPORT
    assert result.reasons["ship"] == "new-naval"
    assert ship.mission in result.transport_candidates
