from strategist.model.factions import Faction
from strategist.model.transport import HOMELAND
from strategist.model.units import AIUnit, Unit
from strategist.world.map import GameMap, HexCoord
from strategist.world.state import GameState

ROWS = (
    "~~~~~",
    "~...~",
    "~~~~~",
)


def _state() -> GameState:
    return GameState(GameMap.from_rows(ROWS), factions=[Faction("dutch")])


def _ship(**overrides: object) -> Unit:
    fields: dict[str, object] = {
        "identifier": "c1",
        "owner": "dutch",
        "unit_type": "caravel",
        "naval": True,
        "person": False,
        "capacity": 2,
    }
    fields.update(overrides)
    return Unit(**fields)  # type: ignore[arg-type]


def test_passenger_of_a_ship_in_the_homeland_is_in_the_homeland() -> None:
    state = _state()
    state.add_unit(_ship(in_homeland=True))
    colonist = state.add_unit(Unit("u1", "dutch", "free_colonist", carrier_id="c1"))
    passenger = AIUnit(colonist, state)

    assert passenger.location() == HOMELAND
    assert passenger.transport_source() == HOMELAND


def test_passenger_of_a_ship_on_the_map_is_on_its_tile() -> None:
    state = _state()
    state.add_unit(_ship(tile=HexCoord(0, 1)))
    colonist = state.add_unit(Unit("u1", "dutch", "free_colonist", carrier_id="c1"))

    assert AIUnit(colonist, state).location() == HexCoord(0, 1)


def test_nested_carriers_resolve_to_the_outermost() -> None:
    state = _state()
    state.add_unit(_ship(tile=HexCoord(0, 1)))
    state.add_unit(
        Unit("w1", "dutch", "wagon_train", person=False, capacity=2, carrier_id="c1")
    )
    colonist = state.add_unit(Unit("u1", "dutch", "free_colonist", carrier_id="w1"))

    assert AIUnit(colonist, state).location() == HexCoord(0, 1)


def test_missing_or_cyclic_carrier_has_no_location() -> None:
    state = _state()
    lost = state.add_unit(Unit("u1", "dutch", "free_colonist", carrier_id="gone"))
    assert AIUnit(lost, state).location() is None

    state.add_unit(_ship(identifier="a", carrier_id="b"))
    state.add_unit(_ship(identifier="b", carrier_id="a"))
    assert AIUnit(state.unit("a"), state).location() is None  # type: ignore[arg-type]


def test_unit_standing_on_a_tile() -> None:
    state = _state()
    colonist = state.add_unit(Unit("u1", "dutch", "free_colonist", tile=HexCoord(2, 1)))

    assert AIUnit(colonist, state).location() == HexCoord(2, 1)
