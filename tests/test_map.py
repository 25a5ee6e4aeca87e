import pytest

from strategist.model.units import Unit
from strategist.world.map import HOMELAND, GameMap, HexCoord, Terrain

ROWS = (
    "~~~~~",
    "~..~.",
    "~.h~.",
    "~~~~~",
)


def _unit(**overrides: object) -> Unit:
    fields: dict[str, object] = {"identifier": "u1", "owner": "dutch", "unit_type": "colonist"}
    fields.update(overrides)
    return Unit(**fields)  # type: ignore[arg-type]


def test_from_rows_maps_symbols_to_terrain() -> None:
    game_map = GameMap.from_rows(ROWS)

    assert len(game_map) == 20
    assert game_map.terrain(HexCoord(2, 2)) is Terrain.HILLS
    assert game_map.is_land(HexCoord(1, 1))
    assert not game_map.is_land(HexCoord(0, 0))
    assert HexCoord(9, 9) not in game_map


def test_from_rows_rejects_unknown_symbols() -> None:
    with pytest.raises(ValueError):
        GameMap.from_rows(["~x~"])


def test_contiguity_separates_landmasses_and_water() -> None:
    game_map = GameMap.from_rows(ROWS)

    west = game_map.contiguity(HexCoord(1, 1))
    assert west is not None and west > 0
    assert game_map.contiguity(HexCoord(2, 2)) == west
    east = game_map.contiguity(HexCoord(4, 1))
    assert east is not None and east > 0 and east != west
    ocean = game_map.contiguity(HexCoord(0, 0))
    assert ocean is not None and ocean < 0
    assert game_map.contiguity(HOMELAND) is None


def test_land_turns_follow_terrain_costs() -> None:
    game_map = GameMap.from_rows(ROWS)
    start, hills = HexCoord(1, 1), HexCoord(2, 2)

    assert game_map.turns_to_reach(_unit(), start, start) == 0
    assert game_map.turns_to_reach(_unit(), start, hills) == 3
    assert game_map.turns_to_reach(_unit(moves_per_turn=2), start, hills) == 2
    assert game_map.turns_to_reach(_unit(), start, hills, relaxed=True) == 2


def test_land_units_can_not_walk_across_water() -> None:
    game_map = GameMap.from_rows(ROWS)

    assert game_map.turns_to_reach(_unit(), HexCoord(1, 1), HexCoord(4, 1)) is None
    carried = _unit(carrier_id="ship")
    assert game_map.turns_to_reach(carried, HexCoord(1, 1), HexCoord(4, 1)) is not None


def test_naval_units_stay_on_water_until_their_destination() -> None:
    game_map = GameMap.from_rows(ROWS)
    ship = _unit(naval=True, person=False, capacity=2)

    assert game_map.turns_to_reach(ship, HexCoord(0, 1), HexCoord(3, 1)) is not None
    assert game_map.turns_to_reach(ship, HexCoord(0, 1), HexCoord(4, 1)) is not None
    path = game_map.path(ship, HexCoord(0, 1), HexCoord(3, 1))
    assert path is not None
    assert all(game_map.terrain(tile).is_water for tile in path)


def test_homeland_needs_a_ship_and_a_coast() -> None:
    game_map = GameMap.from_rows(ROWS, homeland_turns=2)

    assert game_map.turns_to_reach(_unit(), HexCoord(1, 1), HOMELAND) is None
    assert game_map.turns_to_reach(_unit(in_homeland=True), HOMELAND, HexCoord(1, 1)) == 2
    ship = _unit(naval=True, person=False)
    assert game_map.turns_to_reach(ship, HexCoord(0, 1), HOMELAND) == 2


def test_site_value_prefers_coastal_land_and_skips_owned_tiles() -> None:
    game_map = GameMap.from_rows(ROWS)

    assert game_map.site_value(HexCoord(1, 1)) == 4
    assert game_map.site_value(HexCoord(2, 2)) == 3
    assert game_map.site_value(HexCoord(0, 0)) == 0

    game_map.set_owner(HexCoord(1, 1), "english")
    assert game_map.site_value(HexCoord(1, 1)) == 0
