from strategist.ai.scoring import (
    INELIGIBLE,
    adjust_mission_score,
    builder_score,
    pioneer_score,
    rank,
    scout_score,
)
from strategist.model.missions import MissionKind
from strategist.model.units import AIUnit, Ability, Unit, UnitRole
from strategist.world.map import HexCoord


def _ai(identifier: str = "u1", **overrides: object) -> AIUnit:
    fields: dict[str, object] = {
        "identifier": identifier,
        "owner": "dutch",
        "unit_type": "free_colonist",
    }
    fields.update(overrides)
    return AIUnit(Unit(**fields), roster=None)  # type: ignore[arg-type]


def test_builder_score_prefers_plain_colonists_on_the_map() -> None:
    assert builder_score(_ai(tile=HexCoord(1, 1))) == 550
    assert builder_score(_ai(in_homeland=True)) == 500
    assert builder_score(_ai(skill=2)) == 100
    assert builder_score(_ai(role=UnitRole.SOLDIER)) == 0
    assert builder_score(_ai(naval=True, person=False)) == INELIGIBLE
    assert builder_score(_ai(), can_build=False) == INELIGIBLE
    assert builder_score(_ai(in_mission_post=True)) == INELIGIBLE


def test_scout_score_ranks_equipped_scouts_first() -> None:
    assert scout_score(_ai(role=UnitRole.SCOUT, tile=HexCoord(1, 1))) == 1000
    assert scout_score(_ai(role=UnitRole.SCOUT)) == 900
    assert scout_score(_ai(abilities=frozenset({Ability.EXPERT_SCOUT}))) == 600
    assert scout_score(_ai(role=UnitRole.PIONEER)) == 100
    assert scout_score(_ai()) == 200
    assert scout_score(_ai(skill=1)) == 0
    assert scout_score(_ai(naval=True, person=False)) == INELIGIBLE


def test_pioneer_score_ranks_equipped_pioneers_first() -> None:
    assert pioneer_score(_ai(role=UnitRole.PIONEER)) == 900
    assert pioneer_score(_ai(abilities=frozenset({Ability.EXPERT_PIONEER}))) == 600
    assert pioneer_score(_ai(role=UnitRole.SCOUT)) == 100
    assert pioneer_score(_ai(skill=1)) == 200
    assert pioneer_score(_ai()) == 200


def test_rank_is_descending_and_stable() -> None:
    first, second, third = _ai("a"), _ai("b"), _ai("c", role=UnitRole.SCOUT)

    ranked = rank([first, second, third], scout_score)

    assert [ai_unit.identifier for ai_unit, _ in ranked] == ["c", "a", "b"]
    assert [value for _, value in ranked] == [900, 200, 200]


def test_adjust_mission_score_discounts_garrisoned_settlements() -> None:
    defend = MissionKind.DEFEND_SETTLEMENT

    assert adjust_mission_score(defend, 150, 0, 0) == 150
    assert adjust_mission_score(defend, 150, 2, 0) == 100
    assert adjust_mission_score(defend, 150, 1, 1) == 105
    assert adjust_mission_score(defend, 150, 3, 1) == -25


def test_adjust_mission_score_leaves_other_values_alone() -> None:
    assert adjust_mission_score(MissionKind.SCOUT, 150, 5, 2) == 150
    assert adjust_mission_score(MissionKind.DEFEND_SETTLEMENT, 0, 5, 2) == 0
