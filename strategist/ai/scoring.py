"""Suitability scores used to rank units for quota missions."""

from __future__ import annotations

from typing import Callable, Iterable

from ..model.missions import MissionKind
from ..model.units import AIUnit, Ability, UnitRole

INELIGIBLE = -1000

Score = Callable[[AIUnit], int]


def builder_score(ai_unit: AIUnit, *, can_build: bool = True) -> int:
    """Prefer unequipped, unskilled colonists already standing on the map."""

    unit = ai_unit.unit
    if not can_build or not unit.is_colonist or unit.in_mission_post:
        return INELIGIBLE
    if not unit.has_default_role:
        score = 0
    elif unit.skill > 0:
        score = 100
    else:
        score = 500 + 100 * unit.skill
    if unit.on_map:
        score += 50
    return score


def scout_score(ai_unit: AIUnit) -> int:
    unit = ai_unit.unit
    if not unit.is_colonist:
        return INELIGIBLE
    if unit.role is UnitRole.SCOUT:
        return 900 + (100 if unit.on_map else 0)
    if unit.has_ability(Ability.EXPERT_SCOUT):
        return 600
    if not unit.has_default_role:
        return 100
    if unit.skill <= 0:
        return 200
    return 0


def pioneer_score(ai_unit: AIUnit) -> int:
    unit = ai_unit.unit
    if not unit.is_colonist:
        return INELIGIBLE
    if unit.role is UnitRole.PIONEER:
        return 900 + (100 if unit.on_map else 0)
    if unit.has_ability(Ability.EXPERT_PIONEER):
        return 600
    if not unit.has_default_role:
        return 100
    if unit.skill > 0:
        return 200
    return 200 + 50 * unit.skill


def rank(units: Iterable[AIUnit], score: Score) -> list[tuple[AIUnit, int]]:
    """Sort by descending score; equal scores keep their original order."""

    scored = [(ai_unit, score(ai_unit)) for ai_unit in units]
    return sorted(scored, key=lambda pair: pair[1], reverse=True)


def adjust_mission_score(
    kind: MissionKind, base_value: int, defenders: int, stockade_level: int
) -> int:
    """Discount a defence candidate that is already well garrisoned."""

    value = base_value
    if value <= 0 or kind is not MissionKind.DEFEND_SETTLEMENT:
        return value
    value -= 25 * defenders
    if stockade_level > 0:
        if defenders > stockade_level + 1:
            value -= 100 * stockade_level
        else:
            value -= 20 * stockade_level
    return value


__all__ = [
    "INELIGIBLE",
    "adjust_mission_score",
    "builder_score",
    "pioneer_score",
    "rank",
    "scout_score",
]
