"""Game units and their AI wrappers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from .transport import HOMELAND, Location, Transportable, TransportableKind

if TYPE_CHECKING:  # pragma: no cover - typing only
    from ..world.map import HexCoord
    from ..world.oracles import Roster
    from .missions import Mission


class UnitRole(str, Enum):
    """Equipment role carried by a unit."""

    DEFAULT = "default"
    SCOUT = "scout"
    PIONEER = "pioneer"
    SOLDIER = "soldier"
    DRAGOON = "dragoon"
    MISSIONARY = "missionary"


class Ability:
    """Ability keys understood by the planner."""

    EXPERT_SCOUT = "expert_scout"
    EXPERT_PIONEER = "expert_pioneer"
    EXPERT_MISSIONARY = "expert_missionary"
    PRIVATEER = "privateer"
    OFFENSIVE = "offensive"
    CAN_BE_EQUIPPED = "can_be_equipped"


@dataclass
class Unit:
    """Snapshot of a unit as reported by the game roster."""

    identifier: str
    owner: str
    unit_type: str
    tile: HexCoord | None = None
    carrier_id: str | None = None
    in_homeland: bool = False
    naval: bool = False
    person: bool = True
    capacity: int = 0
    skill: int = 0
    role: UnitRole = UnitRole.DEFAULT
    abilities: frozenset[str] = field(default_factory=frozenset)
    damaged: bool = False
    disposed: bool = False
    at_sea: bool = False
    settlement_id: str | None = None
    in_mission_post: bool = False
    moves_per_turn: int = 1
    moves_left: int = 1
    treasure: int = 0
    offence: float = 0.0

    @property
    def is_colonist(self) -> bool:
        return self.person and not self.naval

    @property
    def is_carrier(self) -> bool:
        return self.capacity > 0

    @property
    def has_default_role(self) -> bool:
        return self.role is UnitRole.DEFAULT

    @property
    def is_offensive(self) -> bool:
        return (
            self.role in (UnitRole.SOLDIER, UnitRole.DRAGOON)
            or Ability.OFFENSIVE in self.abilities
        )

    @property
    def is_in_settlement(self) -> bool:
        return self.settlement_id is not None

    @property
    def on_map(self) -> bool:
        return self.tile is not None

    def has_ability(self, ability: str) -> bool:
        return ability in self.abilities

    def __str__(self) -> str:
        return f"{self.unit_type}#{self.identifier}"


class AIUnit(Transportable):
    """A unit under AI control, holding at most one mission."""

    kind = TransportableKind.UNIT

    def __init__(self, unit: Unit, roster: Roster) -> None:
        super().__init__()
        self.unit = unit
        self.roster = roster
        self._mission: Mission | None = None

    @property
    def identifier(self) -> str:
        return self.unit.identifier

    @property
    def mission(self) -> Mission | None:
        return self._mission

    def change_mission(self, mission: Mission | None) -> Mission | None:
        """Replace the current mission, disposing of the previous one."""

        old = self._mission
        if old is mission:
            return old
        if old is not None:
            old.dispose()
        self._mission = mission
        return old

    # ------------------------------------------------------------------
    def location(self) -> Location | None:
        """Return where the unit is, following carriers up to the outermost one."""

        unit: Unit | None = self.unit
        seen: set[str] = set()
        while unit is not None and unit.identifier not in seen:
            if unit.in_homeland:
                return HOMELAND
            if unit.carrier_id is None:
                return unit.tile
            seen.add(unit.identifier)
            unit = self.roster.unit(unit.carrier_id)
        return None

    def transport_source(self) -> Location | None:
        return self.location()

    def transport_destination(self) -> Location | None:
        mission = self._mission
        if mission is None or mission.target is None:
            return None
        if self.should_take_transport_to(mission.target):
            return mission.target
        return None

    def should_take_transport_to(self, target: Location) -> bool:
        """Return True when ``target`` can not be reached on foot."""

        unit = self.unit
        if unit.naval or unit.disposed:
            return False
        if unit.in_homeland or unit.carrier_id is not None:
            return target != HOMELAND
        if unit.tile is None or target == HOMELAND:
            return target == HOMELAND
        return self.roster.contiguity(unit.tile) != self.roster.contiguity(target)

    def is_aboard(self) -> bool:
        return self.unit.carrier_id is not None

    def is_disposed(self) -> bool:
        return self.unit.disposed

    def __repr__(self) -> str:
        mission = self._mission.kind.value if self._mission else "none"
        return f"AIUnit({self.unit}, mission={mission})"


__all__ = ["AIUnit", "Ability", "Unit", "UnitRole"]
