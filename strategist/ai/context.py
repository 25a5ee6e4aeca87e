"""Shared collaborators handed to every planning component."""

from __future__ import annotations

from dataclasses import dataclass, field

from ..config import PlannerConfig
from ..model.factions import Faction
from ..model.settlements import Settlement
from ..model.transport import Location
from ..model.units import AIUnit
from ..world.oracles import Reachability, Roster


@dataclass
class PlanningContext:
    """The faction being planned for and the oracles it may consult."""

    owner: str
    roster: Roster
    reachability: Reachability
    config: PlannerConfig = field(default_factory=PlannerConfig)
    ai_units: dict[str, AIUnit] = field(default_factory=dict)

    def faction(self) -> Faction | None:
        return self.roster.faction(self.owner)

    def settlements(self) -> list[Settlement]:
        return self.roster.settlements_of(self.owner)

    def ai_unit(self, identifier: str) -> AIUnit | None:
        return self.ai_units.get(identifier)

    def passengers_of(self, carrier: AIUnit) -> list[AIUnit]:
        return [
            ai_unit
            for ai_unit in self.ai_units.values()
            if ai_unit.unit.carrier_id == carrier.identifier and not ai_unit.is_disposed()
        ]

    def turns(self, ai_unit: AIUnit, target: Location | None, relaxed: bool = False) -> int | None:
        """Turns for ``ai_unit`` to reach ``target`` from where it stands."""

        if target is None:
            return None
        return self.reachability.turns_to_reach(
            ai_unit.unit, ai_unit.location(), target, relaxed
        )


__all__ = ["PlanningContext"]
