"""Keeps this faction's stances toward the others in line with its advisor."""

from __future__ import annotations

import logging

from ..model.factions import Stance
from ..rng import AIRandomness
from ..world.oracles import Roster, ServerConnection, StanceAdvisor

logger = logging.getLogger(__name__)

_RNG_STREAM = "stances"


class StanceManager:
    def __init__(
        self,
        owner: str,
        roster: Roster,
        server: ServerConnection,
        advisor: StanceAdvisor,
        randomness: AIRandomness,
        *,
        peace_probability: int = 90,
    ) -> None:
        self.owner = owner
        self.roster = roster
        self.server = server
        self.advisor = advisor
        self.randomness = randomness
        self.peace_probability = peace_probability

    def peace_holds(self, other: str) -> bool:
        """True while a recent peace treaty with ``other`` still restrains war.

        The chance decays geometrically with the turns since the treaty.
        """

        faction = self.roster.faction(self.owner)
        if faction is None:
            return False
        treaty = faction.last_treaty_turn(other)
        if treaty is None:
            return False
        elapsed = max(0, self.roster.turn - treaty)
        probability = (self.peace_probability / 100.0) ** elapsed
        return self.randomness.random_int(_RNG_STREAM, 100) < 100 * probability

    def determine_stances(self) -> dict[str, Stance]:
        """Request every stance change the advisor wants; return the ones made."""

        faction = self.roster.faction(self.owner)
        if faction is None:
            return {}
        changed: dict[str, Stance] = {}
        for other in self.roster.factions():
            if other.name == self.owner or not other.alive:
                continue
            current = faction.stance_towards(other.name)
            if current is Stance.UNCONTACTED:
                continue
            desired = self.advisor.desired_stance(self.owner, other.name)
            if desired is None or desired is current:
                continue
            if desired is Stance.WAR and self.peace_holds(other.name):
                logger.info("%s keeps the peace with %s", self.owner, other.name)
                continue
            if self.server.change_stance(self.owner, other.name, desired):
                logger.info("%s now at %s with %s", self.owner, desired.value, other.name)
                changed[other.name] = desired
            else:
                logger.info(
                    "%s failed to change stance to %s with %s",
                    self.owner,
                    desired.value,
                    other.name,
                )
        return changed


class StrengthStanceAdvisor:
    """Wants war on much weaker rivals and peace with much stronger ones."""

    def __init__(self, strength_ratio, *, war_above: float = 0.8, peace_below: float = 0.3) -> None:
        self.strength_ratio = strength_ratio
        self.war_above = war_above
        self.peace_below = peace_below

    def desired_stance(self, owner: str, other: str) -> Stance | None:
        ratio = self.strength_ratio(other)
        if ratio < 0:
            return None
        if ratio > self.war_above:
            return Stance.WAR
        if ratio < self.peace_below:
            return Stance.PEACE
        return None


__all__ = ["StanceManager", "StrengthStanceAdvisor"]
