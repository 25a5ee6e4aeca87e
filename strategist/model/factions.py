"""Factions, their mutual stances and per-turn strength summaries."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Stance(str, Enum):
    UNCONTACTED = "uncontacted"
    PEACE = "peace"
    CEASE_FIRE = "cease_fire"
    ALLIANCE = "alliance"
    WAR = "war"


class TensionLevel(int, Enum):
    """Mood toward another faction, from the raw tension value."""

    HAPPY = 0
    CONTENT = 1
    DISPLEASED = 2
    ANGRY = 3
    HATEFUL = 4

    @classmethod
    def of(cls, value: int) -> "TensionLevel":
        for level, limit in _TENSION_LIMITS:
            if value <= limit:
                return level
        return cls.HATEFUL


_TENSION_LIMITS: tuple[tuple[TensionLevel, int], ...] = (
    (TensionLevel.HAPPY, 100),
    (TensionLevel.CONTENT, 600),
    (TensionLevel.DISPLEASED, 700),
    (TensionLevel.ANGRY, 800),
)


@dataclass(frozen=True)
class FoundingFather:
    """A political figure offered to a faction; ``weights`` are per age."""

    name: str
    weights: tuple[int, ...] = (0, 0, 0)
    abilities: frozenset[str] = frozenset()

    def weight(self, age: int) -> int:
        if not self.weights:
            return 0
        index = min(max(age, 1), len(self.weights)) - 1
        return self.weights[index]


@dataclass(frozen=True)
class StanceEvent:
    """A recorded stance change between this faction and ``other``."""

    turn: int
    other: str
    stance: Stance


@dataclass
class Faction:
    """A player in the simulation, human or computer controlled."""

    name: str
    can_build_settlements: bool = True
    gold: int = 0
    stances: dict[str, Stance] = field(default_factory=dict)
    special: bool = False
    perpetual_peace: bool = False
    alive: bool = True
    history: list[StanceEvent] = field(default_factory=list)
    tax: int = 0
    # Strategic leaning such as "conquest" or "trade"; None when balanced.
    advantage: str | None = None
    tension: dict[str, int] = field(default_factory=dict)

    def stance_towards(self, other: str) -> Stance:
        return self.stances.get(other, Stance.UNCONTACTED)

    def at_war_with(self, other: str) -> bool:
        return self.stance_towards(other) is Stance.WAR

    def at_war(self) -> bool:
        return any(stance is Stance.WAR for stance in self.stances.values())

    def tension_towards(self, other: str) -> int:
        return self.tension.get(other, 0)

    def set_stance(self, other: str, stance: Stance, *, turn: int) -> bool:
        """Record a stance change; return False when nothing changed."""

        if self.stance_towards(other) is stance:
            return False
        self.stances[other] = stance
        self.history.append(StanceEvent(turn=turn, other=other, stance=stance))
        return True

    def last_treaty_turn(self, other: str) -> int | None:
        """Turn of the most recent peace or alliance with ``other``.

        A later declaration of war cancels the treaty.
        """

        treaty: int | None = None
        for event in self.history:
            if event.other != other:
                continue
            if event.stance in (Stance.PEACE, Stance.ALLIANCE):
                treaty = event.turn
            elif event.stance is Stance.WAR:
                treaty = None
        return treaty


@dataclass(frozen=True)
class NationSummary:
    """Military and naval strength of one faction; negative means unknown."""

    faction: str
    military_strength: float
    naval_strength: float


__all__ = [
    "Faction",
    "FoundingFather",
    "NationSummary",
    "Stance",
    "StanceEvent",
    "TensionLevel",
]
