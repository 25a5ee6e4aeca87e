"""Collaborator interfaces consumed by the planning engine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, Protocol

if TYPE_CHECKING:  # pragma: no cover - typing only
    from ..model.factions import Faction, NationSummary, Stance
    from ..model.settlements import Settlement
    from ..model.units import AIUnit, Unit
    from .map import GameMap, HexCoord


@dataclass(frozen=True)
class StepResult:
    """Outcome of advancing one unit's mission by a single step."""

    moves_left: bool = False
    disposed: bool = False
    target_changed: bool = False


class Roster(Protocol):
    """Read access to the faction's units and settlements."""

    turn: int
    age: int
    map: GameMap

    def faction(self, name: str) -> Faction | None: ...

    def factions(self) -> Iterable[Faction]: ...

    def unit(self, identifier: str) -> Unit | None: ...

    def units_of(self, owner: str) -> Iterable[Unit]: ...

    def settlements(self) -> Iterable[Settlement]: ...

    def settlements_of(self, owner: str) -> list[Settlement]: ...

    def settlement(self, identifier: str) -> Settlement | None: ...

    def settlement_at(self, tile: HexCoord) -> Settlement | None: ...

    def homeland_units(self, owner: str) -> list[Unit]: ...

    def contiguity(self, location: object) -> int | None: ...

    def is_storable(self, goods_type: str) -> bool: ...

    def controller(self, owner: str) -> object | None: ...

    def hostile_targets(self, owner: str, *, naval: bool) -> list[HexCoord]: ...


class Reachability(Protocol):
    def turns_to_reach(
        self, unit: Unit, source: object, target: object, relaxed: bool = False
    ) -> int | None: ...


class StrengthOracle(Protocol):
    def summary(self, faction: str) -> NationSummary:
        """Raise :class:`~strategist.errors.RemoteQueryError` when unavailable."""
        ...


class MarketOracle(Protocol):
    def bid_price(self, goods_type: str, amount: int) -> int: ...

    def sale_price(self, goods_type: str, amount: int) -> int: ...

    def unit_price(self, unit_type: str) -> int: ...


class MissionExecutor(Protocol):
    def execute(self, ai_unit: AIUnit) -> StepResult: ...


class ServerConnection(Protocol):
    """Remote actions; every call may silently have no effect."""

    def train_unit(self, owner: str, unit_type: str) -> Unit | None: ...

    def recruit_unit(self, owner: str, slot: int) -> Unit | None: ...

    def emigrate(self, owner: str) -> Unit | None: ...

    def change_stance(self, owner: str, other: str, stance: Stance) -> bool: ...


class StanceAdvisor(Protocol):
    def desired_stance(self, owner: str, other: str) -> Stance | None: ...


class SettlementManager(Protocol):
    def rearrange_workers(self, settlement: Settlement) -> None: ...


__all__ = [
    "MarketOracle",
    "MissionExecutor",
    "Reachability",
    "Roster",
    "ServerConnection",
    "SettlementManager",
    "StanceAdvisor",
    "StepResult",
    "StrengthOracle",
]
