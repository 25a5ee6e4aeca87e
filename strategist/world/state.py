"""In-memory game state implementing the roster, strength and market oracles."""

from __future__ import annotations

from dataclasses import dataclass, field
from itertools import count
import logging
from typing import Iterable, Iterator

from ..errors import RemoteQueryError
from ..model.factions import Faction, NationSummary, Stance
from ..model.settlements import Settlement
from ..model.units import Unit, UnitRole
from .map import GameMap, HexCoord

logger = logging.getLogger(__name__)


@dataclass
class MarketPrices:
    """Per-unit goods prices and homeland unit prices."""

    bid: dict[str, int] = field(default_factory=dict)
    sale: dict[str, int] = field(default_factory=dict)
    units: dict[str, int] = field(default_factory=dict)
    default_unit_price: int = 600


class GameState:
    """Authoritative world state used by the reference collaborators."""

    def __init__(
        self,
        game_map: GameMap,
        *,
        factions: Iterable[Faction] = (),
        prices: MarketPrices | None = None,
        non_storable: Iterable[str] = ("food", "bells", "crosses", "hammers"),
    ) -> None:
        self.map = game_map
        self.turn = 1
        self.age = 1
        self._factions: dict[str, Faction] = {f.name: f for f in factions}
        self._units: dict[str, Unit] = {}
        self._settlements: dict[str, Settlement] = {}
        self.prices = prices or MarketPrices()
        self.non_storable = frozenset(non_storable)
        self.hidden: set[str] = set()
        self._controllers: dict[str, object] = {}
        self._ids = count(1)
        self.age_length = 50

    def new_turn(self) -> int:
        """Advance the turn counter and restore every unit's movement points."""

        self.turn += 1
        self.age = 1 + (self.turn - 1) // self.age_length
        for unit in self._units.values():
            unit.moves_left = unit.moves_per_turn
        return self.turn

    # ------------------------------------------------------------------
    # Factions
    def faction(self, name: str) -> Faction | None:
        return self._factions.get(name)

    def factions(self) -> Iterator[Faction]:
        return iter(tuple(self._factions.values()))

    def register_controller(self, owner: str, controller: object) -> None:
        self._controllers[owner] = controller

    def controller(self, owner: str) -> object | None:
        return self._controllers.get(owner)

    def set_stance(self, owner: str, other: str, stance: Stance) -> bool:
        """Apply a symmetric stance change; return False when nothing changed."""

        first = self._factions.get(owner)
        second = self._factions.get(other)
        if first is None or second is None:
            return False
        changed = first.set_stance(other, stance, turn=self.turn)
        second.set_stance(owner, stance, turn=self.turn)
        return changed

    # ------------------------------------------------------------------
    # Units
    def next_id(self, prefix: str) -> str:
        return f"{prefix}{next(self._ids)}"

    def add_unit(self, unit: Unit) -> Unit:
        if unit.identifier in self._units:
            raise ValueError(f"duplicate unit identifier {unit.identifier!r}")
        self._units[unit.identifier] = unit
        return unit

    def unit(self, identifier: str) -> Unit | None:
        return self._units.get(identifier)

    def units_of(self, owner: str) -> list[Unit]:
        return [
            unit for unit in self._units.values() if unit.owner == owner and not unit.disposed
        ]

    def homeland_units(self, owner: str) -> list[Unit]:
        return [unit for unit in self.units_of(owner) if unit.in_homeland]

    def passengers(self, carrier_id: str) -> list[Unit]:
        return [
            unit
            for unit in self._units.values()
            if unit.carrier_id == carrier_id and not unit.disposed
        ]

    def dispose_unit(self, identifier: str) -> None:
        unit = self._units.get(identifier)
        if unit is None or unit.disposed:
            return
        unit.disposed = True
        for passenger in self.passengers(identifier):
            passenger.disposed = True
        if unit.settlement_id is not None:
            settlement = self._settlements.get(unit.settlement_id)
            if settlement is not None and identifier in settlement.workers:
                settlement.workers.remove(identifier)
        logger.debug("unit %s disposed", unit)

    def units_at(self, tile: HexCoord) -> list[Unit]:
        return [
            unit
            for unit in self._units.values()
            if unit.tile == tile and not unit.disposed and unit.carrier_id is None
        ]

    # ------------------------------------------------------------------
    # Settlements
    def add_settlement(self, settlement: Settlement) -> Settlement:
        self._settlements[settlement.identifier] = settlement
        self.map.set_owner(settlement.tile, settlement.owner)
        for tile in settlement.owned_tiles:
            if tile in self.map:
                self.map.set_owner(tile, settlement.owner)
        return settlement

    def settlement(self, identifier: str) -> Settlement | None:
        return self._settlements.get(identifier)

    def settlements(self) -> Iterator[Settlement]:
        return iter(tuple(self._settlements.values()))

    def settlements_of(self, owner: str) -> list[Settlement]:
        return [s for s in self._settlements.values() if s.owner == owner]

    def settlement_at(self, tile: HexCoord) -> Settlement | None:
        for settlement in self._settlements.values():
            if settlement.tile == tile:
                return settlement
        return None

    def found_settlement(self, unit: Unit, name: str | None = None) -> Settlement:
        """Found a settlement at ``unit``'s tile and put the unit to work there."""

        if unit.tile is None:
            raise ValueError("unit must be on the map to found a settlement")
        identifier = self.next_id("s")
        owned = {
            tile
            for tile in unit.tile.neighbors()
            if self.map.is_land(tile) and self.map.owner(tile) is None
        }
        settlement = Settlement(
            identifier=identifier,
            name=name or f"Settlement {identifier}",
            owner=unit.owner,
            tile=unit.tile,
            connected_port=self.map.is_coastal(unit.tile),
            owned_tiles=owned,
        )
        self.add_settlement(settlement)
        self.join_settlement(unit, settlement)
        return settlement

    def join_settlement(self, unit: Unit, settlement: Settlement) -> None:
        unit.tile = settlement.tile
        unit.carrier_id = None
        unit.in_homeland = False
        unit.settlement_id = settlement.identifier
        if unit.identifier not in settlement.workers:
            settlement.workers.append(unit.identifier)

    # ------------------------------------------------------------------
    # Queries used by the planner
    def contiguity(self, location: object) -> int | None:
        return self.map.contiguity(location)

    def is_storable(self, goods_type: str) -> bool:
        return goods_type not in self.non_storable

    def hostile_targets(self, owner: str, *, naval: bool) -> list[HexCoord]:
        faction = self._factions.get(owner)
        if faction is None:
            return []
        enemies = {name for name, stance in faction.stances.items() if stance is Stance.WAR}
        targets: list[HexCoord] = []
        for unit in self._units.values():
            if unit.owner in enemies and not unit.disposed and unit.tile is not None:
                if unit.naval is naval and unit.carrier_id is None:
                    targets.append(unit.tile)
        if not naval:
            targets.extend(s.tile for s in self._settlements.values() if s.owner in enemies)
        return list(dict.fromkeys(targets))

    # ------------------------------------------------------------------
    # Strength oracle
    def summary(self, faction: str) -> NationSummary:
        if faction in self.hidden or faction not in self._factions:
            raise RemoteQueryError(f"no strength report for {faction!r}")
        military = 0.0
        naval = 0.0
        for unit in self.units_of(faction):
            if unit.naval:
                naval += unit.offence
            elif unit.role in (UnitRole.SOLDIER, UnitRole.DRAGOON) or unit.offence > 0:
                military += unit.offence
        return NationSummary(faction=faction, military_strength=military, naval_strength=naval)

    # ------------------------------------------------------------------
    # Market oracle
    def bid_price(self, goods_type: str, amount: int) -> int:
        return self.prices.bid.get(goods_type, 0) * amount

    def sale_price(self, goods_type: str, amount: int) -> int:
        return self.prices.sale.get(goods_type, 0) * amount

    def unit_price(self, unit_type: str) -> int:
        return self.prices.units.get(unit_type, self.prices.default_unit_price)


__all__ = ["GameState", "MarketPrices"]
