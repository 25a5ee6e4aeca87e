"""Greedy matching of waiting units and goods against carriers."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Iterable

from ..errors import InfeasibleCargoError
from ..model.missions import Mission
from ..model.settlements import Settlement
from ..model.transport import AIGoods, Location, Transportable
from ..model.units import AIUnit
from ..world.oracles import Reachability, Roster
from .missions import invalid_reason
from .wishes import WishRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CargoProposal:
    """What it would take for ``carrier`` to deliver ``transportable``."""

    transportable: Transportable
    carrier: AIUnit
    turns: int
    destination: Location


class TransportCoordinator:
    """Per-turn supply of transportables and the carriers able to move them."""

    def __init__(self, roster: Roster, reachability: Reachability, wishes: WishRegistry) -> None:
        self.roster = roster
        self.reachability = reachability
        self.wishes = wishes
        self._supply: list[Transportable] = []
        self._wagons: dict[int, int] = {}
        self.naval_carriers_needed = 0

    @property
    def supply(self) -> tuple[Transportable, ...]:
        return tuple(self._supply)

    def clear(self) -> None:
        self._supply.clear()
        self._wagons.clear()
        self.naval_carriers_needed = 0
        self.wishes.clear_demand()

    # ------------------------------------------------------------------
    def _change_wagons(self, location: object, amount: int) -> None:
        contiguity = self.roster.contiguity(location)
        if contiguity is not None and contiguity in self._wagons:
            self._wagons[contiguity] += amount

    def needed_wagons(self, location: object) -> int:
        contiguity = self.roster.contiguity(location)
        return max(0, self._wagons.get(contiguity, 0)) if contiguity is not None else 0

    def _check_transport(self, transportable: Transportable) -> None:
        """Clear a carrier reference the carrier no longer acknowledges."""

        carrier = transportable.carrier
        if carrier is None:
            return
        mission = carrier.mission
        if (
            carrier.is_disposed()
            or mission is None
            or mission.manifest is None
            or not mission.manifest.is_transporting(transportable)
        ):
            logger.debug("%r dropped by %r, returning to supply", transportable, carrier)
            transportable.change_transport(None)

    def _offer(self, transportable: Transportable) -> bool:
        self._check_transport(transportable)
        if not transportable.requests_transport():
            return False
        if not any(item is transportable for item in self._supply):
            self._supply.append(transportable)
        transportable.increment_transport_priority()
        return True

    def rebuild(self, units: Iterable[AIUnit], settlements: Iterable[Settlement]) -> None:
        self.clear()
        settlements = list(settlements)
        for settlement in settlements:
            if settlement.connected_port:
                contiguity = self.roster.contiguity(settlement.tile)
                if contiguity is not None:
                    self._wagons[contiguity] = 0

        for ai_unit in units:
            if ai_unit.is_disposed():
                continue
            mission = ai_unit.mission
            if mission is not None and invalid_reason(mission, self.roster) is not None:
                continue
            unit = ai_unit.unit
            if unit.is_carrier:
                if unit.naval:
                    self.naval_carriers_needed -= 1
                else:
                    self._change_wagons(unit.tile, -1)
            elif self._offer(ai_unit):
                self.naval_carriers_needed += 1

        for settlement in settlements:
            for goods in settlement.exports:
                if goods.is_disposed():
                    continue
                if self._offer(goods):
                    source = self.roster.contiguity(goods.transport_source())
                    target = self.roster.contiguity(goods.transport_destination())
                    if source != target:
                        self.naval_carriers_needed += 1
            if not settlement.connected_port:
                self._change_wagons(settlement.tile, 1)

        for settlement in settlements:
            for wish in settlement.wishes:
                bound = wish.transportable
                if (
                    bound is not None
                    and bound.carrier is None
                    and bound.transport_destination() is not None
                ):
                    self.wishes.index_demand(wish)
        logger.debug(
            "transport rebuilt: supply=%d naval-needed=%d",
            len(self._supply),
            self.naval_carriers_needed,
        )

    # ------------------------------------------------------------------
    def urgent_transportables(self) -> list[Transportable]:
        """The most urgent tenth of the supply, never fewer than two entries."""

        ordered = sorted(self._supply, key=lambda t: t.transport_priority, reverse=True)
        return ordered[: max(2, (len(ordered) + 5) // 10)]

    def claim(self, transportable: Transportable) -> bool:
        for index, item in enumerate(self._supply):
            if item is transportable:
                del self._supply[index]
                return True
        return False

    def add_supply(self, transportable: Transportable) -> bool:
        """Offer a transportable whose mission changed during planning."""

        if transportable.requests_transport() and not any(
            item is transportable for item in self._supply
        ):
            self._supply.append(transportable)
            if transportable.transport_priority == 0:
                transportable.increment_transport_priority()
            return True
        return False

    def discard_settlement(self, settlement_id: str) -> int:
        """Drop goods parcels of a lost settlement from the supply."""

        doomed = [
            item
            for item in self._supply
            if isinstance(item, AIGoods) and item.settlement_id == settlement_id
        ]
        for item in doomed:
            self.claim(item)
        return len(doomed)

    def make_cargo(self, mission: Mission, transportable: Transportable) -> CargoProposal:
        source = transportable.transport_source()
        destination = transportable.transport_destination()
        if source is None or destination is None:
            raise InfeasibleCargoError(transportable, "no source or destination")
        carrier = mission.unit
        turns = self.reachability.turns_to_reach(carrier.unit, carrier.location(), source)
        if turns is None:
            raise InfeasibleCargoError(transportable, f"{carrier} can not reach {source}")
        if self.reachability.turns_to_reach(carrier.unit, source, destination) is None:
            raise InfeasibleCargoError(
                transportable, f"{carrier} can not deliver to {destination}"
            )
        return CargoProposal(transportable, carrier, turns, destination)

    def allocate(self, carrier_missions: Iterable[Mission]) -> list[tuple[Transportable, AIUnit]]:
        """Greedily assign urgent transportables to carriers with spare room."""

        carriers = [m for m in carrier_missions if m.manifest is not None]
        assignments: list[tuple[Transportable, AIUnit]] = []
        for transportable in self.urgent_transportables():
            if not carriers:
                break
            best: Mission | None = None
            best_value = 0.0
            present = False
            infeasible = False
            for mission in carriers:
                manifest = mission.manifest
                assert manifest is not None
                if not manifest.has_space(transportable):
                    continue
                try:
                    cargo = self.make_cargo(mission, transportable)
                except InfeasibleCargoError as exc:
                    logger.debug("dropping %r this turn: %s", transportable, exc.reason)
                    infeasible = True
                    break
                if cargo.turns == 0:
                    value = float(manifest.destination_capacity())
                    if not present:
                        best_value = 0.0
                    present = True
                else:
                    value = -1.0 if present else transportable.transport_priority / cargo.turns
                if best_value < value:
                    best, best_value = mission, value
            if infeasible:
                self.claim(transportable)
                continue
            if best is None:
                continue
            manifest = best.manifest
            assert manifest is not None
            if manifest.queue(transportable):
                self.claim(transportable)
                assignments.append((transportable, best.unit))
                logger.debug("%r assigned to %r", transportable, best.unit)
                if manifest.is_full():
                    carriers.remove(best)
            else:
                carriers.remove(best)
        return assignments


__all__ = ["CargoProposal", "TransportCoordinator"]
