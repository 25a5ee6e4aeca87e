"""Index of outstanding settlement wishes, rebuilt every turn."""

from __future__ import annotations

import logging
import math
from typing import Callable, Iterable

from ..model.settlements import Settlement
from ..model.transport import Location, Transportable
from ..model.units import AIUnit
from ..model.wishes import Wish, WishKind
from ..world.oracles import Reachability

logger = logging.getLogger(__name__)


def _remove_identity(bucket: list[Wish], wish: Wish) -> bool:
    for index, candidate in enumerate(bucket):
        if candidate is wish:
            del bucket[index]
            return True
    return False


class WishRegistry:
    """Buckets worker wishes by unit type and goods wishes by goods type.

    Every wish held here is still outstanding; callers retire wishes through
    :meth:`consume` and :meth:`complete`.
    """

    def __init__(self, reachability: Reachability) -> None:
        self.reachability = reachability
        self._workers: dict[str, list[Wish]] = {}
        self._goods: dict[str, list[Wish]] = {}
        self._demand: dict[Location, list[Wish]] = {}

    def __len__(self) -> int:
        return sum(len(b) for b in self._workers.values()) + sum(
            len(b) for b in self._goods.values()
        )

    def clear(self) -> None:
        self._workers.clear()
        self._goods.clear()
        self._demand.clear()

    def rebuild(
        self, settlements: Iterable[Settlement], is_storable: Callable[[str], bool]
    ) -> None:
        self.clear()
        settlements = list(settlements)
        known = {settlement.identifier for settlement in settlements}
        wishes = [wish for settlement in settlements for wish in settlement.wishes]
        wishes.sort(key=lambda wish: wish.value, reverse=True)
        for wish in wishes:
            if wish.kind is WishKind.WORKER:
                if wish.transportable is None and wish.unit_type is not None:
                    self._workers.setdefault(wish.unit_type, []).append(wish)
            elif (
                wish.goods_type is not None
                and is_storable(wish.goods_type)
                and wish.settlement_id in known
            ):
                self._goods.setdefault(wish.goods_type, []).append(wish)
        logger.debug("wish registry rebuilt with %d wishes", len(self))

    # ------------------------------------------------------------------
    def worker_wishes(self, unit_type: str) -> tuple[Wish, ...]:
        return tuple(self._workers.get(unit_type, ()))

    def goods_wishes(self, goods_type: str) -> tuple[Wish, ...]:
        return tuple(self._goods.get(goods_type, ()))

    def index_demand(self, wish: Wish) -> None:
        bucket = self._demand.setdefault(wish.destination, [])
        if not any(candidate is wish for candidate in bucket):
            bucket.append(wish)

    def clear_demand(self) -> None:
        self._demand.clear()

    def wishes_at(self, location: Location, type_key: str | None = None) -> list[Wish]:
        """Demand indexed at ``location``, optionally limited to one type."""

        return [
            wish
            for wish in self._demand.get(location, ())
            if type_key is None or wish.type_key == type_key
        ]

    # ------------------------------------------------------------------
    def _turns(self, carrier: AIUnit, wish: Wish) -> int | None:
        return self.reachability.turns_to_reach(
            carrier.unit, carrier.location(), wish.destination
        )

    def best_worker_wish(self, carrier: AIUnit, unit_type: str) -> Wish | None:
        """Best value per turn among reachable wishes, else the best unreachable one."""

        best: Wish | None = None
        best_value = 0.0
        fallback: Wish | None = None
        for wish in self._workers.get(unit_type, ()):
            turns = self._turns(carrier, wish)
            if turns is None:
                if fallback is None or wish.value > fallback.value:
                    fallback = wish
                continue
            value = math.inf if turns == 0 else wish.value / turns
            if best is None or value > best_value:
                best, best_value = wish, value
        return best if best is not None else fallback

    def best_goods_wish(self, carrier: AIUnit, goods_type: str) -> Wish | None:
        best: Wish | None = None
        best_value = 0.0
        for wish in self._goods.get(goods_type, ()):
            turns = self._turns(carrier, wish)
            if turns is None:
                continue
            value = math.inf if turns == 0 else wish.value / turns
            if best is None or value > best_value:
                best, best_value = wish, value
        return best

    # ------------------------------------------------------------------
    def _remove(self, wish: Wish) -> bool:
        removed = False
        if wish.type_key is not None:
            buckets = self._workers if wish.kind is WishKind.WORKER else self._goods
            bucket = buckets.get(wish.type_key)
            if bucket is not None:
                removed = _remove_identity(bucket, wish)
                if not bucket:
                    del buckets[wish.type_key]
        demand = self._demand.get(wish.destination)
        if demand is not None:
            removed = _remove_identity(demand, wish) or removed
            if not demand:
                del self._demand[wish.destination]
        return removed

    def consume(self, transportable: Transportable, wish: Wish) -> bool:
        """Retire ``wish`` from the index and bind it to ``transportable``."""

        removed = self._remove(wish)
        wish.bind(transportable)
        return removed

    def complete(self, wish: Wish) -> bool:
        """Retire ``wish``; a second call is a no-op returning False."""

        return self._remove(wish)

    def discard_settlement(self, settlement_id: str) -> int:
        doomed = [
            wish
            for bucket in (*self._workers.values(), *self._goods.values(), *self._demand.values())
            for wish in bucket
            if wish.settlement_id == settlement_id
        ]
        for wish in doomed:
            self._remove(wish)
        return len({id(wish) for wish in doomed})


__all__ = ["WishRegistry"]
