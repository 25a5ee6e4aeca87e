"""Mission records and the transport manifest carried by transport missions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .settlements import TileImprovementPlan
    from .transport import Location, Transportable
    from .units import AIUnit
    from .wishes import Wish


class MissionKind(str, Enum):
    """Closed set of behaviours a unit may be assigned."""

    BUILD_COLONY = "build_colony"
    PIONEER = "pioneer"
    SCOUT = "scout"
    TRANSPORT = "transport"
    DEFEND_SETTLEMENT = "defend_settlement"
    SEEK_AND_DESTROY = "seek_and_destroy"
    WANDER_HOSTILE = "wander_hostile"
    MISSIONARY = "missionary"
    WORK_INSIDE_COLONY = "work_inside_colony"
    CASH_IN_TREASURE_TRAIN = "cash_in_treasure_train"
    IDLE_AT_SETTLEMENT = "idle_at_settlement"
    WISH_REALIZATION = "wish_realization"
    PRIVATEER = "privateer"

    @property
    def one_time(self) -> bool:
        """One-shot missions are replaced every turn rather than kept."""

        return self in _ONE_TIME_KINDS


_ONE_TIME_KINDS = frozenset({MissionKind.IDLE_AT_SETTLEMENT, MissionKind.WANDER_HOSTILE})


class TransportManifest:
    """Ordered list of objects a carrier has agreed to move."""

    def __init__(self, carrier: AIUnit, capacity: int) -> None:
        if capacity < 0:
            raise ValueError("capacity must be non-negative")
        self.carrier = carrier
        self.capacity = capacity
        self._items: list[Transportable] = []

    def __iter__(self):
        return iter(tuple(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def space_used(self) -> int:
        return sum(item.space_taken for item in self._items)

    def space_available(self) -> int:
        return max(0, self.capacity - self.space_used())

    def has_space(self, transportable: Transportable | None = None) -> bool:
        needed = 1 if transportable is None else transportable.space_taken
        return self.space_available() >= needed

    def is_full(self) -> bool:
        return not self.has_space()

    def destination_capacity(self) -> int:
        """Space left once the carrier reaches its current destination."""

        return self.space_available()

    def is_transporting(self, transportable: Transportable) -> bool:
        return any(item is transportable for item in self._items)

    def queue(self, transportable: Transportable) -> bool:
        """Append ``transportable`` if there is room; return True on success."""

        if self.is_transporting(transportable):
            return True
        if not self.has_space(transportable):
            return False
        self._items.append(transportable)
        transportable.change_transport(self.carrier)
        return True

    def requeue(self, transportable: Transportable) -> bool:
        """Move ``transportable`` to the back of the queue."""

        if not self.remove(transportable):
            return self.queue(transportable)
        self._items.append(transportable)
        transportable.change_transport(self.carrier)
        return True

    def remove(self, transportable: Transportable) -> bool:
        for index, item in enumerate(self._items):
            if item is transportable:
                del self._items[index]
                if transportable.carrier is self.carrier:
                    transportable.change_transport(None)
                return True
        return False

    def clear(self) -> None:
        for item in self._items:
            if item.carrier is self.carrier:
                item.change_transport(None)
        self._items.clear()


@dataclass(eq=False)
class Mission:
    """A behavioural assignment for one unit.

    Only the fields meaningful for ``kind`` are populated.  Validity is never
    stored here; see :func:`strategist.ai.missions.invalid_reason`.
    """

    kind: MissionKind
    unit: AIUnit
    target: Location | None = None
    settlement_id: str | None = None
    wish: Wish | None = None
    plan: TileImprovementPlan | None = None
    manifest: TransportManifest | None = None

    @property
    def one_time(self) -> bool:
        return self.kind.one_time

    def dispose(self) -> None:
        """Release everything this mission holds a claim on."""

        if self.plan is not None and self.plan.pioneer is self.unit:
            self.plan.pioneer = None
        if self.manifest is not None:
            self.manifest.clear()

    def __repr__(self) -> str:
        return f"Mission({self.kind.value}, unit={self.unit.identifier}, target={self.target})"


__all__ = ["Mission", "MissionKind", "TransportManifest"]
