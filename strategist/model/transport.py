"""Objects that can be carried between locations."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, ClassVar, TypeAlias

from ..world.map import HOMELAND, HexCoord

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .units import AIUnit
    from .wishes import Wish

Location: TypeAlias = HexCoord | str


class TransportableKind(str, Enum):
    """Discriminant for the two kinds of carried object."""

    UNIT = "unit"
    GOODS = "goods"


class Transportable:
    """Common state of a unit or goods parcel that may need a carrier.

    ``carrier`` is a back-reference to the carrying :class:`AIUnit`; the
    roster owns both ends.  ``transport_priority`` only ever grows while the
    object waits unserved.
    """

    kind: ClassVar[TransportableKind]
    space_taken: ClassVar[int] = 1

    def __init__(self) -> None:
        self.carrier: AIUnit | None = None
        self.transport_priority = 0

    @property
    def identifier(self) -> str:  # pragma: no cover - overridden
        raise NotImplementedError

    def transport_source(self) -> Location | None:  # pragma: no cover - overridden
        raise NotImplementedError

    def transport_destination(self) -> Location | None:  # pragma: no cover
        raise NotImplementedError

    def is_aboard(self) -> bool:  # pragma: no cover - overridden
        raise NotImplementedError

    def is_disposed(self) -> bool:
        return False

    def increment_transport_priority(self, amount: int = 1) -> int:
        if amount < 0:
            raise ValueError("transport priority can not decrease")
        self.transport_priority += amount
        return self.transport_priority

    def change_transport(self, carrier: AIUnit | None) -> AIUnit | None:
        """Point the back-reference at ``carrier`` and return the old one."""

        old, self.carrier = self.carrier, carrier
        return old

    def requests_transport(self) -> bool:
        return (
            self.carrier is None
            and not self.is_aboard()
            and self.transport_source() is not None
            and self.transport_destination() is not None
        )


class AIGoods(Transportable):
    """A parcel of goods waiting at a settlement for export or delivery."""

    kind = TransportableKind.GOODS

    def __init__(
        self,
        identifier: str,
        goods_type: str,
        amount: int,
        source: Location | None,
        destination: Location | None = None,
        *,
        settlement_id: str | None = None,
        wish: Wish | None = None,
    ) -> None:
        super().__init__()
        if amount <= 0:
            raise ValueError("goods parcels must carry a positive amount")
        self._identifier = identifier
        self.goods_type = goods_type
        self.amount = amount
        self.source = source
        self.destination = destination
        self.settlement_id = settlement_id
        self.wish = wish
        self.aboard = False
        self.disposed = False

    @property
    def identifier(self) -> str:
        return self._identifier

    def transport_source(self) -> Location | None:
        return None if self.aboard else self.source

    def transport_destination(self) -> Location | None:
        return self.destination

    def is_aboard(self) -> bool:
        return self.aboard

    def is_disposed(self) -> bool:
        return self.disposed

    def __repr__(self) -> str:
        return f"AIGoods({self.amount} {self.goods_type} -> {self.destination})"


__all__ = [
    "AIGoods",
    "HOMELAND",
    "Location",
    "Transportable",
    "TransportableKind",
]
