"""Outstanding worker and goods requests raised by settlements."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .transport import Location, Transportable


class WishKind(str, Enum):
    WORKER = "worker"
    GOODS = "goods"


@dataclass(eq=False)
class Wish:
    """A settlement's request for a worker or a delivery of goods."""

    kind: WishKind
    destination: Location
    value: int
    settlement_id: str | None = None
    unit_type: str | None = None
    goods_type: str | None = None
    amount: int = 0
    transportable: Transportable | None = None

    @property
    def type_key(self) -> str | None:
        return self.unit_type if self.kind is WishKind.WORKER else self.goods_type

    def bind(self, transportable: Transportable | None) -> None:
        self.transportable = transportable

    def __repr__(self) -> str:
        return f"Wish({self.kind.value}:{self.type_key} @ {self.destination}, value={self.value})"


def worker_wish(
    destination: Location,
    unit_type: str,
    value: int,
    *,
    settlement_id: str | None = None,
) -> Wish:
    return Wish(
        WishKind.WORKER,
        destination,
        value,
        settlement_id=settlement_id,
        unit_type=unit_type,
    )


def goods_wish(
    destination: Location,
    goods_type: str,
    amount: int,
    value: int,
    *,
    settlement_id: str | None = None,
) -> Wish:
    if amount <= 0:
        raise ValueError("goods wishes need a positive amount")
    return Wish(
        WishKind.GOODS,
        destination,
        value,
        settlement_id=settlement_id,
        goods_type=goods_type,
        amount=amount,
    )


__all__ = ["Wish", "WishKind", "goods_wish", "worker_wish"]
