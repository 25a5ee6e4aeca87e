"""Diplomatic trade proposals exchanged between factions."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .factions import Stance


class TradeItemKind(str, Enum):
    GOLD = "gold"
    COLONY = "colony"
    GOODS = "goods"
    INCITE = "incite"
    STANCE = "stance"
    UNIT = "unit"


class TradeContext(str, Enum):
    CONTACT = "contact"
    DIPLOMATIC = "diplomatic"
    TRADE = "trade"


class TradeStatus(str, Enum):
    ACCEPT = "accept"
    REJECT = "reject"
    PROPOSE = "propose"


@dataclass(frozen=True)
class TradeItem:
    """One term of an agreement, moving something from ``source`` to ``destination``."""

    kind: TradeItemKind
    source: str
    destination: str
    gold: int = 0
    settlement_id: str | None = None
    goods_type: str | None = None
    amount: int = 0
    victim: str | None = None
    stance: Stance | None = None
    unit_id: str | None = None

    @classmethod
    def gold_item(cls, source: str, destination: str, gold: int) -> "TradeItem":
        return cls(TradeItemKind.GOLD, source, destination, gold=gold)

    @classmethod
    def stance_item(cls, source: str, destination: str, stance: Stance) -> "TradeItem":
        return cls(TradeItemKind.STANCE, source, destination, stance=stance)

    @classmethod
    def colony_item(cls, source: str, destination: str, settlement_id: str) -> "TradeItem":
        return cls(TradeItemKind.COLONY, source, destination, settlement_id=settlement_id)

    @classmethod
    def goods_item(
        cls, source: str, destination: str, goods_type: str, amount: int
    ) -> "TradeItem":
        return cls(
            TradeItemKind.GOODS, source, destination, goods_type=goods_type, amount=amount
        )

    @classmethod
    def incite_item(cls, source: str, destination: str, victim: str) -> "TradeItem":
        return cls(TradeItemKind.INCITE, source, destination, victim=victim)

    @classmethod
    def unit_item(cls, source: str, destination: str, unit_id: str) -> "TradeItem":
        return cls(TradeItemKind.UNIT, source, destination, unit_id=unit_id)


@dataclass
class DiplomaticTrade:
    """An ordered agreement; ``version`` counts negotiation rounds."""

    context: TradeContext
    sender: str
    recipient: str
    items: list[TradeItem] = field(default_factory=list)
    version: int = 0

    def add(self, item: TradeItem) -> None:
        self.items.append(item)

    def remove(self, item: TradeItem) -> bool:
        for index, candidate in enumerate(self.items):
            if candidate is item:
                del self.items[index]
                return True
        return False

    def clear(self) -> None:
        self.items.clear()

    def is_empty(self) -> bool:
        return not self.items


__all__ = [
    "DiplomaticTrade",
    "TradeContext",
    "TradeItem",
    "TradeItemKind",
    "TradeStatus",
]
