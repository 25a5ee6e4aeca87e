"""Haggling over goods sold from or bought into this faction's settlements.

Quoted prices are remembered per goods lot for the rest of the turn, so a
visiting trader sees the same price twice and a rejected haggle stays closed.
"""

from __future__ import annotations

import logging

from ..model.factions import TensionLevel
from ..model.settlements import Settlement
from ..model.transport import AIGoods
from ..model.units import Unit
from ..rng import AIRandomness
from ..world.oracles import MarketOracle, Roster

logger = logging.getLogger(__name__)

NO_TRADE = -1
NO_TRADE_HAGGLE = -2

LotKey = tuple[str, int, str]


class TradeSession:
    def __init__(
        self,
        owner: str,
        roster: Roster,
        market: MarketOracle,
        randomness: AIRandomness,
    ) -> None:
        self.owner = owner
        self.roster = roster
        self.market = market
        self.randomness = randomness
        self._prices: dict[LotKey, int] = {}
        self._haggling: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._prices)

    def clear(self) -> None:
        self._prices.clear()
        self._haggling.clear()

    def _tension(self, other: str) -> int:
        faction = self.roster.faction(self.owner)
        return faction.tension_towards(other) if faction is not None else 0

    def _tax(self) -> int:
        faction = self.roster.faction(self.owner)
        return faction.tax if faction is not None else 0

    # ------------------------------------------------------------------
    def register_sell_goods(self, goods: AIGoods) -> None:
        """Forget any price quoted for ``goods`` so the next offer starts fresh."""

        self._prices.pop((goods.goods_type, goods.amount, goods.settlement_id or ""), None)

    def buy_proposition(
        self,
        buyer: Unit,
        settlement: Settlement,
        goods_type: str,
        amount: int,
        gold: int,
    ) -> int:
        """Answer ``buyer`` offering ``gold`` for goods held in ``settlement``.

        The first call quotes a price.  Later calls accept the quoted price,
        close the lot on an offer below nine tenths of it, and otherwise
        accept the counter-offer with a chance that shrinks with every
        successful haggle by the same unit.
        """

        key = (goods_type, amount, settlement.identifier)
        quoted = self._prices.get(key)
        if quoted is None:
            price = self.market.bid_price(goods_type, amount) + self._tension(buyer.owner)
            self._prices[key] = price
            logger.debug("%s quotes %d for %d %s", settlement.name, price, amount, goods_type)
            return price
        if quoted < 0 or quoted == gold:
            return quoted
        if gold < quoted * 9 // 10:
            logger.info(
                "%s offered %d against %d for %s: closed", buyer, gold, quoted, goods_type
            )
            self._prices[key] = NO_TRADE
            return NO_TRADE
        haggling = self._haggling.get(buyer.identifier, 1)
        if self.randomness.random_int("bargaining", 3 + haggling) <= 3:
            self._prices[key] = gold
            self._haggling[buyer.identifier] = haggling + 1
            return gold
        self._prices[key] = NO_TRADE
        return NO_TRADE_HAGGLE

    def sell_proposition(
        self,
        seller: Unit,
        settlement: Settlement,
        goods_type: str,
        amount: int,
    ) -> int:
        """Price offered for goods ``seller`` brings into ``settlement``.

        Only what fits in the warehouse is paid for, at a share of the
        after-tax homeland sale price that drops as tension rises.
        """

        room = settlement.warehouse_capacity - settlement.goods.get(goods_type, 0)
        amount = max(0, min(room, amount))
        if amount == 0:
            return 0
        level = TensionLevel.of(self._tension(seller.owner))
        percentage = (9 - int(level)) * 10
        net = (100 - self._tax()) * self.market.sale_price(goods_type, amount) // 100
        return net * percentage // 100


__all__ = ["NO_TRADE", "NO_TRADE_HAGGLE", "TradeSession"]
