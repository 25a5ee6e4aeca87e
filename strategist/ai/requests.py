"""Answers to one-off demands from the crown and from native settlements."""

from __future__ import annotations

import logging
from typing import Iterable

from ..model.factions import Faction, FoundingFather
from ..model.goods import DEFAULT_GOODS, GoodsCatalog, GoodsCategory
from ..model.settlements import Settlement
from ..world.oracles import MarketOracle, Roster

logger = logging.getLogger(__name__)

CONQUEST = "conquest"
CUSTOM_HOUSE = "build_custom_house"
# Income is compared per this many units of goods.
INCOME_SAMPLE = 100


class RequestPolicy:
    """Decides tax raises, mercenary offers, native demands and new fathers."""

    def __init__(
        self,
        owner: str,
        roster: Roster,
        market: MarketOracle,
        catalog: GoodsCatalog = DEFAULT_GOODS,
        *,
        self_sufficient_age: int = 3,
    ) -> None:
        self.owner = owner
        self.roster = roster
        self.market = market
        self.catalog = catalog
        self.self_sufficient_age = self_sufficient_age

    def _faction(self) -> Faction | None:
        return self.roster.faction(self.owner)

    def _tax(self) -> int:
        faction = self._faction()
        return faction.tax if faction is not None else 0

    def _conquering(self) -> bool:
        faction = self._faction()
        return faction is not None and faction.advantage == CONQUEST

    # ------------------------------------------------------------------
    def income_after_taxes(self, goods_type: str) -> int:
        gross = self.market.sale_price(goods_type, INCOME_SAMPLE)
        return (100 - self._tax()) * gross // 100

    def most_valuable_goods(self) -> tuple[str, int] | None:
        """The storable stock the crown would destroy if the tax is refused."""

        best: tuple[str, int] | None = None
        best_value = 0
        for settlement in self.roster.settlements_of(self.owner):
            for goods_type, amount in settlement.goods.items():
                if amount <= 0 or not self.roster.is_storable(goods_type):
                    continue
                value = self.market.sale_price(goods_type, amount)
                if best is None or value > best_value:
                    best = (goods_type, amount)
                    best_value = value
        return best

    def accept_tax(self, tax: int) -> bool:
        threatened = self.most_valuable_goods()
        accepted, reason = self._judge_tax(threatened)
        logger.info(
            "tax demand to %s of %d%%: %s (%s)",
            self.owner,
            tax,
            "accepted" if accepted else "refused",
            reason,
        )
        return accepted

    def _judge_tax(self, threatened: tuple[str, int] | None) -> tuple[bool, str]:
        if threatened is None:
            return False, "no goods under threat"
        goods_type = threatened[0]
        category = self.catalog.category(goods_type)
        if category is GoodsCategory.FOOD:
            return False, f"{goods_type} is food"
        if category is GoodsCategory.BREEDABLE:
            holders = sum(
                1
                for settlement in self.roster.settlements_of(self.owner)
                if settlement.goods.get(goods_type, 0) > 0
            )
            return holders < 2, f"{goods_type} kept in {holders} settlements"
        if category.replaceable:
            age = self.roster.age
            return age < self.self_sufficient_age, f"{goods_type} in age {age}"
        storable = [g.name for g in self.catalog if self.roster.is_storable(g.name)]
        if not storable:
            return True, "no storable goods to compare"
        average = sum(self.income_after_taxes(name) for name in storable) // len(storable)
        income = self.income_after_taxes(goods_type)
        return income < average, f"{goods_type} income {income} against average {average}"

    def accept_mercenaries(self) -> bool:
        faction = self._faction()
        if faction is None:
            return False
        return faction.at_war() or self._conquering()

    def accept_native_demand(
        self, settlement: Settlement, goods_type: str | None, gold: int
    ) -> bool:
        """Give in to a native demand unless this faction is set on conquest."""

        accepted = not self._conquering()
        logger.info(
            "%s %s demand on %s for %s/%d gold",
            self.owner,
            "meets" if accepted else "refuses",
            settlement.name,
            goods_type or "-",
            gold,
        )
        return accepted

    def select_founding_father(
        self, candidates: Iterable[FoundingFather | None]
    ) -> FoundingFather | None:
        """Prefer the custom house, otherwise the heaviest father for this age."""

        age = self.roster.age
        best: FoundingFather | None = None
        best_weight = 0
        for father in candidates:
            if father is None:
                continue
            if CUSTOM_HOUSE in father.abilities:
                return father
            weight = father.weight(age)
            if best is None or weight > best_weight:
                best = father
                best_weight = weight
        return best


__all__ = ["CONQUEST", "CUSTOM_HOUSE", "RequestPolicy"]
