"""Scoring and acceptance of trade agreements proposed by other factions."""

from __future__ import annotations

import logging

from ..config import DiplomacySettings
from ..model.factions import Stance
from ..model.settlements import Settlement
from ..model.trade import (
    DiplomaticTrade,
    TradeContext,
    TradeItem,
    TradeItemKind,
    TradeStatus,
)
from ..rng import AIRandomness
from ..world.oracles import MarketOracle, Roster
from .intelligence import NationIntelligenceCache

logger = logging.getLogger(__name__)

UNACCEPTABLE = -(2**31)
"""Score of a term this faction will never agree to."""

_RNG_STREAM = "diplomacy"


class DiplomaticEvaluator:
    """Decides ACCEPT, REJECT or PROPOSE for an incoming agreement.

    Reads the intelligence cache and the roster; never touches planner or
    transport state.
    """

    def __init__(
        self,
        owner: str,
        roster: Roster,
        intelligence: NationIntelligenceCache,
        market: MarketOracle,
        randomness: AIRandomness,
        settings: DiplomacySettings | None = None,
    ) -> None:
        self.owner = owner
        self.roster = roster
        self.intelligence = intelligence
        self.market = market
        self.randomness = randomness
        self.settings = settings or DiplomacySettings()

    # ------------------------------------------------------------------
    def appraise_unit(self, unit_type: str) -> int:
        return self.market.unit_price(unit_type)

    def appraise_settlement(self, settlement: Settlement) -> int:
        multiplier = max(1, settlement.stockade_level)
        if settlement.owner == self.owner:
            value = 0
            for worker_id in settlement.workers:
                worker = self.roster.unit(worker_id)
                if worker is not None:
                    value += self.appraise_unit(worker.unit_type)
            for unit in self.roster.units_of(self.owner):
                if unit.tile == settlement.tile and unit.settlement_id is None:
                    value += self.appraise_unit(unit.unit_type)
            for goods_type, amount in settlement.goods.items():
                if amount > 0:
                    value += self.market.sale_price(goods_type, amount)
            return value * multiplier
        value = settlement.population * 1000 + 500 + 200 * len(settlement.owned_tiles)
        return value * multiplier

    def _other(self, agreement: DiplomaticTrade) -> str:
        return agreement.recipient if agreement.sender == self.owner else agreement.sender

    def score_item(self, item: TradeItem, agreement: DiplomaticTrade) -> tuple[int, bool]:
        """Return the signed score of ``item`` and whether it is a peace term."""

        settings = self.settings
        ours = item.source == self.owner
        kind = item.kind
        if kind is TradeItemKind.GOLD:
            return (-item.gold if ours else item.gold), False

        if kind is TradeItemKind.COLONY:
            settlement = self.roster.settlement(item.settlement_id or "")
            if settlement is None:
                return UNACCEPTABLE, False
            if ours:
                if len(self.roster.settlements_of(self.owner)) < settings.min_settlements_to_trade:
                    return UNACCEPTABLE, False
                return -self.appraise_settlement(settlement), False
            return self.appraise_settlement(settlement), False

        if kind is TradeItemKind.GOODS:
            goods_type = item.goods_type or ""
            if ours:
                return -self.market.bid_price(goods_type, item.amount), False
            return self.market.sale_price(goods_type, item.amount), False

        if kind is TradeItemKind.INCITE:
            faction = self.roster.faction(self.owner)
            stance = (
                faction.stance_towards(item.victim or "") if faction else Stance.UNCONTACTED
            )
            if stance is Stance.ALLIANCE:
                return -1, False
            if stance is Stance.WAR:
                return 0, False
            ratio = self.intelligence.strength_ratio(item.victim or "")
            value = round(settings.incite_weight * ratio)
            return (-value if ours else value), False

        if kind is TradeItemKind.STANCE:
            return self._score_stance(item, agreement)

        if kind is TradeItemKind.UNIT:
            unit = self.roster.unit(item.unit_id or "")
            if unit is None:
                return UNACCEPTABLE, False
            if ours:
                owned = sum(1 for _ in self.roster.units_of(self.owner))
                if owned < settings.min_units_to_trade:
                    return UNACCEPTABLE, False
                return -self.appraise_unit(unit.unit_type), False
            return self.appraise_unit(unit.unit_type), False

        raise ValueError(f"unknown trade item kind {kind!r}")

    def _score_stance(self, item: TradeItem, agreement: DiplomaticTrade) -> tuple[int, bool]:
        settings = self.settings
        other = self.roster.faction(self._other(agreement))
        perpetual_peace = other is not None and other.perpetual_peace
        ratio = self.intelligence.strength_ratio(self._other(agreement))
        weighted = round(settings.stance_weight * ratio)
        stance = item.stance
        if stance is Stance.WAR:
            if ratio < 0.33:
                return UNACCEPTABLE, False
            if ratio < 0.5:
                return -weighted, False
            return weighted, False
        if stance is Stance.PEACE and agreement.context is TradeContext.CONTACT:
            return 0, True
        if stance in (Stance.PEACE, Stance.CEASE_FIRE, Stance.ALLIANCE):
            if perpetual_peace:
                return 0, True
            if ratio > 0.66:
                return UNACCEPTABLE, False
            if ratio > 0.5:
                return -weighted, False
            if ratio > 0.33:
                return weighted, False
            return settings.peace_bonus, False
        return UNACCEPTABLE, False

    # ------------------------------------------------------------------
    def _reject(self, peace: TradeItem | None, agreement: DiplomaticTrade) -> TradeStatus:
        if peace is None:
            return TradeStatus.REJECT
        agreement.clear()
        agreement.add(peace)
        return TradeStatus.PROPOSE

    def evaluate(self, agreement: DiplomaticTrade) -> TradeStatus:
        """Decide on ``agreement``, trimming it in place for counter-proposals."""

        scores: list[tuple[TradeItem, int]] = []
        peace: TradeItem | None = None
        unacceptable = 0
        for item in agreement.items:
            value, is_peace = self.score_item(item, agreement)
            if is_peace:
                peace = item
            if value == UNACCEPTABLE:
                unacceptable += 1
            scores.append((item, value))
        status = self._decide(agreement, scores, peace, unacceptable)
        logger.info(
            "%s evaluated %s offer v%d (%s) => %s",
            self.owner,
            self._other(agreement),
            agreement.version,
            ", ".join(f"{item.kind.value}={value}" for item, value in scores),
            status.value,
        )
        return status

    def _decide(
        self,
        agreement: DiplomaticTrade,
        scores: list[tuple[TradeItem, int]],
        peace: TradeItem | None,
        unacceptable: int,
    ) -> TradeStatus:
        if not scores:
            return TradeStatus.REJECT
        threshold = 0.5 - 0.5 * agreement.version
        if unacceptable > 0 and unacceptable / len(scores) > threshold:
            logger.debug("too many unacceptable terms (%d)", unacceptable)
            return self._reject(peace, agreement)

        total = 0
        remaining: list[tuple[TradeItem, int]] = []
        for item, value in scores:
            if value == UNACCEPTABLE:
                agreement.remove(item)
            else:
                total += value
                remaining.append((item, value))

        if total >= 0:
            if agreement.context is TradeContext.CONTACT and agreement.version == 0:
                return TradeStatus.PROPOSE
            if unacceptable == 0:
                return TradeStatus.ACCEPT
            if agreement.is_empty():
                return TradeStatus.REJECT
            return TradeStatus.PROPOSE

        draw = self.randomness.random_int(_RNG_STREAM, 1 + agreement.version)
        if draw > self.settings.patience:
            logger.debug("ran out of patience at round %d", agreement.version)
            return self._reject(peace, agreement)

        remaining.sort(key=lambda pair: pair[1])
        while remaining and total < 0:
            item, value = remaining.pop(0)
            agreement.remove(item)
            total -= value
        if remaining and total >= 0:
            return TradeStatus.PROPOSE
        return self._reject(peace, agreement)


__all__ = ["DiplomaticEvaluator", "UNACCEPTABLE"]
