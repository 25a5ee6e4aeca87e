"""Local stand-in for the authoritative game server."""

from __future__ import annotations

import logging
from typing import Sequence

from ..model.factions import Stance
from ..model.units import Unit
from .state import GameState

logger = logging.getLogger(__name__)


class LocalServer:
    """Applies remote requests to a :class:`GameState`.

    Requests that can not be honoured return ``None`` (or ``False``) and leave
    the state untouched.  ``refuse_requests`` simulates a server that
    silently ignores everything.
    """

    def __init__(
        self,
        state: GameState,
        *,
        recruit_pool: Sequence[str] = ("free_colonist", "free_colonist", "indentured_servant"),
        recruit_price: int = 400,
    ) -> None:
        self.state = state
        self.recruit_pool = list(recruit_pool)
        self.recruit_price = recruit_price
        self.refuse_requests = False

    def _spawn(self, owner: str, unit_type: str) -> Unit:
        unit = Unit(
            identifier=self.state.next_id("u"),
            owner=owner,
            unit_type=unit_type,
            in_homeland=True,
        )
        return self.state.add_unit(unit)

    def _charge(self, owner: str, price: int) -> bool:
        faction = self.state.faction(owner)
        if faction is None or faction.gold < price:
            return False
        faction.gold -= price
        return True

    def train_unit(self, owner: str, unit_type: str) -> Unit | None:
        if self.refuse_requests:
            return None
        if not self._charge(owner, self.state.unit_price(unit_type)):
            logger.debug("%s can not afford to train %s", owner, unit_type)
            return None
        return self._spawn(owner, unit_type)

    def recruit_unit(self, owner: str, slot: int) -> Unit | None:
        if self.refuse_requests or not 0 <= slot < len(self.recruit_pool):
            return None
        if not self._charge(owner, self.recruit_price):
            return None
        unit_type = self.recruit_pool[slot]
        return self._spawn(owner, unit_type)

    def emigrate(self, owner: str) -> Unit | None:
        if self.refuse_requests or not self.recruit_pool:
            return None
        return self._spawn(owner, self.recruit_pool[0])

    def change_stance(self, owner: str, other: str, stance: Stance) -> bool:
        if self.refuse_requests:
            return False
        return self.state.set_stance(owner, other, stance)


__all__ = ["LocalServer"]
