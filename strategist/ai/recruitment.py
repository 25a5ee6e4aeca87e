"""Buying new units in the homeland through the server connection."""

from __future__ import annotations

import logging
from typing import Callable

from ..model.units import AIUnit, Unit
from ..world.oracles import Roster, ServerConnection

logger = logging.getLogger(__name__)


class Recruitment:
    """Wraps remote recruit and train requests that may silently fail.

    A request counts as successful only when the homeland gained exactly one
    unit; the new unit is registered through ``register``.
    """

    def __init__(
        self,
        owner: str,
        roster: Roster,
        server: ServerConnection,
        register: Callable[[Unit], AIUnit],
    ) -> None:
        self.owner = owner
        self.roster = roster
        self.server = server
        self.register = register

    def _homeland_ids(self) -> set[str]:
        return {unit.identifier for unit in self.roster.homeland_units(self.owner)}

    def _complete(self, before: set[str], action: str) -> AIUnit | None:
        added = self._homeland_ids() - before
        if len(added) != 1:
            logger.info("%s: %s had no effect", self.owner, action)
            return None
        unit = self.roster.unit(added.pop())
        if unit is None:
            return None
        logger.info("%s: %s produced %s", self.owner, action, unit)
        return self.register(unit)

    def recruit_unit(self, slot: int) -> AIUnit | None:
        before = self._homeland_ids()
        self.server.recruit_unit(self.owner, slot)
        return self._complete(before, f"recruit slot {slot}")

    def train_unit(self, unit_type: str) -> AIUnit | None:
        before = self._homeland_ids()
        self.server.train_unit(self.owner, unit_type)
        return self._complete(before, f"train {unit_type}")


__all__ = ["Recruitment"]
