"""Per-turn snapshot of every faction's military and naval strength."""

from __future__ import annotations

import logging

import polars as pl
from polars._typing import PolarsDataType

from ..errors import RemoteQueryError
from ..model.factions import NationSummary
from ..world.oracles import Roster, StrengthOracle

logger = logging.getLogger(__name__)

UNKNOWN = -1.0

_SUMMARY_SCHEMA: dict[str, PolarsDataType] = {
    "faction": pl.String,
    "military": pl.Float64,
    "naval": pl.Float64,
    "special": pl.Boolean,
}


def _strength_ratio(ours: float, theirs: float) -> float:
    return 0.0 if ours == 0.0 else ours / (ours + theirs)


class NationIntelligenceCache:
    """Columnar lookup table of :class:`NationSummary` rows keyed by faction.

    Only :meth:`refresh` and :meth:`clear` mutate the table.
    """

    def __init__(self, owner: str, roster: Roster, oracle: StrengthOracle) -> None:
        self.owner = owner
        self.roster = roster
        self.oracle = oracle
        self._frame = pl.DataFrame(schema=_SUMMARY_SCHEMA)

    def __len__(self) -> int:
        return self._frame.height

    def as_frame(self) -> pl.DataFrame:
        return self._frame.clone()

    def refresh(self) -> int:
        """Query every live faction and replace the snapshot; return its size."""

        rows: list[tuple[str, float, float, bool]] = []
        for faction in self.roster.factions():
            if not faction.alive:
                continue
            try:
                summary = self.oracle.summary(faction.name)
            except RemoteQueryError as exc:
                logger.warning("strength query for %s failed: %s", faction.name, exc)
                continue
            rows.append(
                (
                    faction.name,
                    float(summary.military_strength),
                    float(summary.naval_strength),
                    faction.special,
                )
            )
        self._frame = pl.DataFrame(rows, schema=_SUMMARY_SCHEMA, orient="row")
        logger.debug("intelligence refreshed for %d factions", len(rows))
        return len(rows)

    def clear(self) -> None:
        self._frame = pl.DataFrame(schema=_SUMMARY_SCHEMA)

    def summary(self, faction: str) -> NationSummary | None:
        match = self._frame.filter(pl.col("faction") == faction)
        if match.is_empty():
            return None
        row = match.row(0, named=True)
        return NationSummary(
            faction=row["faction"],
            military_strength=row["military"],
            naval_strength=row["naval"],
        )

    def strength_ratio(self, other: str) -> float:
        """Own military strength as a share of own plus ``other``'s."""

        ours = self.summary(self.owner)
        theirs = self.summary(other)
        if ours is None or theirs is None:
            return UNKNOWN
        return _strength_ratio(ours.military_strength, theirs.military_strength)

    def naval_strength_ratio(self) -> float:
        """Own naval strength over the average of the other ordinary factions."""

        ours = self.summary(self.owner)
        if ours is None or ours.naval_strength < 0:
            return UNKNOWN
        others = self._frame.filter(
            (pl.col("faction") != self.owner) & ~pl.col("special")
        )
        if others.is_empty():
            return UNKNOWN
        average = others.select(pl.col("naval").clip(lower_bound=0.0).mean()).item()
        if not average:
            return UNKNOWN
        return ours.naval_strength / average


__all__ = ["NationIntelligenceCache", "UNKNOWN"]
