from collections.abc import Iterable

import pytest

from strategist.ai.intelligence import UNKNOWN, NationIntelligenceCache
from strategist.errors import RemoteQueryError
from strategist.model.factions import Faction, NationSummary


class _Roster:
    def __init__(self, factions: Iterable[Faction]) -> None:
        self._factions = list(factions)

    def factions(self) -> list[Faction]:
        return list(self._factions)


class _Oracle:
    def __init__(
        self, strengths: dict[str, tuple[float, float]], failing: Iterable[str] = ()
    ) -> None:
        self.strengths = strengths
        self.failing = set(failing)
        self.queries: list[str] = []

    def summary(self, faction: str) -> NationSummary:
        self.queries.append(faction)
        if faction in self.failing:
            raise RemoteQueryError(f"{faction} did not answer")
        military, naval = self.strengths[faction]
        return NationSummary(faction, military, naval)


def _cache(
    strengths: dict[str, tuple[float, float]],
    *,
    factions: Iterable[Faction] | None = None,
    failing: Iterable[str] = (),
) -> NationIntelligenceCache:
    roster = _Roster(factions if factions is not None else [Faction(n) for n in strengths])
    return NationIntelligenceCache("dutch", roster, _Oracle(strengths, failing))  # type: ignore[arg-type]


def test_strength_ratio_compares_against_one_rival() -> None:
    cache = _cache({"dutch": (30.0, 0.0), "english": (10.0, 0.0), "french": (0.0, 0.0)})
    cache.refresh()

    assert cache.strength_ratio("english") == pytest.approx(0.75)
    assert cache.strength_ratio("french") == pytest.approx(1.0)
    assert cache.strength_ratio("spanish") == UNKNOWN


def test_strength_ratio_is_zero_without_own_strength() -> None:
    cache = _cache({"dutch": (0.0, 0.0), "english": (10.0, 0.0)})
    cache.refresh()

    assert cache.strength_ratio("english") == 0.0


def test_failed_query_skips_only_that_faction() -> None:
    cache = _cache(
        {"dutch": (10.0, 0.0), "english": (10.0, 0.0), "french": (5.0, 0.0)},
        failing=["english"],
    )

    assert cache.refresh() == 2
    assert len(cache) == 2
    assert cache.strength_ratio("english") == UNKNOWN
    assert cache.strength_ratio("french") == pytest.approx(10.0 / 15.0)


def test_dead_factions_are_not_queried() -> None:
    factions = [Faction("dutch"), Faction("english", alive=False)]
    cache = _cache({"dutch": (1.0, 1.0), "english": (1.0, 1.0)}, factions=factions)

    cache.refresh()

    assert cache.oracle.queries == ["dutch"]  # type: ignore[attr-defined]


def test_naval_ratio_averages_ordinary_rivals() -> None:
    factions = [
        Faction("dutch"),
        Faction("english"),
        Faction("french"),
        Faction("crown", special=True),
    ]
    cache = _cache(
        {
            "dutch": (0.0, 10.0),
            "english": (0.0, 5.0),
            "french": (0.0, -1.0),
            "crown": (0.0, 100.0),
        },
        factions=factions,
    )
    cache.refresh()

    assert cache.naval_strength_ratio() == pytest.approx(4.0)


def test_naval_ratio_unknown_without_rivals_or_fleets() -> None:
    alone = _cache({"dutch": (0.0, 10.0)})
    alone.refresh()
    assert alone.naval_strength_ratio() == UNKNOWN

    landlocked = _cache({"dutch": (0.0, 10.0), "english": (0.0, 0.0)})
    landlocked.refresh()
    assert landlocked.naval_strength_ratio() == UNKNOWN


def test_clear_forgets_every_snapshot() -> None:
    cache = _cache({"dutch": (3.0, 1.0), "english": (1.0, 1.0)})
    cache.refresh()

    cache.clear()

    assert len(cache) == 0
    assert cache.as_frame().is_empty()
    assert cache.strength_ratio("english") == UNKNOWN
