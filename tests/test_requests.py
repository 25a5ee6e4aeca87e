from strategist.ai.requests import CUSTOM_HOUSE, RequestPolicy
from strategist.model.factions import Faction, FoundingFather, Stance
from strategist.model.settlements import Settlement
from strategist.world.map import GameMap, HexCoord
from strategist.world.state import GameState, MarketPrices

ROWS = (
    "~~~~~~",
    "~....~",
    "~....~",
    "~~~~~~",
)

PRICES = MarketPrices(sale={"furs": 10, "coats": 12, "ore": 1, "muskets": 4, "horses": 2})


def _state(**dutch: object) -> GameState:
    return GameState(
        GameMap.from_rows(ROWS),
        factions=[Faction("dutch", **dutch), Faction("english")],  # type: ignore[arg-type]
        prices=PRICES,
    )


def _settle(state: GameState, identifier: str, tile: HexCoord, **goods: int) -> Settlement:
    return state.add_settlement(
        Settlement(identifier, identifier.title(), "dutch", tile, goods=dict(goods))
    )


def _policy(state: GameState) -> RequestPolicy:
    return RequestPolicy("dutch", state, state)


def test_most_valuable_goods_ignores_unstorable_stock() -> None:
    state = _state()
    _settle(state, "s1", HexCoord(1, 1), furs=50, coats=30, food=900)

    assert _policy(state).most_valuable_goods() == ("furs", 50)


def test_tax_refused_without_goods_at_stake_or_for_food() -> None:
    state = _state()
    _settle(state, "s1", HexCoord(1, 1), food=200)
    assert not _policy(state).accept_tax(10)

    _settle(state, "s2", HexCoord(3, 1), fish=40)
    assert not _policy(state).accept_tax(10)


def test_tax_on_breedable_goods_depends_on_herds_kept() -> None:
    state = _state()
    _settle(state, "s1", HexCoord(1, 1), horses=50)
    assert _policy(state).accept_tax(10)

    _settle(state, "s2", HexCoord(3, 1), horses=10)
    assert not _policy(state).accept_tax(10)


def test_tax_on_replaceable_goods_accepted_only_early() -> None:
    state = _state()
    _settle(state, "s1", HexCoord(1, 1), muskets=100)
    assert _policy(state).accept_tax(10)

    state.age = 3
    assert not _policy(state).accept_tax(10)


def test_tax_on_standard_goods_compares_income_with_the_average() -> None:
    rich = _state()
    _settle(rich, "s1", HexCoord(1, 1), furs=100)
    assert not _policy(rich).accept_tax(10)

    poor = _state()
    _settle(poor, "s1", HexCoord(1, 1), ore=100)
    assert _policy(poor).accept_tax(10)


def test_income_after_taxes() -> None:
    state = _state(tax=25)

    assert _policy(state).income_after_taxes("furs") == 750


def test_mercenaries_only_at_war_or_when_conquering() -> None:
    peaceful = _state()
    assert not _policy(peaceful).accept_mercenaries()

    warring = _state()
    faction = warring.faction("dutch")
    assert faction is not None
    faction.set_stance("english", Stance.WAR, turn=1)
    assert _policy(warring).accept_mercenaries()

    assert _policy(_state(advantage="conquest")).accept_mercenaries()


def test_native_demands_refused_only_by_conquerors() -> None:
    village = Settlement("n1", "Village", "arawak", HexCoord(2, 2), native=True)

    assert _policy(_state()).accept_native_demand(village, "muskets", 0)
    assert not _policy(_state(advantage="conquest")).accept_native_demand(village, None, 100)


def test_founding_father_weights_follow_the_age() -> None:
    state = _state()
    policy = _policy(state)
    trader = FoundingFather("trader", weights=(5, 1, 1))
    general = FoundingFather("general", weights=(1, 9, 1))
    twin = FoundingFather("twin", weights=(5, 0, 0))

    assert policy.select_founding_father([None, trader, general, twin]) is trader

    state.age = 2
    assert policy.select_founding_father([trader, general]) is general
    assert policy.select_founding_father([None]) is None


def test_custom_house_father_always_wins() -> None:
    policy = _policy(_state())
    heavy = FoundingFather("heavy", weights=(99, 99, 99))
    customs = FoundingFather("customs", abilities=frozenset({CUSTOM_HOUSE}))

    assert policy.select_founding_father([heavy, customs]) is customs
