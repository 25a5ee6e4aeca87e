from strategist.ai.wishes import WishRegistry
from strategist.model.settlements import Settlement
from strategist.model.transport import AIGoods
from strategist.model.units import AIUnit, Unit
from strategist.model.wishes import goods_wish, worker_wish
from strategist.world.map import HexCoord

NEAR = HexCoord(1, 1)
FAR = HexCoord(5, 1)
ISLAND = HexCoord(9, 9)


class _Turns:
    """Reachability keyed on the target only."""

    def __init__(self, turns: dict[object, int | None]) -> None:
        self.turns = turns

    def turns_to_reach(
        self, unit: Unit, source: object, target: object, relaxed: bool = False
    ) -> int | None:
        return self.turns.get(target)


def _carrier() -> AIUnit:
    unit = Unit("ship", "dutch", "caravel", tile=HexCoord(0, 0), naval=True, person=False, capacity=2)
    return AIUnit(unit, roster=None)  # type: ignore[arg-type]


def _settlement(identifier: str, tile: HexCoord) -> Settlement:
    return Settlement(identifier, identifier.title(), "dutch", tile)


def _registry(turns: dict[object, int | None]) -> WishRegistry:
    return WishRegistry(_Turns(turns))


def test_rebuild_buckets_and_orders_by_value() -> None:
    near, far = _settlement("near", NEAR), _settlement("far", FAR)
    low = worker_wish(NEAR, "free_colonist", 10, settlement_id="near")
    high = worker_wish(FAR, "free_colonist", 80, settlement_id="far")
    tools = goods_wish(FAR, "tools", 20, 50, settlement_id="far")
    food = goods_wish(FAR, "food", 20, 90, settlement_id="far")
    near.wishes.append(low)
    far.wishes.extend([high, tools, food])
    registry = _registry({})

    registry.rebuild([near, far], lambda goods: goods != "food")

    assert registry.worker_wishes("free_colonist") == (high, low)
    assert registry.goods_wishes("tools") == (tools,)
    assert registry.goods_wishes("food") == ()
    assert len(registry) == 3


def test_rebuild_skips_bound_worker_wishes_and_orphaned_goods() -> None:
    home = _settlement("home", NEAR)
    bound = worker_wish(NEAR, "free_colonist", 40, settlement_id="home")
    bound.bind(AIGoods("g1", "tools", 10, FAR))
    orphan = goods_wish(NEAR, "tools", 10, 30, settlement_id="ghost")
    home.wishes.extend([bound, orphan])
    registry = _registry({})

    registry.rebuild([home], lambda goods: True)

    assert len(registry) == 0


def test_best_worker_wish_prefers_value_per_turn() -> None:
    registry = _registry({NEAR: 4, FAR: 1, ISLAND: None})
    home = _settlement("home", NEAR)
    slow = worker_wish(NEAR, "free_colonist", 100, settlement_id="home")
    quick = worker_wish(FAR, "free_colonist", 40, settlement_id="home")
    home.wishes.extend([slow, quick])
    registry.rebuild([home], lambda goods: True)

    assert registry.best_worker_wish(_carrier(), "free_colonist") is quick


def test_best_worker_wish_treats_zero_turns_as_best() -> None:
    registry = _registry({NEAR: 0, FAR: 1})
    home = _settlement("home", NEAR)
    here = worker_wish(NEAR, "free_colonist", 1, settlement_id="home")
    there = worker_wish(FAR, "free_colonist", 1000, settlement_id="home")
    home.wishes.extend([here, there])
    registry.rebuild([home], lambda goods: True)

    assert registry.best_worker_wish(_carrier(), "free_colonist") is here


def test_best_worker_wish_falls_back_to_unreachable() -> None:
    registry = _registry({ISLAND: None})
    home = _settlement("home", NEAR)
    stranded = worker_wish(ISLAND, "free_colonist", 60, settlement_id="home")
    home.wishes.append(stranded)
    registry.rebuild([home], lambda goods: True)

    assert registry.best_worker_wish(_carrier(), "free_colonist") is stranded
    assert registry.best_worker_wish(_carrier(), "expert_farmer") is None


def test_best_goods_wish_ignores_unreachable_destinations() -> None:
    registry = _registry({NEAR: 2, ISLAND: None})
    home = _settlement("home", NEAR)
    reachable = goods_wish(NEAR, "tools", 10, 20, settlement_id="home")
    stranded = goods_wish(ISLAND, "tools", 10, 500, settlement_id="home")
    home.wishes.extend([reachable, stranded])
    registry.rebuild([home], lambda goods: True)

    assert registry.best_goods_wish(_carrier(), "tools") is reachable


def test_consume_binds_and_complete_is_idempotent() -> None:
    registry = _registry({NEAR: 1})
    home = _settlement("home", NEAR)
    wish = worker_wish(NEAR, "free_colonist", 50, settlement_id="home")
    home.wishes.append(wish)
    registry.rebuild([home], lambda goods: True)
    carrier = _carrier()

    assert registry.consume(carrier, wish)
    assert wish.transportable is carrier
    assert registry.worker_wishes("free_colonist") == ()
    assert not registry.complete(wish)


def test_wishes_at_filters_indexed_demand() -> None:
    registry = _registry({})
    colonist = worker_wish(NEAR, "free_colonist", 50, settlement_id="home")
    tools = goods_wish(NEAR, "tools", 10, 20, settlement_id="home")
    registry.index_demand(colonist)
    registry.index_demand(tools)
    registry.index_demand(tools)

    assert registry.wishes_at(NEAR) == [colonist, tools]
    assert registry.wishes_at(NEAR, "tools") == [tools]
    assert registry.wishes_at(FAR) == []

    assert registry.complete(tools)
    assert registry.wishes_at(NEAR) == [colonist]


def test_discard_settlement_drops_every_wish_of_it() -> None:
    registry = _registry({})
    home, other = _settlement("home", NEAR), _settlement("other", FAR)
    mine = worker_wish(NEAR, "free_colonist", 50, settlement_id="home")
    theirs = worker_wish(FAR, "free_colonist", 50, settlement_id="other")
    home.wishes.append(mine)
    other.wishes.append(theirs)
    registry.rebuild([home, other], lambda goods: True)
    registry.index_demand(mine)

    assert registry.discard_settlement("home") == 1
    assert registry.worker_wishes("free_colonist") == (theirs,)
    assert registry.wishes_at(NEAR) == []
