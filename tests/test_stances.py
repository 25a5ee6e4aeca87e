from strategist.ai.stances import StanceManager, StrengthStanceAdvisor
from strategist.model.factions import Faction, Stance
from strategist.rng import AIRandomness
from strategist.world.map import GameMap
from strategist.world.server import LocalServer
from strategist.world.state import GameState


class _Advisor:
    def __init__(self, wanted: dict[str, Stance]) -> None:
        self.wanted = wanted

    def desired_stance(self, owner: str, other: str) -> Stance | None:
        return self.wanted.get(other)


def _state() -> GameState:
    state = GameState(
        GameMap.from_rows(["~.~"]),
        factions=[Faction("dutch"), Faction("english"), Faction("french"), Faction("spanish")],
    )
    state.turn = 0
    state.set_stance("dutch", "english", Stance.PEACE)
    state.set_stance("dutch", "french", Stance.CEASE_FIRE)
    state.turn = 4
    return state


def _manager(
    state: GameState, wanted: dict[str, Stance], *, peace_probability: int = 90
) -> tuple[StanceManager, LocalServer]:
    server = LocalServer(state)
    manager = StanceManager(
        "dutch",
        state,
        server,
        _Advisor(wanted),
        AIRandomness(seed=11),
        peace_probability=peace_probability,
    )
    return manager, server


def test_advisor_follows_strength_thresholds() -> None:
    ratios = {"weak": 0.9, "strong": 0.1, "even": 0.5, "unknown": -1.0}
    advisor = StrengthStanceAdvisor(ratios.__getitem__)

    assert advisor.desired_stance("dutch", "weak") is Stance.WAR
    assert advisor.desired_stance("dutch", "strong") is Stance.PEACE
    assert advisor.desired_stance("dutch", "even") is None
    assert advisor.desired_stance("dutch", "unknown") is None


def test_stance_changes_are_requested_and_reported() -> None:
    state = _state()
    manager, _ = _manager(state, {"french": Stance.PEACE, "spanish": Stance.WAR})

    changed = manager.determine_stances()

    assert changed == {"french": Stance.PEACE}
    assert state.faction("dutch").stance_towards("french") is Stance.PEACE  # type: ignore[union-attr]
    assert state.faction("dutch").stance_towards("spanish") is Stance.UNCONTACTED  # type: ignore[union-attr]


def test_unchanged_stances_are_not_requested() -> None:
    state = _state()
    manager, _ = _manager(state, {"english": Stance.PEACE})

    assert manager.determine_stances() == {}


def test_certain_peace_blocks_war() -> None:
    state = _state()
    manager, _ = _manager(state, {"english": Stance.WAR}, peace_probability=100)

    assert manager.peace_holds("english")
    assert manager.determine_stances() == {}
    assert state.faction("dutch").stance_towards("english") is Stance.PEACE  # type: ignore[union-attr]


def test_expired_peace_allows_war() -> None:
    state = _state()
    manager, _ = _manager(state, {"english": Stance.WAR}, peace_probability=0)

    assert not manager.peace_holds("english")
    assert manager.determine_stances() == {"english": Stance.WAR}
    assert state.faction("english").at_war_with("dutch")  # type: ignore[union-attr]


def test_no_treaty_means_nothing_restrains_war() -> None:
    state = _state()
    manager, _ = _manager(state, {})

    assert not manager.peace_holds("spanish")


def test_refused_requests_are_not_reported() -> None:
    state = _state()
    manager, server = _manager(state, {"french": Stance.WAR})
    server.refuse_requests = True

    assert manager.determine_stances() == {}
    assert state.faction("dutch").stance_towards("french") is Stance.CEASE_FIRE  # type: ignore[union-attr]
