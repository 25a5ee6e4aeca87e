from pathlib import Path

import pytest
from pydantic import ValidationError

from strategist import config as config_module
from strategist.config import MissionRanges, PlannerConfig, load_config


def test_defaults_match_planner_constants() -> None:
    config = PlannerConfig()

    assert config.max_iterations == 3
    assert config.defend_base_value == 150
    assert config.ranges.building == 5
    assert config.ranges.pioneering == 10
    assert config.ranges.seek_short == 8
    assert config.ranges.seek_long == 16
    assert config.diplomacy.min_settlements_to_trade == 5
    assert config.diplomacy.min_units_to_trade == 10
    assert config.diplomacy.patience == 5
    assert config.diplomacy.peace_bonus == 1000


def test_unknown_keys_are_rejected() -> None:
    with pytest.raises(ValidationError):
        PlannerConfig.model_validate({"max_iterations": 2, "cheat": True})
    with pytest.raises(ValidationError):
        PlannerConfig.model_validate({"metadata": {"owner": "dutch"}})


def test_long_seek_range_can_not_be_shorter() -> None:
    with pytest.raises(ValidationError):
        MissionRanges(seek_short=10, seek_long=5)


def test_load_config_reads_planner_section(tmp_path: Path) -> None:
    path = tmp_path / "planner.toml"
    path.write_text(
        "[planner]\nseed = 7\nmax_iterations = 2\n\n[planner.ranges]\nbuilding = 3\n",
        encoding="utf-8",
    )

    config = load_config(path)

    assert config.seed == 7
    assert config.max_iterations == 2
    assert config.ranges.building == 3
    assert config.ranges.scouting == 20


def test_load_config_requires_explicit_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.toml")


def test_load_config_falls_back_to_defaults(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(config_module, "default_config_path", lambda: tmp_path / "none.toml")

    assert load_config() == PlannerConfig()


def test_randomness_is_reproducible_per_seed() -> None:
    first = PlannerConfig(seed=3).randomness()
    second = PlannerConfig(seed=3).randomness()

    draws = [first.random_int("diplomacy", 1000) for _ in range(5)]
    assert draws == [second.random_int("diplomacy", 1000) for _ in range(5)]
    with pytest.raises(ValueError):
        first.random_int("diplomacy", 0)
