"""Validated configuration models for the planning engine."""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import TYPE_CHECKING

from platformdirs import user_config_dir
from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .rng import AIRandomness

CONFIG_FILENAME = "planner.toml"


class MissionRanges(BaseModel):
    """Maximum travel time, in turns, for each kind of mission target."""

    model_config = ConfigDict(extra="forbid")

    building: int = Field(default=5, ge=1)
    cash_in: int = Field(default=20, ge=1)
    missionary: int = Field(default=20, ge=1)
    # Low-ish: shipping tools to a settlement usually beats a long walk.
    pioneering: int = Field(default=10, ge=1)
    scouting: int = Field(default=20, ge=1)
    privateer: int = Field(default=8, ge=1)
    seek_short: int = Field(default=8, ge=1)
    seek_long: int = Field(default=16, ge=1)

    @field_validator("seek_long")
    @classmethod
    def _long_exceeds_short(cls, value: int, info: ValidationInfo) -> int:
        short = info.data.get("seek_short")
        if short is not None and value < short:
            raise ValueError("seek_long must not be shorter than seek_short")
        return value


class DiplomacySettings(BaseModel):
    """Constants used when scoring proposed trade agreements."""

    model_config = ConfigDict(extra="forbid")

    min_settlements_to_trade: int = Field(default=5, ge=0)
    min_units_to_trade: int = Field(default=10, ge=0)
    incite_weight: int = Field(default=30, ge=0)
    stance_weight: int = Field(default=100, ge=0)
    peace_bonus: int = Field(default=1000, ge=0)
    patience: int = Field(default=5, ge=0)
    # Percent chance per turn that a fresh peace treaty keeps holding.
    peace_probability: int = Field(default=90, ge=0, le=100)


class PlannerConfig(BaseModel):
    """Top-level configuration payload for one AI faction."""

    model_config = ConfigDict(extra="forbid")

    seed: int = Field(default=0, ge=0)
    max_iterations: int = Field(default=3, ge=1)
    early_age: int = Field(default=1, ge=0)
    defend_base_value: int = Field(default=150, gt=0)
    purchase_for_wishes: bool = Field(default=False)
    ranges: MissionRanges = Field(default_factory=MissionRanges)
    diplomacy: DiplomacySettings = Field(default_factory=DiplomacySettings)

    def randomness(self) -> AIRandomness:
        """Return a new :class:`~strategist.rng.AIRandomness` seeded from ``seed``."""

        from .rng import AIRandomness

        return AIRandomness(seed=self.seed)


def default_config_path() -> Path:
    """Return the per-user location of the planner configuration file."""

    return Path(user_config_dir("colony_strategist")) / CONFIG_FILENAME


def load_config(path: Path | str | None = None) -> PlannerConfig:
    """Load a :class:`PlannerConfig` from TOML.

    An explicit ``path`` must exist.  Without one the per-user configuration
    file is used when present, otherwise the defaults are returned.
    """

    if path is None:
        candidate = default_config_path()
        if not candidate.is_file():
            return PlannerConfig()
    else:
        candidate = Path(path)
        if not candidate.is_file():
            raise FileNotFoundError(candidate)
    with candidate.open("rb") as handle:
        payload = tomllib.load(handle)
    section = payload.get("planner", payload)
    return PlannerConfig.model_validate(section)


__all__ = [
    "DiplomacySettings",
    "MissionRanges",
    "PlannerConfig",
    "default_config_path",
    "load_config",
]
