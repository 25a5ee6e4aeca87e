"""Reference in-memory world implementing the planner's collaborators."""

from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:  # pragma: no cover - imported only for type checkers
    from .colony import ColonyManager
    from .executor import StepExecutor
    from .map import GameMap, HexCoord, Terrain
    from .oracles import StepResult
    from .scenario import build_demo
    from .server import LocalServer
    from .state import GameState, MarketPrices

__all__ = [
    "ColonyManager",
    "GameMap",
    "GameState",
    "HexCoord",
    "LocalServer",
    "MarketPrices",
    "StepExecutor",
    "StepResult",
    "Terrain",
    "build_demo",
]

_EXPORTS = {
    "ColonyManager": "strategist.world.colony",
    "GameMap": "strategist.world.map",
    "HexCoord": "strategist.world.map",
    "Terrain": "strategist.world.map",
    "GameState": "strategist.world.state",
    "MarketPrices": "strategist.world.state",
    "LocalServer": "strategist.world.server",
    "StepExecutor": "strategist.world.executor",
    "StepResult": "strategist.world.oracles",
    "build_demo": "strategist.world.scenario",
}


def __getattr__(name: str) -> Any:
    if name in _EXPORTS:
        module = import_module(_EXPORTS[name])
        value = getattr(module, name)
        globals()[name] = value
        return value
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__() -> list[str]:
    return sorted({*globals(), *__all__})
