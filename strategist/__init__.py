"""Per-turn strategic planning engine for computer-controlled factions."""

from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:  # pragma: no cover - imported only for type checkers
    from .ai.orchestrator import TurnOrchestrator
    from .config import PlannerConfig

__version__ = "0.4.0"

__all__ = ["PlannerConfig", "TurnOrchestrator", "__version__"]

_EXPORTS = {
    "PlannerConfig": "strategist.config",
    "TurnOrchestrator": "strategist.ai.orchestrator",
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
