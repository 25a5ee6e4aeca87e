"""Planning components for computer-controlled factions."""

from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:  # pragma: no cover - imported only for type checkers
    from .bargaining import TradeSession
    from .diplomacy import DiplomaticEvaluator
    from .improvements import TileImprovementIndex
    from .intelligence import NationIntelligenceCache
    from .missions import MissionFactory, invalid_reason
    from .orchestrator import TurnOrchestrator, TurnState
    from .planner import MissionPlanner, PlanningResult, Quotas
    from .recruitment import Recruitment
    from .report import ReportChannel, TurnReport
    from .requests import RequestPolicy
    from .stances import StanceManager, StrengthStanceAdvisor
    from .transport import TransportCoordinator
    from .wishes import WishRegistry

__all__ = [
    "DiplomaticEvaluator",
    "MissionFactory",
    "MissionPlanner",
    "NationIntelligenceCache",
    "PlanningResult",
    "Quotas",
    "Recruitment",
    "ReportChannel",
    "RequestPolicy",
    "StanceManager",
    "StrengthStanceAdvisor",
    "TileImprovementIndex",
    "TradeSession",
    "TransportCoordinator",
    "TurnOrchestrator",
    "TurnReport",
    "TurnState",
    "WishRegistry",
    "invalid_reason",
]

_EXPORTS = {
    "TradeSession": "strategist.ai.bargaining",
    "DiplomaticEvaluator": "strategist.ai.diplomacy",
    "TileImprovementIndex": "strategist.ai.improvements",
    "NationIntelligenceCache": "strategist.ai.intelligence",
    "MissionFactory": "strategist.ai.missions",
    "invalid_reason": "strategist.ai.missions",
    "TurnOrchestrator": "strategist.ai.orchestrator",
    "TurnState": "strategist.ai.orchestrator",
    "MissionPlanner": "strategist.ai.planner",
    "PlanningResult": "strategist.ai.planner",
    "Quotas": "strategist.ai.planner",
    "Recruitment": "strategist.ai.recruitment",
    "ReportChannel": "strategist.ai.report",
    "TurnReport": "strategist.ai.report",
    "RequestPolicy": "strategist.ai.requests",
    "StanceManager": "strategist.ai.stances",
    "StrengthStanceAdvisor": "strategist.ai.stances",
    "TransportCoordinator": "strategist.ai.transport",
    "WishRegistry": "strategist.ai.wishes",
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
