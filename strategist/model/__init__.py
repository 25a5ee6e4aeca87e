"""Plain data records shared by the planner and the reference world."""

from __future__ import annotations

from .factions import Faction, FoundingFather, NationSummary, Stance, StanceEvent, TensionLevel
from .goods import DEFAULT_GOODS, GoodsCatalog, GoodsCategory, GoodsType
from .missions import Mission, MissionKind, TransportManifest
from .settlements import Settlement, TileImprovementPlan
from .trade import DiplomaticTrade, TradeContext, TradeItem, TradeItemKind, TradeStatus
from .transport import HOMELAND, AIGoods, Location, Transportable, TransportableKind
from .units import AIUnit, Ability, Unit, UnitRole
from .wishes import Wish, WishKind, goods_wish, worker_wish

__all__ = [
    "AIGoods",
    "AIUnit",
    "Ability",
    "DEFAULT_GOODS",
    "DiplomaticTrade",
    "Faction",
    "FoundingFather",
    "GoodsCatalog",
    "GoodsCategory",
    "GoodsType",
    "HOMELAND",
    "Location",
    "Mission",
    "MissionKind",
    "NationSummary",
    "Settlement",
    "Stance",
    "StanceEvent",
    "TensionLevel",
    "TileImprovementPlan",
    "TradeContext",
    "TradeItem",
    "TradeItemKind",
    "TradeStatus",
    "TransportManifest",
    "Transportable",
    "TransportableKind",
    "Unit",
    "UnitRole",
    "Wish",
    "WishKind",
    "goods_wish",
    "worker_wish",
]
