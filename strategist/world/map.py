"""Hex map with networkx-backed reachability queries."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import math
from typing import (
    TYPE_CHECKING,
    Any,
    ClassVar,
    Iterator,
    Mapping,
    Sequence,
    Tuple,
    TypeAlias,
)

import networkx as nx

if TYPE_CHECKING:  # pragma: no cover - typing only
    from ..model.units import Unit

    MapGraph: TypeAlias = nx.Graph[Any]
else:  # pragma: no cover - runtime alias without subscripting
    MapGraph: TypeAlias = nx.Graph

HOMELAND = "homeland"
"""Location sentinel for units and goods waiting across the ocean."""


@dataclass(frozen=True)
class HexCoord:
    """Axial hex-grid coordinate."""

    q: int
    r: int

    @property
    def s(self) -> int:
        return -self.q - self.r

    def translate(self, dq: int, dr: int) -> "HexCoord":
        return HexCoord(self.q + dq, self.r + dr)

    def distance_to(self, other: "HexCoord") -> int:
        return max(abs(self.q - other.q), abs(self.r - other.r), abs(self.s - other.s))

    DIRECTIONS: ClassVar[Tuple[Tuple[int, int], ...]] = (
        (1, 0),
        (1, -1),
        (0, -1),
        (-1, 0),
        (-1, 1),
        (0, 1),
    )

    def neighbors(self) -> Iterator["HexCoord"]:
        for dq, dr in self.DIRECTIONS:
            yield self.translate(dq, dr)

    def __str__(self) -> str:
        return f"({self.q},{self.r})"


class Terrain(str, Enum):
    """Terrain classes with their movement cost and settlement appeal."""

    PLAINS = "plains"
    FOREST = "forest"
    HILLS = "hills"
    MOUNTAINS = "mountains"
    OCEAN = "ocean"

    @property
    def is_water(self) -> bool:
        return self is Terrain.OCEAN


MOVE_COSTS: Mapping[Terrain, int] = {
    Terrain.PLAINS: 1,
    Terrain.FOREST: 2,
    Terrain.HILLS: 2,
    Terrain.MOUNTAINS: 3,
    Terrain.OCEAN: 1,
}

SITE_VALUES: Mapping[Terrain, int] = {
    Terrain.PLAINS: 3,
    Terrain.FOREST: 2,
    Terrain.HILLS: 2,
    Terrain.MOUNTAINS: 0,
    Terrain.OCEAN: 0,
}

_ROW_SYMBOLS: Mapping[str, Terrain] = {
    ".": Terrain.PLAINS,
    "f": Terrain.FOREST,
    "h": Terrain.HILLS,
    "m": Terrain.MOUNTAINS,
    "~": Terrain.OCEAN,
}


class GameMap:
    """Tile graph answering turns-to-reach and landmass queries.

    Land units move along land edges only.  Naval units move on water and
    may enter a coastal land tile only when it is their destination.  Units
    crossing from or to the homeland pay ``homeland_turns`` and must embark
    on the coast.
    """

    def __init__(self, graph: MapGraph, *, homeland_turns: int = 3) -> None:
        if homeland_turns < 0:
            raise ValueError("homeland_turns must be non-negative")
        self.graph = graph
        self.homeland_turns = homeland_turns
        self._contiguity: dict[HexCoord, int] | None = None

    # ------------------------------------------------------------------
    @classmethod
    def from_terrain(
        cls, terrain: Mapping[HexCoord, Terrain], *, homeland_turns: int = 3
    ) -> "GameMap":
        graph: MapGraph = nx.Graph()
        for coord, kind in terrain.items():
            graph.add_node(coord, terrain=kind, rumour=False, owner=None)
        for coord in terrain:
            for neighbor in coord.neighbors():
                if neighbor in terrain and not graph.has_edge(coord, neighbor):
                    graph.add_edge(coord, neighbor)
        return cls(graph, homeland_turns=homeland_turns)

    @classmethod
    def from_rows(cls, rows: Sequence[str], *, homeland_turns: int = 3) -> "GameMap":
        """Build a map from text rows, one character per tile.

        ``.`` plains, ``f`` forest, ``h`` hills, ``m`` mountains, ``~`` ocean.
        Row ``r`` column ``q`` maps to ``HexCoord(q, r)``.
        """

        terrain: dict[HexCoord, Terrain] = {}
        for r, row in enumerate(rows):
            for q, symbol in enumerate(row.strip()):
                try:
                    terrain[HexCoord(q, r)] = _ROW_SYMBOLS[symbol]
                except KeyError as exc:
                    raise ValueError(f"unknown terrain symbol {symbol!r}") from exc
        return cls.from_terrain(terrain, homeland_turns=homeland_turns)

    # ------------------------------------------------------------------
    def __contains__(self, coord: object) -> bool:
        return coord in self.graph

    def __len__(self) -> int:
        return self.graph.number_of_nodes()

    def tiles(self) -> Iterator[HexCoord]:
        return iter(self.graph.nodes)

    def terrain(self, coord: HexCoord) -> Terrain:
        return self.graph.nodes[coord]["terrain"]

    def is_land(self, coord: HexCoord) -> bool:
        return coord in self.graph and not self.terrain(coord).is_water

    def is_coastal(self, coord: HexCoord) -> bool:
        if not self.is_land(coord):
            return False
        return any(
            self.terrain(neighbor).is_water for neighbor in self.graph.neighbors(coord)
        )

    def has_rumour(self, coord: HexCoord) -> bool:
        return bool(self.graph.nodes[coord].get("rumour", False))

    def set_rumour(self, coord: HexCoord, present: bool = True) -> None:
        self.graph.nodes[coord]["rumour"] = present

    def owner(self, coord: HexCoord) -> str | None:
        return self.graph.nodes[coord].get("owner")

    def set_owner(self, coord: HexCoord, owner: str | None) -> None:
        self.graph.nodes[coord]["owner"] = owner

    def site_value(self, coord: HexCoord) -> int:
        """Appeal of ``coord`` as a settlement site; zero when unusable."""

        if not self.is_land(coord) or self.owner(coord) is not None:
            return 0
        value = SITE_VALUES[self.terrain(coord)]
        if value and self.is_coastal(coord):
            value += 1
        return value

    # ------------------------------------------------------------------
    def contiguity(self, location: object) -> int | None:
        """Identifier of the landmass or water body holding ``location``."""

        if not isinstance(location, HexCoord) or location not in self.graph:
            return None
        if self._contiguity is None:
            self._contiguity = self._label_components()
        return self._contiguity.get(location)

    def _label_components(self) -> dict[HexCoord, int]:
        labels: dict[HexCoord, int] = {}
        counter = 0
        for is_water in (False, True):
            nodes = [n for n in self.graph.nodes if self.terrain(n).is_water is is_water]
            subgraph = self.graph.subgraph(nodes)
            components = sorted(
                nx.connected_components(subgraph),
                key=lambda component: min((c.r, c.q) for c in component),
            )
            for component in components:
                counter += 1
                label = -counter if is_water else counter
                for coord in component:
                    labels[coord] = label
        return labels

    # ------------------------------------------------------------------
    def turns_to_reach(
        self,
        unit: Unit,
        source: object,
        target: object,
        relaxed: bool = False,
    ) -> int | None:
        """Return whole turns for ``unit`` to move from ``source`` to ``target``.

        ``None`` means unreachable.  With ``relaxed`` every step costs one
        movement point regardless of terrain.
        """

        if source is None or target is None:
            return None
        if source == target:
            return 0
        if source == HOMELAND or target == HOMELAND:
            return self._homeland_turns(unit, source, target)
        if source not in self.graph or target not in self.graph:
            return None
        transported = unit.carrier_id is not None or unit.in_homeland
        weight = self._weight_function(unit, source, target, relaxed, transported)
        try:
            cost = nx.astar_path_length(
                self.graph,
                source,
                target,
                heuristic=lambda a, b: a.distance_to(b),
                weight=weight,
            )
        except (nx.NetworkXNoPath, nx.NodeNotFound):
            return None
        return math.ceil(cost / max(1, unit.moves_per_turn))

    def path(self, unit: Unit, source: HexCoord, target: HexCoord) -> list[HexCoord] | None:
        """Return the tiles from ``source`` to ``target`` or ``None``."""

        if source not in self.graph or target not in self.graph:
            return None
        weight = self._weight_function(unit, source, target, False, False)
        try:
            return nx.astar_path(
                self.graph,
                source,
                target,
                heuristic=lambda a, b: a.distance_to(b),
                weight=weight,
            )
        except (nx.NetworkXNoPath, nx.NodeNotFound):
            return None

    def step_cost(self, coord: HexCoord) -> int:
        return MOVE_COSTS[self.terrain(coord)]

    def _homeland_turns(self, unit: Unit, source: object, target: object) -> int | None:
        tile = target if source == HOMELAND else source
        if not unit.naval and unit.carrier_id is None and not unit.in_homeland:
            return None
        if isinstance(tile, HexCoord):
            if tile not in self.graph:
                return None
            if not (self.terrain(tile).is_water or self.is_coastal(tile)):
                return None
        return self.homeland_turns

    def _weight_function(
        self,
        unit: Unit,
        source: HexCoord,
        target: HexCoord,
        relaxed: bool,
        transported: bool,
    ):
        def step_cost(destination: HexCoord) -> int:
            return 1 if relaxed else MOVE_COSTS[self.terrain(destination)]

        if transported:
            def weight(u: HexCoord, v: HexCoord, _data: dict) -> int:
                return step_cost(v)

            return weight

        if unit.naval:
            def weight(u: HexCoord, v: HexCoord, _data: dict) -> int | None:
                if not self.terrain(u).is_water and u != source:
                    return None
                if not self.terrain(v).is_water and v != target:
                    return None
                return step_cost(v)

            return weight

        def weight(u: HexCoord, v: HexCoord, _data: dict) -> int | None:
            if self.terrain(u).is_water or self.terrain(v).is_water:
                return None
            return step_cost(v)

        return weight


__all__ = ["HOMELAND", "GameMap", "HexCoord", "MOVE_COSTS", "Terrain"]
