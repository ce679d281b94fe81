# discrete waypoint graph for free-space (flight) movement
# src/nav_core/nav/waypoints.py
"""
WaypointGraph: explicit nodes + adjacency lists for agents that move
freely in open space.

- Nodes are placed from outside (FlightNodeGenerator, level tooling or
  tests) and handed to the graph.
- synthesize_connections() builds adjacency from distance, height and
  line-of-sight limits, keeping each node's best-scored candidates.
- Nodes carry no search state; AStarSearch keeps its own working table.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

import networkx as nx

from contracts.types import Bounds, Vec2, distance
from monitoring.bus import EventBus
from monitoring.events import EventType
from monitoring.logger import emit_event
from ..occupancy import OccupancyOracle
from ..snapshot import WaypointSnapshot


log = logging.getLogger(__name__)


@dataclass(eq=False)
class WaypointNode:
    """
    One placed waypoint.

    Identity semantics: two nodes at the same position are still distinct
    graph members. `connections` are references to other members; a node
    never owns its neighbors.
    """

    position: Vec2
    node_id: int = -1
    layer: Optional[int] = None
    connections: List["WaypointNode"] = field(default_factory=list, repr=False)

    @property
    def x(self) -> float:
        return self.position[0]

    @property
    def y(self) -> float:
        return self.position[1]

    def connect_to(self, other: "WaypointNode") -> bool:
        """Add a directed edge self -> other. Returns False if it already exists."""
        if other is self or any(c is other for c in self.connections):
            return False
        self.connections.append(other)
        return True

    def is_connected_to(self, other: "WaypointNode") -> bool:
        return any(c is other for c in self.connections)


@dataclass
class ConnectionRules:
    """Limits and scoring weights for connection synthesis."""

    max_connection_distance: float = 8.0
    max_height_difference: float = 5.0
    max_connections_per_node: int = 6
    horizontal_preference: float = 1.0
    same_layer_bonus: float = 0.5
    same_layer_tolerance: float = 0.5   # |dy| treated as "same layer" when layers are unknown
    require_line_of_sight: bool = True

    @classmethod
    def from_config(cls, cfg) -> "ConnectionRules":
        return cls(
            max_connection_distance=cfg.max_connection_distance,
            max_height_difference=cfg.max_height_difference,
            max_connections_per_node=cfg.max_connections_per_node,
            horizontal_preference=cfg.horizontal_preference,
            same_layer_bonus=cfg.same_layer_bonus,
        )


def connection_score(a: WaypointNode, b: WaypointNode, rules: ConnectionRules) -> float:
    """
    Priority of the candidate edge a -> b (higher is better).

    Rewards shorter distance, horizontal alignment (scaled by
    horizontal_preference) and same-layer pairs.
    """
    d = distance(a.position, b.position)
    if d < 1e-9:
        return 0.0
    dx = abs(b.x - a.x)
    dy = abs(b.y - a.y)

    score = 1.0 - d / rules.max_connection_distance
    score += rules.horizontal_preference * (dx / d)
    if a.layer is not None and b.layer is not None:
        same_layer = a.layer == b.layer
    else:
        same_layer = dy <= rules.same_layer_tolerance
    if same_layer:
        score += rules.same_layer_bonus
    return score


class WaypointGraph:
    """
    Set of WaypointNodes with adjacency lists.

    It does NOT:
    - Search (AStarSearch does).
    - Decide where nodes go (FlightNodeGenerator or the caller does).
    """

    def __init__(
        self,
        oracle: Optional[OccupancyOracle] = None,
        rules: Optional[ConnectionRules] = None,
    ) -> None:
        self._oracle = oracle
        self.rules = rules or ConnectionRules()
        self._nodes: List[WaypointNode] = []
        self._members: Dict[int, WaypointNode] = {}
        self._next_id = 0

    # ------------------------------------------------------------------
    # Membership
    # ------------------------------------------------------------------

    def add_node(self, position: Vec2, layer: Optional[int] = None) -> WaypointNode:
        node = WaypointNode(position=(float(position[0]), float(position[1])), layer=layer)
        return self.add(node)

    def add(self, node: WaypointNode) -> WaypointNode:
        """Adopt an externally built node and assign it an id."""
        if id(node) in self._members:
            return node
        node.node_id = self._next_id
        self._next_id += 1
        self._nodes.append(node)
        self._members[id(node)] = node
        return node

    def extend(self, nodes: Iterable[WaypointNode]) -> None:
        for node in nodes:
            self.add(node)

    def clear(self) -> None:
        self._nodes.clear()
        self._members.clear()
        self._next_id = 0

    @property
    def nodes(self) -> Tuple[WaypointNode, ...]:
        return tuple(self._nodes)

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[WaypointNode]:
        return iter(list(self._nodes))

    def __contains__(self, node: object) -> bool:
        return id(node) in self._members and self._members[id(node)] is node

    # ------------------------------------------------------------------
    # Edges
    # ------------------------------------------------------------------

    def connect(self, a: WaypointNode, b: WaypointNode, bidirectional: bool = True) -> None:
        """Manually connect two member nodes."""
        if a not in self or b not in self:
            raise ValueError("both nodes must belong to this graph")
        a.connect_to(b)
        if bidirectional:
            b.connect_to(a)

    def edges(self) -> Iterator[Tuple[int, int]]:
        for node in self._nodes:
            for other in node.connections:
                yield node.node_id, other.node_id

    def synthesize_connections(self) -> int:
        """
        Rebuild every adjacency list from the connection rules.

        For every pair within max_connection_distance and
        max_height_difference with a clear straight line, score the
        candidate; each node keeps its top max_connections_per_node.
        Edges are directed: a keeping b does not force b to keep a.

        Returns the number of directed edges.
        """
        rules = self.rules
        line_of_sight: Dict[Tuple[int, int], bool] = {}
        total = 0

        for node in self._nodes:
            node.connections = []

        for a in self._nodes:
            candidates: List[Tuple[float, int, WaypointNode]] = []
            for b in self._nodes:
                if b is a:
                    continue
                if distance(a.position, b.position) > rules.max_connection_distance:
                    continue
                if abs(b.y - a.y) > rules.max_height_difference:
                    continue
                if rules.require_line_of_sight and not self._clear(a, b, line_of_sight):
                    continue
                candidates.append((-connection_score(a, b, rules), b.node_id, b))

            candidates.sort(key=lambda c: (c[0], c[1]))
            a.connections = [b for _, _, b in candidates[: rules.max_connections_per_node]]
            total += len(a.connections)

        log.info("waypoint connections synthesized: %d nodes, %d edges", len(self._nodes), total)
        return total

    # ------------------------------------------------------------------
    # Spatial queries
    # ------------------------------------------------------------------

    def nearest_node(self, point: Vec2) -> Optional[WaypointNode]:
        best: Optional[WaypointNode] = None
        best_d = math.inf
        for node in self._nodes:
            d = distance(node.position, point)
            if d < best_d:
                best, best_d = node, d
        return best

    def furthest_node(self, point: Vec2) -> Optional[WaypointNode]:
        best: Optional[WaypointNode] = None
        best_d = -1.0
        for node in self._nodes:
            d = distance(node.position, point)
            if d > best_d:
                best, best_d = node, d
        return best

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def to_digraph(self) -> nx.DiGraph:
        """
        networkx view of the current network.

        Nodes are node ids with a `pos` attribute; edges carry their
        Euclidean length as `weight`. The view is a copy: editing it does
        not touch the waypoint graph.
        """
        g = nx.DiGraph()
        for node in self._nodes:
            g.add_node(node.node_id, pos=node.position, layer=node.layer)
        for node in self._nodes:
            for other in node.connections:
                g.add_edge(node.node_id, other.node_id, weight=distance(node.position, other.position))
        return g

    def island_count(self) -> int:
        """Number of weakly connected components (0 for an empty graph)."""
        if not self._nodes:
            return 0
        return nx.number_weakly_connected_components(self.to_digraph())

    def snapshot(self, last_path: Iterable[WaypointNode] = ()) -> WaypointSnapshot:
        return WaypointSnapshot(
            nodes={n.node_id: n.position for n in self._nodes},
            edges=tuple(self.edges()),
            last_path=tuple(n.node_id for n in last_path),
            metadata={"max_connections_per_node": self.rules.max_connections_per_node},
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _clear(
        self,
        a: WaypointNode,
        b: WaypointNode,
        cache: Dict[Tuple[int, int], bool],
    ) -> bool:
        if self._oracle is None:
            return True
        key = (min(a.node_id, b.node_id), max(a.node_id, b.node_id))
        hit = cache.get(key)
        if hit is None:
            hit = self._oracle.is_line_clear(a.position, b.position)
            cache[key] = hit
        return hit


class FlightNodeGenerator:
    """
    Places flight waypoints over a bounds region.

    For every column (stepping by node_spacing across the padded bounds)
    the ground height is found with a downward ray; vertical_layers nodes
    are stacked from min_height_above_ground over it. Nodes above the
    bounds ceiling or too close to geometry are skipped. Connection
    synthesis runs at the end.
    """

    def __init__(
        self,
        oracle: OccupancyOracle,
        graph: WaypointGraph,
        *,
        node_spacing: float = 2.0,
        vertical_spacing: float = 2.0,
        vertical_layers: int = 4,
        min_height_above_ground: float = 4.0,
        obstacle_check_radius: float = 1.0,
        bounds_padding: float = 2.0,
        bus: Optional[EventBus] = None,
    ) -> None:
        if node_spacing <= 0 or vertical_spacing <= 0:
            raise ValueError("waypoint spacing must be positive")
        self._oracle = oracle
        self._graph = graph
        self.node_spacing = float(node_spacing)
        self.vertical_spacing = float(vertical_spacing)
        self.vertical_layers = int(vertical_layers)
        self.min_height_above_ground = float(min_height_above_ground)
        self.obstacle_check_radius = float(obstacle_check_radius)
        self.bounds_padding = float(bounds_padding)
        self._bus = bus

    @classmethod
    def from_config(
        cls,
        oracle: OccupancyOracle,
        graph: WaypointGraph,
        cfg,
        bus: Optional[EventBus] = None,
    ) -> "FlightNodeGenerator":
        return cls(
            oracle,
            graph,
            node_spacing=cfg.node_spacing,
            vertical_spacing=cfg.vertical_spacing,
            vertical_layers=cfg.vertical_layers,
            min_height_above_ground=cfg.min_height_above_ground,
            obstacle_check_radius=cfg.obstacle_check_radius,
            bounds_padding=cfg.bounds_padding,
            bus=bus,
        )

    def generate(self, bounds: Bounds) -> int:
        """Replace the graph's nodes with a fresh flight network. Returns node count."""
        graph = self._graph
        graph.clear()

        area = bounds.expanded(self.bounds_padding)
        columns = int(math.floor((area.max_x - area.min_x) / self.node_spacing)) + 1
        drop = area.max_y - area.min_y

        for i in range(columns):
            x = area.min_x + i * self.node_spacing
            ground = self._oracle.ground_height((x, area.max_y), max_distance=drop)
            base = area.min_y if ground is None else ground

            for layer in range(self.vertical_layers):
                y = base + self.min_height_above_ground + layer * self.vertical_spacing
                if y > area.max_y:
                    break
                if not self._oracle.is_area_clear((x, y), self.obstacle_check_radius):
                    continue
                graph.add_node((x, y), layer=layer)

        edges = graph.synthesize_connections()
        islands = graph.island_count()
        log.info(
            "flight network over (%.1f,%.1f)-(%.1f,%.1f): %d nodes, %d edges, %d islands",
            area.min_x,
            area.min_y,
            area.max_x,
            area.max_y,
            len(graph),
            edges,
            islands,
        )
        emit_event(
            self._bus,
            module=__name__,
            event_type=EventType.WAYPOINTS_BUILT,
            message="Flight waypoint network built",
            payload={"nodes": len(graph), "edges": edges, "islands": islands},
        )
        return len(graph)


__all__ = [
    "ConnectionRules",
    "FlightNodeGenerator",
    "WaypointGraph",
    "WaypointNode",
    "connection_score",
]
