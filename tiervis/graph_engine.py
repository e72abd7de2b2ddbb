import logging
import math
import random
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Optional, Tuple

from .config import LayoutConfig
from .errors import DegenerateInputError, DisposedError, LinkResolutionError, UnknownNodeError
from .forces import default_forces
from .integrator import Integrator
from .quadtree import QuadTree

logger = logging.getLogger(__name__)

GOLDEN_ANGLE = math.pi * (3 - math.sqrt(5))


@dataclass(frozen=True)
class NodeSpec:
    id: Any
    weight: float = 1.0
    group: Any = None
    x: Optional[float] = None
    y: Optional[float] = None


@dataclass(frozen=True)
class LinkSpec:
    source_id: Any
    target_id: Any
    distance: Optional[float] = None
    strength: Optional[float] = None


class Node:
    def __init__(self, node_id, index, weight=1.0, radius=5.0, group=None):
        self.id = node_id
        self.index = index
        self.weight = weight
        self.radius = radius
        self.group = group
        self.x = 0.0
        self.y = 0.0
        self.vx = 0.0
        self.vy = 0.0
        self.pin = None
        self.degree = 0

    @property
    def pinned(self):
        return self.pin is not None

    @property
    def position(self):
        return self.x, self.y

    def __repr__(self):
        return f"Node({self.id!r}, x={self.x:.2f}, y={self.y:.2f}, pin={self.pin})"


class Link:
    def __init__(self, source_id, target_id, source, target, distance, strength=None):
        self.source_id = source_id
        self.target_id = target_id
        self.source = source  # arena index
        self.target = target
        self.distance = distance
        self.strength = strength

    def __repr__(self):
        return f"Link({self.source_id!r} -> {self.target_id!r}, distance={self.distance}, strength={self.strength})"


@dataclass(frozen=True)
class Snapshot:
    """Read-only positions of every node after a tick, plus the cooling energy."""

    positions: Mapping
    alpha: float
    tick: int = 0

    def __getitem__(self, node_id) -> Tuple[float, float]:
        return self.positions[node_id]

    def __contains__(self, node_id):
        return node_id in self.positions

    def __len__(self):
        return len(self.positions)


class SimulationState:
    def __init__(self):
        self.nodes = []
        self.links = []
        self.index_of = {}  # id -> arena index
        self.alpha = 1.0
        self.ticks = 0

    def clear(self):
        self.nodes = []
        self.links = []
        self.index_of = {}


def _node_spec(item):
    if isinstance(item, NodeSpec):
        return item
    if isinstance(item, Mapping):
        if "id" not in item:
            raise DegenerateInputError(f"Node entry without an id: {item!r}")
        return NodeSpec(item["id"], item.get("weight", 1.0), item.get("group"), item.get("x"), item.get("y"))
    if isinstance(item, tuple):
        try:
            return NodeSpec(*item)
        except TypeError:
            raise DegenerateInputError(f"Node tuple must be (id, weight, group, x, y), got {item!r}") from None
    raise DegenerateInputError(f"Cannot read node entry: {item!r}")


def _link_spec(item):
    if isinstance(item, LinkSpec):
        return item
    if isinstance(item, Mapping):
        source = item.get("source_id", item.get("source"))
        target = item.get("target_id", item.get("target"))
        if source is None or target is None:
            raise DegenerateInputError(f"Link entry without endpoints: {item!r}")
        return LinkSpec(source, target, item.get("distance"), item.get("strength"))
    if isinstance(item, tuple):
        try:
            return LinkSpec(*item)
        except TypeError:
            raise DegenerateInputError(f"Link tuple must be (source, target, distance, strength), got {item!r}") from None
    raise DegenerateInputError(f"Cannot read link entry: {item!r}")


def _finite(value, what):
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise DegenerateInputError(f"{what} must be a number, got {value!r}") from None
    if not math.isfinite(value):
        raise DegenerateInputError(f"{what} must be finite, got {value!r}")
    return value


class Simulation:
    """Owns one layout: node arena, resolved links, forces and cooling state.

    Time only advances through tick(); the host decides the cadence.
    """

    def __init__(self, config=None, seed=0, forces=None):
        self.config = config or LayoutConfig()
        self.seed = seed
        self.state = SimulationState()
        self.forces = list(forces) if forces is not None else default_forces(self.config)
        self.integrator = Integrator(self.config)
        self.warnings = []
        self._rng = random.Random(seed)
        self._disposed = False

    # --------------------------
    # Loading
    # --------------------------
    def load(self, nodes, links):
        """Replaces the whole node/link set. Returns the dropped-link warnings."""
        self._check("load nodes")
        cfg = self.config
        specs = [_node_spec(item) for item in nodes]
        previous = {node.id: node for node in self.state.nodes}

        arena = []
        index_of = {}
        for spec in specs:
            if spec.id in index_of:
                raise DegenerateInputError(f"Duplicate node id: {spec.id!r}")
            weight = _finite(spec.weight, f"weight of {spec.id!r}")
            node = Node(spec.id, len(arena), weight, cfg.radius_for(weight), spec.group)
            index_of[spec.id] = node.index
            arena.append(node)

        links_out = []
        warnings = []
        for item in links:
            spec = _link_spec(item)
            missing = [nid for nid in (spec.source_id, spec.target_id) if nid not in index_of]
            if missing:
                warning = LinkResolutionError(spec.source_id, spec.target_id, missing[0])
                logger.warning(str(warning))
                warnings.append(warning)
                continue

            distance = cfg.link_distance if spec.distance is None else _finite(spec.distance, "link distance")
            if distance <= 0:
                raise DegenerateInputError(f"Link {spec.source_id!r} -> {spec.target_id!r} has distance {distance}")
            strength = spec.strength if spec.strength is not None else cfg.link_strength
            if strength is not None:
                strength = _finite(strength, "link strength")

            links_out.append(Link(spec.source_id, spec.target_id,
                                  index_of[spec.source_id], index_of[spec.target_id],
                                  distance, strength))

        # Degree drives the spring split and the automatic strength
        for link in links_out:
            if link.source != link.target:
                arena[link.source].degree += 1
                arena[link.target].degree += 1
        for link in links_out:
            if link.strength is None:
                hub = max(arena[link.source].degree, arena[link.target].degree, 1)
                link.strength = 1.0 / hub

        # Positions: explicit, carried over, or seeded placement
        for spec, node in zip(specs, arena):
            old = previous.get(node.id)
            if spec.x is not None and spec.y is not None:
                x = _finite(spec.x, f"x of {node.id!r}")
                y = _finite(spec.y, f"y of {node.id!r}")
                node.x, node.y = cfg.clamp(x, y)
            elif old is not None:
                node.x, node.y = old.x, old.y
                node.vx, node.vy = old.vx, old.vy
            else:
                node.x, node.y = self._place(node.index)
            if old is not None and old.pin is not None:
                node.pin = old.pin

        self.state.nodes = arena
        self.state.links = links_out
        self.state.index_of = index_of
        self.state.alpha = 1.0
        self.warnings = warnings

        logger.info(f"Loaded {len(arena)} nodes, {len(links_out)} links ({len(warnings)} dropped).")
        return warnings

    replace = load

    def _place(self, i):
        cfg = self.config
        cx, cy = cfg.center
        radius = cfg.initial_radius * math.sqrt(0.5 + i)
        angle = i * GOLDEN_ANGLE
        jitter = cfg.initial_jitter
        x = cx + radius * math.cos(angle) + self._rng.uniform(-jitter, jitter)
        y = cy + radius * math.sin(angle) + self._rng.uniform(-jitter, jitter)
        return cfg.clamp(x, y)

    # --------------------------
    # Stepping
    # --------------------------
    def tick(self):
        """Advances the layout by one step and returns the new snapshot."""
        self._check("tick")
        state = self.state
        nodes = state.nodes
        if not nodes:
            return self.snapshot()

        n = len(nodes)

        # 1. Spatial index
        index = QuadTree([node.x for node in nodes], [node.y for node in nodes])

        # 2. Forces (read-only pass, summed afterwards)
        dvx = [0.0] * n
        dvy = [0.0] * n
        for force in self.forces:
            fx, fy = force.apply(state, index, state.alpha)
            for i in range(n):
                dvx[i] += fx[i]
                dvy[i] += fy[i]

        # 3. Integration
        self.integrator.step(nodes, dvx, dvy)

        # 4. Cooling
        was_settled = self.is_settled()
        state.alpha = self.integrator.cool(state.alpha)
        state.ticks += 1
        if not was_settled and self.is_settled():
            logger.debug(f"Layout settled after {state.ticks} ticks.")

        return self.snapshot()

    def run(self, max_ticks=1000):
        """Ticks until settled or until max_ticks. Returns the ticks taken."""
        self._check("run")
        count = 0
        while count < max_ticks and not self.is_settled():
            self.tick()
            count += 1
        return count

    def snapshot(self):
        self._check("take a snapshot")
        positions = {node.id: (node.x, node.y) for node in self.state.nodes}
        return Snapshot(MappingProxyType(positions), self.state.alpha, self.state.ticks)

    def is_settled(self):
        self._check("query settling")
        return self.state.alpha <= self.config.alpha_min

    def reheat(self, amount=0.3):
        """Bumps alpha up without touching positions."""
        self._check("reheat")
        if amount < 0:
            raise ValueError(f"reheat amount must be >= 0, got {amount}")
        self.state.alpha = min(1.0, self.state.alpha + amount)

    # --------------------------
    # Node access and pins
    # --------------------------
    def node(self, node_id):
        self._check("look up nodes")
        try:
            return self.state.nodes[self.state.index_of[node_id]]
        except KeyError:
            raise UnknownNodeError(node_id) from None

    def pin(self, node_id, x, y):
        node = self.node(node_id)
        node.pin = self.config.clamp(_finite(x, "pin x"), _finite(y, "pin y"))

    def unpin(self, node_id):
        node = self.node(node_id)
        node.pin = None
        node.vx = 0.0
        node.vy = 0.0

    @property
    def nodes(self):
        self._check("read nodes")
        return tuple(self.state.nodes)

    @property
    def links(self):
        self._check("read links")
        return tuple(self.state.links)

    @property
    def alpha(self):
        self._check("read alpha")
        return self.state.alpha

    @property
    def ticks(self):
        self._check("read the tick count")
        return self.state.ticks

    def __contains__(self, node_id):
        return not self._disposed and node_id in self.state.index_of

    def __len__(self):
        self._check("count nodes")
        return len(self.state.nodes)

    # --------------------------
    # Lifecycle
    # --------------------------
    @property
    def disposed(self):
        return self._disposed

    def dispose(self):
        if self._disposed:
            return
        self.state.clear()
        self.warnings = []
        self._disposed = True
        logger.debug("Simulation disposed.")

    def _check(self, operation):
        if self._disposed:
            raise DisposedError(operation)


def build(nodes, links, config=None, seed=0, forces=None):
    """Creates a simulation over the given nodes and links.

    Links with unknown endpoints are dropped and listed in ``warnings``.
    """
    simulation = Simulation(config, seed=seed, forces=forces)
    simulation.load(nodes, links)
    return simulation


def specs_from_networkx(graph, weight="weight", group="group", distance="distance"):
    """Reads node and link specs from a networkx graph's attributes."""
    nodes = [
        NodeSpec(n, data.get(weight, 1.0), data.get(group), data.get("x"), data.get("y"))
        for n, data in graph.nodes(data=True)
    ]
    links = [
        LinkSpec(u, v, data.get(distance), data.get("strength"))
        for u, v, data in graph.edges(data=True)
    ]
    return nodes, links


def from_networkx(graph, config=None, seed=0, weight="weight", group="group", distance="distance"):
    """Builds a simulation from any networkx graph."""
    nodes, links = specs_from_networkx(graph, weight, group, distance)
    return build(nodes, links, config=config, seed=seed)
