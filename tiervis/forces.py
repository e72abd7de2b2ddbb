"""
Force modules.

Every force reads node positions (and, when it needs one, the quadtree built
for the current tick) and returns a pair of velocity delta lists indexed like
``state.nodes``. Forces never write to the nodes themselves: the simulation
sums all deltas once every force has run and hands them to the integrator.
"""
import math
import zlib

JIGGLE = 1e-6


def pair_offset(a_id, b_id):
    """Tiny deterministic vector from node ``a_id`` to a coincident ``b_id``.

    Antisymmetric: pair_offset(b, a) == -pair_offset(a, b).
    """
    ka, kb = repr(a_id), repr(b_id)
    sign = 1.0
    if ka > kb:
        ka, kb = kb, ka
        sign = -1.0
    h = zlib.crc32(f"{ka}\x1f{kb}".encode("utf-8"))
    angle = h / 0xFFFFFFFF * 2.0 * math.pi
    return sign * JIGGLE * math.cos(angle), sign * JIGGLE * math.sin(angle)


def _zeros(n):
    return [0.0] * n, [0.0] * n


class Force:
    name = "force"

    def apply(self, state, index, alpha):
        raise NotImplementedError

    def __repr__(self):
        return f"{type(self).__name__}()"


class ManyBody(Force):
    """Inverse-square repulsion approximated with Barnes-Hut."""

    name = "charge"

    def __init__(self, strength=-1000.0, theta=0.9, distance_min=1.0):
        self.strength = strength
        self.theta = theta
        self.distance_min = distance_min

    def apply(self, state, index, alpha):
        nodes = state.nodes
        n = len(nodes)
        dvx, dvy = _zeros(n)
        if n < 2 or index is None or index.root is None or not self.strength:
            return dvx, dvy

        theta2 = self.theta * self.theta
        dmin2 = self.distance_min * self.distance_min
        scale = self.strength * alpha

        def weight(l2, mass):
            # F = strength * mass / d^2 along the unit vector (dx, dy) / d
            return mass / (max(l2, dmin2) * math.sqrt(l2))

        for node in nodes:
            fx = fy = 0.0
            stack = [index.root]
            while stack:
                cell = stack.pop()
                if not cell.mass:
                    continue

                if not cell.is_leaf():
                    dx = cell.cx - node.x
                    dy = cell.cy - node.y
                    l2 = dx * dx + dy * dy
                    inside = (cell.x0 <= node.x <= cell.x0 + cell.size
                              and cell.y0 <= node.y <= cell.y0 + cell.size)
                    if not inside and cell.size * cell.size < theta2 * l2:
                        w = weight(l2, cell.mass)
                        fx += dx * w
                        fy += dy * w
                    else:
                        stack.extend(cell.children)
                    continue

                for j in cell.points:
                    if j == node.index:
                        continue
                    other = nodes[j]
                    dx = other.x - node.x
                    dy = other.y - node.y
                    if dx == 0 and dy == 0:
                        dx, dy = pair_offset(node.id, other.id)
                    l2 = dx * dx + dy * dy
                    w = weight(l2, 1.0)
                    fx += dx * w
                    fy += dy * w

            dvx[node.index] = fx * scale
            dvy[node.index] = fy * scale

        return dvx, dvy

    def __repr__(self):
        return f"ManyBody(strength={self.strength}, theta={self.theta})"


class LinkForce(Force):
    """Springs pulling linked nodes toward each link's rest distance.

    The correction is split by degree so well-connected nodes move less.
    """

    name = "link"

    def apply(self, state, index, alpha):
        nodes = state.nodes
        dvx, dvy = _zeros(len(nodes))

        for link in state.links:
            s = nodes[link.source]
            t = nodes[link.target]
            if s is t:
                continue

            dx = t.x - s.x
            dy = t.y - s.y
            if dx == 0 and dy == 0:
                dx, dy = pair_offset(s.id, t.id)
            l = math.sqrt(dx * dx + dy * dy)

            k = (l - link.distance) / l * alpha * link.strength
            dx *= k
            dy *= k

            bias = s.degree / (s.degree + t.degree)
            dvx[t.index] -= dx * bias
            dvy[t.index] -= dy * bias
            dvx[s.index] += dx * (1 - bias)
            dvy[s.index] += dy * (1 - bias)

        return dvx, dvy


class Center(Force):
    """Uniform pull of the free nodes' centroid toward a point."""

    name = "center"

    def __init__(self, x=0.0, y=0.0, strength=0.1):
        self.x = x
        self.y = y
        self.strength = strength

    def apply(self, state, index, alpha):
        nodes = state.nodes
        free = [node for node in nodes if node.pin is None]
        if not free or not self.strength:
            return _zeros(len(nodes))

        mx = sum(node.x for node in free) / len(free)
        my = sum(node.y for node in free) / len(free)
        dx = (self.x - mx) * self.strength
        dy = (self.y - my) * self.strength
        return [dx] * len(nodes), [dy] * len(nodes)

    def __repr__(self):
        return f"Center(x={self.x}, y={self.y}, strength={self.strength})"


class Collide(Force):
    """Pushes apart nodes whose circles (radius + padding) overlap."""

    name = "collide"

    def __init__(self, padding=2.0, strength=0.7):
        self.padding = padding
        self.strength = strength

    def apply(self, state, index, alpha):
        nodes = state.nodes
        n = len(nodes)
        dvx, dvy = _zeros(n)
        if n < 2 or index is None or not self.strength:
            return dvx, dvy

        largest = max(node.radius for node in nodes) + self.padding
        for node in nodes:
            ri = node.radius + self.padding
            reach = ri + largest
            candidates = index.query(node.x - reach, node.y - reach, node.x + reach, node.y + reach)
            for j in candidates:
                if j <= node.index:
                    continue
                other = nodes[j]
                rj = other.radius + self.padding
                r = ri + rj

                dx = node.x - other.x
                dy = node.y - other.y
                l2 = dx * dx + dy * dy
                if l2 >= r * r:
                    continue
                if l2 == 0:
                    dx, dy = pair_offset(other.id, node.id)
                    l2 = dx * dx + dy * dy
                l = math.sqrt(l2)

                k = (r - l) / l * self.strength
                share = rj * rj / (ri * ri + rj * rj)
                dvx[node.index] += dx * k * share
                dvy[node.index] += dy * k * share
                dvx[j] -= dx * k * (1 - share)
                dvy[j] -= dy * k * (1 - share)

        return dvx, dvy

    def __repr__(self):
        return f"Collide(padding={self.padding}, strength={self.strength})"


def default_forces(config):
    """The standard force stack, in registration order."""
    return [
        ManyBody(config.charge_strength, config.theta, config.distance_min),
        LinkForce(),
        Center(config.center[0], config.center[1], config.center_strength),
        Collide(config.collide_padding, config.collide_strength),
    ]
