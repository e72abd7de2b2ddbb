"""
Quadtree over node positions.

Rebuilt from scratch every tick. Internal cells carry the node count and
centroid of their subtree so the many-body force can treat a distant cell
as a single pseudo-body (Barnes-Hut).
"""

MAX_DEPTH = 16
MIN_CELL_SIZE = 1e-6


class Cell:
    __slots__ = ("x0", "y0", "size", "depth", "children", "points", "mass", "cx", "cy")

    def __init__(self, x0, y0, size, depth):
        self.x0 = x0
        self.y0 = y0
        self.size = size
        self.depth = depth
        self.children = None  # [sw, se, nw, ne] once subdivided
        self.points = []  # node indices, leaves only
        self.mass = 0.0
        self.cx = 0.0
        self.cy = 0.0

    def is_leaf(self):
        return self.children is None

    def intersects(self, x0, y0, x1, y1):
        return not (
            self.x0 > x1 or self.x0 + self.size < x0 or self.y0 > y1 or self.y0 + self.size < y0
        )

    def __repr__(self):
        return f"Cell(x0={self.x0:.2f}, y0={self.y0:.2f}, size={self.size:.2f}, mass={self.mass})"


class QuadTree:
    def __init__(self, xs, ys, max_depth=MAX_DEPTH, min_cell_size=MIN_CELL_SIZE):
        if len(xs) != len(ys):
            raise ValueError("xs and ys must have the same length")
        self.xs = xs
        self.ys = ys
        self.max_depth = max_depth
        self.min_cell_size = min_cell_size
        self.root = None
        self.depth = 0

        if not xs:
            return

        x0, x1 = min(xs), max(xs)
        y0, y1 = min(ys), max(ys)
        size = max(x1 - x0, y1 - y0, min_cell_size)
        self.root = Cell(x0, y0, size, 0)

        for i in range(len(xs)):
            self._insert(self.root, i)
        self._accumulate(self.root)

    def __len__(self):
        return len(self.xs)

    def _quadrant(self, cell, x, y):
        half = cell.size * 0.5
        q = 0
        if x >= cell.x0 + half:
            q += 1
        if y >= cell.y0 + half:
            q += 2
        return q

    def _subdivide(self, cell):
        half = cell.size * 0.5
        d = cell.depth + 1
        cell.children = [
            Cell(cell.x0, cell.y0, half, d),
            Cell(cell.x0 + half, cell.y0, half, d),
            Cell(cell.x0, cell.y0 + half, half, d),
            Cell(cell.x0 + half, cell.y0 + half, half, d),
        ]
        self.depth = max(self.depth, d)

    def _insert(self, cell, i):
        x, y = self.xs[i], self.ys[i]
        while not cell.is_leaf():
            cell = cell.children[self._quadrant(cell, x, y)]

        if not cell.points:
            cell.points.append(i)
            return

        # Depth cap / tiny cells: keep the nodes together as one co-located bucket
        if cell.depth >= self.max_depth or cell.size * 0.5 < self.min_cell_size:
            cell.points.append(i)
            return

        # Exact duplicates never split
        if all(self.xs[j] == x and self.ys[j] == y for j in cell.points):
            cell.points.append(i)
            return

        existing = cell.points
        cell.points = []
        self._subdivide(cell)
        for j in existing:
            self._insert(cell, j)
        self._insert(cell, i)

    def _accumulate(self, cell):
        if cell.is_leaf():
            n = len(cell.points)
            if n:
                cell.mass = float(n)
                cell.cx = sum(self.xs[j] for j in cell.points) / n
                cell.cy = sum(self.ys[j] for j in cell.points) / n
            return

        mass = cx = cy = 0.0
        for child in cell.children:
            self._accumulate(child)
            if child.mass:
                mass += child.mass
                cx += child.cx * child.mass
                cy += child.cy * child.mass
        cell.mass = mass
        if mass:
            cell.cx = cx / mass
            cell.cy = cy / mass

    def cells(self):
        """Yields every cell, parents before children."""
        if self.root is None:
            return
        stack = [self.root]
        while stack:
            cell = stack.pop()
            yield cell
            if not cell.is_leaf():
                stack.extend(reversed(cell.children))

    def query(self, x0, y0, x1, y1):
        """Returns the indices of all points inside the rectangle, sorted."""
        found = []
        if self.root is None:
            return found
        stack = [self.root]
        while stack:
            cell = stack.pop()
            if not cell.mass or not cell.intersects(x0, y0, x1, y1):
                continue
            if cell.is_leaf():
                for j in cell.points:
                    if x0 <= self.xs[j] <= x1 and y0 <= self.ys[j] <= y1:
                        found.append(j)
            else:
                stack.extend(cell.children)
        found.sort()
        return found
