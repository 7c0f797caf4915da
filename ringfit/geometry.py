"""
Shape Geometry

Immutable polyomino-like shapes on an integer grid, together with the
pairwise queries the placer and scorer are built on: overlap/border
classification, Manhattan gap distance and angular extent about the origin.
"""

import math
from enum import Enum
from typing import Iterable, List, Tuple

import numpy as np

Cell = Tuple[int, int]

# Right, down, left, up
NEIGHBOURS_4: List[Cell] = [(1, 0), (0, 1), (-1, 0), (0, -1)]

# 4-neighbours followed by the diagonals
NEIGHBOURS_8: List[Cell] = NEIGHBOURS_4 + [(1, -1), (1, 1), (-1, 1), (-1, -1)]

TWO_PI = 2.0 * math.pi


class Overlap(Enum):
    """Relation between two placed shapes"""
    OVERLAP = 0   # at least one common cell
    BORDER = 1    # no common cell, but a common edge
    DISJOINT = 2  # neither


class Rotation(Enum):
    """Clockwise quarter turns"""
    NONE = 0
    CW_90 = 1
    CW_180 = 2
    CW_270 = 3


class Shape:
    """
    Immutable set of grid cells with non-negative coordinates.

    Width and height are the extents (max coordinate + 1) along each axis.
    The occupancy mask and the boundary cells are derived once from the
    cell list in the constructor and never change afterwards.

    Attributes:
        cells: Member cells, in the order they were supplied
        width: Extent along x
        height: Extent along y
        mask: uint8 array of shape (height, width), 1 where a cell is set
        boundary: Cells orthogonally adjacent to a member but not members
    """

    __slots__ = ("cells", "width", "height", "mask", "boundary", "_cell_set", "_key")

    def __init__(self, cells: Iterable[Cell]):
        ordered: List[Cell] = []
        seen = set()
        for x, y in cells:
            cell = (int(x), int(y))
            if cell in seen:
                continue
            if cell[0] < 0 or cell[1] < 0:
                raise ValueError(f"Shape cells must be non-negative, got {cell}")
            seen.add(cell)
            ordered.append(cell)

        if not ordered:
            raise ValueError("Shape must contain at least one cell")

        self.cells: Tuple[Cell, ...] = tuple(ordered)
        self._cell_set = frozenset(ordered)
        self.width = max(x for x, _ in ordered) + 1
        self.height = max(y for _, y in ordered) + 1

        mask = np.zeros((self.height, self.width), dtype=np.uint8)
        for x, y in ordered:
            mask[y, x] = 1
        mask.setflags(write=False)
        self.mask = mask
        self._key = (self.width, self.height, mask.tobytes())

        boundary: List[Cell] = []
        boundary_seen = set()
        for x, y in ordered:
            for dx, dy in NEIGHBOURS_4:
                c = (x + dx, y + dy)
                if c not in self._cell_set and c not in boundary_seen:
                    boundary_seen.add(c)
                    boundary.append(c)
        self.boundary: Tuple[Cell, ...] = tuple(boundary)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Shape):
            return NotImplemented
        return self._key == other._key

    def __hash__(self) -> int:
        return hash(self._key)

    def __repr__(self) -> str:
        return f"Shape(width={self.width}, height={self.height}, cells={list(self.cells)})"

    def __len__(self) -> int:
        return len(self.cells)

    @property
    def cell_count(self) -> int:
        return len(self.cells)

    def is_set(self, x: int, y: int) -> bool:
        """True if (x, y) is a member cell"""
        return (x, y) in self._cell_set

    def rotated(self, rotation: Rotation) -> "Shape":
        """Rotate clockwise within the shape's own bounding box"""
        w, h = self.width, self.height
        if rotation == Rotation.CW_90:
            cells = [(h - y - 1, x) for x, y in self.cells]
        elif rotation == Rotation.CW_180:
            cells = [(w - x - 1, h - y - 1) for x, y in self.cells]
        elif rotation == Rotation.CW_270:
            cells = [(y, w - x - 1) for x, y in self.cells]
        else:
            cells = list(self.cells)
        return Shape(cells)

    def mirrored(self) -> "Shape":
        """Mirror about the vertical axis"""
        return Shape([(self.width - x - 1, y) for x, y in self.cells])

    def normalized(self) -> "Shape":
        """Translate so the smallest x and y are both zero"""
        min_x = min(x for x, _ in self.cells)
        min_y = min(y for _, y in self.cells)
        if min_x == 0 and min_y == 0:
            return self
        return Shape([(x - min_x, y - min_y) for x, y in self.cells])

    def estimate_length(self) -> float:
        """Arc length the shape is expected to cover on the ring"""
        return float(max(self.width, self.height))

    def radial_error(self, radius: float, pos: Cell) -> float:
        """Sum of squared deviations of the placed cells from a circle of given radius"""
        px, py = pos
        total = 0.0
        for x, y in self.cells:
            dr = math.hypot(px + x, py + y) - radius
            total += dr * dr
        return total

    def angle_range(self, pos: Cell) -> Tuple[float, float]:
        """
        Angular extent of the placed shape about the world origin.

        Args:
            pos: Translation of the shape

        Returns:
            (min_angle, max_angle), both normalized to [0, 2*pi)
        """
        px, py = pos
        lo = math.inf
        hi = -math.inf
        for x, y in self.cells:
            ang = math.atan2(py + y, px + x)
            if ang < 0:
                ang += TWO_PI
            lo = min(lo, ang)
            hi = max(hi, ang)
        return lo, hi


def angle_greater(lhs: float, rhs: float) -> bool:
    """
    Circular "ahead of" comparison for two angles less than pi apart.

    Returns True if lhs lies ahead of rhs in the direction of increasing
    angle, wrapping through zero.
    """
    if lhs < rhs and rhs - lhs > math.pi:
        return True
    return lhs > rhs and lhs - rhs < math.pi


def classify(sh1: Shape, pos1: Cell, sh2: Shape, pos2: Cell) -> Overlap:
    """
    Classify how two placed shapes relate to each other.

    Args:
        sh1: First shape
        pos1: Translation of the first shape
        sh2: Second shape
        pos2: Translation of the second shape

    Returns:
        Overlap.OVERLAP if they share a cell, Overlap.BORDER if they share
        an edge only, Overlap.DISJOINT otherwise
    """
    x1, y1 = pos1
    x2, y2 = pos2
    # Bounding boxes too far apart to even touch
    if (x1 > x2 + sh2.width or x2 > x1 + sh1.width or
            y1 > y2 + sh2.height or y2 > y1 + sh1.height):
        return Overlap.DISJOINT

    dx = x1 - x2
    dy = y1 - y2
    for x, y in sh1.cells:
        if sh2.is_set(x + dx, y + dy):
            return Overlap.OVERLAP

    for x, y in sh1.cells:
        for ox, oy in NEIGHBOURS_4:
            if sh2.is_set(x + dx + ox, y + dy + oy):
                return Overlap.BORDER
    return Overlap.DISJOINT


def distance(sh1: Shape, pos1: Cell, sh2: Shape, pos2: Cell) -> int:
    """
    Gap between two placed shapes.

    Returns -1 if they overlap, 0 if they share an edge, otherwise the
    minimum Manhattan distance over all cell pairs minus one.
    """
    status = classify(sh1, pos1, sh2, pos2)
    if status == Overlap.BORDER:
        return 0
    if status == Overlap.OVERLAP:
        return -1

    dx = pos1[0] - pos2[0]
    dy = pos1[1] - pos2[1]
    min_dist = None
    for ax, ay in sh1.cells:
        x = ax + dx
        y = ay + dy
        for bx, by in sh2.cells:
            d = abs(x - bx) + abs(y - by)
            if min_dist is None or d < min_dist:
                min_dist = d
    return min_dist - 1
