"""
Layout Scoring

Bounding boxes, flood fill of the enclosed interior, fitness scoring and
recentering of layouts.
"""

from typing import Callable, List, Optional, Tuple

import numpy as np

from .data_models import Layout, clamp_coord
from .geometry import NEIGHBOURS_8, Cell, Shape, distance
from .variations import VariationArray


def placed_shape(variations: VariationArray, layout: Layout, slot: int) -> Shape:
    """Oriented shape sitting in a slot"""
    p = layout.placements[slot]
    return variations[p.shape_idx][p.var_idx]


def bounds(variations: VariationArray, layout: Layout) -> Tuple[Cell, Cell]:
    """
    Axis-aligned box covering every placed shape.

    Returns:
        (top_left, bottom_right); bottom_right is exclusive
    """
    lt_x = lt_y = None
    rb_x = rb_y = None
    for p in layout.placements:
        sh = variations[p.shape_idx][p.var_idx]
        if lt_x is None:
            lt_x, lt_y = p.x, p.y
            rb_x, rb_y = p.x + sh.width, p.y + sh.height
            continue
        lt_x = min(lt_x, p.x)
        lt_y = min(lt_y, p.y)
        rb_x = max(rb_x, p.x + sh.width)
        rb_y = max(rb_y, p.y + sh.height)
    if lt_x is None:
        raise ValueError("Cannot compute bounds of an empty layout")
    return (lt_x, lt_y), (rb_x, rb_y)


def rasterize(variations: VariationArray, layout: Layout) -> Tuple[np.ndarray, Cell]:
    """
    Occupancy grid of the layout.

    The grid is one cell wider and taller than the exclusive bounding box,
    so its last row and column are always empty.

    Returns:
        (grid indexed [y, x] with 1 = occupied, world coordinate of grid[0, 0])
    """
    (lt_x, lt_y), (rb_x, rb_y) = bounds(variations, layout)
    w = rb_x - lt_x + 1
    h = rb_y - lt_y + 1
    grid = np.zeros((h, w), dtype=np.uint8)
    for p in layout.placements:
        sh = variations[p.shape_idx][p.var_idx]
        for x, y in sh.cells:
            grid[p.y + y - lt_y, p.x + x - lt_x] = 1
    return grid, (lt_x, lt_y)


def _seed_cell(grid: np.ndarray) -> Optional[Cell]:
    h, w = grid.shape
    cx, cy = w // 2, h // 2
    if not grid[cy, cx]:
        return cx, cy
    for dx, dy in NEIGHBOURS_8:
        x, y = cx + dx, cy + dy
        if 0 <= x < w and 0 <= y < h and not grid[y, x]:
            return x, y
    return None


def flood_fill(variations: VariationArray, layout: Layout,
               visit: Optional[Callable[[int, int], None]] = None) -> int:
    """
    Fill the empty region around the centre of the layout.

    The seed is the centre of the occupancy grid, or its first empty
    8-neighbour if the centre is occupied. The fill is 8-connected and
    stack based; visit order is unspecified.

    Args:
        variations: Variation array
        layout: Layout to fill
        visit: Optional callback receiving world (x, y) of each visited cell

    Returns:
        Number of visited cells, or -1 if the region reaches the edge of
        the grid (or no empty seed exists)
    """
    grid, (lt_x, lt_y) = rasterize(variations, layout)
    h, w = grid.shape

    start = _seed_cell(grid)
    if start is None:
        return -1

    stack = [start]
    grid[start[1], start[0]] = 1
    visited = 0
    while stack:
        x, y = stack.pop()
        if visit is not None:
            visit(x + lt_x, y + lt_y)
        visited += 1
        for dx, dy in NEIGHBOURS_8:
            nx, ny = x + dx, y + dy
            if nx < 0 or ny < 0 or nx >= w or ny >= h:
                return -1
            if not grid[ny, nx]:
                grid[ny, nx] = 1
                stack.append((nx, ny))
    return visited


def ring_gap(variations: VariationArray, layout: Layout) -> int:
    """Sum of |distance| between every pair of ring-adjacent slots"""
    n = len(layout)
    total = 0
    for i in range(n):
        p1 = layout.placements[i]
        p2 = layout.placements[(i + 1) % n]
        sh1 = variations[p1.shape_idx][p1.var_idx]
        sh2 = variations[p2.shape_idx][p2.var_idx]
        total += abs(distance(sh1, p1.pos, sh2, p2.pos))
    return total


def score(variations: VariationArray, layout: Layout) -> float:
    """
    Fitness of a layout; higher is better.

    A closed layout scores its enclosed area (> 0). An open layout scores
    the negated ring gap (<= 0), so it ranks by how close it is to closing
    and always below any closed layout.
    """
    area = flood_fill(variations, layout)
    if area > 0:
        return float(area)
    return -float(ring_gap(variations, layout))


def recenter(variations: VariationArray, layout: Layout):
    """Translate the layout in place so its bounding box centre sits at the origin"""
    (lt_x, lt_y), (rb_x, rb_y) = bounds(variations, layout)
    cx = (lt_x + rb_x) // 2
    cy = (lt_y + rb_y) // 2
    if cx == 0 and cy == 0:
        return
    for p in layout.placements:
        p.x = clamp_coord(p.x - cx)
        p.y = clamp_coord(p.y - cy)


def extract_core(variations: VariationArray, layout: Layout) -> Optional[Tuple[Shape, Cell]]:
    """
    Shape made of the enclosed empty cells.

    Returns:
        (core shape, world offset of the core) or None if the layout is open
    """
    cells: List[Cell] = []
    area = flood_fill(variations, layout, lambda x, y: cells.append((x, y)))
    if area <= 0:
        return None
    min_x = min(x for x, _ in cells)
    min_y = min(y for _, y in cells)
    core = Shape([(x - min_x, y - min_y) for x, y in cells])
    return core, (min_x, min_y)
