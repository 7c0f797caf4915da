"""
Circular Placement

Greedy seeding of a layout around a circle: each slot is attached to the
boundary of the previous one, choosing the orientation and attachment
point that keeps its cells closest to the target radius while the ring
keeps progressing in one angular direction.
"""

import math
from typing import Optional, Sequence, Tuple

from .data_models import Layout, Placement, clamp_coord
from .geometry import Cell, Shape, angle_greater, distance
from .variations import VariationArray

# Cost of a rejected candidate; finite so a slot is always placed
MAX_COST = 1e5


def estimate_radius(shapes: Sequence[Shape]) -> float:
    """
    Initial ring radius.

    Each shape contributes max(width, height) of arc length; the total is
    taken as the circumference.
    """
    if not shapes:
        raise ValueError("At least one shape is required")
    length = sum(sh.estimate_length() for sh in shapes)
    return length / (2.0 * math.pi)


def _round_half_away(value: float) -> int:
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


class FitCost:
    """Cost policy for candidate placements; lower is better"""

    def evaluate(self, pos: Cell, shape: Shape) -> float:
        raise NotImplementedError


class RingFitCost(FitCost):
    """
    Ring seeding policy.

    A candidate must share an edge with the previous placement and must not
    run ahead of it angularly. On the closing pass it must also share an
    edge with the placement after it. Surviving candidates cost their
    squared radial error divided by their maximum angle.

    Args:
        radius: Target ring radius
        prev_shape: Oriented shape of the previous slot
        prev_pos: Translation of the previous slot
        closing_shape: Oriented shape the candidate must also touch, if any
        closing_pos: Translation of that shape
    """

    def __init__(self,
                 radius: float,
                 prev_shape: Shape,
                 prev_pos: Cell,
                 closing_shape: Optional[Shape] = None,
                 closing_pos: Optional[Cell] = None):
        self.radius = radius
        self.prev_shape = prev_shape
        self.prev_pos = prev_pos
        self.prev_max_angle = prev_shape.angle_range(prev_pos)[1]
        self.closing_shape = closing_shape
        self.closing_pos = closing_pos

    def evaluate(self, pos: Cell, shape: Shape) -> float:
        if self.closing_shape is not None:
            d_close = distance(shape, pos, self.closing_shape, self.closing_pos)
            if d_close != 0:
                return MAX_COST + abs(d_close)

        if distance(shape, pos, self.prev_shape, self.prev_pos) != 0:
            return MAX_COST

        max_angle = shape.angle_range(pos)[1]
        if angle_greater(max_angle, self.prev_max_angle):
            return MAX_COST
        if max_angle == 0.0:
            return math.inf
        return shape.radial_error(self.radius, pos) / max_angle


def best_fit(prev_shape: Shape,
             prev_pos: Cell,
             variations: Sequence[Shape],
             cost: FitCost) -> Tuple[Optional[Cell], int]:
    """
    Cheapest placement of any variation against the previous shape.

    Every variation is tried with each of its cells dropped onto each
    boundary cell of the previous shape. The first candidate reaching the
    minimum wins.

    Args:
        prev_shape: Shape the candidate attaches to
        prev_pos: Translation of prev_shape
        variations: Orientations available for the candidate
        cost: Cost policy

    Returns:
        (translation, variation index); translation is None only if every
        candidate cost is infinite
    """
    best_pos: Optional[Cell] = None
    best_var = 0
    best_cost = math.inf
    px, py = prev_pos
    for var_idx, sh in enumerate(variations):
        for bx, by in prev_shape.boundary:
            for cx, cy in sh.cells:
                pos = (px + bx - cx, py + by - cy)
                c = cost.evaluate(pos, sh)
                if c < best_cost:
                    best_cost = c
                    best_pos = pos
                    best_var = var_idx
    return best_pos, best_var


def seed_first(radius: float, variations: VariationArray, placement: Placement):
    """Put a slot's default orientation on the ring at angle zero"""
    sh = variations[placement.shape_idx][0]
    placement.var_idx = 0
    placement.x = clamp_coord(_round_half_away(radius - sh.width * 0.5))
    placement.y = clamp_coord(_round_half_away(-sh.height * 0.5))


def arrange_circle(radius: float, variations: VariationArray, layout: Layout):
    """
    Seed a layout around a circle, in place.

    Slot 0 is put at angle zero; every following slot is attached to its
    predecessor. A final pass refits slot 0 against the last slot while
    requiring it to still touch slot 1, closing the ring if possible.
    Only the shape indices of the incoming layout are used.

    Args:
        radius: Target ring radius
        variations: Variation array
        layout: Layout whose slots already hold their shape indices
    """
    n = len(layout)
    if n == 0:
        raise ValueError("Cannot arrange an empty layout")

    for i in range(n + 1):
        if i == 0:
            seed_first(radius, variations, layout.placements[0])
            continue

        prev = layout.placements[i - 1]
        prev_shape = variations[prev.shape_idx][prev.var_idx]
        target = layout.placements[i % n]

        closing_shape = closing_pos = None
        if i == n:
            nxt = layout.placements[(i + 1) % n]
            closing_shape = variations[nxt.shape_idx][nxt.var_idx]
            closing_pos = nxt.pos

        cost = RingFitCost(radius, prev_shape, prev.pos, closing_shape, closing_pos)
        pos, var_idx = best_fit(prev_shape, prev.pos, variations[target.shape_idx], cost)
        if pos is None:
            continue
        target.x = clamp_coord(pos[0])
        target.y = clamp_coord(pos[1])
        target.var_idx = var_idx
