"""
Data models for the ring optimizer.

Core data structures representing placements, layouts, scored candidates
and the double-buffered population.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

# Translations are saturated to this magnitude
COORD_LIMIT = 2 ** 20


def clamp_coord(value: int) -> int:
    """Saturate a translation component to [-COORD_LIMIT, COORD_LIMIT]"""
    return max(-COORD_LIMIT, min(COORD_LIMIT, value))


@dataclass
class Placement:
    """
    One oriented instance of an input shape in world coordinates.

    Attributes:
        shape_idx: Index of the input shape
        var_idx: Index into that shape's variation list
        x: Translation along x
        y: Translation along y
    """
    shape_idx: int
    var_idx: int = 0
    x: int = 0
    y: int = 0

    @property
    def pos(self) -> Tuple[int, int]:
        return (self.x, self.y)

    def translate(self, dx: int, dy: int):
        self.x = clamp_coord(self.x + dx)
        self.y = clamp_coord(self.y + dy)

    def copy(self) -> "Placement":
        return Placement(self.shape_idx, self.var_idx, self.x, self.y)


@dataclass
class Layout:
    """
    Ordered placements, one slot per input shape.

    Slots are treated as a ring when scoring: the last slot is adjacent to
    the first. Across the slots the shape indices form a permutation of
    the input shapes.
    """
    placements: List[Placement] = field(default_factory=list)

    @classmethod
    def identity(cls, num_shapes: int) -> "Layout":
        """Layout with slot i holding shape i, variation 0, at the origin"""
        return cls([Placement(shape_idx=i) for i in range(num_shapes)])

    def copy(self) -> "Layout":
        """
        Create a deep copy of this layout.

        Returns:
            New Layout with copied placements
        """
        return Layout([p.copy() for p in self.placements])

    def shape_indices(self) -> List[int]:
        return [p.shape_idx for p in self.placements]

    def is_permutation(self, num_shapes: int) -> bool:
        """True if every shape index in [0, num_shapes) appears exactly once"""
        return sorted(self.shape_indices()) == list(range(num_shapes))

    def __len__(self) -> int:
        return len(self.placements)

    def __getitem__(self, idx: int) -> Placement:
        return self.placements[idx]

    def __iter__(self):
        return iter(self.placements)


@dataclass
class Candidate:
    """
    A layout together with its cached fitness.

    Attributes:
        layout: Layout being evaluated
        score: Fitness, None until computed
    """
    layout: Layout
    score: Optional[float] = None


class Population:
    """
    Fixed-size population kept in two generation buffers.

    `current` holds the generation being ranked and selected from, `next`
    the one being built. `swap()` exchanges the two roles.
    """

    def __init__(self, size: int):
        if size <= 0:
            raise ValueError(f"Population size must be positive, got {size}")
        self.size = size
        self._buffers: List[List[Candidate]] = [[], []]
        self._current = 0

    @property
    def current(self) -> List[Candidate]:
        return self._buffers[self._current]

    @property
    def next(self) -> List[Candidate]:
        return self._buffers[1 - self._current]

    def set_current(self, candidates: List[Candidate]):
        self._buffers[self._current] = candidates

    def swap(self):
        """Make the next buffer current and clear the old one for reuse"""
        self._current = 1 - self._current
        self._buffers[1 - self._current] = []

    def sort(self):
        """Order the current generation by descending score"""
        self.current.sort(key=lambda c: c.score, reverse=True)

    def best(self) -> Candidate:
        return self.current[0]

    def distinct(self, limit: int) -> List[Candidate]:
        """
        Up to `limit` structurally distinct candidates, in rank order.

        Linear scan against the already chosen ones, fine for the small
        elite and gallery counts this is used with.
        """
        chosen: List[Candidate] = []
        for candidate in self.current:
            if len(chosen) >= limit:
                break
            if any(c.layout == candidate.layout for c in chosen):
                continue
            chosen.append(candidate)
        return chosen

    def __len__(self) -> int:
        return len(self.current)
