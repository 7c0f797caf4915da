"""
Rotation/mirror variations of the input shapes.
"""

from typing import List, Sequence

from .geometry import Rotation, Shape

# Per input shape, the distinct orientations; index 0 is always the shape itself
VariationArray = List[List[Shape]]

_ROTATIONS = (Rotation.NONE, Rotation.CW_90, Rotation.CW_180, Rotation.CW_270)


def build_variations(shape: Shape) -> List[Shape]:
    """
    Build the distinct dihedral orientations of a shape.

    The shape is normalized first. Candidates are generated in a fixed
    order: the shape, its three clockwise rotations, the mirror image and
    the mirror's three rotations, each renormalized. Structurally equal
    candidates are dropped, keeping the first one seen.

    Args:
        shape: Source shape

    Returns:
        Between 1 and 8 shapes, with the normalized shape at index 0
    """
    shape = shape.normalized()
    mirror = shape.mirrored()
    candidates = [shape.rotated(r).normalized() for r in _ROTATIONS]
    candidates += [mirror.rotated(r).normalized() for r in _ROTATIONS]

    variations: List[Shape] = []
    for candidate in candidates:
        if candidate not in variations:
            variations.append(candidate)
    return variations


def build_variation_array(shapes: Sequence[Shape]) -> VariationArray:
    """
    Variations for every input shape, indexed like the input.

    Variation 0 of each entry is the normalized input shape.
    """
    if not shapes:
        raise ValueError("At least one shape is required")
    return [build_variations(shape) for shape in shapes]
