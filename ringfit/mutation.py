"""
Mutation operators for the ring optimizer.

Implements layout mutation operators: re-variation, range shift and
identity swap. Every operator keeps the layout's shape indices a
permutation of the input shapes.
"""

from typing import Dict, List

import numpy as np

from .data_models import Layout
from .geometry import NEIGHBOURS_8
from .variations import VariationArray

DEFAULT_OPERATOR_WEIGHTS = {
    'revariation': 1.0,
    'range_shift': 1.0,
    'identity_swap': 1.0,
}


def revariation(layout: Layout, variations: VariationArray, rng: np.random.Generator) -> str:
    """
    Give two randomly chosen slots new random orientations.

    The two slots are drawn independently and may coincide.

    Args:
        layout: Layout to mutate in place
        variations: Variation array
        rng: Random number generator

    Returns:
        Operation log line
    """
    n = len(layout)
    slot1 = int(rng.integers(0, n))
    slot2 = int(rng.integers(0, n))
    for slot in (slot1, slot2):
        p = layout.placements[slot]
        p.var_idx = int(rng.integers(0, len(variations[p.shape_idx])))
    return (f"revariation: slot {slot1} -> var {layout.placements[slot1].var_idx}, "
            f"slot {slot2} -> var {layout.placements[slot2].var_idx}")


def range_shift(layout: Layout, variations: VariationArray, rng: np.random.Generator) -> str:
    """
    Move a contiguous range of slots by one unit or diagonal step.

    The range is over slot order, not over ring position in space.

    Args:
        layout: Layout to mutate in place
        variations: Variation array (unused, kept for a uniform signature)
        rng: Random number generator

    Returns:
        Operation log line
    """
    n = len(layout)
    first, last = sorted((int(rng.integers(0, n)), int(rng.integers(0, n))))
    dx, dy = NEIGHBOURS_8[int(rng.integers(0, len(NEIGHBOURS_8)))]
    for slot in range(first, last + 1):
        layout.placements[slot].translate(dx, dy)
    return f"range_shift: slots {first}..{last} by ({dx}, {dy})"


def identity_swap(layout: Layout, variations: VariationArray, rng: np.random.Generator) -> str:
    """
    Exchange shape and orientation between two slots.

    Translations stay with their slots.
    """
    n = len(layout)
    slot1 = int(rng.integers(0, n))
    slot2 = int(rng.integers(0, n))
    p1 = layout.placements[slot1]
    p2 = layout.placements[slot2]
    p1.shape_idx, p2.shape_idx = p2.shape_idx, p1.shape_idx
    p1.var_idx, p2.var_idx = p2.var_idx, p1.var_idx
    return f"identity_swap: slot {slot1} <-> slot {slot2}"


OPERATORS = {
    'revariation': revariation,
    'range_shift': range_shift,
    'identity_swap': identity_swap,
}


def _operator_probabilities(weights: Dict[str, float]) -> Dict[str, float]:
    unknown = set(weights) - set(OPERATORS)
    if unknown:
        raise ValueError(f"Unknown mutation operators: {sorted(unknown)}")
    total = sum(weights.values())
    if total <= 0:
        raise ValueError("Mutation operator weights must sum to a positive value")
    return {name: w / total for name, w in weights.items() if w > 0}


def mutate(layout: Layout,
           variations: VariationArray,
           config: Dict,
           rng: np.random.Generator) -> List[str]:
    """
    Apply a random sequence of mutation operators to a layout in place.

    The number of operators is uniform in [min_flips, max_flips]; each one
    is picked independently according to the operator weights.

    Args:
        layout: Layout to mutate
        variations: Variation array
        config: Mutation settings: 'min_flips', 'max_flips' and optional
            'operators' weights keyed by operator name
        rng: Random number generator

    Returns:
        Operation log, one line per applied operator
    """
    min_flips = config.get('min_flips', 2)
    max_flips = config.get('max_flips', 4)
    probs = _operator_probabilities(config.get('operators') or DEFAULT_OPERATOR_WEIGHTS)
    names = list(probs)
    p = np.array([probs[name] for name in names])

    num_ops = int(rng.integers(min_flips, max_flips + 1))
    log = []
    for _ in range(num_ops):
        name = names[int(rng.choice(len(names), p=p))]
        log.append(OPERATORS[name](layout, variations, rng))
    return log
