"""
Ring Tiling Optimizer

Arranges a fixed set of polyomino-like shapes into a closed ring that
encloses as much interior area as possible, using an evolutionary search
over orientations, translations and shape order.

Modules:
- geometry: Shapes and pairwise overlap/border/distance queries
- variations: Rotation/mirror variations of each input shape
- data_models: Placements, layouts, candidates and the population
- scoring: Bounds, flood fill, fitness, recentering, core extraction
- placer: Greedy circular seeding of layouts
- mutation: Re-variation, range shift and identity swap operators
- optimizer: The generational search loop
- io_utils: Shape text files and layout CSV files
- rendering: SVG/HTML gallery output
- cli: Run configuration and command-line interface
"""

__version__ = "0.1.0"

from .geometry import Shape, Overlap, classify, distance, angle_greater
from .data_models import Placement, Layout, Candidate, Population
from .optimizer import EvolutionaryOptimizer, OptimizerConfig

__all__ = [
    "Shape",
    "Overlap",
    "classify",
    "distance",
    "angle_greater",
    "Placement",
    "Layout",
    "Candidate",
    "Population",
    "EvolutionaryOptimizer",
    "OptimizerConfig",
]
