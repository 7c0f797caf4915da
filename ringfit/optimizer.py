"""
Evolutionary Optimizer

Generational search over ring layouts. Each generation keeps the best
distinct layouts, breeds mutated offspring from rank-biased parents (the
best of several independent mutation retries per offspring) and fills the
rest with freshly seeded rings.
"""

import math
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

import numpy as np

from .data_models import Candidate, Layout, Population
from .geometry import Shape
from .mutation import DEFAULT_OPERATOR_WEIGHTS, mutate
from .placer import arrange_circle, estimate_radius
from .scoring import recenter, score
from .variations import VariationArray, build_variation_array


@dataclass
class OptimizerConfig:
    """
    Parameters of an optimization run.

    Attributes:
        population_size: Individuals per generation
        generations: Number of generations to run
        elite_count: Distinct top individuals carried over unchanged
        mutation_fraction: Share of the population bred by mutation
        retries: Independent mutation attempts per offspring, best kept
        min_flips: Minimum mutation operators per attempt
        max_flips: Maximum mutation operators per attempt
        random_seed: Seed of the run's random generator
        render_every: Generation cadence of the renderer callback
        render_top_k: Distinct individuals handed to the renderer
        operators: Mutation operator weights
    """
    population_size: int = 200
    generations: int = 100
    elite_count: int = 1
    mutation_fraction: float = 0.9
    retries: int = 20
    min_flips: int = 2
    max_flips: int = 4
    random_seed: int = 12345
    render_every: int = 10
    render_top_k: int = 20
    operators: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_OPERATOR_WEIGHTS))

    def __post_init__(self):
        """Validate parameters."""
        for name in ('population_size', 'generations', 'retries', 'render_every'):
            value = getattr(self, name)
            if not isinstance(value, int) or value <= 0:
                raise ValueError(f"{name} must be a positive integer, got {value}")
        if self.elite_count < 0 or self.elite_count > self.population_size:
            raise ValueError(
                f"elite_count must be in [0, {self.population_size}], got {self.elite_count}"
            )
        if not 0.0 <= self.mutation_fraction <= 1.0:
            raise ValueError(f"mutation_fraction must be in [0, 1], got {self.mutation_fraction}")
        if self.min_flips < 1 or self.min_flips > self.max_flips:
            raise ValueError(
                f"Need 1 <= min_flips <= max_flips, got {self.min_flips}, {self.max_flips}"
            )
        if self.render_top_k < 0:
            raise ValueError(f"render_top_k must be non-negative, got {self.render_top_k}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OptimizerConfig":
        """Build from a configuration mapping, ignoring unknown keys"""
        known = cls.__dataclass_fields__.keys()
        return cls(**{k: v for k, v in data.items() if k in known})

    @property
    def num_mutated(self) -> int:
        return int(self.population_size * self.mutation_fraction)

    def mutation_settings(self) -> Dict[str, Any]:
        return {
            'min_flips': self.min_flips,
            'max_flips': self.max_flips,
            'operators': self.operators,
        }


@dataclass
class GenerationReport:
    """Per-generation progress record"""
    generation: int
    best_score: float
    elapsed_ms: int


Reporter = Callable[[GenerationReport], None]
Renderer = Callable[[int, List[Candidate], VariationArray], None]


def print_report(report: GenerationReport):
    print(f"Generation {report.generation}: max score {report.best_score:.1f}, "
          f"time {report.elapsed_ms}ms")


def rank_biased_index(population_size: int, rng: np.random.Generator) -> int:
    """
    Draw a rank in [0, population_size) biased towards rank 0.

    floor(sqrt(u)) with u uniform over [0, P^2) has P(k) proportional to
    2k + 1; the draw is mirrored so the best ranks are the likeliest. This
    intentionally differs from indexing floor(sqrt(u)) directly, which would
    favour the worst ranks.
    """
    u = int(rng.integers(0, population_size * population_size))
    return population_size - 1 - math.isqrt(u)


def select_elites(ranked: Sequence[Candidate], elite_count: int) -> List[Candidate]:
    """
    Copy the top distinct layouts of a ranked generation.

    Candidates whose layout equals an already selected one are skipped.
    The linear scan is fine for the handful of elites normally kept.
    """
    elites: List[Candidate] = []
    if elite_count <= 0:
        return elites
    for candidate in ranked:
        if any(e.layout == candidate.layout for e in elites):
            continue
        elites.append(Candidate(candidate.layout.copy(), candidate.score))
        if len(elites) == elite_count:
            break
    return elites


class EvolutionaryOptimizer:
    """
    Generational optimizer for ring layouts.

    Args:
        shapes: Input shapes, in canonical order
        config: Run parameters
    """

    def __init__(self, shapes: Sequence[Shape], config: Optional[OptimizerConfig] = None):
        if not shapes:
            raise ValueError("At least one shape is required to optimize")
        for i, sh in enumerate(shapes):
            if not isinstance(sh, Shape) or sh.cell_count == 0:
                raise ValueError(f"Shape {i} is empty or invalid")

        self.shapes = [sh.normalized() for sh in shapes]
        self.config = config or OptimizerConfig()
        self.variations: VariationArray = build_variation_array(self.shapes)
        self.radius = estimate_radius(self.shapes)
        self.rng = np.random.default_rng(self.config.random_seed)
        self.population = Population(self.config.population_size)
        self.history: List[GenerationReport] = []
        self.generation = -1

    @property
    def num_shapes(self) -> int:
        return len(self.shapes)

    def evaluate(self, layout: Layout) -> Candidate:
        """Recenter a layout in place and score it"""
        recenter(self.variations, layout)
        return Candidate(layout, score(self.variations, layout))

    def seeded_layout(self, shuffle: bool) -> Layout:
        """Fresh ring in identity shape order, optionally shuffled"""
        layout = Layout.identity(self.num_shapes)
        if shuffle:
            order = self.rng.permutation(self.num_shapes)
            layout = Layout([layout.placements[int(i)] for i in order])
        arrange_circle(self.radius, self.variations, layout)
        return layout

    def initialize(self):
        """Seed the first generation: identical identity-order rings"""
        template = self.seeded_layout(shuffle=False)
        first = Candidate(template, score(self.variations, template))
        self.population.set_current(
            [Candidate(first.layout.copy(), first.score) for _ in range(self.config.population_size)]
        )
        self.population.sort()
        self.generation = -1

    def breed(self, parent: Layout) -> Candidate:
        """
        Best of several independent mutations of one parent.

        Returns:
            Highest scoring retry (first one on ties)
        """
        settings = self.config.mutation_settings()
        best: Optional[Candidate] = None
        for _ in range(self.config.retries):
            target = parent.copy()
            mutate(target, self.variations, settings, self.rng)
            s = score(self.variations, target)
            if best is None or s > best.score:
                best = Candidate(target, s)
        return best

    def step(self) -> GenerationReport:
        """Run one generation and return its report"""
        start = time.time()
        cfg = self.config
        ranked = self.population.current

        offspring = select_elites(ranked, cfg.elite_count)
        num_mutated = min(cfg.num_mutated, cfg.population_size - len(offspring))
        for _ in range(num_mutated):
            parent = ranked[rank_biased_index(cfg.population_size, self.rng)]
            offspring.append(self.breed(parent.layout))

        while len(offspring) < cfg.population_size:
            offspring.append(Candidate(self.seeded_layout(shuffle=True)))

        # Barrier: the whole generation is rescored before ranking
        offspring = [self.evaluate(candidate.layout) for candidate in offspring]

        self.population.next.extend(offspring)
        self.population.swap()
        self.population.sort()
        self.generation += 1

        elapsed_ms = int((time.time() - start) * 1000)
        report = GenerationReport(self.generation, self.population.best().score, elapsed_ms)
        self.history.append(report)
        return report

    def run(self, reporter: Optional[Reporter] = print_report,
            renderer: Optional[Renderer] = None) -> Candidate:
        """
        Run the configured number of generations.

        Args:
            reporter: Called with every generation's report
            renderer: Called every `render_every` generations and after the
                last one with the top distinct candidates

        Returns:
            Best candidate of the final generation
        """
        cfg = self.config
        self.initialize()
        for it in range(cfg.generations):
            report = self.step()
            if reporter is not None:
                reporter(report)
            last = it == cfg.generations - 1
            if renderer is not None and cfg.render_top_k > 0 and (it % cfg.render_every == 0 or last):
                renderer(it, self.population.distinct(cfg.render_top_k), self.variations)
        return self.population.best()
