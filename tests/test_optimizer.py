"""
Tests for the evolutionary optimizer, its configuration and the population.
"""

import unittest

import numpy as np

from ringfit.data_models import Candidate, Layout, Placement, Population
from ringfit.geometry import Shape
from ringfit.io_utils import parse_shapes
from ringfit.optimizer import (
    EvolutionaryOptimizer, OptimizerConfig, rank_biased_index, select_elites
)
from ringfit.scoring import bounds, score
from ring_fixtures import TETROMINO_TEXT


def small_config(**overrides):
    settings = dict(population_size=12, generations=4, elite_count=2,
                    mutation_fraction=0.5, retries=2, random_seed=5)
    settings.update(overrides)
    return OptimizerConfig(**settings)


class TestOptimizerConfig(unittest.TestCase):
    """Test parameter validation."""

    def test_defaults_valid(self):
        config = OptimizerConfig()
        self.assertEqual(config.num_mutated, int(config.population_size * 0.9))

    def test_invalid_values(self):
        bad = [
            dict(population_size=0),
            dict(generations=-1),
            dict(retries=0),
            dict(elite_count=500),
            dict(mutation_fraction=1.5),
            dict(min_flips=5, max_flips=2),
            dict(min_flips=0),
        ]
        for kwargs in bad:
            with self.subTest(kwargs=kwargs):
                with self.assertRaises(ValueError):
                    OptimizerConfig(**kwargs)

    def test_from_dict_ignores_unknown_keys(self):
        config = OptimizerConfig.from_dict({'population_size': 30, 'colour': 'red'})
        self.assertEqual(config.population_size, 30)


class TestPopulation(unittest.TestCase):
    """Test the double-buffered population."""

    def test_swap_and_sort(self):
        pop = Population(3)
        pop.next.extend([Candidate(Layout.identity(1), s) for s in (1.0, 5.0, -2.0)])
        self.assertEqual(len(pop.current), 0)
        pop.swap()
        pop.sort()
        self.assertEqual([c.score for c in pop.current], [5.0, 1.0, -2.0])
        self.assertEqual(len(pop.next), 0)
        self.assertEqual(pop.best().score, 5.0)

    def test_buffers_not_aliased(self):
        pop = Population(2)
        pop.next.append(Candidate(Layout.identity(1), 0.0))
        self.assertIsNot(pop.current, pop.next)
        pop.swap()
        self.assertIsNot(pop.current, pop.next)

    def test_distinct(self):
        pop = Population(4)
        a = Layout([Placement(0, 0, 1, 1)])
        b = Layout([Placement(0, 0, 2, 2)])
        pop.set_current([Candidate(a, 3.0), Candidate(a.copy(), 3.0), Candidate(b, 1.0)])
        distinct = pop.distinct(5)
        self.assertEqual(len(distinct), 2)
        self.assertEqual(distinct[1].layout, b)

    def test_invalid_size(self):
        with self.assertRaises(ValueError):
            Population(0)


class TestSelection(unittest.TestCase):
    """Test elitism and rank-biased parent draws."""

    def test_elites_are_distinct_copies(self):
        a = Layout([Placement(0, 0, 1, 1)])
        b = Layout([Placement(0, 0, 2, 2)])
        ranked = [Candidate(a, 3.0), Candidate(a.copy(), 3.0), Candidate(b, 1.0)]
        elites = select_elites(ranked, 2)
        self.assertEqual([e.layout for e in elites], [a, b])
        self.assertIsNot(elites[0].layout, a)

    def test_fewer_distinct_than_requested(self):
        a = Layout([Placement(0, 0, 1, 1)])
        ranked = [Candidate(a.copy(), 3.0) for _ in range(4)]
        self.assertEqual(len(select_elites(ranked, 3)), 1)

    def test_rank_biased_index(self):
        rng = np.random.default_rng(0)
        draws = [rank_biased_index(20, rng) for _ in range(4000)]
        self.assertGreaterEqual(min(draws), 0)
        self.assertLess(max(draws), 20)
        counts = np.bincount(draws, minlength=20)
        self.assertGreater(counts[:5].sum(), counts[-5:].sum())


class TestEvolutionaryOptimizer(unittest.TestCase):
    """Test the generational loop."""

    def setUp(self):
        self.shapes = parse_shapes(TETROMINO_TEXT)

    def test_rejects_empty_input(self):
        with self.assertRaises(ValueError):
            EvolutionaryOptimizer([], small_config())

    def test_initial_population(self):
        opt = EvolutionaryOptimizer(self.shapes, small_config())
        opt.initialize()
        current = opt.population.current
        self.assertEqual(len(current), 12)
        first = current[0].layout
        for candidate in current:
            self.assertEqual(candidate.layout, first)
            self.assertEqual(candidate.layout.shape_indices(), [0, 1, 2])
            self.assertIsNotNone(candidate.score)

    def test_population_invariants_each_generation(self):
        config = small_config(generations=5)
        opt = EvolutionaryOptimizer(self.shapes, config)
        opt.initialize()
        previous_best = opt.population.best().score
        for _ in range(config.generations):
            opt.step()
            current = opt.population.current
            self.assertEqual(len(current), config.population_size)
            for candidate in current:
                self.assertTrue(candidate.layout.is_permutation(len(self.shapes)))
                self.assertIsNotNone(candidate.score)
            scores = [c.score for c in current]
            self.assertEqual(scores, sorted(scores, reverse=True))
            # Elites carry the best layout forward
            self.assertGreaterEqual(opt.population.best().score, previous_best)
            previous_best = opt.population.best().score

    def test_reporter_and_renderer_callbacks(self):
        config = small_config(generations=6, render_every=4, render_top_k=3)
        opt = EvolutionaryOptimizer(self.shapes, config)
        reports = []
        renders = []
        opt.run(reporter=reports.append,
                renderer=lambda gen, cands, variations: renders.append((gen, len(cands))))
        self.assertEqual([r.generation for r in reports], list(range(6)))
        self.assertEqual([gen for gen, _ in renders], [0, 4, 5])
        for _, count in renders:
            self.assertGreaterEqual(count, 1)
            self.assertLessEqual(count, 3)
        self.assertEqual(len(opt.history), 6)

    def test_offset_shapes_are_normalized(self):
        shifted = [Shape([(x + 3, y + 2) for x, y in sh.cells]) for sh in self.shapes]
        opt = EvolutionaryOptimizer(shifted, small_config())
        reference = EvolutionaryOptimizer(self.shapes, small_config())
        self.assertEqual(opt.shapes, reference.shapes)
        self.assertEqual(opt.variations, reference.variations)
        self.assertEqual(opt.radius, reference.radius)

    def test_evaluate_recenters_and_scores(self):
        opt = EvolutionaryOptimizer(self.shapes, small_config())
        layout = opt.seeded_layout(shuffle=False)
        expected = score(opt.variations, layout)
        for placement in layout:
            placement.translate(40, -25)

        candidate = opt.evaluate(layout)
        self.assertIs(candidate.layout, layout)
        self.assertEqual(candidate.score, expected)
        (lt_x, lt_y), (rb_x, rb_y) = bounds(opt.variations, layout)
        self.assertIn(lt_x + rb_x, (0, 1))
        self.assertIn(lt_y + rb_y, (0, 1))

    def test_end_to_end_determinism(self):
        config = OptimizerConfig(population_size=50, generations=20, elite_count=1,
                                 mutation_fraction=0.9, retries=3, random_seed=12345)
        first = EvolutionaryOptimizer(self.shapes, config).run(reporter=None)
        second = EvolutionaryOptimizer(self.shapes, config).run(reporter=None)
        self.assertEqual(first.score, second.score)
        self.assertEqual(first.layout, second.layout)
        self.assertTrue(first.layout.is_permutation(len(self.shapes)))


if __name__ == '__main__':
    unittest.main()
