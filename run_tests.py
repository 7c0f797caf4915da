#!/usr/bin/env python3
"""
Test runner for the ring optimizer
"""

import unittest
import sys
from pathlib import Path

# Add project root and test directory to path for imports
root = Path(__file__).parent
sys.path.append(str(root))
sys.path.append(str(root / "tests"))


def run_all_tests():
    """Run all test modules"""
    loader = unittest.TestLoader()
    suite = unittest.TestSuite()

    try:
        import test_geometry, test_variations, test_scoring, test_placer
        import test_mutation, test_optimizer, test_io_utils, test_cli, test_rendering

        for module in (test_geometry, test_variations, test_scoring, test_placer,
                       test_mutation, test_optimizer, test_io_utils, test_cli,
                       test_rendering):
            suite.addTests(loader.loadTestsFromModule(module))

        runner = unittest.TextTestRunner(verbosity=2)
        result = runner.run(suite)

        return result.wasSuccessful()

    except ImportError as e:
        print(f"Failed to import test modules: {e}")
        return False


def run_integration_test():
    """Run a short optimization on the bundled tetrominoes"""
    print("\n" + "=" * 50)
    print("INTEGRATION TEST")
    print("=" * 50)

    try:
        from ringfit.io_utils import load_shapes
        from ringfit.optimizer import EvolutionaryOptimizer, OptimizerConfig

        shapes = load_shapes(root / "data" / "tetrominoes.txt")
        config = OptimizerConfig(population_size=40, generations=10, retries=5)

        print(f"Optimizing {len(shapes)} shapes...")
        optimizer = EvolutionaryOptimizer(shapes, config)
        best = optimizer.run()

        success = (
            len(optimizer.population.current) == config.population_size and
            best.layout.is_permutation(len(shapes))
        )
        print(f"Best score: {best.score:.1f}")

        if success:
            print("✓ Integration test PASSED")
        else:
            print("✗ Integration test FAILED")

        return success

    except Exception as e:
        print(f"✗ Integration test FAILED: {e}")
        import traceback
        traceback.print_exc()
        return False


if __name__ == "__main__":
    print("Running Ring Optimizer Tests")
    print("=" * 60)

    print("Running unit tests...")
    unit_success = run_all_tests()

    integration_success = run_integration_test()

    print("\n" + "=" * 60)
    print("TEST SUMMARY")
    print("=" * 60)
    print(f"Unit tests: {'PASSED' if unit_success else 'FAILED'}")
    print(f"Integration test: {'PASSED' if integration_success else 'FAILED'}")

    overall_success = unit_success and integration_success
    print(f"Overall: {'PASSED' if overall_success else 'FAILED'}")

    sys.exit(0 if overall_success else 1)
