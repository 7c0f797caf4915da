"""
CLI module for the ring optimizer.

Handles run configuration loading, validation, command line overrides and
running the optimizer.
"""

import argparse
import sys
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .io_utils import load_shapes, save_layout_csv
from .optimizer import EvolutionaryOptimizer, OptimizerConfig
from .rendering import GalleryRenderer


class ConfigValidationError(Exception):
    """Raised when run configuration is invalid."""
    pass


def load_run_config(config_path: str) -> Dict[str, Any]:
    """
    Load run configuration from YAML file.

    Args:
        config_path: Path to run configuration YAML file

    Returns:
        Dictionary containing run configuration

    Raises:
        FileNotFoundError: If config file doesn't exist
        ConfigValidationError: If config is invalid
    """
    config_file = Path(config_path)

    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    try:
        with open(config_file, 'r') as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigValidationError(f"Invalid YAML in configuration file: {e}")

    if config is None:
        raise ConfigValidationError("Configuration file is empty")

    return config


def validate_run_config(config: Dict[str, Any]) -> None:
    """
    Validate run configuration structure.

    Args:
        config: Run configuration dictionary

    Raises:
        ConfigValidationError: If configuration is invalid
    """
    if not isinstance(config, dict):
        raise ConfigValidationError("Run configuration must be a mapping")

    for section in ('input', 'output'):
        if section not in config:
            raise ConfigValidationError(f"Missing required field: '{section}'")
        if not isinstance(config[section], dict):
            raise ConfigValidationError(f"'{section}' must be a dictionary")

    if 'shapes' not in config['input']:
        raise ConfigValidationError("Missing required field: 'input.shapes'")

    if 'root' not in config['output']:
        raise ConfigValidationError("Missing required field: 'output.root'")

    optimizer = config.get('optimizer', {})
    if not isinstance(optimizer, dict):
        raise ConfigValidationError("'optimizer' must be a dictionary")

    try:
        build_optimizer_config(config)
    except (TypeError, ValueError) as e:
        raise ConfigValidationError(f"Invalid optimizer settings: {e}")


def build_optimizer_config(config: Dict[str, Any]) -> OptimizerConfig:
    """OptimizerConfig from the 'optimizer' section and the top-level seed"""
    settings = dict(config.get('optimizer') or {})
    if config.get('random_seed') is not None:
        settings['random_seed'] = config['random_seed']
    return OptimizerConfig.from_dict(settings)


def apply_overrides(config: Dict[str, Any], args: argparse.Namespace) -> Dict[str, Any]:
    """Apply command line overrides on top of a run configuration"""
    config = dict(config)
    config['input'] = dict(config.get('input') or {})
    config['output'] = dict(config.get('output') or {})
    config['optimizer'] = dict(config.get('optimizer') or {})

    if args.shapes is not None:
        config['input']['shapes'] = args.shapes
    if args.output is not None:
        config['output']['root'] = args.output
    if args.generations is not None:
        config['optimizer']['generations'] = args.generations
    if args.population is not None:
        config['optimizer']['population_size'] = args.population
    if args.seed is not None:
        config['random_seed'] = args.seed
    return config


def run_from_config(config: Dict[str, Any]) -> float:
    """
    Execute an optimization run.

    Args:
        config: Validated run configuration

    Returns:
        Best score of the final generation

    Raises:
        FileExistsError: If the output directory exists and overwrite is off
        Various exceptions from shape loading and the optimizer
    """
    print("=" * 70)
    print("RING OPTIMIZATION")
    print("=" * 70)

    shapes_path = config['input']['shapes']
    print(f"Loading shapes from: {shapes_path}")
    shapes = load_shapes(shapes_path)
    print(f"Shapes: {len(shapes)}")

    opt_config = build_optimizer_config(config)
    print(f"Random seed: {opt_config.random_seed}")
    print(f"Population: {opt_config.population_size}, generations: {opt_config.generations}, "
          f"retries: {opt_config.retries}")

    output_root = Path(config['output']['root'])
    overwrite = config['output'].get('overwrite', False)
    if output_root.exists() and any(output_root.iterdir()) and not overwrite:
        raise FileExistsError(
            f"Output directory already exists: {output_root}\n"
            f"Set 'output.overwrite: true' in config to overwrite"
        )
    output_root.mkdir(parents=True, exist_ok=True)
    print(f"Output directory: {output_root}\n")

    optimizer = EvolutionaryOptimizer(shapes, opt_config)
    print(f"Estimated radius: {optimizer.radius:.2f}")
    print(f"Variations per shape: {[len(v) for v in optimizer.variations]}\n")

    renderer = GalleryRenderer(output_root, cell_side=config['output'].get('cell_side', 10))

    start_time = time.time()
    best = optimizer.run(renderer=renderer)
    elapsed_time = time.time() - start_time

    best_path = save_layout_csv(best.layout, output_root / 'best_layout.csv',
                                overwrite=True, score=best.score)

    print()
    print("=" * 70)
    print("SUMMARY")
    print("=" * 70)
    print(f"Best score: {best.score:.1f}")
    print(f"Closed ring: {'yes' if best.score > 0 else 'no'}")
    print(f"Run time: {elapsed_time:.3f} seconds")
    print(f"Best layout: {best_path}")
    print(f"Gallery: {renderer.gallery_path}")

    return best.score


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Arrange a set of shapes into a closed ring enclosing the largest area",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  ringfit --config configs/default_run.yaml
  ringfit --config configs/default_run.yaml --generations 50 --seed 7
  ringfit --shapes data/tetrominoes.txt --output output/tetro
        """
    )
    parser.add_argument('--config', default=None, help='Run configuration YAML file')
    parser.add_argument('--shapes', default=None, help='Shape file (overrides input.shapes)')
    parser.add_argument('--output', default=None, help='Output directory (overrides output.root)')
    parser.add_argument('--generations', type=int, default=None, help='Number of generations')
    parser.add_argument('--population', type=int, default=None, help='Population size')
    parser.add_argument('--seed', type=int, default=None, help='Random seed')
    return parser


def main(argv: Optional[List[str]] = None):
    """Main entry point for the ring optimizer CLI."""
    args = build_parser().parse_args(argv)

    try:
        if args.config is not None:
            print(f"Loading configuration from: {args.config}")
            config = load_run_config(args.config)
        else:
            config = {'input': {'shapes': 'data/pentominoes.txt'},
                      'output': {'root': 'output/run', 'overwrite': True}}

        config = apply_overrides(config, args)
        validate_run_config(config)
        run_from_config(config)
    except KeyboardInterrupt:
        print("\n\nInterrupted by user")
        sys.exit(1)
    except Exception as e:
        print(f"\nError: {e}")
        sys.exit(1)

    print("\nRun completed successfully!")


if __name__ == '__main__':
    main()
