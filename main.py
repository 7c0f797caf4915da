#!/usr/bin/env python3
"""
Ring Tiling Optimizer - command-line entry point.

Usage:
    python3 main.py --config configs/default_run.yaml
    python3 main.py --shapes data/tetrominoes.txt --generations 50
    python3 main.py --help
"""

import sys
from pathlib import Path

# Add project root to path if needed
project_root = Path(__file__).parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from ringfit.cli import main


if __name__ == '__main__':
    main()
