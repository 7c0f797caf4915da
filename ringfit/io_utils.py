"""
I/O utilities for the ring optimizer.

Handles the text shape format and CSV serialization of layouts.
"""

import csv
from pathlib import Path
from typing import List, Optional, Union

from .data_models import Layout, Placement
from .geometry import Shape

LAYOUT_COLUMNS = ['slot', 'shape', 'variation', 'x', 'y']


def parse_shapes(text: str) -> List[Shape]:
    """
    Parse shapes from their text representation.

    Format:
        Shapes are blocks of lines separated by blank lines. Any character
        other than a space marks an occupied cell; the column is the
        character index and the row is the line index within the block.

            OOOO
               O

            OO
            OO

    Args:
        text: File contents

    Returns:
        Normalized shapes, in file order

    Raises:
        ValueError: If the text holds no shapes
    """
    shapes: List[Shape] = []
    block: List[str] = []

    def flush():
        cells = [(col, row)
                 for row, line in enumerate(block)
                 for col, ch in enumerate(line) if ch != ' ']
        if cells:
            shapes.append(Shape(cells).normalized())
        block.clear()

    for line in text.splitlines():
        line = line.rstrip('\r')
        if line == '':
            flush()
        else:
            block.append(line)
    flush()

    if not shapes:
        raise ValueError("No shapes found in input")
    return shapes


def load_shapes(path: Union[str, Path]) -> List[Shape]:
    """
    Load shapes from a text file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file holds no shapes
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Shape file not found: {path}")
    with open(path, 'r') as f:
        return parse_shapes(f.read())


def save_layout_csv(layout: Layout,
                    output_path: Union[str, Path],
                    overwrite: bool = False,
                    score: Optional[float] = None) -> Path:
    """
    Save a layout to a CSV file.

    CSV format:
        slot,shape,variation,x,y
        0,3,1,5,-2
        ...

    A `# score: <value>` comment line is written first if a score is given.

    Args:
        layout: Layout to save
        output_path: Path for output CSV
        overwrite: If True, overwrite existing file
        score: Optional fitness to record

    Returns:
        Path to saved CSV file

    Raises:
        FileExistsError: If file exists and overwrite=False
    """
    output_path = Path(output_path)

    if output_path.exists() and not overwrite:
        raise FileExistsError(f"Output file already exists: {output_path}")

    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w', newline='') as f:
        if score is not None:
            f.write(f"# score: {score}\n")
        writer = csv.writer(f)
        writer.writerow(LAYOUT_COLUMNS)
        for slot, p in enumerate(layout.placements):
            writer.writerow([slot, p.shape_idx, p.var_idx, p.x, p.y])

    return output_path


def load_layout_csv(csv_path: Union[str, Path]) -> Layout:
    """
    Load a layout saved by save_layout_csv.

    Raises:
        FileNotFoundError: If CSV file doesn't exist
        ValueError: If CSV format is invalid
    """
    csv_path = Path(csv_path)

    if not csv_path.exists():
        raise FileNotFoundError(f"CSV file not found: {csv_path}")

    with open(csv_path, 'r', newline='') as f:
        lines = [line for line in f if not line.startswith('#')]

    reader = csv.DictReader(lines)
    if reader.fieldnames is None or not all(col in reader.fieldnames for col in LAYOUT_COLUMNS):
        raise ValueError(
            f"Invalid CSV format in {csv_path}. Expected columns: {','.join(LAYOUT_COLUMNS)}"
        )

    rows = sorted(reader, key=lambda row: int(row['slot']))
    placements = [
        Placement(int(row['shape']), int(row['variation']), int(row['x']), int(row['y']))
        for row in rows
    ]
    return Layout(placements)
