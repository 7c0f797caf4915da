"""
Layout Rendering

Draws layouts as SVG through matplotlib and collects them into an HTML
gallery for inspecting the best individuals of a run.
"""

import io
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import matplotlib.patches as patches

from .data_models import Candidate, Layout
from .geometry import Cell, Shape
from .io_utils import save_layout_csv
from .scoring import bounds, extract_core
from .variations import VariationArray

PALETTE = matplotlib.colormaps['Set3']
SVG_DPI = 72


def shape_color(shape_idx: int):
    return PALETTE(shape_idx % PALETTE.N)


def render_layout_svg(layout: Layout,
                      variations: VariationArray,
                      core: Optional[Tuple[Shape, Cell]] = None,
                      cell_side: int = 10) -> str:
    """
    Render one layout as an SVG document.

    Args:
        layout: Layout to draw
        variations: Variation array
        core: Optional (interior shape, world offset) drawn under the layout
        cell_side: Cell edge length in pixels

    Returns:
        SVG text
    """
    (lt_x, lt_y), (rb_x, rb_y) = bounds(variations, layout)
    w = rb_x - lt_x + 1
    h = rb_y - lt_y + 1

    fig, ax = plt.subplots(figsize=(w * cell_side / SVG_DPI, h * cell_side / SVG_DPI))
    fig.subplots_adjust(left=0, right=1, bottom=0, top=1)

    if core is not None:
        core_shape, (ox, oy) = core
        for x, y in core_shape.cells:
            ax.add_patch(patches.Rectangle(
                (ox + x - lt_x, oy + y - lt_y), 1, 1,
                facecolor="white", edgecolor="#ddddee", linewidth=0.5
            ))
        ax.text(ox - lt_x + core_shape.width / 2, oy - lt_y + core_shape.height / 2,
                str(core_shape.cell_count), color="#aaaaee", fontsize=max(6, cell_side),
                fontweight="bold", ha="center", va="center")

    for p in layout.placements:
        sh = variations[p.shape_idx][p.var_idx]
        color = shape_color(p.shape_idx)
        for x, y in sh.cells:
            ax.add_patch(patches.Rectangle(
                (p.x + x - lt_x, p.y + y - lt_y), 1, 1,
                facecolor=color, edgecolor="#224a22", linewidth=0.5
            ))

    ax.set_xlim(0, w)
    ax.set_ylim(0, h)
    ax.set_aspect("equal")
    ax.invert_yaxis()
    ax.axis("off")

    buf = io.StringIO()
    fig.savefig(buf, format="svg", dpi=SVG_DPI)
    plt.close(fig)

    svg = buf.getvalue()
    # Drop the XML prolog so documents can be inlined into HTML
    start = svg.find("<svg")
    return svg[start:] if start >= 0 else svg


def write_gallery(output_path: Union[str, Path],
                  candidates: Sequence[Candidate],
                  variations: VariationArray,
                  cell_side: int = 10) -> Path:
    """
    Write an HTML page with one SVG per candidate.

    Closed layouts get their interior core drawn in.

    Returns:
        Path to the written file
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    parts: List[str] = ["<div>\n"]
    for candidate in candidates:
        core = extract_core(variations, candidate.layout)
        parts.append(render_layout_svg(candidate.layout, variations, core, cell_side))
        parts.append("\n")
    parts.append("</div>\n")

    with open(output_path, 'w') as f:
        f.write("".join(parts))
    return output_path


class GalleryRenderer:
    """
    Renderer callback writing the gallery and the best layout of a run.

    Args:
        output_root: Directory receiving gallery.html and best_layout.csv
        cell_side: Cell edge length in pixels
    """

    def __init__(self, output_root: Union[str, Path], cell_side: int = 10):
        self.output_root = Path(output_root)
        self.cell_side = cell_side
        self.gallery_path = self.output_root / "gallery.html"
        self.best_layout_path = self.output_root / "best_layout.csv"

    def __call__(self, generation: int, candidates: List[Candidate], variations: VariationArray):
        if not candidates:
            return
        write_gallery(self.gallery_path, candidates, variations, self.cell_side)
        best = candidates[0]
        save_layout_csv(best.layout, self.best_layout_path, overwrite=True, score=best.score)
