"""
Tests for SVG rendering and the HTML gallery.
"""

import unittest
import tempfile
import shutil
from pathlib import Path

from ringfit.data_models import Candidate, Layout
from ringfit.rendering import GalleryRenderer, render_layout_svg, write_gallery
from ringfit.scoring import extract_core, score
from ringfit.variations import build_variation_array
from ring_fixtures import ring_shape


class TestRendering(unittest.TestCase):
    """Test SVG and gallery output."""

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())
        self.variations = build_variation_array([ring_shape(2, 1)])
        self.layout = Layout.identity(1)

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def test_svg_document(self):
        svg = render_layout_svg(self.layout, self.variations, cell_side=8)
        self.assertTrue(svg.startswith("<svg"))
        self.assertIn("</svg>", svg)

    def test_svg_with_core(self):
        core = extract_core(self.variations, self.layout)
        svg = render_layout_svg(self.layout, self.variations, core, cell_side=8)
        self.assertTrue(svg.startswith("<svg"))

    def test_gallery(self):
        candidate = Candidate(self.layout, score(self.variations, self.layout))
        path = write_gallery(self.temp_dir / "gallery.html", [candidate, candidate], self.variations)
        text = path.read_text()
        self.assertTrue(text.startswith("<div>"))
        self.assertEqual(text.count("<svg"), 2)

    def test_gallery_renderer(self):
        renderer = GalleryRenderer(self.temp_dir / "run", cell_side=6)
        candidate = Candidate(self.layout, 2.0)
        renderer(0, [candidate], self.variations)
        self.assertTrue(renderer.gallery_path.exists())
        self.assertTrue(renderer.best_layout_path.exists())


if __name__ == '__main__':
    unittest.main()
