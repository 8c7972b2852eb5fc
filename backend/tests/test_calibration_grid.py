"""
Calibration grid over the contract template.

Run: pytest backend/tests/test_calibration_grid.py -v
"""

import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import fitz

from vbodegas.services.calibration_grid import calibration_grid_bytes, generate_calibration_grid
from vbodegas.services.contract_errors import TemplateError


class TestCalibrationGrid:

    def test_every_page_gets_a_grid(self, plain_template, tmp_path):
        output = tmp_path / "grid" / "grid.pdf"
        generate_calibration_grid(plain_template, str(output), 20)

        doc = fitz.open(str(output))
        assert doc.page_count == 12
        for i, page in enumerate(doc):
            text = page.get_text()
            assert f"Página {i + 1}" in text
            assert "Rojo = X" in text
            assert page.get_drawings()

    def test_labels_are_bottom_left_coordinates(self, plain_template):
        doc = fitz.open(stream=calibration_grid_bytes(plain_template, 100), filetype="pdf")
        page = doc[0]
        words = {w[4] for w in page.get_text("words")}
        assert {"0", "100", "200", "500", "700"} <= words
        # y label "700" sits near the top edge, 92pt below it in top-left space
        hits = [r for r in page.search_for("700") if r.x0 < 20]
        assert hits and hits[0].y1 < 100

    def test_template_is_untouched(self, plain_template, tmp_path):
        before = open(plain_template, "rb").read()
        generate_calibration_grid(plain_template, str(tmp_path / "grid.pdf"))
        assert open(plain_template, "rb").read() == before

    @pytest.mark.parametrize("step", [0, -10])
    def test_non_positive_step(self, plain_template, tmp_path, step):
        with pytest.raises(ValueError):
            generate_calibration_grid(plain_template, str(tmp_path / "grid.pdf"), step)

    def test_missing_template(self, tmp_path):
        with pytest.raises(TemplateError):
            generate_calibration_grid(str(tmp_path / "nada.pdf"), str(tmp_path / "grid.pdf"))
