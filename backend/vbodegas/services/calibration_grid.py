# File: backend/vbodegas/services/calibration_grid.py
"""
Calibration grid for the contract template.

Overlays every page with light guide lines each ``step`` points, labelled with
their coordinate in PDF user space (origin bottom-left), the same space the
ContractLayout coordinates are written in. Print it, read off where a value
should go, and copy the numbers into the layout.
"""

import fitz  # PyMuPDF
import logging
import os

from vbodegas.services.contract_pdf import open_template

logger = logging.getLogger(__name__)

GRID_FONT = "cour"      # Courier
LABEL_SIZE = 6
X_COLOR = (0.7, 0, 0)
Y_COLOR = (0, 0, 0.7)
LINE_COLOR = (0.8, 0.8, 0.8)
LEGEND = "Rojo = X   Azul = Y   (puntos PDF, origen abajo-izquierda)"


def draw_grid(page: fitz.Page, page_number: int, step: float) -> None:
    width, height = page.rect.width, page.rect.height

    shape = page.new_shape()
    x = 0.0
    while x < width:
        shape.draw_line(fitz.Point(x, 0), fitz.Point(x, height))
        x += step
    y = 0.0
    while y < height:
        # y counts up from the bottom edge
        shape.draw_line(fitz.Point(0, height - y), fitz.Point(width, height - y))
        y += step
    shape.finish(color=LINE_COLOR, width=0.3)
    shape.commit(overlay=True)

    x = 0.0
    while x < width:
        page.insert_text(
            fitz.Point(x + 1, 15), str(round(x)),
            fontsize=LABEL_SIZE, fontname=GRID_FONT, color=X_COLOR,
        )
        x += step
    y = 0.0
    while y < height:
        page.insert_text(
            fitz.Point(5, height - y - 1), str(round(y)),
            fontsize=LABEL_SIZE, fontname=GRID_FONT, color=Y_COLOR,
        )
        y += step

    page.insert_text(
        fitz.Point(width / 2 - 30, 30), f"Página {page_number}",
        fontsize=12, fontname=GRID_FONT, color=(0, 0, 0),
    )
    page.insert_text(
        fitz.Point(20, height - 8), LEGEND,
        fontsize=LABEL_SIZE, fontname=GRID_FONT, color=(0, 0, 0),
    )


def calibration_grid_bytes(template_path: str, step: float = 20) -> bytes:
    """Render the grid over every template page and return the PDF bytes."""
    if step <= 0:
        raise ValueError(f"Grid step must be positive, got {step}")

    doc = open_template(template_path)
    try:
        for index, page in enumerate(doc):
            draw_grid(page, index + 1, step)
        content = doc.tobytes(garbage=3, deflate=True)
        logger.info(f"[GRID] {doc.page_count} pages, step {step}")
    finally:
        doc.close()
    return content


def generate_calibration_grid(template_path: str, output_path: str, step: float = 20) -> None:
    content = calibration_grid_bytes(template_path, step)
    directory = os.path.dirname(output_path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(output_path, "wb") as f:
        f.write(content)
    logger.info(f"[GRID] Calibration grid written to {output_path}")
