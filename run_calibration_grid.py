#!/usr/bin/env python3
"""Overlay a coordinate grid on the contract template, for calibrating the layout."""

import argparse
import logging
import sys
import os
from dotenv import load_dotenv

load_dotenv("backend/.env")
sys.path.insert(0, "backend")

from vbodegas.core.config import settings
from vbodegas.services.calibration_grid import generate_calibration_grid


def main():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--template", default=settings.CONTRACT_TEMPLATE_PATH, help="template PDF")
    parser.add_argument(
        "--output",
        default=os.path.join(settings.CONTRACT_OUTPUT_DIR, "grid_calibracion.pdf"),
        help="where to write the grid PDF",
    )
    parser.add_argument("--step", type=float, default=settings.CALIBRATION_STEP, help="grid spacing in points")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    print(f"Template: {args.template}")
    print(f"Output:   {args.output}")
    print(f"Step:     {args.step}")

    generate_calibration_grid(args.template, args.output, args.step)

    size_kb = os.path.getsize(args.output) / 1024
    print(f"\nGrid saved: {args.output} ({size_kb:.1f} KB)")


if __name__ == "__main__":
    main()
