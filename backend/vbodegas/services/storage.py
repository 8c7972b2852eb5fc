"""
Local contract storage: output directory and file paths.
Generated contracts and calibration grids are written under
settings.CONTRACT_OUTPUT_DIR; the template itself is never written.
"""

import os
import logging
from typing import Optional

from vbodegas.core.config import settings

logger = logging.getLogger(__name__)


def output_dir(base: Optional[str] = None) -> str:
    return base or settings.CONTRACT_OUTPUT_DIR


def ensure_output_dir(base: Optional[str] = None) -> str:
    """Create the output directory if it doesn't exist. Call once at startup."""
    directory = output_dir(base)
    try:
        os.makedirs(directory, exist_ok=True)
        logger.info(f"Contract output directory: {directory}")
    except OSError as e:
        logger.error(f"Failed to create contract output directory {directory}: {e}")
    return directory


def contract_output_path(filename: str, base: Optional[str] = None) -> str:
    """Path for a generated file. Only the basename of ``filename`` is used."""
    return os.path.join(output_dir(base), os.path.basename(filename))

