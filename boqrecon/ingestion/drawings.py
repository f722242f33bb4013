"""Drawing entity-list ingestion.

DXF/DWG decoding happens upstream; uploads arrive here as JSON documents:

    {
      "drawing_reference": "A-201",
      "unit": "mm",
      "entities": [
        {"type": "polygon", "vertices": [[0, 0], [5000, 0], [5000, 4000], [0, 4000]],
         "label": "Lobby"},
        {"type": "dimension", "text": "5000 x 4000", "position": [2500, 2000]},
        {"type": "text", "text": "Office 1", "position": [9000, 2000]}
      ]
    }
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import ValidationError

from boqrecon.models import DrawingDocument

logger = logging.getLogger(__name__)

MAX_FILE_SIZE_MB = 50


def load_drawing_document(file_path: Path) -> DrawingDocument:
    """Load a drawing entity list from a JSON file.

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If the file is too large, not JSON, or not a valid document
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"Drawing file not found: {file_path}")
    if file_path.suffix.lower() != ".json":
        raise ValueError(f"Unsupported file format: {file_path.suffix}. Use JSON.")

    file_size_mb = file_path.stat().st_size / (1024 * 1024)
    if file_size_mb > MAX_FILE_SIZE_MB:
        raise ValueError(
            f"File too large ({file_size_mb:.1f}MB). Maximum allowed: {MAX_FILE_SIZE_MB}MB"
        )

    try:
        document = DrawingDocument.model_validate_json(file_path.read_text(encoding="utf-8"))
    except ValidationError as e:
        raise ValueError(f"Invalid drawing document {file_path.name}: {e}") from e

    logger.info(
        "Loaded drawing %s: %d entities", document.drawing_reference, len(document.entities)
    )
    return document
