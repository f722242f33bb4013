"""BOQ workbook ingestion.

Reads CSV/XLSX uploads into raw rows per sheet for the BOQ Extractor.
Headers are not interpreted here; every row is returned positionally.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import pandas as pd

logger = logging.getLogger(__name__)

MAX_FILE_SIZE_MB = 50
MAX_ROWS = 50000


def read_boq_workbook(file_path: Path) -> dict[str, list[list[Any]]]:
    """Read a BOQ upload into ``{sheet name: rows}``.

    A CSV file becomes a single sheet named after the file stem. Blank cells
    are returned as ``None``.

    Args:
        file_path: Path to CSV or XLSX file

    Returns:
        Mapping of sheet name to list of row cell lists, in workbook order

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If the format is unsupported or the file exceeds limits
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"BOQ file not found: {file_path}")

    file_size_mb = file_path.stat().st_size / (1024 * 1024)
    if file_size_mb > MAX_FILE_SIZE_MB:
        raise ValueError(
            f"File too large ({file_size_mb:.1f}MB). Maximum allowed: {MAX_FILE_SIZE_MB}MB"
        )

    suffix = file_path.suffix.lower()
    if suffix == ".csv":
        frames = {file_path.stem: pd.read_csv(file_path, header=None, dtype=object)}
    elif suffix in (".xlsx", ".xlsm"):
        frames = pd.read_excel(
            file_path, sheet_name=None, header=None, dtype=object, engine="openpyxl"
        )
    else:
        raise ValueError(f"Unsupported file format: {file_path.suffix}. Use CSV or XLSX.")

    total_rows = sum(len(df) for df in frames.values())
    if total_rows > MAX_ROWS:
        raise ValueError(f"Too many rows ({total_rows:,}). Maximum allowed: {MAX_ROWS:,}")

    sheets = {str(name): _frame_rows(df) for name, df in frames.items()}
    logger.info("Read %s: %d sheets, %d rows", file_path.name, len(sheets), total_rows)
    return sheets


def _frame_rows(df: pd.DataFrame) -> list[list[Any]]:
    df = df.astype(object).where(pd.notna(df), None)
    return df.values.tolist()
