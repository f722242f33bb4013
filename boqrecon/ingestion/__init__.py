"""Data ingestion module for BOQRecon.

Handles reading BOQ workbooks and drawing entity lists.
"""

from boqrecon.ingestion.drawings import load_drawing_document
from boqrecon.ingestion.workbooks import read_boq_workbook

__all__ = ["read_boq_workbook", "load_drawing_document"]
