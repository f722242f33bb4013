"""Reporting module for BOQRecon.

Summary statistics and tabular exports of reconciliation results.
"""

from boqrecon.reporting.builder import export_csv, export_excel
from boqrecon.reporting.summary import boq_summary, drawing_summary

__all__ = ["boq_summary", "drawing_summary", "export_csv", "export_excel"]
