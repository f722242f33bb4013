"""Conflict detection, gap analysis and the resolution loop."""

from boqrecon.reconciliation.conflicts import ConflictDetector
from boqrecon.reconciliation.gaps import GapAnalyzer
from boqrecon.reconciliation.orchestrator import (
    ReconciliationOrchestrator,
    ReconciliationReport,
)

__all__ = [
    "ConflictDetector",
    "GapAnalyzer",
    "ReconciliationOrchestrator",
    "ReconciliationReport",
]
