"""End-to-end reconciliation orchestrator for BOQRecon.

Coordinates BOQ extraction → drawing measurement → conflict detection → gap
analysis, and feeds user resolutions and gap answers back into the next pass.
Storage is reached only through the injected repositories.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Sequence

from boqrecon.config import AppConfig, get_config
from boqrecon.drawings.extractor import DrawingMeasurementExtractor
from boqrecon.extraction.boq import BOQExtractor
from boqrecon.models import (
    BOQExtractionResult,
    BOQLineItem,
    Conflict,
    DrawingAnalysis,
    DrawingDocument,
    Gap,
    ResolutionAction,
    RowError,
)
from boqrecon.reconciliation.conflicts import ConflictDetector
from boqrecon.reconciliation.gaps import GapAnalyzer, GapSummary, prioritize, summarize
from boqrecon.reconciliation.resolution import apply_completion, resolve_conflict
from boqrecon.reporting.summary import boq_summary
from boqrecon.storage.repository import (
    BOQRepository,
    ConflictRepository,
    DrawingRepository,
)

logger = logging.getLogger(__name__)


@dataclass
class ReconciliationReport:
    """Artifacts handed back to the UI after one reconciliation pass."""

    template_id: str
    conflicts: list[Conflict] = field(default_factory=list)
    gaps: list[Gap] = field(default_factory=list)
    errors: list[RowError] = field(default_factory=list)
    gap_summary: GapSummary | None = None
    boq_summary: dict[str, Any] = field(default_factory=dict)

    @property
    def open_conflicts(self) -> list[Conflict]:
        return [c for c in self.conflicts if c.is_open]

    @property
    def completion_prompts(self) -> list[Gap]:
        return prioritize(self.gaps)


class ReconciliationOrchestrator:
    """Runs the extract → detect → analyze loop over injected repositories."""

    def __init__(
        self,
        boq_repo: BOQRepository,
        drawing_repo: DrawingRepository,
        conflict_repo: ConflictRepository,
        config: AppConfig | None = None,
    ):
        self.boq_repo = boq_repo
        self.drawing_repo = drawing_repo
        self.conflict_repo = conflict_repo
        self.config = config or get_config()

        self.boq_extractor = BOQExtractor(
            amount_tolerance=self.config.reconciliation.amount_tolerance
        )
        self.drawing_extractor = DrawingMeasurementExtractor(self.config.drawing)
        self.detector = ConflictDetector(
            tolerance=self.config.reconciliation.tolerance,
            high_severity_percent=self.config.reconciliation.high_severity_percent,
        )
        self.gap_analyzer = GapAnalyzer()
        self._errors: dict[str, list[RowError]] = {}

    def import_boq(
        self, template_id: str, sheets: Mapping[str, Iterable[Sequence[Any]]]
    ) -> BOQExtractionResult:
        """Extract a BOQ upload and store its line items."""
        result = self.boq_extractor.extract_workbook(sheets)
        self.boq_repo.save_items(template_id, result.items)
        self._errors[template_id] = list(result.errors)
        logger.info(
            "BOQ %s imported: %d items, %d row errors",
            template_id,
            len(result.items),
            len(result.errors),
        )
        return result

    def import_drawing(self, analysis_id: str, document: DrawingDocument) -> DrawingAnalysis:
        """Measure a drawing upload and store the analysis."""
        analysis = self.drawing_extractor.extract(document, analysis_id=analysis_id)
        self.drawing_repo.save_analysis(analysis_id, analysis)
        return analysis

    def reconcile(self, template_id: str) -> ReconciliationReport:
        """Run conflict detection and gap analysis for a stored BOQ.

        Newly detected conflicts are stored. Conflicts already on record keep
        their status and resolution but take the freshly measured areas; they
        are never closed automatically. A stored conflict that is no longer
        detected stays on record and is left out of the report.
        """
        items = self.boq_repo.list_items(template_id)
        spaces = [
            space for analysis in self.drawing_repo.list_analyses() for space in analysis.spaces
        ]

        conflicts: list[Conflict] = []
        for conflict in self.detector.detect(items, spaces):
            existing = self.conflict_repo.find(template_id, conflict.conflict_id)
            if existing is not None:
                conflict = conflict.model_copy(
                    update={
                        "status": existing.status,
                        "resolution": existing.resolution,
                        "resolution_note": existing.resolution_note,
                    }
                )
            if conflict != existing:
                self.conflict_repo.save(template_id, conflict)
            conflicts.append(conflict)

        gaps = self.gap_analyzer.analyze(items)
        report = ReconciliationReport(
            template_id=template_id,
            conflicts=conflicts,
            gaps=gaps,
            errors=list(self._errors.get(template_id, [])),
            gap_summary=summarize(items, gaps),
            boq_summary=boq_summary(items),
        )
        logger.info(
            "Reconciled %s: %d conflicts (%d open), %d gaps",
            template_id,
            len(report.conflicts),
            len(report.open_conflicts),
            len(report.gaps),
        )
        return report

    def resolve(
        self,
        template_id: str,
        conflict_id: str,
        action: ResolutionAction | str,
        note: str | None = None,
    ) -> tuple[Conflict, BOQLineItem | None]:
        """Apply a user resolution and persist the outcome."""
        conflict = self.conflict_repo.get(template_id, conflict_id)
        item = self.boq_repo.get_item(template_id, conflict.line_id)
        updated, revised = resolve_conflict(conflict, action, item=item, note=note)
        self.conflict_repo.save(template_id, updated)
        if revised is not None:
            self.boq_repo.save_revision(template_id, revised)
        return updated, revised

    def complete(
        self, template_id: str, line_id: str, updates: Mapping[str, Any]
    ) -> BOQLineItem:
        """Apply gap-completion answers to a stored line item."""
        item = self.boq_repo.get_item(template_id, line_id)
        revised = apply_completion(item, updates)
        self.boq_repo.save_revision(template_id, revised)
        return revised

    def all_conflicts(self, template_id: str) -> list[Conflict]:
        """Every stored conflict for the template, including closed ones."""
        self.boq_repo.list_items(template_id)  # raises UnknownRecordError
        return self.conflict_repo.list_for_template(template_id)
