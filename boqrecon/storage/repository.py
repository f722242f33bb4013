"""Storage interfaces for reconciliation records.

The reconciliation core only talks to these protocols. In-memory
implementations are provided for the CLI and tests; a database-backed
implementation only needs to satisfy the same methods.
"""

from __future__ import annotations

from typing import Protocol, Sequence

from boqrecon.models import BOQLineItem, Conflict, DrawingAnalysis


class UnknownRecordError(LookupError):
    """Requested template, line item, analysis or conflict does not exist."""


class BOQRepository(Protocol):
    def save_items(self, template_id: str, items: Sequence[BOQLineItem]) -> None: ...

    def list_items(self, template_id: str) -> list[BOQLineItem]: ...

    def get_item(self, template_id: str, line_id: str) -> BOQLineItem: ...

    def save_revision(self, template_id: str, item: BOQLineItem) -> None: ...


class DrawingRepository(Protocol):
    def save_analysis(self, analysis_id: str, analysis: DrawingAnalysis) -> None: ...

    def list_analyses(self) -> list[DrawingAnalysis]: ...


class ConflictRepository(Protocol):
    def get(self, template_id: str, conflict_id: str) -> Conflict: ...

    def find(self, template_id: str, conflict_id: str) -> Conflict | None: ...

    def save(self, template_id: str, conflict: Conflict) -> None: ...

    def list_for_template(self, template_id: str) -> list[Conflict]: ...


class InMemoryBOQRepository:
    """One template per upload; the latest revision of each line wins."""

    def __init__(self) -> None:
        self._templates: dict[str, dict[str, BOQLineItem]] = {}

    def save_items(self, template_id: str, items: Sequence[BOQLineItem]) -> None:
        self._templates[template_id] = {item.line_id: item for item in items}

    def list_items(self, template_id: str) -> list[BOQLineItem]:
        try:
            return list(self._templates[template_id].values())
        except KeyError:
            raise UnknownRecordError(f"BOQ template not found: {template_id}") from None

    def get_item(self, template_id: str, line_id: str) -> BOQLineItem:
        items = self._templates.get(template_id)
        if items is None or line_id not in items:
            raise UnknownRecordError(f"Line item not found: {template_id}/{line_id}")
        return items[line_id]

    def save_revision(self, template_id: str, item: BOQLineItem) -> None:
        current = self.get_item(template_id, item.line_id)
        if item.revision <= current.revision:
            raise ValueError(
                f"Stale revision {item.revision} for {item.line_id} (current {current.revision})"
            )
        self._templates[template_id][item.line_id] = item


class InMemoryDrawingRepository:
    def __init__(self) -> None:
        self._analyses: dict[str, DrawingAnalysis] = {}

    def save_analysis(self, analysis_id: str, analysis: DrawingAnalysis) -> None:
        # Re-analysis replaces the previous set wholesale
        self._analyses[analysis_id] = analysis

    def list_analyses(self) -> list[DrawingAnalysis]:
        return list(self._analyses.values())


class InMemoryConflictRepository:
    """Conflict records kept per template; line ids repeat across uploads."""

    def __init__(self) -> None:
        self._conflicts: dict[str, dict[str, Conflict]] = {}

    def get(self, template_id: str, conflict_id: str) -> Conflict:
        conflict = self.find(template_id, conflict_id)
        if conflict is None:
            raise UnknownRecordError(f"Conflict not found: {template_id}/{conflict_id}")
        return conflict

    def find(self, template_id: str, conflict_id: str) -> Conflict | None:
        return self._conflicts.get(template_id, {}).get(conflict_id)

    def save(self, template_id: str, conflict: Conflict) -> None:
        self._conflicts.setdefault(template_id, {})[conflict.conflict_id] = conflict

    def list_for_template(self, template_id: str) -> list[Conflict]:
        return list(self._conflicts.get(template_id, {}).values())
