"""Unit tests for the in-memory repositories."""

from __future__ import annotations

import pytest

from boqrecon.models import ConflictStatus, DrawingAnalysis
from boqrecon.reconciliation.conflicts import ConflictDetector
from boqrecon.storage.repository import (
    InMemoryBOQRepository,
    InMemoryConflictRepository,
    InMemoryDrawingRepository,
    UnknownRecordError,
)


class TestBOQRepository:
    def test_save_and_list(self, item_factory):
        repo = InMemoryBOQRepository()
        repo.save_items("boq-1", [item_factory(line_id="A"), item_factory(line_id="B")])

        assert [i.line_id for i in repo.list_items("boq-1")] == ["A", "B"]
        assert repo.get_item("boq-1", "B").line_id == "B"

    def test_unknown_template_and_line(self, item_factory):
        repo = InMemoryBOQRepository()
        repo.save_items("boq-1", [item_factory()])

        with pytest.raises(UnknownRecordError):
            repo.list_items("boq-2")
        with pytest.raises(UnknownRecordError):
            repo.get_item("boq-1", "missing")

    def test_latest_revision_wins(self, item_factory):
        repo = InMemoryBOQRepository()
        repo.save_items("boq-1", [item_factory()])

        repo.save_revision("boq-1", item_factory(supplier="New Co", revision=1))

        item = repo.get_item("boq-1", "ARC-FLR-1")
        assert item.supplier == "New Co"
        assert item.revision == 1

    def test_stale_revision_rejected(self, item_factory):
        repo = InMemoryBOQRepository()
        repo.save_items("boq-1", [item_factory(revision=2)])

        with pytest.raises(ValueError, match="Stale revision"):
            repo.save_revision("boq-1", item_factory(revision=2))


class TestDrawingRepository:
    def test_reanalysis_replaces_previous(self):
        repo = InMemoryDrawingRepository()
        repo.save_analysis("upload-1", DrawingAnalysis(drawing_reference="A-201"))
        repo.save_analysis("upload-1", DrawingAnalysis(drawing_reference="A-201", title="rev B"))
        repo.save_analysis("upload-2", DrawingAnalysis(drawing_reference="A-202"))

        analyses = repo.list_analyses()

        assert [a.drawing_reference for a in analyses] == ["A-201", "A-202"]
        assert analyses[0].title == "rev B"


class TestConflictRepository:
    def test_save_get_and_filter(self, flooring_item, item_factory, space_factory):
        other = item_factory(line_id="OTHER")
        conflicts = ConflictDetector().detect([flooring_item, other], [space_factory(150.5)])
        repo = InMemoryConflictRepository()
        for conflict in conflicts:
            repo.save("boq-1", conflict)

        assert repo.get("boq-1", "ARC-FLR-1@A-201#0").line_id == "ARC-FLR-1"
        assert repo.find("boq-1", "missing") is None
        assert [c.line_id for c in repo.list_for_template("boq-1")] == ["ARC-FLR-1", "OTHER"]
        assert repo.list_for_template("boq-2") == []

    def test_get_unknown(self):
        with pytest.raises(UnknownRecordError, match="Conflict not found"):
            InMemoryConflictRepository().get("boq-1", "nope")

    def test_save_overwrites_status(self, flooring_item, space_factory):
        conflict = ConflictDetector().detect([flooring_item], [space_factory(150.5)])[0]
        repo = InMemoryConflictRepository()
        repo.save("boq-1", conflict)

        repo.save("boq-1", conflict.model_copy(update={"status": ConflictStatus.RESOLVED}))

        assert repo.get("boq-1", conflict.conflict_id).status == ConflictStatus.RESOLVED

    def test_templates_do_not_share_records(self, flooring_item, space_factory):
        conflict = ConflictDetector().detect([flooring_item], [space_factory(150.5)])[0]
        repo = InMemoryConflictRepository()
        repo.save("project-a", conflict.model_copy(update={"status": ConflictStatus.RESOLVED}))
        repo.save("project-b", conflict)

        assert repo.get("project-a", conflict.conflict_id).status == ConflictStatus.RESOLVED
        assert repo.get("project-b", conflict.conflict_id).status == ConflictStatus.DETECTED
        assert repo.find("project-c", conflict.conflict_id) is None
