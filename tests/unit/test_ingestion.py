"""Unit tests for BOQ workbook and drawing file ingestion."""

from __future__ import annotations

import json

import pytest
from openpyxl import Workbook

from boqrecon.ingestion import workbooks
from boqrecon.ingestion.drawings import load_drawing_document
from boqrecon.ingestion.workbooks import read_boq_workbook
from boqrecon.models import PolygonEntity, TextEntity

CSV_TEXT = (
    "SL NO,Item Description,Qty,Unit,Unit Price,Amount,Remarks\n"
    "1,Marble flooring. Ref A-201,155,sqm,850,131750,\n"
    "2,Skirting,80,rm,45,3600,Provisional\n"
)


class TestReadBOQWorkbook:
    """CSV/XLSX → raw rows."""

    def test_csv_single_sheet_named_after_file(self, tmp_path):
        path = tmp_path / "Floor & Floor Finishes.csv"
        path.write_text(CSV_TEXT, encoding="utf-8")

        sheets = read_boq_workbook(path)

        assert list(sheets) == ["Floor & Floor Finishes"]
        rows = sheets["Floor & Floor Finishes"]
        assert len(rows) == 3
        assert rows[1][:4] == ["1", "Marble flooring. Ref A-201", "155", "sqm"]
        assert rows[1][6] is None
        assert rows[2][6] == "Provisional"

    def test_xlsx_keeps_sheet_order(self, tmp_path):
        wb = Workbook()
        doors = wb.active
        doors.title = "Doors"
        doors.append(["SL NO", "Item Description", "Qty", "Unit", "Unit Price", "Amount"])
        doors.append([1, "Door 2100x2400 mm. Ref A-301", 4, "nos", 900, 3600])
        floors = wb.create_sheet("Floor & Floor Finishes")
        floors.append([1, "Marble flooring. Ref A-201", 155, "sqm", 850, None, "Lobby"])
        path = tmp_path / "boq.xlsx"
        wb.save(path)

        sheets = read_boq_workbook(path)

        assert list(sheets) == ["Doors", "Floor & Floor Finishes"]
        assert sheets["Doors"][1][2] == 4
        assert sheets["Floor & Floor Finishes"][0][5] is None

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_boq_workbook(tmp_path / "missing.csv")

    def test_unsupported_format(self, tmp_path):
        path = tmp_path / "boq.pdf"
        path.write_bytes(b"%PDF-1.4")

        with pytest.raises(ValueError, match="Unsupported file format"):
            read_boq_workbook(path)

    def test_row_limit(self, tmp_path, monkeypatch):
        monkeypatch.setattr(workbooks, "MAX_ROWS", 2)
        path = tmp_path / "boq.csv"
        path.write_text(CSV_TEXT, encoding="utf-8")

        with pytest.raises(ValueError, match="Too many rows"):
            read_boq_workbook(path)

    def test_size_limit(self, tmp_path, monkeypatch):
        monkeypatch.setattr(workbooks, "MAX_FILE_SIZE_MB", 0)
        path = tmp_path / "boq.csv"
        path.write_text(CSV_TEXT, encoding="utf-8")

        with pytest.raises(ValueError, match="File too large"):
            read_boq_workbook(path)


class TestLoadDrawingDocument:
    """JSON entity lists → DrawingDocument."""

    def test_load(self, tmp_path):
        path = tmp_path / "A-201.json"
        path.write_text(
            json.dumps(
                {
                    "drawing_reference": "A-201",
                    "unit": "mm",
                    "entities": [
                        {"type": "polygon", "vertices": [[0, 0], [1000, 0], [1000, 1000]]},
                        {"type": "text", "text": "Lobby", "position": [300, 300]},
                    ],
                }
            ),
            encoding="utf-8",
        )

        document = load_drawing_document(path)

        assert document.drawing_reference == "A-201"
        assert isinstance(document.entities[0], PolygonEntity)
        assert isinstance(document.entities[1], TextEntity)
        assert document.entities[0].vertices[1] == (1000.0, 0.0)

    def test_invalid_entity_type(self, tmp_path):
        path = tmp_path / "A-201.json"
        path.write_text(
            json.dumps({"drawing_reference": "A-201", "entities": [{"type": "hatch"}]}),
            encoding="utf-8",
        )

        with pytest.raises(ValueError, match="Invalid drawing document"):
            load_drawing_document(path)

    def test_malformed_json(self, tmp_path):
        path = tmp_path / "A-201.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(ValueError):
            load_drawing_document(path)

    def test_wrong_suffix(self, tmp_path):
        path = tmp_path / "A-201.dxf"
        path.write_text("0\nSECTION\n", encoding="utf-8")

        with pytest.raises(ValueError, match="Unsupported file format"):
            load_drawing_document(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_drawing_document(tmp_path / "missing.json")
