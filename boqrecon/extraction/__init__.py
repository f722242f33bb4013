"""BOQ worksheet extraction and description parsing."""

from boqrecon.extraction.boq import BOQExtractor, validate_line_item

__all__ = ["BOQExtractor", "validate_line_item"]
