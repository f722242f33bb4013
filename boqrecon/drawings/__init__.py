"""Drawing geometry and space measurement."""

from boqrecon.drawings.extractor import DrawingMeasurementExtractor

__all__ = ["DrawingMeasurementExtractor"]
