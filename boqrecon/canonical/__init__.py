"""Unit, category and text normalization."""
