"""An in-memory spreadsheet with formula cells, references and cycle detection."""

__version__ = "0.1.0"

__all__ = ["common", "formula_ast", "formula", "cell", "sheet"]