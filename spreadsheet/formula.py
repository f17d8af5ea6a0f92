"""Formulas bound to a sheet: evaluation, canonical text and referenced cells."""

import math
import re

from spreadsheet.common import FormulaError, FormulaErrorCategory, FormulaException
from spreadsheet.formula_ast import ParsingError, parse_formula_ast

_NUMBER_RE = re.compile(
    r"[ \t\n\r\f\v]*[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?"
)


def _text_to_number(text):
    """Read a referenced text cell as a number; empty text counts as zero."""
    if not text:
        return 0.0
    if not _NUMBER_RE.fullmatch(text):
        raise FormulaError(FormulaErrorCategory.VALUE)
    value = float(text)
    if not math.isfinite(value):
        raise FormulaError(FormulaErrorCategory.VALUE)
    return value


class Formula:
    """A parsed formula that can be evaluated against a sheet."""

    def __init__(self, ast):
        self._ast = ast

    def evaluate(self, sheet):
        """Return the numeric result, or the FormulaError the evaluation hit."""

        def lookup(pos):
            if not pos.is_valid():
                raise FormulaError(FormulaErrorCategory.REF)
            cell = sheet.get_cell(pos)
            if cell is None:
                return 0.0
            value = cell.value()
            if isinstance(value, FormulaError):
                raise FormulaError(value.category)
            if isinstance(value, str):
                return _text_to_number(value)
            return float(value)

        try:
            return self._ast.execute(lookup)
        except FormulaError as error:
            return error

    def expression(self):
        """The formula in canonical infix form, without the leading '='."""
        return self._ast.to_formula()

    def referenced_cells(self):
        """The distinct referenced positions in ascending order."""
        return sorted(set(self._ast.cells))


def parse_formula(expression):
    """Parse formula text (without '='); raise FormulaException if it is malformed."""
    try:
        ast = parse_formula_ast(expression)
    except (ParsingError, FormulaException) as error:
        raise FormulaException(f"Failed to parse formula: {error}") from error
    return Formula(ast)