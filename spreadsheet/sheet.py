"""A sparse sheet of cells addressed by position."""

from spreadsheet.cell import Cell
from spreadsheet.common import FormulaError, InvalidPositionError, Position, Size


def _validate(pos):
    if not pos.is_valid():
        raise InvalidPositionError("Invalid position")


def _render_value(value):
    if isinstance(value, FormulaError):
        return str(value)
    if isinstance(value, str):
        return value
    return format(value, ".6g")


class Sheet:
    """A collection of cells keyed by position."""

    def __init__(self):
        self._cells = {}

    def set_cell(self, pos, text):
        """Set the text of the cell at ``pos``, creating the cell if needed."""
        _validate(pos)
        cell = self._cells.get(pos)
        if cell is None:
            cell = Cell(self)
            self._cells[pos] = cell
        cell.set(text)

    def get_cell(self, pos):
        """The cell at ``pos``, or None if there is none."""
        _validate(pos)
        return self._cells.get(pos)

    def clear_cell(self, pos):
        """Empty the cell at ``pos``; drop it unless other cells refer to it."""
        _validate(pos)
        cell = self._cells.get(pos)
        if cell is None:
            return
        cell.clear()
        if not cell.is_referenced():
            del self._cells[pos]

    def printable_size(self):
        """The smallest area holding every cell with non-empty text."""
        rows = cols = 0
        for pos, cell in self._cells.items():
            if cell.text():
                rows = max(rows, pos.row + 1)
                cols = max(cols, pos.col + 1)
        return Size(rows, cols)

    def _lines(self, render):
        size = self.printable_size()
        for row in range(size.rows):
            cells = (self._cells.get(Position(row, col)) for col in range(size.cols))
            yield "\t".join("" if cell is None else render(cell) for cell in cells)

    def print_values(self, output):
        """Write the cell values, tab separated, one line per row."""
        for line in self._lines(lambda cell: _render_value(cell.value())):
            output.write(line + "\n")

    def print_texts(self, output):
        """Write the cell texts, tab separated, one line per row."""
        for line in self._lines(lambda cell: cell.text()):
            output.write(line + "\n")


def create_sheet():
    """A new empty sheet."""
    return Sheet()