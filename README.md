# spreadsheet

An in-memory spreadsheet library with text cells, formula cells and a
printable grid.

Cells are addressed by `Position` (in `spreadsheet.common`), a zero-based
row and column. `Position.from_string` reads the usual letters-then-digits
form (`A1`, `B7`, `AA12`), and `str(position)` writes it back. A sheet has at
most 16384 rows and 16384 columns (`Position.MAX_ROWS`, `Position.MAX_COLS`).
Malformed text gives `Position.NONE`, which is not valid.

## Installing

```
pip install .
```

## Using it

```python
import io

from spreadsheet.common import Position
from spreadsheet.sheet import create_sheet

sheet = create_sheet()
sheet.set_cell(Position.from_string("A1"), "2")
sheet.set_cell(Position.from_string("A2"), "=A1*3+1")
sheet.set_cell(Position.from_string("B1"), "'=not a formula")

print(sheet.get_cell(Position.from_string("A2")).value())  # 7.0
print(sheet.get_cell(Position.from_string("A2")).text())   # =A1*3+1

out = io.StringIO()
sheet.print_values(out)
print(out.getvalue())
```

### Cell contents

`Sheet.set_cell(pos, text)` creates the cell if needed and sets its text.

- An empty string makes the cell empty.
- Text that starts with `=` is a formula. Formulas support numbers, cell
  references written in upper-case letters, `+ - * /`, unary `+`/`-` and
  parentheses. A formula's text is kept in a normal form with only the
  parentheses it needs, so `=((A1))+(2)` reads back as `=A1+2`.
- Text that starts with `'` is escaped. Its value has the apostrophe removed,
  but its text keeps it.
- Any other text is stored as it is.

A `Cell` (from `Sheet.get_cell`, which returns `None` where there is no cell)
offers `value()`, `text()`, `referenced_cells()` (sorted, distinct positions)
and `is_referenced()`. Setting a formula that refers to a position with no
cell creates an empty cell there.

### Formula values

A formula evaluates to a float or to a `FormulaError`, whose `category` is a
`FormulaErrorCategory`:

- `#VALUE!` when a referenced cell holds text that is not a number,
- `#ARITHM!` when the result is not finite, such as division by zero,
- `#REF!` for a reference to a position outside the sheet. Formulas that name
  such a position are already rejected when they are parsed, so this category
  does not come out of formulas set through a sheet.

An error in a referenced cell becomes the value of the formula that uses it.
Empty cells count as `0`. Values are cached and recalculated after a cell
they depend on changes.

### Errors

- `InvalidPositionError` (an `IndexError`) is raised for positions outside the
  sheet.
- `FormulaException` is raised when a formula cannot be parsed or refers to a
  position outside the sheet.
- `CircularDependencyError` is raised when a formula would make a cell depend
  on itself; the cell keeps its previous contents.

### Clearing and printing

`Sheet.clear_cell(pos)` empties a cell and removes it unless another cell's
formula refers to it.

`Sheet.printable_size()` returns the `Size` of the smallest rectangle from `A1`
that holds every cell with non-empty text. `Sheet.print_values(output)` and
`Sheet.print_texts(output)` write that rectangle to a text stream, with cells
separated by tabs and rows ended by newlines. Numbers are printed with up to
six significant digits.

### Lower level

`spreadsheet.formula.parse_formula(expression)` parses formula text without
the leading `=` into a `Formula` with `evaluate(sheet)`, `expression()` and
`referenced_cells()`. `spreadsheet.formula_ast.parse_formula_ast(text)` gives
the syntax tree, a `FormulaAST` with `execute(args)`, `to_formula()`,
`to_tree_string()` (prefix form such as `(+ 1 2)`) and `cells_string()`; it
raises `ParsingError` for malformed text.

## What it does not do

This is a library only. There is no command-line program, no interactive
screen, and no loading or saving of sheets to files.

## Running the tests

```
pip install .[test]
pytest
```